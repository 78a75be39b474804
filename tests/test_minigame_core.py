from __future__ import annotations

from dataclasses import dataclass

import pytest

from wild_realms.minigame import MiniGameTracker, Target, TargetStatus
from wild_realms.quiz import QuizItem


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += float(dt)


TARGETS = (
    Target("turtle", "Green Turtle"),
    Target("shark", "Reef Shark"),
    Target("manta", "Manta Ray"),
)

BANK = {
    "turtle": QuizItem("Diet?", ("Herbivore", "Omnivore", "Carnivore"), "Herbivore"),
    "shark": QuizItem("Status?", ("Least Concern", "Near Threatened"), "Near Threatened"),
}


def _tracker(clock: FakeClock) -> MiniGameTracker:
    return MiniGameTracker(targets=TARGETS, clock=clock, quiz_bank=BANK)


def test_mounts_inactive_with_all_targets_hidden() -> None:
    tracker = _tracker(FakeClock())
    snap = tracker.snapshot()
    assert not snap.active
    assert snap.found == 0
    assert snap.total == 3
    assert snap.elapsed_s is None
    assert all(t.status is TargetStatus.HIDDEN for t in snap.targets)


def test_report_is_ignored_while_inactive() -> None:
    tracker = _tracker(FakeClock())
    assert tracker.report("turtle") is False
    assert tracker.found_count() == 0
    assert tracker.quiz is None


def test_found_is_monotonic_and_re_report_changes_nothing() -> None:
    clock = FakeClock(t=10.0)
    tracker = _tracker(clock)
    tracker.start()

    assert tracker.report("turtle") is True
    tracker.dismiss_quiz()
    assert tracker.report("turtle") is False
    assert tracker.found_count() == 1
    assert tracker.quiz is None  # no second quiz for the same species
    assert tracker.report("unknown") is False


def test_completion_stamped_once_on_last_find_and_time_freezes() -> None:
    clock = FakeClock(t=5.0)
    tracker = _tracker(clock)
    tracker.start()

    clock.advance(2.0)
    tracker.report("turtle")
    clock.advance(3.0)
    tracker.report("shark")
    assert not tracker.complete
    assert tracker.elapsed_s() == pytest.approx(5.0)

    clock.advance(4.0)
    tracker.report("manta")
    assert tracker.complete
    assert tracker.finished_at_s == pytest.approx(14.0)

    clock.advance(30.0)
    tracker.report("manta")
    assert tracker.finished_at_s == pytest.approx(14.0)
    assert tracker.elapsed_s() == pytest.approx(9.0)


def test_fresh_find_opens_quiz_and_correct_answer_scores() -> None:
    tracker = _tracker(FakeClock())
    tracker.start()

    tracker.report("turtle")
    quiz = tracker.quiz
    assert quiz is not None
    assert quiz.species_id == "turtle"
    assert quiz.question == "Diet?"

    assert tracker.answer_quiz("Herbivore") is True
    assert tracker.score == 1
    assert tracker.quiz is None

    tracker.report("shark")
    assert tracker.answer_quiz_index(0) is False
    assert tracker.score == 1

    # No bank entry: discovery still counts, no quiz opens.
    tracker.report("manta")
    assert tracker.quiz is None
    assert tracker.complete


def test_restart_clears_progress_score_and_completion() -> None:
    clock = FakeClock()
    tracker = _tracker(clock)
    tracker.start()
    for t in TARGETS:
        tracker.report(t.id)
        tracker.answer_quiz_index(0)
    assert tracker.complete

    clock.advance(1.0)
    tracker.reset()
    snap = tracker.snapshot()
    assert snap.active
    assert snap.found == 0
    assert snap.score == 0
    assert snap.finished_at_s is None
    assert snap.started_at_s == pytest.approx(1.0)
    assert snap.quiz is None


def test_stop_deactivates_and_dismisses_quiz() -> None:
    tracker = _tracker(FakeClock())
    tracker.start()
    tracker.report("turtle")
    tracker.stop()
    assert not tracker.active
    assert tracker.quiz is None
    assert tracker.report("shark") is False
    assert tracker.found_count() == 1


def test_duplicate_target_ids_rejected() -> None:
    with pytest.raises(ValueError):
        MiniGameTracker(targets=(Target("a", "A"), Target("a", "A again")), clock=FakeClock())
