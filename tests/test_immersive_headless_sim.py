from __future__ import annotations

from dataclasses import dataclass

import pytest

from wild_realms.challenge import ChallengeOutcome
from wild_realms.immersive import ImmersiveScene, SceneMode, build_ocean_scene, build_temperate_scene
from wild_realms.minigame import TargetStatus
from wild_realms.steering import AgentPhase


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += float(dt)


def _step(clock: FakeClock, scene: ImmersiveScene, seconds: float, dt: float = 0.1) -> None:
    for _ in range(int(round(seconds / dt))):
        clock.advance(dt)
        scene.update()


def _selectable(scene: ImmersiveScene) -> list[str]:
    return [a.species_id for a in scene.snapshot().agents if a.visible and a.phase is AgentPhase.ACTIVE]


def test_scene_mounts_in_explore_mode_with_targets_hidden() -> None:
    scene = build_ocean_scene(clock=FakeClock(), seed=1)
    snap = scene.snapshot()
    assert snap.mode is SceneMode.EXPLORE
    assert snap.title == "Ocean Reef"
    assert all(t.status is TargetStatus.HIDDEN for t in snap.minigame.targets)
    assert snap.info is None
    assert snap.overlay_alpha == 0.0
    assert snap.particle_count == 0
    assert not snap.muted


def test_update_clamps_stalled_frames() -> None:
    clock = FakeClock()
    scene = build_ocean_scene(clock=clock, seed=1)
    clock.advance(5.0)
    scene.update()
    assert scene.elapsed_s == pytest.approx(0.5)
    scene.update()
    assert scene.elapsed_s == pytest.approx(0.5)


def test_click_in_explore_shows_info_but_counts_nothing() -> None:
    clock = FakeClock()
    scene = build_ocean_scene(clock=clock, seed=3)
    _step(clock, scene, 0.2)

    assert scene.click("turtle") is True
    snap = scene.snapshot()
    assert snap.info is not None
    assert snap.info.title.startswith("Green Sea Turtle")
    assert snap.minigame.found == 0

    clock.advance(6.0)
    assert scene.info_card() is None


def test_hidden_agents_cannot_be_selected() -> None:
    clock = FakeClock()
    scene = build_ocean_scene(clock=clock, seed=3)
    _step(clock, scene, 0.2)
    assert scene.click("manta") is False
    assert scene.info_card() is None


def test_click_at_selects_the_agent_under_the_pointer() -> None:
    clock = FakeClock()
    scene = build_temperate_scene(clock=clock, seed=8)
    _step(clock, scene, 0.2)
    deer = next(a for a in scene.snapshot().agents if a.species_id == "deer")
    assert scene.click_at(deer.x, deer.z) == "deer"
    assert scene.info_card() is not None
    assert scene.click_at(deer.x + 500.0, deer.z) is None


def test_minigame_runs_to_completion_with_quizzes() -> None:
    clock = FakeClock()
    scene = build_ocean_scene(clock=clock, seed=21)
    scene.start_minigame()
    assert scene.mode is SceneMode.MINIGAME

    for _ in range(3000):
        _step(clock, scene, 0.1)
        for species_id in _selectable(scene):
            if scene.click(species_id) and scene.minigame.quiz is not None:
                quiz = scene.minigame.quiz
                scene.answer_quiz(quiz.correct)
        if scene.minigame.complete:
            break

    snap = scene.snapshot().minigame
    assert snap.complete
    assert snap.found == snap.total == 4
    assert snap.score == 4
    assert snap.elapsed_s is not None and snap.elapsed_s >= 11.0

    finished = snap.finished_at_s
    _step(clock, scene, 2.0)
    for species_id in _selectable(scene):
        scene.click(species_id)
    assert scene.minigame.finished_at_s == finished
    assert scene.minigame.quiz is None


def test_rediscovery_during_minigame_does_not_reopen_quiz() -> None:
    clock = FakeClock()
    scene = build_ocean_scene(clock=clock, seed=4)
    _step(clock, scene, 0.2)
    scene.start_minigame()
    assert scene.click("turtle")
    assert scene.minigame.quiz is not None
    scene.dismiss_quiz()
    assert scene.click("turtle")
    assert scene.minigame.quiz is None
    assert scene.snapshot().minigame.found == 1


def test_starting_a_challenge_stops_the_minigame_and_vice_versa() -> None:
    clock = FakeClock()
    scene = build_temperate_scene(clock=clock, seed=2)
    scene.start_minigame()
    scene.start_challenge()
    assert scene.mode is SceneMode.CHALLENGE
    assert not scene.minigame.active

    scene.start_minigame()
    assert scene.mode is SceneMode.MINIGAME
    assert not scene.challenge.active


def test_ocean_challenge_win_sets_outcome_copy() -> None:
    clock = FakeClock()
    scene = build_ocean_scene(clock=clock, seed=2)
    scene.start_challenge()
    for _ in range(3):
        assert scene.choose(0)
    snap = scene.snapshot()
    assert snap.challenge.outcome is ChallengeOutcome.WIN
    assert snap.outcome_title == "Reef Stabilized"
    assert snap.overlay_alpha == 0.0
    assert snap.particle_count == 10
    assert scene.choose(0) is False


def test_forest_challenge_fail_hazes_the_scene() -> None:
    clock = FakeClock()
    scene = build_temperate_scene(clock=clock, seed=2)
    scene.start_challenge()
    for _ in range(3):
        scene.choose(1)
    snap = scene.snapshot()
    assert snap.challenge.outcome is ChallengeOutcome.FAIL
    assert snap.outcome_title == "Ecosystem Stressed"
    assert snap.overlay_alpha == pytest.approx(0.35)
    assert snap.particle_count == 100

    scene.reset_challenge()
    snap = scene.snapshot()
    assert snap.challenge.level == 0
    assert snap.outcome_title is None

    scene.exit_challenge()
    assert scene.mode is SceneMode.EXPLORE
    assert scene.snapshot().overlay_alpha == 0.0


def test_toggle_mute_and_close_info() -> None:
    clock = FakeClock()
    scene = build_ocean_scene(clock=clock, seed=3)
    assert scene.toggle_mute() is True
    assert scene.snapshot().muted
    assert scene.toggle_mute() is False

    _step(clock, scene, 0.2)
    scene.click("turtle")
    scene.close_info()
    assert scene.info_card() is None


def test_same_seed_scenes_replay_identically() -> None:
    c1, c2 = FakeClock(), FakeClock()
    s1 = build_temperate_scene(clock=c1, seed=55)
    s2 = build_temperate_scene(clock=c2, seed=55)
    for _ in range(200):
        c1.advance(1.0 / 30.0)
        c2.advance(1.0 / 30.0)
        s1.update()
        s2.update()
        assert s1.snapshot().agents == s2.snapshot().agents
