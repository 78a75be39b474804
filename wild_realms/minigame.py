from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import StrEnum

from .clock import Clock
from .quiz import OpenQuiz, QuizBank, QuizGate

logger = logging.getLogger(__name__)


class TargetStatus(StrEnum):
    HIDDEN = "hidden"
    FOUND = "found"


@dataclass(frozen=True, slots=True)
class Target:
    id: str
    label: str
    status: TargetStatus = TargetStatus.HIDDEN


@dataclass(frozen=True, slots=True)
class MiniGameSnapshot:
    """View model for the HUD and checklist (pure data)."""

    targets: tuple[Target, ...]
    found: int
    total: int
    active: bool
    complete: bool
    score: int
    elapsed_s: float | None
    started_at_s: float | None
    finished_at_s: float | None
    quiz: OpenQuiz | None


class MiniGameTracker:
    """Spot-and-learn session: find every target species once.

    - Status only ever moves hidden -> found within a session.
    - Completion time is stamped once, by the report that finds the last target.
    - Each fresh discovery opens that species' quiz, if the bank has one.
    """

    def __init__(
        self,
        *,
        targets: tuple[Target, ...],
        clock: Clock,
        quiz_bank: QuizBank | None = None,
    ) -> None:
        ids = [t.id for t in targets]
        if len(set(ids)) != len(ids):
            raise ValueError("target ids must be unique")

        self._clock = clock
        self._targets: list[Target] = [replace(t, status=TargetStatus.HIDDEN) for t in targets]
        self._quiz_bank: QuizBank = dict(quiz_bank or {})
        self._quiz = QuizGate()

        self._active = False
        self._started_at_s: float | None = None
        self._finished_at_s: float | None = None

    @property
    def active(self) -> bool:
        return self._active

    @property
    def complete(self) -> bool:
        return self._finished_at_s is not None

    @property
    def score(self) -> int:
        return self._quiz.score

    @property
    def quiz(self) -> OpenQuiz | None:
        return self._quiz.current

    @property
    def started_at_s(self) -> float | None:
        return self._started_at_s

    @property
    def finished_at_s(self) -> float | None:
        return self._finished_at_s

    def targets(self) -> tuple[Target, ...]:
        return tuple(self._targets)

    def found_count(self) -> int:
        return sum(1 for t in self._targets if t.status is TargetStatus.FOUND)

    def start(self) -> None:
        self._targets = [replace(t, status=TargetStatus.HIDDEN) for t in self._targets]
        self._started_at_s = self._clock.now()
        self._finished_at_s = None
        self._quiz.dismiss()
        self._quiz.reset_score()
        self._active = True

    def reset(self) -> None:
        self.start()

    def stop(self) -> None:
        self._active = False
        self._quiz.dismiss()

    def report(self, species_id: str) -> bool:
        """Log a discovery. Returns True only on a hidden -> found transition."""

        if not self._active:
            return False

        idx = self._index_of(species_id)
        if idx is None:
            return False
        if self._targets[idx].status is TargetStatus.FOUND:
            return False

        self._targets[idx] = replace(self._targets[idx], status=TargetStatus.FOUND)

        item = self._quiz_bank.get(species_id)
        if item is not None:
            self._quiz.open(species_id, item)

        if self._finished_at_s is None and all(t.status is TargetStatus.FOUND for t in self._targets):
            self._finished_at_s = self._clock.now()
            logger.info(
                "Mini-game complete: %d targets in %.1fs, score %d",
                len(self._targets),
                self.elapsed_s() or 0.0,
                self.score,
            )
        return True

    def answer_quiz(self, option: str) -> bool:
        return self._quiz.answer(option)

    def answer_quiz_index(self, index: int) -> bool:
        return self._quiz.answer_index(index)

    def dismiss_quiz(self) -> None:
        self._quiz.dismiss()

    def elapsed_s(self) -> float | None:
        if self._started_at_s is None:
            return None
        end = self._finished_at_s if self._finished_at_s is not None else self._clock.now()
        return max(0.0, end - self._started_at_s)

    def snapshot(self) -> MiniGameSnapshot:
        return MiniGameSnapshot(
            targets=self.targets(),
            found=self.found_count(),
            total=len(self._targets),
            active=self._active,
            complete=self.complete,
            score=self.score,
            elapsed_s=self.elapsed_s(),
            started_at_s=self._started_at_s,
            finished_at_s=self._finished_at_s,
            quiz=self._quiz.current,
        )

    def _index_of(self, species_id: str) -> int | None:
        for i, t in enumerate(self._targets):
            if t.id == species_id:
                return i
        return None
