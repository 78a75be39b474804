from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class QuizItem:
    question: str
    options: tuple[str, ...]
    correct: str

    def __post_init__(self) -> None:
        if len(self.options) < 2:
            raise ValueError("a quiz needs at least two options")
        if self.correct not in self.options:
            raise ValueError("correct answer must be one of the options")


@dataclass(frozen=True, slots=True)
class OpenQuiz:
    species_id: str
    question: str
    options: tuple[str, ...]
    correct: str


QuizBank = Mapping[str, QuizItem]


class QuizGate:
    """One-question quiz per discovery, with a running score.

    At most one quiz is open; opening a new one discards the pending one.
    The committed score is never touched by opening or dismissing.
    """

    def __init__(self) -> None:
        self._current: OpenQuiz | None = None
        self._score = 0

    @property
    def score(self) -> int:
        return self._score

    @property
    def current(self) -> OpenQuiz | None:
        return self._current

    @property
    def is_open(self) -> bool:
        return self._current is not None

    def open(self, species_id: str, item: QuizItem) -> OpenQuiz:
        self._current = OpenQuiz(
            species_id=str(species_id),
            question=item.question,
            options=tuple(item.options),
            correct=item.correct,
        )
        return self._current

    def answer(self, option: str) -> bool:
        """Close the quiz, scoring 1 for the exact correct option.

        Returns True when the answer was correct. Options outside the list
        just count as wrong.
        """

        if self._current is None:
            return False
        is_correct = str(option) == self._current.correct
        if is_correct:
            self._score += 1
        self._current = None
        return is_correct

    def answer_index(self, index: int) -> bool:
        if self._current is None:
            return False
        if not (0 <= index < len(self._current.options)):
            return False
        return self.answer(self._current.options[index])

    def dismiss(self) -> None:
        self._current = None

    def reset_score(self) -> None:
        self._score = 0
