from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

from .clock import Clock

T = TypeVar("T")


class Notice(Generic[T]):
    """Owned, auto-expiring display slot.

    Scheduling a new payload replaces the pending one (last scheduled wins).
    Expiry is evaluated lazily against the injected clock.
    """

    def __init__(self, *, clock: Clock, duration_s: float) -> None:
        if duration_s <= 0.0:
            raise ValueError("duration_s must be > 0")
        self._clock = clock
        self._duration_s = float(duration_s)
        self._payload: T | None = None
        self._expires_at_s = 0.0

    @property
    def duration_s(self) -> float:
        return self._duration_s

    @property
    def pending(self) -> bool:
        return self.current() is not None

    @property
    def expires_at_s(self) -> float | None:
        return None if self._payload is None else self._expires_at_s

    def schedule(self, payload: T, duration_s: float | None = None) -> None:
        dur = self._duration_s if duration_s is None else float(duration_s)
        self._payload = payload
        self._expires_at_s = self._clock.now() + dur

    def cancel(self) -> None:
        self._payload = None

    def current(self) -> T | None:
        if self._payload is None:
            return None
        if self._clock.now() >= self._expires_at_s:
            self._payload = None
            return None
        return self._payload


class StatusBadge(StrEnum):
    ENDANGERED = "endangered"
    THREATENED = "threatened"
    OK = "ok"


@dataclass(frozen=True, slots=True)
class SpeciesInfo:
    title: str
    status: str
    blurb: str
    link: str = ""

    @property
    def badge(self) -> StatusBadge:
        return status_badge(self.status)


def status_badge(status: str) -> StatusBadge:
    s = (status or "").lower()
    if "endangered" in s:
        return StatusBadge.ENDANGERED
    if "threat" in s:
        return StatusBadge.THREATENED
    return StatusBadge.OK
