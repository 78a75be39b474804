from __future__ import annotations

from dataclasses import dataclass

import pytest

from wild_realms.notices import Notice, SpeciesInfo, StatusBadge, status_badge


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += float(dt)


def test_notice_expires_lazily_after_duration() -> None:
    clock = FakeClock()
    notice: Notice[str] = Notice(clock=clock, duration_s=6.0)
    assert notice.current() is None

    notice.schedule("turtle")
    assert notice.current() == "turtle"
    assert notice.expires_at_s == pytest.approx(6.0)

    clock.advance(5.99)
    assert notice.pending
    clock.advance(0.02)
    assert notice.current() is None
    assert notice.expires_at_s is None


def test_notice_last_scheduled_wins_and_restarts_timer() -> None:
    clock = FakeClock()
    notice: Notice[str] = Notice(clock=clock, duration_s=1.0)
    notice.schedule("first")
    clock.advance(0.8)
    notice.schedule("second")
    clock.advance(0.8)
    assert notice.current() == "second"
    clock.advance(0.3)
    assert notice.current() is None


def test_notice_cancel_and_duration_override() -> None:
    clock = FakeClock()
    notice: Notice[int] = Notice(clock=clock, duration_s=1.0)
    notice.schedule(7, duration_s=3.0)
    clock.advance(2.0)
    assert notice.current() == 7
    notice.cancel()
    assert notice.current() is None


def test_notice_rejects_non_positive_duration() -> None:
    with pytest.raises(ValueError):
        Notice(clock=FakeClock(), duration_s=0.0)


def test_status_badge_bands() -> None:
    assert status_badge("Endangered") is StatusBadge.ENDANGERED
    assert status_badge("Critically Endangered") is StatusBadge.ENDANGERED
    assert status_badge("Near Threatened") is StatusBadge.THREATENED
    assert status_badge("Least Concern") is StatusBadge.OK
    assert status_badge("Vulnerable") is StatusBadge.OK
    assert status_badge("") is StatusBadge.OK
    assert SpeciesInfo(title="x", status="Endangered", blurb="").badge is StatusBadge.ENDANGERED
