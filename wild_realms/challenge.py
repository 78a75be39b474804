from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from .clock import Clock
from .core import clamp
from .notices import Notice

logger = logging.getLogger(__name__)

POLLUTION_BASE = 0
POLLUTION_WIN = -2  # at/under -> win
POLLUTION_FAIL = 3  # at/above -> red on the meter
FLASH_DURATION_S = 0.9


@dataclass(frozen=True, slots=True)
class ChallengeOption:
    label: str
    impact: int
    explain: str = ""


@dataclass(frozen=True, slots=True)
class ChallengeStep:
    id: str
    title: str
    prompt: str
    options: tuple[ChallengeOption, ChallengeOption]

    def __post_init__(self) -> None:
        if len(self.options) != 2:
            raise ValueError("each challenge step offers exactly two options")


class ChallengeOutcome(StrEnum):
    NONE = "none"
    WIN = "win"
    FAIL = "fail"


class OverlayStyle(StrEnum):
    TINT = "tint"
    HAZE = "haze"


class PollutionBand(StrEnum):
    CLEAN = "clean"
    WARNING = "warning"
    POLLUTED = "polluted"


@dataclass(frozen=True, slots=True)
class ImpactFlash:
    text: str
    impact: int
    good: bool
    explain: str = ""


@dataclass(frozen=True, slots=True)
class ChallengeSnapshot:
    active: bool
    step_index: int
    step_count: int
    step: ChallengeStep | None
    level: int
    band: PollutionBand
    outcome: ChallengeOutcome
    flash: ImpactFlash | None


def impact_flash(option: ChallengeOption) -> ImpactFlash:
    prefix = "Good action: " if option.impact <= 0 else "Harmful action: "
    sign = f"-{abs(option.impact)}" if option.impact < 0 else f"+{option.impact}"
    return ImpactFlash(
        text=f"{prefix}{option.label} ({sign})",
        impact=int(option.impact),
        good=option.impact < 0,
        explain=option.explain,
    )


class ChallengeSession:
    """Scripted decision steps accumulating a signed pollution level.

    The last choice settles the outcome: win iff level <= win_threshold,
    otherwise fail. fail_threshold only drives the meter colour.
    """

    def __init__(
        self,
        *,
        steps: tuple[ChallengeStep, ...],
        clock: Clock,
        baseline: int = POLLUTION_BASE,
        win_threshold: int = POLLUTION_WIN,
        fail_threshold: int = POLLUTION_FAIL,
        flash_duration_s: float = FLASH_DURATION_S,
    ) -> None:
        if not steps:
            raise ValueError("a challenge needs at least one step")
        if win_threshold >= fail_threshold:
            raise ValueError("win_threshold must be < fail_threshold")

        self._steps = tuple(steps)
        self._baseline = int(baseline)
        self._win = int(win_threshold)
        self._fail = int(fail_threshold)
        self._flash: Notice[ImpactFlash] = Notice(clock=clock, duration_s=flash_duration_s)

        self._active = False
        self._step = 0
        self._level = self._baseline
        self._outcome = ChallengeOutcome.NONE

    @property
    def active(self) -> bool:
        return self._active

    @property
    def step_index(self) -> int:
        return self._step

    @property
    def level(self) -> int:
        return self._level

    @property
    def outcome(self) -> ChallengeOutcome:
        return self._outcome

    @property
    def steps(self) -> tuple[ChallengeStep, ...]:
        return self._steps

    def current_step(self) -> ChallengeStep | None:
        if not self._active or self._outcome is not ChallengeOutcome.NONE:
            return None
        return self._steps[self._step]

    def start(self) -> None:
        self._active = True
        self._step = 0
        self._level = self._baseline
        self._outcome = ChallengeOutcome.NONE
        self._flash.cancel()

    def reset(self) -> None:
        self.start()

    def exit(self) -> None:
        self._active = False
        self._outcome = ChallengeOutcome.NONE
        self._flash.cancel()

    def choose(self, option_index: int) -> bool:
        """Apply one option of the current step. Rejected once the outcome is settled."""

        step = self.current_step()
        if step is None:
            return False
        if not (0 <= option_index < len(step.options)):
            return False

        option = step.options[option_index]
        self._flash.schedule(impact_flash(option))
        self._level += int(option.impact)

        if self._step + 1 >= len(self._steps):
            self._outcome = ChallengeOutcome.WIN if self._level <= self._win else ChallengeOutcome.FAIL
            logger.info("Challenge settled: %s at level %d", self._outcome.value, self._level)
        else:
            self._step += 1
        return True

    def flash(self) -> ImpactFlash | None:
        return self._flash.current()

    def band(self) -> PollutionBand:
        if self._level >= self._fail:
            return PollutionBand.POLLUTED
        if self._level <= self._win:
            return PollutionBand.CLEAN
        return PollutionBand.WARNING

    def tint_alpha(self) -> float:
        """Water murk overlay: clear at 0, saturating at 0.45."""

        if not self._active:
            return 0.0
        return clamp(self._level * 0.12, 0.0, 0.45)

    def haze_alpha(self) -> float:
        """Forest haze overlay, hidden at or below zero."""

        if not self._active or self._level <= 0:
            return 0.0
        return min(0.35, self._level * 0.1)

    def overlay_alpha(self, style: OverlayStyle) -> float:
        return self.haze_alpha() if style is OverlayStyle.HAZE else self.tint_alpha()

    def particle_count(self) -> int:
        return int(clamp(20 + self._level * 20, 10, 120))

    def snapshot(self) -> ChallengeSnapshot:
        return ChallengeSnapshot(
            active=self._active,
            step_index=self._step,
            step_count=len(self._steps),
            step=self.current_step(),
            level=self._level,
            band=self.band(),
            outcome=self._outcome,
            flash=self.flash(),
        )
