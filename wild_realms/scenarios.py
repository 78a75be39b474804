from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from .clock import Clock
from .core import clamp

logger = logging.getLogger(__name__)

BASELINE_PERCENT = 100
MIN_PERCENT = 0
MAX_PERCENT = 100


@dataclass(frozen=True, slots=True)
class Scenario:
    id: str
    name: str
    description: str
    effect: int


DEFAULT_SCENARIOS: tuple[Scenario, ...] = (
    Scenario("poaching", "Poaching", "Illegal hunting reduces population", -15),
    Scenario("habitat-loss", "Habitat Loss", "Deforestation and land conversion", -20),
    Scenario("climate-change", "Climate Change", "Altered weather patterns affect food sources", -10),
    Scenario("conservation", "Conservation Efforts", "Protected areas and anti-poaching patrols", +25),
    Scenario("breeding-program", "Breeding Program", "Captive breeding and reintroduction", +15),
    Scenario("disease", "Disease Outbreak", "Infectious disease spreads through population", -25),
)


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    scenario: str
    effect: int
    timestamp_s: float


class PopulationStatus(StrEnum):
    EXTINCT = "extinct"
    CRITICAL = "critical"
    ENDANGERED = "endangered"
    VULNERABLE = "vulnerable"
    STABLE = "stable"


class BarBand(StrEnum):
    GREEN = "green"
    YELLOW = "yellow"
    ORANGE = "orange"
    RED = "red"


_STATUS_MESSAGES = {
    PopulationStatus.EXTINCT: "Population extinct",
    PopulationStatus.CRITICAL: "Critical - Immediate intervention needed",
    PopulationStatus.ENDANGERED: "Endangered - Population declining",
    PopulationStatus.VULNERABLE: "Vulnerable - Monitor closely",
    PopulationStatus.STABLE: "Stable - Population thriving",
}


def population_status(percentage: float) -> PopulationStatus:
    pct = clamp(percentage, MIN_PERCENT, MAX_PERCENT)
    if pct == 0:
        return PopulationStatus.EXTINCT
    if pct < 20:
        return PopulationStatus.CRITICAL
    if pct < 40:
        return PopulationStatus.ENDANGERED
    if pct < 70:
        return PopulationStatus.VULNERABLE
    return PopulationStatus.STABLE


def status_message(percentage: float) -> str:
    return _STATUS_MESSAGES[population_status(percentage)]


def bar_band(percentage: float) -> BarBand:
    pct = clamp(percentage, MIN_PERCENT, MAX_PERCENT)
    if pct > 70:
        return BarBand.GREEN
    if pct > 40:
        return BarBand.YELLOW
    if pct > 20:
        return BarBand.ORANGE
    return BarBand.RED


def format_effect(effect: int) -> str:
    return f"+{effect}%" if effect > 0 else f"{effect}%"


@dataclass(frozen=True, slots=True)
class SimulationSnapshot:
    percentage: int
    status: PopulationStatus
    message: str
    band: BarBand
    can_apply: bool
    history: tuple[HistoryEntry, ...]


class PopulationSimulator:
    """Population health under a sequence of what-if scenarios.

    The percentage is clamped to [0, 100] after every step; history is newest first.
    """

    def __init__(self, *, clock: Clock, catalog: tuple[Scenario, ...] = DEFAULT_SCENARIOS) -> None:
        ids = [s.id for s in catalog]
        if len(set(ids)) != len(ids):
            raise ValueError("scenario ids must be unique")
        self._clock = clock
        self._catalog = tuple(catalog)
        self._by_id = {s.id: s for s in catalog}
        self._percentage = BASELINE_PERCENT
        self._history: list[HistoryEntry] = []

    @property
    def percentage(self) -> int:
        return self._percentage

    @property
    def catalog(self) -> tuple[Scenario, ...]:
        return self._catalog

    def history(self) -> tuple[HistoryEntry, ...]:
        return tuple(self._history)

    def can_apply(self) -> bool:
        # The page greys the buttons out at extinction; apply() still accepts.
        return self._percentage > MIN_PERCENT

    def apply(self, scenario: Scenario | str) -> int:
        sc = self._by_id[scenario] if isinstance(scenario, str) else scenario
        self._percentage = int(clamp(self._percentage + sc.effect, MIN_PERCENT, MAX_PERCENT))
        self._history.insert(0, HistoryEntry(scenario=sc.name, effect=int(sc.effect), timestamp_s=self._clock.now()))
        logger.info("Applied %s (%s): population now %d%%", sc.name, format_effect(sc.effect), self._percentage)
        return self._percentage

    def reset(self) -> None:
        self._percentage = BASELINE_PERCENT
        self._history.clear()

    def snapshot(self) -> SimulationSnapshot:
        return SimulationSnapshot(
            percentage=self._percentage,
            status=population_status(self._percentage),
            message=status_message(self._percentage),
            band=bar_band(self._percentage),
            can_apply=self.can_apply(),
            history=self.history(),
        )
