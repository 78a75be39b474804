from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from .biomes import OCEAN, TEMPERATE, SceneContent
from .challenge import ChallengeOutcome, ChallengeSession, ChallengeSnapshot
from .clock import Clock
from .core import SeededRng
from .minigame import MiniGameSnapshot, MiniGameTracker
from .notices import Notice, SpeciesInfo
from .steering import AgentSnapshot, WanderEngine

logger = logging.getLogger(__name__)

INFO_CARD_DURATION_S = 6.0


class SceneMode(StrEnum):
    EXPLORE = "explore"
    MINIGAME = "minigame"
    CHALLENGE = "challenge"


@dataclass(frozen=True, slots=True)
class SceneSnapshot:
    """View model for the renderer (pure data)."""

    title: str
    mode: SceneMode
    elapsed_s: float
    agents: tuple[AgentSnapshot, ...]
    minigame: MiniGameSnapshot
    challenge: ChallengeSnapshot
    info: SpeciesInfo | None
    overlay_alpha: float
    particle_count: int
    outcome_title: str | None
    outcome_text: str | None
    muted: bool


class ImmersiveScene:
    """One biome scene: wandering animals plus the mini-game and challenge sessions.

    - Deterministic: spawn choices come from an RNG seeded at construction.
    - Time is entirely via injected Clock; update() is called once per frame.
    - Mounts in explore mode with every target hidden.
    """

    _MAX_UPDATE_DT_S = 0.50

    def __init__(self, *, content: SceneContent, clock: Clock, seed: int) -> None:
        self._content = content
        self._clock = clock
        self._seed = int(seed)
        self._rng = SeededRng(self._seed)

        self._engine = WanderEngine(
            bounds=content.bounds,
            species=content.species,
            rng=self._rng,
            on_found=self._on_found,
        )
        self._minigame = MiniGameTracker(targets=content.targets, clock=clock, quiz_bank=content.quiz_bank)
        self._challenge = ChallengeSession(steps=content.challenge, clock=clock)
        self._info: Notice[SpeciesInfo] = Notice(clock=clock, duration_s=INFO_CARD_DURATION_S)

        self._last_update_at_s = self._clock.now()
        self._elapsed_s = 0.0
        self._muted = False

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def content(self) -> SceneContent:
        return self._content

    @property
    def engine(self) -> WanderEngine:
        return self._engine

    @property
    def minigame(self) -> MiniGameTracker:
        return self._minigame

    @property
    def challenge(self) -> ChallengeSession:
        return self._challenge

    @property
    def elapsed_s(self) -> float:
        return self._elapsed_s

    @property
    def muted(self) -> bool:
        return self._muted

    @property
    def mode(self) -> SceneMode:
        if self._challenge.active:
            return SceneMode.CHALLENGE
        if self._minigame.active:
            return SceneMode.MINIGAME
        return SceneMode.EXPLORE

    def update(self) -> None:
        now = self._clock.now()
        dt = now - self._last_update_at_s
        self._last_update_at_s = now
        if dt <= 0.0:
            return

        # A stalled frame advances the scene by at most _MAX_UPDATE_DT_S.
        dt = min(float(dt), self._MAX_UPDATE_DT_S)
        self._elapsed_s += dt
        self._engine.tick(self._elapsed_s, dt)

    def click(self, species_id: str) -> bool:
        """Pointer selection of a rendered animal. False when nothing selectable."""

        return self._engine.select(species_id)

    def click_at(self, x: float, z: float, *, radius: float = 4.0) -> str | None:
        species_id = self._engine.pick(x, z, radius=radius)
        if species_id is None:
            return None
        self._engine.select(species_id)
        return species_id

    def start_minigame(self) -> None:
        if self._challenge.active:
            self._challenge.exit()
        self._minigame.start()
        logger.info("%s: mini-game started", self._content.title)

    def reset_minigame(self) -> None:
        self._minigame.reset()

    def stop_minigame(self) -> None:
        self._minigame.stop()

    def start_challenge(self) -> None:
        self._minigame.stop()
        self._challenge.start()
        logger.info("%s: challenge started", self._content.title)

    def reset_challenge(self) -> None:
        self._challenge.reset()

    def exit_challenge(self) -> None:
        self._challenge.exit()

    def choose(self, option_index: int) -> bool:
        return self._challenge.choose(option_index)

    def answer_quiz(self, option: str) -> bool:
        return self._minigame.answer_quiz(option)

    def answer_quiz_index(self, index: int) -> bool:
        return self._minigame.answer_quiz_index(index)

    def dismiss_quiz(self) -> None:
        self._minigame.dismiss_quiz()

    def toggle_mute(self) -> bool:
        self._muted = not self._muted
        return self._muted

    def info_card(self) -> SpeciesInfo | None:
        return self._info.current()

    def close_info(self) -> None:
        self._info.cancel()

    def snapshot(self) -> SceneSnapshot:
        outcome = self._challenge.outcome
        outcome_title: str | None = None
        outcome_text: str | None = None
        if outcome is ChallengeOutcome.WIN:
            outcome_title, outcome_text = self._content.win_title, self._content.win_text
        elif outcome is ChallengeOutcome.FAIL:
            outcome_title, outcome_text = self._content.fail_title, self._content.fail_text

        return SceneSnapshot(
            title=self._content.title,
            mode=self.mode,
            elapsed_s=self._elapsed_s,
            agents=self._engine.snapshots(),
            minigame=self._minigame.snapshot(),
            challenge=self._challenge.snapshot(),
            info=self._info.current(),
            overlay_alpha=self._challenge.overlay_alpha(self._content.overlay),
            particle_count=self._challenge.particle_count() if self._challenge.active else 0,
            outcome_title=outcome_title,
            outcome_text=outcome_text,
            muted=self._muted,
        )

    def _on_found(self, species_id: str) -> None:
        info = self._content.info.get(species_id)
        if info is not None:
            self._info.schedule(info)
        self._minigame.report(species_id)


def build_ocean_scene(*, clock: Clock, seed: int) -> ImmersiveScene:
    return ImmersiveScene(content=OCEAN, clock=clock, seed=seed)


def build_temperate_scene(*, clock: Clock, seed: int) -> ImmersiveScene:
    return ImmersiveScene(content=TEMPERATE, clock=clock, seed=seed)
