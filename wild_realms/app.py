"""Pygame UI shell for Wild Realms.

Screens:
- Biomes (browse the seven biomes; two of them open an immersive scene)
- Population Scenarios (what-if impacts on one biome species' population)
- Ocean Reef / Temperate Forest immersive scenes, drawn top-down, with the
  spot-and-learn mini-game and the pollution challenge

Deterministic timing/RNG/state lives in wild_realms/* (core modules).
"""

from __future__ import annotations

import logging
import math
import random
from array import array
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import pygame

from .biomes import BIOMES, Biome
from .challenge import ChallengeOutcome, PollutionBand
from .clock import Clock, RealClock
from .config import AppConfig
from .immersive import ImmersiveScene, SceneMode, SceneSnapshot, build_ocean_scene, build_temperate_scene
from .minigame import TargetStatus
from .notices import SpeciesInfo, StatusBadge
from .scenarios import BarBand, PopulationSimulator, format_effect

logger = logging.getLogger(__name__)


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class MenuItem:
    label: str
    action: Callable[[], None]


class App:
    def __init__(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        self._surface = surface
        self._font = font
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def font(self) -> pygame.font.Font:
        return self._font

    @property
    def top(self) -> Screen | None:
        return self._screens[-1] if self._screens else None

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def pop(self) -> None:
        # Never pop the last/root screen; root handles its own quit/back behavior.
        if len(self._screens) > 1:
            closing = self._screens.pop()
            close = getattr(closing, "close", None)
            if callable(close):
                close()

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


def _fit_label(font: pygame.font.Font, label: str, max_width: int) -> str:
    if max_width <= 0:
        return ""
    if font.size(label)[0] <= max_width:
        return label
    clipped = label
    while clipped and font.size(f"{clipped}...")[0] > max_width:
        clipped = clipped[:-1]
    return f"{clipped}..." if clipped else "..."


def _draw_wrapped_text(
    surface: pygame.Surface,
    text: str,
    rect: pygame.Rect,
    *,
    color: tuple[int, int, int],
    font: pygame.font.Font,
    max_lines: int,
) -> int:
    """Word-wrap into rect; returns the y just below the last drawn line."""

    words = str(text).split()
    lines: list[str] = []
    cur = ""
    for word in words:
        trial = word if cur == "" else f"{cur} {word}"
        if font.size(trial)[0] <= rect.w:
            cur = trial
            continue
        if cur:
            lines.append(cur)
        cur = word
    if cur:
        lines.append(cur)

    y = rect.y
    line_h = font.get_linesize() + 2
    for line in lines[: max(0, max_lines)]:
        surface.blit(font.render(_fit_label(font, line, rect.w), True, color), (rect.x, y))
        y += line_h
    return y


def _format_mm_ss(seconds: float | None) -> str:
    if seconds is None:
        return "--:--"
    total = max(0, int(seconds))
    return f"{total // 60:02d}:{total % 60:02d}"


class MenuScreen:
    def __init__(self, app: App, title: str, items: list[MenuItem], *, is_root: bool = False) -> None:
        self._app = app
        self._title = title
        self._items = items
        self._selected = 0
        self._is_root = is_root
        self._title_font = pygame.font.Font(None, 42)
        self._item_font = pygame.font.Font(None, 32)
        self._hint_font = pygame.font.Font(None, 22)

    @property
    def selected(self) -> int:
        return self._selected

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            self._handle_key(event.key)
            return

        if event.type == pygame.JOYHATMOTION:
            # D-pad / hat navigation (works on many pads).
            _, y = event.value
            if y == 1:
                self._move(-1)
            elif y == -1:
                self._move(1)
            return

        if event.type == pygame.JOYBUTTONDOWN:
            # Common mapping: 0 = select, 1 = back/cancel.
            if event.button == 0:
                self._activate()
            elif event.button == 1:
                self._back()

    def _handle_key(self, key: int) -> None:
        if key in (pygame.K_UP, pygame.K_w):
            self._move(-1)
        elif key in (pygame.K_DOWN, pygame.K_s):
            self._move(1)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            self._activate()
        elif key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._back()

    def _move(self, delta: int) -> None:
        if not self._items:
            return
        self._selected = (self._selected + delta) % len(self._items)

    def _activate(self) -> None:
        if not self._items:
            return
        self._items[self._selected].action()

    def _back(self) -> None:
        if self._is_root:
            self._app.quit()
        else:
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        bg = (6, 40, 34)
        panel_bg = (12, 62, 52)
        header_bg = (20, 84, 66)
        border = (220, 244, 226)
        text_main = (238, 250, 240)
        text_muted = (176, 210, 190)
        active_bg = (240, 252, 242)
        active_text = (12, 52, 36)

        surface.fill(bg)

        frame_margin = max(10, min(26, w // 34))
        frame = pygame.Rect(
            frame_margin,
            frame_margin,
            max(260, w - frame_margin * 2),
            max(220, h - frame_margin * 2),
        )
        pygame.draw.rect(surface, panel_bg, frame)
        pygame.draw.rect(surface, border, frame, 2)

        header_h = max(34, min(52, h // 8))
        header = pygame.Rect(frame.x + 2, frame.y + 2, frame.w - 4, header_h)
        pygame.draw.rect(surface, header_bg, header)
        pygame.draw.line(surface, border, (header.x, header.bottom), (header.right, header.bottom), 1)

        tag = self._hint_font.render("WILD REALMS", True, text_muted)
        surface.blit(tag, (header.x + 12, header.y + (header.h - tag.get_height()) // 2))

        title = self._title_font.render(self._title, True, text_main)
        surface.blit(title, title.get_rect(center=(frame.centerx, header.centery)))

        content_top = header.bottom + max(16, h // 30)
        content_bottom = frame.bottom - max(44, h // 12)
        list_rect = pygame.Rect(
            frame.x + max(14, w // 44),
            content_top,
            frame.w - max(28, w // 22),
            max(120, content_bottom - content_top),
        )
        pygame.draw.rect(surface, (8, 50, 42), list_rect)
        pygame.draw.rect(surface, (70, 130, 104), list_rect, 1)

        item_count = max(1, len(self._items))
        gap = max(4, min(10, list_rect.h // max(10, item_count * 3)))
        row_h = max(26, min(44, (list_rect.h - gap * (item_count + 1)) // item_count))
        total_h = row_h * item_count + gap * (item_count - 1)
        y = list_rect.y + max(8, (list_rect.h - total_h) // 2)

        for idx, item in enumerate(self._items):
            row = pygame.Rect(list_rect.x + 12, y, list_rect.w - 24, row_h)
            selected = idx == self._selected
            if selected:
                pygame.draw.rect(surface, active_bg, row)
                pygame.draw.rect(surface, (120, 180, 146), row, 2)
            else:
                pygame.draw.rect(surface, (14, 70, 56), row)
                pygame.draw.rect(surface, (56, 116, 92), row, 1)

            color = active_text if selected else text_main
            label = _fit_label(self._item_font, item.label, row.w - 20)
            text = self._item_font.render(label, True, color)
            surface.blit(text, (row.x + 10, row.y + (row.h - text.get_height()) // 2))
            y += row_h + gap

        footer = "Enter/Space: Select  |  Esc/Backspace: Back  |  D-pad + Button0/1"
        foot = self._hint_font.render(footer, True, text_muted)
        surface.blit(foot, foot.get_rect(midbottom=(frame.centerx, frame.bottom - 10)))


class BiomeScreen:
    """Biome detail card with its species list.

    Up/Down picks a species, P opens its population scenarios, Enter opens the
    immersive scene when the biome has one.
    """

    def __init__(
        self,
        app: App,
        biome: Biome,
        *,
        open_scene: Callable[[str], None],
        open_scenarios: Callable[[SpeciesInfo], None],
    ) -> None:
        self._app = app
        self._biome = biome
        self._open_scene = open_scene
        self._open_scenarios = open_scenarios
        self._selected = 0
        self._title_font = pygame.font.Font(None, 46)
        self._body_font = pygame.font.Font(None, 28)
        self._hint_font = pygame.font.Font(None, 22)

    @property
    def selected_species(self) -> SpeciesInfo | None:
        species = self._biome.species
        return species[self._selected] if species else None

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        species = self._biome.species
        if event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._app.pop()
        elif event.key in (pygame.K_UP, pygame.K_w) and species:
            self._selected = (self._selected - 1) % len(species)
        elif event.key in (pygame.K_DOWN, pygame.K_s) and species:
            self._selected = (self._selected + 1) % len(species)
        elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            if self._biome.scene_key is not None:
                self._open_scene(self._biome.scene_key)
        elif event.key == pygame.K_p:
            chosen = self.selected_species
            if chosen is not None:
                self._open_scenarios(chosen)

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        surface.fill((8, 32, 28))
        frame = pygame.Rect(24, 24, max(240, w - 48), max(200, h - 48))
        pygame.draw.rect(surface, (14, 54, 46), frame)
        pygame.draw.rect(surface, (210, 236, 220), frame, 2)

        title = self._title_font.render(self._biome.name, True, (240, 250, 242))
        surface.blit(title, (frame.x + 24, frame.y + 24))

        y = frame.y + 24 + title.get_height() + 18
        y = _draw_wrapped_text(
            surface,
            self._biome.description,
            pygame.Rect(frame.x + 24, y, frame.w - 48, frame.h),
            color=(210, 230, 216),
            font=self._body_font,
            max_lines=4,
        )
        if self._biome.location:
            loc = self._body_font.render(f"Location: {self._biome.location}", True, (176, 210, 190))
            surface.blit(loc, (frame.x + 24, y + 12))
            y += 12 + loc.get_height()

        y += 18
        row_font = self._app.font
        for idx, sp in enumerate(self._biome.species):
            row = pygame.Rect(frame.x + 24, y, frame.w - 48, row_font.get_linesize() + 6)
            if idx == self._selected:
                pygame.draw.rect(surface, (30, 84, 68), row)
            label = _fit_label(row_font, sp.title, row.w - 180)
            surface.blit(row_font.render(label, True, (236, 248, 240)), (row.x + 8, row.y + 3))
            status = self._hint_font.render(sp.status, True, _BADGE_COLORS[sp.badge])
            surface.blit(status, status.get_rect(midright=(row.right - 8, row.centery)))
            y = row.bottom + 4
            if y > frame.bottom - 40:
                break

        if self._biome.scene_key is not None:
            hint = "Up/Down: Species  |  P: Population scenarios  |  Enter: Explore scene  |  Esc: Back"
        else:
            hint = "Up/Down: Species  |  P: Population scenarios  |  Esc: Back"
        foot = self._hint_font.render(_fit_label(self._hint_font, hint, frame.w - 24), True, (176, 210, 190))
        surface.blit(foot, foot.get_rect(midbottom=(frame.centerx, frame.bottom - 12)))


_BAR_COLORS: dict[BarBand, tuple[int, int, int]] = {
    BarBand.GREEN: (60, 190, 90),
    BarBand.YELLOW: (230, 200, 60),
    BarBand.ORANGE: (240, 140, 50),
    BarBand.RED: (220, 60, 60),
}


class ScenarioScreen:
    def __init__(self, app: App, *, clock: Clock, species: SpeciesInfo) -> None:
        self._app = app
        self._sim = PopulationSimulator(clock=clock)
        self._species = species
        self._selected = 0
        self._title_font = pygame.font.Font(None, 40)
        self._body_font = pygame.font.Font(None, 26)
        self._small_font = pygame.font.Font(None, 22)

    @property
    def simulator(self) -> PopulationSimulator:
        return self._sim

    @property
    def species(self) -> SpeciesInfo:
        return self._species

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        catalog = self._sim.catalog
        if event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._app.pop()
        elif event.key in (pygame.K_UP, pygame.K_w):
            self._selected = (self._selected - 1) % len(catalog)
        elif event.key in (pygame.K_DOWN, pygame.K_s):
            self._selected = (self._selected + 1) % len(catalog)
        elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            # Mirrors the disabled buttons at extinction.
            if self._sim.can_apply():
                self._sim.apply(catalog[self._selected])
        elif event.key == pygame.K_r:
            self._sim.reset()

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        snap = self._sim.snapshot()
        surface.fill((10, 28, 36))

        title_text = _fit_label(self._title_font, f"Population Scenarios: {self._species.title}", w - 56)
        title = self._title_font.render(title_text, True, (236, 246, 250))
        surface.blit(title, (28, 22))
        badge = self._small_font.render(
            f"Status: {self._species.status}", True, _BADGE_COLORS[self._species.badge]
        )
        surface.blit(badge, (28, 22 + title.get_height() + 4))

        bar = pygame.Rect(28, 88, max(200, w - 56), 28)
        pygame.draw.rect(surface, (30, 52, 60), bar)
        fill_w = int(bar.w * snap.percentage / 100)
        if fill_w > 0:
            pygame.draw.rect(surface, _BAR_COLORS[snap.band], pygame.Rect(bar.x, bar.y, fill_w, bar.h))
        pygame.draw.rect(surface, (200, 220, 230), bar, 1)
        pct = self._body_font.render(f"{snap.percentage}%  {snap.message}", True, (236, 246, 250))
        surface.blit(pct, (bar.x, bar.bottom + 8))

        list_x = 28
        y = bar.bottom + 44
        for idx, sc in enumerate(self._sim.catalog):
            selected = idx == self._selected
            color = (255, 255, 255) if selected and snap.can_apply else (150, 170, 180)
            row = pygame.Rect(list_x, y, w // 2 - 40, 30)
            if selected:
                pygame.draw.rect(surface, (36, 74, 90), row)
            label = _fit_label(self._body_font, f"{sc.name} ({format_effect(sc.effect)})", row.w - 12)
            surface.blit(self._body_font.render(label, True, color), (row.x + 6, row.y + 5))
            y += 34

        hx = w // 2 + 10
        hy = bar.bottom + 44
        surface.blit(self._body_font.render("History", True, (236, 246, 250)), (hx, hy))
        hy += 30
        if not snap.history:
            surface.blit(self._small_font.render("No scenarios applied yet.", True, (150, 170, 180)), (hx, hy))
        for entry in snap.history[: max(1, (h - hy - 40) // 24)]:
            line = f"{entry.scenario}  {format_effect(entry.effect)}"
            surface.blit(self._small_font.render(line, True, (200, 214, 222)), (hx, hy))
            hy += 24

        hint = "Up/Down: Choose  |  Enter: Apply  |  R: Reset  |  Esc: Back"
        foot = self._small_font.render(hint, True, (150, 170, 180))
        surface.blit(foot, foot.get_rect(midbottom=(w // 2, h - 10)))


class _AmbienceAudio:
    """Looping background noise for a scene; volume follows the mute toggle.

    This stays outside deterministic core logic.
    """

    _sample_rate = 22050
    _amp = 32767

    def __init__(self, *, smoothing: float, gain: float, seed: int) -> None:
        self._available = False
        self._sound: pygame.mixer.Sound | None = None
        self._channel: pygame.mixer.Channel | None = None
        self._muted: bool | None = None
        try:
            if pygame.mixer.get_init() is None:
                pygame.mixer.init(frequency=self._sample_rate, size=-16, channels=1, buffer=512)
            self._sound = self._build_noise_sound(duration_s=2.0, smoothing=smoothing, gain=gain, seed=seed)
            self._available = True
        except Exception:
            logger.debug("Ambience audio unavailable", exc_info=True)
            self._available = False

    def sync(self, *, muted: bool) -> None:
        if not self._available or self._sound is None or muted == self._muted:
            return
        self._muted = muted
        if self._channel is None:
            self._channel = self._sound.play(loops=-1)
        if self._channel is not None:
            self._channel.set_volume(0.0 if muted else 0.6)

    def stop(self) -> None:
        if self._channel is not None:
            self._channel.stop()
        self._channel = None
        self._muted = None

    def _build_noise_sound(
        self,
        *,
        duration_s: float,
        smoothing: float,
        gain: float,
        seed: int,
    ) -> pygame.mixer.Sound:
        init = pygame.mixer.get_init()
        rate = int(init[0]) if init else self._sample_rate
        channels = int(init[2]) if init else 1
        rng = random.Random(int(seed))
        sample_count = max(1, int(rate * duration_s))
        out = array("h")
        smooth = 0.0
        for _ in range(sample_count):
            raw = rng.uniform(-1.0, 1.0)
            smooth = (smooth * smoothing) + (raw * (1.0 - smoothing))
            sample = int(max(-1.0, min(1.0, smooth * gain)) * self._amp)
            for _ in range(channels):
                out.append(sample)
        return pygame.mixer.Sound(buffer=out.tobytes())


_SPECIES_COLORS: dict[str, tuple[int, int, int]] = {
    "turtle": (90, 200, 120),
    "shark": (170, 180, 196),
    "clownfish": (255, 140, 40),
    "manta": (60, 90, 150),
    "deer": (190, 140, 90),
    "fox": (230, 110, 40),
    "owl": (200, 190, 160),
    "bear": (70, 50, 40),
}

_SCENE_STYLE: dict[str, dict[str, tuple[int, int, int]]] = {
    "ocean": {"bg": (8, 56, 96), "ground": (14, 80, 120), "overlay": (70, 90, 40)},
    "temperate": {"bg": (30, 70, 36), "ground": (44, 96, 50), "overlay": (160, 160, 150)},
}

_BAND_COLORS: dict[PollutionBand, tuple[int, int, int]] = {
    PollutionBand.CLEAN: (70, 200, 110),
    PollutionBand.WARNING: (230, 190, 60),
    PollutionBand.POLLUTED: (220, 70, 60),
}

_BADGE_COLORS: dict[StatusBadge, tuple[int, int, int]] = {
    StatusBadge.ENDANGERED: (220, 70, 60),
    StatusBadge.THREATENED: (230, 170, 50),
    StatusBadge.OK: (80, 190, 110),
}


class ImmersiveScreen:
    """Top-down view of one immersive scene plus its HUD.

    Keys: M mini-game on/off, C challenge on/off, R reset the active mode,
    1-3 answer the open quiz or pick a challenge option, N mute, I close the
    info card, Esc back. Left click selects the nearest animal.
    """

    _PARTICLE_POOL = 120

    def __init__(self, app: App, *, scene_factory: Callable[[], ImmersiveScene]) -> None:
        self._app = app
        self._scene = scene_factory()
        key = self._scene.content.key
        self._style = _SCENE_STYLE.get(key, _SCENE_STYLE["ocean"])
        self._audio = _AmbienceAudio(
            smoothing=0.94 if key == "ocean" else 0.80,
            gain=0.40 if key == "ocean" else 0.18,
            seed=self._scene.seed,
        )
        pool_rng = random.Random(self._scene.seed)
        self._particles = [
            (pool_rng.random(), pool_rng.random(), pool_rng.uniform(0.02, 0.08))
            for _ in range(self._PARTICLE_POOL)
        ]
        self._view = pygame.Rect(0, 0, 1, 1)

        self._title_font = pygame.font.Font(None, 34)
        self._body_font = pygame.font.Font(None, 24)
        self._small_font = pygame.font.Font(None, 20)

    @property
    def scene(self) -> ImmersiveScene:
        return self._scene

    def close(self) -> None:
        self._audio.stop()

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            wx, wz = self._screen_to_world(event.pos)
            self._scene.click_at(wx, wz)
            return
        if event.type != pygame.KEYDOWN:
            return

        scene = self._scene
        key = event.key
        if key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            if scene.minigame.quiz is not None:
                scene.dismiss_quiz()
            else:
                self._app.pop()
        elif key == pygame.K_m:
            if scene.mode is SceneMode.MINIGAME:
                scene.stop_minigame()
            else:
                scene.start_minigame()
        elif key == pygame.K_c:
            if scene.mode is SceneMode.CHALLENGE:
                scene.exit_challenge()
            else:
                scene.start_challenge()
        elif key == pygame.K_r:
            if scene.mode is SceneMode.CHALLENGE:
                scene.reset_challenge()
            elif scene.mode is SceneMode.MINIGAME:
                scene.reset_minigame()
        elif key == pygame.K_n:
            scene.toggle_mute()
        elif key == pygame.K_i:
            scene.close_info()
        elif key in (pygame.K_1, pygame.K_2, pygame.K_3):
            idx = key - pygame.K_1
            if scene.minigame.quiz is not None:
                scene.answer_quiz_index(idx)
            elif scene.mode is SceneMode.CHALLENGE:
                scene.choose(idx)

    def render(self, surface: pygame.Surface) -> None:
        self._scene.update()
        snap = self._scene.snapshot()
        self._audio.sync(muted=snap.muted)

        w, h = surface.get_size()
        surface.fill(self._style["bg"])

        hud_w = max(260, min(360, w // 3))
        self._view = pygame.Rect(12, 12, max(100, w - hud_w - 36), max(100, h - 24))
        pygame.draw.rect(surface, self._style["ground"], self._view)
        pygame.draw.rect(surface, (210, 230, 236), self._view, 1)

        self._draw_agents(surface, snap)
        self._draw_overlay(surface, snap)

        hud = pygame.Rect(self._view.right + 12, 12, w - self._view.right - 24, h - 24)
        pygame.draw.rect(surface, (10, 24, 30), hud)
        pygame.draw.rect(surface, (180, 200, 210), hud, 1)
        self._draw_hud(surface, hud, snap)

    def _world_extent(self) -> tuple[float, float]:
        b = self._scene.engine.bounds
        return b.x + b.despawn_margin, b.z + b.despawn_margin

    def _world_to_screen(self, x: float, z: float) -> tuple[int, int]:
        ex, ez = self._world_extent()
        sx = self._view.centerx + (x / ex) * (self._view.w / 2)
        sy = self._view.centery + (z / ez) * (self._view.h / 2)
        return int(round(sx)), int(round(sy))

    def _screen_to_world(self, pos: tuple[int, int]) -> tuple[float, float]:
        ex, ez = self._world_extent()
        x = (pos[0] - self._view.centerx) / max(1.0, self._view.w / 2) * ex
        z = (pos[1] - self._view.centery) / max(1.0, self._view.h / 2) * ez
        return x, z

    def _draw_agents(self, surface: pygame.Surface, snap: SceneSnapshot) -> None:
        for a in snap.agents:
            if not a.visible:
                continue
            cx, cy = self._world_to_screen(a.x, a.z)
            if not self._view.collidepoint(cx, cy):
                continue
            radius = max(5, int(6 + a.scale * 16))
            color = _SPECIES_COLORS.get(a.species_id, (230, 230, 230))
            pygame.draw.circle(surface, color, (cx, cy), radius)
            hx = cx + int(math.sin(a.yaw) * radius * 1.6)
            hy = cy + int(math.cos(a.yaw) * radius * 1.6)
            pygame.draw.line(surface, (250, 250, 250), (cx, cy), (hx, hy), 2)
            label = self._small_font.render(a.species_id, True, (240, 244, 246))
            surface.blit(label, (cx + radius + 3, cy - label.get_height() // 2))

    def _draw_overlay(self, surface: pygame.Surface, snap: SceneSnapshot) -> None:
        if snap.overlay_alpha > 0.0:
            veil = pygame.Surface(self._view.size, pygame.SRCALPHA)
            veil.fill((*self._style["overlay"], int(255 * snap.overlay_alpha)))
            surface.blit(veil, self._view.topleft)

        if snap.particle_count <= 0:
            return
        drift = snap.elapsed_s
        for px, py, speed in self._particles[: snap.particle_count]:
            fy = (py + drift * speed) % 1.0
            x = self._view.x + int(px * self._view.w)
            y = self._view.y + int(fy * self._view.h)
            pygame.draw.circle(surface, (190, 190, 170), (x, y), 2)

    def _draw_hud(self, surface: pygame.Surface, hud: pygame.Rect, snap: SceneSnapshot) -> None:
        text_main = (236, 244, 248)
        text_muted = (160, 180, 190)
        x = hud.x + 12
        inner_w = hud.w - 24
        y = hud.y + 10

        surface.blit(self._title_font.render(snap.title, True, text_main), (x, y))
        y += 34
        mode = f"Mode: {snap.mode.value}" + ("  (muted)" if snap.muted else "")
        surface.blit(self._small_font.render(mode, True, text_muted), (x, y))
        y += 24

        mg = snap.minigame
        if snap.mode is SceneMode.MINIGAME or mg.complete:
            line = f"Found {mg.found}/{mg.total}   Time {_format_mm_ss(mg.elapsed_s)}   Score {mg.score}"
            surface.blit(self._body_font.render(line, True, text_main), (x, y))
            y += 24
            for t in mg.targets:
                mark = "[x]" if t.status is TargetStatus.FOUND else "[ ]"
                surface.blit(self._small_font.render(f"{mark} {t.label}", True, text_main), (x + 6, y))
                y += 20
            if mg.complete:
                surface.blit(self._body_font.render("All species found!", True, (120, 230, 140)), (x, y))
                y += 24
            if mg.quiz is not None:
                y += 6
                y = _draw_wrapped_text(
                    surface,
                    f"Quiz: {mg.quiz.question}",
                    pygame.Rect(x, y, inner_w, 60),
                    color=(250, 230, 140),
                    font=self._body_font,
                    max_lines=2,
                )
                for i, opt in enumerate(mg.quiz.options[:3]):
                    surface.blit(self._small_font.render(f"{i + 1}) {opt}", True, text_main), (x + 6, y))
                    y += 20
            y += 8

        ch = snap.challenge
        if ch.active:
            meter = f"Pollution {ch.level:+d}  ({ch.band.value})"
            surface.blit(self._body_font.render(meter, True, _BAND_COLORS[ch.band]), (x, y))
            y += 26
            if ch.step is not None:
                surface.blit(
                    self._body_font.render(f"Step {ch.step_index + 1}/{ch.step_count}: {ch.step.title}", True, text_main),
                    (x, y),
                )
                y += 24
                y = _draw_wrapped_text(
                    surface,
                    ch.step.prompt,
                    pygame.Rect(x, y, inner_w, 80),
                    color=text_muted,
                    font=self._small_font,
                    max_lines=3,
                )
                for i, opt in enumerate(ch.step.options):
                    label = _fit_label(self._small_font, f"{i + 1}) {opt.label}", inner_w - 6)
                    surface.blit(self._small_font.render(label, True, text_main), (x + 6, y))
                    y += 20
            elif ch.outcome is not ChallengeOutcome.NONE and snap.outcome_title is not None:
                won = ch.outcome is ChallengeOutcome.WIN
                surface.blit(
                    self._body_font.render(snap.outcome_title, True, (120, 230, 140) if won else (240, 110, 90)),
                    (x, y),
                )
                y += 24
                y = _draw_wrapped_text(
                    surface,
                    snap.outcome_text or "",
                    pygame.Rect(x, y, inner_w, 80),
                    color=text_muted,
                    font=self._small_font,
                    max_lines=4,
                )
            if ch.flash is not None:
                color = (120, 230, 140) if ch.flash.good else (240, 110, 90)
                y = _draw_wrapped_text(
                    surface,
                    ch.flash.text,
                    pygame.Rect(x, y + 4, inner_w, 60),
                    color=color,
                    font=self._small_font,
                    max_lines=2,
                )
                if ch.flash.explain:
                    y = _draw_wrapped_text(
                        surface,
                        ch.flash.explain,
                        pygame.Rect(x, y, inner_w, 40),
                        color=text_muted,
                        font=self._small_font,
                        max_lines=2,
                    )
            y += 8

        info = snap.info
        if info is not None:
            card = pygame.Rect(x - 4, y, inner_w + 8, max(60, hud.bottom - 30 - y))
            pygame.draw.rect(surface, (20, 40, 50), card)
            pygame.draw.rect(surface, _BADGE_COLORS[info.badge], card, 1)
            cy = _draw_wrapped_text(
                surface,
                info.title,
                pygame.Rect(x, y + 4, inner_w, 44),
                color=text_main,
                font=self._body_font,
                max_lines=2,
            )
            surface.blit(self._small_font.render(info.status, True, _BADGE_COLORS[info.badge]), (x, cy))
            cy = _draw_wrapped_text(
                surface,
                info.blurb,
                pygame.Rect(x, cy + 20, inner_w, 80),
                color=text_muted,
                font=self._small_font,
                max_lines=4,
            )
            if info.link:
                link = _fit_label(self._small_font, f"More: {info.link}", inner_w)
                surface.blit(self._small_font.render(link, True, (130, 190, 240)), (x, cy + 2))

        hint = "M game  C challenge  R reset  1-3 answer  N mute  Esc back"
        foot = self._small_font.render(_fit_label(self._small_font, hint, inner_w), True, text_muted)
        surface.blit(foot, (x, hud.bottom - foot.get_height() - 8))


def _init_joysticks() -> None:
    # Safe on platforms with no joystick support.
    try:
        count = pygame.joystick.get_count()
    except Exception:
        return

    for i in range(count):
        try:
            js = pygame.joystick.Joystick(i)
            js.init()
        except Exception:
            continue


def _new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    config: AppConfig | None = None,
) -> int:
    cfg = config if config is not None else AppConfig()

    pygame.init()
    _init_joysticks()

    pygame.display.set_caption("Wild Realms")
    surface = pygame.display.set_mode(cfg.window_size, pygame.RESIZABLE)

    font = pygame.font.Font(None, 36)
    clock = pygame.time.Clock()

    app = App(surface=surface, font=font)
    real_clock = RealClock()

    def scene_seed() -> int:
        return cfg.seed if cfg.seed is not None else _new_seed()

    builders: dict[str, Callable[..., ImmersiveScene]] = {
        "ocean": build_ocean_scene,
        "temperate": build_temperate_scene,
    }

    def open_scene(key: str) -> None:
        seed = scene_seed()
        logger.info("Opening %s scene (seed=%d)", key, seed)
        app.push(ImmersiveScreen(app, scene_factory=lambda: builders[key](clock=real_clock, seed=seed)))

    def open_scenarios(species: SpeciesInfo) -> None:
        logger.info("Opening population scenarios for %s", species.title)
        app.push(ScenarioScreen(app, clock=real_clock, species=species))

    def open_biome(biome: Biome) -> None:
        app.push(BiomeScreen(app, biome, open_scene=open_scene, open_scenarios=open_scenarios))

    biomes_menu = MenuScreen(
        app,
        "Biomes",
        [MenuItem(b.name, lambda b=b: open_biome(b)) for b in BIOMES] + [MenuItem("Back", app.pop)],
    )

    main_items = [
        MenuItem("Biomes", lambda: app.push(biomes_menu)),
        MenuItem("Ocean Reef", lambda: open_scene("ocean")),
        MenuItem("Temperate Forest", lambda: open_scene("temperate")),
        MenuItem("Quit", app.quit),
    ]

    app.push(MenuScreen(app, "Main Menu", main_items, is_root=True))
    if cfg.default_scene is not None:
        open_scene(cfg.default_scene)

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(cfg.fps)
    finally:
        pygame.quit()

    return 0
