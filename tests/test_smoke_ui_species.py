from __future__ import annotations

import os

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame  # noqa: E402

from wild_realms import app as app_module  # noqa: E402
from wild_realms.app import App, BiomeScreen, ImmersiveScreen, MenuItem, MenuScreen, ScenarioScreen  # noqa: E402
from wild_realms.biomes import OCEAN_INFO, find_biome  # noqa: E402
from wild_realms.clock import FrameClock  # noqa: E402
from wild_realms.immersive import build_ocean_scene  # noqa: E402


@pytest.fixture
def app():
    pygame.init()
    surface = pygame.display.set_mode((960, 540))
    try:
        yield App(surface, pygame.font.Font(None, 36))
    finally:
        pygame.quit()


def _keydown(key: int) -> pygame.event.Event:
    return pygame.event.Event(pygame.KEYDOWN, {"key": key, "unicode": ""})


def test_ocean_biome_opens_scenarios_for_the_picked_ocean_species(app: App) -> None:
    clock = FrameClock()
    ocean = find_biome("Ocean")

    def open_scenarios(species) -> None:
        app.push(ScenarioScreen(app, clock=clock, species=species))

    card = BiomeScreen(app, ocean, open_scene=lambda key: None, open_scenarios=open_scenarios)
    app.push(card)
    app.render()
    assert card.selected_species == OCEAN_INFO["turtle"]

    app.handle_event(_keydown(pygame.K_DOWN))
    app.handle_event(_keydown(pygame.K_p))

    top = app.top
    assert isinstance(top, ScenarioScreen)
    assert top.species == OCEAN_INFO["shark"]
    assert top.species in ocean.species
    app.render()


def test_run_routes_the_ocean_biome_card_to_ocean_scenarios(monkeypatch: pytest.MonkeyPatch) -> None:
    opened: list[str] = []

    class RecordingScenarioScreen(ScenarioScreen):
        def __init__(self, app, *, clock, species) -> None:
            super().__init__(app, clock=clock, species=species)
            opened.append(species.title)

    monkeypatch.setattr(app_module, "ScenarioScreen", RecordingScenarioScreen)

    def inject(frame: int) -> None:
        # Main Menu -> Biomes -> Ocean (7th) -> P.
        if frame == 1:
            pygame.event.post(_keydown(pygame.K_RETURN))
        elif 2 <= frame <= 7:
            pygame.event.post(_keydown(pygame.K_DOWN))
        elif frame == 8:
            pygame.event.post(_keydown(pygame.K_RETURN))
        elif frame == 9:
            pygame.event.post(_keydown(pygame.K_p))

    assert app_module.run(max_frames=12, event_injector=inject) == 0
    assert opened == ["Green Sea Turtle (Chelonia mydas)"]


def test_info_card_link_and_flash_explanation_reach_the_hud(app: App) -> None:
    clock = FrameClock()
    screen = ImmersiveScreen(app, scene_factory=lambda: build_ocean_scene(clock=clock, seed=11))
    app.push(screen)
    scene = screen.scene

    clock.advance(0.1)
    scene.update()
    assert scene.click("turtle")
    scene.start_challenge()
    scene.choose(0)

    snap = scene.snapshot()
    assert snap.info is not None and snap.info.link.startswith("https://")
    assert snap.challenge.flash is not None
    assert snap.challenge.flash.explain == "Removes surface plastics quickly."
    app.render()
    screen.close()


def test_menu_follows_joystick_hat_and_buttons(app: App) -> None:
    picked: list[str] = []
    menu = MenuScreen(
        app,
        "Menu",
        [MenuItem("A", lambda: picked.append("A")), MenuItem("B", lambda: picked.append("B"))],
        is_root=True,
    )
    app.push(menu)

    app.handle_event(pygame.event.Event(pygame.JOYHATMOTION, {"joy": 0, "instance_id": 0, "hat": 0, "value": (0, -1)}))
    assert menu.selected == 1
    app.handle_event(pygame.event.Event(pygame.JOYBUTTONDOWN, {"joy": 0, "instance_id": 0, "button": 0}))
    assert picked == ["B"]
    app.handle_event(pygame.event.Event(pygame.JOYHATMOTION, {"joy": 0, "instance_id": 0, "hat": 0, "value": (0, 1)}))
    assert menu.selected == 0
    app.handle_event(pygame.event.Event(pygame.JOYBUTTONDOWN, {"joy": 0, "instance_id": 0, "button": 1}))
    assert not app.running
