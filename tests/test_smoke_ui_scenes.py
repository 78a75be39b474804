from __future__ import annotations

import os


def _key(pygame, key: int) -> None:
    pygame.event.post(pygame.event.Event(pygame.KEYDOWN, {"key": key, "unicode": ""}))


def test_ui_smoke_ocean_scene_minigame_and_challenge() -> None:
    # Headless SDL for CI.
    os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
    os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

    import pygame

    from wild_realms.app import run

    def inject(frame: int) -> None:
        # Main Menu -> Ocean Reef, play the mini-game, then the challenge.
        if frame == 1:
            _key(pygame, pygame.K_DOWN)
        elif frame == 2:
            _key(pygame, pygame.K_RETURN)
        elif frame == 3:
            _key(pygame, pygame.K_m)
        elif frame == 4:
            pygame.event.post(pygame.event.Event(pygame.MOUSEBUTTONDOWN, {"button": 1, "pos": (300, 270)}))
        elif frame == 5:
            _key(pygame, pygame.K_1)
        elif frame == 6:
            _key(pygame, pygame.K_c)
        elif frame in (7, 8, 9):
            _key(pygame, pygame.K_1)
        elif frame == 10:
            _key(pygame, pygame.K_n)
        elif frame == 11:
            _key(pygame, pygame.K_r)
        elif frame == 12:
            _key(pygame, pygame.K_ESCAPE)

    assert run(max_frames=16, event_injector=inject) == 0


def test_ui_smoke_biomes_and_population_scenarios() -> None:
    os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
    os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

    import pygame

    from wild_realms.app import run

    def inject(frame: int) -> None:
        # Main Menu -> Biomes -> Rainforest -> Population scenarios -> apply twice.
        if frame == 1:
            _key(pygame, pygame.K_RETURN)
        elif frame == 2:
            _key(pygame, pygame.K_RETURN)
        elif frame == 3:
            _key(pygame, pygame.K_p)
        elif frame in (4, 5):
            _key(pygame, pygame.K_RETURN)
        elif frame == 6:
            _key(pygame, pygame.K_DOWN)
        elif frame == 7:
            _key(pygame, pygame.K_RETURN)
        elif frame == 8:
            _key(pygame, pygame.K_r)
        elif frame == 9:
            _key(pygame, pygame.K_ESCAPE)
        elif frame == 10:
            _key(pygame, pygame.K_ESCAPE)

    assert run(max_frames=14, event_injector=inject) == 0


def test_ui_smoke_temperate_forest_from_biome_card() -> None:
    os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
    os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

    import pygame

    from wild_realms.app import run

    def inject(frame: int) -> None:
        # Main Menu -> Biomes -> Temperate Forest (6th) -> Explore.
        if frame == 1:
            _key(pygame, pygame.K_RETURN)
        elif 2 <= frame <= 6:
            _key(pygame, pygame.K_DOWN)
        elif frame == 7:
            _key(pygame, pygame.K_RETURN)
        elif frame == 8:
            _key(pygame, pygame.K_RETURN)
        elif frame == 9:
            _key(pygame, pygame.K_c)
        elif frame == 10:
            _key(pygame, pygame.K_2)

    assert run(max_frames=14, event_injector=inject) == 0
