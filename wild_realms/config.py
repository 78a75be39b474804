from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

_SCENE_KEYS = ("ocean", "temperate")


@dataclass(frozen=True, slots=True)
class AppConfig:
    window_size: tuple[int, int] = (960, 540)
    fps: int = 60
    log_level: str = "WARNING"
    seed: int | None = None  # None -> fresh seed per scene
    default_scene: str | None = None  # open straight into this scene

    def __post_init__(self) -> None:
        if self.window_size[0] <= 0 or self.window_size[1] <= 0:
            raise ValueError("window_size must be positive")
        if self.fps <= 0:
            raise ValueError("fps must be > 0")
        if self.default_scene is not None and self.default_scene not in _SCENE_KEYS:
            raise ValueError(f"unknown scene: {self.default_scene!r}")
        _resolve_level(self.log_level)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AppConfig:
        env = os.environ if environ is None else environ

        seed_raw = env.get("WILD_REALMS_SEED", "").strip()
        fps_raw = env.get("WILD_REALMS_FPS", "").strip()
        scene_raw = env.get("WILD_REALMS_SCENE", "").strip().lower()

        return cls(
            fps=int(fps_raw) if fps_raw else 60,
            log_level=env.get("WILD_REALMS_LOG_LEVEL", "WARNING").strip().upper() or "WARNING",
            seed=int(seed_raw) if seed_raw else None,
            default_scene=scene_raw or None,
        )


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        raise ValueError(f"unknown log level: {level!r}")
    return resolved


def configure_logging(level: str | int = "WARNING") -> None:
    """Install one stream handler on the root logger. Safe to call twice."""

    root = logging.getLogger()
    root.setLevel(_resolve_level(level))
    if not any(getattr(h, "_wild_realms", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._wild_realms = True  # type: ignore[attr-defined]
        root.addHandler(handler)
