from __future__ import annotations

import logging

import pytest

from wild_realms.config import AppConfig, configure_logging


def test_from_env_defaults() -> None:
    cfg = AppConfig.from_env({})
    assert cfg.fps == 60
    assert cfg.log_level == "WARNING"
    assert cfg.seed is None
    assert cfg.default_scene is None
    assert cfg.window_size == (960, 540)


def test_from_env_reads_overrides() -> None:
    cfg = AppConfig.from_env(
        {
            "WILD_REALMS_FPS": "30",
            "WILD_REALMS_LOG_LEVEL": "debug",
            "WILD_REALMS_SEED": "1234",
            "WILD_REALMS_SCENE": "Ocean",
        }
    )
    assert cfg.fps == 30
    assert cfg.log_level == "DEBUG"
    assert cfg.seed == 1234
    assert cfg.default_scene == "ocean"


def test_invalid_values_raise() -> None:
    with pytest.raises(ValueError):
        AppConfig(fps=0)
    with pytest.raises(ValueError):
        AppConfig(default_scene="desert")
    with pytest.raises(ValueError):
        AppConfig.from_env({"WILD_REALMS_SEED": "abc"})
    with pytest.raises(ValueError):
        AppConfig(log_level="chatty")
    with pytest.raises(ValueError):
        AppConfig.from_env({"WILD_REALMS_LOG_LEVEL": "chatty"})


def test_configure_logging_installs_a_single_handler() -> None:
    root = logging.getLogger()
    before_level = root.level
    before = list(root.handlers)
    try:
        configure_logging("info")
        configure_logging("INFO")
        ours = [h for h in root.handlers if getattr(h, "_wild_realms", False)]
        assert len(ours) == 1
        assert root.level == logging.INFO
    finally:
        for h in list(root.handlers):
            if h not in before:
                root.removeHandler(h)
        root.setLevel(before_level)


def test_configure_logging_rejects_unknown_level() -> None:
    with pytest.raises(ValueError):
        configure_logging("chatty")
