from __future__ import annotations

import sys
from pathlib import Path


def _ensure_repo_root_on_path() -> None:
    """Ensure the repository root (parent of this package) is on ``sys.path``.

    When run as a script (``python wild_realms/__main__.py``) the package is
    not importable by name; inserting the parent directory fixes that.
    """
    pkg_dir = Path(__file__).resolve().parent
    repo_root_str = str(pkg_dir.parent)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


try:
    # Works when executed as a module: python -m wild_realms
    from .app import run  # type: ignore[attr-defined]
    from .config import AppConfig, configure_logging  # type: ignore[attr-defined]
except ImportError:
    # Works when executed as a script (IDE "Run File", absolute path, etc.)
    _ensure_repo_root_on_path()
    from wild_realms.app import run  # type: ignore[attr-defined]
    from wild_realms.config import AppConfig, configure_logging  # type: ignore[attr-defined]


def main() -> int:
    """Entry point for running Wild Realms from the command line."""
    config = AppConfig.from_env()
    configure_logging(config.log_level)
    return run(config=config)


if __name__ == "__main__":
    raise SystemExit(main())
