"""Process-wide logging setup.

Every module obtains its logger through ``get_logger(__name__)`` so the first
caller attaches exactly one stream handler to the root logger.
"""

from __future__ import annotations

import logging
import os
from typing import Final

_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that log every request line at INFO
_NOISY_LOGGERS: Final[tuple[str, ...]] = ("httpx", "httpcore", "aiosqlite")

_configured: bool = False


def _level_from_env() -> int:
    name = os.getenv("TABSENSE_LOG_LEVEL", "INFO").upper()
    return getattr(logging, name, logging.INFO)


def configure_logging(level: int | None = None) -> None:
    """Attach the stream handler once and apply ``level`` (env default)."""
    global _configured

    resolved = level if level is not None else _level_from_env()
    root = logging.getLogger()

    if not _configured:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
        root.addHandler(handler)
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(max(resolved, logging.WARNING))
        _configured = True

    root.setLevel(resolved)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger, configuring the root handler on first use."""
    configure_logging()
    return logging.getLogger(name)
