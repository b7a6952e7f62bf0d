"""
Logging setup for the task API.

`configure_logging()` is called once from main.py. Level and line format
come from settings (LOG_LEVEL, LOG_FORMAT). Modules get their logger with `get_logger(__name__)`.
"""

import logging
from typing import Optional

from taskapi.core.config import settings

# Third-party loggers that are noisy at INFO and add nothing to request logs
QUIET_LOGGERS = {
    "passlib": logging.ERROR,
    "multipart": logging.WARNING,
    "PIL": logging.WARNING,
}


def resolve_level(name: str) -> int:
    """Map a level name ("debug", "INFO", ...) to its number; unknown names give INFO."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    level_name = level or settings.LOG_LEVEL
    numeric = resolve_level(level_name)

    logging.basicConfig(format=fmt or settings.LOG_FORMAT)
    # basicConfig is a no-op once handlers exist, so the level is set explicitly
    logging.getLogger().setLevel(numeric)

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(max(quiet_level, numeric))

    logging.getLogger(__name__).info("Logging initialized at %s", logging.getLevelName(numeric))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
