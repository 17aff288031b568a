"""
Process-wide logging setup for LeetNotes.

The first get_logger() call attaches one stream handler to the root logger
at LOG_LEVEL. urllib3 and the Google client libraries log at WARNING or above.
"""

from __future__ import annotations

import logging
from typing import Final

from leetnotes.config import LOG_LEVEL

_HANDLER_ATTACHED: bool = False
_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_QUIET_LOGGERS: Final[tuple[str, ...]] = ("urllib3", "google", "google_auth_oauthlib")


def _configure_root(level: int) -> None:
    global _HANDLER_ATTACHED

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    _HANDLER_ATTACHED = True


def get_logger(name: str) -> logging.Logger:
    """Return a module logger, configuring the root handler on first use."""
    level = getattr(logging, LOG_LEVEL, logging.INFO)

    if not _HANDLER_ATTACHED:
        _configure_root(level)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    return logger
