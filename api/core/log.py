"""
Process-wide logging setup.

Modules only call `logging.getLogger(__name__)`; the root handler is
configured once here from LOG_LEVEL.
"""

from __future__ import annotations

import logging
import os
import sys

_INITIALIZED = False

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"


def init_logging(level: str | None = None) -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return

    resolved = getattr(logging, (level or log_level()).upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(resolved)

    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(resolved)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(handler)

    _INITIALIZED = True
