# clicr/utils/logger.py
"""
Centralised logging for the engine.
Console + rotating file in LOG_DIR (default <repo>/logs/clicr.log).
Domain lines carry a tag: [HYDRATE] [EVENT] [RESET] [BAN] [SCAN] [ALERT] [SYNC] [STORE].
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from clicr.config import settings

LOG_LEVEL = settings.LOG_LEVEL.upper()
LOG_DIR = settings.LOG_DIR or os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "logs")

# Per-request SQL and access lines drown out the ledger tags
QUIET_LOGGERS = ("sqlalchemy.engine", "uvicorn.access", "httpx")

_configured = False


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handlers = [logging.StreamHandler()]

    if settings.LOG_TO_FILE:
        os.makedirs(LOG_DIR, exist_ok=True)
        # 10 × 5MB
        handlers.append(RotatingFileHandler(
            filename=os.path.join(LOG_DIR, "clicr.log"),
            maxBytes=5 * 1024 * 1024,
            backupCount=10,
            encoding="utf-8",
        ))

    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)
    for handler in handlers:
        handler.setLevel(LOG_LEVEL)
        handler.setFormatter(fmt)
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, root.level))


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Call this at the top of every module."""
    _configure_root_logger()
    return logging.getLogger(name)
