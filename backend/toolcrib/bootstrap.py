"""
Lazy, once-per-process initialization.

The first HTTP request checks database connectivity and, when
AUTO_CREATE_TABLES is enabled, creates any missing tables. Concurrent first
requests wait on the same lock. A failed attempt is not remembered, so the
next request tries again.
"""

from __future__ import annotations

import logging
import os
import threading

from sqlalchemy import text

from . import database

logger = logging.getLogger(__name__)

AUTO_CREATE_TABLES = os.getenv("AUTO_CREATE_TABLES", "false").lower() in {"1", "true", "yes", "on"}

_lock = threading.Lock()
_initialized = False


def is_initialized() -> bool:
    return _initialized


def ensure_initialized() -> None:
    global _initialized
    if _initialized:
        return
    with _lock:
        if _initialized:
            return
        with database.write_engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        if AUTO_CREATE_TABLES:
            # Models are registered on Base.metadata by the package __init__.
            database.Base.metadata.create_all(bind=database.write_engine)
            logger.info("Database tables ensured")
        _initialized = True
        logger.info("Database connection established")


def reset() -> None:
    global _initialized
    with _lock:
        _initialized = False
