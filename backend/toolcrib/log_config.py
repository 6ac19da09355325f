"""
LOG_LEVEL handling shared by the app and the uvicorn launcher.

uvicorn understands "trace", which the standard library does not; the
stdlib side maps it to DEBUG and falls back to INFO for anything unknown.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

UVICORN_LEVELS = {"critical", "error", "warning", "info", "debug", "trace"}

_STDLIB_LEVELS = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": logging.DEBUG,
}


def _raw_level(value: Optional[str]) -> str:
    if value is None:
        value = os.getenv("LOG_LEVEL", "info")
    return value.strip().lower()


def stdlib_level(value: Optional[str] = None) -> int:
    return _STDLIB_LEVELS.get(_raw_level(value), logging.INFO)


def uvicorn_level(value: Optional[str] = None) -> str:
    level = _raw_level(value)
    return level if level in UVICORN_LEVELS else "info"


def configure_logging(value: Optional[str] = None) -> None:
    logging.basicConfig(
        level=stdlib_level(value),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
