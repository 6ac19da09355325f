"""
uvicorn launcher for toolcrib (`toolcrib-serve`).

Development reloads by default; production never does. With
MIGRATE_ON_START set, pending Alembic revisions are applied before the
server starts.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict

import uvicorn
from alembic import command
from alembic.config import Config

from . import log_config

logger = logging.getLogger(__name__)

ALEMBIC_DIR = Path(__file__).resolve().parent / "alembic"

_TRUTHY = {"1", "true", "yes", "on"}


def _flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def run_migrations() -> None:
    config = Config()
    config.set_main_option("script_location", str(ALEMBIC_DIR))
    command.upgrade(config, "head")
    logger.info("Migrations applied")


def server_options() -> Dict[str, Any]:
    app_env = os.getenv("APP_ENV", "development").lower()
    production = app_env == "production"
    return {
        "host": os.getenv("HOST", "0.0.0.0"),
        "port": int(os.getenv("PORT", "8000")),
        "reload": False if production else _flag("RELOAD", app_env == "development"),
        "log_level": log_config.uvicorn_level(),
        "proxy_headers": True,
        "forwarded_allow_ips": os.getenv("FORWARDED_ALLOW_IPS", "*"),
    }


def main() -> None:
    log_config.configure_logging()
    if _flag("MIGRATE_ON_START", False):
        run_migrations()
    uvicorn.run("toolcrib.main:app", **server_options())


if __name__ == "__main__":
    main()
