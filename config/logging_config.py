"""
Process-wide logging setup.

Called once by the entry point.  Modules only ever do
``logger = logging.getLogger(__name__)``.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from config.settings import Settings

LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s — %(message)s"
_MAX_BYTES = 5 * 1024 * 1024
_BACKUP_COUNT = 5


def configure_logging(settings: Settings) -> None:
    level = logging.DEBUG if settings.debug else getattr(
        logging, settings.log_level.upper(), logging.INFO
    )
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if settings.log_dir:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        formatter = logging.Formatter(LOG_FORMAT)

        combined = RotatingFileHandler(
            log_dir / "combined.log", maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
        combined.setFormatter(formatter)

        errors = RotatingFileHandler(
            log_dir / "error.log", maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
        errors.setLevel(logging.ERROR)
        errors.setFormatter(formatter)

        handlers.extend([combined, errors])

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)

    for _noisy in ("httpcore", "httpx", "aiosqlite", "asyncio", "sqlalchemy.engine"):
        logging.getLogger(_noisy).setLevel(logging.WARNING)
