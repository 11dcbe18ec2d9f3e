"""Loguru setup shared by the CLI and the HTTP service."""

from __future__ import annotations

import os
import sys

from loguru import logger


LOG_LEVEL_ENV = "STUDIO_SEATING_LOG_LEVEL"

log_format = " | ".join(
    (
        "<lk>{time:YYYY-MM-DD HH:mm:ss.SSS}</>",
        "<lvl>{level:<8}</>",
        "<c>{name}:{function}:{line}</>",
        "{message}",
    )
)


def configure_logging(level: str | None = None) -> None:
    level = (level or os.environ.get(LOG_LEVEL_ENV) or "INFO").upper()
    logger.remove()  # drop loguru's default handler so messages are not duplicated
    logger.add(sys.stderr, format=log_format, level=level)
