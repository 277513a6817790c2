# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""structlog setup shared by every session.

Each session logs through a logger bound with ``session=<label>`` and each
engine adds ``engine=<name>``, so one stderr stream stays readable with many
accounts online. ``FARMBOT_LOG_FORMAT=json`` switches to one JSON object per
line for log shippers.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from farmbot.settings import Settings

__all__ = ["get_logger", "configure_logging", "build_processors"]

# Libraries that log every frame or request at INFO/DEBUG.
NOISY_LIBRARIES = ("websockets", "httpx", "httpcore")


def build_processors(log_format: str = "console") -> list[structlog.types.Processor]:
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if log_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    return processors


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog once at startup.

    Args:
        settings: Settings instance (will be created if None)
    """
    if settings is None:
        from farmbot.settings import Settings

        settings = Settings()

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    structlog.configure(
        processors=build_processors(settings.log_format),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
    for name in NOISY_LIBRARIES:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    return structlog.get_logger(name)
