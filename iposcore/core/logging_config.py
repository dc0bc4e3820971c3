"""Centralised logging configuration utilities."""
from __future__ import annotations

import logging
from typing import Optional

from iposcore.core.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging if it has not been configured yet."""

    if logging.getLogger().handlers:
        return

    level_name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module specific logger with shared configuration."""

    configure_logging()
    return logging.getLogger(name)
