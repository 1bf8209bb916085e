"""Centralized logging configuration for evalascendente."""
from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .config import AppConfig

FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
CONSOLE_FORMAT = "%(levelname)s: %(message)s"


def _file_handler(logger: logging.Logger) -> Optional[RotatingFileHandler]:
    for handler in logger.handlers:
        if isinstance(handler, RotatingFileHandler):
            return handler
    return None


def _console_handler(logger: logging.Logger) -> Optional[logging.Handler]:
    # RotatingFileHandler subclasses StreamHandler, so match the exact type
    for handler in logger.handlers:
        if type(handler) is logging.StreamHandler:
            return handler
    return None


def setup_logging(config: AppConfig) -> logging.Logger:
    """Configure the package logger from ``config`` and return it.

    Safe to call repeatedly: handlers are reused, and the file handler is
    replaced only when the log path or rotation settings change.
    """

    log_path = Path(config.log_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("evalascendente")
    logger.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))
    logger.propagate = False

    current = _file_handler(logger)
    if current is not None and (
        current.baseFilename != os.path.abspath(log_path)
        or current.maxBytes != config.log_max_bytes
        or current.backupCount != config.log_backup_count
    ):
        logger.removeHandler(current)
        current.close()
        current = None
    if current is None:
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=config.log_max_bytes,
            backupCount=config.log_backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    console = _console_handler(logger)
    if config.log_console and console is None:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(stream_handler)
    elif not config.log_console and console is not None:
        logger.removeHandler(console)

    logger.debug(
        "Logging initialized at %s level (%s, %d bytes x %d backups)",
        config.log_level.upper(),
        log_path,
        config.log_max_bytes,
        config.log_backup_count,
    )
    return logger


__all__ = ["setup_logging"]
