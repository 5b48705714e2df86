"""Logging setup shared by the web app and the TUI."""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(
    log_file: Path | None = None,
    level: str | None = None,
    max_bytes: int = 10_000_000,
    backup_count: int = 5,
    stream: bool = True,
) -> logging.Logger:
    """Configure the ``garden`` logger.

    Level comes from *level*, then MINDGARDEN_LOG_LEVEL, then INFO. Messages go
    to stderr (unless *stream* is off) and to a rotating file when *log_file*
    is given. Calling it again replaces the handlers instead of stacking them.
    """
    level_name = (level or os.environ.get("MINDGARDEN_LOG_LEVEL") or "INFO").upper()
    logger = logging.getLogger("garden")
    logger.setLevel(getattr(logging, level_name, logging.INFO))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    if stream:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger
