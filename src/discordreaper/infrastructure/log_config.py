"""Loguru sink configuration shared by the CLI entry points."""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}"

_LEVEL_ALIASES = {"WARN": "WARNING", "ERR": "ERROR"}


def normalize_level(level: str) -> str:
    normalized = (level or "INFO").strip().upper()
    return _LEVEL_ALIASES.get(normalized, normalized)


def configure_logging(
    level: str = "INFO",
    enable_file_logging: bool = False,
    log_dir: Path = Path("."),
) -> Optional[Path]:
    """Log to stderr in color and, optionally, to a timestamped plain-text file.

    Returns the log file path when file logging is enabled.
    """
    level = normalize_level(level)
    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if not enable_file_logging:
        return None

    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / f"reaper-{datetime.now():%Y%m%d-%H%M%S}.log"
    # The file keeps everything from DEBUG up regardless of the console level
    logger.add(log_path, format=FILE_FORMAT, level="DEBUG", colorize=False, enqueue=True)
    return log_path
