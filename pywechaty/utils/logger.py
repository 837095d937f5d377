"""
Logging setup for the pywechaty library.
"""

import os
import logging
from logging.handlers import RotatingFileHandler
from typing import Optional, Union

from ..constants import LOG_ENV_VAR

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

LOG_LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": TRACE,
}

# Global logging configuration flag
_logging_configured = False


def parse_level(level: Union[int, str, None], default: int = logging.INFO) -> int:
    """
    Translate a verbosity name (error, warn, info, debug, trace) into a level

    Args:
        level: Level name, numeric level or None
        default: Level used when the name is empty or unknown

    Returns:
        int: Numeric logging level
    """
    if level is None:
        return default
    if isinstance(level, int):
        return level
    return LOG_LEVELS.get(level.strip().lower(), default)


def setup_logging(
    level: Union[int, str, None] = None,
    log_dir: Optional[str] = None,
    max_size: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 3
) -> None:
    """
    Configure logging for the pywechaty library

    Args:
        level: Logging level; read from WECHATY_LOG when None
        log_dir: Directory to store log files (None for no file logging)
        max_size: Maximum size of log files before rotation
        backup_count: Number of backup log files to keep
    """
    global _logging_configured

    if _logging_configured:
        return

    if level is None:
        level = os.environ.get(LOG_ENV_VAR)
    level = parse_level(level)

    root_logger = logging.getLogger("pywechaty")
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_path = os.path.join(log_dir, "pywechaty.log")

        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max_size,
            backupCount=backup_count
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)

        root_logger.addHandler(file_handler)

    _logging_configured = True


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a logger for a specific component

    Args:
        name: Logger name (component name)
        level: Optional specific logging level

    Returns:
        Logger: Configured logger
    """
    if not _logging_configured:
        setup_logging()

    logger = logging.getLogger(f"pywechaty.{name}")

    if level is not None:
        logger.setLevel(level)

    return logger
