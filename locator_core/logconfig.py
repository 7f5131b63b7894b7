# locator_core/logconfig.py
"""
Logging configuration for the locator engine and its CLI.

Library modules only call logging.getLogger("locator_core.<module>");
handlers are installed by setup_logging(), normally from the CLI.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

_loggers: dict = {}
_initialized: bool = False

ROOT_LOGGER = "locator_core"


class LocatorLogFormatter(logging.Formatter):
    """[timestamp] [LEVEL] name: message"""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        level = record.levelname.ljust(8)
        message = record.getMessage()

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return f"[{timestamp}] [{level}] {record.name}: {message}"


def setup_logging(
    level: int = logging.WARNING,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Install console (stderr) and optional file handlers on the package logger.

    Calling it again only adjusts the level.

    Args:
        level: Console logging level
        log_file: Optional path for a DEBUG-level log file

    Returns:
        The package root logger
    """
    global _initialized

    root_logger = logging.getLogger(ROOT_LOGGER)

    if _initialized:
        for handler in root_logger.handlers:
            if not isinstance(handler, logging.FileHandler):
                handler.setLevel(level)
        return root_logger

    root_logger.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(LocatorLogFormatter())
    root_logger.addHandler(console_handler)

    if log_file is not None:
        path = Path(log_file)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(LocatorLogFormatter())
            root_logger.addHandler(file_handler)
        except OSError as e:
            root_logger.warning(f"Could not create log file: {e}")

    _initialized = True
    root_logger.debug(f"Logging initialized (log file: {log_file})")
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the package hierarchy.

    Args:
        name: Logger name (usually __name__)
    """
    if name not in _loggers:
        if name.startswith(ROOT_LOGGER):
            _loggers[name] = logging.getLogger(name)
        else:
            _loggers[name] = logging.getLogger(f"{ROOT_LOGGER}.{name}")
    return _loggers[name]
