"""
Logging utilities for CulinariaLegacy application.

UI modules log under the ``culinaria_legacy`` namespace via get_logger;
services and config use plain module loggers. setup_logging attaches the
same console and rotating file handlers to all of them.
"""

import logging
import logging.handlers
import time
from pathlib import Path
from typing import List, Optional
import sys

from .config import get_config

ROOT_LOGGER_NAME = "culinaria_legacy"

APP_LOGGER_NAMES = (ROOT_LOGGER_NAME, "services", "config")

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_FILE_BACKUPS = 5


def _build_handlers(level: int, log_file: str, debug: bool) -> List[logging.Handler]:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    ))
    console_handler.setLevel(logging.DEBUG if debug else logging.INFO)

    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding='utf-8'
    )
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(pathname)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    file_handler.setLevel(level)

    return [console_handler, file_handler]


def setup_logging(log_level: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Set up application logging with both console and file output.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR). Uses config if not provided.
        log_file: Log file path. Uses config if not provided.

    Returns:
        The application root logger
    """
    config = get_config()
    log_level = (log_level or config.log_level).upper()
    log_file = log_file or config.log_file
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    level = getattr(logging, log_level)
    handlers = _build_handlers(level, log_file, config.debug_mode)

    for name in APP_LOGGER_NAMES:
        app_logger = logging.getLogger(name)
        app_logger.setLevel(level)
        # Replaces handlers from an earlier session; their log files get closed
        for old_handler in list(app_logger.handlers):
            app_logger.removeHandler(old_handler)
            old_handler.close()
        for handler in handlers:
            app_logger.addHandler(handler)
        app_logger.propagate = False

    logging.getLogger("streamlit").setLevel(logging.WARNING)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.info(f"Logging initialized - Level: {log_level}, File: {log_file}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger in the application namespace for a module (usually __name__)"""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


class ContextLogger:
    """Context manager that logs the start, end and duration of an operation"""

    def __init__(self, logger: logging.Logger, operation: str, level: int = logging.INFO):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        self.logger.log(self.level, f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.time() - self.start_time
        if exc_type is None:
            self.logger.log(self.level, f"Completed: {self.operation} ({duration:.2f}s)")
        else:
            self.logger.error(f"Failed: {self.operation} ({duration:.2f}s) - {exc_val!r}")
        return False


def log_operation(logger: logging.Logger, operation: str, level: int = logging.INFO) -> ContextLogger:
    """Create a context logger for an operation"""
    return ContextLogger(logger, operation, level)
