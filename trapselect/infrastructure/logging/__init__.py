"""
TrapSelect Infrastructure Logging.

Logging configuration and utilities with file rotation and safe stream handling.

This module provides centralized logging for TrapSelect with:
- File rotation (10 MB max, 5 backups)
- Safe stream handling during interpreter or Qt application shutdown
- Pre-configured loggers for the selection session and count scheduler
- Optional file logging to $TRAPSELECT_LOG_DIR/trapselect.log

Module loggers are plain ``logging.getLogger('TrapSelect.<Area>')`` loggers;
they propagate to the 'TrapSelect' root logger configured here.

Usage:
    from trapselect.infrastructure.logging import get_logger, get_app_logger
    logger = get_logger('TrapSelect.MyModule')
    logger.info("Something happened")
"""

import logging
from logging.handlers import RotatingFileHandler
import os
import sys

ROOT_LOGGER_NAME = 'TrapSelect'

_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# File logging is opt-in: a library must not write next to its installed sources
_LOG_DIR = os.environ.get('TRAPSELECT_LOG_DIR')
_LOG_FILE = os.path.join(_LOG_DIR, 'trapselect.log') if _LOG_DIR else None

if _LOG_DIR:
    try:
        os.makedirs(_LOG_DIR, exist_ok=True)
    except OSError:
        _LOG_FILE = None  # Disable file logging if directory can't be created


class SafeStreamHandler(logging.StreamHandler):
    """
    StreamHandler that gracefully handles closed or None streams.

    Background count workers may still log while the application tears down
    its streams; those records are dropped instead of raising.
    """

    def emit(self, record):
        """Emit a record, with safe handling of None or closed streams."""
        try:
            if self.stream is None:
                return
            super().emit(record)
        except (AttributeError, ValueError, OSError):
            pass


def _rotating_file_handler(log_file: str, level: int):
    handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding='utf-8',
        delay=True
    )
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
    handler.setLevel(level)
    return handler


def setup_logger(name: str, log_file: str = None, level=logging.INFO):
    """
    Setup logger with file rotation.

    Args:
        name: Logger name (e.g., 'TrapSelect.Session')
        log_file: Path to log file (optional)
        level: Logging level (default: logging.INFO)

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    if logger.handlers:
        return logger

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            try:
                os.makedirs(log_dir, exist_ok=True)
            except OSError:
                log_file = os.path.basename(log_file)
        try:
            logger.addHandler(_rotating_file_handler(log_file, level))
        except (OSError, PermissionError):
            pass

    console_handler = SafeStreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
    console_handler.setLevel(logging.WARNING)
    logger.addHandler(console_handler)

    return logger


def get_logger(name: str):
    """
    Get existing logger or create a default one.

    Args:
        name: Logger name

    Returns:
        logging.Logger: Logger instance
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger = setup_logger(name)
    return logger


def set_log_level(logger_name: str, level):
    """Change log level for a specific logger (int or level name such as 'DEBUG')."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)


def safe_log(logger, level: int, message: str, exc_info: bool = False):
    """
    Safely log a message, catching any exceptions.

    Useful in exception handlers or during shutdown.
    """
    try:
        logger.log(level, message, exc_info=exc_info)
    except (OSError, ValueError, AttributeError):
        pass


# Root logger configuration
_root_logger_configured = False
_file_handler = None  # Global file handler reference


def _ensure_root_logger_configured():
    """Ensure the root TrapSelect logger has SafeStreamHandler and FileHandler configured."""
    global _root_logger_configured, _file_handler
    if _root_logger_configured:
        return

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG)  # Capture all levels, handlers will filter

    has_safe_handler = any(isinstance(h, SafeStreamHandler) for h in root_logger.handlers)
    if not has_safe_handler:
        console_handler = SafeStreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
        console_handler.setLevel(logging.WARNING)
        root_logger.addHandler(console_handler)

    has_file_handler = any(isinstance(h, RotatingFileHandler) for h in root_logger.handlers)
    if not has_file_handler and _LOG_FILE:
        try:
            _file_handler = _rotating_file_handler(_LOG_FILE, logging.INFO)
            root_logger.addHandler(_file_handler)
        except (OSError, PermissionError):
            pass

    _root_logger_configured = True


def get_app_logger():
    """Get logger for the selection session."""
    _ensure_root_logger_configured()
    return get_logger(f'{ROOT_LOGGER_NAME}.App')


def get_count_logger():
    """Get logger for count scheduling and background counts."""
    _ensure_root_logger_configured()
    return get_logger(f'{ROOT_LOGGER_NAME}.Count')


def get_log_file_path():
    """Get the path to the current log file."""
    return _LOG_FILE


def flush_logs():
    """Flush all log handlers to ensure logs are written to file."""
    if _file_handler:
        try:
            _file_handler.flush()
        except (OSError, ValueError):
            pass


__all__ = [
    'ROOT_LOGGER_NAME',
    'SafeStreamHandler',
    'setup_logger',
    'get_logger',
    'set_log_level',
    'safe_log',
    'get_app_logger',
    'get_count_logger',
    'get_log_file_path',
    'flush_logs',
]
