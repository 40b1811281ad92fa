"""Structured logging configuration with JSON support."""

import logging
import logging.config
import json
import sys
import time
from datetime import datetime, timezone
from functools import wraps
from typing import Optional
import uuid
from contextlib import contextmanager
from threading import local

from .config import LoggingConfig, get_config


# Attributes every LogRecord carries; anything else came in through `extra`
_RESERVED_ATTRS = frozenset([
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'taskName', 'message',
    'exc_info', 'exc_text', 'stack_info', 'correlation_id',
])

# Thread-local storage for correlation IDs
_context = local()


class JSONFormatter(logging.Formatter):
    """Formatter for structured JSON logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        correlation_id = get_correlation_id()
        if correlation_id:
            log_entry["correlation_id"] = correlation_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


class TextFormatter(logging.Formatter):
    """Standard text formatter with correlation ID support."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as text with correlation ID."""
        record.correlation_id = get_correlation_id() or ""
        return super().format(record)


TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(correlation_id)s - %(message)s"


def setup_logging(logging_config: Optional[LoggingConfig] = None) -> None:
    """Set up logging for the realty_risk package."""
    if logging_config is None:
        logging_config = get_config().logging

    formatter = {"()": JSONFormatter}
    if logging_config.format == "text":
        formatter = {"()": TextFormatter, "format": TEXT_FORMAT}

    handlers = ["console"]
    dict_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": formatter,
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": sys.stderr,
            }
        },
        "loggers": {
            "realty_risk": {
                "level": logging_config.level,
                "handlers": handlers,
                "propagate": False,
            }
        }
    }

    if logging_config.file_path:
        dict_config["handlers"]["file"] = {
            "class": "logging.FileHandler",
            "formatter": "default",
            "filename": logging_config.file_path,
        }
        handlers.append("file")

    logging.config.dictConfig(dict_config)


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the package namespace."""
    return logging.getLogger(f"realty_risk.{name}")


def get_correlation_id() -> Optional[str]:
    """Return the correlation ID of the current thread, if any."""
    return getattr(_context, 'correlation_id', None)


@contextmanager
def correlation_context(correlation_id: Optional[str] = None):
    """Context manager for setting correlation ID in logs."""
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())

    old_correlation_id = get_correlation_id()
    _context.correlation_id = correlation_id

    try:
        yield correlation_id
    finally:
        if old_correlation_id is not None:
            _context.correlation_id = old_correlation_id
        else:
            delattr(_context, 'correlation_id')


def log_execution_time(logger: logging.Logger, operation: str):
    """Decorator to log execution time of functions."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration = time.perf_counter() - start_time
                logger.error(f"{operation} failed",
                             extra={"operation": operation, "duration_seconds": duration, "error": str(e)})
                raise
            duration = time.perf_counter() - start_time
            logger.info(f"{operation} completed successfully",
                        extra={"operation": operation, "duration_seconds": duration})
            return result
        return wrapper
    return decorator
