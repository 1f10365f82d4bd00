"""
Logging Utilities

This module provides centralized logging configuration for the song API.
It ensures consistent log formatting with request ID tracing across the
routers and services.
"""
import logging
from typing import Optional, Union


LOGGER_NAME = "song_api"


class RequestIdFilter(logging.Filter):
    """Default request_id for records logged outside a request."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = "-"
        return True


def setup_logger(
    log_level: Union[int, str] = logging.INFO,
    logger_name: str = LOGGER_NAME
) -> logging.Logger:
    """
    Configure the application logger.

    Module loggers ("song_api.services.ytdlp_service", ...) propagate to this
    logger, so a single handler formats every record.

    Args:
        log_level: Logging level constant or name. Defaults to logging.INFO.
        logger_name: Name for the logger instance. Defaults to "song_api".

    Returns:
        Configured Logger instance ready for use with get_request_logger().

    Example:
        >>> logger = setup_logger(log_level="DEBUG")
        >>> request_logger = get_request_logger("a1b2c3d4")
        >>> request_logger.info("GET /song/dQw4w9WgXcQ")
        2026-01-12 10:30:45 | INFO | [a1b2c3d4] GET /song/dQw4w9WgXcQ
    """
    log_format = logging.Formatter(
        '%(asctime)s | %(levelname)s | [%(request_id)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if isinstance(log_level, str):
        log_level = logging.getLevelName(log_level.upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO

    logger = logging.getLogger(logger_name)
    logger.setLevel(log_level)

    # Prevent duplicate handlers if logger already configured
    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(log_format)
        console_handler.addFilter(RequestIdFilter())
        logger.addHandler(console_handler)

    return logger


def get_request_logger(
    request_id: str,
    base_logger: Optional[logging.Logger] = None
) -> logging.LoggerAdapter:
    """
    Create a logger adapter with the request ID for tracing.

    Args:
        request_id: Unique identifier for the request.
        base_logger: Optional base logger to wrap. If None, uses the
                    "song_api" logger.

    Returns:
        LoggerAdapter configured to inject request_id into all log messages.
    """
    if base_logger is None:
        base_logger = logging.getLogger(LOGGER_NAME)

    return logging.LoggerAdapter(base_logger, {"request_id": request_id})
