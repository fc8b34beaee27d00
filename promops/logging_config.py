"""Structured logging configuration for promops"""
import logging
import os
import sys
from typing import Any, Dict
import structlog
from structlog.stdlib import LoggerFactory
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer, TimeStamper, StackInfoRenderer
from .config import Config


def setup_structured_logging(config: Config) -> None:
    """Setup structured logging with JSON format for production and console for development"""

    # Configure processors
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        TimeStamper(fmt="iso"),
        StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    # Use JSON renderer for production, console for development
    is_development = os.getenv("ENVIRONMENT", "production").lower() == "development"
    if is_development:
        processors.append(ConsoleRenderer())
    else:
        processors.append(JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    level = getattr(logging, config.log_level.upper())

    handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    handlers.append(console_handler)

    if config.log_file is not None:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(config.log_file))
        file_handler.setLevel(level)
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=handlers,
        force=True,
    )

    # prometheus_client is chatty about multiprocess mode
    logging.getLogger('prometheus_client').setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance"""
    return structlog.get_logger(name)


def log_batch_applied(logger: structlog.stdlib.BoundLogger, applied: int, rejected: int, replay_time: float) -> None:
    """Log batch replay event with structured data"""
    logger.info(
        "Operations batch applied",
        applied=applied,
        rejected=rejected,
        replay_time_seconds=round(replay_time, 3),
        event_type="batch_replay"
    )


def log_operation_rejected(logger: structlog.stdlib.BoundLogger, operation: Dict[str, Any], reason: str) -> None:
    """Log a skipped operation; rejections are reported, never fatal"""
    logger.warning(
        "Operation rejected",
        operation=operation,
        reason=reason,
        event_type="operation_rejected"
    )


def log_replay_failure(logger: structlog.stdlib.BoundLogger, error: Exception, operation: Dict[str, Any]) -> None:
    """Log an unexpected failure while applying an operation"""
    logger.error(
        "Operation replay failed",
        operation=operation,
        error=str(error),
        error_type=type(error).__name__,
        event_type="replay_failure",
        exc_info=True
    )
