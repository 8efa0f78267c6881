"""
Structured logging configuration for the FHIR Goal service.

Every record is rendered as a single JSON object so that service logs can be
shipped to an aggregator without further parsing.
"""

import json
import logging
import sys
import time
from datetime import datetime
from typing import Any, Dict, Optional, Union

_HANDLER_NAME = "fhir_goal_service.json"


class JsonFormatter(logging.Formatter):
    """Render log records as JSON documents."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "message": record.getMessage(),
        }

        # Structured fields passed through log_with_context
        for key, value in getattr(record, "extras", {}).items():
            log_data[key] = value

        if record.exc_info and record.exc_info[0] is not None:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
            }

        return json.dumps(log_data, default=str)


def configure_logging(level: Union[int, str] = logging.INFO, stream=None) -> logging.Logger:
    """Configure structured JSON logging on the root logger.

    Calling this more than once replaces the previously installed handler
    instead of stacking a second one.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    root = logging.getLogger()
    for handler in list(root.handlers):
        if handler.get_name() == _HANDLER_NAME:
            root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
    root.setLevel(level)

    root.debug("Logging configured for FHIR Goal service")
    return root


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name, configured for JSON output."""
    return logging.getLogger(name)


def log_with_context(logger: logging.Logger, level: Union[int, str], message: str, **context: Any) -> None:
    """Log with additional context as structured fields."""
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    logger.log(level, message, extra={"extras": context})


class LogMetrics:
    """Context manager for logging the duration of a code block."""

    def __init__(self, logger: logging.Logger, operation_name: str):
        self.logger = logger
        self.operation_name = operation_name
        self.start_time: Optional[float] = None

    def __enter__(self):
        self.start_time = time.time()
        self.logger.debug(f"Starting {self.operation_name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.time() - self.start_time

        if exc_type is None:
            log_with_context(
                self.logger, logging.DEBUG, f"Completed {self.operation_name}",
                duration_seconds=duration,
            )
        else:
            log_with_context(
                self.logger, logging.ERROR, f"Failed {self.operation_name}: {exc_val}",
                duration_seconds=duration, error=str(exc_val),
            )
        # Never suppress the exception
        return False

    def log_count(self, count: int, entity_type: str = "records") -> None:
        """Log a count metric."""
        log_with_context(
            self.logger, logging.INFO, f"Processed {count} {entity_type}",
            **{f"{entity_type}_count": count},
        )
