"""Structured logging configuration for the stream relay Lambdas."""

import json
import logging
import os
from typing import Optional

# Attributes every LogRecord has; anything else was passed through ``extra``
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured JSON logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_obj = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "component": "dynamo_search_relay",
        }

        # Add any extra fields from the log record
        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                log_obj[key] = value

        # Add exception info if present
        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        # Add X-Ray trace ID if available
        trace_id = os.environ.get("_X_AMZN_TRACE_ID")
        if trace_id:
            log_obj["trace_id"] = trace_id

        return json.dumps(log_obj, default=str)


def configure_logging(
    level: Optional[str] = None, structured: Optional[bool] = None
) -> logging.Logger:
    """Configure the package logger once.

    Args:
        level: Log level name (defaults to ``LOG_LEVEL`` or INFO)
        structured: Emit JSON lines (defaults to ``ENABLE_STRUCTURED_LOGGING``)

    Returns:
        The ``dynamo_search_relay`` logger
    """
    logger = logging.getLogger("dynamo_search_relay")

    # Only configure if not already configured
    if not logger.handlers:
        handler = logging.StreamHandler()

        if structured is None:
            structured = (
                os.environ.get("ENABLE_STRUCTURED_LOGGING", "true").lower()
                == "true"
            )
        if structured:
            formatter: logging.Formatter = StructuredFormatter()
        else:
            # Fallback to simple format
            formatter = logging.Formatter(
                "[%(levelname)s] %(asctime)s.%(msecs)03dZ %(name)s - "
                "%(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )

        handler.setFormatter(formatter)
        logger.addHandler(handler)

    level = level or os.environ.get("LOG_LEVEL", "INFO")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return logger


__all__ = ["StructuredFormatter", "configure_logging"]
