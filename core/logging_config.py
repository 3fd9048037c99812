"""Structured logging configuration with correlation fields."""
import logging
import json
import sys
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from contextvars import ContextVar

# Context variables for log correlation
current_request_id: ContextVar[str] = ContextVar("request_id", default="")
current_card_id: ContextVar[str] = ContextVar("card_id", default="")
current_spreadsheet_id: ContextVar[str] = ContextVar("spreadsheet_id", default="")


def preview(value: Optional[str], limit: int = 80) -> str:
    """Shorten a long text value for log output."""
    if not value:
        return "EMPTY"
    if len(value) <= limit:
        return value
    return value[:limit] + "..."


class JSONFormatter(logging.Formatter):
    """JSON log formatter with correlation fields."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if request_id := current_request_id.get():
            log_data["request_id"] = request_id
        if card_id := current_card_id.get():
            log_data["card_id"] = card_id
        if spreadsheet_id := current_spreadsheet_id.get():
            log_data["spreadsheet_id"] = spreadsheet_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields from record
        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter with correlation fields."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")

        ctx_parts = []
        if request_id := current_request_id.get():
            ctx_parts.append(f"req={request_id}")
        if card_id := current_card_id.get():
            ctx_parts.append(f"card={card_id[:24]}")
        if spreadsheet_id := current_spreadsheet_id.get():
            ctx_parts.append(f"sheet={spreadsheet_id[:12]}")

        ctx_str = f" [{', '.join(ctx_parts)}]" if ctx_parts else ""

        msg = f"{timestamp} {record.levelname:8s} {record.name}{ctx_str}: {record.getMessage()}"

        if record.exc_info:
            msg += "\n" + self.formatException(record.exc_info)

        return msg


def setup_logging(
    level: str = "INFO",
    format_type: str = "text",
    logger_name: Optional[str] = None,
) -> logging.Logger:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: "json" for structured logs, "text" for human-readable
        logger_name: Specific logger name, or None for root logger

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, level.upper(), logging.INFO))

    if format_type.lower() == "json":
        formatter = JSONFormatter()
    else:
        formatter = TextFormatter()

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Named loggers stay out of the root handler chain
    if logger_name:
        logger.propagate = False

    return logger


class LogContext:
    """Context manager for setting and restoring log context."""

    _VARS = {
        "request_id": current_request_id,
        "card_id": current_card_id,
        "spreadsheet_id": current_spreadsheet_id,
    }

    def __init__(
        self,
        request_id: Optional[str] = None,
        card_id: Optional[str] = None,
        spreadsheet_id: Optional[str] = None,
    ):
        self.values = {
            "request_id": request_id,
            "card_id": card_id,
            "spreadsheet_id": spreadsheet_id,
        }
        self._tokens = {}

    def __enter__(self):
        for name, value in self.values.items():
            if value:
                self._tokens[name] = self._VARS[name].set(value)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        for name, token in self._tokens.items():
            self._VARS[name].reset(token)
        self._tokens = {}
        return False
