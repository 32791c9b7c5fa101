"""
PrintQuote - Structured Logging Configuration

JSON logs for aggregation (text in development), plus a separate audit
log for events that change what a customer is charged.

Usage:
    from printquote.logging_config import get_logger, audit_log, log_fallback

    logger = get_logger(__name__)
    logger.info("Order priced", extra={"item_count": 3, "total": "33.75"})

    # A table lookup answered with a default value
    log_fallback(logger, FallbackKind.DENSITY, "Material not in density table", material_type="pom")

    # A priced order was stored
    audit_log("ORDER_CREATED", resource_type="print_order", resource_id="PO-2026-001")
"""
import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from printquote.core.settings import settings


AUDIT_LOGGER_NAME = "audit"

# Attributes every LogRecord carries; anything else came in through `extra`
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "taskName"}


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}


def _json_safe(value: Any) -> Any:
    """Decimal prices, enums and the like are logged as strings"""
    if isinstance(value, Enum):
        return value.value
    try:
        json.dumps(value)
        return value
    except (TypeError, ValueError):
        return str(value)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line:

        {"timestamp": "...", "level": "WARNING", "service": "PrintQuote",
         "logger": "printquote.services.estimation_service",
         "message": "Layer height not in speed table, using default speed",
         "fallback": "print_speed", "layer_height": "0.25", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": _utc_timestamp(),
            "level": record.levelname,
            "service": settings.PROJECT_NAME,
            "environment": settings.ENVIRONMENT,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.levelno >= logging.ERROR:
            entry["location"] = f"{record.pathname}:{record.lineno} in {record.funcName}"
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        for key, value in _extra_fields(record).items():
            entry[key] = _json_safe(value)

        return json.dumps(entry)


class TextFormatter(logging.Formatter):
    """
    Single-line text for local development:

        2026-01-01 12:00:00 [INFO] printquote.services.order_pricing_service: Order priced total=33.75
    """

    def format(self, record: logging.LogRecord) -> str:
        line = (
            f"{datetime.now():%Y-%m-%d %H:%M:%S} [{record.levelname}] "
            f"{record.name}: {record.getMessage()}"
        )
        extras = " ".join(f"{key}={_json_safe(value)}" for key, value in _extra_fields(record).items())
        if extras:
            line = f"{line} {extras}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class AuditFormatter(logging.Formatter):
    """Audit entries: timestamp, event, the order it concerns and event details"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": _utc_timestamp(),
            "service": settings.PROJECT_NAME,
            "event": getattr(record, "event", record.getMessage()),
            "resource_type": getattr(record, "resource_type", None),
            "resource_id": getattr(record, "resource_id", None),
            "details": getattr(record, "details", {}),
        }
        return json.dumps({k: v for k, v in entry.items() if v is not None}, default=str)


def _rotating_handler(path: str, formatter: logging.Formatter, max_mb: int, backups: int) -> logging.Handler:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(path, maxBytes=max_mb * 1024 * 1024, backupCount=backups)
    handler.setFormatter(formatter)
    return handler


def setup_logging() -> None:
    """
    Configure the root and audit loggers from settings.

    Call once at application startup. Calling again replaces the handlers.
    """
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    formatter = JSONFormatter() if settings.LOG_FORMAT == "json" else TextFormatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if settings.LOG_FILE:
        root_logger.addHandler(_rotating_handler(settings.LOG_FILE, formatter, max_mb=10, backups=5))

    setup_audit_logging()

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def setup_audit_logging() -> None:
    """Audit events go to their own file and never reach the root logger"""
    audit_logger = logging.getLogger(AUDIT_LOGGER_NAME)
    audit_logger.setLevel(logging.INFO)
    audit_logger.handlers.clear()
    audit_logger.propagate = False

    if settings.AUDIT_LOG_FILE:
        audit_logger.addHandler(
            _rotating_handler(settings.AUDIT_LOG_FILE, AuditFormatter(), max_mb=50, backups=10)
        )

    if settings.DEBUG:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(AuditFormatter())
        audit_logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    """Module logger; use as get_logger(__name__)"""
    return logging.getLogger(name)


def log_fallback(logger: logging.Logger, kind: Enum, message: str, **fields: Any) -> None:
    """
    Warn that a pricing lookup missed and a default value was used.

    `kind` is recorded as the `fallback` field so misses of one kind can be
    counted across requests.
    """
    logger.warning(message, extra={"fallback": kind.value, **fields})


def audit_log(
    event: str,
    *,
    resource_type: Optional[str] = None,
    resource_id: Optional[Any] = None,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Record an event that affects what a customer is charged.

    Events:
        ORDER_CREATED: a priced order was stored
        ORDER_REPRICED: an order line was repriced and the new values saved
        LEGACY_VOLUME_FALLBACK: a stored order had to be priced from the
            hardcoded fallback volume

    Args:
        event: Event name
        resource_type: Type of resource affected (e.g., "print_order")
        resource_id: Order number or order line id
        details: Event-specific data
    """
    logging.getLogger(AUDIT_LOGGER_NAME).info(
        event,
        extra={
            "event": event,
            "resource_type": resource_type,
            "resource_id": resource_id,
            "details": details or {},
        },
    )
