"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from discount_gateway.config import settings

logger = logging.getLogger("discount_gateway")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    root = logging.getLogger()
    root.setLevel(level)

    # Remove existing handlers
    root.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    root.addHandler(handler)


def log_transition(
    entity: str,
    key: Any,
    from_status: Optional[str],
    to_status: str,
    actor: Optional[str],
) -> None:
    """Log a committed status transition"""
    logger.info(
        "Status transition",
        extra={
            "entity": entity,
            "key": str(key),
            "step": "transition",
            "from_status": from_status,
            "to_status": to_status,
            "actor": actor,
        },
    )


def log_integration(
    entity: str,
    key: Any,
    outcome: str,
    detail: Optional[str] = None,
) -> None:
    """Log the outcome of an asynchronous integration step"""
    log = logger.error if outcome == "error" else logger.info
    log(
        "Integration finished",
        extra={
            "entity": entity,
            "key": str(key),
            "step": "integration_complete",
            "outcome": outcome,
            "detail": detail,
        },
    )
