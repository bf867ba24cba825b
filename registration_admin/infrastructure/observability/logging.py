"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger.json import JsonFormatter

from registration_admin.config import settings


class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_saga_outcome(
    operation: str,
    registration_id: Any,
    outcome: str,
    failed_step: Optional[str],
    duration_ms: float,
    degraded: bool = False,
) -> None:
    """Log structured saga outcome for audit and reconciliation"""
    logging.info(
        "Registration saga completed",
        extra={
            "operation": operation,
            "registration_id": registration_id,
            "step": "saga_complete",
            "outcome": outcome,
            "failed_step": failed_step,
            "degraded": degraded,
            "duration_ms": duration_ms,
        },
    )
