"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger.json import JsonFormatter

from canteen_gateway.config import settings
from canteen_gateway.domain.models import BatchRunSummary


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


def log_batch_run(run_id: str, summary: BatchRunSummary, duration_ms: float) -> None:
    """Log one batch pass summary for analysis"""
    logging.getLogger("canteen_gateway.auto_orders").info(
        "Auto-order batch completed",
        extra={
            "run_id": run_id,
            "step": "batch_complete",
            "success": summary.success,
            "local_time": summary.time,
            "local_day": summary.day,
            "local_date": summary.date,
            "candidates": summary.candidates,
            "skipped": summary.skipped,
            "processed": summary.processed,
            "succeeded": summary.succeeded,
            "failed": summary.failed,
            "errors": summary.errors,
            "duration_ms": duration_ms,
        },
    )
