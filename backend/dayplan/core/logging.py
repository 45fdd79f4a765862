"""Centralized logging configuration."""
from __future__ import annotations

import logging
from logging.config import dictConfig

from dayplan.core.context import get_plan_date, get_request_id


class PlanContextFilter(logging.Filter):
    """Add request_id and plan_date attributes to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        record.plan_date = get_plan_date() or "-"
        return True


def configure_logging(*, log_level: str = "INFO") -> None:
    """Configure application logging once at startup."""
    if getattr(configure_logging, "_configured", False):
        return

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(plan_date)s | %(message)s",
                }
            },
            "filters": {
                "plan_context": {
                    "()": "dayplan.core.logging.PlanContextFilter",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "level": log_level,
                    "filters": ["plan_context"],
                }
            },
            "root": {
                "handlers": ["console"],
                "level": log_level,
            },
        }
    )

    logging.getLogger(__name__).debug("Logging configured at %s", log_level)
    setattr(configure_logging, "_configured", True)
