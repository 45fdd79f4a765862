"""Lightweight metrics helpers."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from dayplan.observability.tracing import trace

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from dayplan.api.schemas.plan import PlanOutput

logger = logging.getLogger(__name__)


def log_metric(name: str, value: float | int, metadata: Optional[Dict[str, Any]] = None) -> None:
    """Record a metric as a short-lived Opik trace; no-op when Opik is disabled."""
    payload: Dict[str, Any] = {"value": value}
    if metadata:
        payload.update(metadata)

    try:
        with trace(f"metric:{name}", metadata=payload):
            pass
    except Exception as exc:  # pragma: no cover - metrics must never break a request
        logger.debug("Unable to record metric %s: %s", name, exc)


def log_plan_metrics(plan: "PlanOutput", latency_ms: float) -> None:
    """Emit the standard set of metrics describing one generated plan."""
    metadata = {"date": plan.date.isoformat(), "late_night": plan.is_late_night_mode}
    movable = [block for block in plan.blocks if not block.locked]
    log_metric("plan.generate.latency_ms", latency_ms, metadata=metadata)
    log_metric("plan.generate.blocks", len(plan.blocks), metadata=metadata)
    log_metric("plan.generate.movable_blocks", len(movable), metadata=metadata)
    log_metric("plan.generate.unscheduled", len(plan.unscheduled), metadata=metadata)
    log_metric("plan.generate.free_minutes", plan.stats.free_time_remaining, metadata=metadata)
