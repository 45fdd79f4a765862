"""Daily plan generation API routes."""
from __future__ import annotations

from time import perf_counter
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request, status

from dayplan.api.schemas.plan import PlanRequest, PlanResponse
from dayplan.core.config import get_settings
from dayplan.observability.metrics import log_metric, log_plan_metrics
from dayplan.observability.tracing import annotate, trace
from dayplan.services.scheduling.engine import EngineConfig, generate_plan

router = APIRouter()


@router.post("/plans/generate", response_model=PlanResponse, tags=["plans"])
def generate_daily_plan(request: PlanRequest, http_request: Request) -> PlanResponse:
    """Run the scheduling engine over the submitted day and return the plan."""
    request_id = getattr(http_request.state, "request_id", None) or ""
    daily_input = request.daily_input

    base_metadata: Dict[str, Any] = {
        "route": "/plans/generate",
        "date": daily_input.date.isoformat(),
        "timezone": daily_input.timezone,
        "habits": len(request.habits),
        "tasks": len(request.tasks),
        "fixed_events": len(daily_input.fixed_events),
        "gym_enabled": request.gym_settings.enabled,
    }

    with trace("plan.generate", metadata=base_metadata, request_id=request_id) as span:
        started = perf_counter()
        try:
            plan = generate_plan(
                daily_input,
                request.habits,
                request.tasks,
                request.gym_settings,
                request.user_preferences,
                current_time=request.current_time,
                config=EngineConfig.from_settings(get_settings()),
            )
        except ValueError as exc:
            log_metric("plan.generate.success", 0, metadata={"date": base_metadata["date"]})
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
        latency_ms = (perf_counter() - started) * 1000

        annotate(
            span,
            {
                **base_metadata,
                "blocks": len(plan.blocks),
                "unscheduled": len(plan.unscheduled),
                "late_night": plan.is_late_night_mode,
            },
        )
        log_metric("plan.generate.success", 1, metadata={"date": base_metadata["date"]})
        log_plan_metrics(plan, latency_ms)

    return PlanResponse(plan=plan, request_id=request_id)
