"""Main FastAPI application for the Dayplan backend."""
from fastapi import FastAPI, Request

from dayplan.api.routes.commitments import router as commitments_router
from dayplan.api.routes.plans import router as plans_router
from dayplan.core.config import settings
from dayplan.core.logging import configure_logging
from dayplan.core.middleware import RequestIDMiddleware
from dayplan.observability.client import init_opik
from dayplan.observability.tracing import trace

configure_logging(log_level=settings.log_level)

app = FastAPI(title=settings.app_name, version="0.1.0")
app.add_middleware(RequestIDMiddleware)
app.include_router(plans_router)
app.include_router(commitments_router)


@app.on_event("startup")
async def startup_observability() -> None:
    """Initialize observability backends after the event loop starts."""
    init_opik()


@app.get("/health", tags=["health"], summary="Readiness probe")
async def health_check(request: Request) -> dict[str, str]:
    """Return a simple status payload so automation can probe the API."""
    with trace("http.health_check", metadata={"route": "/health"}, request_id=request.state.request_id):
        return {"status": "ok"}
