"""Per-request and per-plan context utilities used to tag log records."""
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)
plan_date_ctx_var: ContextVar[str | None] = ContextVar("plan_date", default=None)


def get_request_id() -> str | None:
    """Return the current request id if available."""
    return request_id_ctx_var.get()


def get_plan_date() -> str | None:
    """Return the ISO date of the plan currently being generated, if any."""
    return plan_date_ctx_var.get()


@contextmanager
def plan_scope(plan_date: str) -> Iterator[None]:
    """Tag every log record emitted inside the block with ``plan_date``."""
    token = plan_date_ctx_var.set(plan_date)
    try:
        yield
    finally:
        plan_date_ctx_var.reset(token)
