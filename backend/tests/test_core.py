"""Tests for configuration, logging context and the Opik client guard."""
from __future__ import annotations

import logging

from dayplan.core import config as config_module
from dayplan.core.context import get_plan_date, plan_scope, request_id_ctx_var
from dayplan.core.logging import PlanContextFilter
from dayplan.observability import client as client_module


def _record() -> logging.LogRecord:
    return logging.LogRecord("dayplan.test", logging.INFO, __file__, 1, "hello", None, None)


def test_settings_defaults(monkeypatch) -> None:
    monkeypatch.delenv("LATE_NIGHT_HOUR", raising=False)
    settings = config_module.Settings()

    assert settings.buffer_from_now_min == 15
    assert settings.late_night_hour == 21
    assert settings.evening_review_offset_min == 5
    assert settings.opik_enabled is False


def test_settings_read_environment(monkeypatch) -> None:
    monkeypatch.setenv("LATE_NIGHT_HOUR", "22")
    monkeypatch.setenv("BUFFER_FROM_NOW_MIN", "30")

    settings = config_module.Settings()

    assert settings.late_night_hour == 22
    assert settings.buffer_from_now_min == 30


def test_get_settings_is_cached() -> None:
    assert config_module.get_settings() is config_module.get_settings()


def test_filter_tags_request_and_plan_date() -> None:
    record = _record()
    token = request_id_ctx_var.set("req-42")
    try:
        with plan_scope("2024-01-15"):
            PlanContextFilter().filter(record)
    finally:
        request_id_ctx_var.reset(token)

    assert record.request_id == "req-42"
    assert record.plan_date == "2024-01-15"


def test_filter_defaults_outside_a_plan() -> None:
    record = _record()

    PlanContextFilter().filter(record)

    assert record.request_id == "-"
    assert record.plan_date == "-"
    assert get_plan_date() is None


def test_init_opik_skips_without_api_key(monkeypatch) -> None:
    client_module.reset_opik()
    settings = config_module.Settings(opik_enabled=True, opik_api_key=None)

    assert client_module.init_opik(settings) is None
    client_module.reset_opik()


def test_init_opik_builds_client_once(monkeypatch) -> None:
    created = []

    class _FakeOpik:
        def __init__(self, **kwargs):
            created.append(kwargs)

    client_module.reset_opik()
    monkeypatch.setattr(client_module, "Opik", _FakeOpik)
    settings = config_module.Settings(opik_enabled=True, opik_api_key="key", opik_project="dayplan-test")

    first = client_module.init_opik(settings)
    second = client_module.init_opik(settings)

    assert first is second
    assert created == [{"project_name": "dayplan-test", "api_key": "key"}]
    client_module.reset_opik()
