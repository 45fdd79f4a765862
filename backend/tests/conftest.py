"""Shared fixtures describing a typical Monday."""
from __future__ import annotations

import datetime as dt

import pytest

from dayplan.api.schemas.plan import (
    DailyInput,
    GymSettings,
    Habit,
    Task,
    UserPreferences,
)

PLAN_DATE = dt.date(2024, 1, 15)


@pytest.fixture()
def day_before() -> dt.datetime:
    """A current time on the previous evening, so the plan is not for today."""
    return dt.datetime(2024, 1, 14, 20, 0)


@pytest.fixture()
def daily_input() -> DailyInput:
    return DailyInput(
        date=PLAN_DATE,
        timezone="America/New_York",
        sleep={"start": "23:30", "end": "07:30"},
        fixed_events=[
            {"title": "Work", "start": "09:30", "end": "18:00", "type": "work"},
            {"title": "Dinner", "start": "19:00", "end": "20:00", "type": "meal"},
        ],
        constraints={"buffers_between_blocks_min": 10, "protect_downtime_min": 30},
    )


@pytest.fixture()
def habits() -> list[Habit]:
    return [
        Habit(
            id="habit-1",
            name="Morning Meditation",
            duration=15,
            frequency="daily",
            preferred_time_window="morning",
            priority=3,
            flexibility="flexible",
            energy_level="low",
            category="health",
        ),
        Habit(
            id="habit-2",
            name="Evening Reading",
            duration=30,
            frequency="daily",
            preferred_time_window="evening",
            priority=2,
            flexibility="flexible",
            energy_level="low",
            category="learning",
        ),
    ]


@pytest.fixture()
def tasks() -> list[Task]:
    return [
        Task(
            id="task-1",
            title="Review emails",
            estimated_duration=30,
            priority=3,
            category="work",
            energy_level="medium",
            time_window_preference="morning",
        )
    ]


@pytest.fixture()
def gym_settings() -> GymSettings:
    return GymSettings(
        enabled=True,
        preferred_window="after-work",
        default_duration=60,
        minimum_duration=20,
        bedtime_buffer=120,
    )


@pytest.fixture()
def preferences() -> UserPreferences:
    return UserPreferences(timezone="America/New_York")
