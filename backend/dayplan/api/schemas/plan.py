"""Schemas for daily plan generation."""
from __future__ import annotations

import datetime as dt
from typing import Dict, List, Literal, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator, model_validator

from dayplan.services.scheduling.clock import normalize_clock, span

EnergyLevel = Literal["low", "medium", "high"]
FixedEventType = Literal["work", "meal", "appointment", "call", "other"]
BlockType = Literal["work", "gym", "habit", "task", "meal", "break", "sleep", "other"]
Frequency = Literal["daily", "weekly", "specific-days", "x-times-per-week"]
HabitWindow = Literal["morning", "afternoon", "evening", "explicit"]
TaskWindow = Literal["morning", "afternoon", "evening"]
HabitCategory = Literal["health", "learning", "personal", "work", "creative", "social"]
TaskCategory = Literal["life", "admin", "learning", "creative", "work", "health"]


def _validate_timezone(value: str) -> str:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"unknown IANA timezone {value!r}") from exc
    return value


class SleepWindow(BaseModel):
    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def normalize_times(cls, value: str) -> str:
        return normalize_clock(value)


class FixedEvent(BaseModel):
    title: str = Field(..., min_length=1)
    start: str
    end: str
    type: FixedEventType = "other"
    location: Optional[str] = None

    @field_validator("start", "end")
    @classmethod
    def normalize_times(cls, value: str) -> str:
        return normalize_clock(value)

    @model_validator(mode="after")
    def reject_zero_duration(self) -> "FixedEvent":
        if self.start == self.end:
            raise ValueError(f"fixed event {self.title!r} has zero duration")
        return self


class DayConstraints(BaseModel):
    buffers_between_blocks_min: int = Field(10, ge=0, le=120)
    protect_downtime_min: int = Field(30, ge=0, le=240)


class DailyInput(BaseModel):
    date: dt.date
    timezone: str = "UTC"
    sleep: SleepWindow
    fixed_events: List[FixedEvent] = Field(default_factory=list)
    constraints: DayConstraints = Field(default_factory=DayConstraints)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        return _validate_timezone(value)

    @model_validator(mode="after")
    def reject_overlapping_events(self) -> "DailyInput":
        ordered = sorted(self.fixed_events, key=lambda event: span(event.start, event.end))
        for previous, current in zip(ordered, ordered[1:]):
            if span(current.start, current.end)[0] < span(previous.start, previous.end)[1]:
                raise ValueError(f"fixed events {previous.title!r} and {current.title!r} overlap")
        return self


class Habit(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    duration: int = Field(..., gt=0, le=24 * 60)
    frequency: Frequency = "daily"
    specific_days: List[int] = Field(default_factory=list)
    times_per_week: Optional[int] = Field(None, ge=1, le=7)
    preferred_time_window: Optional[HabitWindow] = None
    explicit_start_time: Optional[str] = None
    priority: int = Field(3, ge=1, le=5)
    flexibility: Literal["fixed", "semi-flex", "flexible"] = "flexible"
    minimum_viable_duration: Optional[int] = Field(None, gt=0)
    energy_level: EnergyLevel = "medium"
    category: HabitCategory = "personal"
    is_active: bool = True

    @field_validator("specific_days")
    @classmethod
    def validate_weekdays(cls, value: List[int]) -> List[int]:
        if any(day < 0 or day > 6 for day in value):
            raise ValueError("specific_days entries must be 0 (Sunday) through 6 (Saturday)")
        return value

    @field_validator("explicit_start_time")
    @classmethod
    def normalize_explicit_start(cls, value: Optional[str]) -> Optional[str]:
        return normalize_clock(value) if value is not None else None


class Task(BaseModel):
    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    estimated_duration: int = Field(..., gt=0, le=24 * 60)
    due_date: Optional[dt.date] = None
    priority: int = Field(3, ge=1, le=5)
    category: TaskCategory = "life"
    energy_level: EnergyLevel = "medium"
    time_window_preference: Optional[TaskWindow] = None
    is_splittable: bool = False
    chunk_size: Optional[int] = Field(None, gt=0)
    dependencies: List[str] = Field(default_factory=list)
    is_completed: bool = False
    is_active: bool = True


class GymSettings(BaseModel):
    enabled: bool = True
    frequency: int = Field(3, ge=0, le=7)
    default_duration: int = Field(60, gt=0)
    minimum_duration: int = Field(30, gt=0)
    preferred_window: Literal["after-work", "morning", "evening"] = "after-work"
    bedtime_buffer: int = Field(120, ge=0)
    warmup_duration: int = Field(5, ge=0)
    cooldown_duration: int = Field(5, ge=0)

    @model_validator(mode="after")
    def minimum_fits_default(self) -> "GymSettings":
        if self.minimum_duration > self.default_duration:
            raise ValueError("minimum_duration cannot exceed default_duration")
        return self


class NotificationPreferences(BaseModel):
    enabled: bool = False
    reminder_minutes: int = Field(15, ge=0)
    completion_check_minutes: int = Field(30, ge=0)


class UserPreferences(BaseModel):
    timezone: str = "UTC"
    default_sleep_start: str = "23:00"
    default_sleep_end: str = "07:00"
    default_buffers: int = Field(10, ge=0)
    default_downtime_protection: int = Field(30, ge=0)
    theme: Literal["light", "dark", "system"] = "system"
    notifications: NotificationPreferences = Field(default_factory=NotificationPreferences)

    @field_validator("default_sleep_start", "default_sleep_end")
    @classmethod
    def normalize_times(cls, value: str) -> str:
        return normalize_clock(value)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        return _validate_timezone(value)


class ScheduledBlock(BaseModel):
    id: str
    title: str
    start: str
    end: str
    type: BlockType
    locked: bool = False
    completed: bool = False
    source_id: Optional[str] = None
    energy_level: Optional[EnergyLevel] = None
    original_duration: Optional[int] = None
    notes: Optional[str] = None


class UnscheduledItem(BaseModel):
    title: str
    reason: str
    source_id: Optional[str] = None
    priority: Optional[int] = None


class PlanStats(BaseModel):
    work_hours: float = 0.0
    gym_minutes: int = 0
    habits_completed: int = 0
    tasks_completed: int = 0
    focus_blocks: int = 0
    free_time_remaining: int = 0
    energy_distribution: Dict[str, int] = Field(
        default_factory=lambda: {"low": 0, "medium": 0, "high": 0}
    )


class PlanOutput(BaseModel):
    date: dt.date
    blocks: List[ScheduledBlock]
    unscheduled: List[UnscheduledItem]
    explanation: str
    stats: PlanStats
    next_day_suggestions: List[str] = Field(default_factory=list)
    generated_at: dt.datetime
    timezone: str
    is_late_night_mode: bool = False


class PlanRequest(BaseModel):
    daily_input: DailyInput
    habits: List[Habit] = Field(default_factory=list)
    tasks: List[Task] = Field(default_factory=list)
    gym_settings: GymSettings = Field(default_factory=lambda: GymSettings(enabled=False))
    user_preferences: UserPreferences = Field(default_factory=UserPreferences)
    current_time: Optional[dt.datetime] = None


class PlanResponse(BaseModel):
    plan: PlanOutput
    request_id: str
