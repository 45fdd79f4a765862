"""Clock arithmetic and time-of-day tables shared by the scheduler.

Times inside the engine are integer minutes from midnight of the plan date.
Values past 24:00 only occur for ranges that cross midnight; ``to_clock``
folds them back into a 24-hour ``HH:MM`` string.
"""
from __future__ import annotations

import re
from typing import Dict, Optional, Tuple

MINUTES_PER_DAY = 24 * 60

CLOCK_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")

# Start-hour ranges [lo, hi) for named windows.
TIME_WINDOWS: Dict[str, Tuple[int, int]] = {
    "morning": (5, 12),
    "afternoon": (12, 18),
    "evening": (18, 23),
    "night": (21, 24),
}

# Expected energy by hour of day; unlisted hours are low.
ENERGY_BY_HOUR: Dict[int, str] = {
    6: "medium",
    7: "medium",
    8: "high",
    9: "high",
    10: "high",
    11: "high",
    12: "medium",
    13: "low",
    14: "low",
    15: "medium",
    16: "medium",
    17: "medium",
    18: "medium",
}

ENERGY_RANK = {"low": 0, "medium": 1, "high": 2}


def normalize_clock(value: str) -> str:
    """Validate an ``H:MM``/``HH:MM`` string and return it zero-padded."""
    match = CLOCK_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"expected a 24-hour HH:MM time, got {value!r}")
    return f"{int(match.group(1)):02d}:{match.group(2)}"


def to_minutes(clock: str) -> int:
    hours, minutes = clock.split(":")
    return int(hours) * 60 + int(minutes)


def to_clock(minutes: int) -> str:
    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def span(start: str, end: str) -> Tuple[int, int]:
    """Return (start, end) minutes, pushing the end past midnight when it wraps."""
    start_min = to_minutes(start)
    end_min = to_minutes(end)
    if end_min <= start_min:
        end_min += MINUTES_PER_DAY
    return start_min, end_min


def hour_of(minutes: int) -> int:
    return (minutes // 60) % 24


def window_minutes(window: str) -> Optional[Tuple[int, int]]:
    """Minute range [lo, hi) in which a block may start for a named window."""
    hours = TIME_WINDOWS.get(window)
    if hours is None:
        return None
    return hours[0] * 60, hours[1] * 60


def in_window(hour: int, window: str) -> bool:
    hours = TIME_WINDOWS.get(window)
    return hours is not None and hours[0] <= hour < hours[1]


def energy_at(hour: int) -> str:
    return ENERGY_BY_HOUR.get(hour, "low")
