"""Wind-down plan used once it is too late in the day to plan properly."""
from __future__ import annotations

import datetime as dt
import logging
from typing import List, Tuple

from dayplan.api.schemas.plan import DailyInput, PlanOutput, PlanStats, ScheduledBlock
from dayplan.services.scheduling.clock import MINUTES_PER_DAY, span, to_clock
from dayplan.services.scheduling.slots import fixed_event_block

logger = logging.getLogger(__name__)

EVENING_REVIEW_MIN = 15
WIND_DOWN_MIN = 30

LATE_NIGHT_EXPLANATION = (
    "It's late, so instead of a full schedule you get a short evening review "
    "and time to wind down before sleep. Remaining fixed commitments are kept."
)

LATE_NIGHT_SUGGESTIONS = [
    "Plan tomorrow earlier in the day to get a full schedule",
    "Use the evening review to pick tomorrow's top priorities",
    "Keep screens away during wind down for better sleep",
]


def is_late_night(now: dt.datetime, plan_date: dt.date, late_night_hour: int) -> bool:
    """True when the plan is for today and the local hour has reached the cutoff."""
    return now.date() == plan_date and now.hour >= late_night_hour


def _clear_of(start: int, duration: int, locked: List[Tuple[int, int]], buffer: int) -> int:
    """Push ``start`` past every locked interval that ``duration`` plus buffer would touch."""
    for lo, hi in locked:
        if start < hi + buffer and start + duration + buffer > lo:
            start = hi + buffer
    return start


def late_night_plan(
    daily_input: DailyInput,
    now: dt.datetime,
    review_offset_min: int,
) -> PlanOutput:
    now_minutes = now.hour * 60 + now.minute
    buffer = daily_input.constraints.buffers_between_blocks_min
    plan_key = daily_input.date.isoformat()

    kept: List[Tuple[int, ScheduledBlock]] = []
    locked: List[Tuple[int, int]] = []
    for event in daily_input.fixed_events:
        start, end = span(event.start, event.end)
        if start > now_minutes or end > MINUTES_PER_DAY:
            kept.append((start, fixed_event_block(event)))
            locked.append((start, end))
    locked.sort()

    review_start = _clear_of(now_minutes + review_offset_min, EVENING_REVIEW_MIN, locked, buffer)
    review_end = review_start + EVENING_REVIEW_MIN
    wind_down_start = _clear_of(review_end, WIND_DOWN_MIN, locked, buffer)
    wind_down_end = wind_down_start + WIND_DOWN_MIN

    timeline: List[Tuple[int, ScheduledBlock]] = [
        (
            review_start,
            ScheduledBlock(
                id=f"evening-review-{plan_key}",
                title="Evening Review",
                start=to_clock(review_start),
                end=to_clock(review_end),
                type="other",
                energy_level="low",
                original_duration=EVENING_REVIEW_MIN,
                notes="Reflect on today and note tomorrow's priorities",
            ),
        ),
        (
            wind_down_start,
            ScheduledBlock(
                id=f"wind-down-{plan_key}",
                title="Wind Down",
                start=to_clock(wind_down_start),
                end=to_clock(wind_down_end),
                type="break",
                energy_level="low",
                original_duration=WIND_DOWN_MIN,
                notes="Screens off, prepare for sleep",
            ),
        ),
        *kept,
    ]
    timeline.sort(key=lambda entry: entry[0])
    blocks = [block for _, block in timeline]

    logger.info(
        "Late-night mode at %s: %s blocks",
        to_clock(now_minutes),
        len(blocks),
    )
    return PlanOutput(
        date=daily_input.date,
        blocks=blocks,
        unscheduled=[],
        explanation=LATE_NIGHT_EXPLANATION,
        stats=PlanStats(energy_distribution={"low": 100, "medium": 0, "high": 0}),
        next_day_suggestions=list(LATE_NIGHT_SUGGESTIONS),
        generated_at=now,
        timezone=daily_input.timezone,
        is_late_night_mode=True,
    )
