"""Daily plan generation pipeline."""
from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence
from zoneinfo import ZoneInfo

from dayplan.api.schemas.plan import (
    DailyInput,
    GymSettings,
    Habit,
    PlanOutput,
    ScheduledBlock,
    Task,
    UnscheduledItem,
    UserPreferences,
)
from dayplan.core.config import Settings
from dayplan.core.context import plan_scope
from dayplan.services.scheduling.gaps import fill_gaps
from dayplan.services.scheduling.gym import place_gym
from dayplan.services.scheduling.late_night import is_late_night, late_night_plan
from dayplan.services.scheduling.placement import place_item
from dayplan.services.scheduling.queue import build_queue
from dayplan.services.scheduling.slots import (
    availability_start,
    awake_window,
    calculate_available_slots,
    day_end,
    fixed_event_block,
    reserve_downtime,
)
from dayplan.services.scheduling.state import PlanningContext
from dayplan.services.scheduling.summary import build_explanation, calculate_stats, next_day_suggestions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineConfig:
    buffer_from_now_min: int = 15
    late_night_hour: int = 21
    evening_review_offset_min: int = 5

    @classmethod
    def from_settings(cls, config: Settings) -> "EngineConfig":
        return cls(
            buffer_from_now_min=config.buffer_from_now_min,
            late_night_hour=config.late_night_hour,
            evening_review_offset_min=config.evening_review_offset_min,
        )


class SchedulingEngine:
    """
    Turns one day's inputs into a PlanOutput.

    The engine only keeps its inputs; all working state lives in a
    PlanningContext created per ``generate_plan`` call, so the same engine can
    be asked for a plan repeatedly and returns the same answer each time.
    """

    def __init__(
        self,
        daily_input: DailyInput,
        habits: Sequence[Habit],
        tasks: Sequence[Task],
        gym_settings: GymSettings,
        user_preferences: UserPreferences,
        current_time: Optional[dt.datetime] = None,
        config: Optional[EngineConfig] = None,
    ) -> None:
        self.daily_input = daily_input
        self.habits = list(habits)
        self.tasks = list(tasks)
        self.gym_settings = gym_settings
        self.user_preferences = user_preferences
        self.current_time = current_time
        self.config = config or EngineConfig()

    def _local_now(self) -> dt.datetime:
        tz = ZoneInfo(self.daily_input.timezone)
        if self.current_time is None:
            return dt.datetime.now(tz)
        if self.current_time.tzinfo is None:
            return self.current_time.replace(tzinfo=tz)
        return self.current_time.astimezone(tz)

    def generate_plan(self) -> PlanOutput:
        daily_input = self.daily_input
        now = self._local_now()

        with plan_scope(daily_input.date.isoformat()):
            if is_late_night(now, daily_input.date, self.config.late_night_hour):
                return late_night_plan(daily_input, now, self.config.evening_review_offset_min)

            now_minutes = now.hour * 60 + now.minute if now.date() == daily_input.date else None
            not_before = availability_start(daily_input, now_minutes, self.config.buffer_from_now_min)
            slots = calculate_available_slots(daily_input, not_before)
            downtime_start = reserve_downtime(slots, daily_input)
            _, sleep_start = awake_window(daily_input)

            ctx = PlanningContext(
                plan_date=daily_input.date,
                buffer=daily_input.constraints.buffers_between_blocks_min,
                sleep_start=sleep_start,
                slots=slots,
            )
            queue = build_queue(self.habits, self.tasks, daily_input.date)

            blocks: List[ScheduledBlock] = []
            gym_block = place_gym(ctx, self.gym_settings)
            if gym_block:
                blocks.append(gym_block)

            unscheduled: List[UnscheduledItem] = []
            for item in queue:
                placement = place_item(ctx, item)
                if placement.block:
                    blocks.append(placement.block)
                    continue
                unscheduled.append(
                    UnscheduledItem(
                        title=item.title,
                        reason=placement.reason or "",
                        source_id=item.source_id,
                        priority=item.priority,
                    )
                )

            blocks.extend(fixed_event_block(event) for event in daily_input.fixed_events)
            blocks = fill_gaps(
                blocks,
                ctx.buffer,
                not_before,
                min(downtime_start, day_end(daily_input)),
            )

            plan = PlanOutput(
                date=daily_input.date,
                blocks=blocks,
                unscheduled=unscheduled,
                explanation=build_explanation(blocks, unscheduled, daily_input),
                stats=calculate_stats(blocks, daily_input),
                next_day_suggestions=next_day_suggestions(unscheduled),
                generated_at=now,
                timezone=daily_input.timezone,
            )
            logger.info(
                "Generated plan with %s blocks, %s unscheduled",
                len(plan.blocks),
                len(plan.unscheduled),
            )
            return plan


def generate_plan(
    daily_input: DailyInput,
    habits: Sequence[Habit],
    tasks: Sequence[Task],
    gym_settings: GymSettings,
    user_preferences: UserPreferences,
    current_time: Optional[dt.datetime] = None,
    config: Optional[EngineConfig] = None,
) -> PlanOutput:
    """Generate a plan for ``daily_input`` without keeping an engine around."""
    engine = SchedulingEngine(
        daily_input,
        habits,
        tasks,
        gym_settings,
        user_preferences,
        current_time=current_time,
        config=config,
    )
    return engine.generate_plan()
