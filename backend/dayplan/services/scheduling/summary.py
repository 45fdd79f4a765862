"""Stats, explanation text and next-day suggestions for a finished plan."""
from __future__ import annotations

from typing import Dict, List, Sequence

from dayplan.api.schemas.plan import DailyInput, PlanStats, ScheduledBlock, UnscheduledItem
from dayplan.services.scheduling.clock import span
from dayplan.services.scheduling.slots import awake_window

HIGH_PRIORITY = 4
HEAVY_BACKLOG = 3


def block_minutes(block: ScheduledBlock) -> int:
    start, end = span(block.start, block.end)
    return end - start


def energy_distribution(blocks: Sequence[ScheduledBlock]) -> Dict[str, int]:
    """Percentage of movable minutes at each energy level."""
    totals = {"low": 0, "medium": 0, "high": 0}
    for block in blocks:
        if block.locked or not block.energy_level:
            continue
        totals[block.energy_level] += block_minutes(block)
    overall = sum(totals.values())
    if not overall:
        return totals
    return {level: round(100 * minutes / overall) for level, minutes in totals.items()}


def calculate_stats(blocks: Sequence[ScheduledBlock], daily_input: DailyInput) -> PlanStats:
    work_minutes = sum(block_minutes(block) for block in blocks if block.type == "work")
    gym_minutes = sum(block_minutes(block) for block in blocks if block.type == "gym")
    task_blocks = [block for block in blocks if block.type == "task"]

    wake, sleep_start = awake_window(daily_input)
    scheduled = sum(block_minutes(block) for block in blocks)

    return PlanStats(
        work_hours=round(work_minutes / 60, 1),
        gym_minutes=gym_minutes,
        habits_completed=sum(1 for block in blocks if block.type == "habit"),
        tasks_completed=len(task_blocks),
        focus_blocks=sum(1 for block in task_blocks if block.energy_level == "high"),
        free_time_remaining=max(0, (sleep_start - wake) - scheduled),
        energy_distribution=energy_distribution(blocks),
    )


def build_explanation(
    blocks: Sequence[ScheduledBlock],
    unscheduled: Sequence[UnscheduledItem],
    daily_input: DailyInput,
) -> str:
    gym = next((block for block in blocks if block.type == "gym"), None)
    habits = [block.title for block in blocks if block.type == "habit"]
    tasks = [block.title for block in blocks if block.type == "task"]

    parts: List[str] = []
    if gym:
        parts.append(f"Gym scheduled at {gym.start}-{gym.end} in the best available slot")
    if habits:
        parts.append(f"{len(habits)} habit(s) placed in preferred windows ({', '.join(habits)})")
    if tasks:
        parts.append(f"{len(tasks)} task(s) ordered by urgency and energy ({', '.join(tasks)})")
    parts.append(
        f"kept {daily_input.constraints.buffers_between_blocks_min} min buffers between blocks"
    )
    if daily_input.constraints.protect_downtime_min:
        parts.append(
            f"protected {daily_input.constraints.protect_downtime_min} min of downtime before sleep"
        )

    explanation = "Schedule built around your fixed commitments: " + "; ".join(parts) + "."
    if unscheduled:
        explanation += f" {len(unscheduled)} item(s) could not be scheduled."
    return explanation


def next_day_suggestions(unscheduled: Sequence[UnscheduledItem]) -> List[str]:
    suggestions: List[str] = []
    carry_over = [item.title for item in unscheduled if (item.priority or 0) >= HIGH_PRIORITY]
    if carry_over:
        suggestions.append(f"Carry over high-priority items first tomorrow: {', '.join(carry_over)}")
    if len(unscheduled) >= HEAVY_BACKLOG:
        suggestions.append("Consider moving some tasks to tomorrow to ensure quality completion")
    if unscheduled:
        suggestions.append("Review task priorities and deadlines for better planning")
    suggestions.append("Maintain consistent gym schedule for optimal results")
    return suggestions
