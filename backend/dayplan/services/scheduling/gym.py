"""Places at most one workout block per day."""
from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from dayplan.api.schemas.plan import GymSettings, ScheduledBlock
from dayplan.services.scheduling.clock import hour_of, to_clock
from dayplan.services.scheduling.slots import TimeSlot
from dayplan.services.scheduling.state import PlanningContext

logger = logging.getLogger(__name__)

# (preferred start hours, nearby start hours), both inclusive.
GYM_WINDOWS: Dict[str, Tuple[Tuple[int, int], Tuple[int, int]]] = {
    "after-work": ((17, 20), (15, 21)),
    "morning": ((6, 10), (5, 12)),
    "evening": ((18, 21), (16, 22)),
}


def score_gym_slot(slot: TimeSlot, gym_settings: GymSettings, sleep_start: int) -> float:
    score = 0.0
    hour = hour_of(slot.start)
    preferred, nearby = GYM_WINDOWS[gym_settings.preferred_window]
    if preferred[0] <= hour <= preferred[1]:
        score += 100
    elif nearby[0] <= hour <= nearby[1]:
        score += 50

    if slot.end > sleep_start - gym_settings.bedtime_buffer:
        score -= 50

    score += slot.duration / 10
    return score


def place_gym(ctx: PlanningContext, gym_settings: GymSettings) -> Optional[ScheduledBlock]:
    """Claim the best-scoring slot for a workout, or return None when nothing fits."""
    if not gym_settings.enabled:
        return None

    best_slot: Optional[TimeSlot] = None
    best_score = float("-inf")
    for slot in ctx.slots:
        if slot.duration < gym_settings.minimum_duration + ctx.buffer:
            continue
        score = score_gym_slot(slot, gym_settings, ctx.sleep_start)
        if score > best_score:
            best_slot, best_score = slot, score

    if best_slot is None:
        logger.info("No slot long enough for a %s-minute workout", gym_settings.minimum_duration)
        return None

    start = best_slot.start
    duration = min(gym_settings.default_duration, best_slot.duration - ctx.buffer)
    end = start + duration
    ctx.claim(start, end)
    logger.debug("Gym placed at %s for %s min (score %.1f)", to_clock(start), duration, best_score)

    return ScheduledBlock(
        id=f"gym-{ctx.plan_date.isoformat()}",
        title="Gym Workout",
        start=to_clock(start),
        end=to_clock(end),
        type="gym",
        energy_level="high",
        original_duration=gym_settings.default_duration,
        notes=(
            f"Includes {gym_settings.warmup_duration} min warm-up and "
            f"{gym_settings.cooldown_duration} min cool-down"
        ),
    )
