"""Hard filters and slot scoring for queued habits and tasks."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from dayplan.api.schemas.plan import ScheduledBlock
from dayplan.services.scheduling.clock import (
    ENERGY_RANK,
    MINUTES_PER_DAY,
    energy_at,
    hour_of,
    in_window,
    to_clock,
    window_minutes,
)
from dayplan.services.scheduling.queue import QueueItem, days_until_due
from dayplan.services.scheduling.slots import TimeSlot
from dayplan.services.scheduling.state import PlanningContext

logger = logging.getLogger(__name__)

NO_SLOT_REASON = "No available time slot with sufficient duration"
EXPLICIT_TOLERANCE_MIN = 60
LATE_NIGHT_HOUR = 22

TITLE_WINDOW_PATTERN = re.compile(r"\b(morning|afternoon|evening|night)\b", re.IGNORECASE)

# Opening hours (open, close) implied by words in a title.
BUSINESS_HOURS: List[Tuple[re.Pattern[str], Tuple[int, int]]] = [
    (re.compile(r"\b(errands?|shopping|groceries|grocery)\b", re.IGNORECASE), (8 * 60, 20 * 60)),
    (re.compile(r"\b(bank|clinic)\b", re.IGNORECASE), (9 * 60, 16 * 60)),
    (re.compile(r"\b(call|meeting)\b", re.IGNORECASE), (8 * 60, 18 * 60)),
]


@dataclass
class StartWindow:
    lo: int = 0
    hi: int = MINUTES_PER_DAY
    end_limit: Optional[int] = None

    def restrict(self, lo: int, hi: int) -> None:
        self.lo = max(self.lo, lo)
        self.hi = min(self.hi, hi)


@dataclass
class Placement:
    block: Optional[ScheduledBlock] = None
    reason: Optional[str] = None


def title_window(title: str) -> Optional[str]:
    match = TITLE_WINDOW_PATTERN.search(title)
    return match.group(1).lower() if match else None


def start_window(item: QueueItem) -> StartWindow:
    """Combine every hard time-of-day rule that applies to ``item``."""
    window = StartWindow()

    tagged = title_window(item.title)
    if tagged:
        lo, hi = window_minutes(tagged)
        window.restrict(lo, hi - 1)

    if item.explicit_start is not None:
        window.restrict(
            item.explicit_start - EXPLICIT_TOLERANCE_MIN,
            item.explicit_start + EXPLICIT_TOLERANCE_MIN,
        )
    elif item.flexibility == "fixed" and item.preferred_window:
        bounds = window_minutes(item.preferred_window)
        if bounds:
            window.restrict(bounds[0], bounds[1] - 1)

    for pattern, (opens, closes) in BUSINESS_HOURS:
        if pattern.search(item.title):
            window.lo = max(window.lo, opens)
            window.end_limit = closes if window.end_limit is None else min(window.end_limit, closes)
    return window


def candidate_start(
    slot: TimeSlot,
    item: QueueItem,
    window: StartWindow,
    earliest: int,
    buffer: int,
) -> Optional[int]:
    """Earliest start inside ``slot`` that clears every hard filter, or None."""
    lo = max(slot.start, window.lo, earliest)
    latest = slot.end - item.minimum_duration - buffer
    if window.end_limit is not None:
        latest = min(latest, window.end_limit - item.minimum_duration)
    hi = min(latest, window.hi)
    if lo > hi:
        return None
    if item.explicit_start is not None:
        return min(max(item.explicit_start, lo), hi)
    return lo


def score_candidate(
    item: QueueItem,
    start: int,
    slot: TimeSlot,
    ctx: PlanningContext,
) -> float:
    score = 0.0
    hour = hour_of(start)
    available = slot.end - start

    if item.explicit_start is not None:
        diff = abs(start - item.explicit_start)
        if diff <= 15:
            score += 30
        elif diff <= 30:
            score += 20
        elif diff <= 60:
            score += 10
        else:
            score -= 30
    elif item.preferred_window and window_minutes(item.preferred_window):
        score += 30 if in_window(hour, item.preferred_window) else -30

    slot_energy = energy_at(hour)
    if item.energy_level == slot_energy:
        score += 25
    elif item.energy_level == "high" and slot_energy == "low":
        score -= 25
    elif abs(ENERGY_RANK[item.energy_level] - ENERGY_RANK[slot_energy]) == 1:
        score += 12.5

    ratio = available / item.duration
    if ratio <= 1.3:
        score += 20
    elif ratio <= 2.0:
        score += 10
    elif ratio > 3.0:
        score -= 5

    if ctx.last_category is not None and ctx.last_category == item.category:
        score += 15

    if available - item.duration >= 2 * ctx.buffer:
        score += 10

    days = days_until_due(item.due_date, ctx.plan_date)
    if days is not None:
        if days < 0:
            score += 50
        elif days == 0:
            score += 30
        elif days <= 2:
            score += 15

    if hour >= LATE_NIGHT_HOUR:
        score += 5 if title_window(item.title) == "night" else -30

    score += max(0, 15 - hour)
    return score


def place_item(ctx: PlanningContext, item: QueueItem) -> Placement:
    """Place one queued item into the best free slot and claim it."""
    missing = [dep for dep in item.dependencies if dep not in ctx.scheduled_ends]
    if missing:
        return Placement(reason=f"Dependencies not met: {', '.join(missing)}")
    earliest = max((ctx.scheduled_ends[dep] for dep in item.dependencies), default=0)

    window = start_window(item)
    best: Optional[Tuple[float, int, TimeSlot]] = None
    for slot in ctx.slots:
        start = candidate_start(slot, item, window, earliest, ctx.buffer)
        if start is None:
            continue
        score = score_candidate(item, start, slot, ctx)
        if best is None or score > best[0]:
            best = (score, start, slot)

    if best is None:
        return Placement(reason=NO_SLOT_REASON)

    score, start, slot = best
    duration = min(item.duration, slot.end - start - ctx.buffer)
    if window.end_limit is not None:
        duration = min(duration, window.end_limit - start)
    end = start + duration

    ctx.claim(start, end)
    ctx.scheduled_ends[item.source_id] = end
    ctx.last_category = item.category
    logger.debug(
        "Placed %s %s at %s-%s (score %.1f)",
        item.kind,
        item.source_id,
        to_clock(start),
        to_clock(end),
        score,
    )

    return Placement(
        block=ScheduledBlock(
            id=f"{item.kind}-{item.source_id}",
            title=item.title,
            start=to_clock(start),
            end=to_clock(end),
            type=item.kind,
            source_id=item.source_id,
            energy_level=item.energy_level,
            original_duration=item.duration,
        )
    )
