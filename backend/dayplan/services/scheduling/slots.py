"""Free-interval bookkeeping for a single plan day."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from dayplan.api.schemas.plan import DailyInput, FixedEvent, ScheduledBlock
from dayplan.services.scheduling.clock import MINUTES_PER_DAY, span, to_clock, to_minutes

logger = logging.getLogger(__name__)


@dataclass
class TimeSlot:
    start: int
    end: int

    @property
    def duration(self) -> int:
        return self.end - self.start

    def __repr__(self) -> str:
        return f"TimeSlot({to_clock(self.start)}-{to_clock(self.end)})"


def awake_window(daily_input: DailyInput) -> Tuple[int, int]:
    """Return (wake, sleep_start) with sleep_start pushed past midnight when needed."""
    wake = to_minutes(daily_input.sleep.end)
    sleep_start = to_minutes(daily_input.sleep.start)
    if sleep_start <= wake:
        sleep_start += MINUTES_PER_DAY
    return wake, sleep_start


def day_end(daily_input: DailyInput) -> int:
    """Last usable minute of the plan day; never later than midnight."""
    return min(awake_window(daily_input)[1], MINUTES_PER_DAY)


def availability_start(
    daily_input: DailyInput,
    now_minutes: Optional[int],
    buffer_from_now: int,
) -> int:
    """
    First minute new blocks may use.

    ``now_minutes`` is only given when the plan date is today in the plan's
    timezone; otherwise the day starts at wake time.
    """
    wake, _ = awake_window(daily_input)
    if now_minutes is None or now_minutes <= wake:
        return wake
    return max(wake, now_minutes + buffer_from_now)


def calculate_available_slots(daily_input: DailyInput, not_before: int) -> List[TimeSlot]:
    """Carve fixed events (plus buffers) out of the awake window."""
    buffer = daily_input.constraints.buffers_between_blocks_min
    wake, _ = awake_window(daily_input)
    end_of_day = day_end(daily_input)
    cursor = max(wake, not_before)

    slots: List[TimeSlot] = []
    events = sorted(daily_input.fixed_events, key=lambda event: span(event.start, event.end))
    for event in events:
        event_start, event_end = span(event.start, event.end)
        busy_start = event_start - buffer
        busy_end = event_end + buffer
        slots.append(TimeSlot(cursor, min(busy_start, end_of_day)))
        cursor = max(cursor, busy_end)
    slots.append(TimeSlot(cursor, end_of_day))

    kept = [slot for slot in slots if slot.duration > 0 and slot.duration >= 2 * buffer]
    logger.debug("Initial free slots: %s", kept)
    return kept


def remove_interval(slots: List[TimeSlot], start: int, end: int, buffer: int) -> None:
    """
    Remove ``[start, end)`` from ``slots`` in place.

    Overlapping slots are trimmed, split or dropped; any fragment shorter than
    twice the buffer is discarded and the list stays sorted by start.
    """
    if end <= start:
        return
    minimum = max(1, 2 * buffer)
    remaining: List[TimeSlot] = []
    for slot in slots:
        if slot.end <= start or slot.start >= end:
            remaining.append(slot)
            continue
        before = TimeSlot(slot.start, start)
        after = TimeSlot(end, slot.end)
        for fragment in (before, after):
            if fragment.duration >= minimum:
                remaining.append(fragment)
    slots[:] = sorted(remaining, key=lambda slot: slot.start)


def reserve_downtime(slots: List[TimeSlot], daily_input: DailyInput) -> int:
    """Protect the minutes right before sleep and return where downtime begins."""
    _, sleep_start = awake_window(daily_input)
    downtime = daily_input.constraints.protect_downtime_min
    downtime_start = sleep_start - downtime
    if downtime > 0:
        remove_interval(
            slots,
            downtime_start,
            sleep_start,
            daily_input.constraints.buffers_between_blocks_min,
        )
    return downtime_start


def fixed_event_block(event: FixedEvent) -> ScheduledBlock:
    """Locked block mirroring a fixed event verbatim."""
    block_type = event.type if event.type in ("work", "meal") else "other"
    notes = [event.type] if event.type in ("appointment", "call") else []
    if event.location:
        notes.append(event.location)
    return ScheduledBlock(
        id=f"fixed-{event.title}-{event.start}",
        title=event.title,
        start=event.start,
        end=event.end,
        type=block_type,
        locked=True,
        notes=" @ ".join(notes) or None,
    )
