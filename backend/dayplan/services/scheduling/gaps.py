"""Fills leftover gaps between blocks with breaks, focus and personal time."""
from __future__ import annotations

import logging
from typing import List, Tuple

from dayplan.api.schemas.plan import ScheduledBlock
from dayplan.services.scheduling.clock import span, to_clock

logger = logging.getLogger(__name__)

BREAK_MIN = 15
PERSONAL_MIN = 45
FOCUS_MIN = 90
FOCUS_CAP = 60
FOCUS_SHARE = 0.6
REMAINDER_MIN = 20
SHORTEST_BLOCK = 5

# title -> (id prefix, block type, energy level)
FILLER_KINDS = {
    "Break": ("break", "break", "low"),
    "Personal Time": ("personal", "other", "low"),
    "Focus Time": ("focus", "other", "high"),
}


def _plan_fillers(free: int, available: int, buffer: int) -> List[Tuple[str, int]]:
    if free < BREAK_MIN:
        return []
    if free < PERSONAL_MIN:
        return [("Break", available)]
    if free < FOCUS_MIN:
        return [("Personal Time", available)]

    focus = min(FOCUS_CAP, int(FOCUS_SHARE * free))
    fillers = [("Focus Time", focus), ("Break", BREAK_MIN)]
    remainder = available - focus - BREAK_MIN - 2 * buffer
    if remainder >= REMAINDER_MIN:
        fillers.append(("Personal Time", remainder))
    return fillers


def _filler_block(title: str, start: int, end: int) -> ScheduledBlock:
    prefix, block_type, energy = FILLER_KINDS[title]
    return ScheduledBlock(
        id=f"{prefix}-{to_clock(start)}",
        title=title,
        start=to_clock(start),
        end=to_clock(end),
        type=block_type,
        energy_level=energy,
        notes="Auto-filled gap",
    )


def fill_gaps(
    blocks: List[ScheduledBlock],
    buffer: int,
    not_before: int,
    latest_end: int,
) -> List[ScheduledBlock]:
    """
    Return ``blocks`` plus filler blocks for every usable gap, sorted by start.

    Fillers keep ``buffer`` minutes from their neighbours and from each other,
    never start before ``not_before`` and never end after ``latest_end``.
    """
    ordered = sorted(blocks, key=lambda block: span(block.start, block.end))
    fillers: List[ScheduledBlock] = []

    for previous, following in zip(ordered, ordered[1:]):
        if previous.type == "sleep" or following.type == "sleep":
            continue
        prev_end = span(previous.start, previous.end)[1]
        next_start = span(following.start, following.end)[0]

        start = max(prev_end + buffer, not_before)
        limit = min(next_start - buffer, latest_end)
        available = limit - start
        free = available + buffer
        if available <= 0:
            continue

        cursor = start
        for title, length in _plan_fillers(free, available, buffer):
            end = min(cursor + length, limit)
            if end - cursor < SHORTEST_BLOCK:
                break
            fillers.append(_filler_block(title, cursor, end))
            cursor = end + buffer

    if fillers:
        logger.debug("Filled %s gaps: %s", len(fillers), [block.id for block in fillers])
    return sorted(ordered + fillers, key=lambda block: span(block.start, block.end))
