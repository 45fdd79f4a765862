"""Heuristics for turning a free-text list of commitments into fixed events."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from dayplan.api.schemas.commitments import ParsedScheduleItem, ParsedTextInput

logger = logging.getLogger(__name__)

SEGMENT_SPLIT = re.compile(r";|\n")
COMMITMENT_PATTERN = re.compile(
    r"^(.+?)\s+(\d{1,2}(?::\d{2})?\s*(?:am|pm)?)\s*(?:-|–|to)\s*(\d{1,2}(?::\d{2})?\s*(?:am|pm)?)",
    re.IGNORECASE,
)
TIME_PATTERN = re.compile(r"^(\d{1,2})(?::(\d{2}))?\s*(am|pm)?$", re.IGNORECASE)

TYPE_KEYWORDS = [
    ("work", ["work", "office"]),
    ("meal", ["lunch", "dinner", "breakfast", "meal"]),
    ("call", ["call", "meeting"]),
    ("appointment", ["appointment", "doctor", "dentist"]),
]

NOON = 12 * 60


@dataclass
class ClockReading:
    hour: int
    minute: int
    meridiem: Optional[str]

    def minutes(self, meridiem: Optional[str] = None) -> Optional[int]:
        """Minutes after midnight, or None when the reading is out of range."""
        meridiem = meridiem or self.meridiem
        if self.minute > 59:
            return None
        if meridiem is None:
            return self.hour * 60 + self.minute if self.hour <= 23 else None
        if not 1 <= self.hour <= 12:
            return None
        hour = self.hour % 12
        if meridiem == "pm":
            hour += 12
        return hour * 60 + self.minute


def parse_text_input(text: str) -> ParsedTextInput:
    """Parse ``TITLE START-END`` segments separated by ``;`` or newlines. Never raises."""
    items: List[ParsedScheduleItem] = []
    unmatched: List[str] = []

    segments = [segment.strip() for segment in SEGMENT_SPLIT.split(text or "")]
    for segment in filter(None, segments):
        item = _parse_segment(segment)
        if item is None:
            unmatched.append(segment)
        else:
            items.append(item)

    logger.debug("Parsed %s commitments, %s unmatched segments", len(items), len(unmatched))
    return ParsedTextInput(items=items, unparsed_text="\n".join(unmatched))


def _parse_segment(segment: str) -> Optional[ParsedScheduleItem]:
    match = COMMITMENT_PATTERN.match(segment)
    if not match:
        return None
    title = match.group(1).strip()
    start = _read_clock(match.group(2))
    end = _read_clock(match.group(3))
    if not title or start is None or end is None:
        return None

    resolved = _resolve_range(start, end)
    if resolved is None:
        return None
    start_min, end_min = resolved
    if start_min == end_min:
        return None

    return ParsedScheduleItem(
        title=title,
        start=_format(start_min),
        end=_format(end_min),
        type=_classify(title),
    )


def _read_clock(raw: str) -> Optional[ClockReading]:
    match = TIME_PATTERN.match(raw.strip())
    if not match:
        return None
    meridiem = match.group(3).lower() if match.group(3) else None
    return ClockReading(int(match.group(1)), int(match.group(2) or 0), meridiem)


def _resolve_range(start: ClockReading, end: ClockReading) -> Optional[Tuple[int, int]]:
    """Fill in a missing am/pm from the other side of the range."""
    if start.meridiem and not end.meridiem:
        start_min = start.minutes()
        end_min = end.minutes(start.meridiem)
        if start_min is not None and end_min is not None and end_min <= start_min:
            end_min = end.minutes(_flip(start.meridiem))
        return _both(start_min, end_min)

    if end.meridiem and not start.meridiem:
        end_min = end.minutes()
        start_min = start.minutes(end.meridiem)
        if start_min is not None and end_min is not None and start_min >= end_min:
            start_min = start.minutes(_flip(end.meridiem))
        return _both(start_min, end_min)

    start_min = start.minutes()
    end_min = end.minutes()
    if start_min is None or end_min is None:
        return None
    if (
        not start.meridiem
        and start.hour <= 12
        and end.hour <= 12
        and end_min <= start_min
        and end_min < NOON
    ):
        end_min += NOON
    return start_min, end_min


def _both(start_min: Optional[int], end_min: Optional[int]) -> Optional[Tuple[int, int]]:
    if start_min is None or end_min is None:
        return None
    return start_min, end_min


def _flip(meridiem: str) -> str:
    return "am" if meridiem == "pm" else "pm"


def _format(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _classify(title: str) -> str:
    lowered = title.lower()
    for event_type, keywords in TYPE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return event_type
    return "other"
