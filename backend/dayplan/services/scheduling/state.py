"""Per-run working state for the scheduler."""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from dayplan.services.scheduling.slots import TimeSlot, remove_interval


@dataclass
class PlanningContext:
    """Everything a single ``generate_plan`` call mutates while placing blocks."""

    plan_date: dt.date
    buffer: int
    sleep_start: int
    slots: List[TimeSlot]
    scheduled_ends: Dict[str, int] = field(default_factory=dict)
    last_category: Optional[str] = None

    def claim(self, start: int, end: int) -> None:
        """Take ``[start, end)`` plus the surrounding buffer out of the free set."""
        remove_interval(self.slots, start - self.buffer, end + self.buffer, self.buffer)
