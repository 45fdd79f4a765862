"""Pydantic schemas for free-text commitment parsing."""
from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from dayplan.api.schemas.plan import FixedEvent, FixedEventType


class ParseTextRequest(BaseModel):
    text: str = Field(..., max_length=4000)


class ParsedScheduleItem(BaseModel):
    title: str
    start: str
    end: str
    type: FixedEventType = "other"

    def to_fixed_event(self) -> FixedEvent:
        return FixedEvent(title=self.title, start=self.start, end=self.end, type=self.type)


class ParsedTextInput(BaseModel):
    items: List[ParsedScheduleItem] = Field(default_factory=list)
    unparsed_text: str = ""


class ParseTextResponse(ParsedTextInput):
    request_id: str
