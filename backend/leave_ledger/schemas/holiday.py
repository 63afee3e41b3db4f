# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel, Field


class CreateHolidayRequest(BaseModel):
    date: date
    name: str = Field(min_length=1, max_length=255)
    recurring: bool = False


class HolidayResponse(BaseModel):
    id: uuid.UUID
    date: date
    name: str
    recurring: bool


class HolidayListResponse(BaseModel):
    """Stored holiday definitions, paginated."""

    items: list[HolidayResponse]
    total: int


class HolidayOccurrence(BaseModel):
    """A holiday as observed on a concrete date."""

    holiday_id: uuid.UUID
    date: date
    name: str


class HolidayCalendarResponse(BaseModel):
    start: date
    end: date
    items: list[HolidayOccurrence]
