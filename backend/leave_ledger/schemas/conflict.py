# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel

from leave_ledger.models.enums import ConflictLevel, RequestStatus, RosterScope


class ConflictResponse(BaseModel):
    """Conflict level of one request against approved leave in its team, or its department when it has no team.

    ``scope`` is None when the request belongs to neither.
    """

    request_id: uuid.UUID
    team_id: uuid.UUID | None
    department_id: uuid.UUID | None
    scope: RosterScope | None
    level: ConflictLevel
    overlapping_count: int
    overlapping_request_ids: list[uuid.UUID]


class CoverageDay(BaseModel):
    """Staffing on a single day."""

    date: date
    roster_size: int
    on_leave: int
    available: int
    coverage_percentage: float


class CoverageResponse(BaseModel):
    """Day-by-day coverage for a team or department over a date range."""

    scope: RosterScope
    scope_id: uuid.UUID
    items: list[CoverageDay]


class CalendarEntry(BaseModel):
    """One request as shown on a leave calendar."""

    request_id: uuid.UUID
    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    leave_type_code: str
    color: str
    start_date: date
    end_date: date
    days: int
    status: RequestStatus


class LeaveCalendarResponse(BaseModel):
    """Approved and pending leave for a team or department, ordered by start date."""

    scope: RosterScope
    scope_id: uuid.UUID
    items: list[CalendarEntry]
