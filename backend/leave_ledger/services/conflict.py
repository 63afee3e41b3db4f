"""Conflict and coverage detection over a team or department leave calendar.

``compute_conflict_level`` and ``compute_coverage`` are pure: callers supply
the candidate requests. The async helpers below load those candidates from
storage for the API.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING, Protocol

from sqlalchemy import select
from sqlmodel import col

from leave_ledger.exceptions import InvalidDateRange, InvalidRoster
from leave_ledger.models.enums import ConflictLevel, RequestStatus, RosterScope
from leave_ledger.models.leave_type import LeaveType
from leave_ledger.schemas.conflict import (
    CalendarEntry,
    ConflictResponse,
    CoverageDay,
    CoverageResponse,
    LeaveCalendarResponse,
)
from leave_ledger.schemas.request import DateRange
from leave_ledger.services.employee import get_roster_size
from leave_ledger.services.request import get_request, list_approved_requests_overlapping, list_scope_requests

if TYPE_CHECKING:
    import uuid
    from collections.abc import Iterable

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.models.request import LeaveRequest

MAX_CALENDAR_DAYS = 366


class LeavePeriod(Protocol):
    """The request fields conflict detection reads."""

    id: uuid.UUID
    employee_id: uuid.UUID
    start_date: date
    end_date: date
    status: str


def _period(request: LeavePeriod) -> DateRange:
    return DateRange(start=request.start_date, end=request.end_date)


def conflict_level_for_count(count: int) -> ConflictLevel:
    """Bucket a number of overlapping teammates: 0 none, 1-2 low, 3-4 medium, 5+ high."""
    if count <= 0:
        return ConflictLevel.NONE
    if count <= 2:
        return ConflictLevel.LOW
    if count <= 4:
        return ConflictLevel.MEDIUM
    return ConflictLevel.HIGH


def overlapping_approved(request: LeavePeriod, siblings: Iterable[LeavePeriod]) -> list[LeavePeriod]:
    """Approved siblings, other than ``request`` itself, whose period overlaps it."""
    window = _period(request)
    return [
        s
        for s in siblings
        if s.id != request.id
        and s.status == RequestStatus.APPROVED.value
        and window.overlaps(s.start_date, s.end_date)
    ]


def compute_conflict_level(request: LeavePeriod, siblings: Iterable[LeavePeriod]) -> ConflictLevel:
    return conflict_level_for_count(len(overlapping_approved(request, siblings)))


def compute_coverage(on_date: date, roster_size: int, approved_requests: Iterable[LeavePeriod]) -> CoverageDay:
    """Staffing for one day: roster minus employees on approved leave that day."""
    if roster_size <= 0:
        raise InvalidRoster("Roster size must be positive")

    on_leave = len(
        {
            r.employee_id
            for r in approved_requests
            if r.status == RequestStatus.APPROVED.value and _period(r).covers(on_date)
        }
    )
    available = max(roster_size - on_leave, 0)
    return CoverageDay(
        date=on_date,
        roster_size=roster_size,
        on_leave=on_leave,
        available=available,
        coverage_percentage=available / roster_size * 100,
    )


# ---------------------------------------------------------------------------
# Storage-backed views
# ---------------------------------------------------------------------------


def _check_window(date_range: DateRange) -> None:
    if (date_range.end - date_range.start).days + 1 > MAX_CALENDAR_DAYS:
        raise InvalidDateRange(f"Date range may span at most {MAX_CALENDAR_DAYS} days")


def request_scope(request: LeaveRequest) -> tuple[RosterScope, uuid.UUID] | None:
    """Group a request is compared against: its team, else its department."""
    if request.team_id is not None:
        return RosterScope.TEAM, request.team_id
    if request.department_id is not None:
        return RosterScope.DEPARTMENT, request.department_id
    return None


async def get_request_conflict(session: AsyncSession, request_id: uuid.UUID) -> ConflictResponse:
    """Conflict level of a request against its team's (or department's) approved leave."""
    request = await get_request(session, request_id)
    scope = request_scope(request)

    overlapping: list[LeavePeriod] = []
    if scope is not None:
        siblings = await list_approved_requests_overlapping(session, scope[1], _period(request), scope=scope[0])
        overlapping = overlapping_approved(request, siblings)

    return ConflictResponse(
        request_id=request.id,
        team_id=request.team_id,
        department_id=request.department_id,
        scope=scope[0] if scope is not None else None,
        level=conflict_level_for_count(len(overlapping)),
        overlapping_count=len(overlapping),
        overlapping_request_ids=[r.id for r in overlapping],
    )


async def get_leave_calendar(
    session: AsyncSession,
    scope: RosterScope,
    scope_id: uuid.UUID,
    date_range: DateRange,
) -> LeaveCalendarResponse:
    """Approved and pending leave in a team or department touching the range."""
    _check_window(date_range)
    requests = await list_scope_requests(
        session, scope, scope_id, date_range, [RequestStatus.APPROVED, RequestStatus.PENDING]
    )

    leave_types: dict[uuid.UUID, LeaveType] = {}
    type_ids = {r.leave_type_id for r in requests}
    if type_ids:
        result = await session.execute(select(LeaveType).where(col(LeaveType.id).in_(type_ids)))
        leave_types = {lt.id: lt for lt in result.scalars().all()}

    return LeaveCalendarResponse(
        scope=scope,
        scope_id=scope_id,
        items=[
            CalendarEntry(
                request_id=r.id,
                employee_id=r.employee_id,
                leave_type_id=r.leave_type_id,
                leave_type_code=leave_types[r.leave_type_id].code,
                color=leave_types[r.leave_type_id].color,
                start_date=r.start_date,
                end_date=r.end_date,
                days=r.days_requested,
                status=RequestStatus(r.status),
            )
            for r in requests
        ],
    )


async def get_coverage(
    session: AsyncSession,
    scope: RosterScope,
    scope_id: uuid.UUID,
    date_range: DateRange,
    roster_size: int | None = None,
) -> CoverageResponse:
    """Coverage for each day in the range.

    ``roster_size`` defaults to the group's headcount in the employee directory.
    """
    _check_window(date_range)
    if roster_size is None:
        roster_size = await get_roster_size(scope, scope_id)

    approved = await list_approved_requests_overlapping(session, scope_id, date_range, scope=scope)

    items = []
    day = date_range.start
    while day <= date_range.end:
        items.append(compute_coverage(day, roster_size, approved))
        day += timedelta(days=1)
    return CoverageResponse(scope=scope, scope_id=scope_id, items=items)
