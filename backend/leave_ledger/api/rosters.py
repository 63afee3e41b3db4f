# ruff: noqa: B008, TC001, TC003
"""Calendar and coverage views, served for teams and for departments."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Query

from leave_ledger.api.deps import AuthDep, DateRangeDep, ManagerDep
from leave_ledger.db import SessionDep
from leave_ledger.models.enums import RosterScope
from leave_ledger.schemas.conflict import CoverageResponse, LeaveCalendarResponse
from leave_ledger.services import conflict as conflict_service


def _roster_router(scope: RosterScope) -> APIRouter:
    router = APIRouter(prefix=f"/{scope.value}s/{{scope_id}}", tags=[f"{scope.value}s"])

    @router.get("/calendar", response_model=LeaveCalendarResponse)
    async def get_calendar(
        scope_id: uuid.UUID,
        session: SessionDep,
        auth: AuthDep,
        date_range: DateRangeDep,
    ) -> LeaveCalendarResponse:
        """Approved and pending leave within the range."""
        return await conflict_service.get_leave_calendar(session, scope, scope_id, date_range)

    @router.get("/coverage", response_model=CoverageResponse)
    async def get_coverage(
        scope_id: uuid.UUID,
        session: SessionDep,
        auth: ManagerDep,
        date_range: DateRangeDep,
        roster_size: int | None = Query(default=None),
    ) -> CoverageResponse:
        """Per-day staffing coverage (manager only)."""
        return await conflict_service.get_coverage(session, scope, scope_id, date_range, roster_size=roster_size)

    return router


teams_router = _roster_router(RosterScope.TEAM)
departments_router = _roster_router(RosterScope.DEPARTMENT)
