# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from leave_ledger.api.deps import AuthDep, DateRangeDep, ManagerDep
from leave_ledger.db import SessionDep
from leave_ledger.schemas.holiday import (
    CreateHolidayRequest,
    HolidayCalendarResponse,
    HolidayListResponse,
    HolidayResponse,
)
from leave_ledger.services import holiday as holiday_service

holidays_router = APIRouter(prefix="/holidays", tags=["holidays"])


@holidays_router.post("", response_model=HolidayResponse, status_code=status.HTTP_201_CREATED)
async def create_holiday(
    payload: CreateHolidayRequest,
    session: SessionDep,
    auth: ManagerDep,
) -> HolidayResponse:
    return await holiday_service.create_holiday(session, auth, payload)


@holidays_router.get("", response_model=HolidayListResponse)
async def list_holidays(
    session: SessionDep,
    auth: AuthDep,
    recurring: bool | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> HolidayListResponse:
    """Holiday definitions, optionally only recurring or only one-off ones."""
    return await holiday_service.list_holidays(session, recurring, offset, limit)


@holidays_router.get("/calendar", response_model=HolidayCalendarResponse)
async def get_holiday_calendar(
    session: SessionDep,
    auth: AuthDep,
    date_range: DateRangeDep,
) -> HolidayCalendarResponse:
    """Concrete holiday dates in the range, with recurring holidays expanded."""
    return await holiday_service.get_holiday_calendar(session, date_range)


@holidays_router.delete("/{holiday_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_holiday(
    holiday_id: uuid.UUID,
    session: SessionDep,
    auth: ManagerDep,
) -> None:
    await holiday_service.delete_holiday(session, auth, holiday_id)
