"""Company holiday calendar.

Holidays are stored as definitions: either a one-off date or a recurring
month/day. The business-day count and the calendar endpoint both work on
concrete occurrences inside a date range, produced by ``holiday_occurrences``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leave_ledger.exceptions import Conflict, NotFound
from leave_ledger.models.enums import AuditAction, AuditEntityType
from leave_ledger.models.holiday import CompanyHoliday
from leave_ledger.schemas.holiday import (
    HolidayCalendarResponse,
    HolidayListResponse,
    HolidayOccurrence,
    HolidayResponse,
)
from leave_ledger.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    import uuid
    from datetime import date

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.schemas.auth import AuthContext
    from leave_ledger.schemas.holiday import CreateHolidayRequest
    from leave_ledger.schemas.request import DateRange

logger = logging.getLogger(__name__)


def observed_dates(holiday: CompanyHoliday, start: date, end: date) -> list[date]:
    """Dates in the inclusive range on which ``holiday`` falls."""
    if not holiday.recurring:
        return [holiday.date] if start <= holiday.date <= end else []

    found: list[date] = []
    for year in range(max(start.year, holiday.date.year), end.year + 1):
        try:
            candidate = holiday.date.replace(year=year)
        except ValueError:
            # 29 February in a non-leap year
            continue
        if start <= candidate <= end:
            found.append(candidate)
    return found


async def holiday_occurrences(session: AsyncSession, start: date, end: date) -> list[HolidayOccurrence]:
    """All holiday occurrences in the inclusive range, ordered by date."""
    result = await session.execute(
        select(CompanyHoliday).where(
            col(CompanyHoliday.date) <= end,
            or_(col(CompanyHoliday.recurring).is_(True), col(CompanyHoliday.date) >= start),
        )
    )
    occurrences = [
        HolidayOccurrence(holiday_id=holiday.id, date=day, name=holiday.name)
        for holiday in result.scalars().all()
        for day in observed_dates(holiday, start, end)
    ]
    occurrences.sort(key=lambda occurrence: occurrence.date)
    return occurrences


def _build_holiday_response(holiday: CompanyHoliday) -> HolidayResponse:
    return HolidayResponse(id=holiday.id, date=holiday.date, name=holiday.name, recurring=holiday.recurring)


async def create_holiday(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateHolidayRequest,
) -> HolidayResponse:
    """Define a holiday. At most one definition may start on a given date."""
    holiday = CompanyHoliday(date=payload.date, name=payload.name, recurring=payload.recurring)
    session.add(holiday)

    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise Conflict(f"A holiday is already defined on {payload.date.isoformat()}") from None

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.HOLIDAY,
        entity_id=holiday.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(holiday),
    )

    await session.commit()
    await session.refresh(holiday)
    logger.info("Holiday %s defined on %s (recurring=%s)", holiday.name, holiday.date, holiday.recurring)
    return _build_holiday_response(holiday)


async def list_holidays(
    session: AsyncSession,
    recurring: bool | None = None,
    offset: int = 0,
    limit: int = 50,
) -> HolidayListResponse:
    filters = []
    if recurring is not None:
        filters.append(col(CompanyHoliday.recurring).is_(recurring))

    total = (await session.execute(select(func.count()).select_from(CompanyHoliday).where(*filters))).scalar_one()
    result = await session.execute(
        select(CompanyHoliday).where(*filters).order_by(col(CompanyHoliday.date)).offset(offset).limit(limit)
    )
    return HolidayListResponse(items=[_build_holiday_response(h) for h in result.scalars().all()], total=total)


async def get_holiday_calendar(session: AsyncSession, date_range: DateRange) -> HolidayCalendarResponse:
    return HolidayCalendarResponse(
        start=date_range.start,
        end=date_range.end,
        items=await holiday_occurrences(session, date_range.start, date_range.end),
    )


async def delete_holiday(
    session: AsyncSession,
    auth: AuthContext,
    holiday_id: uuid.UUID,
) -> None:
    """Remove a holiday definition. Requests already submitted keep their day counts."""
    holiday = await session.get(CompanyHoliday, holiday_id)
    if holiday is None:
        raise NotFound("Holiday not found")

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.HOLIDAY,
        entity_id=holiday.id,
        action=AuditAction.DELETE,
        before_json=model_to_audit_dict(holiday),
    )

    await session.delete(holiday)
    await session.commit()
