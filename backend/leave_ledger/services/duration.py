from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING

from leave_ledger.config import get_settings
from leave_ledger.exceptions import InvalidDateRange
from leave_ledger.services.holiday import holiday_occurrences

if TYPE_CHECKING:
    from collections.abc import Collection

    from sqlalchemy.ext.asyncio import AsyncSession

# date.weekday() values for Saturday and Sunday.
_WEEKEND = frozenset({5, 6})


def count_leave_days(
    start_date: date,
    end_date: date,
    *,
    skip_weekends: bool = False,
    holidays: Collection[date] = (),
) -> int:
    """Count the days in the inclusive range that consume leave."""
    if end_date < start_date:
        raise InvalidDateRange("start_date must not be after end_date")

    if not skip_weekends and not holidays:
        return (end_date - start_date).days + 1

    days = 0
    current = start_date
    while current <= end_date:
        if not (skip_weekends and current.weekday() in _WEEKEND) and current not in holidays:
            days += 1
        current += timedelta(days=1)
    return days


async def calculate_requested_days(
    session: AsyncSession,
    start_date: date,
    end_date: date,
) -> int:
    """Compute days_requested for a period under the configured day-count policy.

    ``calendar`` counts every day. ``business`` skips weekends and company holidays.
    Raises InvalidDateRange if the period is reversed or consumes no days.
    """
    if end_date < start_date:
        raise InvalidDateRange("start_date must not be after end_date")

    if get_settings().day_count_policy == "business":
        holidays = {o.date for o in await holiday_occurrences(session, start_date, end_date)}
        days = count_leave_days(start_date, end_date, skip_weekends=True, holidays=holidays)
    else:
        days = count_leave_days(start_date, end_date)

    if days <= 0:
        raise InvalidDateRange("Request covers no leave days")
    return days
