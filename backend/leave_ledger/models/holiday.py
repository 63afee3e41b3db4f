# ruff: noqa: TC003
from __future__ import annotations

import datetime

import sqlalchemy as sa
from sqlmodel import Field

from leave_ledger.models.base import UUIDBase


class CompanyHoliday(UUIDBase, table=True):
    """A non-working day skipped by the business-day count.

    A recurring holiday repeats on the same month and day every year from
    ``date`` onwards.
    """

    __tablename__ = "company_holiday"
    __table_args__ = (sa.UniqueConstraint("date", name="uq_holiday_date"),)

    date: datetime.date
    name: str = Field(max_length=255)
    recurring: bool = False
