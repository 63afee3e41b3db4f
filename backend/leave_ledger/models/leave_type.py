from __future__ import annotations

import sqlalchemy as sa
from sqlmodel import Field

from leave_ledger.models.base import TimestampMixin, UUIDBase


class LeaveType(UUIDBase, TimestampMixin, table=True):
    """Immutable reference data describing a kind of leave."""

    __tablename__ = "leave_type"
    __table_args__ = (sa.UniqueConstraint("code", name="uq_leave_type_code"),)

    name: str = Field(max_length=100)
    code: str = Field(max_length=20)
    description: str | None = Field(default=None, max_length=500)
    color: str = Field(default="#4CAF50", max_length=20)
    max_days_per_year: int = Field(default=0, ge=0)
    is_paid: bool = True
    is_active: bool = True
