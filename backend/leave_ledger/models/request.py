# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from leave_ledger.models.base import TimestampMixin, UUIDBase, leave_type_fk, optional_timestamp_field
from leave_ledger.models.enums import RequestStatus


class LeaveRequest(UUIDBase, TimestampMixin, table=True):
    """An employee's leave request with approval workflow state."""

    __tablename__ = "leave_request"
    __table_args__ = (
        sa.Index("ix_leave_request_team_dates", "team_id", "start_date", "end_date"),
        sa.CheckConstraint("start_date <= end_date", name="ck_leave_request_dates"),
    )

    employee_id: uuid.UUID = Field(index=True)
    leave_type_id: uuid.UUID = leave_type_fk()
    team_id: uuid.UUID | None = Field(default=None, index=True)
    department_id: uuid.UUID | None = Field(default=None, index=True)
    start_date: date
    end_date: date
    days_requested: int
    reason: str | None = None
    status: str = Field(
        default=RequestStatus.PENDING, max_length=20, index=True, sa_column_kwargs={"server_default": "pending"}
    )
    decided_at: datetime | None = optional_timestamp_field()
    decided_by: uuid.UUID | None = None
    decision_comment: str | None = None
    cancelled_at: datetime | None = optional_timestamp_field()
    cancelled_by: uuid.UUID | None = None
    cancellation_reason: str | None = None
