# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

from sqlmodel import Field, SQLModel

from leave_ledger.models.base import leave_type_fk, timestamp_field


class LeaveBalance(SQLModel, table=True):
    """Per-employee, per-leave-type day counts, updated transactionally with ledger writes."""

    __tablename__ = "leave_balance"

    employee_id: uuid.UUID = Field(primary_key=True)
    leave_type_id: uuid.UUID = leave_type_fk(primary_key=True)
    allocated_days: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    used_days: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    available_days: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    # Administrative override: lets available_days go below zero.
    allow_negative: bool = False
    updated_at: datetime = timestamp_field()
    version: int = Field(default=1, sa_column_kwargs={"server_default": "1"})
