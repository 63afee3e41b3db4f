# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from leave_ledger.models.base import TimestampMixin, UUIDBase, leave_type_fk, timestamp_field


class LeaveLedgerEntry(UUIDBase, TimestampMixin, table=True):
    """Append-only ledger entry that records every balance-affecting event.

    ``amount_days`` is signed from the employee's point of view: allocations
    and reversals are positive, usage is negative.
    """

    __tablename__ = "leave_ledger_entry"
    __table_args__ = (
        sa.Index("ix_ledger_employee_leave_type", "employee_id", "leave_type_id"),
        sa.UniqueConstraint("source_type", "source_id", "entry_type", name="uq_ledger_idempotency"),
    )

    employee_id: uuid.UUID = Field(index=True)
    leave_type_id: uuid.UUID = leave_type_fk()
    entry_type: str = Field(max_length=50)
    amount_days: int
    effective_at: datetime = timestamp_field()
    source_type: str = Field(max_length=50)
    source_id: str = Field(max_length=255)
    actor_id: uuid.UUID | None = None
    metadata_json: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)
