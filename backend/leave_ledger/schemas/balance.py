# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from leave_ledger.models.enums import LedgerEntryType, LedgerSourceType

# ---------------------------------------------------------------------------
# Balance response schemas
# ---------------------------------------------------------------------------


class BalanceResponse(BaseModel):
    """Balance for one employee and leave type."""

    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    leave_type_code: str
    leave_type_name: str
    allocated_days: int
    used_days: int
    available_days: int
    # Days in pending requests. Informational only: pending requests place no hold.
    pending_days: int
    allow_negative: bool
    updated_at: datetime | None


class BalanceListResponse(BaseModel):
    """All leave balances for an employee."""

    items: list[BalanceResponse]
    total: int


# ---------------------------------------------------------------------------
# Ledger response schemas
# ---------------------------------------------------------------------------


class LedgerEntryResponse(BaseModel):
    """A single ledger entry."""

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    entry_type: LedgerEntryType
    amount_days: int
    effective_at: datetime
    source_type: LedgerSourceType
    source_id: str
    actor_id: uuid.UUID | None
    metadata_json: dict[str, Any] | None
    created_at: datetime


class LedgerListResponse(BaseModel):
    """Paginated ledger entries."""

    items: list[LedgerEntryResponse]
    total: int


# ---------------------------------------------------------------------------
# Write payloads
# ---------------------------------------------------------------------------


class AllocateBalanceRequest(BaseModel):
    """Request body for setting an employee's allocation for a leave type.

    When ``allocated_days`` is omitted the leave type's yearly default is used.
    """

    allocated_days: int | None = Field(default=None, ge=0)
    allow_negative: bool = False


class CreateAdjustmentRequest(BaseModel):
    """Request body for an admin balance adjustment."""

    amount_days: int = Field(description="Signed integer: positive to add, negative to deduct")
    reason: str = Field(min_length=1, max_length=1000)
