# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Self

from pydantic import BaseModel, Field, model_validator

from leave_ledger.models.enums import RequestStatus

# ---------------------------------------------------------------------------
# Query structures
# ---------------------------------------------------------------------------


class DateRange(BaseModel):
    """Inclusive calendar date range."""

    start: date
    end: date

    @model_validator(mode="after")
    def _validate_order(self) -> Self:
        if self.end < self.start:
            msg = "end must not be before start"
            raise ValueError(msg)
        return self

    def overlaps(self, start: date, end: date) -> bool:
        return self.start <= end and self.end >= start

    def covers(self, day: date) -> bool:
        return self.start <= day <= self.end


class RequestFilter(BaseModel):
    """Recognized filters for listing leave requests."""

    status: RequestStatus | None = None
    employee_id: uuid.UUID | None = None
    leave_type_id: uuid.UUID | None = None
    team_id: uuid.UUID | None = None
    department_id: uuid.UUID | None = None
    # Requests whose period touches [start_date, end_date].
    start_date: date | None = None
    end_date: date | None = None
    offset: int = Field(default=0, ge=0)
    limit: int = Field(default=50, ge=1, le=100)


# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class SubmitLeaveRequestPayload(BaseModel):
    """Request body for submitting a new leave request."""

    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    start_date: date
    end_date: date
    reason: str | None = Field(default=None, max_length=1000)


class UpdateLeaveRequestPayload(BaseModel):
    """Changes to a pending request. Omitted fields keep their current value."""

    start_date: date | None = None
    end_date: date | None = None
    reason: str | None = Field(default=None, max_length=1000)


class DecisionPayload(BaseModel):
    """Request body for approve/reject actions. Rejections require a comment."""

    comment: str | None = Field(default=None, max_length=1000)


class CancellationPayload(BaseModel):
    """Request body for cancelling an approved request."""

    reason: str | None = Field(default=None, max_length=1000)


class BulkDecisionPayload(BaseModel):
    """Request body for bulk approve/reject actions."""

    request_ids: list[uuid.UUID]
    comment: str | None = Field(default=None, max_length=1000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeaveRequestResponse(BaseModel):
    """Response schema for a single leave request."""

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    team_id: uuid.UUID | None
    department_id: uuid.UUID | None
    start_date: date
    end_date: date
    days_requested: int
    reason: str | None
    status: RequestStatus
    created_at: datetime
    decided_at: datetime | None
    decided_by: uuid.UUID | None
    decision_comment: str | None
    cancelled_at: datetime | None
    cancelled_by: uuid.UUID | None
    cancellation_reason: str | None


class LeaveRequestListResponse(BaseModel):
    """Paginated list of leave requests."""

    items: list[LeaveRequestResponse]
    total: int


class CancellationResponse(BaseModel):
    """Outcome of cancelling an approved request."""

    request: LeaveRequestResponse
    restored_days: int


class BulkActionItem(BaseModel):
    """Per-request outcome of a bulk action."""

    id: uuid.UUID
    success: bool
    status: RequestStatus | None = None
    error: str | None = None
    detail: str | None = None


class BulkActionResponse(BaseModel):
    """Collected outcomes of a bulk action, in input order."""

    results: list[BulkActionItem]
    succeeded: int
    failed: int
