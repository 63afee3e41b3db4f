# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel

from leave_ledger.models.enums import AuditAction, AuditEntityType


class AuditLogFilter(BaseModel):
    """Recognized audit log filters. Unknown entity types or actions fail validation."""

    entity_type: AuditEntityType | None = None
    entity_id: str | None = None
    action: AuditAction | None = None
    actor_id: uuid.UUID | None = None
    request_id: str | None = None
    start_date: date | None = None
    end_date: date | None = None


class AuditLogEntryResponse(BaseModel):
    id: uuid.UUID
    actor_id: uuid.UUID
    entity_type: AuditEntityType
    entity_id: str
    action: AuditAction
    before_json: dict[str, Any] | None
    after_json: dict[str, Any] | None
    request_id: str | None
    created_at: datetime


class AuditLogListResponse(BaseModel):
    items: list[AuditLogEntryResponse]
    total: int


class RequestHistoryEntry(BaseModel):
    """One step in a leave request's life."""

    action: AuditAction
    actor_id: uuid.UUID
    status: str | None
    comment: str | None
    at: datetime


class RequestHistoryResponse(BaseModel):
    request_id: uuid.UUID
    items: list[RequestHistoryEntry]
