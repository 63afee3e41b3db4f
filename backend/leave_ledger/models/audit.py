# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from leave_ledger.models.base import UUIDBase, timestamp_field


class AuditLog(UUIDBase, table=True):
    """Append-only trail of ledger mutations.

    ``entity_id`` is a string so composite keys such as a balance's
    ``"<employee_id>:<leave_type_id>"`` fit. ``request_id`` ties the row to the
    HTTP request that produced it; it is null for writes made outside a request.
    """

    __tablename__ = "audit_log"
    __table_args__ = (sa.Index("ix_audit_entity", "entity_type", "entity_id"),)

    actor_id: uuid.UUID
    entity_type: str = Field(max_length=50)
    entity_id: str = Field(max_length=255)
    action: str = Field(max_length=50)
    before_json: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)
    after_json: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)
    request_id: str | None = Field(default=None, max_length=64, index=True)
    created_at: datetime = timestamp_field(index=True)
