# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query

from leave_ledger.api.deps import ManagerDep
from leave_ledger.db import SessionDep
from leave_ledger.models.enums import AuditAction, AuditEntityType
from leave_ledger.schemas.report import AuditLogFilter, AuditLogListResponse
from leave_ledger.services import report as report_service

reports_router = APIRouter(tags=["reports"])


@reports_router.get("/audit-log", response_model=AuditLogListResponse)
async def query_audit_log(
    session: SessionDep,
    auth: ManagerDep,
    entity_type: AuditEntityType | None = Query(default=None),
    entity_id: str | None = Query(default=None),
    action: AuditAction | None = Query(default=None),
    actor_id: uuid.UUID | None = Query(default=None),
    request_id: str | None = Query(default=None),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> AuditLogListResponse:
    """Search the audit trail (manager only). ``request_id`` is the X-Request-Id of the originating call."""
    filters = AuditLogFilter(
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        actor_id=actor_id,
        request_id=request_id,
        start_date=start_date,
        end_date=end_date,
    )
    return await report_service.query_audit_log(session, filters, offset, limit)
