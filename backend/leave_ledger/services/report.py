"""Read-side queries over the audit log."""

from __future__ import annotations

from datetime import UTC, datetime, time, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from leave_ledger.models.audit import AuditLog
from leave_ledger.models.enums import AuditAction, AuditEntityType
from leave_ledger.schemas.report import (
    AuditLogEntryResponse,
    AuditLogListResponse,
    RequestHistoryEntry,
    RequestHistoryResponse,
)

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.schemas.report import AuditLogFilter

# Field of the request snapshot holding the free text for each step.
_COMMENT_FIELD = {
    AuditAction.SUBMIT: "reason",
    AuditAction.UPDATE: "reason",
    AuditAction.APPROVE: "decision_comment",
    AuditAction.REJECT: "decision_comment",
    AuditAction.CANCEL: "cancellation_reason",
}


def _filter_clauses(filters: AuditLogFilter) -> list:
    clauses = []
    if filters.entity_type is not None:
        clauses.append(col(AuditLog.entity_type) == filters.entity_type.value)
    if filters.entity_id is not None:
        clauses.append(col(AuditLog.entity_id) == filters.entity_id)
    if filters.action is not None:
        clauses.append(col(AuditLog.action) == filters.action.value)
    if filters.actor_id is not None:
        clauses.append(col(AuditLog.actor_id) == filters.actor_id)
    if filters.request_id is not None:
        clauses.append(col(AuditLog.request_id) == filters.request_id)
    # Date bounds are inclusive whole UTC days.
    if filters.start_date is not None:
        clauses.append(col(AuditLog.created_at) >= datetime.combine(filters.start_date, time.min, tzinfo=UTC))
    if filters.end_date is not None:
        next_day = filters.end_date + timedelta(days=1)
        clauses.append(col(AuditLog.created_at) < datetime.combine(next_day, time.min, tzinfo=UTC))
    return clauses


async def query_audit_log(
    session: AsyncSession,
    filters: AuditLogFilter,
    offset: int = 0,
    limit: int = 50,
) -> AuditLogListResponse:
    """Audit entries matching every given filter, newest first."""
    clauses = _filter_clauses(filters)
    total = (await session.execute(select(func.count()).select_from(AuditLog).where(*clauses))).scalar_one()

    result = await session.execute(
        select(AuditLog).where(*clauses).order_by(col(AuditLog.created_at).desc()).offset(offset).limit(limit)
    )
    return AuditLogListResponse(
        items=[AuditLogEntryResponse.model_validate(entry.model_dump()) for entry in result.scalars().all()],
        total=total,
    )


async def get_request_history(session: AsyncSession, request_id: uuid.UUID) -> RequestHistoryResponse:
    """Lifecycle of one leave request, oldest step first."""
    result = await session.execute(
        select(AuditLog)
        .where(
            col(AuditLog.entity_type) == AuditEntityType.REQUEST.value,
            col(AuditLog.entity_id) == str(request_id),
        )
        .order_by(col(AuditLog.created_at), col(AuditLog.id))
    )

    items = []
    for entry in result.scalars().all():
        action = AuditAction(entry.action)
        snapshot = entry.after_json or {}
        field = _COMMENT_FIELD.get(action)
        items.append(
            RequestHistoryEntry(
                action=action,
                actor_id=entry.actor_id,
                status=snapshot.get("status"),
                comment=snapshot.get(field) if field else None,
                at=entry.created_at,
            )
        )
    return RequestHistoryResponse(request_id=request_id, items=items)
