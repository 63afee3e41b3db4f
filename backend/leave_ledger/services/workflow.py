"""Leave request state machine.

    pending  -> approved | rejected
    approved -> cancelled

``rejected`` and ``cancelled`` are terminal. ``approved`` never returns to
``pending``. Balance effects are applied by the approval engine in the same
transaction as the status write; this module only guards and records the
transition itself.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leave_ledger.exceptions import InvalidTransition, NotFound
from leave_ledger.models.base import now_utc
from leave_ledger.models.enums import AuditAction, AuditEntityType, RequestStatus
from leave_ledger.models.request import LeaveRequest
from leave_ledger.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

ALLOWED_TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.PENDING: frozenset({RequestStatus.APPROVED, RequestStatus.REJECTED}),
    RequestStatus.APPROVED: frozenset({RequestStatus.CANCELLED}),
    RequestStatus.REJECTED: frozenset(),
    RequestStatus.CANCELLED: frozenset(),
}

_AUDIT_ACTIONS = {
    RequestStatus.APPROVED: AuditAction.APPROVE,
    RequestStatus.REJECTED: AuditAction.REJECT,
    RequestStatus.CANCELLED: AuditAction.CANCEL,
}


def can_transition(current: RequestStatus, target: RequestStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def ensure_transition(current: RequestStatus, target: RequestStatus) -> None:
    """Raise InvalidTransition unless ``current -> target`` is in the table."""
    if not can_transition(current, target):
        raise InvalidTransition(f"Cannot move a {current.value} request to {target.value}")


async def get_request_for_update(session: AsyncSession, request_id: uuid.UUID) -> LeaveRequest:
    """Lock a request row and reload it so the status check sees committed state."""
    result = await session.execute(
        select(LeaveRequest)
        .where(col(LeaveRequest.id) == request_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    request = result.scalar_one_or_none()
    if request is None:
        raise NotFound("Leave request not found")
    return request


def apply_transition(
    request: LeaveRequest,
    target: RequestStatus,
    actor_id: uuid.UUID,
    comment: str | None = None,
) -> LeaveRequest:
    """Validate and write a status change on an already-locked request."""
    ensure_transition(RequestStatus(request.status), target)

    now = now_utc()
    if target is RequestStatus.CANCELLED:
        request.cancelled_at = now
        request.cancelled_by = actor_id
        request.cancellation_reason = comment
    else:
        request.decided_at = now
        request.decided_by = actor_id
        request.decision_comment = comment
    request.status = target.value
    return request


async def record_transition(
    session: AsyncSession,
    request: LeaveRequest,
    target: RequestStatus,
    actor_id: uuid.UUID,
    comment: str | None = None,
) -> LeaveRequest:
    """Validate, write and audit a transition on a request the caller has already locked."""
    before_dict = model_to_audit_dict(request)
    apply_transition(request, target, actor_id, comment)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=actor_id,
        entity_type=AuditEntityType.REQUEST,
        entity_id=request.id,
        action=_AUDIT_ACTIONS[target],
        before_json=before_dict,
        after_json=model_to_audit_dict(request),
    )
    return request


async def transition_request(
    session: AsyncSession,
    request_id: uuid.UUID,
    target: RequestStatus,
    actor_id: uuid.UUID,
    comment: str | None = None,
) -> LeaveRequest:
    """Lock, validate, write and audit a transition inside the caller's transaction.

    Raises NotFound for an unknown id and InvalidTransition for a move the
    table does not allow. The caller owns commit/rollback.
    """
    request = await get_request_for_update(session, request_id)
    return await record_transition(session, request, target, actor_id, comment)
