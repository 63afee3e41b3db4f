"""Approval engine: approve, reject and cancel leave requests.

Every status change and its balance effect run as one unit of work: both
are committed together or both are rolled back.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError

from leave_ledger.config import get_settings
from leave_ledger.exceptions import AppError, InvalidBatch, InvalidTransition, MissingReason, NotApproved
from leave_ledger.models.enums import RequestStatus
from leave_ledger.schemas.request import (
    BulkActionItem,
    BulkActionResponse,
    CancellationResponse,
    LeaveRequestResponse,
)
from leave_ledger.services.balance import commit_balance_delta
from leave_ledger.services.request import build_request_response
from leave_ledger.services.workflow import get_request_for_update, record_transition, transition_request

if TYPE_CHECKING:
    import uuid
    from collections.abc import AsyncIterator, Awaitable, Callable

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _unit_of_work(session: AsyncSession) -> AsyncIterator[None]:
    """Commit on success; roll back everything written inside the block on failure."""
    try:
        yield
        await session.commit()
    except IntegrityError:
        # The ledger allows one USAGE and one REVERSAL per request.
        await session.rollback()
        raise InvalidTransition("Request was already processed by another action") from None
    except Exception:
        await session.rollback()
        raise


def _require_reason(text: str | None, what: str) -> str:
    if text is None or not text.strip():
        raise MissingReason(f"A {what} is required")
    return text.strip()


# ---------------------------------------------------------------------------
# Single-request actions
# ---------------------------------------------------------------------------


async def approve_one(
    session: AsyncSession,
    request_id: uuid.UUID,
    actor_id: uuid.UUID,
    comment: str | None = None,
) -> LeaveRequestResponse:
    """Approve a pending request and commit its days to the balance.

    Flow:
    1. Lock the request and move it pending -> approved.
    2. Lock the balance and add days_requested to used_days (USAGE entry).
    3. Commit both, or roll back both on any failure.
    """
    async with _unit_of_work(session):
        request = await transition_request(session, request_id, RequestStatus.APPROVED, actor_id, comment)
        await commit_balance_delta(
            session,
            request.employee_id,
            request.leave_type_id,
            request.days_requested,
            source_id=str(request.id),
            actor_id=actor_id,
        )

    logger.info("Leave request %s approved by %s (%d day(s))", request.id, actor_id, request.days_requested)
    return build_request_response(request)


async def reject_one(
    session: AsyncSession,
    request_id: uuid.UUID,
    actor_id: uuid.UUID,
    comment: str | None,
) -> LeaveRequestResponse:
    """Reject a pending request. Requires a non-blank comment; no balance effect."""
    reason = _require_reason(comment, "rejection reason")

    async with _unit_of_work(session):
        request = await transition_request(session, request_id, RequestStatus.REJECTED, actor_id, reason)

    logger.info("Leave request %s rejected by %s", request.id, actor_id)
    return build_request_response(request)


async def cancel_approved(
    session: AsyncSession,
    request_id: uuid.UUID,
    actor_id: uuid.UUID,
    reason: str | None,
) -> CancellationResponse:
    """Cancel an approved request and restore its days to the balance.

    Raises MissingReason for a blank reason, NotApproved unless the request is
    currently approved, and BalanceInconsistency if the reversal would drive
    used_days below zero.
    """
    cancellation_reason = _require_reason(reason, "cancellation reason")

    async with _unit_of_work(session):
        request = await get_request_for_update(session, request_id)
        if request.status != RequestStatus.APPROVED.value:
            raise NotApproved(f"Only approved requests can be cancelled (status is {request.status})")

        await record_transition(session, request, RequestStatus.CANCELLED, actor_id, cancellation_reason)
        await commit_balance_delta(
            session,
            request.employee_id,
            request.leave_type_id,
            -request.days_requested,
            source_id=str(request.id),
            actor_id=actor_id,
            metadata={"reason": cancellation_reason},
        )

    logger.info("Leave request %s cancelled by %s, %d day(s) restored", request.id, actor_id, request.days_requested)
    return CancellationResponse(request=build_request_response(request), restored_days=request.days_requested)


# ---------------------------------------------------------------------------
# Bulk actions
# ---------------------------------------------------------------------------


def _validate_batch(request_ids: list[uuid.UUID]) -> None:
    if not request_ids:
        raise InvalidBatch("request_ids must not be empty")
    max_items = get_settings().bulk_max_items
    if len(request_ids) > max_items:
        raise InvalidBatch(f"At most {max_items} requests can be processed at once")


async def _apply_each(
    request_ids: list[uuid.UUID],
    action: Callable[[uuid.UUID], Awaitable[LeaveRequestResponse]],
    label: str,
) -> BulkActionResponse:
    """Run ``action`` per id, collecting outcomes instead of stopping at the first failure."""
    results: list[BulkActionItem] = []
    for request_id in request_ids:
        try:
            response = await action(request_id)
        except AppError as exc:
            results.append(
                BulkActionItem(id=request_id, success=False, error=type(exc).__name__, detail=exc.message)
            )
        else:
            results.append(BulkActionItem(id=request_id, success=True, status=response.status))

    succeeded = sum(1 for r in results if r.success)
    logger.info("Bulk %s: %d succeeded, %d failed", label, succeeded, len(results) - succeeded)
    return BulkActionResponse(results=results, succeeded=succeeded, failed=len(results) - succeeded)


async def approve_many(
    session: AsyncSession,
    request_ids: list[uuid.UUID],
    actor_id: uuid.UUID,
    comment: str | None = None,
) -> BulkActionResponse:
    """Approve each request independently and report per-id outcomes in input order."""
    _validate_batch(request_ids)
    return await _apply_each(
        request_ids,
        lambda request_id: approve_one(session, request_id, actor_id, comment),
        "approve",
    )


async def reject_many(
    session: AsyncSession,
    request_ids: list[uuid.UUID],
    actor_id: uuid.UUID,
    comment: str | None,
) -> BulkActionResponse:
    """Reject each request independently. The shared comment must be non-blank."""
    _validate_batch(request_ids)
    _require_reason(comment, "rejection reason")
    return await _apply_each(
        request_ids,
        lambda request_id: reject_one(session, request_id, actor_id, comment),
        "reject",
    )
