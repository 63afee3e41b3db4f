from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlmodel import col

from leave_ledger.exceptions import BalanceInconsistency, InsufficientBalance, NotFound, UnknownLeaveType
from leave_ledger.models.balance import LeaveBalance
from leave_ledger.models.base import now_utc
from leave_ledger.models.enums import (
    AuditAction,
    AuditEntityType,
    LedgerEntryType,
    LedgerSourceType,
    RequestStatus,
)
from leave_ledger.models.ledger import LeaveLedgerEntry
from leave_ledger.models.leave_type import LeaveType
from leave_ledger.models.request import LeaveRequest
from leave_ledger.schemas.balance import (
    BalanceListResponse,
    BalanceResponse,
    LedgerEntryResponse,
    LedgerListResponse,
)
from leave_ledger.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.schemas.balance import AllocateBalanceRequest, CreateAdjustmentRequest

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _balance_key(employee_id: uuid.UUID, leave_type_id: uuid.UUID) -> str:
    return f"{employee_id}:{leave_type_id}"


def _build_balance_response(balance: LeaveBalance, leave_type: LeaveType, pending_days: int) -> BalanceResponse:
    """Map a balance row and its leave type to the response schema."""
    return BalanceResponse(
        employee_id=balance.employee_id,
        leave_type_id=balance.leave_type_id,
        leave_type_code=leave_type.code,
        leave_type_name=leave_type.name,
        allocated_days=balance.allocated_days,
        used_days=balance.used_days,
        available_days=balance.available_days,
        pending_days=pending_days,
        allow_negative=balance.allow_negative,
        updated_at=balance.updated_at,
    )


def _build_ledger_entry_response(entry: LeaveLedgerEntry) -> LedgerEntryResponse:
    """Map a ledger entry model to its response schema."""
    return LedgerEntryResponse(
        id=entry.id,
        employee_id=entry.employee_id,
        leave_type_id=entry.leave_type_id,
        entry_type=LedgerEntryType(entry.entry_type),
        amount_days=entry.amount_days,
        effective_at=entry.effective_at,
        source_type=LedgerSourceType(entry.source_type),
        source_id=entry.source_id,
        actor_id=entry.actor_id,
        metadata_json=entry.metadata_json,
        created_at=entry.created_at,
    )


def _refresh_available(balance: LeaveBalance) -> None:
    """Re-derive available_days and bump the row version."""
    balance.available_days = balance.allocated_days - balance.used_days
    balance.updated_at = now_utc()
    balance.version += 1


def _check_available(balance: LeaveBalance, available_after: int, action: str) -> None:
    if available_after < 0 and not balance.allow_negative:
        raise InsufficientBalance(
            f"Insufficient balance for this {action}: {balance.available_days} day(s) available"
        )


async def _get_leave_type_or_404(session: AsyncSession, leave_type_id: uuid.UUID) -> LeaveType:
    leave_type = await session.get(LeaveType, leave_type_id)
    if leave_type is None:
        raise NotFound("Leave type not found")
    return leave_type


async def _get_balance_for_update(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
) -> LeaveBalance | None:
    """Read the balance row with a FOR UPDATE lock, refreshing any cached copy."""
    result = await session.execute(
        select(LeaveBalance)
        .where(
            col(LeaveBalance.employee_id) == employee_id,
            col(LeaveBalance.leave_type_id) == leave_type_id,
        )
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _pending_days_by_type(session: AsyncSession, employee_id: uuid.UUID) -> dict[uuid.UUID, int]:
    """Sum days_requested of the employee's pending requests per leave type."""
    result = await session.execute(
        select(col(LeaveRequest.leave_type_id), func.coalesce(func.sum(col(LeaveRequest.days_requested)), 0))
        .where(
            col(LeaveRequest.employee_id) == employee_id,
            col(LeaveRequest.status) == RequestStatus.PENDING.value,
        )
        .group_by(col(LeaveRequest.leave_type_id))
    )
    return {row[0]: int(row[1]) for row in result.all()}


# ---------------------------------------------------------------------------
# Collaborator contract: getBalance / commitBalanceDelta
# ---------------------------------------------------------------------------


async def get_balance(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
) -> LeaveBalance | None:
    """Return the balance row for (employee, leave type), or None if absent."""
    result = await session.execute(
        select(LeaveBalance).where(
            col(LeaveBalance.employee_id) == employee_id,
            col(LeaveBalance.leave_type_id) == leave_type_id,
        )
    )
    return result.scalar_one_or_none()


async def commit_balance_delta(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    delta_days: int,
    *,
    source_id: str,
    actor_id: uuid.UUID | None = None,
    metadata: dict[str, Any] | None = None,
) -> LeaveBalance:
    """Apply a change to ``used_days`` inside the caller's transaction.

    A positive delta records USAGE, a negative delta records a REVERSAL. The
    ledger's idempotency constraint allows one of each per source, so a
    duplicate surfaces as IntegrityError on flush.

    Raises UnknownLeaveType if no balance row exists, InsufficientBalance if
    usage would overdraw a balance without override, and BalanceInconsistency
    if a reversal would drive used_days below zero.
    """
    balance = await _get_balance_for_update(session, employee_id, leave_type_id)
    if balance is None:
        raise UnknownLeaveType("Employee has no balance for this leave type")

    new_used = balance.used_days + delta_days
    if new_used < 0:
        logger.error(
            "Balance inconsistency: employee=%s leave_type=%s used=%d delta=%d source=%s",
            employee_id,
            leave_type_id,
            balance.used_days,
            delta_days,
            source_id,
        )
        raise BalanceInconsistency(
            f"Reversing {-delta_days} day(s) would leave used_days at {new_used}; balance data is inconsistent"
        )
    if delta_days > 0:
        _check_available(balance, balance.allocated_days - new_used, "approval")

    entry = LeaveLedgerEntry(
        employee_id=employee_id,
        leave_type_id=leave_type_id,
        entry_type=(LedgerEntryType.USAGE if delta_days > 0 else LedgerEntryType.REVERSAL).value,
        amount_days=-delta_days,
        effective_at=now_utc(),
        source_type=LedgerSourceType.REQUEST.value,
        source_id=source_id,
        actor_id=actor_id,
        metadata_json=metadata,
    )
    session.add(entry)

    balance.used_days = new_used
    _refresh_available(balance)

    await session.flush()
    return balance


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def list_employee_balances(
    session: AsyncSession,
    employee_id: uuid.UUID,
) -> BalanceListResponse:
    """Get every leave balance held by an employee."""
    result = await session.execute(
        select(LeaveBalance, LeaveType)
        .join(LeaveType, col(LeaveType.id) == col(LeaveBalance.leave_type_id))
        .where(col(LeaveBalance.employee_id) == employee_id)
        .order_by(col(LeaveType.name))
    )
    rows = list(result.all())
    pending = await _pending_days_by_type(session, employee_id)

    items = [
        _build_balance_response(balance, leave_type, pending.get(balance.leave_type_id, 0))
        for balance, leave_type in rows
    ]
    return BalanceListResponse(items=items, total=len(items))


async def get_employee_balance(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
) -> BalanceResponse:
    """Get one balance or raise 404."""
    balance = await get_balance(session, employee_id, leave_type_id)
    if balance is None:
        raise NotFound("Balance not found")
    leave_type = await _get_leave_type_or_404(session, leave_type_id)
    pending = await _pending_days_by_type(session, employee_id)
    return _build_balance_response(balance, leave_type, pending.get(leave_type_id, 0))


async def get_employee_ledger(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID | None = None,
    offset: int = 0,
    limit: int = 50,
) -> LedgerListResponse:
    """Get paginated ledger entries for an employee, newest first."""
    base_filter = [col(LeaveLedgerEntry.employee_id) == employee_id]
    if leave_type_id is not None:
        base_filter.append(col(LeaveLedgerEntry.leave_type_id) == leave_type_id)

    count_result = await session.execute(select(func.count()).select_from(LeaveLedgerEntry).where(*base_filter))
    total = count_result.scalar_one()

    entries_result = await session.execute(
        select(LeaveLedgerEntry)
        .where(*base_filter)
        .order_by(
            col(LeaveLedgerEntry.effective_at).desc(),
            col(LeaveLedgerEntry.created_at).desc(),
        )
        .offset(offset)
        .limit(limit)
    )
    entries = list(entries_result.scalars().all())

    return LedgerListResponse(
        items=[_build_ledger_entry_response(e) for e in entries],
        total=total,
    )


# ---------------------------------------------------------------------------
# Write path: allocation and admin adjustments
# ---------------------------------------------------------------------------


async def allocate_balance(
    session: AsyncSession,
    actor_id: uuid.UUID,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    payload: AllocateBalanceRequest,
) -> BalanceResponse:
    """Create or reset an employee's allocation for a leave type.

    Used days are kept; available days are re-derived from the new allocation.
    """
    leave_type = await _get_leave_type_or_404(session, leave_type_id)
    allocated = payload.allocated_days if payload.allocated_days is not None else leave_type.max_days_per_year

    balance = await _get_balance_for_update(session, employee_id, leave_type_id)
    before_dict = model_to_audit_dict(balance) if balance is not None else None
    if balance is None:
        balance = LeaveBalance(employee_id=employee_id, leave_type_id=leave_type_id)
        session.add(balance)

    balance.allow_negative = payload.allow_negative
    _check_available(balance, allocated - balance.used_days, "allocation")

    delta = allocated - balance.allocated_days
    entry_id = uuid.uuid4()
    session.add(
        LeaveLedgerEntry(
            id=entry_id,
            employee_id=employee_id,
            leave_type_id=leave_type_id,
            entry_type=LedgerEntryType.ALLOCATION.value,
            amount_days=delta,
            effective_at=now_utc(),
            source_type=LedgerSourceType.ADMIN.value,
            source_id=str(entry_id),
            actor_id=actor_id,
            metadata_json={"allocated_days": allocated},
        )
    )

    balance.allocated_days = allocated
    _refresh_available(balance)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=actor_id,
        entity_type=AuditEntityType.BALANCE,
        entity_id=_balance_key(employee_id, leave_type_id),
        action=AuditAction.ALLOCATE,
        before_json=before_dict,
        after_json=model_to_audit_dict(balance),
    )

    await session.commit()
    pending = await _pending_days_by_type(session, employee_id)
    return _build_balance_response(balance, leave_type, pending.get(leave_type_id, 0))


async def create_adjustment(
    session: AsyncSession,
    actor_id: uuid.UUID,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    payload: CreateAdjustmentRequest,
) -> LedgerEntryResponse:
    """Add or deduct allocated days with a recorded reason."""
    balance = await _get_balance_for_update(session, employee_id, leave_type_id)
    if balance is None:
        raise UnknownLeaveType("Employee has no balance for this leave type")

    if payload.amount_days < 0:
        _check_available(balance, balance.available_days + payload.amount_days, "adjustment")

    before_dict = model_to_audit_dict(balance)
    entry_id = uuid.uuid4()
    entry = LeaveLedgerEntry(
        id=entry_id,
        employee_id=employee_id,
        leave_type_id=leave_type_id,
        entry_type=LedgerEntryType.ADJUSTMENT.value,
        amount_days=payload.amount_days,
        effective_at=now_utc(),
        source_type=LedgerSourceType.ADMIN.value,
        source_id=str(entry_id),
        actor_id=actor_id,
        metadata_json={"reason": payload.reason},
    )
    session.add(entry)

    balance.allocated_days += payload.amount_days
    _refresh_available(balance)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=actor_id,
        entity_type=AuditEntityType.BALANCE,
        entity_id=_balance_key(employee_id, leave_type_id),
        action=AuditAction.ADJUST,
        before_json=before_dict,
        after_json=model_to_audit_dict(balance),
    )

    await session.commit()
    await session.refresh(entry)
    return _build_ledger_entry_response(entry)
