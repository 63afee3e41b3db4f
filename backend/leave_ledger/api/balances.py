# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from leave_ledger.api.deps import AuthDep, ManagerDep
from leave_ledger.db import SessionDep
from leave_ledger.exceptions import Forbidden
from leave_ledger.schemas.auth import AuthContext
from leave_ledger.schemas.balance import (
    AllocateBalanceRequest,
    BalanceListResponse,
    BalanceResponse,
    CreateAdjustmentRequest,
    LedgerEntryResponse,
    LedgerListResponse,
)
from leave_ledger.services import balance as balance_service

employee_balance_router = APIRouter(
    prefix="/employees/{employee_id}/balances",
    tags=["balances"],
)

employee_ledger_router = APIRouter(
    prefix="/employees/{employee_id}/ledger",
    tags=["balances"],
)


def _ensure_can_view(auth: AuthContext, employee_id: uuid.UUID) -> None:
    if auth.user_id != employee_id and not auth.is_manager:
        raise Forbidden("Not authorized to view another employee's balances")


@employee_balance_router.get("", response_model=BalanceListResponse)
async def list_employee_balances(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> BalanceListResponse:
    """Get all leave balances for an employee."""
    _ensure_can_view(auth, employee_id)
    return await balance_service.list_employee_balances(session, employee_id)


@employee_balance_router.get("/{leave_type_id}", response_model=BalanceResponse)
async def get_employee_balance(
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> BalanceResponse:
    """Get one leave balance for an employee."""
    _ensure_can_view(auth, employee_id)
    return await balance_service.get_employee_balance(session, employee_id, leave_type_id)


@employee_balance_router.put("/{leave_type_id}", response_model=BalanceResponse)
async def allocate_balance(
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    payload: AllocateBalanceRequest,
    session: SessionDep,
    auth: ManagerDep,
) -> BalanceResponse:
    """Create or reset an allocation (manager only)."""
    return await balance_service.allocate_balance(session, auth.user_id, employee_id, leave_type_id, payload)


@employee_balance_router.post(
    "/{leave_type_id}/adjustments",
    response_model=LedgerEntryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_adjustment(
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    payload: CreateAdjustmentRequest,
    session: SessionDep,
    auth: ManagerDep,
) -> LedgerEntryResponse:
    """Create an admin balance adjustment (manager only)."""
    return await balance_service.create_adjustment(session, auth.user_id, employee_id, leave_type_id, payload)


@employee_ledger_router.get("", response_model=LedgerListResponse)
async def get_employee_ledger(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    leave_type_id: uuid.UUID | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> LedgerListResponse:
    """Get paginated ledger entries for an employee."""
    _ensure_can_view(auth, employee_id)
    return await balance_service.get_employee_ledger(session, employee_id, leave_type_id, offset, limit)
