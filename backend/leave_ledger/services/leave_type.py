from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leave_ledger.exceptions import Conflict, NotFound
from leave_ledger.models.enums import AuditAction, AuditEntityType
from leave_ledger.models.leave_type import LeaveType
from leave_ledger.schemas.leave_type import LeaveTypeListResponse, LeaveTypeResponse
from leave_ledger.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.schemas.auth import AuthContext
    from leave_ledger.schemas.leave_type import CreateLeaveTypeRequest


def _build_leave_type_response(leave_type: LeaveType) -> LeaveTypeResponse:
    return LeaveTypeResponse(
        id=leave_type.id,
        name=leave_type.name,
        code=leave_type.code,
        description=leave_type.description,
        color=leave_type.color,
        max_days_per_year=leave_type.max_days_per_year,
        is_paid=leave_type.is_paid,
        is_active=leave_type.is_active,
        created_at=leave_type.created_at,
    )


async def create_leave_type(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateLeaveTypeRequest,
) -> LeaveTypeResponse:
    """Create a leave type. Codes are unique."""
    leave_type = LeaveType(
        name=payload.name,
        code=payload.code,
        description=payload.description,
        color=payload.color,
        max_days_per_year=payload.max_days_per_year,
        is_paid=payload.is_paid,
    )
    session.add(leave_type)

    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise Conflict(f"Leave type with code {payload.code} already exists") from None

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_TYPE,
        entity_id=leave_type.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(leave_type),
    )

    await session.commit()
    await session.refresh(leave_type)
    return _build_leave_type_response(leave_type)


async def get_leave_type(session: AsyncSession, leave_type_id: uuid.UUID) -> LeaveTypeResponse:
    """Get a single leave type or raise 404."""
    leave_type = await session.get(LeaveType, leave_type_id)
    if leave_type is None:
        raise NotFound("Leave type not found")
    return _build_leave_type_response(leave_type)


async def list_leave_types(session: AsyncSession, *, include_inactive: bool = False) -> LeaveTypeListResponse:
    """List leave types ordered by name."""
    filters = [] if include_inactive else [col(LeaveType.is_active).is_(True)]

    count_result = await session.execute(select(func.count()).select_from(LeaveType).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(select(LeaveType).where(*filters).order_by(col(LeaveType.name)))
    return LeaveTypeListResponse(
        items=[_build_leave_type_response(lt) for lt in result.scalars().all()],
        total=total,
    )
