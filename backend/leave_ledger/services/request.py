# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlmodel import col

from leave_ledger.exceptions import (
    Conflict,
    Forbidden,
    InvalidDateRange,
    InvalidTransition,
    NotFound,
    UnknownLeaveType,
)
from leave_ledger.models.enums import AuditAction, AuditEntityType, RequestStatus, RosterScope
from leave_ledger.models.leave_type import LeaveType
from leave_ledger.models.request import LeaveRequest
from leave_ledger.schemas.request import LeaveRequestListResponse, LeaveRequestResponse
from leave_ledger.services.audit import model_to_audit_dict, write_audit_log
from leave_ledger.services.balance import get_balance
from leave_ledger.services.duration import calculate_requested_days
from leave_ledger.services.employee import get_employee_service
from leave_ledger.services.workflow import get_request_for_update

if TYPE_CHECKING:
    from datetime import date

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.schemas.auth import AuthContext
    from leave_ledger.schemas.request import (
        DateRange,
        RequestFilter,
        SubmitLeaveRequestPayload,
        UpdateLeaveRequestPayload,
    )

logger = logging.getLogger(__name__)

_ACTIVE_STATUSES = [RequestStatus.PENDING.value, RequestStatus.APPROVED.value]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def build_request_response(request: LeaveRequest) -> LeaveRequestResponse:
    """Map a request model to its response schema."""
    return LeaveRequestResponse(
        id=request.id,
        employee_id=request.employee_id,
        leave_type_id=request.leave_type_id,
        team_id=request.team_id,
        department_id=request.department_id,
        start_date=request.start_date,
        end_date=request.end_date,
        days_requested=request.days_requested,
        reason=request.reason,
        status=RequestStatus(request.status),
        created_at=request.created_at,
        decided_at=request.decided_at,
        decided_by=request.decided_by,
        decision_comment=request.decision_comment,
        cancelled_at=request.cancelled_at,
        cancelled_by=request.cancelled_by,
        cancellation_reason=request.cancellation_reason,
    )


async def _check_request_overlap(
    session: AsyncSession,
    employee_id: uuid.UUID,
    start_date: date,
    end_date: date,
    exclude_id: uuid.UUID | None = None,
) -> None:
    """Raise 409 if the employee already has a pending or approved request touching the period.

    ``exclude_id`` leaves one request out, so an edited request does not clash with itself.
    """
    conditions = [
        col(LeaveRequest.employee_id) == employee_id,
        col(LeaveRequest.status).in_(_ACTIVE_STATUSES),
        col(LeaveRequest.start_date) <= end_date,
        col(LeaveRequest.end_date) >= start_date,
    ]
    if exclude_id is not None:
        conditions.append(col(LeaveRequest.id) != exclude_id)
    result = await session.execute(select(col(LeaveRequest.id)).where(*conditions).limit(1))
    if result.scalar_one_or_none() is not None:
        raise Conflict("Request overlaps with an existing pending or approved request")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def submit_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: SubmitLeaveRequestPayload,
) -> LeaveRequestResponse:
    """Submit a leave request in ``pending`` status.

    Flow:
    1. Validate the period ordering
    2. Require a balance record for (employee, leave type)
    3. Count the requested days under the day-count policy
    4. Reject overlaps with the employee's own active requests
    5. Resolve the employee's team and department from the directory
    6. Create the request, audit, commit

    Available balance is not checked and nothing is reserved: days are only
    committed on approval.
    """
    if auth.user_id != payload.employee_id and not auth.is_manager:
        raise Forbidden("Not authorized to submit leave for another employee")

    if payload.end_date < payload.start_date:
        raise InvalidDateRange("start_date must not be after end_date")

    balance = await get_balance(session, payload.employee_id, payload.leave_type_id)
    leave_type = await session.get(LeaveType, payload.leave_type_id)
    if balance is None or leave_type is None or not leave_type.is_active:
        raise UnknownLeaveType("Employee has no balance for this leave type")

    days_requested = await calculate_requested_days(session, payload.start_date, payload.end_date)

    await _check_request_overlap(session, payload.employee_id, payload.start_date, payload.end_date)

    employee = await get_employee_service().get_employee(payload.employee_id)

    leave_request = LeaveRequest(
        employee_id=payload.employee_id,
        leave_type_id=payload.leave_type_id,
        team_id=employee.team_id if employee is not None else None,
        department_id=employee.department_id if employee is not None else None,
        start_date=payload.start_date,
        end_date=payload.end_date,
        days_requested=days_requested,
        reason=payload.reason,
        status=RequestStatus.PENDING.value,
    )
    session.add(leave_request)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.REQUEST,
        entity_id=leave_request.id,
        action=AuditAction.SUBMIT,
        after_json=model_to_audit_dict(leave_request),
    )

    await session.commit()
    await session.refresh(leave_request)
    logger.info(
        "Leave request %s submitted: employee=%s days=%d",
        leave_request.id,
        leave_request.employee_id,
        days_requested,
    )
    return build_request_response(leave_request)


async def get_request(session: AsyncSession, request_id: uuid.UUID) -> LeaveRequest:
    """Fetch a request by ID. Raises 404 if not found."""
    request = await session.get(LeaveRequest, request_id)
    if request is None:
        raise NotFound("Leave request not found")
    return request


async def get_leave_request(session: AsyncSession, request_id: uuid.UUID) -> LeaveRequestResponse:
    """Get a single request as a response schema."""
    return build_request_response(await get_request(session, request_id))


async def update_pending_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: UpdateLeaveRequestPayload,
) -> LeaveRequestResponse:
    """Edit the dates or reason of a pending request and recount its days.

    Only the requesting employee or a manager may edit. Raises InvalidTransition
    once the request has left ``pending``. The same range, day-count and overlap
    checks as submission apply, with the request itself excluded from the overlap.
    """
    request = await get_request_for_update(session, request_id)
    if request.employee_id != auth.user_id and not auth.is_manager:
        raise Forbidden("Not authorized to edit this request")
    if request.status != RequestStatus.PENDING.value:
        raise InvalidTransition(f"Only pending requests can be edited (status is {request.status})")

    start_date = payload.start_date or request.start_date
    end_date = payload.end_date or request.end_date
    if end_date < start_date:
        raise InvalidDateRange("start_date must not be after end_date")

    days_requested = await calculate_requested_days(session, start_date, end_date)
    await _check_request_overlap(session, request.employee_id, start_date, end_date, exclude_id=request.id)

    before_dict = model_to_audit_dict(request)
    request.start_date = start_date
    request.end_date = end_date
    request.days_requested = days_requested
    if "reason" in payload.model_fields_set:
        request.reason = payload.reason
    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.REQUEST,
        entity_id=request.id,
        action=AuditAction.UPDATE,
        before_json=before_dict,
        after_json=model_to_audit_dict(request),
    )

    await session.commit()
    await session.refresh(request)
    logger.info("Leave request %s edited: %s..%s days=%d", request.id, start_date, end_date, days_requested)
    return build_request_response(request)


async def list_requests(session: AsyncSession, filters: RequestFilter) -> LeaveRequestListResponse:
    """List requests matching the filter, newest first."""
    conditions = []
    if filters.status is not None:
        conditions.append(col(LeaveRequest.status) == filters.status.value)
    if filters.employee_id is not None:
        conditions.append(col(LeaveRequest.employee_id) == filters.employee_id)
    if filters.leave_type_id is not None:
        conditions.append(col(LeaveRequest.leave_type_id) == filters.leave_type_id)
    if filters.team_id is not None:
        conditions.append(col(LeaveRequest.team_id) == filters.team_id)
    if filters.department_id is not None:
        conditions.append(col(LeaveRequest.department_id) == filters.department_id)
    if filters.start_date is not None:
        conditions.append(col(LeaveRequest.end_date) >= filters.start_date)
    if filters.end_date is not None:
        conditions.append(col(LeaveRequest.start_date) <= filters.end_date)

    count_result = await session.execute(select(func.count()).select_from(LeaveRequest).where(*conditions))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveRequest)
        .where(*conditions)
        .order_by(col(LeaveRequest.created_at).desc())
        .offset(filters.offset)
        .limit(filters.limit)
    )
    requests = list(result.scalars().all())

    return LeaveRequestListResponse(
        items=[build_request_response(r) for r in requests],
        total=total,
    )


def _scope_column(scope: RosterScope) -> Any:
    return col(LeaveRequest.team_id) if scope is RosterScope.TEAM else col(LeaveRequest.department_id)


async def list_scope_requests(
    session: AsyncSession,
    scope: RosterScope,
    scope_id: uuid.UUID,
    date_range: DateRange,
    statuses: list[RequestStatus],
) -> list[LeaveRequest]:
    """Team or department requests in the given statuses whose period touches the range, by start date."""
    result = await session.execute(
        select(LeaveRequest)
        .where(
            _scope_column(scope) == scope_id,
            col(LeaveRequest.status).in_([s.value for s in statuses]),
            col(LeaveRequest.start_date) <= date_range.end,
            col(LeaveRequest.end_date) >= date_range.start,
        )
        .order_by(col(LeaveRequest.start_date), col(LeaveRequest.created_at))
    )
    return list(result.scalars().all())


async def list_approved_requests_overlapping(
    session: AsyncSession,
    scope_id: uuid.UUID,
    date_range: DateRange,
    scope: RosterScope = RosterScope.TEAM,
) -> list[LeaveRequest]:
    """Approved requests in the team (or department) whose period overlaps the range (inclusive)."""
    return await list_scope_requests(session, scope, scope_id, date_range, [RequestStatus.APPROVED])
