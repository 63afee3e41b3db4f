# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query, status

from leave_ledger.api.deps import AuthDep, ManagerDep
from leave_ledger.db import SessionDep
from leave_ledger.exceptions import Forbidden
from leave_ledger.models.enums import RequestStatus
from leave_ledger.schemas.conflict import ConflictResponse
from leave_ledger.schemas.report import RequestHistoryResponse
from leave_ledger.schemas.request import (
    BulkActionResponse,
    BulkDecisionPayload,
    CancellationPayload,
    CancellationResponse,
    DecisionPayload,
    LeaveRequestListResponse,
    LeaveRequestResponse,
    RequestFilter,
    SubmitLeaveRequestPayload,
    UpdateLeaveRequestPayload,
)
from leave_ledger.services import approval as approval_service
from leave_ledger.services import conflict as conflict_service
from leave_ledger.services import report as report_service
from leave_ledger.services import request as request_service

requests_router = APIRouter(prefix="/requests", tags=["requests"])


@requests_router.post("", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
async def submit_request(
    payload: SubmitLeaveRequestPayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Submit a new leave request."""
    return await request_service.submit_request(session, auth, payload)


@requests_router.get("", response_model=LeaveRequestListResponse)
async def list_requests(
    session: SessionDep,
    auth: AuthDep,
    status_filter: RequestStatus | None = Query(default=None, alias="status"),
    employee_id: uuid.UUID | None = Query(default=None),
    leave_type_id: uuid.UUID | None = Query(default=None),
    team_id: uuid.UUID | None = Query(default=None),
    department_id: uuid.UUID | None = Query(default=None),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> LeaveRequestListResponse:
    """List leave requests. Non-managers only see their own."""
    if not auth.is_manager:
        if employee_id is not None and employee_id != auth.user_id:
            raise Forbidden("Not authorized to list another employee's requests")
        employee_id = auth.user_id

    filters = RequestFilter(
        status=status_filter,
        employee_id=employee_id,
        leave_type_id=leave_type_id,
        team_id=team_id,
        department_id=department_id,
        start_date=start_date,
        end_date=end_date,
        offset=offset,
        limit=limit,
    )
    return await request_service.list_requests(session, filters)


@requests_router.post("/bulk/approve", response_model=BulkActionResponse)
async def bulk_approve(
    payload: BulkDecisionPayload,
    session: SessionDep,
    auth: ManagerDep,
) -> BulkActionResponse:
    """Approve many pending requests; each id succeeds or fails on its own (manager only)."""
    return await approval_service.approve_many(session, payload.request_ids, auth.user_id, payload.comment)


@requests_router.post("/bulk/reject", response_model=BulkActionResponse)
async def bulk_reject(
    payload: BulkDecisionPayload,
    session: SessionDep,
    auth: ManagerDep,
) -> BulkActionResponse:
    """Reject many pending requests with one shared comment (manager only)."""
    return await approval_service.reject_many(session, payload.request_ids, auth.user_id, payload.comment)


@requests_router.get("/{request_id}", response_model=LeaveRequestResponse)
async def get_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Get a single leave request."""
    response = await request_service.get_leave_request(session, request_id)
    if response.employee_id != auth.user_id and not auth.is_manager:
        raise Forbidden("Not authorized to view this request")
    return response


@requests_router.patch("/{request_id}", response_model=LeaveRequestResponse)
async def update_request(
    request_id: uuid.UUID,
    payload: UpdateLeaveRequestPayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Edit the dates or reason of a pending request (owner or manager)."""
    return await request_service.update_pending_request(session, auth, request_id, payload)


@requests_router.get("/{request_id}/history", response_model=RequestHistoryResponse)
async def get_request_history(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> RequestHistoryResponse:
    """Submission, decision and cancellation steps of a request, oldest first."""
    request = await request_service.get_request(session, request_id)
    if request.employee_id != auth.user_id and not auth.is_manager:
        raise Forbidden("Not authorized to view this request")
    return await report_service.get_request_history(session, request_id)


@requests_router.get("/{request_id}/conflict", response_model=ConflictResponse)
async def get_request_conflict(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: ManagerDep,
) -> ConflictResponse:
    """How many approved teammates are off during this request (manager only)."""
    return await conflict_service.get_request_conflict(session, request_id)


@requests_router.post("/{request_id}/approve", response_model=LeaveRequestResponse)
async def approve_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: ManagerDep,
    payload: DecisionPayload | None = None,
) -> LeaveRequestResponse:
    """Approve a pending request (manager only)."""
    comment = payload.comment if payload else None
    return await approval_service.approve_one(session, request_id, auth.user_id, comment)


@requests_router.post("/{request_id}/reject", response_model=LeaveRequestResponse)
async def reject_request(
    request_id: uuid.UUID,
    payload: DecisionPayload,
    session: SessionDep,
    auth: ManagerDep,
) -> LeaveRequestResponse:
    """Reject a pending request with a comment (manager only)."""
    return await approval_service.reject_one(session, request_id, auth.user_id, payload.comment)


@requests_router.post("/{request_id}/cancel", response_model=CancellationResponse)
async def cancel_request(
    request_id: uuid.UUID,
    payload: CancellationPayload,
    session: SessionDep,
    auth: ManagerDep,
) -> CancellationResponse:
    """Cancel an approved request and restore its days (manager only)."""
    return await approval_service.cancel_approved(session, request_id, auth.user_id, payload.reason)
