# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query

from leave_ledger.api.deps import AuthDep, ManagerDep
from leave_ledger.exceptions import NotFound
from leave_ledger.schemas.employee import EmployeeListResponse, EmployeeResponse, UpsertEmployeeRequest
from leave_ledger.services.employee import EmployeeInfo, get_employee_service

employees_router = APIRouter(prefix="/employees", tags=["employees"])


def _to_response(employee: EmployeeInfo) -> EmployeeResponse:
    return EmployeeResponse.model_validate(employee.model_dump())


@employees_router.put("/{employee_id}", response_model=EmployeeResponse)
async def upsert_employee(
    employee_id: uuid.UUID,
    payload: UpsertEmployeeRequest,
    auth: ManagerDep,
) -> EmployeeResponse:
    """Create or update an employee in the stub directory (manager only)."""
    employee = EmployeeInfo(id=employee_id, **payload.model_dump())
    get_employee_service().seed(employee)  # ty: ignore[unresolved-attribute]
    return _to_response(employee)


@employees_router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: uuid.UUID,
    auth: AuthDep,
) -> EmployeeResponse:
    """Get employee info from the directory."""
    employee = await get_employee_service().get_employee(employee_id)
    if employee is None:
        raise NotFound("Employee not found")
    return _to_response(employee)


@employees_router.get("", response_model=EmployeeListResponse)
async def list_employees(
    auth: AuthDep,
    team_id: uuid.UUID | None = Query(default=None),
    department_id: uuid.UUID | None = Query(default=None),
) -> EmployeeListResponse:
    """List employees, optionally for one team and/or department."""
    employees = await get_employee_service().list_employees(team_id, department_id)
    return EmployeeListResponse(items=[_to_response(e) for e in employees], total=len(employees))
