# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from leave_ledger.models.enums import RosterScope


class EmployeeInfo(BaseModel):
    """Employee metadata from the Employee Directory."""

    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    team_id: uuid.UUID | None = None
    department_id: uuid.UUID | None = None


@runtime_checkable
class EmployeeService(Protocol):
    """Interface for the Employee Directory."""

    async def get_employee(self, employee_id: uuid.UUID) -> EmployeeInfo | None:
        """Fetch employee metadata. Returns None if not found."""
        ...

    async def list_employees(
        self,
        team_id: uuid.UUID | None = None,
        department_id: uuid.UUID | None = None,
    ) -> list[EmployeeInfo]:
        """List employees, optionally restricted to one team and/or department."""
        ...


class InMemoryEmployeeService:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._employees: dict[uuid.UUID, EmployeeInfo] = {}

    def seed(self, employee: EmployeeInfo) -> None:
        self._employees[employee.id] = employee

    async def get_employee(self, employee_id: uuid.UUID) -> EmployeeInfo | None:
        return self._employees.get(employee_id)

    async def list_employees(
        self,
        team_id: uuid.UUID | None = None,
        department_id: uuid.UUID | None = None,
    ) -> list[EmployeeInfo]:
        return [
            e
            for e in self._employees.values()
            if (team_id is None or e.team_id == team_id)
            and (department_id is None or e.department_id == department_id)
        ]


_employee_service: EmployeeService = InMemoryEmployeeService()


def get_employee_service() -> EmployeeService:
    """FastAPI dependency for the Employee Directory."""
    return _employee_service


def set_employee_service(service: EmployeeService) -> None:
    """Override the service (for testing or production wiring)."""
    global _employee_service
    _employee_service = service


async def get_roster_size(scope: RosterScope, scope_id: uuid.UUID) -> int:
    """Headcount of a team or department according to the directory."""
    if scope is RosterScope.TEAM:
        return len(await _employee_service.list_employees(team_id=scope_id))
    return len(await _employee_service.list_employees(department_id=scope_id))
