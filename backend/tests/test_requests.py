"""Tests for submitting, listing and reading leave requests."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import select
from sqlmodel import col

from leave_ledger.models.audit import AuditLog
from leave_ledger.models.enums import AuditAction
from leave_ledger.services.employee import EmployeeInfo, InMemoryEmployeeService, set_employee_service

if TYPE_CHECKING:
    from collections.abc import Iterator

    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

MANAGER_ID = uuid.uuid4()
EMPLOYEE_ID = uuid.uuid4()
OTHER_EMPLOYEE_ID = uuid.uuid4()
TEAM_ID = uuid.uuid4()

MANAGER_HEADERS = {"X-User-Id": str(MANAGER_ID), "X-Role": "manager"}
EMPLOYEE_HEADERS = {"X-User-Id": str(EMPLOYEE_ID), "X-Role": "employee"}
OTHER_HEADERS = {"X-User-Id": str(OTHER_EMPLOYEE_ID), "X-Role": "employee"}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _seed_employee_service() -> Iterator[None]:
    svc = InMemoryEmployeeService()
    for employee_id, name in ((EMPLOYEE_ID, "Test"), (OTHER_EMPLOYEE_ID, "Other")):
        svc.seed(
            EmployeeInfo(
                id=employee_id,
                first_name=name,
                last_name="Employee",
                email=f"{name.lower()}@example.com",
                team_id=TEAM_ID,
            )
        )
    set_employee_service(svc)
    yield
    set_employee_service(InMemoryEmployeeService())


@pytest.fixture
async def leave_type_id(async_client: AsyncClient) -> str:
    """Annual leave with a 10-day allocation for both employees."""
    resp = await async_client.post(
        "/leave-types",
        json={"name": "Annual Leave", "code": "AL", "max_days_per_year": 10},
        headers=MANAGER_HEADERS,
    )
    ltid: str = resp.json()["id"]
    for employee_id in (EMPLOYEE_ID, OTHER_EMPLOYEE_ID):
        alloc = await async_client.put(f"/employees/{employee_id}/balances/{ltid}", json={}, headers=MANAGER_HEADERS)
        assert alloc.status_code == 200
    return ltid


def _payload(leave_type_id: str, start: str, end: str, employee_id: uuid.UUID = EMPLOYEE_ID) -> dict[str, str]:
    return {
        "employee_id": str(employee_id),
        "leave_type_id": leave_type_id,
        "start_date": start,
        "end_date": end,
        "reason": "Vacation",
    }


# ---------------------------------------------------------------------------
# Submit
# ---------------------------------------------------------------------------


async def test_submit_creates_pending_request(async_client: AsyncClient, leave_type_id: str) -> None:
    resp = await async_client.post(
        "/requests", json=_payload(leave_type_id, "2026-03-02", "2026-03-04"), headers=EMPLOYEE_HEADERS
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["status"] == "pending"
    assert data["days_requested"] == 3
    assert data["team_id"] == str(TEAM_ID)
    assert data["decided_at"] is None


async def test_submit_does_not_touch_balance(async_client: AsyncClient, leave_type_id: str) -> None:
    await async_client.post(
        "/requests", json=_payload(leave_type_id, "2026-03-02", "2026-03-04"), headers=EMPLOYEE_HEADERS
    )

    balance = await async_client.get(f"/employees/{EMPLOYEE_ID}/balances/{leave_type_id}", headers=EMPLOYEE_HEADERS)
    data = balance.json()
    assert data["used_days"] == 0
    assert data["available_days"] == 10
    assert data["pending_days"] == 3


async def test_submit_more_than_available_is_accepted(async_client: AsyncClient, leave_type_id: str) -> None:
    resp = await async_client.post(
        "/requests", json=_payload(leave_type_id, "2026-03-01", "2026-03-20"), headers=EMPLOYEE_HEADERS
    )
    assert resp.status_code == 201
    assert resp.json()["days_requested"] == 20


async def test_submit_reversed_dates(async_client: AsyncClient, leave_type_id: str) -> None:
    resp = await async_client.post(
        "/requests", json=_payload(leave_type_id, "2026-03-04", "2026-03-02"), headers=EMPLOYEE_HEADERS
    )
    assert resp.status_code == 422
    assert resp.json()["error"] == "InvalidDateRange"


async def test_submit_without_balance(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        "/leave-types", json={"name": "Sick Leave", "code": "SL"}, headers=MANAGER_HEADERS
    )
    sick_id = resp.json()["id"]

    resp = await async_client.post(
        "/requests", json=_payload(sick_id, "2026-03-02", "2026-03-02"), headers=EMPLOYEE_HEADERS
    )
    assert resp.status_code == 422
    assert resp.json()["error"] == "UnknownLeaveType"


async def test_submit_overlapping_own_request(async_client: AsyncClient, leave_type_id: str) -> None:
    first = await async_client.post(
        "/requests", json=_payload(leave_type_id, "2026-03-02", "2026-03-04"), headers=EMPLOYEE_HEADERS
    )
    assert first.status_code == 201

    resp = await async_client.post(
        "/requests", json=_payload(leave_type_id, "2026-03-04", "2026-03-06"), headers=EMPLOYEE_HEADERS
    )
    assert resp.status_code == 409
    assert resp.json()["error"] == "Conflict"


async def test_submit_adjacent_request_allowed(async_client: AsyncClient, leave_type_id: str) -> None:
    await async_client.post(
        "/requests", json=_payload(leave_type_id, "2026-03-02", "2026-03-04"), headers=EMPLOYEE_HEADERS
    )
    resp = await async_client.post(
        "/requests", json=_payload(leave_type_id, "2026-03-05", "2026-03-06"), headers=EMPLOYEE_HEADERS
    )
    assert resp.status_code == 201


async def test_employee_cannot_submit_for_someone_else(async_client: AsyncClient, leave_type_id: str) -> None:
    resp = await async_client.post(
        "/requests",
        json=_payload(leave_type_id, "2026-03-02", "2026-03-02", employee_id=OTHER_EMPLOYEE_ID),
        headers=EMPLOYEE_HEADERS,
    )
    assert resp.status_code == 403


async def test_manager_can_submit_on_behalf(async_client: AsyncClient, leave_type_id: str) -> None:
    resp = await async_client.post(
        "/requests", json=_payload(leave_type_id, "2026-03-02", "2026-03-02"), headers=MANAGER_HEADERS
    )
    assert resp.status_code == 201
    assert resp.json()["employee_id"] == str(EMPLOYEE_ID)


async def test_submit_writes_audit(async_client: AsyncClient, leave_type_id: str, db_session: AsyncSession) -> None:
    resp = await async_client.post(
        "/requests", json=_payload(leave_type_id, "2026-03-02", "2026-03-02"), headers=EMPLOYEE_HEADERS
    )
    request_id = resp.json()["id"]

    result = await db_session.execute(select(AuditLog).where(col(AuditLog.entity_id) == request_id))
    entry = result.scalar_one()
    assert entry.action == AuditAction.SUBMIT.value
    assert entry.actor_id == EMPLOYEE_ID
    assert entry.after_json is not None
    assert entry.after_json["status"] == "pending"


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------


async def test_get_request(async_client: AsyncClient, leave_type_id: str) -> None:
    created = await async_client.post(
        "/requests", json=_payload(leave_type_id, "2026-03-02", "2026-03-02"), headers=EMPLOYEE_HEADERS
    )
    request_id = created.json()["id"]

    own = await async_client.get(f"/requests/{request_id}", headers=EMPLOYEE_HEADERS)
    assert own.status_code == 200
    assert own.json()["id"] == request_id

    other = await async_client.get(f"/requests/{request_id}", headers=OTHER_HEADERS)
    assert other.status_code == 403


async def test_get_request_not_found(async_client: AsyncClient) -> None:
    resp = await async_client.get(f"/requests/{uuid.uuid4()}", headers=MANAGER_HEADERS)
    assert resp.status_code == 404


async def test_list_requests_scoped_for_employees(async_client: AsyncClient, leave_type_id: str) -> None:
    await async_client.post(
        "/requests", json=_payload(leave_type_id, "2026-03-02", "2026-03-02"), headers=EMPLOYEE_HEADERS
    )
    await async_client.post(
        "/requests",
        json=_payload(leave_type_id, "2026-03-02", "2026-03-02", employee_id=OTHER_EMPLOYEE_ID),
        headers=OTHER_HEADERS,
    )

    own = await async_client.get("/requests", headers=EMPLOYEE_HEADERS)
    assert own.json()["total"] == 1

    everyone = await async_client.get("/requests", headers=MANAGER_HEADERS)
    assert everyone.json()["total"] == 2

    forbidden = await async_client.get(
        "/requests", params={"employee_id": str(OTHER_EMPLOYEE_ID)}, headers=EMPLOYEE_HEADERS
    )
    assert forbidden.status_code == 403


async def test_list_requests_filters(async_client: AsyncClient, leave_type_id: str) -> None:
    await async_client.post(
        "/requests", json=_payload(leave_type_id, "2026-03-02", "2026-03-03"), headers=EMPLOYEE_HEADERS
    )
    await async_client.post(
        "/requests", json=_payload(leave_type_id, "2026-04-06", "2026-04-07"), headers=EMPLOYEE_HEADERS
    )

    march = await async_client.get(
        "/requests", params={"start_date": "2026-03-01", "end_date": "2026-03-31"}, headers=MANAGER_HEADERS
    )
    assert march.json()["total"] == 1

    pending = await async_client.get("/requests", params={"status": "pending"}, headers=MANAGER_HEADERS)
    assert pending.json()["total"] == 2

    approved = await async_client.get("/requests", params={"status": "approved"}, headers=MANAGER_HEADERS)
    assert approved.json()["total"] == 0

    by_team = await async_client.get("/requests", params={"team_id": str(TEAM_ID)}, headers=MANAGER_HEADERS)
    assert by_team.json()["total"] == 2


# ---------------------------------------------------------------------------
# Edit pending
# ---------------------------------------------------------------------------


async def _submit(client: AsyncClient, leave_type_id: str, start: str, end: str) -> str:
    resp = await client.post("/requests", json=_payload(leave_type_id, start, end), headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 201, resp.text
    request_id: str = resp.json()["id"]
    return request_id


async def test_edit_pending_recounts_days(async_client: AsyncClient, leave_type_id: str) -> None:
    request_id = await _submit(async_client, leave_type_id, "2026-03-02", "2026-03-04")

    # Shifting the range onto itself must not clash with the request being edited.
    resp = await async_client.patch(
        f"/requests/{request_id}",
        json={"start_date": "2026-03-03", "end_date": "2026-03-07", "reason": "Longer trip"},
        headers=EMPLOYEE_HEADERS,
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["start_date"] == "2026-03-03"
    assert data["end_date"] == "2026-03-07"
    assert data["days_requested"] == 5
    assert data["reason"] == "Longer trip"
    assert data["status"] == "pending"


async def test_edit_keeps_omitted_fields(async_client: AsyncClient, leave_type_id: str) -> None:
    request_id = await _submit(async_client, leave_type_id, "2026-03-02", "2026-03-04")

    resp = await async_client.patch(f"/requests/{request_id}", json={"end_date": "2026-03-02"}, headers=MANAGER_HEADERS)
    data = resp.json()
    assert data["start_date"] == "2026-03-02"
    assert data["days_requested"] == 1
    assert data["reason"] == "Vacation"


async def test_edit_reversed_range(async_client: AsyncClient, leave_type_id: str) -> None:
    request_id = await _submit(async_client, leave_type_id, "2026-03-02", "2026-03-04")

    resp = await async_client.patch(
        f"/requests/{request_id}", json={"end_date": "2026-03-01"}, headers=EMPLOYEE_HEADERS
    )
    assert resp.status_code == 422
    assert resp.json()["error"] == "InvalidDateRange"


async def test_edit_overlapping_other_request(async_client: AsyncClient, leave_type_id: str) -> None:
    first = await _submit(async_client, leave_type_id, "2026-03-02", "2026-03-03")
    await _submit(async_client, leave_type_id, "2026-03-09", "2026-03-10")

    resp = await async_client.patch(f"/requests/{first}", json={"end_date": "2026-03-09"}, headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 409
    assert resp.json()["error"] == "Conflict"


async def test_edit_approved_request_rejected(async_client: AsyncClient, leave_type_id: str) -> None:
    request_id = await _submit(async_client, leave_type_id, "2026-03-02", "2026-03-04")
    await async_client.post(f"/requests/{request_id}/approve", headers=MANAGER_HEADERS)

    resp = await async_client.patch(f"/requests/{request_id}", json={"end_date": "2026-03-05"}, headers=MANAGER_HEADERS)
    assert resp.status_code == 409
    assert resp.json()["error"] == "InvalidTransition"

    unchanged = await async_client.get(f"/requests/{request_id}", headers=MANAGER_HEADERS)
    assert unchanged.json()["days_requested"] == 3


async def test_edit_by_other_employee_forbidden(async_client: AsyncClient, leave_type_id: str) -> None:
    request_id = await _submit(async_client, leave_type_id, "2026-03-02", "2026-03-04")

    resp = await async_client.patch(f"/requests/{request_id}", json={"reason": "Mine now"}, headers=OTHER_HEADERS)
    assert resp.status_code == 403


async def test_edit_unknown_request(async_client: AsyncClient) -> None:
    resp = await async_client.patch(f"/requests/{uuid.uuid4()}", json={"reason": "x"}, headers=MANAGER_HEADERS)
    assert resp.status_code == 404


async def test_edit_writes_audit(async_client: AsyncClient, leave_type_id: str, db_session: AsyncSession) -> None:
    request_id = await _submit(async_client, leave_type_id, "2026-03-02", "2026-03-04")
    await async_client.patch(f"/requests/{request_id}", json={"end_date": "2026-03-02"}, headers=EMPLOYEE_HEADERS)

    result = await db_session.execute(
        select(AuditLog).where(col(AuditLog.entity_id) == request_id, col(AuditLog.action) == AuditAction.UPDATE.value)
    )
    entry = result.scalar_one()
    assert entry.actor_id == EMPLOYEE_ID
    assert entry.before_json is not None
    assert entry.after_json is not None
    assert entry.before_json["days_requested"] == 3
    assert entry.after_json["days_requested"] == 1
