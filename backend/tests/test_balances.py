"""Tests for allocations, admin adjustments, balance reads and the ledger."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leave_ledger.models.audit import AuditLog
from leave_ledger.models.enums import AuditAction

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

MANAGER_ID = uuid.uuid4()
EMPLOYEE_ID = uuid.uuid4()
MANAGER_HEADERS = {"X-User-Id": str(MANAGER_ID), "X-Role": "manager"}
EMPLOYEE_HEADERS = {"X-User-Id": str(EMPLOYEE_ID), "X-Role": "employee"}
BALANCES_URL = f"/employees/{EMPLOYEE_ID}/balances"


async def _create_leave_type(client: AsyncClient, code: str = "AL", max_days: int = 20) -> str:
    resp = await client.post(
        "/leave-types",
        json={"name": f"Leave {code}", "code": code, "max_days_per_year": max_days},
        headers=MANAGER_HEADERS,
    )
    assert resp.status_code == 201
    result: str = resp.json()["id"]
    return result


# ---------------------------------------------------------------------------
# Allocation
# ---------------------------------------------------------------------------


async def test_allocate_defaults_to_yearly_maximum(async_client: AsyncClient) -> None:
    leave_type_id = await _create_leave_type(async_client, max_days=20)

    resp = await async_client.put(f"{BALANCES_URL}/{leave_type_id}", json={}, headers=MANAGER_HEADERS)
    assert resp.status_code == 200
    data = resp.json()
    assert data["allocated_days"] == 20
    assert data["used_days"] == 0
    assert data["available_days"] == 20
    assert data["pending_days"] == 0
    assert data["leave_type_code"] == "AL"


async def test_allocate_explicit_amount_and_reallocate(async_client: AsyncClient) -> None:
    leave_type_id = await _create_leave_type(async_client)

    await async_client.put(f"{BALANCES_URL}/{leave_type_id}", json={"allocated_days": 10}, headers=MANAGER_HEADERS)
    resp = await async_client.put(
        f"{BALANCES_URL}/{leave_type_id}", json={"allocated_days": 15}, headers=MANAGER_HEADERS
    )
    assert resp.status_code == 200
    assert resp.json()["available_days"] == 15

    ledger = await async_client.get(f"/employees/{EMPLOYEE_ID}/ledger", headers=EMPLOYEE_HEADERS)
    amounts = sorted(e["amount_days"] for e in ledger.json()["items"])
    assert amounts == [5, 10]
    assert {e["entry_type"] for e in ledger.json()["items"]} == {"ALLOCATION"}


async def test_allocate_unknown_leave_type(async_client: AsyncClient) -> None:
    resp = await async_client.put(f"{BALANCES_URL}/{uuid.uuid4()}", json={}, headers=MANAGER_HEADERS)
    assert resp.status_code == 404


async def test_allocate_requires_manager(async_client: AsyncClient) -> None:
    leave_type_id = await _create_leave_type(async_client)
    resp = await async_client.put(f"{BALANCES_URL}/{leave_type_id}", json={}, headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 403


async def test_allocate_writes_audit(async_client: AsyncClient, db_session: AsyncSession) -> None:
    leave_type_id = await _create_leave_type(async_client)
    await async_client.put(f"{BALANCES_URL}/{leave_type_id}", json={"allocated_days": 8}, headers=MANAGER_HEADERS)

    result = await db_session.execute(select(AuditLog).where(col(AuditLog.action) == AuditAction.ALLOCATE.value))
    entry = result.scalar_one()
    assert entry.actor_id == MANAGER_ID
    assert entry.entity_id == f"{EMPLOYEE_ID}:{leave_type_id}"
    assert entry.before_json is None
    assert entry.after_json is not None
    assert entry.after_json["allocated_days"] == 8


# ---------------------------------------------------------------------------
# Adjustments
# ---------------------------------------------------------------------------


async def test_adjustment_changes_allocation(async_client: AsyncClient) -> None:
    leave_type_id = await _create_leave_type(async_client)
    await async_client.put(f"{BALANCES_URL}/{leave_type_id}", json={"allocated_days": 10}, headers=MANAGER_HEADERS)

    resp = await async_client.post(
        f"{BALANCES_URL}/{leave_type_id}/adjustments",
        json={"amount_days": 2, "reason": "Worked a public holiday"},
        headers=MANAGER_HEADERS,
    )
    assert resp.status_code == 201
    entry = resp.json()
    assert entry["entry_type"] == "ADJUSTMENT"
    assert entry["amount_days"] == 2
    assert entry["metadata_json"] == {"reason": "Worked a public holiday"}

    balance = await async_client.get(f"{BALANCES_URL}/{leave_type_id}", headers=EMPLOYEE_HEADERS)
    assert balance.json()["allocated_days"] == 12
    assert balance.json()["available_days"] == 12


async def test_negative_adjustment_cannot_overdraw(async_client: AsyncClient) -> None:
    leave_type_id = await _create_leave_type(async_client)
    await async_client.put(f"{BALANCES_URL}/{leave_type_id}", json={"allocated_days": 3}, headers=MANAGER_HEADERS)

    resp = await async_client.post(
        f"{BALANCES_URL}/{leave_type_id}/adjustments",
        json={"amount_days": -5, "reason": "Correction"},
        headers=MANAGER_HEADERS,
    )
    assert resp.status_code == 409
    assert resp.json()["error"] == "InsufficientBalance"


async def test_negative_adjustment_allowed_with_override(async_client: AsyncClient) -> None:
    leave_type_id = await _create_leave_type(async_client)
    await async_client.put(
        f"{BALANCES_URL}/{leave_type_id}",
        json={"allocated_days": 3, "allow_negative": True},
        headers=MANAGER_HEADERS,
    )

    resp = await async_client.post(
        f"{BALANCES_URL}/{leave_type_id}/adjustments",
        json={"amount_days": -5, "reason": "Advance leave"},
        headers=MANAGER_HEADERS,
    )
    assert resp.status_code == 201

    balance = await async_client.get(f"{BALANCES_URL}/{leave_type_id}", headers=MANAGER_HEADERS)
    assert balance.json()["available_days"] == -2


async def test_adjustment_without_balance(async_client: AsyncClient) -> None:
    leave_type_id = await _create_leave_type(async_client)
    resp = await async_client.post(
        f"{BALANCES_URL}/{leave_type_id}/adjustments",
        json={"amount_days": 1, "reason": "Bonus"},
        headers=MANAGER_HEADERS,
    )
    assert resp.status_code == 422
    assert resp.json()["error"] == "UnknownLeaveType"


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def test_list_balances(async_client: AsyncClient) -> None:
    annual = await _create_leave_type(async_client, "AL", 20)
    sick = await _create_leave_type(async_client, "SL", 12)
    await async_client.put(f"{BALANCES_URL}/{annual}", json={}, headers=MANAGER_HEADERS)
    await async_client.put(f"{BALANCES_URL}/{sick}", json={}, headers=MANAGER_HEADERS)

    resp = await async_client.get(BALANCES_URL, headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 2
    assert {b["leave_type_code"]: b["available_days"] for b in data["items"]} == {"AL": 20, "SL": 12}


async def test_get_balance_not_found(async_client: AsyncClient) -> None:
    leave_type_id = await _create_leave_type(async_client)
    resp = await async_client.get(f"{BALANCES_URL}/{leave_type_id}", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 404


async def test_employee_cannot_read_other_balances(async_client: AsyncClient) -> None:
    resp = await async_client.get(f"/employees/{uuid.uuid4()}/balances", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 403


async def test_ledger_filtered_by_leave_type(async_client: AsyncClient) -> None:
    annual = await _create_leave_type(async_client, "AL", 20)
    sick = await _create_leave_type(async_client, "SL", 12)
    await async_client.put(f"{BALANCES_URL}/{annual}", json={}, headers=MANAGER_HEADERS)
    await async_client.put(f"{BALANCES_URL}/{sick}", json={}, headers=MANAGER_HEADERS)

    resp = await async_client.get(
        f"/employees/{EMPLOYEE_ID}/ledger", params={"leave_type_id": sick}, headers=EMPLOYEE_HEADERS
    )
    data = resp.json()
    assert data["total"] == 1
    assert data["items"][0]["amount_days"] == 12
