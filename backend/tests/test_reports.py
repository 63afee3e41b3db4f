from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from httpx import AsyncClient

MANAGER_ID = uuid.uuid4()
EMPLOYEE_ID = uuid.uuid4()
MANAGER_HEADERS = {"X-User-Id": str(MANAGER_ID), "X-Role": "manager"}
EMPLOYEE_HEADERS = {"X-User-Id": str(EMPLOYEE_ID), "X-Role": "employee"}


async def _setup_request(client: AsyncClient) -> str:
    resp = await client.post(
        "/leave-types", json={"name": "Annual Leave", "code": "AL", "max_days_per_year": 10}, headers=MANAGER_HEADERS
    )
    leave_type_id = resp.json()["id"]
    await client.put(f"/employees/{EMPLOYEE_ID}/balances/{leave_type_id}", json={}, headers=MANAGER_HEADERS)
    resp = await client.post(
        "/requests",
        json={
            "employee_id": str(EMPLOYEE_ID),
            "leave_type_id": leave_type_id,
            "start_date": "2026-03-02",
            "end_date": "2026-03-03",
        },
        headers=EMPLOYEE_HEADERS,
    )
    request_id: str = resp.json()["id"]
    await client.post(f"/requests/{request_id}/approve", headers=MANAGER_HEADERS)
    return request_id


async def test_audit_log_lists_all_entries(async_client: AsyncClient) -> None:
    await _setup_request(async_client)

    resp = await async_client.get("/audit-log", headers=MANAGER_HEADERS)
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 4
    assert {e["action"] for e in data["items"]} == {"CREATE", "ALLOCATE", "SUBMIT", "APPROVE"}


async def test_audit_log_filters(async_client: AsyncClient) -> None:
    request_id = await _setup_request(async_client)

    by_entity = await async_client.get(
        "/audit-log", params={"entity_type": "REQUEST", "entity_id": request_id}, headers=MANAGER_HEADERS
    )
    assert {e["action"] for e in by_entity.json()["items"]} == {"SUBMIT", "APPROVE"}

    by_actor = await async_client.get("/audit-log", params={"actor_id": str(EMPLOYEE_ID)}, headers=MANAGER_HEADERS)
    assert by_actor.json()["total"] == 1
    assert by_actor.json()["items"][0]["action"] == "SUBMIT"

    by_action = await async_client.get("/audit-log", params={"action": "APPROVE"}, headers=MANAGER_HEADERS)
    entry = by_action.json()["items"][0]
    assert entry["before_json"]["status"] == "pending"
    assert entry["after_json"]["status"] == "approved"


async def test_audit_log_pagination(async_client: AsyncClient) -> None:
    await _setup_request(async_client)
    resp = await async_client.get("/audit-log", params={"limit": 2}, headers=MANAGER_HEADERS)
    data = resp.json()
    assert data["total"] == 4
    assert len(data["items"]) == 2


async def test_audit_log_requires_manager(async_client: AsyncClient) -> None:
    resp = await async_client.get("/audit-log", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 403


async def test_audit_log_rejects_unknown_action(async_client: AsyncClient) -> None:
    resp = await async_client.get("/audit-log", params={"action": "EXPLODE"}, headers=MANAGER_HEADERS)
    assert resp.status_code == 422
    assert resp.json()["error"] == "ValidationError"


async def test_audit_entries_carry_request_id(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        "/leave-types",
        json={"name": "Sick Leave", "code": "SL", "max_days_per_year": 5},
        headers={**MANAGER_HEADERS, "X-Request-Id": "trace-123"},
    )
    assert resp.headers["X-Request-Id"] == "trace-123"

    found = await async_client.get("/audit-log", params={"request_id": "trace-123"}, headers=MANAGER_HEADERS)
    items = found.json()["items"]
    assert len(items) == 1
    assert items[0]["entity_id"] == resp.json()["id"]
    assert items[0]["request_id"] == "trace-123"


async def test_request_history(async_client: AsyncClient) -> None:
    request_id = await _setup_request(async_client)
    await async_client.post(
        f"/requests/{request_id}/cancel", json={"reason": "Plans changed"}, headers=MANAGER_HEADERS
    )

    resp = await async_client.get(f"/requests/{request_id}/history", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 200
    steps = resp.json()["items"]
    assert [(s["action"], s["status"]) for s in steps] == [
        ("SUBMIT", "pending"),
        ("APPROVE", "approved"),
        ("CANCEL", "cancelled"),
    ]
    assert steps[0]["actor_id"] == str(EMPLOYEE_ID)
    assert steps[2]["comment"] == "Plans changed"


async def test_request_history_hidden_from_other_employees(async_client: AsyncClient) -> None:
    request_id = await _setup_request(async_client)
    outsider = {"X-User-Id": str(uuid.uuid4()), "X-Role": "employee"}
    resp = await async_client.get(f"/requests/{request_id}/history", headers=outsider)
    assert resp.status_code == 403


async def test_request_history_unknown_request(async_client: AsyncClient) -> None:
    resp = await async_client.get(f"/requests/{uuid.uuid4()}/history", headers=MANAGER_HEADERS)
    assert resp.status_code == 404
