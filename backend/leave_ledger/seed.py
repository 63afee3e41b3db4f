"""Seed script for development data.

Run with:  python -m leave_ledger.seed
Inside Docker:  docker compose exec api python -m leave_ledger.seed
"""

from __future__ import annotations

import asyncio
import sys
from datetime import date, timedelta
from typing import Any

import httpx

BASE_URL = "http://localhost:8000"
MANAGER_USER_ID = "00000000-0000-0000-0000-000000000001"

HEADERS = {
    "Content-Type": "application/json",
    "X-User-Id": MANAGER_USER_ID,
    "X-Role": "hr_manager",
}

ENGINEERING_TEAM_ID = "00000000-0000-0000-0000-0000000000a1"
SUPPORT_TEAM_ID = "00000000-0000-0000-0000-0000000000a2"

# Well-known employee UUIDs
ALICE_ID = "00000000-0000-0000-0000-000000000002"
BOB_ID = "00000000-0000-0000-0000-000000000003"
CAROL_ID = "00000000-0000-0000-0000-000000000004"
DAVE_ID = "00000000-0000-0000-0000-000000000005"


def _employee(employee_id: str, first_name: str, last_name: str, team_id: str) -> dict[str, str]:
    return {
        "id": employee_id,
        "first_name": first_name,
        "last_name": last_name,
        "email": f"{first_name}.{last_name}@example.com".lower(),
        "team_id": team_id,
    }


EMPLOYEES = [
    _employee(ALICE_ID, "Alice", "Johnson", ENGINEERING_TEAM_ID),
    _employee(BOB_ID, "Bob", "Smith", ENGINEERING_TEAM_ID),
    _employee(CAROL_ID, "Carol", "Williams", ENGINEERING_TEAM_ID),
    _employee(DAVE_ID, "Dave", "Brown", SUPPORT_TEAM_ID),
]

LEAVE_TYPES = [
    {"name": "Annual Leave", "code": "AL", "max_days_per_year": 20, "color": "#4CAF50"},
    {"name": "Sick Leave", "code": "SL", "max_days_per_year": 12, "color": "#F44336"},
    {"name": "Casual Leave", "code": "CL", "max_days_per_year": 6, "color": "#2196F3"},
    {"name": "Maternity Leave", "code": "ML", "max_days_per_year": 182, "color": "#E91E63"},
    {"name": "Paternity Leave", "code": "PL", "max_days_per_year": 15, "color": "#9C27B0"},
    {"name": "Bereavement Leave", "code": "BL", "max_days_per_year": 5, "color": "#607D8B"},
    {"name": "Marriage Leave", "code": "MR", "max_days_per_year": 5, "color": "#FF9800"},
    {"name": "Compensatory Off", "code": "CO", "max_days_per_year": 0, "color": "#795548"},
    {"name": "Loss of Pay", "code": "LOP", "max_days_per_year": 366, "color": "#9E9E9E", "is_paid": False},
]

HOLIDAYS = [
    {"date": "2026-01-01", "name": "New Year's Day", "recurring": True},
    {"date": "2026-05-01", "name": "Labour Day"},
    {"date": "2026-12-25", "name": "Christmas Day", "recurring": True},
]

# Allocations: (employee_id, leave_type_code); the allocation defaults to the type's yearly maximum.
ALLOCATIONS = [
    (employee["id"], code) for employee in EMPLOYEES for code in ("AL", "SL", "CL")
]


async def _safe_post(client: httpx.AsyncClient, url: str, json: dict[str, Any], label: str) -> dict | None:
    """POST with 409-conflict tolerance for idempotency."""
    resp = await client.post(url, json=json, headers=HEADERS)
    if resp.status_code in (200, 201):
        print(f"  [OK] {label}")
        return resp.json()
    if resp.status_code == 409:
        print(f"  [SKIP] {label} (already exists)")
        return None
    print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")
    return None


async def _safe_put(client: httpx.AsyncClient, url: str, json: dict[str, Any], label: str) -> dict | None:
    """PUT (upsert), naturally idempotent."""
    resp = await client.put(url, json=json, headers=HEADERS)
    if resp.status_code in (200, 201):
        print(f"  [OK] {label}")
        return resp.json()
    print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")
    return None


async def seed_employees(client: httpx.AsyncClient) -> None:
    """Seed employees via PUT (upsert)."""
    print("\n--- Seeding employees ---")
    for emp in EMPLOYEES:
        body = {k: v for k, v in emp.items() if k != "id"}
        await _safe_put(client, f"/employees/{emp['id']}", body, f"{emp['first_name']} {emp['last_name']}")


async def seed_leave_types(client: httpx.AsyncClient) -> dict[str, str]:
    """Seed leave types and return a code->id mapping."""
    print("\n--- Seeding leave types ---")
    for leave_type in LEAVE_TYPES:
        await _safe_post(client, "/leave-types", leave_type, f"Leave type: {leave_type['code']}")

    resp = await client.get("/leave-types", headers=HEADERS)
    resp.raise_for_status()
    return {item["code"]: item["id"] for item in resp.json()["items"]}


async def seed_holidays(client: httpx.AsyncClient) -> None:
    """Seed company holidays."""
    print("\n--- Seeding holidays ---")
    for holiday in HOLIDAYS:
        await _safe_post(client, "/holidays", holiday, f"Holiday: {holiday['name']}")


async def seed_allocations(client: httpx.AsyncClient, leave_type_ids: dict[str, str]) -> None:
    """Allocate yearly balances, skipping balances that already exist."""
    print("\n--- Seeding allocations ---")
    for employee_id, code in ALLOCATIONS:
        ltid = leave_type_ids.get(code)
        if not ltid:
            print(f"  [SKIP] {code} not found for allocation")
            continue

        existing = await client.get(f"/employees/{employee_id}/balances/{ltid}", headers=HEADERS)
        if existing.status_code == 200:
            print(f"  [SKIP] {employee_id[:12]}... {code} (already allocated)")
            continue

        await _safe_put(
            client, f"/employees/{employee_id}/balances/{ltid}", {}, f"Allocate {employee_id[:12]}... {code}"
        )


def _next_weekday(start: date, days_ahead: int) -> date:
    candidate = start + timedelta(days=days_ahead)
    while candidate.weekday() >= 5:
        candidate += timedelta(days=1)
    return candidate


async def seed_requests(client: httpx.AsyncClient, leave_type_ids: dict[str, str], today: date | None = None) -> None:
    """Seed leave requests: two left pending, one approved."""
    print("\n--- Seeding requests ---")
    today = today or date.today()

    # Bob: 3 days annual leave next week, stays pending
    bob_start = _next_weekday(today, 7)
    await _safe_post(
        client,
        "/requests",
        {
            "employee_id": BOB_ID,
            "leave_type_id": leave_type_ids["AL"],
            "start_date": bob_start.isoformat(),
            "end_date": (bob_start + timedelta(days=2)).isoformat(),
            "reason": "Family vacation",
        },
        "Request: Bob 3-day annual leave (pending)",
    )

    # Carol: 1 day sick leave, approved
    carol_day = _next_weekday(today, 3)
    result = await _safe_post(
        client,
        "/requests",
        {
            "employee_id": CAROL_ID,
            "leave_type_id": leave_type_ids["SL"],
            "start_date": carol_day.isoformat(),
            "end_date": carol_day.isoformat(),
            "reason": "Doctor appointment",
        },
        "Request: Carol 1-day sick leave",
    )
    if result:
        resp = await client.post(
            f"/requests/{result['id']}/approve",
            json={"comment": "Approved, feel better!"},
            headers=HEADERS,
        )
        if resp.status_code == 200:
            print("  [OK] Approved Carol's sick leave request")
        elif resp.status_code == 409:
            print("  [SKIP] Carol's request already decided")
        else:
            print(f"  [ERROR] Approving Carol's request: {resp.status_code}")

    # Dave: 2 days casual leave in two weeks, stays pending
    dave_start = _next_weekday(today, 14)
    await _safe_post(
        client,
        "/requests",
        {
            "employee_id": DAVE_ID,
            "leave_type_id": leave_type_ids["CL"],
            "start_date": dave_start.isoformat(),
            "end_date": (dave_start + timedelta(days=1)).isoformat(),
            "reason": "Personal errand",
        },
        "Request: Dave 2-day casual leave (pending)",
    )


async def seed(client: httpx.AsyncClient) -> None:
    """Seed every resource through an already-configured client."""
    await seed_employees(client)
    leave_type_ids = await seed_leave_types(client)
    await seed_holidays(client)
    await seed_allocations(client, leave_type_ids)
    await seed_requests(client, leave_type_ids)


async def main() -> None:
    print("=" * 60)
    print("  Leave Ledger: Development Seed Script")
    print("=" * 60)

    async with httpx.AsyncClient(base_url=BASE_URL, timeout=30.0) as client:
        try:
            resp = await client.get("/health")
            if resp.status_code != 200:
                print(f"API health check failed: {resp.status_code}")
                sys.exit(1)
            print("\n[OK] API is healthy")
        except httpx.ConnectError:
            print("ERROR: Cannot connect to API at", BASE_URL)
            sys.exit(1)

        await seed(client)

    print("\n" + "=" * 60)
    print("  Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
