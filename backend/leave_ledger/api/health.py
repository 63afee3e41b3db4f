import logging
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import func, select, text

from leave_ledger.config import get_settings
from leave_ledger.db import SessionDep
from leave_ledger.models.leave_type import LeaveType

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: Literal["ok", "degraded", "error"]
    version: str
    environment: str
    day_count_policy: Literal["calendar", "business"]
    checks: dict[str, bool]


@router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep) -> HealthResponse:
    """Liveness plus readiness of the ledger store.

    ``error`` means the database is unreachable. ``degraded`` means it answers
    but the ledger tables are missing.
    """
    settings = get_settings()
    checks = {"database": False, "schema": False}

    try:
        await session.execute(text("SELECT 1"))
        checks["database"] = True
        await session.execute(select(func.count()).select_from(LeaveType))
        checks["schema"] = True
    except Exception:
        logger.exception("Health check failed: %s", checks)

    status: Literal["ok", "degraded", "error"] = "ok"
    if not checks["database"]:
        status = "error"
    elif not checks["schema"]:
        status = "degraded"

    return HealthResponse(
        status=status,
        version=settings.app_version,
        environment=settings.environment,
        day_count_policy=settings.day_count_policy,
        checks=checks,
    )
