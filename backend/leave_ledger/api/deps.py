# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from datetime import date
from typing import Annotated

from fastapi import Depends, Header, Query

from leave_ledger.exceptions import Forbidden, InvalidDateRange
from leave_ledger.schemas.auth import AuthContext
from leave_ledger.schemas.request import DateRange


async def get_auth_context(
    x_user_id: uuid.UUID = Header(),
    x_role: str = Header(default="employee"),
) -> AuthContext:
    """Build the caller's identity from the X-User-Id and X-Role headers."""
    return AuthContext(user_id=x_user_id, role=x_role.lower())


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_manager(
    auth: AuthDep,
) -> AuthContext:
    """Require a manager, HR manager or admin role for the request."""
    if not auth.is_manager:
        raise Forbidden("Manager access required")
    return auth


ManagerDep = Annotated[AuthContext, Depends(require_manager)]


async def get_date_range(
    start: date = Query(),
    end: date = Query(),
) -> DateRange:
    """Inclusive ``start``/``end`` query range. A reversed range raises InvalidDateRange."""
    if end < start:
        raise InvalidDateRange("end must not be before start")
    return DateRange(start=start, end=end)


DateRangeDep = Annotated[DateRange, Depends(get_date_range)]
