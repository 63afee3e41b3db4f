# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel

MANAGER_ROLES = frozenset({"manager", "hr_manager", "admin"})


class AuthContext(BaseModel):
    """Dev auth context extracted from request headers."""

    user_id: uuid.UUID
    role: str = "employee"

    @property
    def is_manager(self) -> bool:
        return self.role in MANAGER_ROLES
