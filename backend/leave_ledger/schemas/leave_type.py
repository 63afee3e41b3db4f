# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class CreateLeaveTypeRequest(BaseModel):
    """Request body for creating a leave type."""

    name: str = Field(min_length=1, max_length=100)
    code: str = Field(min_length=1, max_length=20, pattern=r"^[A-Z0-9_]+$")
    description: str | None = Field(default=None, max_length=500)
    color: str = Field(default="#4CAF50", pattern=r"^#[0-9A-Fa-f]{6}$")
    max_days_per_year: int = Field(default=0, ge=0, le=366)
    is_paid: bool = True


class LeaveTypeResponse(BaseModel):
    """Response schema for a leave type."""

    id: uuid.UUID
    name: str
    code: str
    description: str | None
    color: str
    max_days_per_year: int
    is_paid: bool
    is_active: bool
    created_at: datetime


class LeaveTypeListResponse(BaseModel):
    """List of leave types."""

    items: list[LeaveTypeResponse]
    total: int
