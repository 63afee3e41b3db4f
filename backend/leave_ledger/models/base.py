from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


def now_utc() -> datetime:
    return datetime.now(UTC)


def timestamp_field(*, index: bool = False) -> Any:
    """Timezone-aware timestamp that defaults to the current time, in Python and on the server."""
    return Field(
        default_factory=now_utc,
        index=index,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )


def optional_timestamp_field() -> Any:
    """Timezone-aware timestamp that stays null until an event happens."""
    return Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]


def leave_type_fk(*, primary_key: bool = False) -> Any:
    """Column referencing ``leave_type.id``; rows go with their leave type."""
    return Field(
        sa_column=sa.Column(
            sa.Uuid,
            sa.ForeignKey("leave_type.id", ondelete="CASCADE"),
            nullable=False,
            primary_key=primary_key,
            index=not primary_key,
        ),
    )


class UUIDBase(SQLModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, sa_type=sa.Uuid)


class TimestampMixin(SQLModel):
    created_at: datetime = timestamp_field()
