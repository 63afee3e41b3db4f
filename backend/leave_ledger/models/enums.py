from __future__ import annotations

import enum


class RequestStatus(enum.StrEnum):
    """State machine for leave requests."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class LedgerEntryType(enum.StrEnum):
    """Type of ledger entry affecting a leave balance."""

    ALLOCATION = "ALLOCATION"
    USAGE = "USAGE"
    REVERSAL = "REVERSAL"
    ADJUSTMENT = "ADJUSTMENT"


class LedgerSourceType(enum.StrEnum):
    """Origin of a ledger entry."""

    REQUEST = "REQUEST"
    ADMIN = "ADMIN"


class ConflictLevel(enum.StrEnum):
    """How many teammates are already on approved leave during a request."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RosterScope(enum.StrEnum):
    """Group of employees that conflict, calendar and coverage views are computed over."""

    TEAM = "team"
    DEPARTMENT = "department"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    LEAVE_TYPE = "LEAVE_TYPE"
    BALANCE = "BALANCE"
    REQUEST = "REQUEST"
    HOLIDAY = "HOLIDAY"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    DELETE = "DELETE"
    ALLOCATE = "ALLOCATE"
    ADJUST = "ADJUST"
    SUBMIT = "SUBMIT"
    UPDATE = "UPDATE"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    CANCEL = "CANCEL"
