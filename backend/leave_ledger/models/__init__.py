from sqlmodel import SQLModel

from leave_ledger.models.audit import AuditLog
from leave_ledger.models.balance import LeaveBalance
from leave_ledger.models.base import TimestampMixin, UUIDBase
from leave_ledger.models.enums import (
    AuditAction,
    AuditEntityType,
    ConflictLevel,
    LedgerEntryType,
    LedgerSourceType,
    RequestStatus,
    RosterScope,
)
from leave_ledger.models.holiday import CompanyHoliday
from leave_ledger.models.ledger import LeaveLedgerEntry
from leave_ledger.models.leave_type import LeaveType
from leave_ledger.models.request import LeaveRequest

__all__ = [
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "CompanyHoliday",
    "ConflictLevel",
    "LeaveBalance",
    "LeaveLedgerEntry",
    "LeaveRequest",
    "LeaveType",
    "LedgerEntryType",
    "LedgerSourceType",
    "RequestStatus",
    "RosterScope",
    "SQLModel",
    "TimestampMixin",
    "UUIDBase",
]
