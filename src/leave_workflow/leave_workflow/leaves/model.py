from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import FrozenSet, Optional

from ..core.enums import LeaveCategory, LeaveStatus


@dataclass(frozen=True)
class LeaveApplication:
    """One leave request and its approval trail.

    number_of_days is fixed at submission; there is no amend transition.
    """

    application_id: str
    employee_id: str
    employee_name: str
    category: LeaveCategory
    start_date: date
    end_date: date
    number_of_days: int
    reason: str
    status: LeaveStatus
    applied_at: datetime
    proof_document_link: Optional[str] = None
    supervisor_action_at: Optional[datetime] = None
    supervisor_feedback: Optional[str] = None
    hod_action_at: Optional[datetime] = None
    hod_feedback: Optional[str] = None
    captured_by: Optional[str] = None
    captured_at: Optional[datetime] = None


@dataclass(frozen=True)
class ApplicationFilter:
    """Query criteria; None means "any". Reporting-line fields match the employee's record.

    applied_from and applied_to bound the applied_at date, both ends included.
    """

    statuses: Optional[FrozenSet[LeaveStatus]] = None
    employee_id: Optional[str] = None
    supervisor_id: Optional[str] = None
    hod_id: Optional[str] = None
    department: Optional[str] = None
    applied_from: Optional[date] = None
    applied_to: Optional[date] = None

    @classmethod
    def with_status(cls, *statuses: LeaveStatus, **kwargs) -> "ApplicationFilter":
        return cls(statuses=frozenset(statuses), **kwargs)


class SaveOutcome(str, Enum):
    """Result of a combined status-and-balance write."""

    SAVED = "saved"
    STATUS_CHANGED = "status_changed"
    BALANCE_CHANGED = "balance_changed"
