from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role carried by the session; never derived from the user id."""

    EMPLOYEE = "Employee"
    SUPERVISOR = "Supervisor"
    HOD = "HOD"
    HR = "HR"

    @classmethod
    def parse(cls, value: str) -> "Role":
        v = (value or "").strip().lower()
        for role in cls:
            if role.value.lower() == v:
                return role
        raise ValueError(f"Unknown role: {value!r}")


class LeaveCategory(str, Enum):
    """Leave types, each with its own allotted/used counters."""

    ANNUAL = "Annual"
    SICK = "Sick"
    MATERNITY = "Maternity"
    PATERNITY = "Paternity"
    EMERGENCY = "Emergency"

    @classmethod
    def parse(cls, value: str) -> "LeaveCategory":
        v = (value or "").strip().lower()
        for category in cls:
            if category.value.lower() == v:
                return category
        raise ValueError(f"Unknown leave category: {value!r}")


class LeaveStatus(str, Enum):
    """Approval workflow states stored on a leave application."""

    PENDING = "Pending"
    APPROVED_BY_SUPERVISOR = "ApprovedBySupervisor"
    REJECTED_BY_SUPERVISOR = "RejectedBySupervisor"
    APPROVED_BY_HOD = "ApprovedByHod"
    REJECTED_BY_HOD = "RejectedByHod"
    RECORDED = "Recorded"
    CANCELLED = "Cancelled"

    @classmethod
    def parse(cls, value: str) -> "LeaveStatus":
        """Normalize stored spellings, including legacy display labels.

        Unknown values fall back to PENDING.
        """
        v = (value or "").lower().replace(" ", "").replace("_", "").replace("-", "")
        return _STATUS_ALIASES.get(v, cls.PENDING)

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_ALIASES = {
    "pending": LeaveStatus.PENDING,
    "rejected": LeaveStatus.REJECTED_BY_SUPERVISOR,
    "rejectedbysupervisor": LeaveStatus.REJECTED_BY_SUPERVISOR,
    "rejectedbyhod": LeaveStatus.REJECTED_BY_HOD,
    "approved": LeaveStatus.APPROVED_BY_SUPERVISOR,
    "approvedbysupervisor": LeaveStatus.APPROVED_BY_SUPERVISOR,
    "supervisorapproved": LeaveStatus.APPROVED_BY_SUPERVISOR,
    "approvedbyhod": LeaveStatus.APPROVED_BY_HOD,
    "hodapproved": LeaveStatus.APPROVED_BY_HOD,
    "recorded": LeaveStatus.RECORDED,
    "completed": LeaveStatus.RECORDED,
    "cancelled": LeaveStatus.CANCELLED,
}

_STATUS_LABELS = {
    LeaveStatus.PENDING: "Pending",
    LeaveStatus.APPROVED_BY_SUPERVISOR: "Approved by Supervisor",
    LeaveStatus.REJECTED_BY_SUPERVISOR: "Rejected by Supervisor",
    LeaveStatus.APPROVED_BY_HOD: "Approved by HOD",
    LeaveStatus.REJECTED_BY_HOD: "Rejected by HOD",
    LeaveStatus.RECORDED: "Recorded",
    LeaveStatus.CANCELLED: "Cancelled",
}


class WorkflowAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    CANCEL = "cancel"
    RECORD = "record"
