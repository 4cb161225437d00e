from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.constants import REPORT_ROW_LIMIT
from ..core.enums import LeaveStatus
from ..ledger.model import BalanceEntry
from ..leaves.model import ApplicationFilter, LeaveApplication
from ..leaves.repository import LeaveApplicationRepository
from ..users.repository import UserRepository

_APPROVED = frozenset({LeaveStatus.APPROVED_BY_HOD, LeaveStatus.RECORDED})
_REJECTED = frozenset({LeaveStatus.REJECTED_BY_SUPERVISOR, LeaveStatus.REJECTED_BY_HOD})
_UNASSIGNED = "Unassigned"


@dataclass(frozen=True)
class LeaveReport:
    rows: list[dict]
    by_department: list[dict]
    by_category: list[dict]
    by_month: list[dict]
    totals: dict


def application_row(app: LeaveApplication, *, department: Optional[str] = None) -> dict:
    """Flatten one application for JSON output and spreadsheet export."""
    row = {
        "application_id": app.application_id,
        "employee_id": app.employee_id,
        "employee_name": app.employee_name,
        "category": app.category.value,
        "start_date": app.start_date.strftime("%Y-%m-%d"),
        "end_date": app.end_date.strftime("%Y-%m-%d"),
        "number_of_days": app.number_of_days,
        "reason": app.reason,
        "status": app.status.value,
        "status_label": app.status.label,
        "applied_at": app.applied_at.strftime("%Y-%m-%d %H:%M"),
        "supervisor_feedback": app.supervisor_feedback or "",
        "hod_feedback": app.hod_feedback or "",
        "captured_by": app.captured_by or "",
        "captured_at": app.captured_at.strftime("%Y-%m-%d %H:%M") if app.captured_at else "",
    }
    if department is not None:
        row["department"] = department
    return row


def balance_row(entry: BalanceEntry) -> dict:
    return {
        "category": entry.category.value,
        "allotted": entry.allotted,
        "used": entry.used,
        "remaining": entry.remaining,
    }


class LeaveReportService:
    """HR statistics: per department, per leave category and per month."""

    def __init__(self, applications: LeaveApplicationRepository, users: UserRepository, *, limit: int = REPORT_ROW_LIMIT):
        self._applications = applications
        self._users = users
        self._limit = limit

    def build(self, *, start: Optional[date] = None, end: Optional[date] = None) -> LeaveReport:
        departments = {u.user_id: u.department for u in self._users.list_all()}

        criteria = ApplicationFilter(applied_from=start, applied_to=end)
        apps = self._applications.query(criteria, limit=self._limit)

        rows: list[dict] = []
        dept_map: dict[str, dict] = {}
        cat_map: dict[str, dict] = {}
        month_map: dict[str, dict] = {}

        for a in apps:
            department = departments.get(a.employee_id) or _UNASSIGNED
            rows.append(application_row(a, department=department))

            d = dept_map.get(department)
            if not d:
                d = {"department": department, "total": 0, "pending": 0, "approved": 0, "rejected": 0, "total_days": 0}
                dept_map[department] = d
            d["total"] += 1
            d["total_days"] += a.number_of_days
            if a.status == LeaveStatus.PENDING:
                d["pending"] += 1
            elif a.status in _APPROVED:
                d["approved"] += 1
            elif a.status in _REJECTED:
                d["rejected"] += 1

            c = cat_map.get(a.category.value)
            if not c:
                c = {"category": a.category.value, "count": 0, "total_days": 0, "approved": 0}
                cat_map[a.category.value] = c
            c["count"] += 1
            c["total_days"] += a.number_of_days
            if a.status in _APPROVED:
                c["approved"] += 1

            month = a.applied_at.strftime("%Y-%m")
            m = month_map.get(month)
            if not m:
                m = {"month": month, "count": 0, "total_days": 0}
                month_map[month] = m
            m["count"] += 1
            m["total_days"] += a.number_of_days

        by_department = sorted(dept_map.values(), key=lambda x: x["total"], reverse=True)
        by_category = sorted(cat_map.values(), key=lambda x: x["count"], reverse=True)
        by_month = sorted(month_map.values(), key=lambda x: x["month"])

        totals = {
            "applications": len(apps),
            "pending": sum(1 for a in apps if a.status == LeaveStatus.PENDING),
            "approved": sum(1 for a in apps if a.status in _APPROVED),
            "rejected": sum(1 for a in apps if a.status in _REJECTED),
            "days_approved": sum(a.number_of_days for a in apps if a.status in _APPROVED),
        }
        return LeaveReport(rows=rows, by_department=by_department, by_category=by_category, by_month=by_month, totals=totals)
