from __future__ import annotations

from typing import Sequence

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import LeaveStatus, Role
from ..leaves.model import ApplicationFilter, LeaveApplication
from ..leaves.repository import LeaveApplicationRepository


class LeaveQueryService:
    """Read-only views over leave applications. Every list is newest first."""

    def __init__(self, applications: LeaveApplicationRepository, *, limit: int = DEFAULT_LIST_LIMIT):
        self._applications = applications
        self._limit = limit

    def _query(self, criteria: ApplicationFilter) -> Sequence[LeaveApplication]:
        return list(self._applications.query(criteria, limit=self._limit))

    # -------- Approver queues --------
    def pending_for_supervisor(self, supervisor_id: str) -> Sequence[LeaveApplication]:
        return self._query(ApplicationFilter.with_status(LeaveStatus.PENDING, supervisor_id=supervisor_id))

    def pending_for_hod(self, hod_id: str) -> Sequence[LeaveApplication]:
        return self._query(ApplicationFilter.with_status(LeaveStatus.APPROVED_BY_SUPERVISOR, hod_id=hod_id))

    # -------- HR views --------
    def awaiting_capture(self) -> Sequence[LeaveApplication]:
        return self._query(ApplicationFilter.with_status(LeaveStatus.APPROVED_BY_HOD))

    def recorded(self) -> Sequence[LeaveApplication]:
        return self._query(ApplicationFilter.with_status(LeaveStatus.RECORDED))

    def by_department(self, department: str) -> Sequence[LeaveApplication]:
        return self._query(ApplicationFilter(department=department))

    def all(self) -> Sequence[LeaveApplication]:
        return self._query(ApplicationFilter())

    # -------- Employee views --------
    def history(self, employee_id: str) -> Sequence[LeaveApplication]:
        return self._query(ApplicationFilter(employee_id=employee_id))

    def visible_to(self, user_id: str, role: Role) -> Sequence[LeaveApplication]:
        """What a user's dashboard lists, scoped by their role.

        Supervisors see their team's open items, HODs the items waiting on or
        just past their stage; HR sees everything.
        """
        if role == Role.SUPERVISOR:
            return self._query(
                ApplicationFilter.with_status(
                    LeaveStatus.PENDING,
                    LeaveStatus.APPROVED_BY_SUPERVISOR,
                    supervisor_id=user_id,
                )
            )
        if role == Role.HOD:
            return self._query(
                ApplicationFilter.with_status(
                    LeaveStatus.APPROVED_BY_SUPERVISOR,
                    LeaveStatus.APPROVED_BY_HOD,
                    hod_id=user_id,
                )
            )
        if role == Role.HR:
            return self.all()
        return self.history(user_id)
