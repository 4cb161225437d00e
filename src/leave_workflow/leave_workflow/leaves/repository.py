from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import LeaveStatus
from .model import ApplicationFilter, LeaveApplication, SaveOutcome


class LeaveApplicationRepository(Protocol):
    def add(self, record: LeaveApplication) -> None:
        raise NotImplementedError

    def get(self, application_id: str) -> Optional[LeaveApplication]:
        raise NotImplementedError

    def query(self, criteria: ApplicationFilter, *, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[LeaveApplication]:
        """Return matching applications, newest applied_at first."""

        raise NotImplementedError

    def save(self, record: LeaveApplication, *, expected_status: LeaveStatus) -> bool:
        """Persist record only if the stored status still equals expected_status.

        Returns False when the stored status has moved on (a concurrent
        transition landed first); nothing is written in that case.
        """

        raise NotImplementedError

    def save_with_debit(
        self,
        record: LeaveApplication,
        *,
        expected_status: LeaveStatus,
        expected_used: int,
        new_used: int,
    ) -> SaveOutcome:
        """Persist record and move the employee's used days in one transaction.

        Both writes are compare-and-set: the status against expected_status and
        the ledger row for (record.employee_id, record.category) against
        expected_used. Either both land or neither does.
        """

        raise NotImplementedError
