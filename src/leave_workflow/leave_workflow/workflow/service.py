from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import inclusive_days, now_utc
from ..common.locks import KeyedLocks
from ..common.validators import optional_text, require_date_range, require_non_empty
from ..core.enums import LeaveCategory, LeaveStatus, Role, WorkflowAction
from ..core.exceptions import EmployeeNotFound, Forbidden, InsufficientBalance, InvalidTransition, NotFound
from ..ledger.model import BalanceEntry
from ..ledger.service import BalanceLedger
from ..leaves.model import LeaveApplication, SaveOutcome
from ..leaves.repository import LeaveApplicationRepository
from ..users.model import User
from ..users.repository import UserRepository
from .events import HodDecided, Recorded, Submitted, SupervisorDecided, WorkflowEvent
from .notifier import LoggingNotifier, Notifier
from .state_machine import ApprovalStateMachine, Approver, LedgerEffect, Transition

logger = logging.getLogger(__name__)


def _new_application_id() -> str:
    return uuid.uuid4().hex


class LeaveWorkflowService:
    """Use cases: submit, decide, cancel and record leave applications.

    Every transition is validated before anything is written. The new status is
    committed with a compare-and-set on the status that was read. HOD approval
    writes the status and the ledger debit in a single transaction.
    """

    def __init__(
        self,
        applications: LeaveApplicationRepository,
        users: UserRepository,
        ledger: BalanceLedger,
        notifier: Optional[Notifier] = None,
        *,
        state_machine: Optional[ApprovalStateMachine] = None,
        locks: Optional[KeyedLocks] = None,
        clock: Callable[[], datetime] = now_utc,
        id_factory: Callable[[], str] = _new_application_id,
    ):
        self._applications = applications
        self._users = users
        self._ledger = ledger
        self._notifier = notifier or LoggingNotifier()
        self._machine = state_machine or ApprovalStateMachine()
        self._locks = locks or KeyedLocks()
        self._clock = clock
        self._id_factory = id_factory

    # -------- Lookups --------
    def get(self, application_id: str) -> LeaveApplication:
        record = self._applications.get(application_id)
        if record is None:
            raise NotFound(f"Leave application {application_id} not found")
        return record

    def get_for(self, application_id: str, *, viewer_id: str, viewer_role: Role) -> LeaveApplication:
        """Return the record if the viewer is its owner, someone in its approval chain, or HR."""
        record = self.get(application_id)
        if viewer_role == Role.HR or record.employee_id == viewer_id:
            return record

        employee = self._users.get_by_id(record.employee_id)
        if employee is not None:
            if viewer_role == Role.SUPERVISOR and employee.supervisor_id == viewer_id:
                return record
            if viewer_role == Role.HOD and employee.hod_id == viewer_id:
                return record
        raise Forbidden("You cannot view this leave")

    def balances(self, user_id: str) -> Sequence[BalanceEntry]:
        return self._ledger.balances(user_id)

    def _employee_of(self, record: LeaveApplication) -> User:
        employee = self._users.get_by_id(record.employee_id)
        if employee is None:
            raise EmployeeNotFound(f"Employee {record.employee_id} not found")
        return employee

    # -------- Commands --------
    def submit(
        self,
        *,
        employee_id: str,
        category: LeaveCategory,
        start_date: date,
        end_date: date,
        reason: str,
        proof_link: Optional[str] = None,
    ) -> str:
        require_date_range(start_date, end_date)
        reason = require_non_empty(reason, "Reason")

        employee = self._users.get_by_id(employee_id)
        if employee is None:
            raise EmployeeNotFound(f"Employee {employee_id} not found")

        requested = inclusive_days(start_date, end_date)
        available = self._ledger.remaining(employee.user_id, category)
        if requested > available:
            logger.info(
                "Rejected %s-day %s request from %s: %s day(s) available",
                requested,
                category.value,
                employee.user_id,
                available,
            )
            raise InsufficientBalance(available=available, requested=requested)

        record = LeaveApplication(
            application_id=self._id_factory(),
            employee_id=employee.user_id,
            employee_name=employee.full_name,
            category=category,
            start_date=start_date,
            end_date=end_date,
            number_of_days=requested,
            reason=reason,
            proof_document_link=optional_text(proof_link),
            status=LeaveStatus.PENDING,
            applied_at=self._clock(),
        )
        self._applications.add(record)
        logger.info("Leave %s submitted by %s (%s, %s days)", record.application_id, employee.user_id, category.value, requested)

        self._emit(Submitted(application_id=record.application_id, employee_id=record.employee_id))
        return record.application_id

    def decide(
        self,
        *,
        application_id: str,
        actor_id: str,
        actor_role: Role,
        approve: bool,
        feedback: str = "",
    ) -> LeaveApplication:
        transition = self._machine.decision_for(actor_role, approve)

        with self._locks.hold(application_id):
            record = self.get(application_id)
            employee = self._employee_of(record)
            self._machine.authorize(
                transition,
                actor_id=actor_id,
                actor_role=actor_role,
                record=record,
                employee=employee,
            )
            updated = self._machine.fire(record, transition, actor_id=actor_id, at=self._clock(), feedback=feedback)
            self._commit(record, updated, transition)

        if transition.approver == Approver.SUPERVISOR:
            self._emit(SupervisorDecided(application_id=application_id, approved=approve))
        else:
            self._emit(HodDecided(application_id=application_id, approved=approve))
        return updated

    def cancel(self, *, application_id: str, requester_id: str) -> LeaveApplication:
        transition = self._machine.transition_for(WorkflowAction.CANCEL, Approver.APPLICANT)

        with self._locks.hold(application_id):
            record = self.get(application_id)
            self._machine.authorize(transition, actor_id=requester_id, actor_role=None, record=record)
            updated = self._machine.fire(record, transition, actor_id=requester_id, at=self._clock())
            self._commit(record, updated, transition)

        return updated

    def record_by_hr(
        self,
        *,
        application_id: str,
        hr_user_id: str,
        actor_role: Role = Role.HR,
    ) -> LeaveApplication:
        """Mark an HOD-approved leave as recorded. The days were already debited at HOD approval."""
        transition = self._machine.transition_for(WorkflowAction.RECORD, Approver.HR)

        with self._locks.hold(application_id):
            record = self.get(application_id)
            employee = self._employee_of(record)
            self._machine.authorize(
                transition,
                actor_id=hr_user_id,
                actor_role=actor_role,
                record=record,
                employee=employee,
            )
            updated = self._machine.fire(record, transition, actor_id=hr_user_id, at=self._clock())
            self._commit(record, updated, transition)

        self._emit(Recorded(application_id=application_id))
        return updated

    # -------- Internals --------
    def _lost_race(self, before: LeaveApplication, transition: Transition) -> InvalidTransition:
        current = self._applications.get(before.application_id)
        current_status = current.status if current else before.status
        logger.info(
            "Lost race on leave %s: expected %s, found %s",
            before.application_id,
            before.status.value,
            current_status.value,
        )
        return InvalidTransition(current_status, transition.action)

    def _commit(self, before: LeaveApplication, after: LeaveApplication, transition: Transition) -> None:
        if transition.ledger_effect == LedgerEffect.DEBIT:
            self._commit_with_debit(before, after, transition)
        elif not self._applications.save(after, expected_status=before.status):
            raise self._lost_race(before, transition)

        logger.info(
            "Leave %s: %s -> %s (%s)",
            before.application_id,
            before.status.value,
            after.status.value,
            transition.action.value,
        )

    def _commit_with_debit(self, before: LeaveApplication, after: LeaveApplication, transition: Transition) -> None:
        """Status change and ledger debit land in one transaction, or not at all."""

        def write(entry: BalanceEntry, new_used: int) -> bool:
            outcome = self._applications.save_with_debit(
                after,
                expected_status=before.status,
                expected_used=entry.used,
                new_used=new_used,
            )
            if outcome == SaveOutcome.STATUS_CHANGED:
                raise self._lost_race(before, transition)
            return outcome == SaveOutcome.SAVED

        self._ledger.apply(before.employee_id, before.category, before.number_of_days, write=write)

    def _emit(self, event: WorkflowEvent) -> None:
        try:
            self._notifier.notify(event)
        except Exception:
            logger.exception("Notification failed for %r", event)
