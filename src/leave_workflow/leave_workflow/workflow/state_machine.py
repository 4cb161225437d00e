"""Approval state machine for leave applications.

The transition table is the single source of truth for which (status, action,
actor) combinations are legal and which of them move leave days on the ledger.
Everything here is pure: no repository access, no clock reads.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, Optional, Sequence, Tuple

from ..common.validators import optional_text
from ..core.enums import LeaveStatus, Role, WorkflowAction
from ..core.exceptions import Forbidden, InvalidTransition, Unauthorized
from ..leaves.model import LeaveApplication
from ..users.model import User


class Approver(str, Enum):
    """Who, relative to the applicant, may fire a transition."""

    SUPERVISOR = "supervisor"
    HOD = "hod"
    APPLICANT = "applicant"
    HR = "hr"


class LedgerEffect(str, Enum):
    NONE = "none"
    DEBIT = "debit"


@dataclass(frozen=True)
class Transition:
    source: LeaveStatus
    action: WorkflowAction
    approver: Approver
    target: LeaveStatus
    ledger_effect: LedgerEffect = LedgerEffect.NONE


TRANSITIONS: Tuple[Transition, ...] = (
    Transition(LeaveStatus.PENDING, WorkflowAction.APPROVE, Approver.SUPERVISOR, LeaveStatus.APPROVED_BY_SUPERVISOR),
    Transition(LeaveStatus.PENDING, WorkflowAction.REJECT, Approver.SUPERVISOR, LeaveStatus.REJECTED_BY_SUPERVISOR),
    Transition(LeaveStatus.PENDING, WorkflowAction.CANCEL, Approver.APPLICANT, LeaveStatus.CANCELLED),
    Transition(
        LeaveStatus.APPROVED_BY_SUPERVISOR,
        WorkflowAction.APPROVE,
        Approver.HOD,
        LeaveStatus.APPROVED_BY_HOD,
        LedgerEffect.DEBIT,
    ),
    Transition(LeaveStatus.APPROVED_BY_SUPERVISOR, WorkflowAction.REJECT, Approver.HOD, LeaveStatus.REJECTED_BY_HOD),
    Transition(LeaveStatus.APPROVED_BY_HOD, WorkflowAction.RECORD, Approver.HR, LeaveStatus.RECORDED),
)

_ROLE_APPROVERS = {
    Role.SUPERVISOR: Approver.SUPERVISOR,
    Role.HOD: Approver.HOD,
    Role.HR: Approver.HR,
}


class ApprovalStateMachine:
    def __init__(self, transitions: Sequence[Transition] = TRANSITIONS):
        self._by_action: Dict[Tuple[WorkflowAction, Approver], Transition] = {}
        self._sources: Dict[LeaveStatus, list] = {}
        for t in transitions:
            self._by_action[(t.action, t.approver)] = t
            self._sources.setdefault(t.source, []).append(t)

    # -------- Lookup --------
    def transition_for(self, action: WorkflowAction, approver: Approver) -> Transition:
        t = self._by_action.get((action, approver))
        if t is None:
            raise Unauthorized(f"A {approver.value} cannot {action.value} leave applications")
        return t

    def decision_for(self, actor_role: Role, approve: bool) -> Transition:
        """Map an approver's yes/no decision to the transition their role fires."""
        approver = _ROLE_APPROVERS.get(actor_role)
        if approver not in (Approver.SUPERVISOR, Approver.HOD):
            raise Unauthorized("Only supervisors and HODs can approve or reject leave")
        action = WorkflowAction.APPROVE if approve else WorkflowAction.REJECT
        return self.transition_for(action, approver)

    def allowed_actions(self, status: LeaveStatus) -> FrozenSet[WorkflowAction]:
        return frozenset(t.action for t in self._sources.get(status, []))

    def is_terminal(self, status: LeaveStatus) -> bool:
        return not self._sources.get(status)

    # -------- Rules --------
    @staticmethod
    def authorize(
        transition: Transition,
        *,
        actor_id: str,
        actor_role: Optional[Role],
        record: LeaveApplication,
        employee: Optional[User] = None,
    ) -> None:
        """Check the actor against the applicant and the employee's stored reporting lines.

        employee is required for every approver except the applicant.
        """
        approver = transition.approver

        if approver == Approver.APPLICANT:
            if actor_id != record.employee_id:
                raise Forbidden("You can only cancel your own leave")
            return

        if employee is None or employee.user_id != record.employee_id:
            raise Unauthorized("Cannot resolve the employee who filed this leave")

        if approver == Approver.SUPERVISOR:
            if actor_role != Role.SUPERVISOR or not employee.supervisor_id or actor_id != employee.supervisor_id:
                raise Unauthorized("You are not the supervisor of this employee")
            return

        if approver == Approver.HOD:
            if actor_role != Role.HOD or not employee.hod_id or actor_id != employee.hod_id:
                raise Unauthorized("You are not the head of department of this employee")
            return

        if approver == Approver.HR:
            if actor_role != Role.HR:
                raise Unauthorized("Only HR can record leave")
            if employee.hr_id and actor_id != employee.hr_id:
                raise Unauthorized("This leave is assigned to another HR officer")
            return

    @staticmethod
    def ensure_source(record: LeaveApplication, transition: Transition) -> None:
        if record.status != transition.source:
            raise InvalidTransition(record.status, transition.action)

    def fire(
        self,
        record: LeaveApplication,
        transition: Transition,
        *,
        actor_id: str,
        at: datetime,
        feedback: Optional[str] = None,
    ) -> LeaveApplication:
        """Return the record as it looks after the transition, with its stamps."""
        self.ensure_source(record, transition)
        feedback = optional_text(feedback)

        if transition.approver == Approver.SUPERVISOR:
            return replace(record, status=transition.target, supervisor_action_at=at, supervisor_feedback=feedback)
        if transition.approver == Approver.HOD:
            return replace(record, status=transition.target, hod_action_at=at, hod_feedback=feedback)
        if transition.approver == Approver.HR:
            return replace(record, status=transition.target, captured_by=actor_id, captured_at=at)
        return replace(record, status=transition.target)
