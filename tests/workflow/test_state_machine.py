from __future__ import annotations

from datetime import datetime

import pytest

from src.leave_workflow.leave_workflow.core.enums import LeaveStatus, Role, WorkflowAction
from src.leave_workflow.leave_workflow.core.exceptions import Forbidden, InvalidTransition, Unauthorized
from src.leave_workflow.leave_workflow.workflow.state_machine import (
    ApprovalStateMachine,
    Approver,
    LedgerEffect,
    TRANSITIONS,
)

from fakes import make_application, make_user

AT = datetime(2026, 3, 2, 10, 0, 0)
EMPLOYEE = make_user("emp", supervisor_id="sup", hod_id="hod", hr_id="hr")


@pytest.fixture
def machine():
    return ApprovalStateMachine()


def test_only_hod_approval_debits_the_ledger():
    debits = [t for t in TRANSITIONS if t.ledger_effect == LedgerEffect.DEBIT]
    assert len(debits) == 1
    assert debits[0].source == LeaveStatus.APPROVED_BY_SUPERVISOR
    assert debits[0].target == LeaveStatus.APPROVED_BY_HOD


@pytest.mark.parametrize(
    "role,approve,target",
    [
        (Role.SUPERVISOR, True, LeaveStatus.APPROVED_BY_SUPERVISOR),
        (Role.SUPERVISOR, False, LeaveStatus.REJECTED_BY_SUPERVISOR),
        (Role.HOD, True, LeaveStatus.APPROVED_BY_HOD),
        (Role.HOD, False, LeaveStatus.REJECTED_BY_HOD),
    ],
)
def test_decision_maps_role_to_stage(machine, role, approve, target):
    assert machine.decision_for(role, approve).target == target


@pytest.mark.parametrize("role", [Role.EMPLOYEE, Role.HR])
def test_decision_rejects_non_approver_roles(machine, role):
    with pytest.raises(Unauthorized):
        machine.decision_for(role, True)


def test_allowed_actions_and_terminal_states(machine):
    assert machine.allowed_actions(LeaveStatus.PENDING) == {
        WorkflowAction.APPROVE,
        WorkflowAction.REJECT,
        WorkflowAction.CANCEL,
    }
    assert machine.allowed_actions(LeaveStatus.APPROVED_BY_HOD) == {WorkflowAction.RECORD}
    for status in (
        LeaveStatus.REJECTED_BY_SUPERVISOR,
        LeaveStatus.REJECTED_BY_HOD,
        LeaveStatus.RECORDED,
        LeaveStatus.CANCELLED,
    ):
        assert machine.is_terminal(status)
    assert not machine.is_terminal(LeaveStatus.APPROVED_BY_SUPERVISOR)


def test_supervisor_must_be_the_resolved_one(machine):
    t = machine.decision_for(Role.SUPERVISOR, True)
    record = make_application()

    machine.authorize(t, actor_id="sup", actor_role=Role.SUPERVISOR, record=record, employee=EMPLOYEE)
    with pytest.raises(Unauthorized):
        machine.authorize(t, actor_id="other-sup", actor_role=Role.SUPERVISOR, record=record, employee=EMPLOYEE)


def test_matching_id_with_wrong_role_is_refused(machine):
    t = machine.decision_for(Role.HOD, True)
    with pytest.raises(Unauthorized):
        machine.authorize(t, actor_id="hod", actor_role=Role.SUPERVISOR, record=make_application(), employee=EMPLOYEE)


def test_employee_without_supervisor_cannot_be_approved(machine):
    t = machine.decision_for(Role.SUPERVISOR, True)
    orphan = make_user("emp")
    with pytest.raises(Unauthorized):
        machine.authorize(t, actor_id="", actor_role=Role.SUPERVISOR, record=make_application(), employee=orphan)


def test_hr_assignment_is_enforced_when_present(machine):
    t = machine.transition_for(WorkflowAction.RECORD, Approver.HR)
    record = make_application(status=LeaveStatus.APPROVED_BY_HOD)

    machine.authorize(t, actor_id="hr", actor_role=Role.HR, record=record, employee=EMPLOYEE)
    with pytest.raises(Unauthorized):
        machine.authorize(t, actor_id="other-hr", actor_role=Role.HR, record=record, employee=EMPLOYEE)

    unassigned = make_user("emp", supervisor_id="sup", hod_id="hod")
    machine.authorize(t, actor_id="other-hr", actor_role=Role.HR, record=record, employee=unassigned)


def test_cancel_by_someone_else_is_forbidden(machine):
    t = machine.transition_for(WorkflowAction.CANCEL, Approver.APPLICANT)
    with pytest.raises(Forbidden):
        machine.authorize(t, actor_id="peer", actor_role=None, record=make_application())


def test_fire_from_wrong_state_raises_with_current_status(machine):
    t = machine.decision_for(Role.HOD, True)
    with pytest.raises(InvalidTransition) as exc:
        machine.fire(make_application(), t, actor_id="hod", at=AT)
    assert exc.value.current == LeaveStatus.PENDING
    assert exc.value.action == WorkflowAction.APPROVE


def test_fire_stamps_the_acting_stage(machine):
    sup = machine.fire(make_application(), machine.decision_for(Role.SUPERVISOR, True), actor_id="sup", at=AT, feedback="  ok ")
    assert sup.status == LeaveStatus.APPROVED_BY_SUPERVISOR
    assert sup.supervisor_action_at == AT
    assert sup.supervisor_feedback == "ok"
    assert sup.hod_action_at is None

    hod = machine.fire(sup, machine.decision_for(Role.HOD, False), actor_id="hod", at=AT, feedback="")
    assert hod.status == LeaveStatus.REJECTED_BY_HOD
    assert hod.hod_action_at == AT
    assert hod.hod_feedback is None

    recorded = machine.fire(
        make_application(status=LeaveStatus.APPROVED_BY_HOD),
        machine.transition_for(WorkflowAction.RECORD, Approver.HR),
        actor_id="hr",
        at=AT,
    )
    assert recorded.captured_by == "hr"
    assert recorded.captured_at == AT
