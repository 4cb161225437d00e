from __future__ import annotations

import pytest
from flask import Flask

from src.leave_workflow.leave_workflow.common.http import register_error_handlers
from src.leave_workflow.leave_workflow.container import Container
from src.leave_workflow.leave_workflow.core.enums import LeaveCategory, LeaveStatus
from src.leave_workflow.leave_workflow.ledger.service import BalanceLedger
from src.leave_workflow.leave_workflow.reports.controller import register as register_reports
from src.leave_workflow.leave_workflow.reports.export import XLSX_MIMETYPE
from src.leave_workflow.leave_workflow.reports.service import LeaveReportService
from src.leave_workflow.leave_workflow.users.controller import register as register_users
from src.leave_workflow.leave_workflow.workflow.controller import register as register_workflow
from src.leave_workflow.leave_workflow.workflow.queries import LeaveQueryService


@pytest.fixture
def client(ws, service):
    container = Container(
        conn=None,
        users_repo=ws.users,
        ledger_repo=ws.ledger_repo,
        applications_repo=ws.applications,
        ledger=BalanceLedger(ws.ledger_repo),
        workflow_service=service,
        query_service=LeaveQueryService(ws.applications),
        report_service=LeaveReportService(ws.applications, ws.users),
    )
    app = Flask(__name__)
    app.secret_key = "test-secret"
    app.config["TESTING"] = True
    register_error_handlers(app)
    register_workflow(app, container)
    register_reports(app, container)
    register_users(app, container)
    return app.test_client()


def _login(client, user_id, role):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role


def _submit(client, **overrides):
    body = {"category": "annual", "start_date": "2026-04-06", "end_date": "2026-04-10", "reason": "Holiday"}
    body.update(overrides)
    return client.post("/api/leaves", json=body)


def test_requires_session(client):
    assert client.get("/api/leaves").status_code == 401


def test_submit_and_view(client, ws):
    _login(client, "emp", "Employee")
    resp = _submit(client)
    assert resp.status_code == 201
    application_id = resp.get_json()["application_id"]

    leave = client.get(f"/api/leaves/{application_id}").get_json()["leave"]
    assert leave["number_of_days"] == 5
    assert leave["status"] == "Pending"
    assert leave["category"] == "Annual"

    listed = client.get("/api/leaves").get_json()["leaves"]
    assert [row["application_id"] for row in listed] == [application_id]


def test_bad_input_maps_to_400(client):
    _login(client, "emp", "Employee")
    assert _submit(client, category="vacation").status_code == 400
    assert _submit(client, start_date="06/04/2026").status_code == 400
    assert _submit(client, end_date="2026-04-01").status_code == 400

    resp = _submit(client, category="emergency", end_date="2026-04-20")
    assert resp.status_code == 400
    assert "Available: 5, Requested: 15" in resp.get_json()["message"]


def test_full_approval_over_http(client, ws):
    _login(client, "emp", "Employee")
    application_id = _submit(client).get_json()["application_id"]

    _login(client, "sup", "Supervisor")
    queue = client.get("/api/leaves/queue").get_json()["leaves"]
    assert [row["application_id"] for row in queue] == [application_id]
    resp = client.post(f"/api/leaves/{application_id}/decision", json={"approve": True, "feedback": "Enjoy"})
    assert resp.status_code == 200
    assert resp.get_json()["leave"]["status_label"] == "Approved by Supervisor"

    _login(client, "hod", "HOD")
    assert client.post(f"/api/leaves/{application_id}/decision", json={"approve": True}).status_code == 200

    _login(client, "hr", "HR")
    assert client.post(f"/api/leaves/{application_id}/record").status_code == 200
    assert ws.stored(application_id).status == LeaveStatus.RECORDED

    _login(client, "emp", "Employee")
    balances = {b["category"]: b for b in client.get("/api/balances").get_json()["balances"]}
    assert balances["Annual"]["remaining"] == 16
    assert balances["Annual"]["used"] == 5


def test_error_mapping(client, ws):
    _login(client, "emp", "Employee")
    application_id = _submit(client).get_json()["application_id"]

    _login(client, "peer", "Employee")
    assert client.post(f"/api/leaves/{application_id}/cancel").status_code == 403
    assert client.get(f"/api/leaves/{application_id}").status_code == 403

    _login(client, "other-sup", "Supervisor")
    assert client.post(f"/api/leaves/{application_id}/decision", json={"approve": True}).status_code == 403

    _login(client, "sup", "Supervisor")
    assert client.post(f"/api/leaves/{application_id}/decision", json={}).status_code == 400
    assert client.post("/api/leaves/missing/decision", json={"approve": True}).status_code == 404

    _login(client, "emp", "Employee")
    assert client.post(f"/api/leaves/{application_id}/cancel").status_code == 200
    assert client.post(f"/api/leaves/{application_id}/cancel").status_code == 409

    ws.ledger_repo.fail_writes = True
    ws.ledger_repo.set_balance("emp", LeaveCategory.SICK, allotted=15)
    _login(client, "emp", "Employee")
    sick_id = _submit(client, category="sick").get_json()["application_id"]
    _login(client, "sup", "Supervisor")
    client.post(f"/api/leaves/{sick_id}/decision", json={"approve": True})
    _login(client, "hod", "HOD")
    assert client.post(f"/api/leaves/{sick_id}/decision", json={"approve": True}).status_code == 503
    assert ws.stored(sick_id).status == LeaveStatus.APPROVED_BY_SUPERVISOR


def test_role_guards(client):
    _login(client, "emp", "Employee")
    assert client.get("/api/leaves/queue").status_code == 403
    assert client.get("/api/reports/leaves").status_code == 403

    _login(client, "emp", "Janitor")
    assert client.get("/api/leaves").status_code == 403


def test_hr_report_and_export(client):
    _login(client, "emp", "Employee")
    _submit(client)
    _submit(client, category="sick", end_date="2026-04-06")

    _login(client, "hr", "HR")
    report = client.get("/api/reports/leaves").get_json()
    assert report["totals"]["applications"] == 2
    assert report["by_department"][0]["department"] == "Engineering"

    resp = client.get("/api/reports/leaves.xlsx")
    assert resp.status_code == 200
    assert resp.mimetype == XLSX_MIMETYPE
    assert resp.data[:2] == b"PK"

    assert client.get("/api/reports/leaves?start=bad").status_code == 400


def test_leave_details_are_scoped_to_the_reporting_line(client):
    _login(client, "emp", "Employee")
    application_id = _submit(client).get_json()["application_id"]

    for user_id, role in [("sup", "Supervisor"), ("hod", "HOD"), ("hr", "HR"), ("other-hr", "HR")]:
        _login(client, user_id, role)
        assert client.get(f"/api/leaves/{application_id}").status_code == 200, user_id

    for user_id, role in [("other-sup", "Supervisor"), ("other-hod", "HOD"), ("peer", "Employee")]:
        _login(client, user_id, role)
        assert client.get(f"/api/leaves/{application_id}").status_code == 403, user_id


def test_hr_lists_employees_and_their_leave(client):
    _login(client, "emp", "Employee")
    application_id = _submit(client).get_json()["application_id"]

    _login(client, "hr", "HR")
    employees = client.get("/api/employees").get_json()["employees"]
    by_id = {e["user_id"]: e for e in employees}
    assert len(employees) == 8
    assert by_id["emp"]["supervisor_id"] == "sup"
    assert by_id["emp"]["role"] == "Employee"

    body = client.get("/api/employees/emp/leaves").get_json()
    assert body["employee"]["user_id"] == "emp"
    assert [row["application_id"] for row in body["leaves"]] == [application_id]
    annual = next(b for b in body["balances"] if b["category"] == "Annual")
    assert annual["remaining"] == 21

    assert client.get("/api/employees/nobody/leaves").status_code == 404


def test_employee_directory_is_hr_only(client):
    for user_id, role in [("emp", "Employee"), ("sup", "Supervisor"), ("hod", "HOD")]:
        _login(client, user_id, role)
        assert client.get("/api/employees").status_code == 403
        assert client.get("/api/employees/emp/leaves").status_code == 403
