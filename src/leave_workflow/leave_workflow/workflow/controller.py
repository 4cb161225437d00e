from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_actor, login_required, parse_date_arg, roles_required
from ..core.enums import LeaveCategory, Role
from ..core.exceptions import ValidationError
from ..container import Container
from ..reports.service import application_row, balance_row


def register(app: Flask, container: Container) -> None:
    workflow = container.workflow_service
    queries = container.query_service

    def _body() -> dict:
        return request.get_json(silent=True) or {}

    def _rows(apps) -> list[dict]:
        return [application_row(a) for a in apps]

    # -------- Employee --------
    @app.route("/api/leaves", methods=["POST"], endpoint="submit_leave")
    @login_required
    def submit_leave():
        user_id, _ = current_actor()
        data = _body()
        try:
            category = LeaveCategory.parse(data.get("category") or "")
        except ValueError:
            raise ValidationError("Leave type is required")

        application_id = workflow.submit(
            employee_id=user_id,
            category=category,
            start_date=parse_date_arg(data.get("start_date"), "Start date"),
            end_date=parse_date_arg(data.get("end_date"), "End date"),
            reason=data.get("reason", ""),
            proof_link=data.get("proof_document_link"),
        )
        return jsonify({"success": True, "application_id": application_id}), 201

    @app.route("/api/leaves", methods=["GET"], endpoint="list_leaves")
    @login_required
    def list_leaves():
        user_id, role = current_actor()
        return jsonify({"success": True, "leaves": _rows(queries.visible_to(user_id, role))})

    @app.route("/api/leaves/history", methods=["GET"], endpoint="leave_history")
    @login_required
    def leave_history():
        user_id, _ = current_actor()
        return jsonify({"success": True, "leaves": _rows(queries.history(user_id))})

    @app.route("/api/balances", methods=["GET"], endpoint="my_balances")
    @login_required
    def my_balances():
        user_id, _ = current_actor()
        return jsonify({"success": True, "balances": [balance_row(e) for e in workflow.balances(user_id)]})

    @app.route("/api/leaves/<application_id>", methods=["GET"], endpoint="leave_details")
    @login_required
    def leave_details(application_id: str):
        user_id, role = current_actor()
        record = workflow.get_for(application_id, viewer_id=user_id, viewer_role=role)
        return jsonify({"success": True, "leave": application_row(record)})

    @app.route("/api/leaves/<application_id>/cancel", methods=["POST"], endpoint="cancel_leave")
    @login_required
    def cancel_leave(application_id: str):
        user_id, _ = current_actor()
        record = workflow.cancel(application_id=application_id, requester_id=user_id)
        return jsonify({"success": True, "leave": application_row(record)})

    # -------- Approvers --------
    @app.route("/api/leaves/queue", methods=["GET"], endpoint="approval_queue")
    @roles_required(Role.SUPERVISOR, Role.HOD, Role.HR)
    def approval_queue():
        user_id, role = current_actor()
        if role == Role.SUPERVISOR:
            apps = queries.pending_for_supervisor(user_id)
        elif role == Role.HOD:
            apps = queries.pending_for_hod(user_id)
        else:
            apps = queries.awaiting_capture()
        return jsonify({"success": True, "leaves": _rows(apps)})

    @app.route("/api/leaves/<application_id>/decision", methods=["POST"], endpoint="decide_leave")
    @roles_required(Role.SUPERVISOR, Role.HOD)
    def decide_leave(application_id: str):
        user_id, role = current_actor()
        data = _body()
        approve = data.get("approve")
        if not isinstance(approve, bool):
            raise ValidationError("approve must be true or false")

        record = workflow.decide(
            application_id=application_id,
            actor_id=user_id,
            actor_role=role,
            approve=approve,
            feedback=data.get("feedback", ""),
        )
        return jsonify({"success": True, "leave": application_row(record)})

    # -------- HR --------
    @app.route("/api/leaves/<application_id>/record", methods=["POST"], endpoint="record_leave")
    @roles_required(Role.HR)
    def record_leave(application_id: str):
        user_id, role = current_actor()
        record = workflow.record_by_hr(application_id=application_id, hr_user_id=user_id, actor_role=role)
        return jsonify({"success": True, "leave": application_row(record)})

    @app.route("/api/leaves/recorded", methods=["GET"], endpoint="recorded_leaves")
    @roles_required(Role.HR)
    def recorded_leaves():
        return jsonify({"success": True, "leaves": _rows(queries.recorded())})

    @app.route("/api/departments/<department>/leaves", methods=["GET"], endpoint="department_leaves")
    @roles_required(Role.HOD, Role.HR)
    def department_leaves(department: str):
        return jsonify({"success": True, "leaves": _rows(queries.by_department(department))})
