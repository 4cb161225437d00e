from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import roles_required
from ..core.enums import Role
from ..core.exceptions import NotFound
from ..container import Container
from ..reports.service import application_row, balance_row
from .model import User


def _user_row(user: User) -> dict:
    return {
        "user_id": user.user_id,
        "full_name": user.full_name,
        "email": user.email,
        "role": user.role.value,
        "department": user.department,
        "supervisor_id": user.supervisor_id or "",
        "hod_id": user.hod_id or "",
        "hr_id": user.hr_id or "",
        "is_active": user.is_active,
    }


def register(app: Flask, container: Container) -> None:
    users = container.users_repo
    workflow = container.workflow_service
    queries = container.query_service

    @app.route("/api/employees", methods=["GET"], endpoint="list_employees")
    @roles_required(Role.HR)
    def list_employees():
        rows = sorted((_user_row(u) for u in users.list_all()), key=lambda r: (r["department"], r["full_name"]))
        return jsonify({"success": True, "employees": rows})

    @app.route("/api/employees/<user_id>/leaves", methods=["GET"], endpoint="employee_leaves")
    @roles_required(Role.HR)
    def employee_leaves(user_id: str):
        user = users.get_by_id(user_id)
        if user is None:
            raise NotFound(f"Employee {user_id} not found")

        return jsonify(
            {
                "success": True,
                "employee": _user_row(user),
                "leaves": [application_row(a) for a in queries.history(user_id)],
                "balances": [balance_row(e) for e in workflow.balances(user_id)],
            }
        )
