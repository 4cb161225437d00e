from __future__ import annotations

from flask import Flask, jsonify, request, send_file

from ..common.http import parse_date_arg, roles_required
from ..core.enums import Role
from ..container import Container
from .export import XLSX_MIMETYPE, export_applications_xlsx


def register(app: Flask, container: Container) -> None:
    def _range():
        start = request.args.get("start")
        end = request.args.get("end")
        return (
            parse_date_arg(start, "Start date") if start else None,
            parse_date_arg(end, "End date") if end else None,
        )

    @app.route("/api/reports/leaves", methods=["GET"], endpoint="leave_report")
    @roles_required(Role.HR)
    def leave_report():
        start, end = _range()
        report = container.report_service.build(start=start, end=end)
        return jsonify(
            {
                "success": True,
                "totals": report.totals,
                "by_department": report.by_department,
                "by_category": report.by_category,
                "by_month": report.by_month,
            }
        )

    @app.route("/api/reports/leaves.xlsx", methods=["GET"], endpoint="leave_report_export")
    @roles_required(Role.HR)
    def leave_report_export():
        start, end = _range()
        report = container.report_service.build(start=start, end=end)
        output = export_applications_xlsx(report.rows)
        return send_file(
            output,
            download_name="leave_applications.xlsx",
            as_attachment=True,
            mimetype=XLSX_MIMETYPE,
        )
