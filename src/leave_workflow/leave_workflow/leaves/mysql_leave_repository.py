from __future__ import annotations

from datetime import timedelta
from typing import Optional, Sequence

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import LeaveCategory, LeaveStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ApplicationFilter, LeaveApplication, SaveOutcome
from .repository import LeaveApplicationRepository

_APPLICATION_COLUMNS = """
    a.application_id, a.employee_id, a.employee_name, a.category,
    a.start_date, a.end_date, a.number_of_days, a.reason, a.proof_document_link,
    a.status, a.applied_at,
    a.supervisor_action_at, a.supervisor_feedback,
    a.hod_action_at, a.hod_feedback,
    a.captured_by, a.captured_at
"""

_SAVE_SQL = """
    UPDATE leave_applications
    SET status=%s,
        supervisor_action_at=%s, supervisor_feedback=%s,
        hod_action_at=%s, hod_feedback=%s,
        captured_by=%s, captured_at=%s
    WHERE application_id=%s AND status=%s
"""


def _row_to_application(r: dict) -> LeaveApplication:
    return LeaveApplication(
        application_id=str(r["application_id"]),
        employee_id=str(r["employee_id"]),
        employee_name=r.get("employee_name") or "",
        category=LeaveCategory.parse(r["category"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        number_of_days=int(r["number_of_days"]),
        reason=r["reason"],
        proof_document_link=r.get("proof_document_link"),
        status=LeaveStatus.parse(r["status"]),
        applied_at=r["applied_at"],
        supervisor_action_at=r.get("supervisor_action_at"),
        supervisor_feedback=r.get("supervisor_feedback"),
        hod_action_at=r.get("hod_action_at"),
        hod_feedback=r.get("hod_feedback"),
        captured_by=r.get("captured_by"),
        captured_at=r.get("captured_at"),
    )


def _save_params(record: LeaveApplication, expected_status: LeaveStatus) -> tuple:
    return (
        record.status.value,
        record.supervisor_action_at,
        record.supervisor_feedback,
        record.hod_action_at,
        record.hod_feedback,
        record.captured_by,
        record.captured_at,
        record.application_id,
        expected_status.value,
    )


class MySQLLeaveApplicationRepository(LeaveApplicationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, record: LeaveApplication) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_applications(
                    application_id, employee_id, employee_name, category,
                    start_date, end_date, number_of_days, reason, proof_document_link,
                    status, applied_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    record.application_id,
                    record.employee_id,
                    record.employee_name,
                    record.category.value,
                    record.start_date,
                    record.end_date,
                    int(record.number_of_days),
                    record.reason,
                    record.proof_document_link,
                    record.status.value,
                    record.applied_at,
                ),
            )

    def get(self, application_id: str) -> Optional[LeaveApplication]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_APPLICATION_COLUMNS}
                FROM leave_applications a
                WHERE a.application_id=%s
                """,
                (str(application_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return _row_to_application(r)

    def query(self, criteria: ApplicationFilter, *, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[LeaveApplication]:
        clauses = ["1=1"]
        params: list[object] = []

        if criteria.statuses:
            placeholders = ",".join(["%s"] * len(criteria.statuses))
            clauses.append(f"a.status IN ({placeholders})")
            params.extend(sorted(s.value for s in criteria.statuses))
        if criteria.employee_id is not None:
            clauses.append("a.employee_id=%s")
            params.append(criteria.employee_id)
        if criteria.supervisor_id is not None:
            clauses.append("u.supervisor_id=%s")
            params.append(criteria.supervisor_id)
        if criteria.hod_id is not None:
            clauses.append("u.hod_id=%s")
            params.append(criteria.hod_id)
        if criteria.department is not None:
            clauses.append("u.department=%s")
            params.append(criteria.department)
        if criteria.applied_from is not None:
            clauses.append("a.applied_at >= %s")
            params.append(criteria.applied_from)
        if criteria.applied_to is not None:
            clauses.append("a.applied_at < %s")
            params.append(criteria.applied_to + timedelta(days=1))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_APPLICATION_COLUMNS}
                FROM leave_applications a
                JOIN users u ON u.user_id = a.employee_id
                WHERE {where}
                ORDER BY a.applied_at DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_row_to_application(r) for r in fetchall(cur)]

    def save(self, record: LeaveApplication, *, expected_status: LeaveStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SAVE_SQL, _save_params(record, expected_status))
            return cur.rowcount > 0

    def save_with_debit(
        self,
        record: LeaveApplication,
        *,
        expected_status: LeaveStatus,
        expected_used: int,
        new_used: int,
    ) -> SaveOutcome:
        with db_cursor(self._conn_factory) as (conn, cur):
            cur.execute(_SAVE_SQL, _save_params(record, expected_status))
            if cur.rowcount == 0:
                conn.rollback()
                return SaveOutcome.STATUS_CHANGED

            cur.execute(
                """
                UPDATE leave_balances
                SET used_days=%s, updated_at=NOW()
                WHERE user_id=%s AND category=%s AND used_days=%s
                """,
                (int(new_used), record.employee_id, record.category.value, int(expected_used)),
            )
            if cur.rowcount == 0:
                conn.rollback()
                return SaveOutcome.BALANCE_CHANGED

            return SaveOutcome.SAVED
