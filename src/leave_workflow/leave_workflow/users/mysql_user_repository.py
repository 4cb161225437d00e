from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_USER_COLUMNS = """
    user_id, full_name, email, role, department,
    supervisor_id, hod_id, hr_id, is_active
"""


def _row_to_user(row: dict) -> User:
    return User(
        user_id=str(row["user_id"]),
        full_name=row["full_name"],
        email=row["email"],
        role=Role.parse(row["role"]),
        department=row.get("department") or "",
        supervisor_id=row.get("supervisor_id"),
        hod_id=row.get("hod_id"),
        hr_id=row.get("hr_id"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_USER_COLUMNS}
                FROM users
                WHERE user_id=%s
                """,
                (str(user_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return _row_to_user(row)

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_USER_COLUMNS}
                FROM users
                ORDER BY full_name
                """
            )
            return [_row_to_user(r) for r in fetchall(cur)]
