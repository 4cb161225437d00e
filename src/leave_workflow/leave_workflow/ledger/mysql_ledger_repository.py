from __future__ import annotations

from typing import Mapping, Optional, Sequence

from ..core.enums import LeaveCategory
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import BalanceEntry
from .repository import LedgerRepository


def _row_to_entry(row: dict) -> BalanceEntry:
    return BalanceEntry(
        user_id=str(row["user_id"]),
        category=LeaveCategory.parse(row["category"]),
        allotted=int(row["allotted_days"]),
        used=int(row["used_days"]),
    )


class MySQLLedgerRepository(LedgerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_entry(self, user_id: str, category: LeaveCategory) -> Optional[BalanceEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, category, allotted_days, used_days
                FROM leave_balances
                WHERE user_id=%s AND category=%s
                """,
                (str(user_id), category.value),
            )
            row = fetchone(cur)
            if not row:
                return None
            return _row_to_entry(row)

    def list_for_user(self, user_id: str) -> Sequence[BalanceEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, category, allotted_days, used_days
                FROM leave_balances
                WHERE user_id=%s
                ORDER BY category
                """,
                (str(user_id),),
            )
            return [_row_to_entry(r) for r in fetchall(cur)]

    def compare_and_set_used(
        self,
        *,
        user_id: str,
        category: LeaveCategory,
        expected_used: int,
        new_used: int,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_balances
                SET used_days=%s, updated_at=NOW()
                WHERE user_id=%s AND category=%s AND used_days=%s
                """,
                (int(new_used), str(user_id), category.value, int(expected_used)),
            )
            return cur.rowcount > 0

    def create_default_entries(self, user_id: str, allotments: Mapping[LeaveCategory, int]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            for category, allotted in allotments.items():
                cur.execute(
                    """
                    INSERT INTO leave_balances(user_id, category, allotted_days, used_days)
                    VALUES(%s,%s,%s,0)
                    ON DUPLICATE KEY UPDATE allotted_days=VALUES(allotted_days)
                    """,
                    (str(user_id), category.value, int(allotted)),
                )
