from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import mysql.connector

from ..core.constants import DEFAULT_ALLOTMENTS
from ..ledger.mysql_ledger_repository import MySQLLedgerRepository
from .connection import DBConfig, DatabaseConnection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBTarget:
    host: str
    port: int
    user: str
    password: str
    database: str


def _as_target(db_config: dict) -> DBTarget:
    return DBTarget(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "leave_db")),
    )


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Splits on ';' outside quotes; line comments are dropped first.
    sql = re.sub(r"(?m)^\s*--.*$", "", sql)
    buf: list[str] = []
    quote = ""

    for ch in sql:
        if quote:
            buf.append(ch)
            if ch == quote:
                quote = ""
            continue

        if ch in ("'", '"'):
            quote = ch
            buf.append(ch)
            continue

        if ch == ";":
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _connect(target: DBTarget, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def ensure_database_exists(db_config: dict) -> None:
    target = _as_target(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)

    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied from %s", schema_path)


DEMO_USERS = (
    # user_id, full_name, email, role, department, supervisor_id, hod_id, hr_id
    ("hr-001", "Hannah Reyes", "hr@example.com", "HR", "Human Resources", None, None, None),
    ("hod-001", "Daniel Okafor", "hod.eng@example.com", "HOD", "Engineering", None, None, "hr-001"),
    ("sup-001", "Sara Lindqvist", "sup.eng@example.com", "Supervisor", "Engineering", None, "hod-001", "hr-001"),
    ("emp-001", "Alex Chen", "alex@example.com", "Employee", "Engineering", "sup-001", "hod-001", "hr-001"),
    ("emp-002", "Priya Nair", "priya@example.com", "Employee", "Engineering", "sup-001", "hod-001", "hr-001"),
)


def ensure_demo_users(db_config: dict) -> None:
    """Upsert the demo reporting chain and give each user the default allotments."""
    target = _as_target(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor()
        for row in DEMO_USERS:
            cur.execute(
                """
                INSERT INTO users (user_id, full_name, email, role, department, supervisor_id, hod_id, hr_id, is_active)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, 1)
                ON DUPLICATE KEY UPDATE
                    full_name=VALUES(full_name), email=VALUES(email), role=VALUES(role),
                    department=VALUES(department), supervisor_id=VALUES(supervisor_id),
                    hod_id=VALUES(hod_id), hr_id=VALUES(hr_id), is_active=1
                """,
                row,
            )
        conn.commit()
    finally:
        conn.close()

    ledger = MySQLLedgerRepository(
        DatabaseConnection(
            DBConfig(
                host=target.host,
                port=target.port,
                user=target.user,
                password=target.password,
                database=target.database,
            )
        )
    )
    for row in DEMO_USERS:
        ledger.create_default_entries(row[0], DEFAULT_ALLOTMENTS)
    logger.info("Demo users ready (%s)", len(DEMO_USERS))


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
