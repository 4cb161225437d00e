from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .common.locks import KeyedLocks
from .core.constants import DEFAULT_PERSISTENCE_TIMEOUT_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .leaves.mysql_leave_repository import MySQLLeaveApplicationRepository
from .ledger.mysql_ledger_repository import MySQLLedgerRepository
from .ledger.service import BalanceLedger
from .reports.service import LeaveReportService
from .users.mysql_user_repository import MySQLUserRepository
from .workflow.notifier import LoggingNotifier, Notifier
from .workflow.queries import LeaveQueryService
from .workflow.service import LeaveWorkflowService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: MySQLUserRepository
    ledger_repo: MySQLLedgerRepository
    applications_repo: MySQLLeaveApplicationRepository

    ledger: BalanceLedger
    workflow_service: LeaveWorkflowService
    query_service: LeaveQueryService
    report_service: LeaveReportService


def build_container(
    *,
    db_config: dict,
    timeout_seconds: int = DEFAULT_PERSISTENCE_TIMEOUT_SECONDS,
    notifier: Optional[Notifier] = None,
) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
        timeout_seconds=int(timeout_seconds),
    )
    conn = DatabaseConnection.get_instance(config)

    users_repo = MySQLUserRepository(conn)
    ledger_repo = MySQLLedgerRepository(conn)
    applications_repo = MySQLLeaveApplicationRepository(conn)

    ledger = BalanceLedger(ledger_repo, locks=KeyedLocks())
    workflow_service = LeaveWorkflowService(
        applications_repo,
        users_repo,
        ledger,
        notifier or LoggingNotifier(),
        locks=KeyedLocks(),
    )
    query_service = LeaveQueryService(applications_repo)
    report_service = LeaveReportService(applications_repo, users_repo)

    return Container(
        conn=conn,
        users_repo=users_repo,
        ledger_repo=ledger_repo,
        applications_repo=applications_repo,
        ledger=ledger,
        workflow_service=workflow_service,
        query_service=query_service,
        report_service=report_service,
    )
