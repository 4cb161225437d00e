"""Example: drive the workflow through the service layer (no Flask).

Walks one leave from submission to HR capture using the demo users created by
scripts/seed_db.py.
"""

import importlib
from datetime import date, timedelta

from config import get_settings_module

from src.leave_workflow.leave_workflow.container import build_container
from src.leave_workflow.leave_workflow.core.enums import LeaveCategory, Role


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    workflow = container.workflow_service

    start = date.today() + timedelta(days=14)
    application_id = workflow.submit(
        employee_id="emp-001",
        category=LeaveCategory.ANNUAL,
        start_date=start,
        end_date=start + timedelta(days=4),
        reason="Family trip",
    )
    workflow.decide(application_id=application_id, actor_id="sup-001", actor_role=Role.SUPERVISOR, approve=True)
    workflow.decide(application_id=application_id, actor_id="hod-001", actor_role=Role.HOD, approve=True)
    record = workflow.record_by_hr(application_id=application_id, hr_user_id="hr-001")

    print(record.status.label, record.number_of_days, "day(s)")
    print("Annual remaining:", container.ledger.remaining("emp-001", LeaveCategory.ANNUAL))


if __name__ == "__main__":
    main()
