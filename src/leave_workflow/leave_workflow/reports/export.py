from __future__ import annotations

import io
from typing import Iterable

import pandas as pd

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_COLUMNS = [
    ("application_id", "Application ID"),
    ("employee_id", "Employee ID"),
    ("employee_name", "Employee"),
    ("department", "Department"),
    ("category", "Leave Type"),
    ("start_date", "Start Date"),
    ("end_date", "End Date"),
    ("number_of_days", "Days"),
    ("status_label", "Status"),
    ("applied_at", "Applied At"),
    ("reason", "Reason"),
    ("supervisor_feedback", "Supervisor Feedback"),
    ("hod_feedback", "HOD Feedback"),
    ("captured_by", "Recorded By"),
    ("captured_at", "Recorded At"),
]


def export_applications_xlsx(rows: Iterable[dict], *, sheet_name: str = "Leave Applications") -> io.BytesIO:
    """Write report rows to an in-memory workbook, rewound and ready to send."""
    df = pd.DataFrame(list(rows), columns=[key for key, _ in _COLUMNS])
    df = df.rename(columns=dict(_COLUMNS))

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)

    output.seek(0)
    return output
