"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import LeaveCategory

DEFAULT_ALLOTMENTS = {
    LeaveCategory.ANNUAL: 21,
    LeaveCategory.SICK: 15,
    LeaveCategory.EMERGENCY: 5,
    LeaveCategory.MATERNITY: 90,
    LeaveCategory.PATERNITY: 14,
}

DEFAULT_PERSISTENCE_TIMEOUT_SECONDS = 10
LOCK_TIMEOUT_SECONDS = 15
LEDGER_CAS_RETRIES = 5
DEFAULT_LIST_LIMIT = 500
REPORT_ROW_LIMIT = 10000
