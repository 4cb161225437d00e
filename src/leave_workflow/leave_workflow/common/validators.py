from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.exceptions import InvalidDateRange, ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_date_range(start_date: date, end_date: date) -> None:
    if end_date < start_date:
        raise InvalidDateRange("End date cannot be before start date")


def optional_text(value: Optional[str]) -> Optional[str]:
    v = (value or "").strip()
    return v or None
