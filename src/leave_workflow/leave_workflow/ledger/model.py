from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import LeaveCategory


@dataclass(frozen=True)
class BalanceEntry:
    """Allotted and used day counts for one user and one leave category."""

    user_id: str
    category: LeaveCategory
    allotted: int
    used: int

    @property
    def remaining(self) -> int:
        return self.allotted - self.used
