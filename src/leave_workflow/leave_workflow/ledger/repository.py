from __future__ import annotations

from typing import Mapping, Optional, Protocol, Sequence

from ..core.enums import LeaveCategory
from .model import BalanceEntry


class LedgerRepository(Protocol):
    def get_entry(self, user_id: str, category: LeaveCategory) -> Optional[BalanceEntry]:
        raise NotImplementedError

    def list_for_user(self, user_id: str) -> Sequence[BalanceEntry]:
        raise NotImplementedError

    def compare_and_set_used(
        self,
        *,
        user_id: str,
        category: LeaveCategory,
        expected_used: int,
        new_used: int,
    ) -> bool:
        """Write new_used only if the stored value still equals expected_used.

        Returns False when another writer got there first.
        """

        raise NotImplementedError

    def create_default_entries(self, user_id: str, allotments: Mapping[LeaveCategory, int]) -> None:
        raise NotImplementedError
