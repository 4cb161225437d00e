from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from ..common.locks import KeyedLocks
from ..core.constants import LEDGER_CAS_RETRIES
from ..core.enums import LeaveCategory
from ..core.exceptions import NotFound, PersistenceFailure
from .model import BalanceEntry
from .repository import LedgerRepository

logger = logging.getLogger(__name__)

LedgerWrite = Callable[[BalanceEntry, int], bool]


class BalanceLedger:
    """Per-user, per-category leave counters.

    Used days only move through ``apply``. The result is floored at 0 but never
    capped at the allotment: the allotment is checked once, when a leave is
    submitted.
    """

    def __init__(
        self,
        ledger: LedgerRepository,
        *,
        locks: Optional[KeyedLocks] = None,
        max_retries: int = LEDGER_CAS_RETRIES,
    ):
        self._ledger = ledger
        self._locks = locks or KeyedLocks()
        self._max_retries = max_retries

    def _get(self, user_id: str, category: LeaveCategory) -> BalanceEntry:
        entry = self._ledger.get_entry(user_id, category)
        if entry is None:
            raise NotFound(f"No {category.value} balance for user {user_id}")
        return entry

    def _compare_and_set(self, entry: BalanceEntry, new_used: int) -> bool:
        return self._ledger.compare_and_set_used(
            user_id=entry.user_id,
            category=entry.category,
            expected_used=entry.used,
            new_used=new_used,
        )

    def apply(
        self,
        user_id: str,
        category: LeaveCategory,
        delta_days: int,
        *,
        reverse: bool = False,
        write: Optional[LedgerWrite] = None,
    ) -> int:
        """Add (or, with reverse, subtract) delta_days to used; return the new used value.

        write(entry, new_used) commits the change and returns False when the
        stored value moved since it was read; it defaults to a plain
        compare-and-set on the ledger row. Callers that must commit other rows
        in the same transaction pass their own.
        """
        write = write or self._compare_and_set
        with self._locks.hold((user_id, category)):
            for attempt in range(1, self._max_retries + 1):
                entry = self._get(user_id, category)
                new_used = entry.used - delta_days if reverse else entry.used + delta_days
                new_used = max(0, new_used)

                if write(entry, new_used):
                    logger.info(
                        "Ledger %s/%s used %s -> %s (delta=%s reverse=%s)",
                        user_id,
                        category.value,
                        entry.used,
                        new_used,
                        delta_days,
                        reverse,
                    )
                    return new_used

                logger.debug("Ledger write conflict for %s/%s (attempt %s)", user_id, category.value, attempt)

        raise PersistenceFailure(f"Could not update {category.value} balance for user {user_id}")

    def remaining(self, user_id: str, category: LeaveCategory) -> int:
        return self._get(user_id, category).remaining

    def balances(self, user_id: str) -> Sequence[BalanceEntry]:
        return list(self._ledger.list_for_user(user_id))
