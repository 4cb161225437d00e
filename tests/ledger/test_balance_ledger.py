from __future__ import annotations

import threading

import pytest

from src.leave_workflow.leave_workflow.common.locks import KeyedLocks
from src.leave_workflow.leave_workflow.core.enums import LeaveCategory
from src.leave_workflow.leave_workflow.core.exceptions import NotFound, PersistenceFailure
from src.leave_workflow.leave_workflow.ledger.service import BalanceLedger

from fakes import FakeLedgerRepo


def _ledger(repo, **kwargs):
    return BalanceLedger(repo, locks=KeyedLocks(), **kwargs)


def test_apply_adds_days_and_returns_new_used():
    repo = FakeLedgerRepo()
    repo.set_balance("u1", LeaveCategory.ANNUAL, allotted=21, used=3)

    assert _ledger(repo).apply("u1", LeaveCategory.ANNUAL, 5) == 8
    assert repo.used("u1", LeaveCategory.ANNUAL) == 8
    assert repo.writes == 1


def test_reverse_subtracts_and_floors_at_zero():
    repo = FakeLedgerRepo()
    repo.set_balance("u1", LeaveCategory.SICK, allotted=15, used=2)

    assert _ledger(repo).apply("u1", LeaveCategory.SICK, 5, reverse=True) == 0
    assert repo.used("u1", LeaveCategory.SICK) == 0


def test_used_may_exceed_allotment():
    repo = FakeLedgerRepo()
    repo.set_balance("u1", LeaveCategory.EMERGENCY, allotted=5, used=4)

    ledger = _ledger(repo)
    ledger.apply("u1", LeaveCategory.EMERGENCY, 3)

    assert ledger.remaining("u1", LeaveCategory.EMERGENCY) == -2


def test_missing_entry_raises_not_found():
    with pytest.raises(NotFound):
        _ledger(FakeLedgerRepo()).apply("ghost", LeaveCategory.ANNUAL, 1)


def test_remaining_and_balances():
    repo = FakeLedgerRepo()
    repo.set_balance("u1", LeaveCategory.ANNUAL, allotted=21, used=6)
    repo.set_balance("u1", LeaveCategory.SICK, allotted=15)
    repo.set_balance("u2", LeaveCategory.SICK, allotted=15)
    ledger = _ledger(repo)

    assert ledger.remaining("u1", LeaveCategory.ANNUAL) == 15
    assert {e.category for e in ledger.balances("u1")} == {LeaveCategory.ANNUAL, LeaveCategory.SICK}


def test_conflicting_write_is_retried():
    repo = FakeLedgerRepo()
    repo.set_balance("u1", LeaveCategory.ANNUAL, allotted=21, used=0)
    real_cas = repo.compare_and_set_used
    calls = []

    def cas_losing_once(**kwargs):
        calls.append(kwargs)
        if len(calls) == 1:
            # another process lands 2 days between our read and our write
            repo.set_balance("u1", LeaveCategory.ANNUAL, allotted=21, used=2)
        return real_cas(**kwargs)

    repo.compare_and_set_used = cas_losing_once

    assert _ledger(repo).apply("u1", LeaveCategory.ANNUAL, 5) == 7
    assert [c["expected_used"] for c in calls] == [0, 2]


def test_gives_up_after_bounded_retries():
    repo = FakeLedgerRepo()
    repo.set_balance("u1", LeaveCategory.ANNUAL, allotted=21)
    repo.compare_and_set_used = lambda **kwargs: False

    with pytest.raises(PersistenceFailure):
        _ledger(repo, max_retries=3).apply("u1", LeaveCategory.ANNUAL, 1)


def test_custom_write_replaces_the_plain_compare_and_set():
    repo = FakeLedgerRepo()
    repo.set_balance("u1", LeaveCategory.ANNUAL, allotted=21, used=1)
    seen = []

    def write(entry, new_used):
        seen.append((entry.used, new_used))
        return len(seen) == 2

    assert _ledger(repo).apply("u1", LeaveCategory.ANNUAL, 4, write=write) == 5
    assert seen == [(1, 5), (1, 5)]
    assert repo.writes == 0


def test_store_failure_propagates():
    repo = FakeLedgerRepo()
    repo.set_balance("u1", LeaveCategory.ANNUAL, allotted=21)
    repo.fail_writes = True

    with pytest.raises(PersistenceFailure):
        _ledger(repo).apply("u1", LeaveCategory.ANNUAL, 1)


def test_concurrent_debits_from_separate_ledgers_lose_nothing():
    repo = FakeLedgerRepo()
    repo.set_balance("u1", LeaveCategory.ANNUAL, allotted=21)
    # each worker has its own in-process locks, so only the CAS keeps them honest
    repo.after_read.arm(2)
    ledgers = [_ledger(repo), _ledger(repo)]
    errors = []

    def debit(ledger, days):
        try:
            ledger.apply("u1", LeaveCategory.ANNUAL, days)
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=debit, args=(ledgers[0], 3)), threading.Thread(target=debit, args=(ledgers[1], 4))]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert errors == []
    assert repo.used("u1", LeaveCategory.ANNUAL) == 7
    assert repo.writes == 2


def test_many_threads_on_one_ledger_sum_exactly():
    repo = FakeLedgerRepo()
    repo.set_balance("u1", LeaveCategory.SICK, allotted=15)
    ledger = _ledger(repo)

    threads = [threading.Thread(target=ledger.apply, args=("u1", LeaveCategory.SICK, 1)) for _ in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert repo.used("u1", LeaveCategory.SICK) == 20
