"""Tests for ledger_recon.service.ReconciliationService."""

from datetime import date, timedelta

import pytest

from ledger_recon.config import LockConfig, ReconConfig
from ledger_recon.locking import ThreadLedgerLock
from ledger_recon.models.ledger import MatchCriteria
from ledger_recon.service import ReconciliationService
from ledger_recon.store.memory import InMemoryRecordStore
from ledger_recon.utils.exceptions import ErrorKind

JAN_5 = date(2024, 1, 5)


class UnreadableStore(InMemoryRecordStore):
    def load_all_check_items(self):
        raise RuntimeError("connection reset")

    def load_all_bank_items(self):
        raise RuntimeError("connection reset")


class FailingRowStore(InMemoryRecordStore):
    def __init__(self, *args, failing_row: int, **kwargs):
        super().__init__(*args, **kwargs)
        self.failing_row = failing_row

    def write_check_item_status(self, row, value):
        if row == self.failing_row:
            raise OSError("sheet is protected")
        super().write_check_item_status(row, value)


@pytest.fixture
def quick_config():
    return ReconConfig(lock=LockConfig(timeout_seconds=0.05))


@pytest.fixture
def service(supply_store, quick_config):
    return ReconciliationService(supply_store, config=quick_config)


class TestRunAutoMatchingProcess:
    def test_matches_and_persists(self, service, supply_store):
        result = service.run_auto_matching_process({})

        assert result.ok
        assert result.error is None
        assert result.value.counts() == {
            "tier1Count": 1,
            "tier2Count": 0,
            "tier3Count": 0,
            "totalMatches": 1,
        }
        assert supply_store.find_check_item(3).status == "T1"
        assert len(supply_store.reconciliation_rows) == 1
        assert supply_store.reconciliation_rows[0]["tier"] == 1

    def test_second_run_finds_nothing_new(self, service, supply_store):
        service.run_auto_matching_process()

        result = service.run_auto_matching_process()

        assert result.ok
        assert result.value.total_matches == 0
        assert len(supply_store.reconciliation_rows) == 1

    def test_dict_criteria_disable_tier(self, service):
        result = service.run_auto_matching_process({"enableTier1": False})

        assert result.ok
        assert result.value.tier1_count == 0
        assert result.value.tier2_count == 1

    def test_model_criteria(self, service):
        criteria = MatchCriteria(enable_tier1=False, enable_tier2=False, enable_tier3=False)

        result = service.run_auto_matching_process(criteria)

        assert result.ok
        assert result.value.total_matches == 0

    def test_invalid_criteria(self, service, supply_store):
        result = service.run_auto_matching_process({"enableTier1": "sometimes"})

        assert not result.ok
        assert result.error.kind == ErrorKind.CONFIGURATION
        assert supply_store.find_check_item(3).status == ""

    def test_lock_timeout(self, supply_store, quick_config):
        lock = ThreadLedgerLock()
        lock.acquire(timeout=1)
        service = ReconciliationService(supply_store, lock=lock, config=quick_config)

        result = service.run_auto_matching_process()
        lock.release()

        assert not result.ok
        assert result.error.kind == ErrorKind.LOCK_TIMEOUT
        assert supply_store.find_check_item(3).status == ""

    def test_lock_released_after_success(self, supply_store, quick_config):
        lock = ThreadLedgerLock()
        service = ReconciliationService(supply_store, lock=lock, config=quick_config)

        service.run_auto_matching_process()

        assert not lock.locked()

    def test_lock_released_after_failure(self, make_bank, quick_config):
        lock = ThreadLedgerLock()
        store = UnreadableStore([], [make_bank("T1", JAN_5, "A", "-1")])
        service = ReconciliationService(store, lock=lock, config=quick_config)

        result = service.run_auto_matching_process()

        assert not result.ok
        assert not lock.locked()

    def test_unreadable_store(self, make_bank, quick_config):
        store = UnreadableStore([], [make_bank("T1", JAN_5, "A", "-1")])
        service = ReconciliationService(store, config=quick_config)

        result = service.run_auto_matching_process()

        assert not result.ok
        assert result.error.kind == ErrorKind.SOURCE_UNAVAILABLE
        assert "connection reset" in result.error.message

    def test_partial_apply_failure_keeps_result(self, make_check, make_bank, quick_config):
        checks = [
            make_check(2, JAN_5, "ACME CORP", withdrawal="10"),
            make_check(3, JAN_5, "GLOBEX LLC", withdrawal="20"),
        ]
        banks = [
            make_bank("T1", JAN_5, "ACME CORP", "-10"),
            make_bank("T2", JAN_5 + timedelta(days=2), "GLOBEX LLC", "-20"),
        ]
        store = FailingRowStore(checks, banks, failing_row=2)
        service = ReconciliationService(store, config=quick_config)

        result = service.run_auto_matching_process()

        assert not result.ok
        assert result.error.kind == ErrorKind.APPLY_FAILURE
        assert len(result.error.details) == 1
        assert "sheet is protected" in result.error.details[0]
        assert result.value.total_matches == 2
        assert store.find_check_item(3).status == "T2"
        assert store.find_check_item(2).status == ""


class TestValidateAndApplyManualMatch:
    def test_applies_operator_match(self, service, supply_store):
        result = service.validate_and_apply_manual_match("T1", 3)

        assert result.ok
        confirmation = result.value
        assert confirmation.transaction_id == "T1"
        assert confirmation.check_register_row == 3
        assert confirmation.check_item.status == "T1"
        assert supply_store.find_check_item(3).status == "T1"
        assert supply_store.reconciliation_rows == []

    def test_same_id_twice_is_rejected(self, service, make_check, supply_store):
        supply_store.check_items.append(make_check(4, JAN_5, "ABC SUPPLY", withdrawal="100"))
        service.validate_and_apply_manual_match("T1", 3)

        result = service.validate_and_apply_manual_match("T1", 4)

        assert not result.ok
        assert result.error.kind == ErrorKind.ID_ALREADY_USED
        assert supply_store.find_check_item(4).status == ""

    def test_id_used_by_automatic_run(self, service, make_check, supply_store):
        supply_store.check_items.append(make_check(4, JAN_5, "OTHER", withdrawal="1"))
        service.run_auto_matching_process()

        result = service.validate_and_apply_manual_match("T1", 4)

        assert result.error.kind == ErrorKind.ID_ALREADY_USED

    @pytest.mark.parametrize("transaction_id", ["", "  ", None])
    def test_invalid_id_writes_nothing(self, service, supply_store, transaction_id):
        result = service.validate_and_apply_manual_match(transaction_id, 3)

        assert not result.ok
        assert result.error.kind == ErrorKind.INVALID_ID
        assert supply_store.find_check_item(3).status == ""

    def test_unknown_id(self, service):
        result = service.validate_and_apply_manual_match("T404", 3)

        assert result.error.kind == ErrorKind.ID_NOT_FOUND

    def test_invalid_row(self, service, supply_store):
        result = service.validate_and_apply_manual_match("T1", 2)

        assert result.error.kind == ErrorKind.INVALID_ROW
        assert supply_store.find_check_item(2).status == ""

    def test_lock_timeout(self, supply_store, quick_config):
        lock = ThreadLedgerLock()
        lock.acquire(timeout=1)
        service = ReconciliationService(supply_store, lock=lock, config=quick_config)

        result = service.validate_and_apply_manual_match("T1", 3)
        lock.release()

        assert result.error.kind == ErrorKind.LOCK_TIMEOUT

    def test_write_failure(self, supply_check, supply_bank, quick_config):
        store = FailingRowStore([supply_check], [supply_bank], failing_row=3)
        lock = ThreadLedgerLock()
        service = ReconciliationService(store, lock=lock, config=quick_config)

        result = service.validate_and_apply_manual_match("T1", 3)

        assert result.error.kind == ErrorKind.APPLY_FAILURE
        assert not lock.locked()

    def test_unreadable_store(self, quick_config):
        service = ReconciliationService(UnreadableStore(), config=quick_config)

        result = service.validate_and_apply_manual_match("T1", 3)

        assert result.error.kind == ErrorKind.SOURCE_UNAVAILABLE
