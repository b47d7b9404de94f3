"""Tests for the ledger locks."""

import threading
import time

import pytest

from ledger_recon.locking import LockFileLedgerLock, ThreadLedgerLock
from ledger_recon.utils.exceptions import LockTimeoutError


class TestThreadLedgerLock:
    def test_hold_and_release(self):
        lock = ThreadLedgerLock()

        with lock.hold(timeout=1):
            assert lock.locked()

        assert not lock.locked()

    def test_released_when_block_raises(self):
        lock = ThreadLedgerLock()

        with pytest.raises(RuntimeError):
            with lock.hold(timeout=1):
                raise RuntimeError("boom")

        assert not lock.locked()

    def test_times_out_while_held_elsewhere(self):
        lock = ThreadLedgerLock()
        lock.acquire(timeout=1)

        started = time.monotonic()
        with pytest.raises(LockTimeoutError):
            with lock.hold(timeout=0.05):
                pass

        assert time.monotonic() - started < 2
        lock.release()

    def test_waiter_proceeds_once_released(self):
        lock = ThreadLedgerLock()
        lock.acquire(timeout=1)
        timer = threading.Timer(0.05, lock.release)
        timer.start()

        with lock.hold(timeout=2):
            pass

        timer.join()
        assert not lock.locked()


class TestLockFileLedgerLock:
    def test_creates_and_removes_lock_file(self, tmp_path):
        path = tmp_path / "ledger.xlsx.lock"
        lock = LockFileLedgerLock(path, poll_interval=0.01)

        with lock.hold(timeout=1):
            assert path.exists()
            assert lock.locked()

        assert not path.exists()

    def test_second_holder_times_out(self, tmp_path):
        path = tmp_path / "ledger.xlsx.lock"
        first = LockFileLedgerLock(path, poll_interval=0.01)
        second = LockFileLedgerLock(path, poll_interval=0.01)

        with first.hold(timeout=1):
            with pytest.raises(LockTimeoutError):
                with second.hold(timeout=0.05):
                    pass
            # The waiter must not remove the holder's file
            assert path.exists()

        assert not path.exists()

    def test_stale_lock_file_blocks(self, tmp_path):
        path = tmp_path / "ledger.xlsx.lock"
        path.write_text("12345")

        assert not LockFileLedgerLock(path, poll_interval=0.01).acquire(timeout=0.05)
        assert path.read_text() == "12345"

    def test_release_without_acquire_is_noop(self, tmp_path):
        path = tmp_path / "ledger.xlsx.lock"
        path.write_text("12345")

        LockFileLedgerLock(path).release()

        assert path.exists()
