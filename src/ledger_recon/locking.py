"""
Exclusive locks over the shared ledger.

A matching run holds the lock from before its first read until the last
write is saved. The lock is injected into the service so tests and
single-process callers can use an in-process lock while the CLI uses a
lock file next to the ledger workbook.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator
import logging
import os
import threading
import time

from .utils.exceptions import LockTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 10.0


class LedgerLock(ABC):
    """Scoped-acquisition lock with a bounded wait."""

    @abstractmethod
    def acquire(self, timeout: float) -> bool:
        """Wait up to timeout seconds; return whether the lock was taken."""
        pass

    @abstractmethod
    def release(self) -> None:
        pass

    @contextmanager
    def hold(self, timeout: float = DEFAULT_LOCK_TIMEOUT) -> Iterator["LedgerLock"]:
        """
        Hold the lock for the duration of a with-block.

        Raises:
            LockTimeoutError: If the lock is not acquired within timeout
        """
        if not self.acquire(timeout):
            raise LockTimeoutError(f"Could not acquire ledger lock within {timeout:g}s")
        logger.debug("Ledger lock acquired")
        try:
            yield self
        finally:
            self.release()
            logger.debug("Ledger lock released")


class ThreadLedgerLock(LedgerLock):
    """In-process lock for callers sharing one store object."""

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def acquire(self, timeout: float) -> bool:
        return self._lock.acquire(timeout=timeout)

    def release(self) -> None:
        self._lock.release()

    def locked(self) -> bool:
        return self._lock.locked()


class LockFileLedgerLock(LedgerLock):
    """
    Cross-process lock using an exclusively created lock file.

    The file holds the owner's pid. A lock file left behind by a crashed
    process must be removed by hand.
    """

    def __init__(self, path: Path, poll_interval: float = 0.1):
        """
        Args:
            path: Lock file location, usually the ledger path plus ".lock"
            poll_interval: Seconds between acquisition attempts
        """
        self.path = Path(path)
        self.poll_interval = poll_interval
        self._held = False

    def acquire(self, timeout: float) -> bool:
        deadline = time.monotonic() + timeout

        while True:
            try:
                fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
            except FileExistsError:
                if time.monotonic() >= deadline:
                    logger.warning(f"Ledger lock {self.path} still held after {timeout:g}s")
                    return False
                time.sleep(self.poll_interval)
                continue

            with os.fdopen(fd, "w") as f:
                f.write(str(os.getpid()))
            self._held = True
            return True

    def release(self) -> None:
        if not self._held:
            return
        self._held = False
        try:
            self.path.unlink()
        except FileNotFoundError:
            logger.warning(f"Ledger lock file {self.path} vanished before release")

    def locked(self) -> bool:
        return self.path.exists()
