"""Custom exceptions for the reconciliation application."""

from enum import Enum


class ErrorKind(str, Enum):
    """Error kinds reported to callers of the reconciliation service."""

    LOCK_TIMEOUT = "LockTimeout"
    SOURCE_UNAVAILABLE = "SourceUnavailable"
    INVALID_ID = "InvalidId"
    ID_NOT_FOUND = "IdNotFound"
    ID_ALREADY_USED = "IdAlreadyUsed"
    INVALID_ROW = "InvalidRow"
    APPLY_FAILURE = "ApplyFailure"
    CONFIGURATION = "Configuration"
    PARSE = "Parse"
    REPORT = "Report"
    INTERNAL = "Internal"


class ReconciliationError(Exception):
    """Base exception for reconciliation errors."""

    kind = ErrorKind.INTERNAL


class LockTimeoutError(ReconciliationError):
    """The ledger lock could not be acquired within the wait bound."""

    kind = ErrorKind.LOCK_TIMEOUT


class SourceUnavailableError(ReconciliationError):
    """The record store is unreachable or its data is malformed."""

    kind = ErrorKind.SOURCE_UNAVAILABLE


class ManualMatchError(ReconciliationError):
    """Base class for rejected operator pairings."""

    pass


class InvalidIdError(ManualMatchError):
    kind = ErrorKind.INVALID_ID


class IdNotFoundError(ManualMatchError):
    kind = ErrorKind.ID_NOT_FOUND


class IdAlreadyUsedError(ManualMatchError):
    kind = ErrorKind.ID_ALREADY_USED


class InvalidRowError(ManualMatchError):
    kind = ErrorKind.INVALID_ROW


class ApplyError(ReconciliationError):
    """A match could not be written to the record store."""

    kind = ErrorKind.APPLY_FAILURE


class PartialApplyError(ApplyError):
    """One or more matches of a run could not be written."""

    def __init__(self, failures: list, applied_count: int):
        self.failures = failures
        self.applied_count = applied_count
        super().__init__(
            f"{len(failures)} match(es) failed to apply, "
            f"{applied_count} applied: "
            + "; ".join(str(failure) for failure in failures)
        )


class ParseError(ReconciliationError):
    """Error parsing a check register or bank feed CSV file."""

    kind = ErrorKind.PARSE


class ConfigurationError(ReconciliationError):
    """Error in configuration."""

    kind = ErrorKind.CONFIGURATION


class ReportGenerationError(ReconciliationError):
    """Error generating Excel report."""

    kind = ErrorKind.REPORT
