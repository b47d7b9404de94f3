"""Utility modules."""

from .exceptions import (
    ApplyError,
    ConfigurationError,
    ErrorKind,
    IdAlreadyUsedError,
    IdNotFoundError,
    InvalidIdError,
    InvalidRowError,
    LockTimeoutError,
    ManualMatchError,
    ParseError,
    PartialApplyError,
    ReconciliationError,
    ReportGenerationError,
    SourceUnavailableError,
)
from .logging_config import setup_logging

__all__ = [
    "ApplyError",
    "ConfigurationError",
    "ErrorKind",
    "IdAlreadyUsedError",
    "IdNotFoundError",
    "InvalidIdError",
    "InvalidRowError",
    "LockTimeoutError",
    "ManualMatchError",
    "ParseError",
    "PartialApplyError",
    "ReconciliationError",
    "ReportGenerationError",
    "SourceUnavailableError",
    "setup_logging",
]
