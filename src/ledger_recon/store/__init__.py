"""Record stores holding the check register and bank feed."""

from .base import RecordStore
from .memory import InMemoryRecordStore
from .workbook import WorkbookRecordStore

__all__ = ["InMemoryRecordStore", "RecordStore", "WorkbookRecordStore"]
