"""Check register to bank feed reconciliation."""

__version__ = "0.1.0"
