"""Shared fixtures for ledger_recon tests."""

from datetime import date
from decimal import Decimal
from typing import Optional

import pytest

from ledger_recon.models.ledger import BankItem, CheckItem
from ledger_recon.store.memory import InMemoryRecordStore


def _decimal(value) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(str(value))


@pytest.fixture
def make_check():
    """Factory for check register rows."""

    def _make(
        row: int,
        item_date: Optional[date],
        description: str,
        withdrawal=None,
        deposit=None,
        status: str = "",
        check_number: Optional[str] = None,
    ) -> CheckItem:
        return CheckItem(
            row=row,
            date=item_date,
            description=description,
            check_number=check_number,
            withdrawal=_decimal(withdrawal),
            deposit=_decimal(deposit),
            status=status,
        )

    return _make


@pytest.fixture
def make_bank():
    """Factory for bank feed rows."""

    def _make(
        transaction_id: str,
        item_date: Optional[date],
        description: str,
        amount,
        row: int = 2,
    ) -> BankItem:
        return BankItem(
            row=row,
            transaction_id=transaction_id,
            date=item_date,
            description=description,
            amount=_decimal(amount),
        )

    return _make


@pytest.fixture
def supply_check(make_check):
    return make_check(3, date(2024, 1, 5), "ABC SUPPLY", withdrawal="100.00")


@pytest.fixture
def supply_bank(make_bank):
    return make_bank("T1", date(2024, 1, 5), "ABC Supply Co", "-100.00")


@pytest.fixture
def supply_store(make_check, supply_check, supply_bank):
    """Store holding a beginning balance row and one matching pair."""
    opening = make_check(2, date(2024, 1, 1), "Beginning Balance", deposit="5000.00")
    return InMemoryRecordStore([opening, supply_check], [supply_bank])
