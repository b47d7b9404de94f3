"""Tests for the check register and bank feed CSV parsers."""

from datetime import date
from decimal import Decimal

import pytest

from ledger_recon.config import ReconConfig
from ledger_recon.parsers import BankFeedParser, CheckRegisterParser
from ledger_recon.utils.exceptions import ParseError
from ledger_recon.utils.values import parse_amount, text_value

CHECK_REGISTER_CSV = """Date,Check Number,Description,Withdrawal,Deposit,Balance,Status
01/01/2024,,Beginning Balance,,"$5,000.00","$5,000.00",
01/05/2024,1042,ABC SUPPLY,$100.00,,"$4,900.00",
01/09/2024,,CLIENT PAYMENT,,250.50,"$5,150.50",Cleared
,,,,,,
01/12/2024,1043,REFUND TYPED NEGATIVE,,(40.00),,
2024-01-15,,ISO DATE ROW,-12.00,,,
"""

BANK_FEED_CSV = """Transaction ID,Date,Description,Amount,Balance
T1,01/05/2024,ABC Supply Co,-100.00,
,01/10/2024,DEPOSIT CLIENT PAYMENT,250.50,
T3,not a date,BROKEN,-1.00,
T4,01/11/2024,NO AMOUNT,,
T5,01/12/2024,SERVICE FEE,($15.00),
"""


@pytest.fixture
def config():
    return ReconConfig()


@pytest.fixture
def check_csv(tmp_path):
    path = tmp_path / "checks.csv"
    path.write_text(CHECK_REGISTER_CSV)
    return path


@pytest.fixture
def bank_csv(tmp_path):
    path = tmp_path / "bank.csv"
    path.write_text(BANK_FEED_CSV)
    return path


class TestCheckRegisterParser:
    def test_rows_numbered_from_two(self, config, check_csv):
        items = CheckRegisterParser(config).parse_file(check_csv)

        assert [item.row for item in items] == [2, 3, 4, 6, 7]

    def test_currency_values(self, config, check_csv):
        items = CheckRegisterParser(config).parse_file(check_csv)

        opening = items[0]
        assert opening.description == "Beginning Balance"
        assert opening.deposit == Decimal("5000.00")
        assert opening.withdrawal is None

        supply = items[1]
        assert supply.date == date(2024, 1, 5)
        assert supply.check_number == "1042"
        assert supply.withdrawal == Decimal("100.00")
        assert supply.balance == Decimal("4900.00")
        assert supply.status == ""

    def test_status_kept(self, config, check_csv):
        items = CheckRegisterParser(config).parse_file(check_csv)

        assert items[2].status == "Cleared"

    def test_negative_deposit_becomes_withdrawal(self, config, check_csv):
        item = CheckRegisterParser(config).parse_file(check_csv)[3]

        assert item.withdrawal == Decimal("40.00")
        assert item.deposit is None

    def test_negative_withdrawal_flipped(self, config, check_csv):
        item = CheckRegisterParser(config).parse_file(check_csv)[4]

        assert item.date == date(2024, 1, 15)
        assert item.withdrawal == Decimal("12.00")

    def test_withdrawal_with_negative_deposit_skipped(self, config, tmp_path, caplog):
        path = tmp_path / "checks.csv"
        path.write_text(
            "Date,Description,Withdrawal,Deposit,Status\n"
            "01/05/2024,CONFLICTING,25.00,-40.00,\n"
            "01/06/2024,PLAIN,10.00,,\n"
        )

        with caplog.at_level("WARNING"):
            items = CheckRegisterParser(config).parse_file(path)

        assert [item.description for item in items] == ["PLAIN"]
        assert "Row 2" in caplog.text

    def test_custom_column_mapping(self, tmp_path):
        config = ReconConfig()
        config.input.check_register.column_mappings["description"] = "Payee"
        path = tmp_path / "checks.csv"
        path.write_text("Date,Payee,Withdrawal,Deposit,Status\n01/05/2024,ACME,10,,\n")

        items = CheckRegisterParser(config).parse_file(path)

        assert items[0].description == "ACME"

    def test_missing_file(self, config, tmp_path):
        with pytest.raises(ParseError, match="check register"):
            CheckRegisterParser(config).parse_file(tmp_path / "missing.csv")


class TestBankFeedParser:
    def test_skips_invalid_rows(self, config, bank_csv):
        items = BankFeedParser(config).parse_file(bank_csv)

        assert [item.row for item in items] == [2, 3, 6]

    def test_generated_transaction_id(self, config, bank_csv):
        items = BankFeedParser(config).parse_file(bank_csv)

        assert items[1].transaction_id == "BANK-00002"
        assert items[1].amount == Decimal("250.50")

    def test_signed_amounts(self, config, bank_csv):
        items = BankFeedParser(config).parse_file(bank_csv)

        assert items[0].amount == Decimal("-100.00")
        assert items[2].amount == Decimal("-15.00")

    def test_semicolon_delimiter(self, tmp_path):
        config = ReconConfig()
        config.input.bank_feed.delimiter = ";"
        path = tmp_path / "bank.csv"
        path.write_text("Transaction ID;Date;Description;Amount\nT1;01/05/2024;FEE;-2.50\n")

        items = BankFeedParser(config).parse_file(path)

        assert items[0].transaction_id == "T1"
        assert items[0].amount == Decimal("-2.50")


class TestValueHelpers:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("$1,234.56", Decimal("1234.56")),
            ("(12.00)", Decimal("-12.00")),
            ("-3", Decimal("-3")),
            (7.5, Decimal("7.5")),
            ("", None),
            ("n/a", None),
            (None, None),
            (float("nan"), None),
        ],
    )
    def test_parse_amount(self, value, expected):
        assert parse_amount(value) == expected

    def test_text_value(self):
        assert text_value(10234.0) == "10234"
        assert text_value("  T1 ") == "T1"
        assert text_value(None) == ""
