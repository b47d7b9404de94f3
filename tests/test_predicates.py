"""Tests for ledger_recon.matching.predicates."""

from datetime import date, datetime

from ledger_recon.matching.predicates import (
    amount_direction_valid,
    amount_magnitude_match,
    date_within_range,
    exact_date_match,
)


class TestExactDateMatch:
    def test_same_day(self):
        assert exact_date_match(date(2024, 1, 5), date(2024, 1, 5))

    def test_time_component_ignored(self):
        assert exact_date_match(datetime(2024, 1, 5, 23, 59), date(2024, 1, 5))
        assert exact_date_match(datetime(2024, 1, 5, 0, 1), datetime(2024, 1, 5, 18, 0))

    def test_different_day(self):
        assert not exact_date_match(date(2024, 1, 5), date(2024, 1, 6))

    def test_missing_date(self):
        assert not exact_date_match(None, date(2024, 1, 5))


class TestDateWithinRange:
    def test_inside_tolerance(self):
        assert date_within_range(date(2024, 1, 1), date(2024, 1, 8), 7)

    def test_order_does_not_matter(self):
        assert date_within_range(date(2024, 1, 8), date(2024, 1, 1), 7)

    def test_outside_tolerance(self):
        assert not date_within_range(date(2024, 1, 1), date(2024, 1, 9), 7)

    def test_partial_days_are_floored(self):
        assert date_within_range(datetime(2024, 1, 1, 0, 0), datetime(2024, 1, 8, 12, 0), 7)

    def test_mixed_date_and_datetime(self):
        assert date_within_range(date(2024, 1, 1), datetime(2024, 1, 31, 9, 30), 30)

    def test_zero_tolerance_same_day(self):
        assert date_within_range(date(2024, 1, 1), date(2024, 1, 1), 0)

    def test_missing_date(self):
        assert not date_within_range(date(2024, 1, 1), None, 30)


class TestAmountMagnitudeMatch:
    def test_withdrawal_against_outflow(self, make_check, make_bank):
        check = make_check(2, date(2024, 1, 5), "A", withdrawal="100.00")
        bank = make_bank("T1", date(2024, 1, 5), "A", "-100.00")
        assert amount_magnitude_match(check, bank)

    def test_sub_cent_difference(self, make_check, make_bank):
        check = make_check(2, date(2024, 1, 5), "A", deposit="100.004")
        bank = make_bank("T1", date(2024, 1, 5), "A", "100.00")
        assert amount_magnitude_match(check, bank)

    def test_one_cent_difference_fails(self, make_check, make_bank):
        check = make_check(2, date(2024, 1, 5), "A", withdrawal="100.01")
        bank = make_bank("T1", date(2024, 1, 5), "A", "-100.00")
        assert not amount_magnitude_match(check, bank)

    def test_missing_amounts_default_to_zero(self, make_check, make_bank):
        check = make_check(2, date(2024, 1, 5), "A")
        bank = make_bank("T1", date(2024, 1, 5), "A", "0")
        assert amount_magnitude_match(check, bank)


class TestAmountDirectionValid:
    def test_withdrawal_with_outflow(self, make_check, make_bank):
        check = make_check(2, None, "A", withdrawal="10")
        assert amount_direction_valid(check, make_bank("T1", None, "A", "-10"))

    def test_withdrawal_with_inflow(self, make_check, make_bank):
        check = make_check(2, None, "A", withdrawal="10")
        assert not amount_direction_valid(check, make_bank("T1", None, "A", "10"))

    def test_deposit_with_inflow(self, make_check, make_bank):
        check = make_check(2, None, "A", deposit="10")
        assert amount_direction_valid(check, make_bank("T1", None, "A", "10"))

    def test_deposit_with_outflow(self, make_check, make_bank):
        check = make_check(2, None, "A", deposit="10")
        assert not amount_direction_valid(check, make_bank("T1", None, "A", "-10"))

    def test_row_without_amount_never_valid(self, make_check, make_bank):
        check = make_check(2, None, "A")
        assert not amount_direction_valid(check, make_bank("T1", None, "A", "-10"))
        assert not amount_direction_valid(check, make_bank("T2", None, "A", "10"))

    def test_zero_withdrawal_never_valid(self, make_check, make_bank):
        check = make_check(2, None, "A", withdrawal="0")
        assert not amount_direction_valid(check, make_bank("T1", None, "A", "-10"))
