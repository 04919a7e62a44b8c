"""Tests for decimal <-> base unit conversion."""

from decimal import Decimal

import pytest

from walletdesk.errors import InvalidAmount
from walletdesk.units import format_amount, to_base_units, to_display_units


class TestToBaseUnits:
    """Tests for to_base_units."""

    def test_native_example(self):
        assert to_base_units("1.5", 18) == 1500000000000000000

    def test_smallest_unit_of_six_decimal_token(self):
        assert to_base_units("0.000001", 6) == 1

    def test_whole_number(self):
        assert to_base_units("10", 6) == 10_000_000

    def test_zero(self):
        assert to_base_units("0", 18) == 0

    def test_surrounding_whitespace_is_ignored(self):
        assert to_base_units("  2.25 ", 2) == 225

    def test_leading_and_trailing_dot(self):
        assert to_base_units(".5", 1) == 5
        assert to_base_units("3.", 0) == 3

    def test_trailing_zeros_do_not_count_as_precision(self):
        assert to_base_units("1.50", 1) == 15
        assert to_base_units("7.000", 0) == 7

    def test_no_float_rounding_for_large_amounts(self):
        """Amounts far beyond float precision stay exact."""
        amount = "123456789012345678901234567890.123456789012345678"
        assert to_base_units(amount, 18) == 123456789012345678901234567890123456789012345678

    def test_zero_decimals(self):
        assert to_base_units("42", 0) == 42

    @pytest.mark.parametrize(
        "text",
        ["", "   ", "abc", "1.2.3", "1,5", "1e18", "0x10", "+1", ".", "NaN", "inf"],
    )
    def test_malformed_amounts_rejected(self, text):
        with pytest.raises(InvalidAmount):
            to_base_units(text, 18)

    def test_negative_amount_rejected(self):
        with pytest.raises(InvalidAmount, match="negative"):
            to_base_units("-1", 18)

    def test_too_many_fractional_digits_rejected(self):
        with pytest.raises(InvalidAmount):
            to_base_units("1.23", 0)
        with pytest.raises(InvalidAmount):
            to_base_units("0.0000001", 6)

    def test_invalid_precision_rejected(self):
        with pytest.raises(InvalidAmount):
            to_base_units("1", -1)
        with pytest.raises(InvalidAmount):
            to_base_units("1", 256)

    def test_invalid_amount_is_a_value_error(self):
        with pytest.raises(ValueError):
            to_base_units("oops", 18)


class TestToDisplayUnits:
    """Tests for to_display_units."""

    def test_native(self):
        assert to_display_units(1500000000000000000, 18) == Decimal("1.5")

    def test_zero_decimals(self):
        assert to_display_units(42, 0) == Decimal("42")

    def test_zero_balance(self):
        assert to_display_units(0, 6) == Decimal("0")

    def test_exact_for_huge_balances(self):
        raw = 10**40 + 1
        assert to_display_units(raw, 18) == Decimal("10000000000000000000000.000000000000000001")

    @pytest.mark.parametrize(
        "text,decimals",
        [
            ("1.5", 18),
            ("0.000001", 6),
            ("100", 6),
            ("0", 0),
            ("98765.4321", 8),
            ("123456789012345678901234567890.123456789012345678", 18),
        ],
    )
    def test_round_trip(self, text, decimals):
        assert to_display_units(to_base_units(text, decimals), decimals) == Decimal(text)


class TestFormatAmount:
    """Tests for display formatting."""

    def test_strips_trailing_zeros(self):
        assert format_amount(Decimal("100.000000")) == "100"
        assert format_amount(Decimal("1.500000000000000000")) == "1.5"

    def test_no_exponent(self):
        assert format_amount(to_display_units(1, 18)) == "0.000000000000000001"

    def test_zero(self):
        assert format_amount(Decimal("0.000")) == "0"
