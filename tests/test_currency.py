"""
Test suite for amount handling

Validates cent rounding, two-digit formatting and parsing of user-entered text.
"""

import pytest
from decimal import Decimal

from atm_ledger.currency import (
    ZERO, decimal_from_string, format_amount, parse_positive_amount, to_amount
)


class TestToAmount:
    """Test Decimal normalization"""

    def test_rounds_to_cents(self):
        """Test half-up rounding to two fractional digits"""
        assert to_amount(Decimal("10.005")) == Decimal("10.01")
        assert to_amount("10.004") == Decimal("10.00")
        assert to_amount(7) == Decimal("7.00")

    def test_float_goes_through_string(self):
        """Test that floats are converted via str() and not binary expansion"""
        assert to_amount(0.1) == Decimal("0.10")

    def test_negative_zero_normalized(self):
        """Test that -0 becomes 0.00"""
        amount = to_amount("-0.001")
        assert amount == ZERO
        assert format_amount(amount) == "0.00"

    def test_rejects_non_numbers(self):
        """Test non-numeric and non-finite inputs"""
        with pytest.raises(ValueError):
            to_amount("abc")
        with pytest.raises(ValueError):
            to_amount(Decimal("NaN"))
        with pytest.raises(ValueError):
            to_amount("Infinity")
        with pytest.raises(ValueError):
            to_amount(True)

    def test_rejects_values_beyond_precision(self):
        """Test that a value with too many digits for cent resolution is a ValueError"""
        assert to_amount(Decimal("9e25")) == Decimal("90000000000000000000000000.00")
        with pytest.raises(ValueError):
            to_amount(Decimal("1e26"))
        with pytest.raises(ValueError):
            to_amount("123456789012345678901234567890")


class TestFormatAmount:
    """Test amount rendering"""

    def test_always_two_digits(self):
        """Test that amounts always carry exactly two fractional digits"""
        assert format_amount(Decimal("15000")) == "15000.00"
        assert format_amount(Decimal("0.5")) == "0.50"
        assert format_amount(Decimal("1234.567")) == "1234.57"


class TestParsing:
    """Test parsing of raw user input"""

    def test_plain_and_symbol_input(self):
        """Test plain numbers and currency symbols"""
        assert decimal_from_string("500") == Decimal("500.00")
        assert decimal_from_string(" ₹ 1250.50 ") == Decimal("1250.50")

    def test_separators(self):
        """Test thousands and decimal comma handling"""
        assert decimal_from_string("1,250.50") == Decimal("1250.50")
        assert decimal_from_string("12,50") == Decimal("12.50")
        assert decimal_from_string("1,000") == Decimal("1000.00")
        assert decimal_from_string("1,000,000") == Decimal("1000000.00")

    def test_invalid_input(self):
        """Test that garbage input is rejected"""
        for value in ["", "abc", "+", None]:
            with pytest.raises(ValueError):
                decimal_from_string(value)

    def test_positive_amount_required(self):
        """Test that zero and negative amounts are rejected"""
        assert parse_positive_amount("0.01") == Decimal("0.01")
        for value in ["0", "-5", "0.004"]:
            with pytest.raises(ValueError):
                parse_positive_amount(value)
