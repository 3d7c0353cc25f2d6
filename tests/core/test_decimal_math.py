from decimal import Decimal

import pytest

from core.decimal_math import dsum, format_fixed, safe_divide, to_decimal


class TestToDecimal:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("12.5", Decimal("12.5")),
            (3, Decimal(3)),
            (0.1, Decimal("0.1")),
            ("1,250.75", Decimal("1250.75")),
            (Decimal("7.01"), Decimal("7.01")),
        ],
    )
    def test_numeric_values(self, value, expected):
        assert to_decimal(value) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", "NaN", "Infinity", object()])
    def test_missing_or_malformed_is_zero(self, value):
        assert to_decimal(value) == 0


def test_sum_of_small_rows_is_exact():
    assert dsum(["0.1"] * 10) == Decimal("1.0")
    assert dsum([0.1, 0.2]) == Decimal("0.3")


def test_sum_skips_missing_values():
    assert dsum(["1", None, "", "2.5"]) == Decimal("3.5")


def test_safe_divide():
    assert safe_divide("10", "4") == Decimal("2.5")
    assert safe_divide("10", "0") == 0
    assert safe_divide("10", None, default=Decimal("-1")) == Decimal("-1")


class TestFormatFixed:
    def test_rounds_half_up(self):
        assert format_fixed(Decimal("1.23445")) == "1.2345"
        assert format_fixed(Decimal("1.23444")) == "1.2344"

    def test_pads_to_places(self):
        assert format_fixed(200) == "200.0000"
        assert format_fixed("1.5", places=2) == "1.50"

    def test_no_negative_zero(self):
        assert format_fixed(Decimal("-0.00001")) == "0.0000"

    def test_large_values(self):
        assert format_fixed(Decimal("12345678901234567890123456789")) == (
            "12345678901234567890123456789.0000"
        )
