"""Unit tests for SARS rounding helpers."""

from decimal import Decimal

import pytest

from sarspay.sdk.errors import InvalidInputError
from sarspay.sdk.rounding import (
    round_currency,
    round_eti,
    round_paye,
    round_to_rand,
    to_amount,
    to_decimal,
    truncate_to_rand,
)


class TestToDecimal:
    """Conversion of plain numbers to Decimal."""

    def test_float_uses_shortest_repr(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_decimal_passes_through(self):
        value = Decimal("12.345")
        assert to_decimal(value) is value

    def test_int_and_str(self):
        assert to_decimal(5) == Decimal("5")
        assert to_decimal("17712.00") == Decimal("17712.00")


class TestToAmount:
    """Caller amounts must be finite numbers."""

    def test_converts_like_to_decimal(self):
        assert to_amount(0.1, "salary") == Decimal("0.1")

    @pytest.mark.parametrize("value", [float("nan"), "NaN", float("inf"), "-Infinity"])
    def test_non_finite_rejected(self, value):
        with pytest.raises(InvalidInputError, match="must be a finite number") as exc_info:
            to_amount(value, "salary")
        assert exc_info.value.field == "salary"

    def test_not_a_number_rejected(self):
        with pytest.raises(InvalidInputError, match="not a number") as exc_info:
            to_amount("twelve", "salary")
        assert exc_info.value.field == "salary"


class TestRoundCurrency:
    """Cent rounding, halves away from zero."""

    @pytest.mark.parametrize("value,expected", [
        ("2.345", "2.35"),
        ("2.344", "2.34"),
        ("-2.345", "-2.35"),
        ("1.005", "1.01"),
        ("100", "100.00"),
    ])
    def test_rounds_half_away_from_zero(self, value, expected):
        assert round_currency(value) == Decimal(expected)

    def test_result_has_two_places(self):
        assert str(round_paye(Decimal("0"))) == "0.00"

    def test_round_to_rand(self):
        assert round_to_rand("1499.5") == Decimal("1500")
        assert round_to_rand("1499.49") == Decimal("1499")


class TestTruncateToRand:
    """ETI drops cents instead of rounding."""

    def test_drops_cents(self):
        assert truncate_to_rand("1499.99") == Decimal("1499")

    def test_truncates_toward_zero(self):
        assert truncate_to_rand("-3.7") == Decimal("-3")

    def test_eti_never_rounds_up(self):
        assert round_eti(Decimal("1000.5")) == Decimal("1000")
