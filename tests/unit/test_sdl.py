"""Unit tests for the Skills Development Levy."""

from decimal import Decimal

import pytest

from sarspay.sdk.config import BUNDLED_TAX_RULES_DIR
from sarspay.sdk.errors import InvalidInputError
from sarspay.sdk.taxes.rules import load_tax_year_table
from sarspay.sdk.taxes.sdl import SdlCalculator


@pytest.fixture(scope="module")
def sdl():
    return SdlCalculator(load_tax_year_table(BUNDLED_TAX_RULES_DIR).get(2026).sdl)


class TestExemption:
    """Payroll at or below the threshold pays no levy."""

    def test_threshold_is_exempt(self, sdl):
        result = sdl.calculate_annual(500000, 500000)
        assert result.is_exempt
        assert result.amount == Decimal("0.00")

    def test_one_rand_above_threshold(self, sdl):
        result = sdl.calculate_annual(500001, 500001)
        assert not result.is_exempt
        assert result.amount == Decimal("5000.01")

    def test_is_exempt(self, sdl):
        assert sdl.is_exempt(0)
        assert sdl.is_exempt(500000)
        assert not sdl.is_exempt(Decimal("500000.01"))


class TestLevy:
    """One employee's levy."""

    def test_monthly(self, sdl):
        result = sdl.calculate_monthly(20000, 1000000)
        assert result.amount == Decimal("200.00")
        assert result.rate == Decimal("0.01")
        assert result.annual_payroll == Decimal("1000000")

    def test_monthly_small_employer(self, sdl):
        assert sdl.calculate_monthly(20000, 400000).amount == 0

    def test_rounded_to_cent(self, sdl):
        assert sdl.calculate_monthly(Decimal("12345.50"), 1000000).amount == Decimal("123.46")

    def test_total_for_payroll(self, sdl):
        assert sdl.total_for_payroll(1000000) == Decimal("10000.00")
        assert sdl.total_for_payroll(450000) == Decimal("0.00")

    def test_negative_income_rejected(self, sdl):
        with pytest.raises(InvalidInputError, match="monthly_income"):
            sdl.calculate_monthly(-1, 1000000)

    def test_negative_payroll_rejected(self, sdl):
        with pytest.raises(InvalidInputError, match="annual_payroll"):
            sdl.calculate_monthly(1000, -1)

    def test_non_finite_rejected(self, sdl):
        with pytest.raises(InvalidInputError, match="annual_payroll: must be a finite number"):
            sdl.calculate_monthly(1000, float("nan"))
        with pytest.raises(InvalidInputError, match="annual_income: must be a finite number"):
            sdl.calculate_annual(float("inf"), 1000000)
        with pytest.raises(InvalidInputError, match="annual_salaries"):
            sdl.calculate_bulk([100000, float("inf")])


class TestBulk:
    """Levy for a list of salaries."""

    def test_exempt_on_combined_payroll(self, sdl):
        result = sdl.calculate_bulk([200000, 200000])
        assert result.is_exempt
        assert result.total_payroll == Decimal("400000")
        assert result.total_sdl == 0
        assert result.employee_count == 2

    def test_each_contribution_rounded(self, sdl):
        result = sdl.calculate_bulk([300000, Decimal("250000.50")])
        assert not result.is_exempt
        assert [c.sdl_amount for c in result.contributions] == [Decimal("3000.00"), Decimal("2500.01")]
        assert result.total_sdl == Decimal("5500.01")

    def test_empty_list(self, sdl):
        result = sdl.calculate_bulk([])
        assert result.employee_count == 0
        assert result.is_exempt

    def test_missing_list_rejected(self, sdl):
        with pytest.raises(InvalidInputError):
            sdl.calculate_bulk(None)

    def test_negative_salary_rejected(self, sdl):
        with pytest.raises(InvalidInputError):
            sdl.calculate_bulk([100000, -5])
