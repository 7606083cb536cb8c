"""PAYE (employees' tax) calculations.

Implements the Fourth Schedule annual method: tax from the bracket table,
less age rebates and the medical scheme fees tax credit, floored at zero,
and nil for income at or below the age threshold. Monthly PAYE is the
annual figure divided by 12 and rounded to the cent, so twelve monthly
deductions may differ from the annual figure by up to 12 cents.
"""

import logging
from decimal import Decimal

from ..errors import InvalidInputError
from ..rounding import Number, round_paye, to_amount
from ..schemas import PayeResult
from .schemas import MAX_AGE, TaxYearConfiguration

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _validate(annual_income: Decimal, age: int, medical_aid_members: int) -> None:
    if annual_income < 0:
        raise InvalidInputError("annual_taxable_income", "cannot be negative")
    if age < 0 or age > MAX_AGE:
        raise InvalidInputError("age", f"must be between 0 and {MAX_AGE}")
    if medical_aid_members < 0:
        raise InvalidInputError("medical_aid_members", "cannot be negative")


class PayeCalculator:
    """PAYE for one tax year's rules."""

    def __init__(self, config: TaxYearConfiguration):
        if config is None:
            raise InvalidInputError("config", "tax year configuration is required")
        self.config = config

    def calculate_gross_tax(self, annual_taxable_income: Number) -> Decimal:
        """Tax from the bracket table, before rebates and credits.

        Walks the brackets in order and stops at the one containing the
        income. Only that bracket's tax counts; its base_tax carries the
        lower brackets. An income falling between two published brackets
        (237100.50) is taxed by the bracket below.
        """
        income = to_amount(annual_taxable_income, "annual_taxable_income")
        tax = ZERO
        for bracket in self.config.tax_brackets:
            if income < bracket.min_income:
                continue
            tax = bracket.calculate_tax(income)
            if bracket.is_unbounded or income <= bracket.max_income:
                logger.debug("income %s in bracket from %s at %s%%", income, bracket.min_income, bracket.rate)
                break
        return tax

    def calculate_total_rebates(self, age: int) -> Decimal:
        return sum((r.amount for r in self.config.get_rebates(age)), ZERO)

    def get_tax_threshold(self, age: int) -> Decimal:
        return self.config.get_tax_threshold(age)

    def calculate_medical_aid_credit(self, medical_aid_members: int) -> Decimal:
        """Annual medical credit; members counts the main member, 0 means no cover."""
        if medical_aid_members <= 0:
            return ZERO
        return self.config.medical_aid_credit.annual_credit(medical_aid_members - 1)

    def is_tax_payable(self, annual_income: Number, age: int) -> bool:
        return to_amount(annual_income, "annual_income") > self.get_tax_threshold(age)

    def calculate_annual_paye(
        self,
        annual_taxable_income: Number,
        age: int,
        medical_aid_members: int = 0,
    ) -> Decimal:
        """Annual PAYE on taxable income.

        Args:
            annual_taxable_income: Income after deductions (must be >= 0)
            age: Age at the end of the tax year (0-150)
            medical_aid_members: Main member plus dependents; 0 if no medical aid

        Returns:
            Annual PAYE rounded to the cent

        Raises:
            InvalidInputError: Negative income or members, age out of range
        """
        income = to_amount(annual_taxable_income, "annual_taxable_income")
        _validate(income, age, medical_aid_members)

        if income <= self.get_tax_threshold(age):
            return round_paye(ZERO)

        net = (
            self.calculate_gross_tax(income)
            - self.calculate_total_rebates(age)
            - self.calculate_medical_aid_credit(medical_aid_members)
        )
        return round_paye(max(ZERO, net))

    def calculate_monthly_paye(
        self,
        monthly_taxable_income: Number,
        age: int,
        medical_aid_members: int = 0,
    ) -> Decimal:
        """Monthly PAYE: annualise, calculate, divide by 12, round to the cent."""
        monthly = to_amount(monthly_taxable_income, "monthly_taxable_income")
        if monthly < 0:
            raise InvalidInputError("monthly_taxable_income", "cannot be negative")
        annual = self.calculate_annual_paye(monthly * 12, age, medical_aid_members)
        return round_paye(annual / 12)

    def allowable_retirement_deduction(self, annual_gross_income: Number, contribution: Number) -> Decimal:
        """Deductible part of a retirement contribution.

        Capped at the lesser of max_percentage of income and the annual cap.
        """
        contribution = to_amount(contribution, "retirement_contribution")
        if contribution < 0:
            raise InvalidInputError("retirement_contribution", "cannot be negative")
        income = to_amount(annual_gross_income, "annual_gross_income")
        return self.config.retirement_limits.allowable_deduction(income, contribution)

    def calculate_paye_with_retirement(
        self,
        annual_gross_income: Number,
        retirement_contribution: Number,
        age: int,
        medical_aid_members: int = 0,
    ) -> Decimal:
        """Annual PAYE after deducting the allowable retirement contribution."""
        gross = to_amount(annual_gross_income, "annual_gross_income")
        if gross < 0:
            raise InvalidInputError("annual_gross_income", "cannot be negative")
        deduction = self.allowable_retirement_deduction(gross, retirement_contribution)
        return self.calculate_annual_paye(gross - deduction, age, medical_aid_members)

    def calculate(
        self,
        annual_gross_income: Number,
        age: int,
        medical_aid_members: int = 0,
        retirement_contribution: Number = 0,
    ) -> PayeResult:
        """Annual and monthly PAYE with the full breakdown."""
        gross = to_amount(annual_gross_income, "annual_gross_income")
        if gross < 0:
            raise InvalidInputError("annual_gross_income", "cannot be negative")
        deduction = self.allowable_retirement_deduction(gross, retirement_contribution)
        taxable = gross - deduction

        annual = self.calculate_annual_paye(taxable, age, medical_aid_members)

        return PayeResult(
            tax_year=self.config.year,
            age=age,
            gross_income=gross,
            retirement_deduction=deduction,
            taxable_income=taxable,
            gross_tax=self.calculate_gross_tax(taxable),
            total_rebates=self.calculate_total_rebates(age),
            medical_aid_credit=self.calculate_medical_aid_credit(medical_aid_members),
            tax_threshold=self.get_tax_threshold(age),
            annual_paye=annual,
            monthly_paye=round_paye(annual / 12),
        )
