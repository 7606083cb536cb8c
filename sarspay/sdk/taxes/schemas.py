"""Pydantic schemas for tax rules validation.

These schemas validate the sarspay/tax_rules/*.yaml files and provide typed
access to a tax year's brackets, rebates, thresholds, medical credits, UIF,
SDL, ETI and retirement limits. Every model is frozen: a loaded tax year is
shared by all calculations and never changes afterwards.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..errors import InvalidInputError

MAX_AGE = 150
# Brackets and bands are published in whole rands (0-237100, 237101-370500),
# so consecutive ranges may leave up to one rand between them.
MAX_RANGE_GAP = Decimal("1")


class RebateType(str, Enum):
    """Primary applies to everyone; secondary from 65; tertiary from 75."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    TERTIARY = "tertiary"


class TaxBracket(BaseModel):
    """Single income tax bracket.

    base_tax already holds the cumulative tax of every lower bracket, so the
    liability for an income is computed from its containing bracket alone.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    min_income: Decimal = Field(..., ge=0)
    max_income: Optional[Decimal] = Field(default=None, description="Upper bound (None if top bracket)")
    base_tax: Decimal = Field(..., ge=0)
    rate: Decimal = Field(..., ge=0, le=100, description="Marginal rate as a percentage")

    @property
    def is_unbounded(self) -> bool:
        return self.max_income is None

    def contains(self, income: Decimal) -> bool:
        return income >= self.min_income and (self.max_income is None or income <= self.max_income)

    def calculate_tax(self, income: Decimal) -> Decimal:
        """Tax on income using this bracket's base tax and marginal rate."""
        if income < self.min_income:
            return Decimal("0")
        excess = income - self.min_income
        if self.max_income is not None:
            excess = min(excess, self.max_income - self.min_income)
        return self.base_tax + excess * self.rate / 100

    @model_validator(mode="after")
    def check_range(self) -> "TaxBracket":
        if self.max_income is not None and self.max_income < self.min_income:
            raise ValueError(f"max_income ({self.max_income}) < min_income ({self.min_income})")
        return self


class TaxRebate(BaseModel):
    """Fixed annual rebate subtracted from gross tax once min_age is reached."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    type: RebateType
    amount: Decimal = Field(..., ge=0)
    min_age: Optional[int] = Field(default=None, ge=0, le=MAX_AGE)

    def applies_to(self, age: int) -> bool:
        return self.min_age is None or age >= self.min_age


class TaxThreshold(BaseModel):
    """Income level below which no tax is payable for an age band."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    min_age: Optional[int] = Field(default=None, ge=0, le=MAX_AGE)
    max_age: Optional[int] = Field(default=None, ge=0, le=MAX_AGE)
    amount: Decimal = Field(..., ge=0)

    def applies_to(self, age: int) -> bool:
        meets_min = self.min_age is None or age >= self.min_age
        meets_max = self.max_age is None or age <= self.max_age
        return meets_min and meets_max


class MedicalAidCreditRule(BaseModel):
    """Monthly medical scheme fees tax credit (section 6A).

    The main member is always covered; dependents are counted on top.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    main_member_credit: Decimal = Field(..., ge=0)
    first_dependent_credit: Decimal = Field(..., ge=0)
    additional_dependent_credit: Decimal = Field(..., ge=0)

    def monthly_credit(self, dependents: int) -> Decimal:
        """Credit per month for the main member plus `dependents`."""
        if dependents < 0:
            raise InvalidInputError("dependents", "number of dependents cannot be negative")
        if dependents == 0:
            return self.main_member_credit
        if dependents == 1:
            return self.main_member_credit + self.first_dependent_credit
        return (
            self.main_member_credit
            + self.first_dependent_credit
            + self.additional_dependent_credit * (dependents - 1)
        )

    def annual_credit(self, dependents: int) -> Decimal:
        return self.monthly_credit(dependents) * 12


class UifConfig(BaseModel):
    """Unemployment Insurance Fund contribution rules."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    employee_rate: Decimal = Field(..., ge=0, le=1)
    employer_rate: Decimal = Field(..., ge=0, le=1)
    monthly_ceiling: Decimal = Field(..., gt=0, description="Maximum monthly remuneration subject to UIF")

    @property
    def annual_ceiling(self) -> Decimal:
        return self.monthly_ceiling * 12


class SdlConfig(BaseModel):
    """Skills Development Levy rules."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    rate: Decimal = Field(..., ge=0, le=1)
    exemption_threshold: Decimal = Field(..., ge=0, description="Annual payroll at or below which SDL is not due")


class EtiBand(BaseModel):
    """Monthly salary band of the Employment Tax Incentive.

    A band pays one of three ways:
    - percentage tier: min(salary x percentage, year amount), when
      first_year_percentage is set;
    - taper: year amount less (salary - min_salary) x reduction rate, when
      reduction_rate is set;
    - flat: the year amount.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    min_salary: Decimal = Field(..., ge=0)
    max_salary: Decimal = Field(..., ge=0)
    first_year_amount: Decimal = Field(..., ge=0)
    second_year_amount: Decimal = Field(..., ge=0)
    reduction_rate: Optional[Decimal] = Field(default=None, ge=0)
    second_year_reduction_rate: Optional[Decimal] = Field(default=None, ge=0)
    first_year_percentage: Optional[Decimal] = Field(default=None, ge=0, le=1)
    second_year_percentage: Optional[Decimal] = Field(default=None, ge=0, le=1)

    @property
    def uses_salary_percentage(self) -> bool:
        return self.first_year_percentage is not None

    def contains(self, salary: Decimal) -> bool:
        return self.min_salary <= salary <= self.max_salary

    def base_amount(self, first_year: bool) -> Decimal:
        return self.first_year_amount if first_year else self.second_year_amount

    def salary_percentage(self, first_year: bool) -> Optional[Decimal]:
        return self.first_year_percentage if first_year else self.second_year_percentage

    def taper_rate(self, first_year: bool) -> Optional[Decimal]:
        if not first_year and self.second_year_reduction_rate is not None:
            return self.second_year_reduction_rate
        return self.reduction_rate

    @model_validator(mode="after")
    def check_band(self) -> "EtiBand":
        if self.max_salary < self.min_salary:
            raise ValueError(f"max_salary ({self.max_salary}) < min_salary ({self.min_salary})")
        if (self.first_year_percentage is None) != (self.second_year_percentage is None):
            raise ValueError("percentage bands need both first_year_percentage and second_year_percentage")
        if self.uses_salary_percentage and self.reduction_rate is not None:
            raise ValueError("a band cannot be both a percentage tier and a tapering band")
        if self.second_year_reduction_rate is not None and self.reduction_rate is None:
            raise ValueError("second_year_reduction_rate requires reduction_rate")
        return self


class EtiConfig(BaseModel):
    """Employment Tax Incentive eligibility limits and bands."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    min_age: int = Field(..., ge=0, le=MAX_AGE)
    max_age: int = Field(..., ge=0, le=MAX_AGE)
    max_qualifying_salary: Decimal = Field(..., gt=0)
    bands: tuple[EtiBand, ...] = Field(..., min_length=1)

    def find_band(self, salary: Decimal) -> Optional[EtiBand]:
        """First band whose inclusive [min_salary, max_salary] holds salary."""
        for band in self.bands:
            if band.contains(salary):
                return band
        return None

    @model_validator(mode="after")
    def check_bands(self) -> "EtiConfig":
        if self.max_age < self.min_age:
            raise ValueError(f"max_age ({self.max_age}) < min_age ({self.min_age})")
        _check_ranges(
            [(b.min_salary, b.max_salary) for b in self.bands],
            label="ETI band",
        )
        if self.bands[0].min_salary != 0:
            raise ValueError("first ETI band must start at 0")
        if self.bands[-1].max_salary != self.max_qualifying_salary:
            raise ValueError(
                f"last ETI band ends at {self.bands[-1].max_salary}, "
                f"expected max_qualifying_salary {self.max_qualifying_salary}"
            )
        return self


class RetirementLimits(BaseModel):
    """Deductible retirement fund contribution limits (section 11F)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    max_percentage: Decimal = Field(..., ge=0, le=1, description="Share of income that is deductible")
    annual_cap: Decimal = Field(..., ge=0)

    def allowable_deduction(self, annual_income: Decimal, contribution: Decimal) -> Decimal:
        limit = min(annual_income * self.max_percentage, self.annual_cap)
        return min(contribution, limit)


class TaxYearConfiguration(BaseModel):
    """Complete tax rules for a year.

    start_date and end_date describe the tax year (1 March to end of
    February) and are informational; calculations do not check them.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    year: int
    start_date: date
    end_date: date
    tax_brackets: tuple[TaxBracket, ...] = Field(..., min_length=1)
    tax_rebates: tuple[TaxRebate, ...] = Field(..., min_length=1)
    tax_thresholds: tuple[TaxThreshold, ...] = Field(..., min_length=1)
    medical_aid_credit: MedicalAidCreditRule
    uif: UifConfig
    sdl: SdlConfig
    eti: EtiConfig
    retirement_limits: RetirementLimits

    def get_tax_threshold(self, age: int) -> Decimal:
        for threshold in self.tax_thresholds:
            if threshold.applies_to(age):
                return threshold.amount
        return Decimal("0")

    def get_rebates(self, age: int) -> list[TaxRebate]:
        return [r for r in self.tax_rebates if r.applies_to(age)]

    @model_validator(mode="after")
    def check_tables(self) -> "TaxYearConfiguration":
        if self.end_date <= self.start_date:
            raise ValueError(f"end_date ({self.end_date}) must be after start_date ({self.start_date})")

        brackets = self.tax_brackets
        if brackets[0].min_income != 0:
            raise ValueError("first tax bracket must start at 0")
        if any(b.is_unbounded for b in brackets[:-1]):
            raise ValueError("only the last tax bracket may be unbounded")
        if not brackets[-1].is_unbounded:
            raise ValueError("last tax bracket must be unbounded")
        _check_ranges(
            [(b.min_income, b.max_income) for b in brackets],
            label="tax bracket",
        )

        if not any(r.min_age is None for r in self.tax_rebates):
            raise ValueError("at least one rebate must apply regardless of age")

        for age in range(0, MAX_AGE + 1):
            matches = sum(1 for t in self.tax_thresholds if t.applies_to(age))
            if matches != 1:
                raise ValueError(f"age {age} matches {matches} tax thresholds, expected exactly 1")

        return self


def _check_ranges(ranges: list[tuple[Decimal, Optional[Decimal]]], label: str) -> None:
    """Ranges must ascend without overlapping or leaving more than a rand between them."""
    for i in range(1, len(ranges)):
        prev_max = ranges[i - 1][1]
        cur_min = ranges[i][0]
        if prev_max is None:
            raise ValueError(f"{label} {i} follows an unbounded {label}")
        if cur_min <= prev_max:
            raise ValueError(f"{label} {i + 1} starts at {cur_min}, overlapping previous max {prev_max}")
        if cur_min - prev_max > MAX_RANGE_GAP:
            raise ValueError(f"{label} {i + 1} starts at {cur_min}, leaving a gap after {prev_max}")
