"""Pydantic schemas for employee inputs and calculation results.

All schemas use extra='forbid' to reject unknown fields, so a typo in a
bulk input file causes a clear error rather than being silently ignored.
Results are frozen value objects: created once per calculation, compared
by value, never mutated.
"""

from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .taxes.schemas import EtiBand


# =============================================================================
# Statutory results - one per calculator
# =============================================================================


class PayeResult(BaseModel):
    """Annual PAYE with the figures that produced it."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    tax_year: int
    age: int
    gross_income: Decimal = Field(..., description="Annual income before the retirement deduction")
    retirement_deduction: Decimal = Field(..., description="Deductible part of the retirement contribution")
    taxable_income: Decimal
    gross_tax: Decimal = Field(..., description="Tax from the brackets before rebates and credits")
    total_rebates: Decimal
    medical_aid_credit: Decimal = Field(..., description="Annual medical scheme fees tax credit")
    tax_threshold: Decimal
    annual_paye: Decimal
    monthly_paye: Decimal = Field(..., description="annual_paye / 12, rounded to the cent")

    @property
    def is_below_threshold(self) -> bool:
        return self.taxable_income <= self.tax_threshold


class UifResult(BaseModel):
    """UIF contribution for one period (month or year)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    employee_amount: Decimal
    employer_amount: Decimal
    total_amount: Decimal
    contribution_base: Decimal = Field(..., description="Remuneration after the ceiling")
    ceiling_applied: bool = Field(..., description="True only when remuneration strictly exceeds the ceiling")


class SdlResult(BaseModel):
    """Skills Development Levy owed by the employer."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    amount: Decimal
    is_exempt: bool
    rate: Decimal
    annual_payroll: Decimal
    exemption_threshold: Decimal


class IndividualSdlContribution(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    annual_salary: Decimal
    sdl_amount: Decimal


class SdlBulkResult(BaseModel):
    """SDL for a whole payroll; exemption is decided once on the total."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    total_payroll: Decimal
    total_sdl: Decimal
    is_exempt: bool
    employee_count: int
    contributions: tuple[IndividualSdlContribution, ...]


# =============================================================================
# Employment Tax Incentive
# =============================================================================


class EtiEmployee(BaseModel):
    """Facts about one employee needed to work out ETI.

    Deliberately unconstrained apart from hours: an age or salary outside
    the incentive's limits is an ineligible result, not an invalid input.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    employee_id: str = ""
    age: int
    monthly_salary: Decimal
    employment_months: int = Field(default=0, description="Months employed by this employer before this one")
    is_first_time_employee: bool = False
    works_in_special_economic_zone: bool = False
    hours_worked_in_month: Optional[Decimal] = Field(
        default=None, ge=0, description="Actual hours this month; None means a full month"
    )


class IneligibilityReason(str, Enum):
    AGE_OUT_OF_RANGE = "age_out_of_range"
    SALARY_ABOVE_MAXIMUM = "salary_above_maximum"
    EMPLOYMENT_PERIOD_EXPIRED = "employment_period_expired"
    NO_MATCHING_BAND = "no_matching_band"


class EtiResult(BaseModel):
    """ETI outcome for one employee for one month.

    An ineligible employee gets amount 0, is_eligible False and a reason;
    that is a successful calculation, not an error.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    amount: Decimal
    is_eligible: bool
    ineligibility_reason: Optional[IneligibilityReason] = None
    detail: Optional[str] = None
    employee: EtiEmployee
    band: Optional[EtiBand] = None
    prorated: bool = False


class EtiBulkResult(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    total_employees: int
    eligible_employees: int
    total_eti_amount: Decimal
    results: tuple[EtiResult, ...]


# =============================================================================
# Payslip input
# =============================================================================


class PercentageOfSalary(BaseModel):
    """Retirement contribution as a share of monthly gross salary."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["percentage"] = "percentage"
    rate: Decimal = Field(..., ge=0, le=1, description="e.g. 0.075 for 7.5%")


class FixedAmount(BaseModel):
    """Retirement contribution as a fixed monthly amount."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["fixed"] = "fixed"
    amount: Decimal = Field(..., ge=0)


RetirementContribution = Annotated[
    Union[PercentageOfSalary, FixedAmount],
    Field(discriminator="kind"),
]


class PayslipInput(BaseModel):
    """One employee's facts for a monthly payslip."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    employee_id: str = ""
    employee_name: str = ""
    tax_number: str = ""
    age: int = Field(..., ge=0, le=150)
    gross_salary: Decimal = Field(..., gt=0, description="Monthly, or annual when is_annual_salary")
    is_annual_salary: bool = False
    pay_month: Optional[int] = Field(default=None, ge=1, le=12)
    pay_year: Optional[int] = None
    medical_aid_members: int = Field(
        default=0, ge=0, description="Main member plus dependents; 0 means no medical aid"
    )
    medical_aid_contribution: Decimal = Field(default=Decimal("0"), ge=0)
    retirement: Optional[RetirementContribution] = None
    employer_retirement_contribution: Decimal = Field(default=Decimal("0"), ge=0)
    employer_medical_aid_contribution: Decimal = Field(default=Decimal("0"), ge=0)
    other_deductions: Decimal = Field(default=Decimal("0"), ge=0)
    company_annual_payroll: Decimal = Field(
        default=Decimal("1000000"), ge=0, description="Payroll used to decide SDL exemption"
    )
    claim_eti: bool = Field(default=False, description="Whether the employer claims ETI for this employee")
    employment_months: int = Field(default=0, ge=0)
    is_first_time_employee: bool = False
    works_in_special_economic_zone: bool = False
    hours_worked_in_month: Optional[Decimal] = Field(default=None, ge=0)


# =============================================================================
# Payslip output
# =============================================================================


class EmployeeInfo(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    employee_id: str
    name: str
    age: int
    tax_number: str


class PayPeriod(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    month: Optional[int]
    year: Optional[int]
    tax_year: int


class Earnings(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    basic_salary: Decimal
    gross_earnings: Decimal


class EmployeeDeductions(BaseModel):
    """Monthly amounts withheld from the employee.

    medical_aid_tax_credit is informational: it already reduced PAYE and is
    not part of total_deductions.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    paye: Decimal
    uif: Decimal
    retirement_contribution: Decimal
    medical_aid_contribution: Decimal
    medical_aid_tax_credit: Decimal
    other_deductions: Decimal
    total_deductions: Decimal


class EmployerContributions(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    uif: Decimal
    sdl: Decimal
    retirement_contribution: Decimal
    medical_aid_contribution: Decimal
    total_contributions: Decimal


class EtiInfo(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    amount: Decimal
    is_eligible: bool
    ineligibility_reason: Optional[IneligibilityReason] = None
    detail: Optional[str] = None


class PayslipSummary(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    gross_pay: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    cost_to_company: Decimal
    net_paye_payable: Decimal = Field(..., description="PAYE less ETI, never below zero")


class Payslip(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    employee: EmployeeInfo
    period: PayPeriod
    earnings: Earnings
    deductions: EmployeeDeductions
    employer_contributions: EmployerContributions
    eti: Optional[EtiInfo] = None
    summary: PayslipSummary


class BulkPayslipSummary(BaseModel):
    """Field-by-field totals across a batch of payslips.

    total_uif counts both the employee and employer shares. The retirement
    and medical aid totals are employee deductions; employer-paid amounts
    are inside total_employer_contributions.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    total_employees: int
    total_gross_earnings: Decimal
    total_paye: Decimal
    total_uif: Decimal
    total_sdl: Decimal
    total_eti: Decimal
    total_retirement_contributions: Decimal
    total_medical_aid_contributions: Decimal
    total_deductions: Decimal
    total_employer_contributions: Decimal
    total_net_pay: Decimal
    total_cost_to_company: Decimal
    total_net_paye_payable: Decimal


class BulkPayslipResult(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    payslips: tuple[Payslip, ...]
    summary: BulkPayslipSummary
