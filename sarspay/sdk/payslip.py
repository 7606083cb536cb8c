"""Monthly payslip assembly.

Runs PAYE, UIF, SDL and (when claimed) ETI for one employee and composes
the payslip:

    total deductions        = PAYE + UIF (employee) + retirement
                              + medical aid + other deductions
    employer contributions  = UIF (employer) + SDL + employer retirement
                              + employer medical aid
    net pay                 = gross - total deductions
    cost to company         = gross + employer contributions
    net PAYE payable        = max(0, PAYE - ETI)

The medical aid tax credit reduces PAYE and is shown for information only;
it is not subtracted again from the deductions.

Bulk calculation is a per-employee loop plus field totals. SDL exemption
is decided per payslip from that input's company_annual_payroll, so
callers wanting a company-wide decision pass the same payroll on every
input.
"""

import logging
from decimal import Decimal
from typing import Iterable, Optional

from .batch import map_ordered
from .errors import InvalidInputError
from .rounding import round_currency, round_paye
from .schemas import (
    BulkPayslipResult,
    BulkPayslipSummary,
    EmployeeDeductions,
    EmployeeInfo,
    EmployerContributions,
    Earnings,
    EtiEmployee,
    EtiInfo,
    FixedAmount,
    PayPeriod,
    Payslip,
    PayslipInput,
    PayslipSummary,
    PercentageOfSalary,
)
from .taxes.eti import EtiCalculator
from .taxes.paye import PayeCalculator
from .taxes.rules import get_configuration
from .taxes.schemas import TaxYearConfiguration
from .taxes.sdl import SdlCalculator
from .taxes.uif import UifCalculator

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def monthly_retirement_contribution(payslip_input: PayslipInput, monthly_gross: Decimal) -> Decimal:
    """Employee retirement contribution for the month (0 when none)."""
    retirement = payslip_input.retirement
    if retirement is None:
        return ZERO
    if isinstance(retirement, PercentageOfSalary):
        return round_currency(monthly_gross * retirement.rate)
    if isinstance(retirement, FixedAmount):
        return retirement.amount
    raise InvalidInputError("retirement", f"unknown contribution type {type(retirement).__name__}")


class PayslipCalculator:
    """Payslips for one tax year's rules."""

    def __init__(self, config: TaxYearConfiguration):
        if config is None:
            raise InvalidInputError("config", "tax year configuration is required")
        self.config = config
        self.paye = PayeCalculator(config)
        self.uif = UifCalculator(config.uif)
        self.sdl = SdlCalculator(config.sdl)
        self.eti = EtiCalculator(config.eti)

    def calculate(self, payslip_input: PayslipInput) -> Payslip:
        """Monthly payslip for one employee.

        Raises:
            InvalidInputError: If payslip_input is None
        """
        if payslip_input is None:
            raise InvalidInputError("payslip_input", "payslip input is required")

        gross = payslip_input.gross_salary
        if payslip_input.is_annual_salary:
            annual_gross = gross
            monthly_gross = round_currency(gross / 12)
        else:
            annual_gross = gross * 12
            monthly_gross = gross

        deductions = self._deductions(payslip_input, monthly_gross, annual_gross)
        employer = self._employer_contributions(payslip_input, monthly_gross)
        eti = self._eti(payslip_input, monthly_gross)

        eti_amount = eti.amount if eti is not None else ZERO
        summary = PayslipSummary(
            gross_pay=monthly_gross,
            total_deductions=deductions.total_deductions,
            net_pay=monthly_gross - deductions.total_deductions,
            cost_to_company=monthly_gross + employer.total_contributions,
            net_paye_payable=round_paye(max(ZERO, deductions.paye - eti_amount)),
        )

        logger.debug(
            "payslip %s: gross %s, PAYE %s, net %s",
            payslip_input.employee_id or "<anonymous>", monthly_gross, deductions.paye, summary.net_pay,
        )

        return Payslip(
            employee=EmployeeInfo(
                employee_id=payslip_input.employee_id,
                name=payslip_input.employee_name,
                age=payslip_input.age,
                tax_number=payslip_input.tax_number,
            ),
            period=PayPeriod(
                month=payslip_input.pay_month,
                year=payslip_input.pay_year,
                tax_year=self.config.year,
            ),
            earnings=Earnings(basic_salary=monthly_gross, gross_earnings=monthly_gross),
            deductions=deductions,
            employer_contributions=employer,
            eti=eti,
            summary=summary,
        )

    def calculate_bulk(
        self,
        inputs: Iterable[PayslipInput],
        max_workers: Optional[int] = None,
    ) -> BulkPayslipResult:
        """Payslips for many employees with field totals; order follows inputs."""
        if inputs is None:
            raise InvalidInputError("inputs", "payslip input list is required")
        payslips = map_ordered(self.calculate, inputs, max_workers)

        def total(values) -> Decimal:
            return sum(values, ZERO)

        summary = BulkPayslipSummary(
            total_employees=len(payslips),
            total_gross_earnings=total(p.earnings.gross_earnings for p in payslips),
            total_paye=total(p.deductions.paye for p in payslips),
            total_uif=total(p.deductions.uif + p.employer_contributions.uif for p in payslips),
            total_sdl=total(p.employer_contributions.sdl for p in payslips),
            total_eti=total(p.eti.amount for p in payslips if p.eti is not None),
            total_retirement_contributions=total(p.deductions.retirement_contribution for p in payslips),
            total_medical_aid_contributions=total(p.deductions.medical_aid_contribution for p in payslips),
            total_deductions=total(p.summary.total_deductions for p in payslips),
            total_employer_contributions=total(p.employer_contributions.total_contributions for p in payslips),
            total_net_pay=total(p.summary.net_pay for p in payslips),
            total_cost_to_company=total(p.summary.cost_to_company for p in payslips),
            total_net_paye_payable=total(p.summary.net_paye_payable for p in payslips),
        )
        return BulkPayslipResult(payslips=tuple(payslips), summary=summary)

    def _deductions(
        self,
        payslip_input: PayslipInput,
        monthly_gross: Decimal,
        annual_gross: Decimal,
    ) -> EmployeeDeductions:
        retirement = monthly_retirement_contribution(payslip_input, monthly_gross)
        members = payslip_input.medical_aid_members

        paye = self.paye.calculate(annual_gross, payslip_input.age, members, retirement * 12)
        uif = self.uif.calculate_monthly(monthly_gross)

        medical_credit = (
            self.config.medical_aid_credit.monthly_credit(members - 1) if members > 0 else ZERO
        )
        total = (
            paye.monthly_paye
            + uif.employee_amount
            + retirement
            + payslip_input.medical_aid_contribution
            + payslip_input.other_deductions
        )
        return EmployeeDeductions(
            paye=paye.monthly_paye,
            uif=uif.employee_amount,
            retirement_contribution=retirement,
            medical_aid_contribution=payslip_input.medical_aid_contribution,
            medical_aid_tax_credit=medical_credit,
            other_deductions=payslip_input.other_deductions,
            total_deductions=total,
        )

    def _employer_contributions(self, payslip_input: PayslipInput, monthly_gross: Decimal) -> EmployerContributions:
        uif = self.uif.calculate_monthly(monthly_gross)
        sdl = self.sdl.calculate_monthly(monthly_gross, payslip_input.company_annual_payroll)
        retirement = payslip_input.employer_retirement_contribution
        medical = payslip_input.employer_medical_aid_contribution
        return EmployerContributions(
            uif=uif.employer_amount,
            sdl=sdl.amount,
            retirement_contribution=retirement,
            medical_aid_contribution=medical,
            total_contributions=uif.employer_amount + sdl.amount + retirement + medical,
        )

    def _eti(self, payslip_input: PayslipInput, monthly_gross: Decimal) -> Optional[EtiInfo]:
        if not payslip_input.claim_eti:
            return None

        result = self.eti.calculate_monthly(EtiEmployee(
            employee_id=payslip_input.employee_id,
            age=payslip_input.age,
            monthly_salary=monthly_gross,
            employment_months=payslip_input.employment_months,
            is_first_time_employee=payslip_input.is_first_time_employee,
            works_in_special_economic_zone=payslip_input.works_in_special_economic_zone,
            hours_worked_in_month=payslip_input.hours_worked_in_month,
        ))
        return EtiInfo(
            amount=result.amount,
            is_eligible=result.is_eligible,
            ineligibility_reason=result.ineligibility_reason,
            detail=result.detail,
        )


def calculate_payslip(payslip_input: PayslipInput, tax_year: int) -> Payslip:
    """Convenience wrapper: payslip using the default rules for tax_year."""
    return PayslipCalculator(get_configuration(tax_year)).calculate(payslip_input)

