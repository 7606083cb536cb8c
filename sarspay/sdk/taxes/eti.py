"""Employment Tax Incentive (ETI) calculations.

Eligibility is checked in a fixed order and the first failure wins:

1. Age within [min_age, max_age], skipped for employees in a special
   economic zone.
2. Monthly salary no more than max_qualifying_salary.
3. Unless a first-time employee, fewer than 24 months employed.

An eligible salary is then matched to the first band containing it
(inclusive at both ends). Salaries that fall between published bands get
no incentive.

The amount uses the first-year figure for employment_months < 12 and the
second-year figure after that. Percentage tiers pay the lesser of salary x
percentage and that figure; tapering bands subtract (salary - band
minimum) x reduction rate, floored at zero. Employees working fewer than
160 hours in the month get hours/160 of the amount (hours capped at 744).
Cents are dropped from the final amount.
"""

import logging
from decimal import Decimal
from typing import Iterable, Optional

from ..batch import map_ordered
from ..errors import InvalidInputError
from ..rounding import round_eti
from ..schemas import EtiBulkResult, EtiEmployee, EtiResult, IneligibilityReason
from .schemas import EtiBand, EtiConfig

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
FULL_MONTH_HOURS = Decimal("160")
MAX_MONTH_HOURS = Decimal("744")  # 31 days x 24 hours
FIRST_YEAR_MONTHS = 12
MAX_QUALIFYING_MONTHS = 24


class EtiCalculator:
    """ETI for one tax year's rules."""

    def __init__(self, config: EtiConfig):
        if config is None:
            raise InvalidInputError("config", "ETI configuration is required")
        self.config = config

    def check_eligibility(self, employee: EtiEmployee) -> tuple[Optional[IneligibilityReason], Optional[str]]:
        """Return (reason, detail) for the first failed check, or (None, None)."""
        config = self.config

        if not employee.works_in_special_economic_zone and not (
            config.min_age <= employee.age <= config.max_age
        ):
            return (
                IneligibilityReason.AGE_OUT_OF_RANGE,
                f"Age {employee.age} is outside eligible range ({config.min_age}-{config.max_age})",
            )

        if employee.monthly_salary > config.max_qualifying_salary:
            return (
                IneligibilityReason.SALARY_ABOVE_MAXIMUM,
                f"Salary R{employee.monthly_salary:,.2f} exceeds maximum qualifying "
                f"salary of R{config.max_qualifying_salary:,.2f}",
            )

        if not employee.is_first_time_employee and employee.employment_months >= MAX_QUALIFYING_MONTHS:
            return (
                IneligibilityReason.EMPLOYMENT_PERIOD_EXPIRED,
                f"ETI period has expired ({MAX_QUALIFYING_MONTHS} months)",
            )

        return None, None

    def incentive_amount(self, employee: EtiEmployee, band: EtiBand) -> Decimal:
        """Whole-rand ETI for an eligible employee in the given band."""
        first_year = employee.employment_months < FIRST_YEAR_MONTHS
        salary = employee.monthly_salary
        amount = band.base_amount(first_year)

        if band.uses_salary_percentage:
            amount = min(salary * band.salary_percentage(first_year), amount)
        elif band.taper_rate(first_year) is not None:
            amount = max(ZERO, amount - (salary - band.min_salary) * band.taper_rate(first_year))

        hours = employee.hours_worked_in_month
        if hours is not None:
            hours = min(hours, MAX_MONTH_HOURS)
            if hours < FULL_MONTH_HOURS:
                amount = amount * hours / FULL_MONTH_HOURS

        return round_eti(amount)

    def calculate_monthly(self, employee: EtiEmployee) -> EtiResult:
        """ETI for one employee for one month.

        Raises:
            InvalidInputError: If employee is None
        """
        if employee is None:
            raise InvalidInputError("employee", "employee record is required")

        reason, detail = self.check_eligibility(employee)
        if reason is not None:
            logger.debug("ETI %s ineligible: %s", employee.employee_id or "<anonymous>", reason.value)
            return EtiResult(
                amount=round_eti(ZERO),
                is_eligible=False,
                ineligibility_reason=reason,
                detail=detail,
                employee=employee,
            )

        band = self.config.find_band(employee.monthly_salary)
        if band is None:
            return EtiResult(
                amount=round_eti(ZERO),
                is_eligible=False,
                ineligibility_reason=IneligibilityReason.NO_MATCHING_BAND,
                detail=f"No ETI band covers a salary of R{employee.monthly_salary:,.2f}",
                employee=employee,
            )

        hours = employee.hours_worked_in_month
        return EtiResult(
            amount=self.incentive_amount(employee, band),
            is_eligible=True,
            employee=employee,
            band=band,
            prorated=hours is not None and hours < FULL_MONTH_HOURS,
        )

    def calculate_bulk(self, employees: Iterable[EtiEmployee], max_workers: Optional[int] = None) -> EtiBulkResult:
        """ETI for many employees; results are in input order."""
        if employees is None:
            raise InvalidInputError("employees", "employee list is required")
        results = map_ordered(self.calculate_monthly, employees, max_workers)
        return EtiBulkResult(
            total_employees=len(results),
            eligible_employees=sum(1 for r in results if r.is_eligible),
            total_eti_amount=sum((r.amount for r in results), ZERO),
            results=tuple(results),
        )
