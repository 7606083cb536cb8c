"""SDL (Skills Development Levy) calculations.

The employer pays the levy rate on remuneration unless its annual payroll
is at or below the exemption threshold. A payroll exactly on the threshold
is exempt.
"""

import logging
from decimal import Decimal
from typing import Iterable

from ..errors import InvalidInputError
from ..rounding import Number, round_sdl, to_amount
from ..schemas import IndividualSdlContribution, SdlBulkResult, SdlResult
from .schemas import SdlConfig

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class SdlCalculator:
    """SDL for one tax year's rules."""

    def __init__(self, config: SdlConfig):
        if config is None:
            raise InvalidInputError("config", "SDL configuration is required")
        self.config = config

    def is_exempt(self, annual_payroll: Number) -> bool:
        return to_amount(annual_payroll, "annual_payroll") <= self.config.exemption_threshold

    def _levy(self, income: Decimal, income_field: str, annual_payroll: Number) -> SdlResult:
        payroll = to_amount(annual_payroll, "annual_payroll")
        if income < 0:
            raise InvalidInputError(income_field, "cannot be negative")
        if payroll < 0:
            raise InvalidInputError("annual_payroll", "cannot be negative")

        exempt = self.is_exempt(payroll)
        return SdlResult(
            amount=round_sdl(ZERO if exempt else income * self.config.rate),
            is_exempt=exempt,
            rate=self.config.rate,
            annual_payroll=payroll,
            exemption_threshold=self.config.exemption_threshold,
        )

    def calculate_monthly(self, monthly_income: Number, annual_payroll: Number) -> SdlResult:
        """SDL on one employee's monthly remuneration.

        Args:
            monthly_income: The employee's remuneration for the month
            annual_payroll: The employer's total annual payroll (decides exemption)
        """
        return self._levy(to_amount(monthly_income, "monthly_income"), "monthly_income", annual_payroll)

    def calculate_annual(self, annual_income: Number, annual_payroll: Number) -> SdlResult:
        return self._levy(to_amount(annual_income, "annual_income"), "annual_income", annual_payroll)

    def total_for_payroll(self, annual_payroll: Number) -> Decimal:
        """SDL on the whole annual payroll (0 when exempt)."""
        payroll = to_amount(annual_payroll, "annual_payroll")
        if payroll < 0:
            raise InvalidInputError("annual_payroll", "cannot be negative")
        if self.is_exempt(payroll):
            return round_sdl(ZERO)
        return round_sdl(payroll * self.config.rate)

    def calculate_bulk(self, annual_salaries: Iterable[Number]) -> SdlBulkResult:
        """SDL for a list of annual salaries.

        Exemption is decided once, against the sum of all salaries; each
        employee's levy is then rounded individually.

        Raises:
            InvalidInputError: If the list is missing or any salary is negative
        """
        if annual_salaries is None:
            raise InvalidInputError("annual_salaries", "salary list is required")
        salaries = [to_amount(s, "annual_salaries") for s in annual_salaries]
        if any(s < 0 for s in salaries):
            raise InvalidInputError("annual_salaries", "salaries cannot be negative")

        total_payroll = sum(salaries, ZERO)
        exempt = self.is_exempt(total_payroll)
        logger.debug("SDL bulk: %d salaries, payroll %s, exempt=%s", len(salaries), total_payroll, exempt)

        contributions = tuple(
            IndividualSdlContribution(
                annual_salary=salary,
                sdl_amount=round_sdl(ZERO if exempt else salary * self.config.rate),
            )
            for salary in salaries
        )
        return SdlBulkResult(
            total_payroll=total_payroll,
            total_sdl=sum((c.sdl_amount for c in contributions), ZERO),
            is_exempt=exempt,
            employee_count=len(salaries),
            contributions=contributions,
        )
