"""UIF (Unemployment Insurance Fund) contributions.

Employee and employer each pay their rate on remuneration up to the
ceiling. Each share is rounded to the cent on its own; the total is the
sum of the two rounded shares.
"""

from decimal import Decimal

from ..errors import InvalidInputError
from ..rounding import Number, round_uif, to_amount
from ..schemas import UifResult
from .schemas import UifConfig


class UifCalculator:
    """UIF for one tax year's rules."""

    def __init__(self, config: UifConfig):
        if config is None:
            raise InvalidInputError("config", "UIF configuration is required")
        self.config = config

    def _contribution(self, income: Decimal, ceiling: Decimal) -> UifResult:
        base = min(income, ceiling)
        employee = round_uif(base * self.config.employee_rate)
        employer = round_uif(base * self.config.employer_rate)
        return UifResult(
            employee_amount=employee,
            employer_amount=employer,
            total_amount=employee + employer,
            contribution_base=base,
            ceiling_applied=income > ceiling,
        )

    def calculate_monthly(self, monthly_income: Number) -> UifResult:
        """UIF on a month's remuneration, capped at the monthly ceiling.

        Raises:
            InvalidInputError: If monthly_income is negative
        """
        income = to_amount(monthly_income, "monthly_income")
        if income < 0:
            raise InvalidInputError("monthly_income", "cannot be negative")
        return self._contribution(income, self.config.monthly_ceiling)

    def calculate_annual(self, annual_income: Number) -> UifResult:
        """UIF on a year's remuneration, capped at 12x the monthly ceiling."""
        income = to_amount(annual_income, "annual_income")
        if income < 0:
            raise InvalidInputError("annual_income", "cannot be negative")
        return self._contribution(income, self.config.annual_ceiling)

    def exceeds_ceiling(self, monthly_income: Number) -> bool:
        return to_amount(monthly_income, "monthly_income") > self.config.monthly_ceiling

    def maximum_monthly_contribution(self) -> UifResult:
        return self.calculate_monthly(self.config.monthly_ceiling)
