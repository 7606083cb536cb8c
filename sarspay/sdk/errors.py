"""Exceptions raised by the calculation engine.

Malformed input and unsupported tax years stop a calculation. An employee
who does not qualify for ETI is not an error; that outcome is reported on
the result object instead.
"""

from typing import Iterable


class InvalidInputError(ValueError):
    """Raised when a caller supplies an out-of-range or missing value."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


class UnsupportedTaxYearError(ValueError):
    """Raised when no rate table exists for the requested tax year."""

    def __init__(self, year: int, supported_years: Iterable[int]):
        self.year = year
        self.supported_years = sorted(supported_years)
        valid = ", ".join(str(y) for y in self.supported_years)
        super().__init__(f"Tax year {year} is not supported. Supported years are: {valid}")


class TaxRulesError(ValueError):
    """Raised when a tax rules file is missing or fails validation."""
    pass
