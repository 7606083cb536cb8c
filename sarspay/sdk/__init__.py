"""SARS Pay SDK - Core payroll tax calculations."""

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    unset_setting,
    get_tax_rules_dir,
    get_default_tax_year,
    get_company_annual_payroll,
)

from .errors import (
    InvalidInputError,
    TaxRulesError,
    UnsupportedTaxYearError,
)

from .rounding import (
    round_currency,
    round_to_rand,
    truncate_to_rand,
    round_paye,
    round_uif,
    round_sdl,
    round_eti,
)

from .taxes import (
    TaxYearConfiguration,
    TaxYearTable,
    get_configuration,
    load_tax_year_table,
    supported_years,
)

from .taxes.paye import PayeCalculator
from .taxes.uif import UifCalculator
from .taxes.sdl import SdlCalculator
from .taxes.eti import EtiCalculator

from .schemas import (
    PayeResult,
    UifResult,
    SdlResult,
    SdlBulkResult,
    EtiEmployee,
    EtiResult,
    EtiBulkResult,
    IneligibilityReason,
    PercentageOfSalary,
    FixedAmount,
    PayslipInput,
    Payslip,
    BulkPayslipResult,
)

from .payslip import PayslipCalculator, calculate_payslip

__all__ = [
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_setting",
    "set_setting",
    "unset_setting",
    "get_tax_rules_dir",
    "get_default_tax_year",
    "get_company_annual_payroll",
    # Errors
    "InvalidInputError",
    "TaxRulesError",
    "UnsupportedTaxYearError",
    # Rounding
    "round_currency",
    "round_to_rand",
    "truncate_to_rand",
    "round_paye",
    "round_uif",
    "round_sdl",
    "round_eti",
    # Tax rules
    "TaxYearConfiguration",
    "TaxYearTable",
    "get_configuration",
    "load_tax_year_table",
    "supported_years",
    # Calculators
    "PayeCalculator",
    "UifCalculator",
    "SdlCalculator",
    "EtiCalculator",
    "PayslipCalculator",
    "calculate_payslip",
    # Schemas
    "PayeResult",
    "UifResult",
    "SdlResult",
    "SdlBulkResult",
    "EtiEmployee",
    "EtiResult",
    "EtiBulkResult",
    "IneligibilityReason",
    "PercentageOfSalary",
    "FixedAmount",
    "PayslipInput",
    "Payslip",
    "BulkPayslipResult",
]
