"""taxes - Statutory payroll tax rules and calculators.

Scope:
- Year-specific rate tables (brackets, rebates, thresholds, medical
  credits, UIF, SDL, ETI, retirement limits)
- PAYE, UIF, SDL and ETI calculators, one class each

Constraints:
- Pure calculation - no settings or file access after the rules are loaded
- Calculators take a frozen configuration in their constructor and keep
  no other state, so one instance can serve many threads
- Year-specific rules loaded from sarspay/tax_rules/{year}.yaml

Modules:
- schemas: Pydantic models for the rate tables
- rules: Loading tax years into an immutable TaxYearTable
- paye, uif, sdl, eti: The calculators

Usage:
    from sarspay.sdk.taxes import get_configuration
    from sarspay.sdk.taxes.paye import PayeCalculator

    config = get_configuration(2026)
    PayeCalculator(config).calculate_annual_paye(250000, age=30)
"""

# Tax rules schemas
from .schemas import (
    EtiBand,
    EtiConfig,
    MedicalAidCreditRule,
    RebateType,
    RetirementLimits,
    SdlConfig,
    TaxBracket,
    TaxRebate,
    TaxThreshold,
    TaxYearConfiguration,
    UifConfig,
)

# Tax rules loading
from .rules import (
    TaxYearTable,
    default_tax_year_table,
    get_configuration,
    load_tax_year_file,
    load_tax_year_table,
    supported_years,
)

__all__ = [
    # Schemas
    "EtiBand",
    "EtiConfig",
    "MedicalAidCreditRule",
    "RebateType",
    "RetirementLimits",
    "SdlConfig",
    "TaxBracket",
    "TaxRebate",
    "TaxThreshold",
    "TaxYearConfiguration",
    "UifConfig",
    # Rules
    "TaxYearTable",
    "default_tax_year_table",
    "get_configuration",
    "load_tax_year_file",
    "load_tax_year_table",
    "supported_years",
]
