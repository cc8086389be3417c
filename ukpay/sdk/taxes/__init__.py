"""taxes - UK income tax and National Insurance logic.

Scope:
- Rate tables per tax year (tables/{tax_year}.yaml)
- Tax code parsing (allowance, cumulative flag, adjustments)
- Weekly income tax banding, NI, pension

Constraints:
- Pure calculation - no storage, no CLI
- Receives plain numbers and strings, returns Decimals rounded to pence

Usage:
    from ukpay.sdk.taxes import calc_income_tax, calc_ni, parse_tax_code

    tax = calc_income_tax(500, "1257L")     # Decimal("51.65")
    ni = calc_ni(1200, "weekly")            # Decimal("91.66")
"""

from .tax_code import (
    ParsedTaxCode,
    parse_tax_code,
    DEFAULT_PERSONAL_ALLOWANCE,
    EMERGENCY_TAX,
    ADDITIONAL_TAX,
)

from .schemas import TaxRules, NIRates, IncomeTaxBand

from .rules import (
    load_tax_rules,
    available_tax_years,
    TaxRulesNotFoundError,
    DEFAULT_TAX_YEAR,
)

from .withholding import (
    calc_income_tax,
    calc_theoretical_income_tax,
    calc_ni,
    calc_theoretical_ni,
    calc_pension,
    calc_tax_bands,
    calc_ni_bands,
    calc_taxable_income,
    weekly_personal_allowance,
    round_currency,
    as_decimal,
)

__all__ = [
    # Tax codes
    "ParsedTaxCode",
    "parse_tax_code",
    "DEFAULT_PERSONAL_ALLOWANCE",
    "EMERGENCY_TAX",
    "ADDITIONAL_TAX",
    # Rules
    "TaxRules",
    "NIRates",
    "IncomeTaxBand",
    "load_tax_rules",
    "available_tax_years",
    "TaxRulesNotFoundError",
    "DEFAULT_TAX_YEAR",
    # Withholding
    "calc_income_tax",
    "calc_theoretical_income_tax",
    "calc_ni",
    "calc_theoretical_ni",
    "calc_pension",
    "calc_tax_bands",
    "calc_ni_bands",
    "calc_taxable_income",
    "weekly_personal_allowance",
    "round_currency",
    "as_decimal",
]
