"""uk-pay SDK - Core functionality for weekly pay calculations."""

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    get_data_path,
    get_store_path,
)

from .taxes import (
    ParsedTaxCode,
    parse_tax_code,
    load_tax_rules,
    TaxRulesNotFoundError,
    DEFAULT_TAX_YEAR,
    calc_income_tax,
    calc_theoretical_income_tax,
    calc_ni,
    calc_theoretical_ni,
    calc_pension,
    round_currency,
)

from .schemas import (
    DeductionInput,
    DeductionResult,
    CalculationBreakdown,
    WeeklyRecord,
    DEFAULT_TAX_CODE,
)

from .deductions import (
    compute,
    compute_breakdown,
    validate_input,
    ValidationError,
    FREQUENCY_MULTIPLIERS,
)

from . import records

__all__ = [
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_setting",
    "set_setting",
    "get_data_path",
    "get_store_path",
    # Taxes
    "ParsedTaxCode",
    "parse_tax_code",
    "load_tax_rules",
    "TaxRulesNotFoundError",
    "DEFAULT_TAX_YEAR",
    "calc_income_tax",
    "calc_theoretical_income_tax",
    "calc_ni",
    "calc_theoretical_ni",
    "calc_pension",
    "round_currency",
    # Schemas
    "DeductionInput",
    "DeductionResult",
    "CalculationBreakdown",
    "WeeklyRecord",
    "DEFAULT_TAX_CODE",
    # Deductions
    "compute",
    "compute_breakdown",
    "validate_input",
    "ValidationError",
    "FREQUENCY_MULTIPLIERS",
    # Records
    "records",
]
