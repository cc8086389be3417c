"""Weekly income tax and National Insurance calculations.

Implements HMRC-style marginal banding on a weekly (week 1) basis. Annual
allowance and band thresholds are converted to weekly figures by dividing
by 52; tax is charged at the basic rate on the first band-width of taxable
pay, the higher rate on the next, and the additional rate beyond.

All arithmetic is Decimal. Intermediate values are kept unrounded and only
the final amount is rounded to pence (half-up).
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict

from .rules import DEFAULT_TAX_YEAR, load_tax_rules
from .schemas import TaxRules, to_decimal
from .tax_code import ParsedTaxCode, parse_tax_code

logger = logging.getLogger(__name__)

WEEKS_PER_YEAR = Decimal("52")
PENNY = Decimal("0.01")
ZERO = Decimal("0")


def as_decimal(amount: Any) -> Decimal:
    """Coerce int/float/str/Decimal to Decimal (floats via str)."""
    return Decimal(to_decimal(amount))


def round_currency(amount: Any) -> Decimal:
    """Round to 2 decimal places using half-up currency rounding.

    Example: 51.6538 -> 51.65, 4.665 -> 4.67
    """
    return as_decimal(amount).quantize(PENNY, rounding=ROUND_HALF_UP)


def weekly_personal_allowance(parsed: ParsedTaxCode) -> Decimal:
    """Annual allowance from the tax code spread over 52 weeks."""
    return parsed.personal_allowance / WEEKS_PER_YEAR


def calc_tax_bands(taxable_income: Decimal, rules: TaxRules) -> Dict[str, Decimal]:
    """Split weekly taxable income across the rate bands.

    Band widths are measured from zero taxable income:
        basic  = basic_rate.threshold / 52
        higher = (higher_rate.threshold - basic_rate.threshold) / 52
    which equals (PA + threshold) / 52 - PA / 52 without the rounding
    noise of dividing the allowance twice.

    Returns:
        Dict with unrounded tax per band: basic, higher, additional
    """
    bands = rules.income_tax
    basic_width = bands.basic_rate.threshold / WEEKS_PER_YEAR
    higher_width = (bands.higher_rate.threshold - bands.basic_rate.threshold) / WEEKS_PER_YEAR

    basic_amount = min(taxable_income, basic_width)
    higher_amount = max(ZERO, min(taxable_income - basic_width, higher_width))
    additional_amount = max(ZERO, taxable_income - basic_width - higher_width)

    return {
        "basic": basic_amount * bands.basic_rate.rate,
        "higher": higher_amount * bands.higher_rate.rate,
        "additional": additional_amount * bands.additional_rate.rate,
    }


def calc_taxable_income(gross_pay: Any, parsed: ParsedTaxCode) -> Decimal:
    """Weekly pay above the weekly personal allowance, floored at zero."""
    return max(ZERO, as_decimal(gross_pay) - weekly_personal_allowance(parsed))


def _theoretical_tax(gross_pay: Any, parsed: ParsedTaxCode, rules: TaxRules) -> Decimal:
    taxable_income = calc_taxable_income(gross_pay, parsed)
    return sum(calc_tax_bands(taxable_income, rules).values(), ZERO)


def calc_theoretical_income_tax(
    gross_pay: Any,
    tax_code: str = "1257L",
    tax_year: str = DEFAULT_TAX_YEAR,
) -> Decimal:
    """Banded weekly income tax with no emergency-tax override.

    Used alongside calc_income_tax for comparison display.
    """
    rules = load_tax_rules(tax_year)
    parsed = parse_tax_code(tax_code)
    return round_currency(_theoretical_tax(gross_pay, parsed, rules))


def calc_income_tax(
    gross_pay: Any,
    tax_code: str = "1257L",
    tax_year: str = DEFAULT_TAX_YEAR,
) -> Decimal:
    """Calculate income tax on one week's gross pay.

    Args:
        gross_pay: Gross pay for the week
        tax_code: HMRC tax code (parsed with parse_tax_code)
        tax_year: Rate table to use

    Returns:
        Income tax in pounds, rounded to pence

    Note:
        Emergency codes (W1/M1) replace the banded result with a flat basic
        rate on all taxable income, ignoring higher and additional bands.
        K codes are parsed but do not change the amount.
    """
    rules = load_tax_rules(tax_year)
    parsed = parse_tax_code(tax_code)

    if parsed.is_emergency:
        taxable_income = calc_taxable_income(gross_pay, parsed)
        tax = taxable_income * rules.income_tax.basic_rate.rate
    else:
        tax = _theoretical_tax(gross_pay, parsed, rules)

    logger.debug(f"Income tax on {gross_pay} ({tax_code}): {tax}")
    return round_currency(tax)


def calc_ni_bands(
    gross_pay: Any,
    frequency: str = "weekly",
    tax_year: str = DEFAULT_TAX_YEAR,
) -> Dict[str, Decimal]:
    """Split National Insurance into main-rate and upper-rate portions.

    Unknown frequencies use the weekly thresholds.

    Returns:
        Dict with unrounded amounts: taxable_pay, standard, reduced
    """
    rates = load_tax_rules(tax_year).ni_rates(frequency)
    gross = as_decimal(gross_pay)
    taxable_pay = max(ZERO, gross - rates.threshold)

    if gross <= rates.upper_threshold:
        standard = taxable_pay * rates.rate
        reduced = ZERO
    else:
        standard = (rates.upper_threshold - rates.threshold) * rates.rate
        reduced = (gross - rates.upper_threshold) * rates.upper_rate

    return {"taxable_pay": taxable_pay, "standard": standard, "reduced": reduced}


def calc_ni(
    gross_pay: Any,
    frequency: str = "weekly",
    tax_year: str = DEFAULT_TAX_YEAR,
) -> Decimal:
    """Calculate employee National Insurance for one pay period.

    Args:
        gross_pay: Gross pay for the period
        frequency: 'weekly', 'monthly' or 'yearly' (others fall back to weekly)
        tax_year: Rate table to use

    Returns:
        NI in pounds, rounded to pence

    Example:
        calc_ni(1200) -> (967 - 242) * 0.12 + (1200 - 967) * 0.02 = 91.66
    """
    bands = calc_ni_bands(gross_pay, frequency, tax_year)
    return round_currency(bands["standard"] + bands["reduced"])


def calc_theoretical_ni(
    gross_pay: Any,
    frequency: str = "weekly",
    tax_year: str = DEFAULT_TAX_YEAR,
) -> Decimal:
    """National Insurance with no adjustment applied.

    Same result as calc_ni; kept as its own entry point so breakdown
    displays can show a theoretical column next to the charged one.
    """
    return calc_ni(gross_pay, frequency, tax_year)


def calc_pension(gross_pay: Any, percent: Any) -> Decimal:
    """Employee pension contribution as a percentage of gross pay.

    Returns Decimal("0.00") when percent is missing, zero or negative.
    """
    if not percent:
        return round_currency(ZERO)
    rate = as_decimal(percent)
    if rate <= 0:
        return round_currency(ZERO)
    return round_currency(as_decimal(gross_pay) * rate / 100)
