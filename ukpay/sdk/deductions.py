"""Pay deduction orchestration.

compute() turns a DeductionInput into a DeductionResult: gross pay from rate
and hours, then income tax, NI and pension, then totals. It is a pure
function: no storage, no output.

Frequencies
-----------

Gross pay is always rate x hours. For weekly pay, tax and NI are computed
directly on weekly thresholds. For fortnightly, monthly and yearly the gross
is divided by a weekly multiplier, weekly tax and NI are computed on that
figure, and the results are multiplied back up:

    fortnightly: 2
    monthly:     4.33
    yearly:      52

This is an approximation. Monthly pay is not exactly 4.33 weeks, and PAYE
for real monthly payrolls uses month-1 thresholds rather than a scaled
weekly figure.

Rates
-----

The engine uses the HMRC banded method only. An empirical variant that
scaled NI by 0.67 and income tax by 0.85/1.1/1.2 to match one payslip, with
narrowed higher/additional thresholds, is deliberately not implemented.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List

from .schemas import BandAmount, CalculationBreakdown, DeductionInput, DeductionResult
from .taxes.rules import DEFAULT_TAX_YEAR, load_tax_rules
from .taxes.tax_code import parse_tax_code
from .taxes.withholding import (
    as_decimal,
    calc_income_tax,
    calc_ni,
    calc_ni_bands,
    calc_pension,
    calc_tax_bands,
    calc_taxable_income,
    calc_theoretical_income_tax,
    calc_theoretical_ni,
    round_currency,
    weekly_personal_allowance,
)

logger = logging.getLogger(__name__)

# Weeks per pay period, used to scale non-weekly pay to a weekly equivalent
FREQUENCY_MULTIPLIERS = {
    "weekly": Decimal("1"),
    "fortnightly": Decimal("2"),
    "monthly": Decimal("4.33"),
    "yearly": Decimal("52"),
}


class ValidationError(Exception):
    """Raised when calculation inputs are not usable.

    Carries every problem found so the caller can show them together.
    """
    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(f"Validation failed: {'; '.join(errors)}")


def validate_input(inputs: DeductionInput) -> List[str]:
    """Check inputs for problems the user must correct.

    Returns:
        List of error messages (empty if valid)
    """
    errors = []

    if inputs.pay_rate <= 0:
        errors.append(f"pay_rate must be greater than 0, got {inputs.pay_rate}")
    if inputs.hours_worked <= 0:
        errors.append(f"hours_worked must be greater than 0, got {inputs.hours_worked}")
    if inputs.child_support < 0:
        errors.append(f"child_support cannot be negative, got {inputs.child_support}")
    if inputs.other_deductions < 0:
        errors.append(f"other_deductions cannot be negative, got {inputs.other_deductions}")
    if inputs.frequency not in FREQUENCY_MULTIPLIERS:
        errors.append(
            f"frequency must be one of {', '.join(FREQUENCY_MULTIPLIERS)}, got {inputs.frequency!r}"
        )

    return errors


def _tax_and_ni(gross_pay: Decimal, inputs: DeductionInput, tax_year: str) -> Dict[str, Decimal]:
    if inputs.frequency == "weekly":
        return {
            "income_tax": calc_income_tax(gross_pay, inputs.tax_code, tax_year),
            "theoretical_income_tax": calc_theoretical_income_tax(gross_pay, inputs.tax_code, tax_year),
            "national_insurance": calc_ni(gross_pay, "weekly", tax_year),
            "theoretical_national_insurance": calc_theoretical_ni(gross_pay, "weekly", tax_year),
        }

    multiplier = FREQUENCY_MULTIPLIERS[inputs.frequency]
    weekly_gross = gross_pay / multiplier
    return {
        "income_tax": round_currency(
            calc_income_tax(weekly_gross, inputs.tax_code, tax_year) * multiplier
        ),
        "theoretical_income_tax": round_currency(
            calc_theoretical_income_tax(weekly_gross, inputs.tax_code, tax_year) * multiplier
        ),
        "national_insurance": round_currency(
            calc_ni(weekly_gross, "weekly", tax_year) * multiplier
        ),
        "theoretical_national_insurance": round_currency(
            calc_theoretical_ni(weekly_gross, "weekly", tax_year) * multiplier
        ),
    }


def compute(inputs: DeductionInput, tax_year: str = DEFAULT_TAX_YEAR) -> DeductionResult:
    """Calculate deductions and net pay.

    Args:
        inputs: Pay rate, hours, tax code, frequency and fixed deductions
        tax_year: Rate table to use

    Returns:
        DeductionResult with every amount rounded to pence, where
        net_pay == gross_pay - total_deductions exactly

    Raises:
        ValidationError: If pay rate or hours are not positive, fixed
            deductions are negative, or the frequency is unknown
    """
    errors = validate_input(inputs)
    if errors:
        raise ValidationError(errors)

    gross_pay = inputs.gross_pay
    amounts = _tax_and_ni(gross_pay, inputs, tax_year)

    pension = calc_pension(gross_pay, inputs.pension_percent)
    child_support = round_currency(inputs.child_support)
    other_deductions = round_currency(inputs.other_deductions)

    total_deductions = (
        amounts["income_tax"] + amounts["national_insurance"]
        + pension + child_support + other_deductions
    )
    net_pay = gross_pay - total_deductions

    logger.debug(
        f"Computed {inputs.frequency} pay: gross={gross_pay} "
        f"deductions={total_deductions} net={net_pay}"
    )

    return DeductionResult(
        gross_pay=gross_pay,
        pension=pension,
        child_support=child_support,
        other_deductions=other_deductions,
        total_deductions=total_deductions,
        net_pay=net_pay,
        tax_code=inputs.tax_code,
        frequency=inputs.frequency,
        **amounts,
    )


def compute_breakdown(
    gross_pay: Any,
    tax_code: str = "1257L",
    frequency: str = "weekly",
    tax_year: str = DEFAULT_TAX_YEAR,
) -> CalculationBreakdown:
    """Explain an income tax and NI figure band by band.

    Shows the theoretical banded tax (no emergency override) so the
    per-band lines always add up; adjustments are listed for display.
    Amounts are rounded to pence individually.
    """
    rules = load_tax_rules(tax_year)
    parsed = parse_tax_code(tax_code)
    gross = as_decimal(gross_pay)

    taxable_income = calc_taxable_income(gross, parsed)
    tax = calc_tax_bands(taxable_income, rules)
    bands = rules.income_tax

    ni_rates = rules.ni_rates(frequency)
    ni = calc_ni_bands(gross, frequency, tax_year)

    return CalculationBreakdown(
        weekly_personal_allowance=round_currency(weekly_personal_allowance(parsed)),
        taxable_income=round_currency(taxable_income),
        tax_bands=[
            BandAmount(name="Basic Rate", rate=bands.basic_rate.rate, amount=round_currency(tax["basic"])),
            BandAmount(name="Higher Rate", rate=bands.higher_rate.rate, amount=round_currency(tax["higher"])),
            BandAmount(
                name="Additional Rate",
                rate=bands.additional_rate.rate,
                amount=round_currency(tax["additional"]),
            ),
        ],
        ni_threshold=ni_rates.threshold,
        ni_taxable_pay=round_currency(ni["taxable_pay"]),
        ni_bands=[
            BandAmount(name="Standard Rate", rate=ni_rates.rate, amount=round_currency(ni["standard"])),
            BandAmount(name="Reduced Rate", rate=ni_rates.upper_rate, amount=round_currency(ni["reduced"])),
        ],
        is_cumulative=parsed.is_cumulative,
        adjustments=list(parsed.adjustments),
    )
