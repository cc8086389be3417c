"""Pydantic schemas for uk-pay data validation.

All schemas use extra='forbid' to reject unknown fields, ensuring
typos in stored records cause clear errors rather than silent ignoring.
Currency amounts are Decimal and serialize to strings in JSON mode.
"""

from datetime import date
from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .taxes.schemas import DecimalValue
from .taxes.withholding import round_currency


DEFAULT_TAX_CODE = "C1257L"


# =============================================================================
# Calculation input/output
# =============================================================================


class DeductionInput(BaseModel):
    """Inputs for one pay calculation.

    Validation of pay rate and hours happens in compute() so callers get a
    ValidationError listing every problem at once.
    """

    model_config = ConfigDict(extra="forbid")

    pay_rate: DecimalValue = Field(..., description="Hourly pay rate")
    hours_worked: DecimalValue = Field(..., description="Hours worked in the week")
    tax_code: str = Field(default=DEFAULT_TAX_CODE, description="HMRC tax code")
    frequency: str = Field(
        default="weekly",
        description="Pay frequency: weekly, fortnightly, monthly or yearly",
    )
    pension_percent: DecimalValue = Field(default=Decimal("0"), description="Pension contribution %")
    child_support: DecimalValue = Field(default=Decimal("0"), description="Fixed child support deduction")
    other_deductions: DecimalValue = Field(default=Decimal("0"), description="Other fixed deductions")

    @property
    def gross_pay(self) -> Decimal:
        """Pay rate times hours, rounded to pence."""
        return round_currency(self.pay_rate * self.hours_worked)


class DeductionResult(BaseModel):
    """Deductions and net pay for one calculation. Internally coherent."""

    model_config = ConfigDict(extra="forbid")

    gross_pay: DecimalValue
    income_tax: DecimalValue
    national_insurance: DecimalValue
    pension: DecimalValue
    child_support: DecimalValue
    other_deductions: DecimalValue
    total_deductions: DecimalValue
    net_pay: DecimalValue
    theoretical_income_tax: DecimalValue = Field(
        ..., description="Banded tax with no emergency-tax override"
    )
    theoretical_national_insurance: DecimalValue
    tax_code: str
    frequency: str

    @model_validator(mode="after")
    def check_coherence(self) -> "DeductionResult":
        """Totals must add up exactly; amounts are already in pence."""
        errors = []

        expected_total = (
            self.income_tax + self.national_insurance + self.pension
            + self.child_support + self.other_deductions
        )
        if self.total_deductions != expected_total:
            errors.append(
                f"total_deductions ({self.total_deductions}) != "
                f"sum of deductions ({expected_total})"
            )

        expected_net = self.gross_pay - self.total_deductions
        if self.net_pay != expected_net:
            errors.append(
                f"net_pay ({self.net_pay}) != gross - total_deductions ({expected_net})"
            )

        if errors:
            raise ValueError("; ".join(errors))

        return self


class BandAmount(BaseModel):
    """Tax or NI charged in one band."""

    model_config = ConfigDict(extra="forbid")

    name: str
    rate: DecimalValue
    amount: DecimalValue


class CalculationBreakdown(BaseModel):
    """Band-by-band detail behind an income tax and NI figure (weekly basis)."""

    model_config = ConfigDict(extra="forbid")

    weekly_personal_allowance: DecimalValue
    taxable_income: DecimalValue
    tax_bands: List[BandAmount]
    ni_threshold: DecimalValue
    ni_taxable_pay: DecimalValue
    ni_bands: List[BandAmount]
    is_cumulative: bool
    adjustments: List[str] = Field(default_factory=list)


# =============================================================================
# Stored weekly records
# =============================================================================


class WeeklyRecord(BaseModel):
    """A saved week: the inputs, the computed result and the pay dates."""

    model_config = ConfigDict(extra="forbid")

    id: str
    week_start: date
    week_end: date
    payday: date
    inputs: DeductionInput
    result: DeductionResult
    timestamp: str = Field(..., description="ISO timestamp of when the week was saved")
