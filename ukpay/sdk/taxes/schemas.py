"""Pydantic schemas for tax rules validation.

These schemas validate the taxes/tables/*.yaml files and provide typed access
to the income tax bands and National Insurance thresholds for a tax year.
"""

from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator


def to_decimal(value: Any) -> Any:
    """Convert numeric input to Decimal without binary float noise.

    Floats go through str() so 0.2 becomes Decimal("0.2"), not
    Decimal("0.200000000000000011102230246251565404236316680908203125").
    Anything else is passed through for pydantic to validate.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, int):
        return Decimal(value)
    return value


DecimalValue = Annotated[Decimal, BeforeValidator(to_decimal)]


class IncomeTaxBand(BaseModel):
    """Single income tax band."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    threshold: DecimalValue = Field(..., ge=0, description="Annual band boundary above the personal allowance")
    rate: DecimalValue = Field(..., ge=0, le=1, description="Marginal rate as decimal")


class IncomeTaxRules(BaseModel):
    """Basic, higher and additional rate bands."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    basic_rate: IncomeTaxBand
    higher_rate: IncomeTaxBand
    additional_rate: IncomeTaxBand


class NIRates(BaseModel):
    """Employee Class 1 National Insurance for one pay frequency."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    threshold: DecimalValue = Field(..., ge=0, description="Primary threshold per period")
    rate: DecimalValue = Field(..., ge=0, le=1, description="Main rate")
    upper_threshold: DecimalValue = Field(..., ge=0, description="Upper earnings limit per period")
    upper_rate: DecimalValue = Field(..., ge=0, le=1, description="Rate above the upper earnings limit")


class TaxRules(BaseModel):
    """Complete rate table for a tax year."""
    model_config = ConfigDict(extra="ignore", frozen=True)  # Allow unknown fields for forward compat

    tax_year: str
    personal_allowance: DecimalValue = Field(..., ge=0, description="Standard annual personal allowance")
    income_tax: IncomeTaxRules
    national_insurance: dict[str, NIRates]

    @field_validator("national_insurance")
    @classmethod
    def require_weekly(cls, value: dict) -> dict:
        if "weekly" not in value:
            raise ValueError("national_insurance must define weekly rates")
        return value

    def ni_rates(self, frequency: str) -> NIRates:
        """Get NI rates for a frequency, falling back to weekly."""
        return self.national_insurance.get(frequency, self.national_insurance["weekly"])
