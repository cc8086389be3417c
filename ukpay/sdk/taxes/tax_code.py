"""HMRC tax code parsing.

A tax code carries the annual personal allowance (the digits, in tens of
pounds) and the collection method (the letter prefix). Parsing is total:
anything that cannot be read degrades to the standard 1257L allowance with
cumulative collection. No input raises.

Prefix rules are evaluated in order on the first character; the first
match wins:

    C      cumulative
    L      non-cumulative
    W, M   non-cumulative, emergency tax (W1/M1 basis)
    K      cumulative, additional tax (negative allowance codes)
    other  cumulative, no adjustment

The K adjustment is informational only. The engine does not add the
K amount to taxable pay.
"""

import re
from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal
from typing import Optional

DEFAULT_PERSONAL_ALLOWANCE = Decimal("12570")

EMERGENCY_TAX = "emergency_tax"
ADDITIONAL_TAX = "additional_tax"

# (prefixes, is_cumulative, adjustment)
PREFIX_RULES = (
    (("C",), True, None),
    (("L",), False, None),
    (("W", "M"), False, EMERGENCY_TAX),
    (("K",), True, ADDITIONAL_TAX),
)

_DIGIT_RUN = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class ParsedTaxCode:
    """Allowance and collection method decoded from a tax code."""

    personal_allowance: Decimal = DEFAULT_PERSONAL_ALLOWANCE
    is_cumulative: bool = True
    adjustments: tuple = ()

    @property
    def is_emergency(self) -> bool:
        return EMERGENCY_TAX in self.adjustments

    def to_canonical_string(self) -> str:
        """Render a code that parses back to the same allowance and method."""
        # Decimal arithmetic only; int() refuses very long digit strings
        number = f"{(self.personal_allowance / 10).to_integral_value(rounding=ROUND_DOWN):f}"
        if self.is_emergency:
            return f"W{number}"
        if ADDITIONAL_TAX in self.adjustments:
            return f"K{number}"
        if not self.is_cumulative:
            return f"L{number}"
        return f"C{number}L"


def _extract_allowance(code: str) -> Decimal:
    # Longest digit run wins; the first one on ties.
    runs = _DIGIT_RUN.findall(code)
    if not runs:
        return DEFAULT_PERSONAL_ALLOWANCE
    digits = max(runs, key=len)
    return Decimal(digits) * 10


def parse_tax_code(code: Optional[str]) -> ParsedTaxCode:
    """Parse a tax code string.

    Args:
        code: Tax code such as "1257L", "C1257L", "K475" or "W1". Empty or
              None returns the default.

    Returns:
        ParsedTaxCode with annual personal allowance, cumulative flag and
        adjustments
    """
    if not code:
        return ParsedTaxCode()

    code = str(code).strip().upper()
    if not code:
        return ParsedTaxCode()

    personal_allowance = _extract_allowance(code)
    is_cumulative = True
    adjustments = ()

    for prefixes, cumulative, adjustment in PREFIX_RULES:
        if code.startswith(prefixes):
            is_cumulative = cumulative
            if adjustment:
                adjustments = (adjustment,)
            break

    return ParsedTaxCode(
        personal_allowance=personal_allowance,
        is_cumulative=is_cumulative,
        adjustments=adjustments,
    )
