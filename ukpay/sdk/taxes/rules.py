"""Tax rules loading.

Rate tables live beside this module in tables/{tax_year}.yaml and are
validated against the TaxRules schema on first load. Only one tax year is
shipped; the year argument exists so a second table can be dropped in
without touching callers.
"""

import logging
from functools import lru_cache
from pathlib import Path

import yaml

from .schemas import TaxRules

logger = logging.getLogger(__name__)

TABLES_DIR = Path(__file__).parent / "tables"
DEFAULT_TAX_YEAR = "2024-25"


class TaxRulesNotFoundError(Exception):
    """Raised when no rate table exists for a tax year."""
    pass


def available_tax_years() -> list[str]:
    """List tax years that have a rate table, oldest first."""
    return sorted(p.stem for p in TABLES_DIR.glob("*.yaml"))


@lru_cache(maxsize=None)
def load_tax_rules(tax_year: str = DEFAULT_TAX_YEAR) -> TaxRules:
    """Load and validate the rate table for a tax year.

    Args:
        tax_year: Tax year key, e.g. "2024-25"

    Returns:
        Validated TaxRules (cached per process, treat as read-only)

    Raises:
        TaxRulesNotFoundError: If no table exists for the year
        pydantic.ValidationError: If the table is malformed
    """
    rules_path = TABLES_DIR / f"{tax_year}.yaml"
    if not rules_path.exists():
        raise TaxRulesNotFoundError(
            f"No tax rules for {tax_year}. Available: {', '.join(available_tax_years()) or 'none'}"
        )

    with open(rules_path, "r") as f:
        raw = yaml.safe_load(f)

    logger.debug(f"Loaded tax rules from {rules_path}")
    return TaxRules.model_validate(raw)
