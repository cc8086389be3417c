"""Shared calculation options and output for CLI commands.

Options not given on the command line fall back to the saved form state,
so `uk-pay calc` with no options repeats the last remembered calculation.
"""

import json
import logging

import click
from pydantic import ValidationError as SchemaValidationError
from rich.console import Console

from ukpay.sdk import records
from ukpay.sdk.schemas import DeductionInput, DeductionResult
from ukpay.sdk.deductions import FREQUENCY_MULTIPLIERS, compute_breakdown

from .renderers.breakdown_renderer import render_result

logger = logging.getLogger(__name__)

# Option name -> form state key
OPTION_FIELDS = {
    "rate": "pay_rate",
    "hours": "hours_worked",
    "tax_code": "tax_code",
    "pension": "pension_percent",
    "child_support": "child_support",
    "other": "other_deductions",
}


def calc_options(func):
    """Add pay rate, hours, tax code and deduction options to a command."""
    options = [
        click.option("--rate", "-r", help="Hourly pay rate in pounds"),
        click.option("--hours", help="Hours worked in the week"),
        click.option("--tax-code", "-t", help="HMRC tax code (default: C1257L)"),
        click.option("--pension", "-p", help="Pension contribution percent (default: 3.9)"),
        click.option("--child-support", help="Child support deduction in pounds"),
        click.option("--other", help="Other deductions in pounds"),
        click.option(
            "--frequency",
            type=click.Choice(list(FREQUENCY_MULTIPLIERS)),
            default="weekly",
            help="Pay frequency (default: weekly)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def load_form(store: records.JsonStore) -> dict:
    """Load saved form state, reporting storage failures as CLI errors."""
    try:
        return records.load_form_state(store)
    except OSError as e:
        logger.error(f"Could not read saved form state: {e}")
        raise click.ClickException(f"Could not read store {store.path}: {e}")


def merge_form(form: dict, options: dict) -> dict:
    """Overlay command-line options on the saved form state."""
    merged = dict(form)
    for option, field in OPTION_FIELDS.items():
        if options.get(option) is not None:
            merged[field] = options[option]
    return merged


def build_inputs(form: dict, frequency: str = "weekly") -> DeductionInput:
    """Build DeductionInput from form values (blank amounts count as 0).

    Raises:
        click.BadParameter: If an amount is not a number
    """
    try:
        return DeductionInput(
            pay_rate=form.get("pay_rate") or "0",
            hours_worked=form.get("hours_worked") or "0",
            tax_code=form.get("tax_code") or "",
            pension_percent=form.get("pension_percent") or "0",
            child_support=form.get("child_support") or "0",
            other_deductions=form.get("other_deductions") or "0",
            frequency=frequency,
        )
    except SchemaValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors())
        raise click.BadParameter(f"Not a valid amount: {fields}")


def echo_result(inputs: DeductionInput, result: DeductionResult, output_format: str = "text") -> None:
    """Print a calculation as JSON or as the rich breakdown table."""
    if output_format == "json":
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
        return

    # Breakdown is always on the weekly-equivalent gross
    weekly_gross = result.gross_pay / FREQUENCY_MULTIPLIERS[inputs.frequency]
    breakdown = compute_breakdown(weekly_gross, inputs.tax_code)
    render_result(Console(width=100), inputs, result, breakdown)
