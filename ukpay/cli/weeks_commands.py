"""Weeks command group for saving and comparing weekly pay."""

import json
import logging

import click
from rich.console import Console

from ukpay.sdk import records
from ukpay.sdk.deductions import ValidationError, compute

from .inputs import build_inputs, calc_options, echo_result, load_form, merge_form
from .renderers.breakdown_renderer import render_comparison

logger = logging.getLogger(__name__)


def _storage_error(e: OSError) -> click.ClickException:
    logger.error(f"Storage error: {e}")
    return click.ClickException(f"Could not access saved weeks: {e}")


@click.group()
def weeks():
    """Save, list and compare weekly pay records.

    Up to 20 weeks are kept, one per payday. Payday is eleven days after
    the week start (pay in arrears).
    """
    pass


@weeks.command("save")
@click.argument("week_start", required=False)
@calc_options
@click.option("--overwrite", is_flag=True, help="Replace an existing week with the same payday.")
@click.option("--remember", is_flag=True, help="Save these inputs and the week start as the form defaults.")
def weeks_save(week_start, overwrite, remember, frequency, **options):
    """Calculate and save a week starting on WEEK_START (YYYY-MM-DD).

    WEEK_START defaults to the remembered week start, then to this
    week's Monday. Amount options fall back to the remembered inputs.

    \b
    Examples:
      uk-pay weeks save 2024-06-03 --rate 12.50 --hours 40
      uk-pay weeks save 2024-06-03 --hours 45 --overwrite
      uk-pay weeks save 2024-06-03 --rate 12.50 --hours 40 --remember
    """
    store = records.JsonStore()
    form = merge_form(load_form(store), options)
    form["week_start"] = week_start or form.get("week_start") or records.default_week_start().isoformat()
    inputs = build_inputs(form, frequency)

    try:
        record = records.save_week(form["week_start"], inputs, store=store, overwrite=overwrite)
        if remember:
            records.save_form_state(form, store)
    except ValidationError as e:
        raise click.ClickException("\n  ".join(["Cannot save week:"] + e.errors))
    except records.DuplicatePaydayError as e:
        raise click.ClickException(str(e))
    except OSError as e:
        raise _storage_error(e)

    click.echo(
        f"Saved week {record.id}: {record.week_start.strftime('%d/%m/%Y')} - "
        f"{record.week_end.strftime('%d/%m/%Y')}, payday {record.payday.strftime('%d/%m/%Y')}"
    )
    click.echo(f"  Gross £{record.result.gross_pay:,.2f}  Net £{record.result.net_pay:,.2f}")


@weeks.command("list")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def weeks_list(output_json):
    """List saved weeks (most recently saved first)."""
    try:
        saved = records.list_weeks()
    except OSError as e:
        raise _storage_error(e)

    if output_json:
        click.echo(json.dumps([week.model_dump(mode="json") for week in saved], indent=2))
        return

    if not saved:
        click.echo("No saved weeks.")
        return

    for week in saved:
        click.echo(
            f"{week.id}  payday {week.payday.isoformat()}  "
            f"{week.inputs.hours_worked}h @ £{week.inputs.pay_rate}  "
            f"net £{week.result.net_pay:,.2f}"
        )


@weeks.command("show")
@click.argument("record_id")
def weeks_show(record_id):
    """Show a saved week as JSON."""
    try:
        week = records.get_week(record_id)
    except OSError as e:
        raise _storage_error(e)

    if week is None:
        raise click.ClickException(f"No saved week with ID {record_id}")

    click.echo(json.dumps(week.model_dump(mode="json"), indent=2))


@weeks.command("load")
@click.argument("record_id")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format (default: text)")
def weeks_load(record_id, output_format):
    """Load a saved week into the form and recalculate it.

    The week's inputs and start date become the remembered inputs, so
    'uk-pay calc' and 'uk-pay weeks save --overwrite' start from them.

    \b
    Examples:
      uk-pay weeks load 3f2a9c1d
      uk-pay weeks save --hours 45 --overwrite
    """
    try:
        week = records.load_week_into_form(record_id)
    except OSError as e:
        raise _storage_error(e)

    if week is None:
        raise click.ClickException(f"No saved week with ID {record_id}")

    try:
        result = compute(week.inputs)
    except ValidationError as e:
        raise click.ClickException("\n  ".join(["Cannot recalculate week:"] + e.errors))

    if output_format == "text":
        click.echo(f"Loaded week data for payday: {week.payday.strftime('%d/%m/%Y')}")
    echo_result(week.inputs, result, output_format)


@weeks.command("delete")
@click.argument("record_id")
def weeks_delete(record_id):
    """Delete a saved week."""
    try:
        removed = records.delete_week(record_id)
    except OSError as e:
        raise _storage_error(e)

    if not removed:
        raise click.ClickException(f"No saved week with ID {record_id}")
    click.echo(f"Deleted week {record_id}")


@weeks.command("compare")
@click.option("--format", "output_format", type=click.Choice(["table", "json"]), default="table",
              help="Output format (default: table)")
def weeks_compare(output_format):
    """Compare saved weeks, newest payday first.

    Every week is recalculated from its saved inputs with the current
    rates, so the figures may differ from when it was saved.
    """
    try:
        rows = records.comparison_rows()
    except OSError as e:
        raise _storage_error(e)

    if output_format == "json":
        click.echo(json.dumps(rows, indent=2, default=str))
        return

    render_comparison(Console(width=140), rows)
