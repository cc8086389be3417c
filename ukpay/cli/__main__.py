"""uk-pay CLI - Command-line interface for UK weekly pay calculations."""

import json
import logging

import click
from rich.console import Console

from ukpay import __version__
from ukpay.sdk import records
from ukpay.sdk.deductions import ValidationError, compute
from ukpay.sdk.taxes import parse_tax_code

from .inputs import build_inputs, calc_options, echo_result, load_form, merge_form
from .renderers.breakdown_renderer import render_tax_code
from .settings_commands import settings as settings_group
from .weeks_commands import weeks as weeks_group

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="uk-pay")
def cli():
    """uk-pay - UK weekly pay, income tax and National Insurance.

    Calculates income tax (2024/25 bands), employee NI and pension from
    hourly rate and hours, and keeps up to 20 saved weeks for comparison.

    Data is stored in (in order):

    \b
    1. settings.json 'data_dir' (set with 'uk-pay settings data-dir')
    2. ~/.local/share/uk-pay/ (XDG default)

    Settings are read from UK_PAY_CONFIG_PATH or ~/.config/uk-pay/.
    """
    pass


cli.add_command(weeks_group)
cli.add_command(settings_group)


@cli.command("calc")
@calc_options
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format (default: text)")
@click.option("--remember", is_flag=True, help="Save these inputs as the form defaults.")
def calc(output_format, remember, frequency, **options):
    """Calculate deductions and net pay for a week.

    Options not given fall back to the last remembered inputs.

    \b
    Examples:
      uk-pay calc --rate 12.50 --hours 40
      uk-pay calc --rate 25 --hours 48 --tax-code K475 --pension 5
      uk-pay calc --rate 12.50 --hours 40 --remember
      uk-pay calc --format json
    """
    store = records.JsonStore()
    form = merge_form(load_form(store), options)
    inputs = build_inputs(form, frequency)

    try:
        result = compute(inputs)
    except ValidationError as e:
        raise click.ClickException("Please enter valid pay rate and hours worked.\n  " + "\n  ".join(e.errors))

    if remember:
        try:
            records.save_form_state(form, store)
        except OSError as e:
            # Calculation stands even if the form could not be saved
            logger.error(f"Could not save form state: {e}")

    echo_result(inputs, result, output_format)


@cli.command("tax-code")
@click.argument("code", required=False, default="")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def tax_code(code, output_json):
    """Show how a tax code is read.

    \b
    Examples:
      uk-pay tax-code 1257L
      uk-pay tax-code K475 --json
    """
    parsed = parse_tax_code(code)

    if output_json:
        click.echo(json.dumps({
            "code": code.upper(),
            "personal_allowance": str(parsed.personal_allowance),
            "is_cumulative": parsed.is_cumulative,
            "adjustments": list(parsed.adjustments),
            "canonical": parsed.to_canonical_string(),
        }, indent=2))
        return

    render_tax_code(Console(), code, parsed)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
