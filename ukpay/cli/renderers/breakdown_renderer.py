"""Rich renderer for pay calculations and saved-week comparisons.

Transforms SDK models into formatted Rich tables.
"""

from decimal import Decimal
from typing import List, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from ukpay.sdk.schemas import CalculationBreakdown, DeductionInput, DeductionResult
from ukpay.sdk.taxes.tax_code import ParsedTaxCode


def render_result(
    console: Console,
    inputs: DeductionInput,
    result: DeductionResult,
    breakdown: CalculationBreakdown,
) -> None:
    """Render a calculation with its band-by-band breakdown.

    Args:
        console: Rich Console instance
        inputs: Inputs the result was computed from
        result: compute() output
        breakdown: compute_breakdown() output for the same gross and code
    """
    method = "Cumulative" if breakdown.is_cumulative else "Non-cumulative"

    table = Table(
        title=f"Pay Breakdown: {result.tax_code} ({result.frequency})",
        box=box.ROUNDED,
    )
    table.add_column("", style="bold", min_width=32)
    table.add_column("Amount", justify="right", min_width=12)

    table.add_row("Gross Pay", f"[green]{_fmt(result.gross_pay)}[/green]")
    table.add_row("Personal Allowance (Weekly)", f"[cyan]{_fmt(breakdown.weekly_personal_allowance)}[/cyan]")
    table.add_row("Taxable Income", f"[cyan]{_fmt(breakdown.taxable_income)}[/cyan]")
    table.add_row("", "")

    table.add_row(f"Income Tax ({method})", _neg(result.income_tax))
    for band in breakdown.tax_bands:
        if band.amount > 0:
            table.add_row(f"  [dim]{band.name} ({_pct(band.rate)})[/dim]", f"[dim]{_neg(band.amount)}[/dim]")

    table.add_row("National Insurance", _neg(result.national_insurance))
    for band in breakdown.ni_bands:
        if band.amount > 0:
            table.add_row(f"  [dim]{band.name} ({_pct(band.rate)})[/dim]", f"[dim]{_neg(band.amount)}[/dim]")

    table.add_row(f"Pension ({_num(inputs.pension_percent)}%)", _neg(result.pension))
    if result.child_support > 0:
        table.add_row("Child Support", _neg(result.child_support))
    if result.other_deductions > 0:
        table.add_row("Other Deductions", _neg(result.other_deductions))
    table.add_row("", "")

    table.add_row("Total Deductions", f"[red]{_neg(result.total_deductions)}[/red]")
    table.add_row(
        "[bold green]NET PAY[/bold green]",
        f"[bold green]{_fmt(result.net_pay)}[/bold green]",
    )

    console.print(table)

    if breakdown.adjustments:
        console.print(Panel(
            f"[yellow]{', '.join(breakdown.adjustments)} applied[/yellow]",
            title="Note",
            border_style="yellow",
        ))

    if result.income_tax != result.theoretical_income_tax:
        console.print(
            f"[dim]Theoretical banded income tax: {_fmt(result.theoretical_income_tax)}[/dim]"
        )


def render_tax_code(console: Console, code: str, parsed: ParsedTaxCode) -> None:
    """Render a parsed tax code."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("key", style="dim")
    table.add_column("value")

    table.add_row("Personal Allowance", _fmt(parsed.personal_allowance))
    table.add_row("Calculation", "Cumulative" if parsed.is_cumulative else "Non-cumulative")
    table.add_row("Adjustments", ", ".join(parsed.adjustments) or "none")
    table.add_row("Canonical", parsed.to_canonical_string())

    console.print(Panel(table, title=f"Tax Code {code.upper() or '(default)'}", border_style="dim"))


def render_comparison(console: Console, rows: List[dict]) -> None:
    """Render saved weeks as a comparison table, one row per payday."""
    if not rows:
        console.print("[dim]No data to compare yet[/dim]")
        return

    table = Table(title="Saved Weeks", box=box.ROUNDED)
    table.add_column("ID", style="dim")
    table.add_column("Payday")
    table.add_column("Hours", justify="right")
    table.add_column("Gross", justify="right")
    table.add_column("Tax", justify="right")
    table.add_column("NI", justify="right")
    table.add_column("Pension", justify="right")
    table.add_column("Other", justify="right")
    table.add_column("Total Ded.", justify="right")
    table.add_column("Net", justify="right")

    for row in rows:
        table.add_row(
            row["id"],
            row["payday"].strftime("%d/%m/%Y"),
            _num(row["hours_worked"]),
            _fmt(row["gross_pay"]),
            _neg(row["income_tax"]),
            _neg(row["national_insurance"]),
            _neg(row["pension"]),
            _neg(row["other"]),
            _neg(row["total_deductions"]),
            f"[green]{_fmt(row['net_pay'])}[/green]",
        )

    console.print(table)


def _fmt(amount: Optional[Decimal]) -> str:
    """Format currency amount."""
    if amount is None:
        return "-"
    return f"£{amount:,.2f}"


def _neg(amount: Optional[Decimal]) -> str:
    if amount is None:
        return "-"
    return f"-£{amount:,.2f}"


def _pct(rate: Decimal) -> str:
    return f"{_num(rate * 100)}%"


def _num(value: Decimal) -> str:
    """Format a number without trailing zeros (40.00 -> 40, 3.90 -> 3.9)."""
    text = f"{value:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
