"""Output helpers for the EMI planner.

This module provides simple functions to render schedules, summaries and
scenario comparisons in a tabular text format using ``click.echo``. Amounts are
printed as plain two-decimal numbers.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable

import click

from .data_models import ScheduleEntry


def print_summary(overview: Dict[str, Any]) -> None:
    """Print the overview figures of a scenario in a human-readable format."""
    click.echo("Summary")
    click.echo("-" * 72)
    click.echo(f"Principal financed : {overview['principal']:.2f}")
    click.echo(f"Monthly EMI        : {overview['monthly_emi']:.2f}")
    click.echo(f"Total interest     : {overview['total_interest']:.2f}")
    click.echo(f"Total payable      : {overview['total_payable']:.2f}")
    click.echo(f"Original end date  : {overview['original_end_date'] or 'N/A'}")
    click.echo(f"Completion date    : {overview['completion_date'] or 'N/A'}")
    click.echo(f"Tenure             : {overview['actual_tenure_months']} months")
    if overview.get("months_saved", 0) > 0:
        click.echo(f"Months saved       : {overview['months_saved']}")
    if overview.get("monthly_expenses"):
        click.echo(f"Total monthly cost : {overview['total_monthly_cost']:.2f}")
    if overview.get("initial_costs"):
        click.echo(f"Initial costs      : {overview['initial_costs']:.2f}")
    if not overview.get("fully_repaid", True) and overview.get("actual_tenure_months"):
        click.echo("Warning            : installment never covers the interest; loan not repaid")
    click.echo("-" * 72)


def print_schedule(schedule: Iterable[ScheduleEntry], show_disbursement: bool = False) -> None:
    """Print the amortization schedule as a simple table.

    Parameters
    ----------
    schedule: Iterable[ScheduleEntry]
        The schedule entries to print.
    show_disbursement: bool
        Whether to include the ``Disbursed`` column, useful for staged loans.
    """
    headers = ["Month", "Date", "Payment", "Principal", "Interest", "PartPay"]
    if show_disbursement:
        headers.append("Disbursed")
    headers.extend(["Balance", "Rate", "Notes"])
    click.echo("\t".join(headers))
    for entry in schedule:
        notes = []
        if entry.is_pre_emi:
            notes.append("pre-EMI")
        if entry.is_rate_change:
            notes.append("rate change")
        if entry.has_part_payment:
            notes.append("part payment")
        if entry.has_disbursement:
            notes.append("disbursement")
        row = [
            str(entry.month),
            entry.date.strftime("%Y-%m"),
            f"{entry.payment:.2f}",
            f"{entry.principal:.2f}",
            f"{entry.interest:.2f}",
            f"{entry.part_payment:.2f}",
        ]
        if show_disbursement:
            row.append(f"{entry.disbursement:.2f}")
        row.extend([f"{entry.balance:.2f}", f"{entry.rate:.2f}", ", ".join(notes)])
        click.echo("\t".join(row))


def print_comparison(s1: Dict[str, Any], s2: Dict[str, Any]) -> None:
    """Print a comparison of two scenario overviews side by side.

    The difference column is scenario2 - scenario1, so a negative difference
    means the second scenario is cheaper or shorter.
    """
    click.echo("Comparison")
    click.echo("=" * 72)
    keys = [
        "monthly_emi",
        "total_interest",
        "total_payable",
        "actual_tenure_months",
    ]
    click.echo(f"{'Metric':22s} {'Scenario1':>15s} {'Scenario2':>15s} {'Difference':>15s}")
    for key in keys:
        v1 = s1.get(key) or 0
        v2 = s2.get(key) or 0
        click.echo(f"{key:22s} {v1:15.2f} {v2:15.2f} {v2 - v1:15.2f}")
    click.echo("=" * 72)
