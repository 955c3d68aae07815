"""Command-line interface for the EMI planner.

This module uses the ``click`` library to implement a multi-command interface.
Users can compute full amortization schedules, view summaries, compare two
scenarios and size their options after a rate change. Schedules can be printed
to the terminal or exported to JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
import math
import shlex
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import click

from .data_models import (
    MAX_TENURE_YEARS,
    AdjustmentType,
    Disbursement,
    HomeownerExpenses,
    LoanScenario,
    LoanSummary,
    LoanTerms,
    PartPayment,
    RateChange,
    ScheduleEntry,
)
from .engine import compute_schedule
from .exceptions import InputError
from .formatter import print_comparison, print_schedule, print_summary
from .logging_config import configure_logging
from .overview import build_overview
from .serialization import scenario_to_dict, schedule_to_dicts
from .solvers import DEFAULT_TOLERANCE, emi_delta_for_tenure_preservation, part_payment_for_emi_preservation
from .utils import parse_amount, parse_rate, parse_year_month

MAX_PRINTED_ROWS = 120


def _parse_month(value: str):
    try:
        return parse_year_month(value)
    except InputError as exc:
        raise click.BadParameter(str(exc))


def _parse_amount(value: str) -> float:
    try:
        return parse_amount(value)
    except InputError as exc:
        raise click.BadParameter(str(exc))


def parse_rate_change_strings(values: Tuple[str, ...]) -> List[RateChange]:
    rate_changes: List[RateChange] = []
    for item in values:
        parts = item.split(":")
        if len(parts) not in (2, 3):
            raise click.BadParameter(f"Rate change must be in YYYY-MM:RATE[:emi|tenure] format; got {item}")
        try:
            new_rate = parse_rate(parts[1])
        except InputError as exc:
            raise click.BadParameter(str(exc))
        typ = parts[2].lower() if len(parts) == 3 else AdjustmentType.PRESERVE_TENURE.value
        if typ not in ("emi", "tenure"):
            raise click.BadParameter(f"Rate change type must be 'emi' or 'tenure'; got {typ}")
        rate_changes.append(
            RateChange(date=_parse_month(parts[0]), new_rate=new_rate, adjustment_type=AdjustmentType(typ))
        )
    return rate_changes


def parse_part_payment_strings(values: Tuple[str, ...]) -> List[PartPayment]:
    part_payments: List[PartPayment] = []
    for item in values:
        parts = item.split(":")
        if len(parts) not in (2, 3):
            raise click.BadParameter(f"Part payment must be in YYYY-MM:AMOUNT[:recurring] format; got {item}")
        recurring = False
        if len(parts) == 3:
            if parts[2].lower() not in ("recurring", "once"):
                raise click.BadParameter(f"Part payment frequency must be 'recurring' or 'once'; got {parts[2]}")
            recurring = parts[2].lower() == "recurring"
        amount = _parse_amount(parts[1])
        if amount <= 0:
            raise click.BadParameter(f"Part payment amount must be positive; got {parts[1]}")
        part_payments.append(PartPayment(date=_parse_month(parts[0]), amount=amount, recurring=recurring))
    return part_payments


def parse_disbursement_strings(values: Tuple[str, ...], principal: float) -> List[Disbursement]:
    disbursements: List[Disbursement] = []
    for item in values:
        parts = item.split(":")
        if len(parts) not in (2, 3):
            raise click.BadParameter(f"Disbursement must be in YYYY-MM:AMOUNT[:PREEMI] format; got {item}")
        amount = _parse_amount(parts[1])
        if amount <= 0:
            raise click.BadParameter(f"Disbursement amount must be positive; got {parts[1]}")
        pre_emi = _parse_amount(parts[2]) if len(parts) == 3 and parts[2] else None
        disbursements.append(Disbursement(date=_parse_month(parts[0]), amount=amount, pre_emi=pre_emi))
    total = sum(d.amount for d in disbursements)
    if total > principal:
        raise click.BadParameter(f"Total disbursements ({total:.2f}) cannot exceed the loan amount ({principal:.2f})")
    return disbursements


def build_scenario_from_options(
    home_value: str,
    down_payment: Optional[str],
    rate: float,
    tenure_years: int,
    start_date: str,
    rate_change: Tuple[str, ...] = (),
    part_payment: Tuple[str, ...] = (),
    disbursement: Tuple[str, ...] = (),
    insurance: Optional[str] = None,
    fees: Optional[str] = None,
    one_time_expenses: Optional[str] = None,
    property_tax: Optional[str] = None,
    home_insurance: Optional[str] = None,
    maintenance: Optional[str] = None,
) -> LoanScenario:
    if not math.isfinite(rate) or rate < 0:
        raise click.BadParameter("Interest rate must be a non-negative number")
    if tenure_years > MAX_TENURE_YEARS:
        raise click.BadParameter(f"Tenure cannot exceed {MAX_TENURE_YEARS} years")
    terms = LoanTerms(
        home_value=_parse_amount(home_value),
        down_payment=_parse_amount(down_payment) if down_payment else 0.0,
        annual_rate=rate,
        tenure_years=tenure_years,
        start_date=_parse_month(start_date),
        loan_insurance=_parse_amount(insurance) if insurance else 0.0,
        loan_fees=_parse_amount(fees) if fees else 0.0,
    )
    expenses = HomeownerExpenses(
        one_time=_parse_amount(one_time_expenses) if one_time_expenses else 0.0,
        property_tax_annual=_parse_amount(property_tax) if property_tax else 0.0,
        home_insurance_annual=_parse_amount(home_insurance) if home_insurance else 0.0,
        maintenance_monthly=_parse_amount(maintenance) if maintenance else 0.0,
    )
    return LoanScenario(
        terms=terms,
        rate_changes=parse_rate_change_strings(tuple(rate_change)),
        part_payments=parse_part_payment_strings(tuple(part_payment)),
        disbursements=parse_disbursement_strings(tuple(disbursement), terms.principal),
        expenses=expenses,
    )


def export_to_json(
    path: Path, scenario: LoanScenario, schedule: List[ScheduleEntry], summary: LoanSummary, overview: Dict[str, Any]
) -> None:
    """Export inputs, summary and schedule to a JSON file."""
    data = {
        "scenario": scenario_to_dict(scenario),
        "summary": summary.to_dict(),
        "overview": overview,
        "schedule": schedule_to_dicts(schedule),
    }
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


CSV_COLUMNS = [
    "month",
    "date",
    "payment",
    "principal",
    "interest",
    "part_payment",
    "disbursement",
    "balance",
    "rate",
    "is_pre_emi",
    "is_rate_change",
    "has_part_payment",
    "has_disbursement",
]


def export_to_csv(path: Path, schedule: List[ScheduleEntry]) -> None:
    """Export the schedule to a CSV file."""
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS)
        writer.writeheader()
        for row in schedule_to_dicts(schedule):
            writer.writerow(row)


def scenario_options(func: Callable) -> Callable:
    """Attach the loan and event options shared by ``schedule`` and ``summary``."""
    options = [
        click.option("--home-value", "-H", "home_value", required=True, help="Property value (accepts k, l, cr, m suffixes)"),
        click.option("--down-payment", "-d", "down_payment", help="Down payment amount"),
        click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)"),
        click.option("--tenure-years", "-t", "tenure_years", required=True, type=int, help="Loan tenure in years"),
        click.option("--start-date", "-s", "start_date", required=True, help="First loan month (YYYY-MM)"),
        click.option("--rate-change", "rate_change", multiple=True, help="Rate change in YYYY-MM:RATE[:emi|tenure] format"),
        click.option("--part-payment", "part_payment", multiple=True, help="Part payment in YYYY-MM:AMOUNT[:recurring] format"),
        click.option("--disbursement", "disbursement", multiple=True, help="Tranche in YYYY-MM:AMOUNT[:PREEMI] format"),
        click.option("--insurance", "insurance", help="Upfront loan insurance premium"),
        click.option("--fees", "fees", help="Upfront loan processing fees"),
        click.option("--one-time-expenses", "one_time_expenses", help="Registration, stamp duty, legal fees"),
        click.option("--property-tax", "property_tax", help="Annual property tax"),
        click.option("--home-insurance", "home_insurance", help="Annual home insurance premium"),
        click.option("--maintenance", "maintenance", help="Monthly maintenance charges"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Logging level (defaults to EMI_CALC_LOG_LEVEL or WARNING)",
)
def cli(log_level: Optional[str]) -> None:
    """A home-loan EMI planner supporting rate changes, part payments and staged disbursement."""
    if log_level:
        configure_logging(level=log_level)


@cli.command()
@scenario_options
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def schedule(output: Optional[str], **options: Any) -> None:
    """Compute and print the full amortization schedule."""
    scenario = build_scenario_from_options(**options)
    schedule_entries, loan_summary = compute_schedule(scenario)
    overview = build_overview(scenario, schedule_entries, loan_summary)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, scenario, schedule_entries, loan_summary, overview)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, schedule_entries)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        click.echo(f"Schedule exported to {path}")
        return

    print_summary(overview)
    show_disbursement = bool(scenario.disbursements)
    if len(schedule_entries) > MAX_PRINTED_ROWS:
        click.echo(f"Schedule has {len(schedule_entries)} rows; showing first {MAX_PRINTED_ROWS} rows.")
        print_schedule(schedule_entries[:MAX_PRINTED_ROWS], show_disbursement)
    else:
        print_schedule(schedule_entries, show_disbursement)


@cli.command()
@scenario_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(output: Optional[str], **options: Any) -> None:
    """Compute and print only the summary figures for a loan."""
    scenario = build_scenario_from_options(**options)
    schedule_entries, loan_summary = compute_schedule(scenario)
    overview = build_overview(scenario, schedule_entries, loan_summary)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"summary": loan_summary.to_dict(), "overview": overview}, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(overview)


# Maps scenario option tokens to build_scenario_from_options parameters.
SCENARIO_TOKENS = {
    "-H": "home_value",
    "--home-value": "home_value",
    "-d": "down_payment",
    "--down-payment": "down_payment",
    "-r": "rate",
    "--rate": "rate",
    "-t": "tenure_years",
    "--tenure-years": "tenure_years",
    "-s": "start_date",
    "--start-date": "start_date",
    "--rate-change": "rate_change",
    "--part-payment": "part_payment",
    "--disbursement": "disbursement",
    "--insurance": "insurance",
    "--fees": "fees",
    "--one-time-expenses": "one_time_expenses",
    "--property-tax": "property_tax",
    "--home-insurance": "home_insurance",
    "--maintenance": "maintenance",
}
MULTI_VALUE_PARAMS = ("rate_change", "part_payment", "disbursement")


def parse_scenario_opts(opts: str) -> Dict[str, Any]:
    """Convert a quoted option string into ``build_scenario_from_options`` kwargs."""
    tokens = shlex.split(opts)
    params: Dict[str, Any] = {name: [] for name in MULTI_VALUE_PARAMS}
    i = 0
    while i < len(tokens):
        name = SCENARIO_TOKENS.get(tokens[i])
        if name is None:
            raise click.BadParameter(f"Unknown option in scenario: {tokens[i]}")
        if i + 1 >= len(tokens):
            raise click.BadParameter(f"Option {tokens[i]} in scenario needs a value")
        value = tokens[i + 1]
        try:
            if name in MULTI_VALUE_PARAMS:
                params[name].append(value)
            elif name == "rate":
                params[name] = float(value)
            elif name == "tenure_years":
                params[name] = int(value)
            else:
                params[name] = value
        except ValueError:
            raise click.BadParameter(f"Invalid value for {tokens[i]} in scenario: {value}")
        i += 2
    for required in ("home_value", "rate", "tenure_years", "start_date"):
        if params.get(required) is None:
            raise click.BadParameter(f"Scenario missing required option {required}")
    for name in MULTI_VALUE_PARAMS:
        params[name] = tuple(params[name])
    return params


@cli.command()
@click.option("--scenario1", "scenario1", required=True, help="First scenario options quoted string")
@click.option("--scenario2", "scenario2", required=True, help="Second scenario options quoted string")
def compare(scenario1: str, scenario2: str) -> None:
    """Compare two loan scenarios.

    Scenarios are provided as quoted option strings, for example:

        emi-calc compare --scenario1 "-H 50l -d 10l -r 8.5 -t 20 -s 2025-01" \\
            --scenario2 "-H 50l -d 10l -r 8.5 -t 20 -s 2025-01 --part-payment 2026-03:1l:recurring"
    """
    overviews = []
    for opts in (scenario1, scenario2):
        scenario = build_scenario_from_options(**parse_scenario_opts(opts))
        schedule_entries, loan_summary = compute_schedule(scenario)
        overviews.append(build_overview(scenario, schedule_entries, loan_summary))
    print_comparison(overviews[0], overviews[1])


@cli.group()
def solve() -> None:
    """What-if calculators for a floating-rate change."""


@solve.command("emi-delta")
@click.option("--balance", "-b", required=True, help="Outstanding principal")
@click.option("--old-rate", required=True, type=float, help="Current annual rate (percent)")
@click.option("--new-rate", required=True, type=float, help="New annual rate (percent)")
@click.option("--remaining-months", "-m", required=True, type=int, help="Months left in the tenure")
def emi_delta(balance: str, old_rate: float, new_rate: float, remaining_months: int) -> None:
    """EMI change needed to keep the remaining tenure after a rate change."""
    delta = emi_delta_for_tenure_preservation(_parse_amount(balance), old_rate, new_rate, remaining_months)
    click.echo(f"EMI change to keep tenure: {delta:+.2f}")


@solve.command("part-payment")
@click.option("--balance", "-b", required=True, help="Outstanding principal")
@click.option("--target-emi", "-e", required=True, help="EMI to keep paying")
@click.option("--new-rate", required=True, type=float, help="New annual rate (percent)")
@click.option("--remaining-months", "-m", required=True, type=int, help="Months left in the tenure")
@click.option("--tolerance", type=float, default=DEFAULT_TOLERANCE, show_default=True, help="Search precision")
def part_payment(balance: str, target_emi: str, new_rate: float, remaining_months: int, tolerance: float) -> None:
    """Part payment needed to keep the current EMI after a rate change."""
    if tolerance <= 0:
        raise click.BadParameter("Tolerance must be positive")
    amount = part_payment_for_emi_preservation(
        _parse_amount(balance), _parse_amount(target_emi), new_rate, remaining_months, tolerance
    )
    click.echo(f"Part payment to keep EMI: {amount:.2f}")


if __name__ == "__main__":
    cli()
