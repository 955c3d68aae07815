"""Headline figures shown above the schedule.

Combines the engine output with the loan's upfront costs and the homeowner's
running expenses into the handful of numbers a borrower looks at first.
"""

from __future__ import annotations

from typing import Any, Dict, Sequence

from .data_models import LoanScenario, LoanSummary, ScheduleEntry
from .engine import is_fully_repaid
from .utils import add_months, format_year_month


def first_installment(schedule: Sequence[ScheduleEntry]) -> float:
    """Cash outflow of the first month in the installment phase."""
    for entry in schedule:
        if not entry.is_pre_emi:
            return entry.payment - entry.part_payment
    return 0.0


def build_overview(
    scenario: LoanScenario, schedule: Sequence[ScheduleEntry], summary: LoanSummary
) -> Dict[str, Any]:
    """Return the overview figures for a simulated scenario.

    Keys: ``principal``, ``monthly_emi``, ``total_interest``,
    ``total_payable``, ``completion_date``, ``original_end_date``,
    ``actual_tenure_months``, ``original_tenure_months``, ``months_saved``,
    ``monthly_expenses``, ``total_monthly_cost``, ``initial_costs`` and
    ``fully_repaid``. Dates are ``YYYY-MM`` strings, or None for an empty
    schedule.
    """
    terms = scenario.terms
    expenses = scenario.expenses
    monthly_emi = first_installment(schedule)
    original_months = terms.tenure_months

    initial_costs = terms.down_payment + terms.loan_insurance + terms.loan_fees + expenses.one_time

    return {
        "principal": terms.principal,
        "monthly_emi": monthly_emi,
        "total_interest": summary.total_interest,
        "total_payable": summary.total_payable,
        "completion_date": format_year_month(schedule[-1].date) if schedule else None,
        "original_end_date": (
            format_year_month(add_months(terms.start_date, original_months - 1)) if original_months > 0 else None
        ),
        "actual_tenure_months": summary.actual_tenure_months,
        "original_tenure_months": original_months,
        "months_saved": original_months - summary.actual_tenure_months if schedule else 0,
        "monthly_expenses": expenses.monthly_total,
        "total_monthly_cost": monthly_emi + expenses.monthly_total,
        "initial_costs": initial_costs,
        "fully_repaid": is_fully_repaid(schedule),
    }
