"""Core calculation engine for the EMI planner.

This module implements the financial logic that turns loan terms and dated
events into a month-by-month amortization schedule. It supports floating-rate
changes (preserving either the EMI or the tenure), one-time and recurring part
payments, and staged disbursement with a pre-EMI phase. Results are returned as
a list of ``ScheduleEntry`` objects and reduced to a ``LoanSummary``.

Every function here is pure: identical inputs always produce identical
schedules, and bad business input never raises. Instead the schedule is empty
(no principal or tenure) or cut off at a structural iteration cap (an
installment that cannot cover interest).
"""

from __future__ import annotations

import math
from datetime import date
from typing import Iterable, List, Sequence, Tuple

from .data_models import (
    AdjustmentType,
    Disbursement,
    LoanScenario,
    LoanSummary,
    PartPayment,
    RateChange,
    ScheduleEntry,
)
from .logging_config import get_logger
from .timeline import build_timeline
from .utils import add_months

logger = get_logger(__name__)

# Balances below one currency unit are treated as fully repaid.
SETTLEMENT_THRESHOLD = 1.0


def _monthly_rate(annual_rate: float) -> float:
    return annual_rate / 12 / 100


def calculate_emi(principal: float, annual_rate: float, tenure_months: int) -> float:
    """Return the equated monthly installment for a loan.

    The formula is:

        emi = P * i * (1 + i)^n / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` the monthly interest rate and ``n``
    the number of installments. When the interest rate is zero the EMI is
    simply ``P / n``. A non-positive principal or tenure yields 0.
    """
    if principal <= 0 or tenure_months <= 0:
        return 0.0
    if annual_rate == 0:
        return principal / tenure_months
    rate = _monthly_rate(annual_rate)
    # Same as the closed form divided through by (1 + i)^n, which cannot
    # overflow for very long tenures and tends to the interest-only P * i.
    return principal * rate / -math.expm1(-tenure_months * math.log1p(rate))


def generate_schedule(
    principal: float,
    annual_rate: float,
    tenure_months: int,
    start_date: date,
    rate_changes: Iterable[RateChange] = (),
    part_payments: Iterable[PartPayment] = (),
) -> List[ScheduleEntry]:
    """Amortize a loan disbursed in full at the start date.

    Parameters
    ----------
    principal: float
        Loan amount outstanding at the start of month 0.
    annual_rate: float
        Initial annual interest rate in percent.
    tenure_months: int
        Original repayment term. The EMI is sized against it and the loop is
        capped at twice this many months.
    start_date: date
        First month of the loan.
    rate_changes, part_payments:
        Dated events. Recurring part payments are expanded here.

    Returns
    -------
    List[ScheduleEntry]
        One entry per simulated month, stopping when the balance is repaid.
    """
    timeline = build_timeline(start_date, tenure_months, rate_changes, part_payments)

    schedule: List[ScheduleEntry] = []
    balance = principal
    current_rate = annual_rate
    current_emi = calculate_emi(principal, annual_rate, tenure_months)
    max_months = tenure_months * 2
    month_index = 0

    while balance >= SETTLEMENT_THRESHOLD and month_index < max_months:
        # A rate change applies from the start of its month. Under
        # PRESERVE_TENURE the EMI stays and the term drifts.
        rate_change = timeline.rate_changes.get(month_index)
        if rate_change is not None:
            current_rate = rate_change.new_rate
            if rate_change.adjustment_type == AdjustmentType.PRESERVE_EMI:
                remaining_months = tenure_months - month_index
                current_emi = calculate_emi(balance, current_rate, remaining_months)

        interest = balance * _monthly_rate(current_rate)
        principal_paid = min(current_emi - interest, balance)
        if principal_paid < 0:
            principal_paid = 0.0

        part_payment = timeline.part_payments.get(month_index, 0.0)
        principal_paid += part_payment

        balance -= principal_paid
        if balance < SETTLEMENT_THRESHOLD:
            balance = 0.0

        schedule.append(
            ScheduleEntry(
                month=month_index + 1,
                date=add_months(start_date, month_index),
                payment=current_emi + part_payment,
                principal=principal_paid - part_payment,
                interest=interest,
                part_payment=part_payment,
                disbursement=0.0,
                balance=balance,
                rate=current_rate,
                is_pre_emi=False,
                is_rate_change=rate_change is not None,
                has_part_payment=month_index in timeline.part_payments,
                has_disbursement=False,
            )
        )
        month_index += 1

    return schedule


def generate_schedule_with_disbursements(
    total_loan_amount: float,
    annual_rate: float,
    tenure_months: int,
    start_date: date,
    disbursements: Sequence[Disbursement] = (),
    rate_changes: Iterable[RateChange] = (),
    part_payments: Iterable[PartPayment] = (),
) -> List[ScheduleEntry]:
    """Amortize a loan released in tranches.

    Months before the first tranche form the pre-EMI phase: nothing is
    outstanding and nothing is paid. Each tranche is added to the balance at
    the start of its month, so it accrues interest that same month, and the
    EMI is re-sized as if the cumulative disbursed amount were a fresh loan
    over the *original* tenure (the usual bank convention, not the remaining
    months).

    Without disbursements the whole ``total_loan_amount`` is treated as
    released at the start and ``generate_schedule`` is used.
    """
    if not disbursements:
        return generate_schedule(
            total_loan_amount,
            annual_rate,
            tenure_months,
            start_date,
            rate_changes,
            part_payments,
        )

    timeline = build_timeline(start_date, tenure_months, rate_changes, part_payments, disbursements)

    schedule: List[ScheduleEntry] = []
    disbursed_principal = 0.0
    balance = 0.0
    current_rate = annual_rate
    current_emi = 0.0
    emi_started = False
    # Hard cap: the pre-EMI months plus a full tenure, never more than three
    # tenures whatever the event dates are.
    max_months = min(timeline.last_disbursement_month + tenure_months + 1, tenure_months * 3)
    month_index = 0

    while month_index < max_months:
        # Rate change first so that a tranche released the same month is
        # sized at the new rate.
        rate_change = timeline.rate_changes.get(month_index)
        if rate_change is not None:
            current_rate = rate_change.new_rate
            if emi_started and rate_change.adjustment_type == AdjustmentType.PRESERVE_EMI:
                remaining_months = tenure_months - month_index
                current_emi = calculate_emi(balance, current_rate, remaining_months)

        new_disbursement = timeline.disbursements.get(month_index, 0.0)
        if month_index in timeline.disbursements:
            disbursed_principal += new_disbursement
            balance += new_disbursement
            if disbursed_principal > 0:
                current_emi = calculate_emi(disbursed_principal, current_rate, tenure_months)
                emi_started = True

        interest = balance * _monthly_rate(current_rate)
        principal_paid = 0.0
        payment = 0.0
        if emi_started and balance > 0:
            payment = current_emi
            principal_paid = min(current_emi - interest, balance)
            if principal_paid < 0:
                principal_paid = 0.0
        elif not emi_started:
            # Pre-EMI phase: nothing drawn yet, nothing due.
            interest = 0.0

        part_payment = timeline.part_payments.get(month_index, 0.0)
        principal_paid += part_payment
        payment += part_payment

        balance -= principal_paid
        if balance < SETTLEMENT_THRESHOLD:
            balance = 0.0

        schedule.append(
            ScheduleEntry(
                month=month_index + 1,
                date=add_months(start_date, month_index),
                payment=payment,
                principal=principal_paid - part_payment,
                interest=interest,
                part_payment=part_payment,
                disbursement=new_disbursement,
                balance=balance,
                rate=current_rate,
                is_pre_emi=not emi_started,
                is_rate_change=rate_change is not None,
                has_part_payment=month_index in timeline.part_payments,
                has_disbursement=month_index in timeline.disbursements,
            )
        )
        month_index += 1

        if balance == 0 and emi_started:
            break

    return schedule


def calculate_loan_summary(schedule: Iterable[ScheduleEntry]) -> LoanSummary:
    """Reduce a schedule to its totals. An empty schedule yields zeros."""
    total_interest = 0.0
    total_principal = 0.0
    total_part_payments = 0.0
    months = 0
    for entry in schedule:
        total_interest += entry.interest
        total_principal += entry.principal
        total_part_payments += entry.part_payment
        months += 1
    return LoanSummary(
        total_interest=total_interest,
        total_principal=total_principal,
        total_part_payments=total_part_payments,
        total_payable=total_principal + total_interest + total_part_payments,
        actual_tenure_months=months,
    )


def is_fully_repaid(schedule: Sequence[ScheduleEntry]) -> bool:
    """Whether the schedule ends with the loan repaid.

    A non-empty schedule ending with a positive balance stopped at the
    iteration cap, which means the installment never covered the interest.
    Callers should treat that as input needing validation upstream.
    """
    return bool(schedule) and schedule[-1].balance == 0 and not schedule[-1].is_pre_emi


def compute_schedule(scenario: LoanScenario) -> Tuple[List[ScheduleEntry], LoanSummary]:
    """Compute the amortization schedule and summary for a scenario.

    Returns an empty schedule and a zeroed summary when the financed principal
    or the tenure is not positive.
    """
    terms = scenario.terms
    principal = terms.principal
    tenure_months = terms.tenure_months
    if principal <= 0 or tenure_months <= 0:
        logger.debug("Nothing to amortize: principal=%s tenure_months=%s", principal, tenure_months)
        return [], LoanSummary()

    logger.debug(
        "Simulating principal=%.2f rate=%.4f%% tenure=%d months from %s",
        principal,
        terms.annual_rate,
        tenure_months,
        terms.start_date.isoformat(),
    )
    schedule = generate_schedule_with_disbursements(
        principal,
        terms.annual_rate,
        tenure_months,
        terms.start_date,
        scenario.disbursements,
        scenario.rate_changes,
        scenario.part_payments,
    )
    if schedule and not is_fully_repaid(schedule):
        logger.warning(
            "Schedule stopped at the %d-month cap with %.2f outstanding; "
            "the installment does not cover the interest",
            len(schedule),
            schedule[-1].balance,
        )
    return schedule, calculate_loan_summary(schedule)
