"""Data models for the EMI planner.

This module defines dataclasses representing the entities used by the
planner: the loan terms, the three kinds of dated events (rate changes, part
payments and disbursements), individual schedule entries and the aggregate
summary. Inputs are frozen so a simulation run can never mutate them.
"""

from dataclasses import asdict, dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Tuple

from .utils import format_year_month

# Schedules can run to three times the tenure and their dates must stay
# below year 10000.
MAX_TENURE_YEARS = 100


class AdjustmentType(str, Enum):
    """How the bank reacts to a floating-rate change.

    ``PRESERVE_TENURE`` keeps the installment fixed and lets the repayment
    term drift. ``PRESERVE_EMI`` (shown as "adjust EMI") re-amortizes the
    outstanding balance over the months left in the original tenure.
    """

    PRESERVE_EMI = "emi"
    PRESERVE_TENURE = "tenure"


@dataclass(frozen=True)
class LoanTerms:
    """Terms of a home loan as entered by the borrower.

    The financed principal is ``home_value - down_payment``. ``loan_insurance``
    and ``loan_fees`` are upfront costs; they are carried for the cost
    overview but play no part in amortization.
    """

    home_value: float
    down_payment: float
    annual_rate: float  # annual nominal interest rate in percent
    tenure_years: int
    start_date: date  # first month of the loan, day fixed to the 1st
    loan_insurance: float = 0.0
    loan_fees: float = 0.0

    @property
    def principal(self) -> float:
        return self.home_value - self.down_payment

    @property
    def tenure_months(self) -> int:
        return self.tenure_years * 12


@dataclass(frozen=True)
class RateChange:
    """A floating-rate reset taking effect from the month of ``date``."""

    date: date
    new_rate: float
    adjustment_type: AdjustmentType = AdjustmentType.PRESERVE_TENURE


@dataclass(frozen=True)
class PartPayment:
    """An extra principal repayment.

    Attributes
    ----------
    date: date
        Month in which the payment is made.
    amount: float
        Amount applied to the principal on top of the regular installment.
    recurring: bool
        When True the payment repeats every year in the same calendar month
        until the end of the loan tenure.
    """

    date: date
    amount: float
    recurring: bool = False


@dataclass(frozen=True)
class Disbursement:
    """One tranche of a staged loan released by the bank.

    ``pre_emi`` is the optional interest-only figure quoted by the bank for
    the tranche. It is stored with the scenario but the simulator does not
    use it: before the first tranche nothing is owed, and from the first
    tranche onward full EMIs are charged.
    """

    date: date
    amount: float
    pre_emi: Optional[float] = None


@dataclass(frozen=True)
class HomeownerExpenses:
    """Running and one-off costs of owning the home, outside the loan."""

    one_time: float = 0.0  # registration, stamp duty, legal fees
    property_tax_annual: float = 0.0
    home_insurance_annual: float = 0.0
    maintenance_monthly: float = 0.0

    @property
    def monthly_total(self) -> float:
        return self.maintenance_monthly + (self.property_tax_annual + self.home_insurance_annual) / 12


@dataclass(frozen=True)
class LoanScenario:
    """Everything needed to simulate one what-if scenario."""

    terms: LoanTerms
    rate_changes: Tuple[RateChange, ...] = ()
    part_payments: Tuple[PartPayment, ...] = ()
    disbursements: Tuple[Disbursement, ...] = ()
    expenses: HomeownerExpenses = field(default_factory=HomeownerExpenses)

    def __post_init__(self):
        # Callers may pass lists; store tuples so the scenario stays immutable.
        for name in ("rate_changes", "part_payments", "disbursements"):
            object.__setattr__(self, name, tuple(getattr(self, name)))


@dataclass(frozen=True)
class ScheduleEntry:
    """An entry in the amortization schedule.

    Each entry corresponds to one month. ``payment`` is the full cash outflow
    for the month (installment plus any part payment) while ``principal``
    excludes the part payment. During the pre-EMI phase ``payment`` and
    ``interest`` are zero.
    """

    month: int
    date: date
    payment: float
    principal: float
    interest: float
    part_payment: float
    disbursement: float
    balance: float
    rate: float
    is_pre_emi: bool = False
    is_rate_change: bool = False
    has_part_payment: bool = False
    has_disbursement: bool = False

    def to_dict(self) -> dict:
        data = asdict(self)
        data["date"] = format_year_month(self.date)
        return data


@dataclass(frozen=True)
class LoanSummary:
    """Totals over a schedule."""

    total_interest: float = 0.0
    total_principal: float = 0.0
    total_part_payments: float = 0.0
    total_payable: float = 0.0
    actual_tenure_months: int = 0

    def to_dict(self) -> dict:
        return asdict(self)
