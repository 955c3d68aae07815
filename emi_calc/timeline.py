"""Event timeline for the amortization engine.

Rate changes, part payments and disbursements are entered against calendar
months. The simulators work on integer month offsets from the loan start, so
this module turns the dated records into offset lookups and expands recurring
part payments into one discrete payment per year.

Collision policy: when two rate changes or two part payments fall in the same
month only the last one (in input order) is kept. Disbursements in the same
month are summed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional

from .data_models import Disbursement, PartPayment, RateChange
from .logging_config import get_logger
from .utils import months_between

logger = get_logger(__name__)


@dataclass(frozen=True)
class EventTimeline:
    """Events of one scenario keyed by month offset from the loan start."""

    rate_changes: Dict[int, RateChange] = field(default_factory=dict)
    part_payments: Dict[int, float] = field(default_factory=dict)
    disbursements: Dict[int, float] = field(default_factory=dict)

    @property
    def last_disbursement_month(self) -> Optional[int]:
        if not self.disbursements:
            return None
        return max(self.disbursements)


def expand_recurring_part_payments(
    part_payments: Iterable[PartPayment], start_date: date, tenure_months: int
) -> List[PartPayment]:
    """Replace each recurring part payment with yearly one-time payments.

    A recurring payment dated (Y, M) yields payments at (Y, M), (Y+1, M), ...
    up to and including year ``start_date.year + ceil(tenure_months / 12)``.
    Occurrences before ``start_date`` are dropped. One-time payments are
    returned unchanged and the input order is preserved.
    """
    end_year = start_date.year + math.ceil(tenure_months / 12)
    expanded: List[PartPayment] = []
    for payment in part_payments:
        if not payment.recurring:
            expanded.append(payment)
            continue
        for year in range(payment.date.year, end_year + 1):
            occurrence = date(year, payment.date.month, 1)
            if occurrence >= start_date:
                expanded.append(PartPayment(date=occurrence, amount=payment.amount))
    return expanded


def index_rate_changes(start_date: date, rate_changes: Iterable[RateChange]) -> Dict[int, RateChange]:
    mapping: Dict[int, RateChange] = {}
    for rc in rate_changes:
        mapping[months_between(start_date, rc.date)] = rc
    return mapping


def index_part_payments(start_date: date, part_payments: Iterable[PartPayment]) -> Dict[int, float]:
    mapping: Dict[int, float] = {}
    for pp in part_payments:
        mapping[months_between(start_date, pp.date)] = pp.amount
    return mapping


def index_disbursements(start_date: date, disbursements: Iterable[Disbursement]) -> Dict[int, float]:
    mapping: Dict[int, float] = {}
    for d in disbursements:
        offset = months_between(start_date, d.date)
        mapping[offset] = mapping.get(offset, 0.0) + d.amount
    return mapping


def build_timeline(
    start_date: date,
    tenure_months: int,
    rate_changes: Iterable[RateChange] = (),
    part_payments: Iterable[PartPayment] = (),
    disbursements: Iterable[Disbursement] = (),
) -> EventTimeline:
    """Index all events of a scenario by month offset.

    Recurring part payments are expanded first, so the part payment lookup
    only ever holds one-time amounts.
    """
    expanded = expand_recurring_part_payments(part_payments, start_date, tenure_months)
    timeline = EventTimeline(
        rate_changes=index_rate_changes(start_date, rate_changes),
        part_payments=index_part_payments(start_date, expanded),
        disbursements=index_disbursements(start_date, disbursements),
    )
    logger.debug(
        "Timeline built: %d rate change(s), %d part payment month(s), %d disbursement month(s)",
        len(timeline.rate_changes),
        len(timeline.part_payments),
        len(timeline.disbursements),
    )
    return timeline
