"""What-if helpers for a floating-rate change.

When the bank resets the rate a borrower can either accept a different EMI
to keep the remaining tenure, or make a part payment so that the old EMI still
clears the loan in the remaining months. These calculators size both options.
They are advisory only; the simulators do not call them.
"""

from __future__ import annotations

from .engine import calculate_emi
from .logging_config import get_logger

logger = get_logger(__name__)

# Width of the search interval, in currency units, at which the part payment
# search stops.
DEFAULT_TOLERANCE = 1.0


def emi_delta_for_tenure_preservation(
    balance: float, old_rate: float, new_rate: float, remaining_months: int
) -> float:
    """EMI change needed to keep ``remaining_months`` after a rate change.

    Positive when the rate goes up.
    """
    old_emi = calculate_emi(balance, old_rate, remaining_months)
    new_emi = calculate_emi(balance, new_rate, remaining_months)
    return new_emi - old_emi


def part_payment_for_emi_preservation(
    balance: float,
    target_emi: float,
    new_rate: float,
    remaining_months: int,
    tolerance: float = DEFAULT_TOLERANCE,
) -> float:
    """Smallest lump sum that keeps the EMI at ``target_emi`` after a rate change.

    Bisects the principal reduction ``x`` over ``[0, balance]`` looking for the
    smallest ``x`` with ``calculate_emi(balance - x, new_rate, remaining_months)
    <= target_emi``. The EMI strictly decreases as the principal shrinks, so the
    search is monotone. It stops once the interval is narrower than
    ``tolerance`` and returns the upper end, which always satisfies the target.
    Returns 0 when the current balance already meets the target.
    """
    if tolerance <= 0:
        raise ValueError("tolerance must be positive")
    if calculate_emi(balance, new_rate, remaining_months) <= target_emi:
        return 0.0

    low = 0.0
    high = balance
    iterations = 0
    while high - low > tolerance:
        mid = (low + high) / 2
        if calculate_emi(balance - mid, new_rate, remaining_months) > target_emi:
            low = mid
        else:
            high = mid
        iterations += 1

    logger.debug("Part payment search converged in %d step(s): %.2f", iterations, high)
    return high
