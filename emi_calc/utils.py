"""Utility functions for the EMI planner.

This module provides helpers for parsing user input into Python data types and
for month arithmetic. All loan dates are normalized to the first day of their
month, so month offsets are plain ``year * 12 + month`` differences.
"""

from __future__ import annotations

import math
from datetime import date

from .exceptions import InputError

# Suffix multipliers accepted by ``parse_amount``. Longest suffixes first so
# that "cr" is not mistaken for something else.
AMOUNT_SUFFIXES = (
    ("cr", 10_000_000.0),
    ("l", 100_000.0),
    ("m", 1_000_000.0),
    ("k", 1_000.0),
)


def parse_year_month(ym: str) -> date:
    """Parse a YYYY-MM string into a ``date`` object (first day of month).

    Parameters
    ----------
    ym: str
        A string in the form ``"YYYY-MM"``. The day component, if present,
        will be ignored.

    Returns
    -------
    date
        A date object representing the first day of the specified month.

    Raises
    ------
    InputError
        If the string is not a valid year-month.
    """
    try:
        parts = ym.strip().split("-")
        if len(parts) < 2:
            raise ValueError
        return date(int(parts[0]), int(parts[1]), 1)
    except (AttributeError, ValueError) as exc:
        raise InputError("Invalid year-month string", context={"value": ym}) from exc


def format_year_month(dt: date) -> str:
    return dt.strftime("%Y-%m")


def add_months(dt: date, months: int) -> date:
    """Return the first day of the month ``months`` after ``dt``."""
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    return date(year, month, 1)


def months_between(start: date, end: date) -> int:
    """Whole-month offset of ``end`` relative to ``start``.

    Days of month are ignored, so 2024-01-31 -> 2024-02-01 is one month. The
    result is negative when ``end`` falls before ``start``.
    """
    return (end.year - start.year) * 12 + (end.month - start.month)


def parse_amount(value: str) -> float:
    """Parse a numeric string with optional magnitude suffixes.

    Accepts plain numbers ("500000", "5,00,000") and shorthand suffixes:
    ``k`` (thousand), ``m`` (million), ``l`` (lakh) and ``cr`` (crore), e.g.
    "40l" is 4,000,000.
    """
    cleaned = str(value).strip().lower().replace(",", "").replace("_", "")
    factor = 1.0
    for suffix, multiplier in AMOUNT_SUFFIXES:
        if cleaned.endswith(suffix):
            factor = multiplier
            cleaned = cleaned[: -len(suffix)].strip()
            break
    try:
        amount = float(cleaned) * factor
    except ValueError as exc:
        raise InputError("Invalid amount", context={"value": value}) from exc
    if not math.isfinite(amount):
        raise InputError("Invalid amount", context={"value": value})
    return amount


def parse_rate(value: str) -> float:
    """Parse an annual interest rate in percent ("8.5" or "8.5%")."""
    cleaned = str(value).strip()
    if cleaned.endswith("%"):
        cleaned = cleaned[:-1]
    try:
        rate = float(cleaned)
    except ValueError as exc:
        raise InputError("Invalid interest rate", context={"value": value}) from exc
    if not math.isfinite(rate):
        raise InputError("Invalid interest rate", context={"value": value})
    if rate < 0:
        raise InputError("Interest rate cannot be negative", context={"value": value})
    return rate
