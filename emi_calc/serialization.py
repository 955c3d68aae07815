"""Conversion of scenarios and schedules to and from plain dictionaries.

Saved scenarios and the JSON API exchange dates as ``"YYYY-MM"`` strings.
``scenario_from_dict`` re-hydrates them into ``date`` objects before anything
reaches the engine.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Mapping

from .data_models import (
    MAX_TENURE_YEARS,
    AdjustmentType,
    Disbursement,
    HomeownerExpenses,
    LoanScenario,
    LoanTerms,
    PartPayment,
    RateChange,
    ScheduleEntry,
)
from .exceptions import InputError
from .utils import format_year_month, parse_year_month


def _number(data: Mapping[str, Any], key: str, default: Any = None) -> float:
    value = data.get(key, default)
    if value is None:
        raise InputError("Missing required field", context={"field": key})
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise InputError("Field must be numeric", context={"field": key, "value": value}) from exc
    if not math.isfinite(number):
        raise InputError("Field must be a finite number", context={"field": key, "value": value})
    return number


def _rate(data: Mapping[str, Any], key: str) -> float:
    rate = _number(data, key)
    if rate < 0:
        raise InputError("Interest rate cannot be negative", context={"field": key, "value": rate})
    return rate


def _mappings(data: Mapping[str, Any], key: str) -> List[Mapping[str, Any]]:
    items = data.get(key) or []
    if not isinstance(items, list) or not all(isinstance(item, Mapping) for item in items):
        raise InputError("Field must be a list of objects", context={"field": key})
    return items


def _adjustment(value: Any) -> AdjustmentType:
    try:
        return AdjustmentType(value or AdjustmentType.PRESERVE_TENURE.value)
    except ValueError as exc:
        raise InputError("Adjustment type must be 'emi' or 'tenure'", context={"value": value}) from exc


def scenario_to_dict(scenario: LoanScenario) -> Dict[str, Any]:
    terms = scenario.terms
    expenses = scenario.expenses
    return {
        "terms": {
            "home_value": terms.home_value,
            "down_payment": terms.down_payment,
            "annual_rate": terms.annual_rate,
            "tenure_years": terms.tenure_years,
            "start_date": format_year_month(terms.start_date),
            "loan_insurance": terms.loan_insurance,
            "loan_fees": terms.loan_fees,
        },
        "rate_changes": [
            {
                "date": format_year_month(rc.date),
                "new_rate": rc.new_rate,
                "adjustment_type": rc.adjustment_type.value,
            }
            for rc in scenario.rate_changes
        ],
        "part_payments": [
            {"date": format_year_month(pp.date), "amount": pp.amount, "recurring": pp.recurring}
            for pp in scenario.part_payments
        ],
        "disbursements": [
            {"date": format_year_month(d.date), "amount": d.amount, "pre_emi": d.pre_emi}
            for d in scenario.disbursements
        ],
        "expenses": {
            "one_time": expenses.one_time,
            "property_tax_annual": expenses.property_tax_annual,
            "home_insurance_annual": expenses.home_insurance_annual,
            "maintenance_monthly": expenses.maintenance_monthly,
        },
    }


def scenario_from_dict(data: Mapping[str, Any]) -> LoanScenario:
    """Build a ``LoanScenario`` from a dictionary such as a JSON payload.

    Raises
    ------
    InputError
        If a required field is missing or a value cannot be parsed.
    """
    terms_data = data.get("terms")
    if not isinstance(terms_data, Mapping):
        raise InputError("Missing required field", context={"field": "terms"})
    if "start_date" not in terms_data:
        raise InputError("Missing required field", context={"field": "start_date"})
    annual_rate = _rate(terms_data, "annual_rate")
    tenure_years = _number(terms_data, "tenure_years")
    if tenure_years > MAX_TENURE_YEARS:
        raise InputError(
            f"Tenure cannot exceed {MAX_TENURE_YEARS} years", context={"field": "tenure_years"}
        )

    terms = LoanTerms(
        home_value=_number(terms_data, "home_value"),
        down_payment=_number(terms_data, "down_payment", 0),
        annual_rate=annual_rate,
        tenure_years=int(tenure_years),
        start_date=parse_year_month(str(terms_data["start_date"])),
        loan_insurance=_number(terms_data, "loan_insurance", 0),
        loan_fees=_number(terms_data, "loan_fees", 0),
    )
    rate_changes = [
        RateChange(
            date=parse_year_month(str(item.get("date", ""))),
            new_rate=_rate(item, "new_rate"),
            adjustment_type=_adjustment(item.get("adjustment_type")),
        )
        for item in _mappings(data, "rate_changes")
    ]
    part_payments = [
        PartPayment(
            date=parse_year_month(str(item.get("date", ""))),
            amount=_number(item, "amount"),
            recurring=bool(item.get("recurring", False)),
        )
        for item in _mappings(data, "part_payments")
    ]
    disbursements = [
        Disbursement(
            date=parse_year_month(str(item.get("date", ""))),
            amount=_number(item, "amount"),
            pre_emi=_number(item, "pre_emi") if item.get("pre_emi") is not None else None,
        )
        for item in _mappings(data, "disbursements")
    ]
    expenses_data = data.get("expenses") or {}
    if not isinstance(expenses_data, Mapping):
        raise InputError("Field must be an object", context={"field": "expenses"})
    expenses = HomeownerExpenses(
        one_time=_number(expenses_data, "one_time", 0),
        property_tax_annual=_number(expenses_data, "property_tax_annual", 0),
        home_insurance_annual=_number(expenses_data, "home_insurance_annual", 0),
        maintenance_monthly=_number(expenses_data, "maintenance_monthly", 0),
    )
    return LoanScenario(
        terms=terms,
        rate_changes=rate_changes,
        part_payments=part_payments,
        disbursements=disbursements,
        expenses=expenses,
    )


def schedule_to_dicts(schedule: Iterable[ScheduleEntry]) -> List[Dict[str, Any]]:
    """Convert schedule entries into JSON-serialisable dictionaries."""
    return [entry.to_dict() for entry in schedule]
