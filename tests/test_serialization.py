"""Tests for scenario/schedule dictionaries used by exports, the API and the store."""

import json
from datetime import date

import pytest

from emi_calc.data_models import AdjustmentType, Disbursement, LoanScenario, PartPayment, RateChange
from emi_calc.engine import generate_schedule
from emi_calc.exceptions import InputError
from emi_calc.serialization import scenario_from_dict, scenario_to_dict, schedule_to_dicts


@pytest.fixture
def full_scenario(terms, expenses) -> LoanScenario:
    return LoanScenario(
        terms=terms,
        rate_changes=[RateChange(date=date(2025, 4, 1), new_rate=9.1, adjustment_type=AdjustmentType.PRESERVE_EMI)],
        part_payments=[
            PartPayment(date=date(2025, 3, 1), amount=100_000.0, recurring=True),
            PartPayment(date=date(2026, 7, 1), amount=40_000.0),
        ],
        disbursements=[
            Disbursement(date=date(2024, 1, 1), amount=2_000_000.0, pre_emi=14_000.0),
            Disbursement(date=date(2024, 8, 1), amount=2_000_000.0),
        ],
        expenses=expenses,
    )


def test_scenario_survives_json(full_scenario):
    payload = json.loads(json.dumps(scenario_to_dict(full_scenario)))

    assert payload["terms"]["start_date"] == "2024-01"
    assert payload["rate_changes"][0]["adjustment_type"] == "emi"
    assert scenario_from_dict(payload) == full_scenario


def test_defaults_for_optional_fields():
    scenario = scenario_from_dict(
        {
            "terms": {"home_value": "5000000", "annual_rate": 8.5, "tenure_years": 20, "start_date": "2025-02"},
            "rate_changes": [{"date": "2026-01", "new_rate": 9}],
        }
    )

    assert scenario.terms.down_payment == 0
    assert scenario.terms.start_date == date(2025, 2, 1)
    assert scenario.rate_changes[0].adjustment_type is AdjustmentType.PRESERVE_TENURE
    assert scenario.part_payments == ()
    assert scenario.expenses.monthly_total == 0


@pytest.mark.parametrize(
    "payload, field",
    [
        ({}, "terms"),
        ({"terms": {"annual_rate": 8, "tenure_years": 20, "start_date": "2025-01"}}, "home_value"),
        ({"terms": {"home_value": 1, "annual_rate": 8, "tenure_years": 20}}, "start_date"),
        ({"terms": {"home_value": "lots", "annual_rate": 8, "tenure_years": 20, "start_date": "2025-01"}}, "home_value"),
    ],
)
def test_invalid_payloads(payload, field):
    with pytest.raises(InputError) as excinfo:
        scenario_from_dict(payload)
    assert excinfo.value.context["field"] == field


def test_invalid_event_values():
    terms = {"home_value": 1, "annual_rate": 8, "tenure_years": 20, "start_date": "2025-01"}
    with pytest.raises(InputError):
        scenario_from_dict({"terms": terms, "rate_changes": [{"date": "2026-01", "new_rate": 9, "adjustment_type": "x"}]})
    with pytest.raises(InputError):
        scenario_from_dict({"terms": terms, "part_payments": [{"date": "soon", "amount": 9}]})


def test_schedule_dicts():
    rows = schedule_to_dicts(generate_schedule(120_000, 0, 12, date(2024, 1, 1)))

    assert len(rows) == 12
    assert rows[0]["date"] == "2024-01"
    assert rows[0]["principal"] == 10_000
    assert rows[-1]["balance"] == 0
    json.dumps(rows)


TERMS = {"home_value": 5_000_000, "annual_rate": 8.5, "tenure_years": 20, "start_date": "2025-01"}


@pytest.mark.parametrize(
    "payload, field",
    [
        ({"terms": TERMS, "rate_changes": [5]}, "rate_changes"),
        ({"terms": TERMS, "part_payments": {"date": "2026-01"}}, "part_payments"),
        ({"terms": TERMS, "expenses": [1, 2]}, "expenses"),
        ({"terms": {**TERMS, "tenure_years": "nan"}}, "tenure_years"),
        ({"terms": {**TERMS, "tenure_years": float("inf")}}, "tenure_years"),
        ({"terms": {**TERMS, "tenure_years": 500}}, "tenure_years"),
        ({"terms": {**TERMS, "annual_rate": -1}}, "annual_rate"),
        ({"terms": TERMS, "rate_changes": [{"date": "2026-01", "new_rate": -2}]}, "new_rate"),
    ],
)
def test_malformed_payloads(payload, field):
    with pytest.raises(InputError) as excinfo:
        scenario_from_dict(payload)
    assert excinfo.value.context["field"] == field


def test_scenario_events_are_immutable(full_scenario):
    assert isinstance(full_scenario.part_payments, tuple)
    with pytest.raises(AttributeError):
        full_scenario.part_payments.append(PartPayment(date=date(2027, 1, 1), amount=1.0))
