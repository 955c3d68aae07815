"""Shared fixtures for the emi_calc tests."""

import os
from datetime import date

import pytest

# The web app builds its comparison store at import time; keep it in memory.
os.environ.setdefault("EMI_CALC_DATABASE_URL", "sqlite://")

from emi_calc.data_models import HomeownerExpenses, LoanScenario, LoanTerms  # noqa: E402
from emi_calc.logging_config import disable_logging  # noqa: E402


@pytest.fixture(autouse=True, scope="session")
def quiet_logging():
    """Keep the cap-reached warnings out of the test output."""
    disable_logging()


@pytest.fixture
def start_date() -> date:
    return date(2024, 1, 1)


@pytest.fixture
def terms(start_date) -> LoanTerms:
    """A 40 lakh loan at 8.5 % over 20 years."""
    return LoanTerms(
        home_value=5_000_000.0,
        down_payment=1_000_000.0,
        annual_rate=8.5,
        tenure_years=20,
        start_date=start_date,
        loan_insurance=50_000.0,
        loan_fees=25_000.0,
    )


@pytest.fixture
def expenses() -> HomeownerExpenses:
    return HomeownerExpenses(
        one_time=200_000.0,
        property_tax_annual=24_000.0,
        home_insurance_annual=12_000.0,
        maintenance_monthly=5_000.0,
    )


@pytest.fixture
def scenario(terms, expenses) -> LoanScenario:
    return LoanScenario(terms=terms, expenses=expenses)
