"""Tests for input parsing and month arithmetic."""

from datetime import date

import pytest

from emi_calc.exceptions import EmiCalcError, InputError
from emi_calc.utils import add_months, months_between, parse_amount, parse_rate, parse_year_month


class TestParseYearMonth:
    def test_plain_year_month(self):
        assert parse_year_month("2024-03") == date(2024, 3, 1)

    def test_day_is_ignored(self):
        assert parse_year_month("2024-03-15") == date(2024, 3, 1)

    @pytest.mark.parametrize("value", ["March", "2024", "2024-13", ""])
    def test_invalid_values(self, value):
        with pytest.raises(InputError):
            parse_year_month(value)

    def test_input_error_is_a_value_error(self):
        with pytest.raises(ValueError) as excinfo:
            parse_year_month("nope")
        assert isinstance(excinfo.value, EmiCalcError)
        assert excinfo.value.context == {"value": "nope"}
        assert "value=nope" in str(excinfo.value)


class TestMonthArithmetic:
    def test_add_months_within_year(self):
        assert add_months(date(2024, 1, 1), 5) == date(2024, 6, 1)

    def test_add_months_across_years(self):
        assert add_months(date(2024, 11, 1), 3) == date(2025, 2, 1)
        assert add_months(date(2024, 1, 1), 240) == date(2044, 1, 1)

    def test_add_negative_months(self):
        assert add_months(date(2024, 2, 1), -3) == date(2023, 11, 1)

    def test_months_between(self):
        assert months_between(date(2024, 1, 1), date(2024, 1, 1)) == 0
        assert months_between(date(2024, 1, 1), date(2025, 3, 1)) == 14
        assert months_between(date(2024, 5, 1), date(2024, 2, 1)) == -3

    def test_months_between_ignores_day_of_month(self):
        assert months_between(date(2024, 1, 31), date(2024, 2, 1)) == 1


class TestParseAmount:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("500000", 500_000.0),
            ("5,00,000", 500_000.0),
            ("500k", 500_000.0),
            ("40l", 4_000_000.0),
            ("1.5cr", 15_000_000.0),
            ("2M", 2_000_000.0),
        ],
    )
    def test_suffixes(self, value, expected):
        assert parse_amount(value) == pytest.approx(expected)

    def test_invalid_amount(self):
        with pytest.raises(InputError):
            parse_amount("lots")

    @pytest.mark.parametrize("value", ["nan", "inf", "-inf", "1e400"])
    def test_non_finite_amount(self, value):
        with pytest.raises(InputError):
            parse_amount(value)


class TestParseRate:
    def test_percent_sign(self):
        assert parse_rate("8.5%") == 8.5

    def test_negative_rate_rejected(self):
        with pytest.raises(InputError):
            parse_rate("-1")

    def test_not_a_number(self):
        with pytest.raises(InputError):
            parse_rate("high")

    @pytest.mark.parametrize("value", ["nan", "inf"])
    def test_non_finite_rate(self, value):
        with pytest.raises(InputError):
            parse_rate(value)
