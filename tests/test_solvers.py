"""Tests for the rate-change what-if calculators."""

import pytest

from emi_calc.engine import calculate_emi
from emi_calc.solvers import emi_delta_for_tenure_preservation, part_payment_for_emi_preservation


class TestEmiDelta:
    def test_rate_increase_raises_emi(self):
        delta = emi_delta_for_tenure_preservation(3_500_000, 8.5, 9.25, 200)

        assert delta > 0
        assert delta == pytest.approx(calculate_emi(3_500_000, 9.25, 200) - calculate_emi(3_500_000, 8.5, 200))

    def test_rate_cut_lowers_emi(self):
        assert emi_delta_for_tenure_preservation(3_500_000, 9.0, 8.0, 200) < 0

    def test_unchanged_rate(self):
        assert emi_delta_for_tenure_preservation(3_500_000, 8.5, 8.5, 200) == 0


class TestPartPaymentForEmi:
    def test_restores_target_emi(self):
        target = calculate_emi(1_000_000, 8.0, 200)

        amount = part_payment_for_emi_preservation(1_000_000, target, 9.0, 200)

        assert 0 < amount < 1_000_000
        assert calculate_emi(1_000_000 - amount, 9.0, 200) <= target
        # Within one currency unit of the smallest sufficient lump sum.
        assert calculate_emi(1_000_000 - amount + 1, 9.0, 200) > target

    def test_no_payment_needed_when_rate_falls(self):
        target = calculate_emi(1_000_000, 9.0, 200)

        assert part_payment_for_emi_preservation(1_000_000, target, 8.0, 200) == 0

    def test_tolerance_is_configurable(self):
        target = calculate_emi(1_000_000, 8.0, 200)

        fine = part_payment_for_emi_preservation(1_000_000, target, 9.0, 200)
        coarse = part_payment_for_emi_preservation(1_000_000, target, 9.0, 200, tolerance=1_000)

        assert calculate_emi(1_000_000 - coarse, 9.0, 200) <= target
        assert fine - 1 <= coarse <= fine + 1_000

    def test_zero_rate(self):
        amount = part_payment_for_emi_preservation(120_000, 9_000, 0, 12)

        assert amount == pytest.approx(12_000, abs=1)

    def test_tolerance_must_be_positive(self):
        with pytest.raises(ValueError):
            part_payment_for_emi_preservation(1_000_000, 5_000, 9.0, 200, tolerance=0)
