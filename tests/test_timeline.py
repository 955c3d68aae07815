"""Tests for the event timeline: offsets, recurring expansion and collisions."""

from datetime import date

from emi_calc.data_models import AdjustmentType, Disbursement, PartPayment, RateChange
from emi_calc.timeline import (
    build_timeline,
    expand_recurring_part_payments,
    index_disbursements,
    index_part_payments,
    index_rate_changes,
)


class TestRecurringExpansion:
    def test_yearly_occurrences_through_end_year(self, start_date):
        recurring = PartPayment(date=date(2025, 3, 1), amount=50_000.0, recurring=True)

        expanded = expand_recurring_part_payments([recurring], start_date, 240)

        # 2024 + ceil(240 / 12) = 2044, inclusive
        assert [p.date for p in expanded] == [date(year, 3, 1) for year in range(2025, 2045)]
        assert all(not p.recurring for p in expanded)
        assert all(p.amount == 50_000.0 for p in expanded)

    def test_occurrences_before_start_are_dropped(self, start_date):
        recurring = PartPayment(date=date(2023, 3, 1), amount=10_000.0, recurring=True)

        expanded = expand_recurring_part_payments([recurring], start_date, 240)

        assert expanded[0].date == date(2024, 3, 1)
        assert all(p.date >= start_date for p in expanded)
        assert len(expanded) == 21

    def test_end_year_rounds_tenure_up(self, start_date):
        recurring = PartPayment(date=date(2024, 6, 1), amount=1.0, recurring=True)

        expanded = expand_recurring_part_payments([recurring], start_date, 246)

        assert expanded[-1].date == date(2045, 6, 1)

    def test_one_time_payments_pass_through_in_order(self, start_date):
        first = PartPayment(date=date(2026, 1, 1), amount=1_000.0)
        recurring = PartPayment(date=date(2025, 5, 1), amount=2_000.0, recurring=True)
        last = PartPayment(date=date(2024, 2, 1), amount=3_000.0)

        expanded = expand_recurring_part_payments([first, recurring, last], start_date, 24)

        assert expanded[0] is first
        assert expanded[-1] is last
        assert [p.date for p in expanded[1:-1]] == [date(2025, 5, 1), date(2026, 5, 1)]


class TestCollisionPolicy:
    def test_rate_changes_last_write_wins(self, start_date):
        first = RateChange(date=date(2024, 6, 1), new_rate=9.0, adjustment_type=AdjustmentType.PRESERVE_EMI)
        second = RateChange(date=date(2024, 6, 1), new_rate=7.5)

        mapping = index_rate_changes(start_date, [first, second])

        assert mapping == {5: second}

    def test_part_payments_last_write_wins(self, start_date):
        payments = [
            PartPayment(date=date(2024, 6, 1), amount=10_000.0),
            PartPayment(date=date(2024, 6, 1), amount=25_000.0),
        ]

        assert index_part_payments(start_date, payments) == {5: 25_000.0}

    def test_disbursements_are_summed(self, start_date):
        disbursements = [
            Disbursement(date=date(2024, 3, 1), amount=300_000.0),
            Disbursement(date=date(2024, 3, 1), amount=200_000.0),
            Disbursement(date=date(2024, 9, 1), amount=100_000.0),
        ]

        assert index_disbursements(start_date, disbursements) == {2: 500_000.0, 8: 100_000.0}


class TestBuildTimeline:
    def test_offsets_relative_to_start(self, start_date):
        timeline = build_timeline(
            start_date,
            240,
            rate_changes=[RateChange(date=date(2025, 1, 1), new_rate=9.0)],
            part_payments=[PartPayment(date=date(2024, 4, 1), amount=5_000.0)],
            disbursements=[
                Disbursement(date=date(2024, 1, 1), amount=1.0),
                Disbursement(date=date(2024, 7, 1), amount=2.0),
            ],
        )

        assert set(timeline.rate_changes) == {12}
        assert timeline.part_payments == {3: 5_000.0}
        assert timeline.last_disbursement_month == 6

    def test_recurring_payments_are_expanded(self, start_date):
        timeline = build_timeline(
            start_date,
            36,
            part_payments=[PartPayment(date=date(2024, 12, 1), amount=7_000.0, recurring=True)],
        )

        assert timeline.part_payments == {11: 7_000.0, 23: 7_000.0, 35: 7_000.0, 47: 7_000.0}

    def test_events_before_start_keep_negative_offsets(self, start_date):
        timeline = build_timeline(start_date, 12, part_payments=[PartPayment(date=date(2023, 11, 1), amount=1.0)])

        assert timeline.part_payments == {-2: 1.0}

    def test_empty_timeline(self, start_date):
        timeline = build_timeline(start_date, 12)

        assert timeline.rate_changes == {}
        assert timeline.part_payments == {}
        assert timeline.last_disbursement_month is None
