"""Tests for the fairness scorer."""

from datetime import date

import pytest

from shiftplanner.domain.models import Employee, ShiftSlot, TimeRange
from shiftplanner.scheduling.fairness import FairnessScorer

SERVER = "Phục vụ"


def make_shift(start, end):
    return ShiftSlot(
        id=f"s-{start}",
        template_id="t1",
        date=date(2025, 1, 6),
        label="Ca",
        role=SERVER,
        time_slot=TimeRange(start, end),
    )


class TestFairnessScorer:
    """Tests for FairnessScorer ranking and bookkeeping."""

    @pytest.fixture
    def employees(self):
        return [
            Employee(uid="e3", display_name="Chi", role=SERVER),
            Employee(uid="e1", display_name="An", role=SERVER),
            Employee(uid="e2", display_name="Binh", role=SERVER),
        ]

    @pytest.fixture
    def scorer(self, employees):
        return FairnessScorer(employees)

    def test_starts_at_zero(self, scorer, employees):
        for employee in employees:
            assert scorer.total_minutes(employee.uid) == 0
        assert scorer.spread_minutes() == 0

    def test_ties_break_by_display_name(self, scorer, employees):
        ranked = scorer.rank(employees)
        assert [e.display_name for e in ranked] == ["An", "Binh", "Chi"]

    def test_same_name_breaks_by_uid(self):
        twins = [
            Employee(uid="e9", display_name="An", role=SERVER),
            Employee(uid="e1", display_name="An", role=SERVER),
        ]
        ranked = FairnessScorer(twins).rank(twins)
        assert [e.uid for e in ranked] == ["e1", "e9"]

    def test_fewest_minutes_ranked_first(self, scorer, employees):
        scorer.record("e1", make_shift("08:00", "12:00"))
        scorer.record("e2", make_shift("08:00", "10:00"))

        ranked = scorer.rank(employees)

        assert [e.uid for e in ranked] == ["e3", "e2", "e1"]

    def test_more_minutes_never_ranked_ahead(self, scorer, employees):
        """An employee with strictly more minutes is never preferred."""
        scorer.record("e1", make_shift("08:00", "09:00"))
        ranked = scorer.rank(employees)
        position = {e.uid: i for i, e in enumerate(ranked)}
        for other in ("e2", "e3"):
            assert position[other] < position["e1"]

    def test_record_accumulates(self, scorer):
        scorer.record("e1", make_shift("08:00", "12:00"))
        scorer.record("e1", make_shift("13:00", "14:30"))
        assert scorer.total_minutes("e1") == 330
        assert scorer.spread_minutes() == 330

    def test_record_unknown_employee(self, scorer):
        scorer.record("ghost", make_shift("08:00", "09:00"))
        assert scorer.total_minutes("ghost") == 60

    def test_rank_does_not_mutate_input(self, scorer, employees):
        before = list(employees)
        scorer.rank(employees)
        assert employees == before

    def test_metrics(self, scorer):
        scorer.record("e1", make_shift("08:00", "12:00"))
        metrics = scorer.metrics()
        assert metrics.hours_per_employee == {"e3": 0.0, "e1": 4.0, "e2": 0.0}
        assert metrics.max_hours == 4.0
        assert metrics.min_hours == 0.0
