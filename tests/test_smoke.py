"""Smoke tests for end-to-end scheduling flow."""

from datetime import date, timedelta

import pytest

from shiftplanner.cli import (
    create_sample_availability,
    create_sample_employees,
    create_sample_shifts,
)
from shiftplanner.domain.conditions import ScheduleCondition
from shiftplanner.output.report_generator import ReportGenerator
from shiftplanner.scheduling.scheduler import Scheduler
from shiftplanner.validation.validator import ScheduleValidator


class TestSmoke:
    """End-to-end smoke tests for the scheduling system."""

    @pytest.fixture
    def scheduler(self):
        return Scheduler()

    @pytest.fixture
    def validator(self):
        return ScheduleValidator()

    def _week(self, count: int, days: int = 7):
        dates = [date(2025, 1, 6) + timedelta(days=i) for i in range(days)]
        employees = create_sample_employees(count)
        return (
            create_sample_shifts(dates),
            employees,
            create_sample_availability(employees, dates),
        )

    @pytest.mark.parametrize("count", [4, 10, 16, 30])
    def test_various_roster_sizes(self, scheduler, validator, count):
        shifts, employees, availability = self._week(count)

        result = scheduler.run(shifts, employees, availability, [])

        audit = validator.audit(result, employees, availability)
        assert audit.is_valid, [str(e) for e in audit.errors]
        assert len(result.assignments) > 0

    def test_with_conditions(self, scheduler, validator):
        shifts, employees, availability = self._week(10)
        conditions = [
            ScheduleCondition(id="cap", kind="max-shifts-per-week", params={"max": 4}),
            ScheduleCondition(id="rest", kind="min-rest-hours", params={"hours": 11}),
            ScheduleCondition(id="daily", kind="max-shifts-per-day", params={"max": 1}),
        ]

        result = scheduler.run(shifts, employees, availability, conditions)

        audit = validator.audit(result, employees, availability)
        assert audit.is_valid
        for employee in employees:
            worked = result.assignments_for_employee(employee.uid)
            assert len(worked) <= 4
            assert len({a.shift_id[:10] for a in worked}) == len(worked)

    def test_large_roster_fills_everything(self, scheduler):
        shifts, employees, availability = self._week(40)
        result = scheduler.run(shifts, employees, availability, [])
        assert result.is_fully_staffed
        assert result.warnings == []

    def test_more_staff_spreads_hours(self, scheduler):
        small = scheduler.run(*self._week(12), [])
        large = scheduler.run(*self._week(24), [])
        assert large.fairness.avg_hours < small.fairness.avg_hours

    def test_report(self, scheduler, tmp_path):
        shifts, employees, availability = self._week(6, days=2)
        result = scheduler.run(shifts, employees, availability, [])
        path = tmp_path / "report.txt"

        content = ReportGenerator().generate(result, employees, path)

        assert path.read_text(encoding="utf-8") == content
        assert "SHIFT SCHEDULE REPORT" in content
        assert "HOURS PER EMPLOYEE" in content
        for shift in shifts:
            assert shift.date.isoformat() in content
