"""Eligibility filter for shift candidates.

This module decides which employees may be considered for a shift at all:
the employee must hold the shift's role, have declared availability that
fully contains the shift window, and not already work an overlapping shift
that day. Ranking the survivors is the fairness scorer's job.
"""

from collections import defaultdict
from datetime import date
from enum import Enum
from typing import Optional

from shiftplanner.domain.models import (
    AvailabilityWindow,
    Employee,
    ShiftSlot,
    TimeRange,
)


class IneligibleReason(Enum):
    """Why an employee was dropped by the eligibility filter."""

    ROLE_MISMATCH = "role_mismatch"
    NO_AVAILABILITY = "no_availability"
    OUTSIDE_AVAILABILITY = "outside_availability"
    DOUBLE_BOOKED = "double_booked"
    ALREADY_ON_SHIFT = "already_on_shift"


class AvailabilityIndex:
    """Availability ranges grouped by (employee ID, date).

    Several windows for the same employee and date are merged into one
    list of ranges.
    """

    def __init__(self, windows: list[AvailabilityWindow]):
        self._ranges: dict[tuple[str, date], list[TimeRange]] = defaultdict(list)
        for window in windows:
            self._ranges[(window.user_id, window.date)].extend(window.available_slots)

    def ranges_for(self, employee_id: str, d: date) -> Optional[list[TimeRange]]:
        """Declared ranges for an employee on a date, or None if nothing was declared."""
        return self._ranges.get((employee_id, d))

    def covers(self, employee_id: str, d: date, time_slot: TimeRange) -> bool:
        """Check if any one declared range fully contains ``time_slot``."""
        ranges = self._ranges.get((employee_id, d), [])
        return any(r.contains(time_slot) for r in ranges)


class EligibilityFilter:
    """Filters employees down to those who may staff a shift."""

    def __init__(self, availability: AvailabilityIndex):
        self.availability = availability

    def check(
        self,
        shift: ShiftSlot,
        employee: Employee,
        assigned_today: dict[str, list[TimeRange]],
    ) -> Optional[IneligibleReason]:
        """Check one employee against one shift.

        Args:
            shift: The shift to staff.
            employee: Candidate employee.
            assigned_today: Employee ID to time ranges already worked on
                ``shift.date``.

        Returns:
            None if the employee is eligible, otherwise the first reason
            they are not.
        """
        if not employee.has_role(shift.role):
            return IneligibleReason.ROLE_MISMATCH

        if shift.is_assigned(employee.uid):
            return IneligibleReason.ALREADY_ON_SHIFT

        ranges = self.availability.ranges_for(employee.uid, shift.date)
        if not ranges:
            return IneligibleReason.NO_AVAILABILITY
        if not any(r.contains(shift.time_slot) for r in ranges):
            return IneligibleReason.OUTSIDE_AVAILABILITY

        for booked in assigned_today.get(employee.uid, []):
            if booked.overlaps(shift.time_slot):
                return IneligibleReason.DOUBLE_BOOKED

        return None

    def eligible(
        self,
        shift: ShiftSlot,
        employees: list[Employee],
        assigned_today: dict[str, list[TimeRange]],
    ) -> list[Employee]:
        """Employees eligible for ``shift``; order is not meaningful."""
        return [e for e in employees if self.check(shift, e, assigned_today) is None]

    def explain_ineligible(
        self,
        shift: ShiftSlot,
        employees: list[Employee],
        assigned_today: dict[str, list[TimeRange]],
    ) -> dict[IneligibleReason, int]:
        """Count how many employees were dropped for each reason."""
        counts: dict[IneligibleReason, int] = {}
        for employee in employees:
            reason = self.check(shift, employee, assigned_today)
            if reason is not None:
                counts[reason] = counts.get(reason, 0) + 1
        return counts


def eligible_candidates(
    shift: ShiftSlot,
    employees: list[Employee],
    availabilities: list[AvailabilityWindow],
    assigned_today: dict[str, list[TimeRange]],
) -> list[Employee]:
    """Employees who may be considered for ``shift``.

    Args:
        shift: The shift to staff.
        employees: Roster to filter.
        availabilities: Declared availability windows.
        assigned_today: Employee ID to time ranges already worked on
            ``shift.date``.

    Returns:
        Eligible employees, in roster order.
    """
    return EligibilityFilter(AvailabilityIndex(availabilities)).eligible(
        shift, employees, assigned_today
    )
