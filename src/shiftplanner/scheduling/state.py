"""Tentative assignment state built up during a scheduling run.

The state is owned by a single run and discarded when it returns; the
constraint engine reads it, only the solver writes to it.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from shiftplanner.domain.models import Assignment, Employee, ShiftSlot, TimeRange, iso_week
from shiftplanner.scheduling.fairness import FairnessScorer


class TentativeState:
    """Commitments made so far in the current run.

    Tracks, per employee, the shifts they have been given and, per shift,
    the employees placed on it.
    """

    def __init__(self):
        self._shifts_by_employee: dict[str, list[ShiftSlot]] = defaultdict(list)
        self._employees_by_shift: dict[str, list[str]] = defaultdict(list)

    def commit(self, employee_id: str, shift: ShiftSlot) -> None:
        """Record that ``employee_id`` now works ``shift``."""
        self._shifts_by_employee[employee_id].append(shift)
        self._employees_by_shift[shift.id].append(employee_id)

    def shifts_for(self, employee_id: str) -> list[ShiftSlot]:
        """All shifts committed to an employee, in commit order."""
        return list(self._shifts_by_employee.get(employee_id, []))

    def shifts_on(self, employee_id: str, d: date) -> list[ShiftSlot]:
        """Shifts committed to an employee on a given date."""
        return [s for s in self._shifts_by_employee.get(employee_id, []) if s.date == d]

    def shifts_in_week(self, employee_id: str, d: date) -> list[ShiftSlot]:
        """Shifts committed to an employee in the ISO week containing ``d``."""
        week = iso_week(d)
        return [
            s for s in self._shifts_by_employee.get(employee_id, [])
            if iso_week(s.date) == week
        ]

    def employees_on(self, shift_id: str) -> list[str]:
        """Employees committed to a shift, in commit order."""
        return list(self._employees_by_shift.get(shift_id, []))

    def booked_ranges_on(self, d: date) -> dict[str, list[TimeRange]]:
        """Map employee ID to the time ranges they already work on ``d``."""
        booked: dict[str, list[TimeRange]] = {}
        for employee_id, shifts in self._shifts_by_employee.items():
            ranges = [s.time_slot for s in shifts if s.date == d]
            if ranges:
                booked[employee_id] = ranges
        return booked

    @property
    def commitment_count(self) -> int:
        return sum(len(shifts) for shifts in self._shifts_by_employee.values())


class ShiftStatus(Enum):
    """Where a shift ended up after the solver processed it."""

    UNFILLED = "unfilled"
    PARTIALLY_FILLED = "partially_filled"
    FILLED = "filled"
    EXHAUSTED = "exhausted"  # ran out of candidates before reaching min_users


@dataclass
class ShiftOutcome:
    """Bookkeeping for one processed shift."""

    shift: ShiftSlot
    status: ShiftStatus = ShiftStatus.UNFILLED
    warnings: list[str] = field(default_factory=list)

    @property
    def remaining(self) -> int:
        return max(0, self.shift.min_users - self.shift.assigned_count)


@dataclass
class RunState:
    """Everything a single scheduling run mutates.

    Created fresh for each run and passed through the solver loop, so runs
    never share state.
    """

    tentative: TentativeState
    fairness: FairnessScorer
    assignments: list[Assignment] = field(default_factory=list)
    outcomes: list[ShiftOutcome] = field(default_factory=list)

    @classmethod
    def start(cls, employees: list[Employee]) -> "RunState":
        return cls(tentative=TentativeState(), fairness=FairnessScorer(employees))
