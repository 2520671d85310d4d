"""Result assembly for scheduling runs."""

from dataclasses import dataclass, field

from shiftplanner.domain.models import (
    Assignment,
    FairnessMetrics,
    ShiftSlot,
    UnfilledEntry,
)
from shiftplanner.scheduling.state import RunState


@dataclass
class ScheduleResult:
    """Public output of a scheduling run.

    Attributes:
        assignments: Committed pairings, in commit order.
        unfilled: Shifts that did not reach their headcount, in processing order.
        warnings: Diagnostics: unsupported condition kinds first, then
            per-shift warnings in processing order.
        shifts: Staffed copies of the input shifts, in input order.
        fairness: Spread of assigned hours across the roster.
    """

    assignments: list[Assignment] = field(default_factory=list)
    unfilled: list[UnfilledEntry] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    shifts: list[ShiftSlot] = field(default_factory=list)
    fairness: FairnessMetrics = field(default_factory=FairnessMetrics)

    @property
    def is_fully_staffed(self) -> bool:
        return not self.unfilled

    def assignments_for_shift(self, shift_id: str) -> list[Assignment]:
        return [a for a in self.assignments if a.shift_id == shift_id]

    def assignments_for_employee(self, employee_id: str) -> list[Assignment]:
        return [a for a in self.assignments if a.employee_id == employee_id]

    def to_dict(self) -> dict:
        """Render the ``{assignments, unfilled, warnings}`` payload."""
        return {
            "assignments": [
                {
                    "shiftId": a.shift_id,
                    "userId": a.employee_id,
                    "userName": a.employee_name,
                    "role": a.role,
                }
                for a in self.assignments
            ],
            "unfilled": [
                {"shiftId": u.shift_id, "role": u.role, "remaining": u.remaining}
                for u in self.unfilled
            ],
            "warnings": list(self.warnings),
        }


class ResultAssembler:
    """Shapes a finished run into a ScheduleResult."""

    def assemble(
        self,
        run: RunState,
        shifts: list[ShiftSlot],
        leading_warnings: list[str],
    ) -> ScheduleResult:
        """Build the public result.

        Args:
            run: Bookkeeping from the solver.
            shifts: Staffed working copies, in input order.
            leading_warnings: Run-level warnings listed before per-shift ones.

        Returns:
            Complete ScheduleResult.
        """
        unfilled = [
            UnfilledEntry(
                shift_id=outcome.shift.id,
                role=outcome.shift.role,
                remaining=outcome.remaining,
            )
            for outcome in run.outcomes
            if outcome.remaining > 0
        ]

        warnings = list(leading_warnings)
        for outcome in run.outcomes:
            warnings.extend(outcome.warnings)

        return ScheduleResult(
            assignments=list(run.assignments),
            unfilled=unfilled,
            warnings=warnings,
            shifts=list(shifts),
            fairness=run.fairness.metrics(),
        )
