"""Greedy assignment solver.

The solver processes shifts in priority order and, for each, repeatedly:
1. Builds the eligible candidate pool (role, availability, no overlap)
2. Drops candidates any enabled condition blocks for this shift
3. Commits the least-loaded remaining candidate
until the shift reaches its headcount or runs out of candidates.

Commitments are never undone. A shift that runs dry is recorded with its
shortfall and the solver moves on.
"""

import logging
from typing import Optional

from shiftplanner.domain.models import (
    ANY_ROLE,
    AssignedUser,
    Assignment,
    AvailabilityWindow,
    Employee,
    SchedulerConfig,
    ShiftSlot,
    TimeRange,
)
from shiftplanner.scheduling.constraints import ConstraintEngine, Verdict
from shiftplanner.scheduling.eligibility import (
    AvailabilityIndex,
    EligibilityFilter,
    IneligibleReason,
)
from shiftplanner.scheduling.state import RunState, ShiftOutcome, ShiftStatus

logger = logging.getLogger(__name__)


def shift_priority_key(shift: ShiftSlot) -> tuple:
    """Processing order: earliest first, then larger headcount first.

    End time and shift id break any remaining ties so the order is total.
    """
    return (
        shift.date,
        shift.time_slot.start_minutes,
        -shift.min_users,
        shift.time_slot.end_minutes,
        shift.id,
    )


class AssignmentSolver:
    """Greedy, priority-ordered solver for shift staffing.

    Example:
        >>> solver = AssignmentSolver(ConstraintEngine(conditions))
        >>> run = solver.solve(shifts, employees, availability)
        >>> run.assignments
    """

    def __init__(
        self,
        engine: ConstraintEngine,
        config: Optional[SchedulerConfig] = None,
    ):
        self.engine = engine
        self.config = config or SchedulerConfig()

    def solve(
        self,
        shifts: list[ShiftSlot],
        employees: list[Employee],
        availability: list[AvailabilityWindow],
    ) -> RunState:
        """Staff ``shifts`` in place and return the run's bookkeeping.

        Args:
            shifts: Working copies of the shifts; their ``assigned_users``
                are appended to.
            employees: Roster to draw from.
            availability: Declared availability windows.

        Returns:
            RunState holding assignments, per-shift outcomes and fairness totals.
        """
        eligibility = EligibilityFilter(AvailabilityIndex(availability))
        run = RunState.start(employees)

        for shift in sorted(shifts, key=shift_priority_key):
            outcome = self._fill_shift(shift, employees, eligibility, run)
            run.outcomes.append(outcome)
            logger.debug(
                "Shift %s -> %s (%d/%d)",
                shift.id,
                outcome.status.value,
                shift.assigned_count,
                shift.min_users,
            )

        return run

    def _fill_shift(
        self,
        shift: ShiftSlot,
        employees: list[Employee],
        eligibility: EligibilityFilter,
        run: RunState,
    ) -> ShiftOutcome:
        """Assign employees to one shift until full or out of candidates."""
        outcome = ShiftOutcome(shift=shift)

        while shift.assigned_count < shift.min_users:
            booked = run.tentative.booked_ranges_on(shift.date)
            eligible = eligibility.eligible(shift, employees, booked)

            permitted: list[Employee] = []
            blocked: list[tuple[Employee, Verdict]] = []
            for employee in eligible:
                verdict = self.engine.check_all(employee, shift, run.tentative)
                if verdict.ok:
                    permitted.append(employee)
                else:
                    blocked.append((employee, verdict))

            if not permitted:
                outcome.status = ShiftStatus.EXHAUSTED
                outcome.warnings.extend(
                    self._shortfall_warnings(shift, employees, eligibility, booked, blocked, run)
                )
                break

            chosen = run.fairness.rank(permitted)[0]
            self._commit(shift, chosen, run)
            if shift.assigned_count >= shift.min_users:
                outcome.status = ShiftStatus.FILLED
            else:
                outcome.status = ShiftStatus.PARTIALLY_FILLED

        return outcome

    def _commit(self, shift: ShiftSlot, employee: Employee, run: RunState) -> None:
        """Place an employee on a shift and update run state."""
        role = employee.role if shift.role == ANY_ROLE else shift.role
        shift.assigned_users.append(
            AssignedUser(
                user_id=employee.uid,
                user_name=employee.display_name,
                assigned_role=role,
            )
        )
        run.assignments.append(
            Assignment(
                shift_id=shift.id,
                employee_id=employee.uid,
                employee_name=employee.display_name,
                role=role,
            )
        )
        run.tentative.commit(employee.uid, shift)
        run.fairness.record(employee.uid, shift)
        logger.debug(
            "Assigned %s to shift %s (%d min total)",
            employee.uid,
            shift.id,
            run.fairness.total_minutes(employee.uid),
        )

    def _shortfall_warnings(
        self,
        shift: ShiftSlot,
        employees: list[Employee],
        eligibility: EligibilityFilter,
        booked: dict[str, list[TimeRange]],
        blocked: list[tuple[Employee, Verdict]],
        run: RunState,
    ) -> list[str]:
        """Explain why a shift ran out of candidates."""
        warnings = []
        remaining = shift.min_users - shift.assigned_count

        if blocked:
            cause = "all eligible candidates blocked by conditions"
            if self.config.report_blocked_candidates:
                verdicts = {employee.uid: verdict for employee, verdict in blocked}
                best = run.fairness.rank([employee for employee, _ in blocked])[0]
                verdict = verdicts[best.uid]
                warnings.append(
                    f"Condition {verdict.condition.display_name} blocked employee "
                    f"{best.display_name} for shift {shift.describe()}: {verdict.reason}"
                )
        else:
            reasons = eligibility.explain_ineligible(shift, employees, booked)
            if IneligibleReason.DOUBLE_BOOKED in reasons:
                cause = (
                    "no eligible candidate: available employees already work "
                    "an overlapping shift"
                )
            else:
                cause = "no eligible candidate: role mismatch or no availability"

        warnings.append(
            f"Shortfall for shift {shift.describe()}: role {shift.role} still needs "
            f"{remaining} of {shift.min_users}; {cause}"
        )
        return warnings
