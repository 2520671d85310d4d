"""Main scheduler interface.

This module provides the high-level ``schedule`` entry point that validates
input, runs the solver on working copies of the shifts and assembles the
result.
"""

import logging
from dataclasses import replace
from typing import Optional

from shiftplanner.domain.conditions import ScheduleCondition
from shiftplanner.domain.models import (
    AvailabilityWindow,
    Employee,
    SchedulerConfig,
    ShiftSlot,
)
from shiftplanner.scheduling.constraints import ConditionRule, ConstraintEngine
from shiftplanner.scheduling.result import ResultAssembler, ScheduleResult
from shiftplanner.scheduling.solver import AssignmentSolver
from shiftplanner.validation.validator import ScheduleValidator

logger = logging.getLogger(__name__)


class Scheduler:
    """High-level scheduler for staffing shift slots.

    The Scheduler validates input, then coordinates the eligibility filter,
    constraint engine and fairness scorer through the solver. Each call to
    ``run`` is independent; no state is kept between runs.

    Example:
        >>> scheduler = Scheduler()
        >>> result = scheduler.run(shifts, employees, availability, conditions)
        >>> result.unfilled
    """

    def __init__(
        self,
        config: Optional[SchedulerConfig] = None,
        rules: Optional[dict[str, ConditionRule]] = None,
    ):
        """Initialize scheduler.

        Args:
            config: Run options; defaults are used when omitted.
            rules: Condition rules by kind tag; the built-in registry when omitted.
        """
        self.config = config or SchedulerConfig()
        self.rules = rules
        self.validator = ScheduleValidator()
        self.assembler = ResultAssembler()

    def run(
        self,
        shifts: list[ShiftSlot],
        employees: list[Employee],
        availability: list[AvailabilityWindow],
        conditions: list[ScheduleCondition],
    ) -> ScheduleResult:
        """Staff the given shifts.

        The caller's shift objects are not modified; staffed copies are
        returned on ``ScheduleResult.shifts``.

        Raises:
            ValidationError: If the input is malformed.
        """
        engine = ConstraintEngine(conditions, self.rules)
        self.validator.validate_request(
            shifts, employees, availability, condition_issues=engine.validate()
        )

        roster = [
            e for e in employees
            if not (self.config.ignore_test_accounts and e.is_test_account)
        ]
        working = [replace(s, assigned_users=[]) for s in shifts]

        solver = AssignmentSolver(engine, self.config)
        run = solver.solve(working, roster, availability)
        result = self.assembler.assemble(run, working, engine.unsupported_warnings())

        logger.info(
            "Scheduled %d shift(s): %d assignment(s), %d unfilled, %d warning(s)",
            len(working),
            len(result.assignments),
            len(result.unfilled),
            len(result.warnings),
        )
        return result


def schedule(
    shifts: list[ShiftSlot],
    employees: list[Employee],
    availability: list[AvailabilityWindow],
    constraints: list[ScheduleCondition],
    config: Optional[SchedulerConfig] = None,
) -> ScheduleResult:
    """Assign employees to shifts.

    Args:
        shifts: Shift slots needing staff.
        employees: Roster to draw from.
        availability: Declared availability windows.
        constraints: Schedule conditions to enforce.
        config: Run options.

    Returns:
        ScheduleResult with assignments, unfilled shifts and warnings.

    Raises:
        ValidationError: If the input is malformed.
    """
    return Scheduler(config).run(shifts, employees, availability, constraints)
