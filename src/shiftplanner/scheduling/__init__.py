"""Scheduling engine for staffing shift slots."""

from shiftplanner.scheduling.constraints import (
    ConditionRule,
    ConstraintEngine,
    Verdict,
    register_rule,
)
from shiftplanner.scheduling.eligibility import (
    AvailabilityIndex,
    EligibilityFilter,
    IneligibleReason,
    eligible_candidates,
)
from shiftplanner.scheduling.fairness import FairnessScorer
from shiftplanner.scheduling.result import ResultAssembler, ScheduleResult
from shiftplanner.scheduling.solver import AssignmentSolver, shift_priority_key
from shiftplanner.scheduling.state import (
    RunState,
    ShiftOutcome,
    ShiftStatus,
    TentativeState,
)
from shiftplanner.scheduling.scheduler import Scheduler, schedule

__all__ = [
    # Entry points
    "Scheduler",
    "schedule",
    "ScheduleResult",
    # Components
    "AssignmentSolver",
    "AvailabilityIndex",
    "ConstraintEngine",
    "EligibilityFilter",
    "FairnessScorer",
    "ResultAssembler",
    "eligible_candidates",
    "shift_priority_key",
    # Conditions
    "ConditionRule",
    "Verdict",
    "register_rule",
    # Run state
    "IneligibleReason",
    "RunState",
    "ShiftOutcome",
    "ShiftStatus",
    "TentativeState",
]
