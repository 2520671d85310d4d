"""Domain models and condition definitions for shift scheduling."""

from shiftplanner.domain.conditions import ConditionKind, ScheduleCondition
from shiftplanner.domain.errors import (
    ValidationError,
    ValidationErrorType,
    ValidationIssue,
)
from shiftplanner.domain.models import (
    ANY_ROLE,
    AssignedUser,
    Assignment,
    AvailabilityWindow,
    Employee,
    FairnessMetrics,
    SchedulerConfig,
    ShiftSlot,
    TimeRange,
    UnfilledEntry,
    format_minutes,
    parse_date,
    parse_time,
)

__all__ = [
    # Models
    "ANY_ROLE",
    "AssignedUser",
    "Assignment",
    "AvailabilityWindow",
    "Employee",
    "FairnessMetrics",
    "SchedulerConfig",
    "ShiftSlot",
    "TimeRange",
    "UnfilledEntry",
    # Time helpers
    "format_minutes",
    "parse_date",
    "parse_time",
    # Conditions
    "ConditionKind",
    "ScheduleCondition",
    # Errors
    "ValidationError",
    "ValidationErrorType",
    "ValidationIssue",
]
