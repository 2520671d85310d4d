"""Validation module for scheduling input and output."""

from shiftplanner.validation.validator import (
    AuditError,
    AuditErrorType,
    ScheduleValidator,
    ValidationResult,
)

__all__ = [
    "AuditError",
    "AuditErrorType",
    "ScheduleValidator",
    "ValidationResult",
]
