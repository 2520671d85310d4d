"""Error types raised for malformed scheduling input.

Only malformed input is fatal. Shortfalls and unsupported condition kinds are
reported through the schedule result instead of being raised.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ValidationErrorType(Enum):
    """Types of input validation errors."""

    INVALID_TIME = "invalid_time"
    INVALID_RANGE = "invalid_range"
    INVALID_HEADCOUNT = "invalid_headcount"
    DUPLICATE_SHIFT_ID = "duplicate_shift_id"
    DUPLICATE_EMPLOYEE_ID = "duplicate_employee_id"
    INVALID_CONDITION = "invalid_condition"
    INVALID_DATE = "invalid_date"
    MISSING_FIELD = "missing_field"


@dataclass
class ValidationIssue:
    """A single problem found in the scheduling input."""

    error_type: ValidationErrorType
    message: str
    shift_id: Optional[str] = None
    employee_id: Optional[str] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.error_type.value}]"]
        if self.shift_id:
            parts.append(f"Shift {self.shift_id}:")
        if self.employee_id:
            parts.append(f"Employee {self.employee_id}:")
        parts.append(self.message)
        return " ".join(parts)


class ValidationError(ValueError):
    """Raised when scheduling input is malformed.

    Carries every issue found so callers can report them all at once.
    """

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = list(issues)
        if len(self.issues) == 1:
            message = str(self.issues[0])
        else:
            message = f"{len(self.issues)} validation issues: " + "; ".join(
                str(issue) for issue in self.issues
            )
        super().__init__(message)

    @classmethod
    def single(
        cls,
        error_type: ValidationErrorType,
        message: str,
        **kwargs,
    ) -> "ValidationError":
        """Build an error holding exactly one issue."""
        return cls([ValidationIssue(error_type=error_type, message=message, **kwargs)])
