"""Validation for scheduling input and output.

Input validation is fatal: every problem is collected and raised together
as a ``ValidationError`` before any assignment is attempted. The result
audit re-checks a finished schedule against the scheduling invariants and
reports violations without raising.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Optional

from shiftplanner.domain.errors import (
    ValidationError,
    ValidationErrorType,
    ValidationIssue,
)
from shiftplanner.domain.models import (
    AvailabilityWindow,
    Employee,
    ShiftSlot,
    TimeRange,
)

if TYPE_CHECKING:
    from shiftplanner.scheduling.result import ScheduleResult


class AuditErrorType(Enum):
    """Types of invariant violations found in a schedule."""

    UNKNOWN_SHIFT = "unknown_shift"
    UNKNOWN_EMPLOYEE = "unknown_employee"
    ROLE_MISMATCH = "role_mismatch"
    OUTSIDE_AVAILABILITY = "outside_availability"
    DOUBLE_BOOKED = "double_booked"
    HEADCOUNT_EXCEEDED = "headcount_exceeded"
    UNFILLED_MISMATCH = "unfilled_mismatch"


@dataclass
class AuditError:
    """A single invariant violation."""

    error_type: AuditErrorType
    message: str
    shift_id: Optional[str] = None
    employee_id: Optional[str] = None

    def __str__(self) -> str:
        parts = [f"[{self.error_type.value}]"]
        if self.employee_id:
            parts.append(f"Employee {self.employee_id}:")
        parts.append(self.message)
        if self.shift_id:
            parts.append(f"(shift {self.shift_id})")
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of auditing a schedule."""

    is_valid: bool
    errors: list[AuditError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: AuditError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(warning)


class ScheduleValidator:
    """Validates scheduling input and audits scheduling output.

    Example:
        >>> validator = ScheduleValidator()
        >>> validator.validate_request(shifts, employees, availability)
        >>> result = validator.audit(schedule_result, employees, availability)
        >>> if not result.is_valid:
        ...     for error in result.errors:
        ...         print(error)
    """

    def validate_request(
        self,
        shifts: list[ShiftSlot],
        employees: list[Employee],
        availability: list[AvailabilityWindow],
        condition_issues: Optional[list[ValidationIssue]] = None,
    ) -> None:
        """Check scheduling input before a run.

        Args:
            shifts: Shift slots to staff.
            employees: Roster to draw from.
            availability: Declared availability windows.
            condition_issues: Problems already found in condition params.

        Raises:
            ValidationError: With every issue found, if any.
        """
        issues: list[ValidationIssue] = []
        issues.extend(self._validate_shifts(shifts))
        issues.extend(self._validate_employees(employees))
        issues.extend(self._validate_availability(availability))
        issues.extend(condition_issues or [])
        if issues:
            raise ValidationError(issues)

    def _validate_shifts(self, shifts: list[ShiftSlot]) -> list[ValidationIssue]:
        issues = []
        seen: set[str] = set()
        for shift in shifts:
            if shift.id in seen:
                issues.append(
                    ValidationIssue(
                        error_type=ValidationErrorType.DUPLICATE_SHIFT_ID,
                        message="Duplicate shift id",
                        shift_id=shift.id,
                    )
                )
            seen.add(shift.id)

            headcount_ok = (
                isinstance(shift.min_users, int)
                and not isinstance(shift.min_users, bool)
                and shift.min_users > 0
            )
            if not headcount_ok:
                issues.append(
                    ValidationIssue(
                        error_type=ValidationErrorType.INVALID_HEADCOUNT,
                        message=f"min_users must be a positive integer, got {shift.min_users!r}",
                        shift_id=shift.id,
                    )
                )
            if not isinstance(shift.date, date):
                issues.append(
                    ValidationIssue(
                        error_type=ValidationErrorType.INVALID_DATE,
                        message=f"Shift date must be a date, got {shift.date!r}",
                        shift_id=shift.id,
                    )
                )
            if not isinstance(shift.time_slot, TimeRange):
                issues.append(
                    ValidationIssue(
                        error_type=ValidationErrorType.INVALID_RANGE,
                        message=f"Shift time slot must be a TimeRange, got {shift.time_slot!r}",
                        shift_id=shift.id,
                    )
                )
        return issues

    def _validate_employees(self, employees: list[Employee]) -> list[ValidationIssue]:
        issues = []
        seen: set[str] = set()
        for employee in employees:
            if employee.uid in seen:
                issues.append(
                    ValidationIssue(
                        error_type=ValidationErrorType.DUPLICATE_EMPLOYEE_ID,
                        message="Duplicate employee uid",
                        employee_id=employee.uid,
                    )
                )
            seen.add(employee.uid)
        return issues

    def _validate_availability(
        self,
        availability: list[AvailabilityWindow],
    ) -> list[ValidationIssue]:
        issues = []
        for window in availability:
            if not isinstance(window.date, date):
                issues.append(
                    ValidationIssue(
                        error_type=ValidationErrorType.INVALID_DATE,
                        message=f"Availability date must be a date, got {window.date!r}",
                        employee_id=window.user_id,
                    )
                )
            for time_range in window.available_slots:
                if not isinstance(time_range, TimeRange):
                    issues.append(
                        ValidationIssue(
                            error_type=ValidationErrorType.INVALID_RANGE,
                            message=f"Availability slot must be a TimeRange, got {time_range!r}",
                            employee_id=window.user_id,
                        )
                    )
        return issues

    def audit(
        self,
        result: "ScheduleResult",
        employees: list[Employee],
        availability: list[AvailabilityWindow],
    ) -> ValidationResult:
        """Re-check a finished schedule against the scheduling invariants.

        Args:
            result: The schedule to audit.
            employees: Roster the schedule was built from.
            availability: Availability the schedule was built from.

        Returns:
            ValidationResult with is_valid flag and any errors.
        """
        audit = ValidationResult(is_valid=True)
        shifts_by_id = {s.id: s for s in result.shifts}
        employees_by_id = {e.uid: e for e in employees}
        windows: dict[tuple[str, date], list[AvailabilityWindow]] = defaultdict(list)
        for window in availability:
            windows[(window.user_id, window.date)].append(window)

        per_shift: dict[str, int] = defaultdict(int)
        booked: dict[tuple[str, date], list[ShiftSlot]] = defaultdict(list)

        for assignment in result.assignments:
            shift = shifts_by_id.get(assignment.shift_id)
            employee = employees_by_id.get(assignment.employee_id)
            if shift is None:
                audit.add_error(
                    AuditError(
                        error_type=AuditErrorType.UNKNOWN_SHIFT,
                        message="Assignment references an unknown shift",
                        shift_id=assignment.shift_id,
                        employee_id=assignment.employee_id,
                    )
                )
                continue
            if employee is None:
                audit.add_error(
                    AuditError(
                        error_type=AuditErrorType.UNKNOWN_EMPLOYEE,
                        message="Assignment references an unknown employee",
                        shift_id=shift.id,
                        employee_id=assignment.employee_id,
                    )
                )
                continue

            per_shift[shift.id] += 1

            if not employee.has_role(shift.role):
                audit.add_error(
                    AuditError(
                        error_type=AuditErrorType.ROLE_MISMATCH,
                        message=f"Employee cannot work role {shift.role}",
                        shift_id=shift.id,
                        employee_id=employee.uid,
                    )
                )

            covered = any(
                w.covers(shift.time_slot) for w in windows[(employee.uid, shift.date)]
            )
            if not covered:
                audit.add_error(
                    AuditError(
                        error_type=AuditErrorType.OUTSIDE_AVAILABILITY,
                        message=f"Shift {shift.time_slot} is outside declared availability",
                        shift_id=shift.id,
                        employee_id=employee.uid,
                    )
                )

            for other in booked[(employee.uid, shift.date)]:
                if other.time_slot.overlaps(shift.time_slot):
                    audit.add_error(
                        AuditError(
                            error_type=AuditErrorType.DOUBLE_BOOKED,
                            message=f"Overlaps shift {other.id} ({other.time_slot})",
                            shift_id=shift.id,
                            employee_id=employee.uid,
                        )
                    )
            booked[(employee.uid, shift.date)].append(shift)

        unfilled = {u.shift_id: u.remaining for u in result.unfilled}
        for shift in result.shifts:
            count = per_shift.get(shift.id, 0)
            if count > shift.min_users:
                audit.add_error(
                    AuditError(
                        error_type=AuditErrorType.HEADCOUNT_EXCEEDED,
                        message=f"{count} assigned but min_users is {shift.min_users}",
                        shift_id=shift.id,
                    )
                )
            expected = max(0, shift.min_users - count)
            if unfilled.get(shift.id, 0) != expected:
                audit.add_error(
                    AuditError(
                        error_type=AuditErrorType.UNFILLED_MISMATCH,
                        message=(
                            f"Unfilled remaining is {unfilled.get(shift.id, 0)}, "
                            f"expected {expected}"
                        ),
                        shift_id=shift.id,
                    )
                )
            if 0 < count < shift.min_users:
                audit.add_warning(f"Shift {shift.id} is understaffed ({count}/{shift.min_users})")

        return audit
