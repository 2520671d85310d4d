"""Constraint engine for schedule conditions.

Each condition kind is interpreted by a ``ConditionRule`` registered under
its kind tag. The engine looks rules up by tag, so adding a kind means
registering a new rule; the solver does not change.

Unknown kinds fail open: they are logged and reported once, and never
block a pairing.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, timedelta
from numbers import Real
from typing import Optional

from shiftplanner.domain.conditions import ConditionKind, ScheduleCondition
from shiftplanner.domain.errors import ValidationError, ValidationErrorType, ValidationIssue
from shiftplanner.domain.models import ANY_ROLE, Employee, ShiftSlot, iso_week, parse_date
from shiftplanner.scheduling.state import TentativeState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Verdict:
    """Outcome of checking a condition against a candidate pairing."""

    ok: bool
    reason: str = ""
    condition: Optional[ScheduleCondition] = None

    @classmethod
    def permit(cls) -> "Verdict":
        return cls(ok=True)

    @classmethod
    def deny(cls, reason: str, condition: Optional[ScheduleCondition] = None) -> "Verdict":
        return cls(ok=False, reason=reason, condition=condition)


class ConditionRule(ABC):
    """Abstract base class for condition kinds."""

    kind: str = ""

    @abstractmethod
    def validate(self, condition: ScheduleCondition) -> list[ValidationIssue]:
        """Check the condition's params.

        Returns:
            Issues found; empty when the condition is well-formed.
        """
        pass

    def evaluate(
        self,
        condition: ScheduleCondition,
        employee: Employee,
        shift: ShiftSlot,
        state: TentativeState,
    ) -> Verdict:
        """Check a candidate pairing against the tentative state.

        Conditions scoped to another employee always permit.
        """
        if not condition.applies_to(employee.uid):
            return Verdict.permit()
        return self.check(condition, employee, shift, state)

    @abstractmethod
    def check(
        self,
        condition: ScheduleCondition,
        employee: Employee,
        shift: ShiftSlot,
        state: TentativeState,
    ) -> Verdict:
        """Kind-specific check for a condition that targets ``employee``."""
        pass

    def _issue(self, condition: ScheduleCondition, message: str) -> ValidationIssue:
        return ValidationIssue(
            error_type=ValidationErrorType.INVALID_CONDITION,
            message=f"Condition {condition.display_name} ({self.kind}): {message}",
            employee_id=condition.employee_id,
            details={"condition_id": condition.id, "kind": self.kind},
        )

    def _require_number(
        self,
        condition: ScheduleCondition,
        key: str,
        integer: bool = False,
        maximum: Optional[float] = None,
    ) -> list[ValidationIssue]:
        value = condition.param(key)
        # bool is a Real subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, Real):
            return [self._issue(condition, f"param {key!r} must be a number, got {value!r}")]
        if not math.isfinite(value):
            return [self._issue(condition, f"param {key!r} must be finite, got {value!r}")]
        if integer and int(value) != value:
            return [self._issue(condition, f"param {key!r} must be a whole number, got {value!r}")]
        if value < 0:
            return [self._issue(condition, f"param {key!r} must not be negative, got {value!r}")]
        if maximum is not None and value > maximum:
            return [
                self._issue(condition, f"param {key!r} must be at most {maximum:g}, got {value!r}")
            ]
        return []


# Upper bound for min-rest-hours; keeps rest gaps within timedelta range.
MAX_REST_HOURS = 24 * 366

_RULES: dict[str, ConditionRule] = {}


def register_rule(rule_cls: type[ConditionRule]) -> type[ConditionRule]:
    """Class decorator registering a rule under its kind tag."""
    _RULES[rule_cls.kind] = rule_cls()
    return rule_cls


def registered_rules() -> dict[str, ConditionRule]:
    """Copy of the default rule registry."""
    return dict(_RULES)


@register_rule
class MaxShiftsPerWeekRule(ConditionRule):
    """Caps the number of shifts an employee gets in one ISO week."""

    kind = ConditionKind.MAX_SHIFTS_PER_WEEK.value

    def validate(self, condition: ScheduleCondition) -> list[ValidationIssue]:
        return self._require_number(condition, "max", integer=True)

    def check(self, condition, employee, shift, state) -> Verdict:
        limit = condition.param("max")
        count = len(state.shifts_in_week(employee.uid, shift.date))
        if count + 1 > limit:
            year, week = iso_week(shift.date)
            return Verdict.deny(
                f"{employee.display_name} already has {count} shift(s) in week "
                f"{year}-W{week:02d} (max {limit})",
                condition,
            )
        return Verdict.permit()


@register_rule
class MaxHoursPerWeekRule(ConditionRule):
    """Caps the hours an employee works in one ISO week."""

    kind = ConditionKind.MAX_HOURS_PER_WEEK.value

    def validate(self, condition: ScheduleCondition) -> list[ValidationIssue]:
        return self._require_number(condition, "max_hours")

    def check(self, condition, employee, shift, state) -> Verdict:
        limit_minutes = condition.param("max_hours") * 60
        worked = sum(s.duration_minutes for s in state.shifts_in_week(employee.uid, shift.date))
        if worked + shift.duration_minutes > limit_minutes:
            return Verdict.deny(
                f"{employee.display_name} would reach {(worked + shift.duration_minutes) / 60:g}h "
                f"this week (max {condition.param('max_hours'):g}h)",
                condition,
            )
        return Verdict.permit()


@register_rule
class MaxShiftsPerDayRule(ConditionRule):
    """Caps the number of shifts an employee works on one date."""

    kind = ConditionKind.MAX_SHIFTS_PER_DAY.value

    def validate(self, condition: ScheduleCondition) -> list[ValidationIssue]:
        return self._require_number(condition, "max", integer=True)

    def check(self, condition, employee, shift, state) -> Verdict:
        limit = condition.param("max")
        count = len(state.shifts_on(employee.uid, shift.date))
        if count + 1 > limit:
            return Verdict.deny(
                f"{employee.display_name} already has {count} shift(s) on "
                f"{shift.date.isoformat()} (max {limit})",
                condition,
            )
        return Verdict.permit()


@register_rule
class MinRestHoursRule(ConditionRule):
    """Requires a minimum gap between any two shifts of an employee."""

    kind = ConditionKind.MIN_REST_HOURS.value

    def validate(self, condition: ScheduleCondition) -> list[ValidationIssue]:
        return self._require_number(condition, "hours", maximum=MAX_REST_HOURS)

    def check(self, condition, employee, shift, state) -> Verdict:
        required = timedelta(hours=condition.param("hours"))
        for other in state.shifts_for(employee.uid):
            if other.end_datetime <= shift.start_datetime:
                gap = shift.start_datetime - other.end_datetime
            elif shift.end_datetime <= other.start_datetime:
                gap = other.start_datetime - shift.end_datetime
            else:
                gap = timedelta(0)
            if gap < required:
                return Verdict.deny(
                    f"{employee.display_name} would rest only "
                    f"{gap.total_seconds() / 3600:g}h next to shift {other.describe()} "
                    f"(min {condition.param('hours'):g}h)",
                    condition,
                )
        return Verdict.permit()


@register_rule
class BlackoutDateRule(ConditionRule):
    """Keeps an employee (or everyone) off the listed dates."""

    kind = ConditionKind.BLACKOUT_DATE.value

    def validate(self, condition: ScheduleCondition) -> list[ValidationIssue]:
        dates = condition.param("dates")
        if not isinstance(dates, (list, tuple, set, frozenset)) or not dates:
            return [self._issue(condition, "param 'dates' must be a non-empty list")]
        issues = []
        for value in dates:
            try:
                parse_date(value)
            except ValidationError as exc:
                issues.extend(self._issue(condition, str(i)) for i in exc.issues)
        return issues

    def _dates(self, condition: ScheduleCondition) -> set[date]:
        return {parse_date(v) for v in condition.param("dates", [])}

    def check(self, condition, employee, shift, state) -> Verdict:
        if shift.date in self._dates(condition):
            return Verdict.deny(
                f"{shift.date.isoformat()} is a blackout date for {employee.display_name}",
                condition,
            )
        return Verdict.permit()


@register_rule
class RoleExclusivityRule(ConditionRule):
    """Restricts an employee to a set of roles (primary role by default)."""

    kind = ConditionKind.ROLE_EXCLUSIVITY.value

    def validate(self, condition: ScheduleCondition) -> list[ValidationIssue]:
        roles = condition.param("roles")
        if roles is None:
            return []
        if not isinstance(roles, (list, tuple, set, frozenset)) or not all(
            isinstance(r, str) for r in roles
        ):
            return [self._issue(condition, "param 'roles' must be a list of role names")]
        if not roles:
            return [self._issue(condition, "param 'roles' must be a non-empty list when given")]
        return []

    def check(self, condition, employee, shift, state) -> Verdict:
        if shift.role == ANY_ROLE:
            return Verdict.permit()
        allowed = set(condition.param("roles") or [employee.role])
        if shift.role not in allowed:
            return Verdict.deny(
                f"{employee.display_name} may only work as {', '.join(sorted(allowed))}, "
                f"not {shift.role}",
                condition,
            )
        return Verdict.permit()


@register_rule
class ShiftBanRule(ConditionRule):
    """Never assigns an employee to shifts of one template."""

    kind = ConditionKind.SHIFT_BAN.value

    def validate(self, condition: ScheduleCondition) -> list[ValidationIssue]:
        if not isinstance(condition.param("template_id"), str):
            return [self._issue(condition, "param 'template_id' is required")]
        return []

    def check(self, condition, employee, shift, state) -> Verdict:
        if shift.template_id == condition.param("template_id"):
            return Verdict.deny(
                f"{employee.display_name} is banned from {shift.label} shifts",
                condition,
            )
        return Verdict.permit()


@register_rule
class StaffExclusionRule(ConditionRule):
    """Keeps an employee and a set of colleagues off the same shift.

    The rule is symmetric: it blocks the owner joining a shift a blocked
    colleague is on, and a blocked colleague joining the owner's shift.
    """

    kind = ConditionKind.STAFF_EXCLUSION.value

    def validate(self, condition: ScheduleCondition) -> list[ValidationIssue]:
        issues = []
        if condition.employee_id is None:
            issues.append(self._issue(condition, "employee_id is required"))
        blocked = condition.param("blocked_employee_ids")
        if (
            not isinstance(blocked, (list, tuple, set, frozenset))
            or not blocked
            or not all(isinstance(uid, str) for uid in blocked)
        ):
            issues.append(
                self._issue(
                    condition,
                    "param 'blocked_employee_ids' must be a non-empty list of employee ids",
                )
            )
        template_id = condition.param("template_id")
        if template_id is not None and not isinstance(template_id, str):
            issues.append(self._issue(condition, "param 'template_id' must be a string"))
        return issues

    def evaluate(self, condition, employee, shift, state) -> Verdict:
        # Both sides of the pair are checked, so scoping is handled in check().
        return self.check(condition, employee, shift, state)

    def check(self, condition, employee, shift, state) -> Verdict:
        template_id = condition.param("template_id")
        if template_id is not None and shift.template_id != template_id:
            return Verdict.permit()

        owner = condition.employee_id
        blocked = set(condition.param("blocked_employee_ids", []))
        on_shift = state.employees_on(shift.id)

        if employee.uid == owner:
            clashes = [uid for uid in on_shift if uid in blocked]
        elif employee.uid in blocked:
            clashes = [owner] if owner in on_shift else []
        else:
            return Verdict.permit()

        if clashes:
            return Verdict.deny(
                f"{employee.display_name} cannot share shift {shift.label} with "
                f"{', '.join(clashes)}",
                condition,
            )
        return Verdict.permit()


class ConstraintEngine:
    """Evaluates schedule conditions against candidate pairings.

    Example:
        >>> engine = ConstraintEngine(conditions)
        >>> verdict = engine.check_all(employee, shift, state)
        >>> if not verdict.ok:
        ...     print(verdict.reason)
    """

    def __init__(
        self,
        conditions: list[ScheduleCondition],
        rules: Optional[dict[str, ConditionRule]] = None,
    ):
        self.rules = registered_rules() if rules is None else dict(rules)
        self.conditions = [c for c in conditions if c.enabled]
        self.unsupported_kinds: list[str] = []

        for condition in self.conditions:
            kind = condition.kind_tag
            if kind not in self.rules and kind not in self.unsupported_kinds:
                self.unsupported_kinds.append(kind)
                logger.warning(
                    "Unsupported condition kind %r (condition %s); it will not be enforced",
                    kind,
                    condition.display_name,
                )

    def validate(self) -> list[ValidationIssue]:
        """Validate params of every enabled condition with a known kind."""
        issues = []
        for condition in self.conditions:
            rule = self.rules.get(condition.kind_tag)
            if rule is not None:
                issues.extend(rule.validate(condition))
        return issues

    def is_permitted(
        self,
        condition: ScheduleCondition,
        employee: Employee,
        shift: ShiftSlot,
        state: TentativeState,
    ) -> Verdict:
        """Check a single condition; unknown kinds always permit."""
        rule = self.rules.get(condition.kind_tag)
        if rule is None:
            return Verdict.permit()
        return rule.evaluate(condition, employee, shift, state)

    def check_all(
        self,
        employee: Employee,
        shift: ShiftSlot,
        state: TentativeState,
    ) -> Verdict:
        """Check every condition; the first failure is returned."""
        for condition in self.conditions:
            verdict = self.is_permitted(condition, employee, shift, state)
            if not verdict.ok:
                return verdict
        return Verdict.permit()

    def unsupported_warnings(self) -> list[str]:
        """One warning per unknown kind, in first-seen order."""
        return [
            f"Unsupported condition kind {kind!r} ignored (not enforced)"
            for kind in self.unsupported_kinds
        ]
