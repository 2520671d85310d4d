"""Domain models for the shift scheduler.

This module contains the core data structures used throughout the scheduler:
time ranges, employees, shift slots, availability windows and the records
produced by a scheduling run.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from shiftplanner.domain.errors import ValidationError, ValidationErrorType

# Wildcard role: a shift requiring it can be staffed by anyone.
ANY_ROLE = "Bất kỳ"

_TIME_PATTERN = re.compile(r"([0-9]{2}):([0-9]{2})")


def parse_time(value: str) -> int:
    """Parse an "HH:mm" string into minutes after midnight.

    "24:00" is accepted as the end of the day.

    Raises:
        ValidationError: If the value is not a well-formed time.
    """
    match = _TIME_PATTERN.fullmatch(value) if isinstance(value, str) else None
    if match is None:
        raise ValidationError.single(
            ValidationErrorType.INVALID_TIME,
            f"Malformed time {value!r}, expected HH:mm",
        )
    hours, minutes = int(match.group(1)), int(match.group(2))
    if (hours, minutes) == (24, 0):
        return 24 * 60
    if hours > 23 or minutes > 59:
        raise ValidationError.single(
            ValidationErrorType.INVALID_TIME,
            f"Time {value!r} is out of range",
        )
    return hours * 60 + minutes


def format_minutes(minutes: int) -> str:
    """Format minutes after midnight as "HH:mm"."""
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


@dataclass(frozen=True)
class TimeRange:
    """A same-day "HH:mm" time range with half-open semantics.

    The range covers [start, end): a range ending at 12:00 and one starting
    at 12:00 do not overlap.

    Attributes:
        start: Start time as "HH:mm".
        end: End time as "HH:mm" (exclusive).
    """

    start: str
    end: str

    def __post_init__(self):
        if parse_time(self.end) <= parse_time(self.start):
            raise ValidationError.single(
                ValidationErrorType.INVALID_RANGE,
                f"Time range {self.start}-{self.end} is empty or crosses midnight",
            )

    @property
    def start_minutes(self) -> int:
        """Minutes from midnight when the range starts."""
        return parse_time(self.start)

    @property
    def end_minutes(self) -> int:
        """Minutes from midnight when the range ends."""
        return parse_time(self.end)

    @property
    def duration_minutes(self) -> int:
        """Length of the range in minutes."""
        return self.end_minutes - self.start_minutes

    def contains(self, other: "TimeRange") -> bool:
        """Check if this range fully contains another."""
        return (
            self.start_minutes <= other.start_minutes
            and other.end_minutes <= self.end_minutes
        )

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another."""
        return (
            self.start_minutes < other.end_minutes
            and other.start_minutes < self.end_minutes
        )

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


@dataclass(frozen=True)
class Employee:
    """An employee who can be scheduled.

    Attributes:
        uid: Unique identifier for the employee.
        display_name: Name shown on the schedule.
        role: Primary role.
        secondary_roles: Additional roles the employee may cover.
        is_test_account: Test accounts are left out of scheduling.
    """

    uid: str
    display_name: str
    role: str
    secondary_roles: tuple[str, ...] = ()
    is_test_account: bool = False

    def __post_init__(self):
        # Accept any iterable for secondary roles but keep the object hashable.
        object.__setattr__(self, "secondary_roles", tuple(self.secondary_roles))

    def has_role(self, role: str) -> bool:
        """Check if the employee may staff a shift requiring ``role``."""
        if role == ANY_ROLE:
            return True
        return role == self.role or role in self.secondary_roles


@dataclass
class AssignedUser:
    """An employee placed on a shift slot."""

    user_id: str
    user_name: str
    assigned_role: str


@dataclass
class ShiftSlot:
    """A concrete staffing need for one date.

    Attributes:
        id: Unique shift identifier.
        template_id: Template the shift was expanded from.
        date: Calendar date of the shift.
        label: Display label (e.g. "Sáng").
        role: Role required to staff the shift.
        time_slot: Time window of the shift on ``date``.
        min_users: Headcount the shift needs.
        assigned_users: Employees placed on the shift so far.
    """

    id: str
    template_id: str
    date: date
    label: str
    role: str
    time_slot: TimeRange
    min_users: int = 1
    assigned_users: list[AssignedUser] = field(default_factory=list)

    @property
    def duration_minutes(self) -> int:
        """Length of the shift in minutes."""
        return self.time_slot.duration_minutes

    @property
    def start_datetime(self) -> datetime:
        """Absolute start of the shift."""
        return datetime.combine(self.date, datetime.min.time()) + timedelta(
            minutes=self.time_slot.start_minutes
        )

    @property
    def end_datetime(self) -> datetime:
        """Absolute end of the shift."""
        return datetime.combine(self.date, datetime.min.time()) + timedelta(
            minutes=self.time_slot.end_minutes
        )

    @property
    def assigned_count(self) -> int:
        return len(self.assigned_users)

    def is_assigned(self, employee_id: str) -> bool:
        """Check if an employee is already on this shift."""
        return any(u.user_id == employee_id for u in self.assigned_users)

    def describe(self) -> str:
        """Short human-readable description used in warnings."""
        return f"{self.label} ({self.id}) on {self.date.isoformat()} {self.time_slot}"


@dataclass
class AvailabilityWindow:
    """One employee's declared availability for one date.

    Attributes:
        user_id: Employee the window belongs to.
        user_name: Employee display name at capture time.
        date: Date the window applies to.
        available_slots: Time ranges the employee is willing to work.
    """

    user_id: str
    user_name: str
    date: date
    available_slots: list[TimeRange] = field(default_factory=list)

    def covers(self, time_slot: TimeRange) -> bool:
        """Check if any single range fully contains ``time_slot``."""
        return any(r.contains(time_slot) for r in self.available_slots)


@dataclass(frozen=True)
class Assignment:
    """A committed pairing of an employee with a shift."""

    shift_id: str
    employee_id: str
    employee_name: str
    role: str


@dataclass(frozen=True)
class UnfilledEntry:
    """Headcount still unmet for a shift after the run."""

    shift_id: str
    role: str
    remaining: int


@dataclass
class FairnessMetrics:
    """Metrics describing how evenly work was spread in a run.

    Attributes:
        hours_per_employee: Dict mapping employee ID to assigned hours.
        avg_hours: Average hours across all employees.
        hours_std_dev: Standard deviation of hours.
        min_hours: Minimum hours assigned to any employee.
        max_hours: Maximum hours assigned to any employee.
        fairness_score: Overall fairness score (0-100, higher is fairer).
    """

    hours_per_employee: dict[str, float] = field(default_factory=dict)
    avg_hours: float = 0.0
    hours_std_dev: float = 0.0
    min_hours: float = 0.0
    max_hours: float = 0.0
    fairness_score: float = 100.0

    @classmethod
    def calculate(cls, minutes_by_employee: dict[str, int]) -> "FairnessMetrics":
        """Calculate fairness metrics from assigned minutes."""
        if not minutes_by_employee:
            return cls()

        hours = {eid: mins / 60.0 for eid, mins in minutes_by_employee.items()}
        values = list(hours.values())

        avg = sum(values) / len(values)
        variance = sum((h - avg) ** 2 for h in values) / len(values)
        std_dev = variance ** 0.5

        # 100 = perfectly even, 0 once the std dev reaches 4 hours
        max_acceptable_std_dev = 4.0
        score = max(0.0, 100.0 - (std_dev / max_acceptable_std_dev) * 100.0)

        return cls(
            hours_per_employee=hours,
            avg_hours=avg,
            hours_std_dev=std_dev,
            min_hours=min(values),
            max_hours=max(values),
            fairness_score=score,
        )

    @property
    def spread_hours(self) -> float:
        """Difference between the most and least loaded employee."""
        return self.max_hours - self.min_hours


@dataclass
class SchedulerConfig:
    """Configuration for a scheduling run.

    Attributes:
        ignore_test_accounts: Leave employees flagged as test accounts out.
        report_blocked_candidates: Add a warning naming the condition that
            blocked the best candidate when a shift runs out of candidates.
    """

    ignore_test_accounts: bool = True
    report_blocked_candidates: bool = True


def iso_week(d: date) -> tuple[int, int]:
    """ISO (year, week) key used to bucket shifts into weeks."""
    year, week, _ = d.isocalendar()
    return year, week


def parse_date(value) -> date:
    """Parse an ISO "YYYY-MM-DD" date, passing ``date`` objects through."""
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError.single(
            ValidationErrorType.INVALID_DATE,
            f"Malformed date {value!r}, expected YYYY-MM-DD",
        ) from None
