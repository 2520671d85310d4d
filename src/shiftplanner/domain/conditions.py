"""Schedule condition definitions.

Conditions are tagged records: ``kind`` selects the rule that interprets
``params``. Keeping them as plain data lets new kinds be stored and passed
around before the engine knows how to enforce them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ConditionKind(str, Enum):
    """Condition kinds understood by the constraint engine."""

    MAX_SHIFTS_PER_WEEK = "max-shifts-per-week"
    MAX_HOURS_PER_WEEK = "max-hours-per-week"
    MAX_SHIFTS_PER_DAY = "max-shifts-per-day"
    MIN_REST_HOURS = "min-rest-hours"
    BLACKOUT_DATE = "blackout-date"
    ROLE_EXCLUSIVITY = "role-exclusivity"
    SHIFT_BAN = "shift-ban"
    STAFF_EXCLUSION = "staff-exclusion"


@dataclass(frozen=True)
class ScheduleCondition:
    """A named rule that can veto an employee-shift pairing.

    Attributes:
        id: Unique condition identifier.
        kind: Kind tag, usually a ``ConditionKind`` value.
        params: Kind-specific parameters.
        employee_id: Employee the rule targets; None applies it to everyone.
        enabled: Disabled conditions are ignored.
        name: Display name used in warnings (defaults to ``id``).
    """

    id: str
    kind: str
    params: dict[str, Any] = field(default_factory=dict)
    employee_id: Optional[str] = None
    enabled: bool = True
    name: str = ""

    @property
    def kind_tag(self) -> str:
        """The kind as a plain string, whether given as str or ConditionKind."""
        if isinstance(self.kind, ConditionKind):
            return self.kind.value
        return self.kind

    @property
    def display_name(self) -> str:
        return self.name or self.id

    def applies_to(self, employee_id: str) -> bool:
        """Check if the condition targets the given employee."""
        return self.employee_id is None or self.employee_id == employee_id

    def param(self, key: str, default: Any = None) -> Any:
        return self.params.get(key, default)
