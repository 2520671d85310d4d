"""Fairness scoring for candidate ranking.

The scorer keeps a running total of assigned minutes per employee and
prefers whoever has worked least so far in the run. This approximates an
even spread of hours without solving for it globally.
"""

from shiftplanner.domain.models import Employee, FairnessMetrics, ShiftSlot


class FairnessScorer:
    """Tracks assigned minutes per employee during a single run."""

    def __init__(self, employees: list[Employee]):
        self.minutes: dict[str, int] = {e.uid: 0 for e in employees}

    def rank_key(self, employee: Employee) -> tuple[int, str, str]:
        """Sort key: fewest minutes first, then display name, then uid."""
        return (self.minutes.get(employee.uid, 0), employee.display_name, employee.uid)

    def rank(self, candidates: list[Employee]) -> list[Employee]:
        """Return candidates ordered from most to least preferred."""
        return sorted(candidates, key=self.rank_key)

    def record(self, employee_id: str, shift: ShiftSlot) -> None:
        """Add a committed shift's duration to the employee's total."""
        self.minutes[employee_id] = self.minutes.get(employee_id, 0) + shift.duration_minutes

    def total_minutes(self, employee_id: str) -> int:
        return self.minutes.get(employee_id, 0)

    def spread_minutes(self) -> int:
        """Difference between the most and least loaded employee."""
        if not self.minutes:
            return 0
        return max(self.minutes.values()) - min(self.minutes.values())

    def metrics(self) -> FairnessMetrics:
        """Summarize the current totals."""
        return FairnessMetrics.calculate(self.minutes)
