"""Text diagnostics for scheduling results.

This module creates a plain-text report to analyze:
- Staffing per shift, in processing order
- Hours per employee and the fairness spread
- Shortfalls and warnings raised during the run
"""

from pathlib import Path
from typing import Union

from shiftplanner.domain.models import Employee
from shiftplanner.scheduling.result import ScheduleResult
from shiftplanner.scheduling.solver import shift_priority_key


class ReportGenerator:
    """Generates a human-readable text report for a schedule result."""

    def generate(
        self,
        result: ScheduleResult,
        employees: list[Employee],
        output_path: Union[str, Path],
    ) -> str:
        """Generate the report and save it to a file.

        Args:
            result: The schedule to describe.
            employees: Roster used for the run.
            output_path: Path to save the text file.

        Returns:
            The generated text content.
        """
        content = self.generate_to_string(result, employees)
        Path(output_path).write_text(content, encoding="utf-8")
        return content

    def generate_to_string(
        self,
        result: ScheduleResult,
        employees: list[Employee],
    ) -> str:
        """Generate the report and return it as a string."""
        lines = []

        lines.append("=" * 80)
        lines.append("SHIFT SCHEDULE REPORT")
        lines.append("=" * 80)
        lines.append("")
        lines.append(f"Shifts: {len(result.shifts)}")
        lines.append(f"Assignments: {len(result.assignments)}")
        lines.append(f"Unfilled shifts: {len(result.unfilled)}")
        lines.append(f"Warnings: {len(result.warnings)}")
        lines.append("")

        # Per-shift staffing
        lines.append("-" * 80)
        lines.append("SHIFT STAFFING (processing order)")
        lines.append("-" * 80)
        lines.append(f"{'Date':<11} {'Time':^11} {'Label':<14} {'Role':<12} {'Staff':>7}  Assigned")
        lines.append("-" * 80)

        for shift in sorted(result.shifts, key=shift_priority_key):
            staffed = f"{shift.assigned_count}/{shift.min_users}"
            names = ", ".join(u.user_name for u in shift.assigned_users) or "-"
            marker = "" if shift.assigned_count >= shift.min_users else "  !"
            lines.append(
                f"{shift.date.isoformat():<11} {str(shift.time_slot):^11} "
                f"{shift.label[:14]:<14} {shift.role[:12]:<12} {staffed:>7}  {names}{marker}"
            )

        lines.append("")

        # Hours per employee
        lines.append("-" * 80)
        lines.append("HOURS PER EMPLOYEE")
        lines.append("-" * 80)

        hours = result.fairness.hours_per_employee
        by_name = sorted(employees, key=lambda e: (-hours.get(e.uid, 0.0), e.display_name))
        for employee in by_name:
            if employee.uid not in hours:
                continue
            worked = hours[employee.uid]
            bar = "#" * round(worked)
            lines.append(f"{employee.display_name[:20]:<20} {worked:>6.1f}h {bar}")

        metrics = result.fairness
        lines.append("")
        lines.append(f"Avg hours: {metrics.avg_hours:.1f}")
        lines.append(f"Spread (max - min): {metrics.spread_hours:.1f}h")
        lines.append(f"Fairness score: {metrics.fairness_score:.1f}/100")
        lines.append("")

        # Shortfalls and warnings
        lines.append("-" * 80)
        lines.append("SHORTFALLS")
        lines.append("-" * 80)
        if result.unfilled:
            for entry in result.unfilled:
                lines.append(f"  {entry.shift_id}: {entry.remaining} x {entry.role}")
        else:
            lines.append("  None")

        lines.append("")
        lines.append("-" * 80)
        lines.append("WARNINGS")
        lines.append("-" * 80)
        if result.warnings:
            for warning in result.warnings:
                lines.append(f"  - {warning}")
        else:
            lines.append("  None")

        lines.append("")
        lines.append("=" * 80)
        lines.append("END OF REPORT")
        lines.append("=" * 80)

        return "\n".join(lines)
