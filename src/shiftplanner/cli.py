"""Command-line interface for the shift scheduler."""

import argparse
import logging
import sys
from datetime import date, timedelta
from typing import Optional

from shiftplanner.domain.conditions import ConditionKind, ScheduleCondition
from shiftplanner.domain.errors import ValidationError
from shiftplanner.domain.models import (
    AvailabilityWindow,
    Employee,
    ShiftSlot,
    TimeRange,
)
from shiftplanner.io import dump_result, load_input
from shiftplanner.output.report_generator import ReportGenerator
from shiftplanner.scheduling.result import ScheduleResult
from shiftplanner.scheduling.scheduler import Scheduler
from shiftplanner.validation.validator import ScheduleValidator

SERVER = "Phục vụ"
BARTENDER = "Pha chế"
CASHIER = "Thu ngân"

# (label, role, start, end, headcount)
DEMO_TEMPLATES = [
    ("Sáng", SERVER, "06:00", "12:00", 2),
    ("Trưa", SERVER, "12:00", "17:00", 2),
    ("Tối", SERVER, "17:00", "22:30", 2),
    ("Sáng", BARTENDER, "06:00", "12:00", 1),
    ("Tối", BARTENDER, "17:00", "22:30", 1),
    ("Ca ngày", CASHIER, "08:00", "16:00", 1),
]


def create_sample_employees(count: int = 10) -> list[Employee]:
    """Create a sample roster mixing servers, bartenders and cashiers."""
    names = [
        "An", "Bình", "Chi", "Dũng", "Giang", "Hà", "Hùng", "Khoa",
        "Lan", "Linh", "Minh", "Nam", "Ngọc", "Phúc", "Quân", "Tâm",
    ]
    employees = []
    for i in range(count):
        name = names[i % len(names)]
        if i >= len(names):
            name = f"{name} {i // len(names) + 1}"

        if i % 5 == 3:
            role, secondary = BARTENDER, (SERVER,)
        elif i % 5 == 4:
            role, secondary = CASHIER, ()
        else:
            role, secondary = SERVER, ((BARTENDER,) if i % 4 == 0 else ())

        employees.append(
            Employee(
                uid=f"u{i + 1:03d}",
                display_name=name,
                role=role,
                secondary_roles=secondary,
            )
        )
    return employees


def create_sample_availability(
    employees: list[Employee],
    dates: list[date],
) -> list[AvailabilityWindow]:
    """Create varied availability: openers, closers, split days and days off."""
    windows = []
    for i, employee in enumerate(employees):
        for d in dates:
            if (i + d.weekday()) % 7 == 0:
                continue  # day off
            if i % 4 == 0:
                slots = [TimeRange("05:30", "17:00")]
            elif i % 4 == 1:
                slots = [TimeRange("11:30", "23:00")]
            elif i % 4 == 2:
                slots = [TimeRange("06:00", "12:00"), TimeRange("17:00", "23:00")]
            else:
                slots = [TimeRange("06:00", "23:00")]
            windows.append(
                AvailabilityWindow(
                    user_id=employee.uid,
                    user_name=employee.display_name,
                    date=d,
                    available_slots=slots,
                )
            )
    return windows


def create_sample_shifts(dates: list[date]) -> list[ShiftSlot]:
    """Expand the demo templates over the given dates."""
    shifts = []
    for d in dates:
        for index, (label, role, start, end, headcount) in enumerate(DEMO_TEMPLATES):
            shifts.append(
                ShiftSlot(
                    id=f"{d.isoformat()}_t{index}",
                    template_id=f"t{index}",
                    date=d,
                    label=label,
                    role=role,
                    time_slot=TimeRange(start, end),
                    min_users=headcount,
                )
            )
    return shifts


def print_summary(result: ScheduleResult) -> None:
    """Print a short summary of a result."""
    metrics = result.fairness
    print(f"\n{'=' * 60}")
    print("Schedule Summary")
    print(f"{'=' * 60}")
    print(f"  Shifts: {len(result.shifts)}")
    print(f"  Assignments: {len(result.assignments)}")
    print(f"  Unfilled shifts: {len(result.unfilled)}")
    print(f"  Avg Hours/Employee: {metrics.avg_hours:.1f}")
    print(f"  Hours Spread: {metrics.spread_hours:.1f}")
    print(f"  Fairness Score: {metrics.fairness_score:.1f}/100")

    if result.warnings:
        print(f"\nWarnings ({len(result.warnings)}):")
        for warning in result.warnings[:5]:
            print(f"    - {warning}")
        if len(result.warnings) > 5:
            print(f"    ... and {len(result.warnings) - 5} more warnings")


def run_demo(employee_count: int = 10, days: int = 7) -> None:
    """Run a demo scheduling week."""
    print(f"Generating demo schedule for {employee_count} employees over {days} days...")

    today = date.today()
    start_date = today - timedelta(days=today.weekday())
    dates = [start_date + timedelta(days=i) for i in range(days)]

    employees = create_sample_employees(employee_count)
    availability = create_sample_availability(employees, dates)
    shifts = create_sample_shifts(dates)
    conditions = [
        ScheduleCondition(
            id="weekly-cap",
            kind=ConditionKind.MAX_SHIFTS_PER_WEEK,
            params={"max": 6},
            name="Max 6 shifts per week",
        ),
        ScheduleCondition(
            id="rest",
            kind=ConditionKind.MIN_REST_HOURS,
            params={"hours": 8},
            name="8h rest between shifts",
        ),
    ]

    result = Scheduler().run(shifts, employees, availability, conditions)
    print_summary(result)

    audit = ScheduleValidator().audit(result, employees, availability)
    if audit.is_valid:
        print("\nValidation: PASSED")
    else:
        print(f"\nValidation: FAILED ({len(audit.errors)} errors)")
        for error in audit.errors[:5]:
            print(f"    - {error}")


def run_file(
    input_path: str,
    output_path: Optional[str] = None,
    report: bool = False,
) -> int:
    """Schedule a run described by a JSON file."""
    try:
        loaded = load_input(input_path)
        result = Scheduler().run(
            loaded.shifts, loaded.employees, loaded.availability, loaded.constraints
        )
    except ValidationError as exc:
        print(f"Invalid input ({len(exc.issues)} issue(s)):", file=sys.stderr)
        for issue in exc.issues:
            print(f"    - {issue}", file=sys.stderr)
        return 2

    content = dump_result(result, output_path)
    if output_path is None:
        print(content)
    else:
        print(f"Result written to {output_path}")
        print_summary(result)

    if report:
        print(ReportGenerator().generate_to_string(result, loaded.employees))
    return 0


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Shift Planner - Shift Assignment Scheduler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s demo                          Run a demo week with 10 employees
  %(prog)s demo --count 16 --days 5      Run a 5-day demo with 16 employees

  %(prog)s run input.json                Print the result as JSON
  %(prog)s run input.json -o out.json    Write the result to a file
  %(prog)s run input.json --report       Also print a text report
        """,
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    demo_parser = subparsers.add_parser("demo", help="Run a demo scheduling week")
    demo_parser.add_argument(
        "--count", "-c",
        type=int,
        default=10,
        help="Number of employees to generate (default: 10)",
    )
    demo_parser.add_argument(
        "--days", "-d",
        type=int,
        default=7,
        help="Number of days to schedule (default: 7)",
    )

    run_parser = subparsers.add_parser("run", help="Schedule shifts from a JSON file")
    run_parser.add_argument("input", type=str, help="Input JSON file")
    run_parser.add_argument(
        "--output", "-o",
        type=str,
        help="Output JSON file path",
    )
    run_parser.add_argument(
        "--report", "-r",
        action="store_true",
        help="Print a text report after the result",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "demo":
        run_demo(args.count, args.days)
        return 0
    elif args.command == "run":
        return run_file(args.input, args.output, args.report)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
