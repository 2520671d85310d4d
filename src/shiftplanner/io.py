"""JSON loading and dumping for scheduling runs.

Shift, employee and availability records use camelCase keys, ISO dates and
"HH:mm" times. Condition records use the ``ConditionKind`` tags with
snake_case params (``max_hours``, ``blocked_employee_ids``); any other type
is loaded unchanged and reported as an unsupported kind. Every malformed
record is collected and reported in one ``ValidationError``.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, TypeVar, Union

from shiftplanner.domain.conditions import ScheduleCondition
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
    parse_date,
)
from shiftplanner.scheduling.result import ScheduleResult

T = TypeVar("T")


@dataclass
class ScheduleInput:
    """Everything one scheduling run needs."""

    shifts: list[ShiftSlot] = field(default_factory=list)
    employees: list[Employee] = field(default_factory=list)
    availability: list[AvailabilityWindow] = field(default_factory=list)
    constraints: list[ScheduleCondition] = field(default_factory=list)


def _text(data: dict, key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"{key!r} must be a string, got {value!r}")
    return value


def _time_range(data: dict) -> TimeRange:
    return TimeRange(start=data["start"], end=data["end"])


def shift_from_dict(data: dict) -> ShiftSlot:
    return ShiftSlot(
        id=_text(data, "id"),
        template_id=data.get("templateId", ""),
        date=parse_date(data["date"]),
        label=data.get("label", data["id"]),
        role=_text(data, "role"),
        time_slot=_time_range(data["timeSlot"]),
        min_users=data.get("minUsers", 1),
    )


def employee_from_dict(data: dict) -> Employee:
    return Employee(
        uid=_text(data, "uid"),
        display_name=data.get("displayName", data["uid"]),
        role=_text(data, "role"),
        secondary_roles=tuple(data.get("secondaryRoles") or ()),
        is_test_account=bool(data.get("isTestAccount", False)),
    )


def availability_from_dict(data: dict) -> AvailabilityWindow:
    return AvailabilityWindow(
        user_id=_text(data, "userId"),
        user_name=data.get("userName", data["userId"]),
        date=parse_date(data["date"]),
        available_slots=[_time_range(s) for s in data.get("availableSlots", [])],
    )


def condition_from_dict(data: dict) -> ScheduleCondition:
    kind = _text(data, "kind" if data.get("kind") else "type")
    params = data.get("params") or {}
    if not isinstance(params, dict):
        raise ValidationError.single(
            ValidationErrorType.INVALID_CONDITION,
            f"Condition params must be an object, got {params!r}",
        )
    return ScheduleCondition(
        id=data.get("id", kind),
        kind=kind,
        params=dict(params),
        employee_id=data.get("userId"),
        enabled=bool(data.get("enabled", True)),
        name=data.get("name", ""),
    )


def _parse_all(
    records: list[dict],
    parse: Callable[[dict], T],
    section: str,
    issues: list[ValidationIssue],
) -> list[T]:
    parsed = []
    if not isinstance(records, list):
        issues.append(
            ValidationIssue(
                error_type=ValidationErrorType.MISSING_FIELD,
                message=f"{section} must be a list of objects",
                details={"section": section},
            )
        )
        return parsed
    for position, record in enumerate(records):
        if not isinstance(record, dict):
            issues.append(
                ValidationIssue(
                    error_type=ValidationErrorType.MISSING_FIELD,
                    message=f"{section}[{position}] must be an object, got {record!r}",
                    details={"section": section, "index": position},
                )
            )
            continue
        try:
            parsed.append(parse(record))
        except ValidationError as exc:
            for issue in exc.issues:
                issue.details.setdefault("section", section)
                issue.details.setdefault("index", position)
            issues.extend(exc.issues)
        except (KeyError, TypeError) as exc:
            issues.append(
                ValidationIssue(
                    error_type=ValidationErrorType.MISSING_FIELD,
                    message=f"{section}[{position}] is missing or has a malformed field: {exc}",
                    details={"section": section, "index": position},
                )
            )
    return parsed


def load_input(source: Union[str, Path, dict[str, Any]]) -> ScheduleInput:
    """Load a scheduling run from a JSON file path or an already-parsed dict.

    Raises:
        ValidationError: If any record is malformed.
    """
    if isinstance(source, (str, Path)):
        try:
            data = json.loads(Path(source).read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValidationError.single(
                ValidationErrorType.MISSING_FIELD,
                f"Input is not valid JSON: {exc}",
            ) from None
    else:
        data = source
    if not isinstance(data, dict):
        raise ValidationError.single(
            ValidationErrorType.MISSING_FIELD,
            "Input must be an object with shifts, employees, availability and constraints",
        )

    issues: list[ValidationIssue] = []
    loaded = ScheduleInput(
        shifts=_parse_all(data.get("shifts", []), shift_from_dict, "shifts", issues),
        employees=_parse_all(data.get("employees", []), employee_from_dict, "employees", issues),
        availability=_parse_all(
            data.get("availability", []), availability_from_dict, "availability", issues
        ),
        constraints=_parse_all(
            data.get("constraints", []), condition_from_dict, "constraints", issues
        ),
    )
    if issues:
        raise ValidationError(issues)
    return loaded


def dump_result(result: ScheduleResult, path: Union[str, Path, None] = None) -> str:
    """Serialize a result to JSON, writing it to ``path`` when given."""
    content = json.dumps(result.to_dict(), ensure_ascii=False, indent=2)
    if path is not None:
        Path(path).write_text(content, encoding="utf-8")
    return content
