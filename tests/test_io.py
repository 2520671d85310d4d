"""Tests for JSON input loading, result dumping and the CLI."""

import json
import sys
from datetime import date

import pytest

from shiftplanner import cli
from shiftplanner.domain.conditions import ConditionKind
from shiftplanner.domain.errors import ValidationError, ValidationErrorType
from shiftplanner.io import dump_result, load_input
from shiftplanner.scheduling.scheduler import schedule

SERVER = "Phục vụ"


@pytest.fixture
def payload():
    return {
        "shifts": [
            {
                "id": "s1",
                "templateId": "t-morning",
                "date": "2025-01-06",
                "label": "Sáng",
                "role": SERVER,
                "timeSlot": {"start": "08:00", "end": "12:00"},
                "minUsers": 2,
            }
        ],
        "employees": [
            {"uid": "e1", "displayName": "An", "role": SERVER},
            {"uid": "e2", "displayName": "Bình", "role": SERVER, "secondaryRoles": ["Pha chế"]},
            {"uid": "qa", "displayName": "QA", "role": SERVER, "isTestAccount": True},
        ],
        "availability": [
            {
                "userId": "e1",
                "userName": "An",
                "date": "2025-01-06",
                "availableSlots": [{"start": "07:00", "end": "13:00"}],
            }
        ],
        "constraints": [
            {"id": "cap", "kind": "max-shifts-per-week", "params": {"max": 5}},
            {"id": "old", "type": "workload-magic", "enabled": False},
        ],
    }


class TestLoadInput:
    """Tests for load_input."""

    def test_loads_camel_case_records(self, payload):
        loaded = load_input(payload)

        shift = loaded.shifts[0]
        assert shift.template_id == "t-morning"
        assert shift.date == date(2025, 1, 6)
        assert str(shift.time_slot) == "08:00-12:00"
        assert shift.min_users == 2

        assert loaded.employees[1].secondary_roles == ("Pha chế",)
        assert loaded.employees[2].is_test_account
        assert loaded.availability[0].available_slots[0].end == "13:00"

        assert loaded.constraints[0].kind_tag == ConditionKind.MAX_SHIFTS_PER_WEEK.value
        assert loaded.constraints[1].kind == "workload-magic"
        assert not loaded.constraints[1].enabled

    def test_defaults(self):
        loaded = load_input(
            {
                "shifts": [
                    {
                        "id": "s1",
                        "date": "2025-01-06",
                        "role": SERVER,
                        "timeSlot": {"start": "08:00", "end": "12:00"},
                    }
                ],
                "employees": [{"uid": "e1", "role": SERVER}],
            }
        )
        assert loaded.shifts[0].min_users == 1
        assert loaded.shifts[0].label == "s1"
        assert loaded.employees[0].display_name == "e1"
        assert loaded.availability == []
        assert loaded.constraints == []

    def test_reads_file(self, payload, tmp_path):
        path = tmp_path / "input.json"
        path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")

        loaded = load_input(path)

        assert [e.uid for e in loaded.employees] == ["e1", "e2", "qa"]

    def test_malformed_time_reports_location(self, payload):
        payload["shifts"][0]["timeSlot"]["end"] = "25:00"

        with pytest.raises(ValidationError) as exc_info:
            load_input(payload)

        issue = exc_info.value.issues[0]
        assert issue.error_type == ValidationErrorType.INVALID_TIME
        assert issue.details == {"section": "shifts", "index": 0}

    def test_inverted_range(self, payload):
        payload["availability"][0]["availableSlots"] = [{"start": "13:00", "end": "07:00"}]
        with pytest.raises(ValidationError) as exc_info:
            load_input(payload)
        assert exc_info.value.issues[0].error_type == ValidationErrorType.INVALID_RANGE

    def test_missing_fields_collected(self, payload):
        del payload["shifts"][0]["role"]
        del payload["employees"][0]["uid"]

        with pytest.raises(ValidationError) as exc_info:
            load_input(payload)

        issues = exc_info.value.issues
        assert [i.error_type for i in issues] == [ValidationErrorType.MISSING_FIELD] * 2
        assert [i.details["section"] for i in issues] == ["shifts", "employees"]

    def test_malformed_date(self, payload):
        payload["availability"][0]["date"] = "06/01/2025"
        with pytest.raises(ValidationError) as exc_info:
            load_input(payload)
        assert exc_info.value.issues[0].error_type == ValidationErrorType.INVALID_DATE

    def test_condition_record_must_be_object(self, payload):
        payload["constraints"].append("max-shifts-per-week")

        with pytest.raises(ValidationError) as exc_info:
            load_input(payload)

        issue = exc_info.value.issues[0]
        assert issue.error_type == ValidationErrorType.MISSING_FIELD
        assert issue.details == {"section": "constraints", "index": 2}

    def test_condition_params_must_be_object(self, payload):
        payload["constraints"][0] = {"kind": "blackout-date", "params": "2025-01-06"}

        with pytest.raises(ValidationError) as exc_info:
            load_input(payload)

        issue = exc_info.value.issues[0]
        assert issue.error_type == ValidationErrorType.INVALID_CONDITION
        assert issue.details == {"section": "constraints", "index": 0}

    def test_condition_kind_must_be_string(self, payload):
        payload["constraints"][0] = {"kind": 7, "params": {}}
        with pytest.raises(ValidationError) as exc_info:
            load_input(payload)
        assert exc_info.value.issues[0].error_type == ValidationErrorType.MISSING_FIELD

    def test_section_must_be_list(self, payload):
        payload["employees"] = {"uid": "e1", "role": SERVER}
        with pytest.raises(ValidationError) as exc_info:
            load_input(payload)
        assert exc_info.value.issues[0].details == {"section": "employees"}

    @pytest.mark.parametrize("data", [[], "shifts", 3, None])
    def test_top_level_must_be_object(self, data):
        with pytest.raises(ValidationError) as exc_info:
            load_input(data)
        assert exc_info.value.issues[0].error_type == ValidationErrorType.MISSING_FIELD

    def test_invalid_json_file(self, tmp_path):
        path = tmp_path / "input.json"
        path.write_text('{"shifts": [', encoding="utf-8")
        with pytest.raises(ValidationError) as exc_info:
            load_input(path)
        assert "not valid JSON" in str(exc_info.value)

    def test_other_app_condition_types_are_unsupported(self, payload):
        """Condition types outside the kind vocabulary load as-is and are not enforced."""
        payload["constraints"] = [
            {"id": "wl", "type": "WorkloadLimit", "maxHoursPerWeek": 40},
            {"id": "ex", "type": "StaffExclusion", "blockedUserIds": ["e2"]},
        ]

        loaded = load_input(payload)
        result = schedule(
            loaded.shifts, loaded.employees, loaded.availability, loaded.constraints
        )

        assert [c.kind for c in loaded.constraints] == ["WorkloadLimit", "StaffExclusion"]
        assert loaded.constraints[0].params == {}
        assert result.warnings[:2] == [
            "Unsupported condition kind 'WorkloadLimit' ignored (not enforced)",
            "Unsupported condition kind 'StaffExclusion' ignored (not enforced)",
        ]


class TestDumpResult:
    """Tests for dump_result."""

    def test_payload_shape(self, payload):
        loaded = load_input(payload)
        result = schedule(loaded.shifts, loaded.employees, loaded.availability, loaded.constraints)

        data = json.loads(dump_result(result))

        assert data["assignments"] == [
            {"shiftId": "s1", "userId": "e1", "userName": "An", "role": SERVER}
        ]
        assert data["unfilled"] == [{"shiftId": "s1", "role": SERVER, "remaining": 1}]
        assert len(data["warnings"]) == 1

    def test_writes_file_without_escaping(self, payload, tmp_path):
        loaded = load_input(payload)
        result = schedule(loaded.shifts, loaded.employees, loaded.availability, loaded.constraints)
        path = tmp_path / "out.json"

        dump_result(result, path)

        assert SERVER in path.read_text(encoding="utf-8")


class TestCli:
    """Tests for the command-line entry point."""

    def test_run_prints_result(self, payload, tmp_path, capsys):
        path = tmp_path / "input.json"
        path.write_text(json.dumps(payload), encoding="utf-8")

        assert cli.run_file(str(path)) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["assignments"][0]["userId"] == "e1"

    def test_run_writes_output_and_report(self, payload, tmp_path, capsys):
        path = tmp_path / "input.json"
        out = tmp_path / "out.json"
        path.write_text(json.dumps(payload), encoding="utf-8")

        assert cli.run_file(str(path), str(out), report=True) == 0

        captured = capsys.readouterr().out
        assert "Result written to" in captured
        assert "SHIFT SCHEDULE REPORT" in captured
        assert json.loads(out.read_text(encoding="utf-8"))["unfilled"][0]["remaining"] == 1

    def test_invalid_input_exit_code(self, payload, tmp_path, capsys):
        payload["shifts"][0]["minUsers"] = 0
        path = tmp_path / "input.json"
        path.write_text(json.dumps(payload), encoding="utf-8")

        assert cli.run_file(str(path)) == 2
        assert "invalid_headcount" in capsys.readouterr().err

    def test_malformed_json_exit_code(self, tmp_path, capsys):
        path = tmp_path / "input.json"
        path.write_text("[1, 2", encoding="utf-8")

        assert cli.run_file(str(path)) == 2
        assert "not valid JSON" in capsys.readouterr().err

    def test_main_demo(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["shiftplanner", "demo", "--count", "8", "--days", "3"])

        assert cli.main() == 0

        captured = capsys.readouterr().out
        assert "Schedule Summary" in captured
        assert "Validation: PASSED" in captured

    def test_main_without_command(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["shiftplanner"])
        assert cli.main() == 1
