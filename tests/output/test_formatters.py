"""Tests for the format_result dispatcher and OutputSettings."""

import json

from linkmend.output.formatters import OutputSettings, format_result
from linkmend.services.result import ServiceError, ServiceResult


def _ok(op: str = "test", **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


class TestOutputSettings:
    def test_defaults(self) -> None:
        s = OutputSettings()
        assert s.json_output is False
        assert s.quiet is False
        assert s.verbose is False


class TestFormatResult:
    def test_json_mode(self) -> None:
        settings = OutputSettings(json_output=True)
        output = format_result(_ok("rename", total_edits=2), settings=settings)
        data = json.loads(output)
        assert data["ok"] is True
        assert data["data"]["total_edits"] == 2

    def test_json_mode_error(self) -> None:
        result = ServiceResult(ok=False, op="rename", error=ServiceError(code="X", message="Bad"))
        data = json.loads(format_result(result, settings=OutputSettings(json_output=True)))
        assert data["error"]["message"] == "Bad"

    def test_json_wins_over_quiet(self) -> None:
        settings = OutputSettings(json_output=True, quiet=True)
        assert json.loads(format_result(_ok(), settings=settings))["op"] == "test"

    def test_quiet_mode(self) -> None:
        settings = OutputSettings(quiet=True)
        output = format_result(_ok("workspace", items=[{"name": "n"}]), settings=settings)
        assert output == "n"

    def test_default_is_rich(self) -> None:
        output = format_result(_ok("current_workspace", name="notes"))
        assert output.startswith("OK")
        assert "\x1b[" not in output
