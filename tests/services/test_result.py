"""Tests for ServiceResult and ServiceError."""

import json

import pytest
from pydantic import ValidationError

from linkmend.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_success_construction(self) -> None:
        result = ServiceResult(ok=True, op="rename", data={"total_edits": 3})
        assert result.ok is True
        assert result.op == "rename"
        assert result.data == {"total_edits": 3}
        assert result.warnings == []
        assert result.error is None
        assert result.meta is None

    def test_failure_shorthand(self) -> None:
        result = ServiceResult.failure(
            "rename",
            "TARGET_EXISTS",
            "Target already exists",
            detail={"new_path": "/ws/b.norg"},
            warnings=["Skipped unreadable document: /ws/x.norg"],
        )
        assert result.ok is False
        assert result.error == ServiceError(
            code="TARGET_EXISTS",
            message="Target already exists",
            detail={"new_path": "/ws/b.norg"},
        )
        assert result.warnings == ["Skipped unreadable document: /ws/x.norg"]

    def test_json_serialization(self) -> None:
        result = ServiceResult(ok=True, op="list_links", data={"count": 0}, meta={"x": 1})
        parsed = json.loads(result.model_dump_json())
        assert parsed["ok"] is True
        assert parsed["op"] == "list_links"
        assert parsed["data"]["count"] == 0
        assert parsed["meta"]["x"] == 1

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="test")
        with pytest.raises(ValidationError):
            result.ok = False  # type: ignore[misc]


class TestServiceError:
    def test_default_detail(self) -> None:
        assert ServiceError(code="NOT_FOUND", message="bad").detail == {}


class TestHelpers:
    def test_success_shorthand(self) -> None:
        result = ServiceResult.success("rename", {"renamed": True}, warnings=["w"])
        assert result.ok is True
        assert result.data == {"renamed": True}
        assert result.warnings == ["w"]
        assert result.error_code is None

    def test_error_code(self) -> None:
        assert ServiceResult.failure("rename", "SAME_PATH", "same").error_code == "SAME_PATH"

    def test_with_meta_merges(self) -> None:
        result = ServiceResult(ok=True, op="rename", meta={"a": 1})
        merged = result.with_meta(telemetry={"name": "rename"})
        assert merged.meta == {"a": 1, "telemetry": {"name": "rename"}}
        assert result.meta == {"a": 1}
