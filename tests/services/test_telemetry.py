"""Tests for telemetry primitives: Span, trace_span, @traced."""

from __future__ import annotations

import time

from linkmend.services.result import ServiceResult
from linkmend.services.telemetry import (
    Span,
    enable_telemetry,
    get_current_span,
    trace_span,
    traced,
)

# ── Span unit tests ──────────────────────────────────────────────────


class TestSpan:
    def test_duration_before_close_is_zero(self) -> None:
        assert Span(name="test").duration_ms == 0.0

    def test_duration_after_close(self) -> None:
        span = Span(name="test")
        time.sleep(0.005)
        span.close()
        assert span.duration_ms > 0

    def test_to_dict_minimal(self) -> None:
        span = Span(name="root")
        span.close()
        d = span.to_dict()
        assert d["name"] == "root"
        assert "duration_ms" in d
        assert "children" not in d
        assert "counters" not in d
        assert "annotations" not in d

    def test_counters_roll_up_on_close(self) -> None:
        root = Span(name="root")
        child = Span(name="plan", parent=root)
        child.count("edits", 3)
        child.count("edits")
        child.annotate("workspace", "notes")
        child.close()
        assert root.counters == {"edits": 4}
        assert root.annotations == {}
        assert child.to_dict()["annotations"] == {"workspace": "notes"}


# ── trace_span / @traced ─────────────────────────────────────────────


class _Service:
    @traced
    def run(self) -> ServiceResult:
        with trace_span("snapshot", workspace="notes") as span:
            if span:
                span.count("documents", 4)
        with trace_span("plan") as span:
            if span:
                span.count("edits", 2)
        return ServiceResult(ok=True, op="run", meta={"kept": True})

    @traced
    def fail(self) -> ServiceResult:
        return ServiceResult.failure("fail", "NOT_FOUND", "missing")

    @traced
    def plain(self) -> int:
        return 7


class TestTracing:
    def test_disabled_is_noop(self) -> None:
        with trace_span("x") as span:
            assert span is None
        result = _Service().run()
        assert result.meta == {"kept": True}
        assert get_current_span() is None

    def test_no_parent_yields_none(self) -> None:
        enable_telemetry()
        with trace_span("orphan") as span:
            assert span is None

    def test_span_tree_attached(self) -> None:
        enable_telemetry()
        result = _Service().run()
        tree = result.meta["telemetry"]
        assert result.meta["kept"] is True
        assert tree["name"] == "_Service.run"
        assert tree["annotations"] == {"ok": True}
        assert tree["counters"] == {"documents": 4, "edits": 2}
        snapshot, plan = tree["children"]
        assert snapshot["annotations"] == {"workspace": "notes"}
        assert plan["counters"] == {"edits": 2}

    def test_failure_code_recorded(self) -> None:
        enable_telemetry()
        tree = _Service().fail().meta["telemetry"]
        assert tree["annotations"] == {"ok": False, "error": "NOT_FOUND"}

    def test_non_result_passthrough(self) -> None:
        enable_telemetry()
        assert _Service().plain() == 7

    def test_active_span_restored(self) -> None:
        enable_telemetry()
        _Service().run()
        assert get_current_span() is None
