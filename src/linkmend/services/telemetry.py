"""Telemetry — per-phase timings for rename planning.

Off by default; a single ContextVar lookup per call when disabled. With
``--verbose`` each ``@traced`` service call records a span, every phase
opened with :func:`trace_span` (snapshot, plan, apply) becomes a child,
and the finished tree lands in ``ServiceResult.meta["telemetry"]``.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from linkmend.services.result import ServiceResult

_enabled: ContextVar[bool] = ContextVar("linkmend_telemetry", default=False)
_active: ContextVar[Span | None] = ContextVar("linkmend_active_span", default=None)

log = structlog.get_logger("linkmend.telemetry")


@dataclass
class Span:
    """One timed phase.

    ``counters`` hold integer tallies (documents scanned, edits planned)
    that are summed into the parent when the span closes; ``annotations``
    are free-form and stay on the span that set them.
    """

    name: str
    parent: Span | None = None
    children: list[Span] = field(default_factory=list)
    counters: dict[str, int] = field(default_factory=dict)
    annotations: dict[str, Any] = field(default_factory=dict)
    started: float = field(default_factory=time.perf_counter)
    finished: float | None = None

    @property
    def duration_ms(self) -> float:
        if self.finished is None:
            return 0.0
        return (self.finished - self.started) * 1000

    def count(self, key: str, amount: int = 1) -> None:
        self.counters[key] = self.counters.get(key, 0) + amount

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def close(self) -> None:
        self.finished = time.perf_counter()
        if self.parent is not None:
            for key, amount in self.counters.items():
                self.parent.count(key, amount)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.counters:
            out["counters"] = dict(self.counters)
        if self.annotations:
            out["annotations"] = dict(self.annotations)
        if self.children:
            out["children"] = [child.to_dict() for child in self.children]
        return out


@contextmanager
def trace_span(name: str, **annotations: Any) -> Iterator[Span | None]:
    """Time the enclosed phase as a child of the active span.

    Yields None when telemetry is off or when called outside a traced
    service method, so callers guard with ``if span:``.
    """
    parent = _active.get() if _enabled.get() else None
    if parent is None:
        yield None
        return

    span = Span(name=name, parent=parent, annotations=dict(annotations))
    parent.children.append(span)
    token = _active.set(span)
    try:
        yield span
    finally:
        span.close()
        _active.reset(token)


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Record a root span around a service method.

    When the method returns a :class:`ServiceResult`, the span notes its
    outcome and the tree is merged into the result's ``meta``.
    """

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        root = Span(name=func.__qualname__)
        token = _active.set(root)
        try:
            result = func(*args, **kwargs)
        finally:
            root.close()
            _active.reset(token)

        if not isinstance(result, ServiceResult):
            return result

        root.annotate("ok", result.ok)
        if result.error_code is not None:
            root.annotate("error", result.error_code)
        log.debug(
            "span.complete",
            op=result.op,
            ok=result.ok,
            duration_ms=round(root.duration_ms, 2),
            **root.counters,
        )
        return result.with_meta(telemetry=root.to_dict())  # type: ignore[return-value]

    return wrapper


def enable_telemetry() -> None:
    """Turn span collection on for the current context."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)
    _active.set(None)


def get_current_span() -> Span | None:
    """Innermost open span, for ad hoc counters outside :func:`trace_span`."""
    return _active.get() if _enabled.get() else None
