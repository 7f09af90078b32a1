"""Result types returned by every linkmend service method.

Services report failure through ``ServiceResult.error`` with a stable
upper-case code (``NOT_FOUND``, ``TARGET_EXISTS``, ...); domain exceptions
never cross the service boundary.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Why an operation failed: a stable code, a message, and context."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one service call.

    ``data`` is the operation's payload, ``warnings`` lists problems that
    did not stop it (unreadable documents, unresolved links, plugin errors)
    and ``meta`` carries diagnostics such as the telemetry span tree.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def success(
        cls,
        op: str,
        data: dict[str, Any] | None = None,
        *,
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        return cls(ok=True, op=op, data=data or {}, warnings=warnings or [])

    @classmethod
    def failure(
        cls,
        op: str,
        code: str,
        message: str,
        *,
        detail: dict[str, Any] | None = None,
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        return cls(
            ok=False,
            op=op,
            error=ServiceError(code=code, message=message, detail=detail or {}),
            warnings=warnings or [],
        )

    @property
    def error_code(self) -> str | None:
        return self.error.code if self.error else None

    def with_meta(self, **entries: Any) -> ServiceResult:
        """Copy of this result with *entries* merged into ``meta``."""
        return self.model_copy(update={"meta": {**(self.meta or {}), **entries}})
