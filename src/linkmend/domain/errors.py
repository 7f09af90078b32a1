"""Exception types raised by the domain layer.

Only context-level failures (no workspace, a path outside it, cancellation)
abort a rename plan. Per-link problems are absorbed by the planner.
"""

from __future__ import annotations


class LinkmendError(Exception):
    """Base class for linkmend errors."""


class NoActiveWorkspaceError(LinkmendError):
    """Path resolution needs a workspace root and none is available."""


class PathEscapesWorkspaceError(LinkmendError):
    """A path does not resolve to a location under the workspace root."""

    def __init__(self, path: str, root: str) -> None:
        super().__init__(f"Path escapes workspace root {root}: {path}")
        self.path = path
        self.root = root


class PlanCancelledError(LinkmendError):
    """Planning was cancelled between documents."""


class OverlappingEditsError(LinkmendError, ValueError):
    """Two edits for the same document touch overlapping ranges."""


class StaleDocumentError(LinkmendError):
    """A document changed on disk after its snapshot was planned against."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Document changed since planning: {path}")
        self.path = path


class UnknownWorkspaceError(LinkmendError):
    """A workspace name that is not configured."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown workspace: {name!r}")
        self.name = name
