"""Core value types: workspaces, document snapshots, ranges, and edits.

All types are immutable. A rename plan is computed against one set of
snapshots; nothing here is mutated while planning.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, field_validator

DOCUMENT_SUFFIX = ".norg"

# Document suffix -> parser language name.
LANGUAGES: dict[str, str] = {
    DOCUMENT_SUFFIX: "norg",
}


class LinkKind(StrEnum):
    """The three mutually exclusive forms a link path can take."""

    WORKSPACE_RELATIVE = "workspace_relative"
    DOCUMENT_RELATIVE = "document_relative"
    EXTERNAL = "external"


class WorkspaceContext(BaseModel):
    """A named workspace root, passed explicitly to every resolver call."""

    model_config = {"frozen": True}

    name: str
    root: Path

    @field_validator("root")
    @classmethod
    def _require_absolute(cls, value: Path) -> Path:
        if not value.is_absolute():
            msg = f"Workspace root must be absolute: {value}"
            raise ValueError(msg)
        return value

    @property
    def root_str(self) -> str:
        """The root as a POSIX string without a trailing slash."""
        return self.root.as_posix().rstrip("/") or "/"


@dataclass(frozen=True)
class Document:
    """Snapshot of one document: an open buffer or a file read from disk."""

    path: Path
    text: str

    @property
    def language(self) -> str | None:
        return LANGUAGES.get(self.path.suffix)


@dataclass(frozen=True, order=True)
class TextRange:
    """Zero-indexed, half-open span; columns count code points."""

    start_row: int
    start_col: int
    end_row: int
    end_col: int

    @property
    def start(self) -> tuple[int, int]:
        return (self.start_row, self.start_col)

    @property
    def end(self) -> tuple[int, int]:
        return (self.end_row, self.end_col)

    def overlaps(self, other: TextRange) -> bool:
        """True if the two spans share at least one character."""
        return self.start < other.end and other.start < self.end

    def to_dict(self) -> dict[str, int]:
        return {
            "start_row": self.start_row,
            "start_col": self.start_col,
            "end_row": self.end_row,
            "end_col": self.end_col,
        }

    def to_lsp(self) -> dict[str, dict[str, int]]:
        """LSP ``Range`` shape."""
        return {
            "start": {"line": self.start_row, "character": self.start_col},
            "end": {"line": self.end_row, "character": self.end_col},
        }


@dataclass(frozen=True)
class TextEdit:
    """Replace the text currently occupying *range* with *new_text*."""

    range: TextRange
    new_text: str

    def to_dict(self) -> dict[str, Any]:
        return {"range": self.range.to_dict(), "new_text": self.new_text}

    def to_lsp(self) -> dict[str, Any]:
        return {"range": self.range.to_lsp(), "newText": self.new_text}
