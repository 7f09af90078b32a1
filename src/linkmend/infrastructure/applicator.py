"""Edit applicator — write a rename plan's edits, then move the document.

Ordering: verify → edit → rename. Edits are addressed by the documents'
pre-rename paths, so every edit lands before the moved document changes
its identity. On any failure, completed writes and the rename are
compensated (files restored from their backups) and the error re-raised.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from linkmend.domain.errors import StaleDocumentError

if TYPE_CHECKING:
    from linkmend.domain.refactor import RenamePlan
    from linkmend.domain.types import Document, TextEdit

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Text splicing
# ---------------------------------------------------------------------------


def _line_starts(text: str) -> list[int]:
    starts = [0]
    for index, char in enumerate(text):
        if char == "\n":
            starts.append(index + 1)
    return starts


def _offset(starts: list[int], text: str, row: int, col: int) -> int:
    if row >= len(starts):
        msg = f"Row {row} is past the end of the document"
        raise ValueError(msg)
    line_end = starts[row + 1] - 1 if row + 1 < len(starts) else len(text)
    offset = starts[row] + col
    if offset > line_end:
        msg = f"Column {col} is past the end of row {row}"
        raise ValueError(msg)
    return offset


def apply_text_edits(text: str, edits: Sequence[TextEdit]) -> str:
    """Apply non-overlapping *edits* to *text*; ranges refer to *text* as given."""
    starts = _line_starts(text)
    spans = sorted(
        (
            (
                _offset(starts, text, edit.range.start_row, edit.range.start_col),
                _offset(starts, text, edit.range.end_row, edit.range.end_col),
                edit.new_text,
            )
            for edit in edits
        ),
        reverse=True,
    )
    for start, end, new_text in spans:
        text = text[:start] + new_text + text[end:]
    return text


# ---------------------------------------------------------------------------
# Exact file IO
# ---------------------------------------------------------------------------


def read_source(path: Path) -> str:
    """Read *path* as UTF-8 with line endings left untouched."""
    with path.open(encoding="utf-8", newline="") as handle:
        return handle.read()


def write_source(path: Path, text: str) -> None:
    """Write *text* to *path* as UTF-8 without translating line endings."""
    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(text)


# ---------------------------------------------------------------------------
# Compensation tracking
# ---------------------------------------------------------------------------


@dataclass
class _FileOp:
    """A file about to be written, undone by restoring *backup*."""

    path: Path
    backup: str

    def rollback(self) -> None:
        try:
            write_source(self.path, self.backup)
        except OSError:
            logger.warning("Failed to restore %s during rollback", self.path)


@dataclass
class _MkdirOp:
    """Directories created for the rename target, deepest first."""

    created: list[Path]

    def rollback(self) -> None:
        for directory in self.created:
            if not directory.exists():
                continue
            try:
                directory.rmdir()
            except OSError:
                logger.warning("Failed to remove created directory %s", directory)


@dataclass
class _RenameOp:
    """A completed rename, undone by moving the file back."""

    old_path: Path
    new_path: Path

    def rollback(self) -> None:
        try:
            self.new_path.rename(self.old_path)
        except OSError:
            logger.warning("Failed to move %s back to %s", self.new_path, self.old_path)


def _missing_parents(path: Path) -> list[Path]:
    missing: list[Path] = []
    parent = path.parent
    while not parent.exists():
        missing.append(parent)
        parent = parent.parent
    return missing


@dataclass
class ApplyReport:
    """Outcome of a successful :func:`apply_rename_plan`."""

    documents_changed: list[Path] = field(default_factory=list)
    edits_applied: int = 0
    renamed: bool = False


def apply_rename_plan(
    plan: RenamePlan,
    snapshots: Mapping[Path, Document] | None = None,
    *,
    rename: bool = True,
) -> ApplyReport:
    """Apply *plan*'s edit set, then move ``old_path`` to ``new_path``.

    When *snapshots* are given, every edited document must still match the
    snapshot its edits were computed against. Line endings outside the
    edited ranges are preserved byte for byte.

    Raises:
        FileExistsError: ``new_path`` already exists.
        FileNotFoundError: ``old_path`` does not exist.
        StaleDocumentError: A document changed since it was snapshotted.
    """
    if rename:
        if not plan.old_path.is_file():
            msg = f"No such document: {plan.old_path}"
            raise FileNotFoundError(msg)
        if plan.new_path.exists():
            msg = f"Target already exists: {plan.new_path}"
            raise FileExistsError(msg)

    # Verify everything before touching anything.
    current: dict[Path, str] = {}
    for document in plan.edit_set:
        text = read_source(document)
        snapshot = snapshots.get(document) if snapshots is not None else None
        if snapshot is not None and snapshot.text != text:
            raise StaleDocumentError(str(document))
        current[document] = text

    ops: list[_FileOp | _MkdirOp | _RenameOp] = []
    report = ApplyReport()
    try:
        for document, edits in plan.edit_set.items():
            updated = apply_text_edits(current[document], edits)
            # Registered first: a write can truncate the file and then fail.
            ops.append(_FileOp(path=document, backup=current[document]))
            write_source(document, updated)
            report.documents_changed.append(document)
            report.edits_applied += len(edits)
            logger.debug("Applied %d edits to %s", len(edits), document)

        if rename:
            missing = _missing_parents(plan.new_path)
            if missing:
                ops.append(_MkdirOp(created=missing))
            plan.new_path.parent.mkdir(parents=True, exist_ok=True)
            plan.old_path.rename(plan.new_path)
            ops.append(_RenameOp(old_path=plan.old_path, new_path=plan.new_path))
            report.renamed = True
            logger.debug("Renamed %s -> %s", plan.old_path, plan.new_path)
    except Exception:
        logger.warning("Rename failed; rolling back %d operations", len(ops))
        for op in reversed(ops):
            op.rollback()
        raise
    return report
