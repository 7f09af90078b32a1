"""Edit set builder — aggregate per-document edits into one multi-file edit.

INVARIANT: a document with zero edits never appears as a key.
INVARIANT: edits for one document never overlap.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from pathlib import Path
from typing import Any

from linkmend.domain.errors import OverlappingEditsError
from linkmend.domain.types import TextEdit


def _check_disjoint(document: Path, edits: Sequence[TextEdit]) -> None:
    ordered = sorted(edits, key=lambda edit: edit.range)
    for previous, current in zip(ordered, ordered[1:], strict=False):
        if previous.range.overlaps(current.range):
            msg = f"Overlapping edits in {document}: {previous.range} and {current.range}"
            raise OverlappingEditsError(msg)


class EditSet(Mapping[Path, tuple[TextEdit, ...]]):
    """Immutable mapping of document path to its ordered text edits.

    Keys are the documents' pre-rename paths. Every range refers to the
    document text as it was when the plan was computed.
    """

    def __init__(self, changes: Mapping[Path, Sequence[TextEdit]] | None = None) -> None:
        self._changes: dict[Path, tuple[TextEdit, ...]] = {}
        for document, edits in (changes or {}).items():
            if not edits:
                continue
            _check_disjoint(document, edits)
            self._changes[document] = tuple(edits)

    def __getitem__(self, document: Path) -> tuple[TextEdit, ...]:
        return self._changes[document]

    def __iter__(self) -> Iterator[Path]:
        return iter(self._changes)

    def __len__(self) -> int:
        return len(self._changes)

    def __repr__(self) -> str:
        return f"EditSet({self._changes!r})"

    @property
    def documents(self) -> list[Path]:
        return list(self._changes)

    @property
    def total_edits(self) -> int:
        return sum(len(edits) for edits in self._changes.values())

    def edits_for(self, document: Path) -> tuple[TextEdit, ...]:
        """Edits for *document*, or an empty tuple."""
        return self._changes.get(document, ())

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            str(document): [edit.to_dict() for edit in edits]
            for document, edits in self._changes.items()
        }

    def to_lsp(self, *, rename: tuple[Path, Path] | None = None) -> dict[str, Any]:
        """LSP ``WorkspaceEdit`` with ``changes`` keyed by file URI.

        With *rename*, uses ``documentChanges`` instead: the text edits
        against the original URIs first, then a ``RenameFile`` operation.
        """
        if rename is None:
            return {
                "changes": {
                    document.as_uri(): [edit.to_lsp() for edit in edits]
                    for document, edits in self._changes.items()
                }
            }
        old_path, new_path = rename
        operations: list[dict[str, Any]] = [
            {
                "textDocument": {"uri": document.as_uri(), "version": None},
                "edits": [edit.to_lsp() for edit in edits],
            }
            for document, edits in self._changes.items()
        ]
        operations.append(
            {"kind": "rename", "oldUri": old_path.as_uri(), "newUri": new_path.as_uri()}
        )
        return {"documentChanges": operations}


def build_edit_set(per_document: Iterable[tuple[Path, Sequence[TextEdit]]]) -> EditSet:
    """Build an :class:`EditSet` from ``(document, edits)`` pairs.

    Empty edit lists are dropped. A document appearing more than once has
    its edits concatenated in arrival order.

    Raises:
        OverlappingEditsError: Two edits for one document overlap.
    """
    merged: dict[Path, list[TextEdit]] = {}
    for document, edits in per_document:
        if not edits:
            continue
        merged.setdefault(document, []).extend(edits)
    return EditSet(merged)
