"""Refactor planner — compute the edits that keep links valid across a rename.

Pipeline: OUTBOUND → IDENTITY → INBOUND → BUILD

- OUTBOUND: document-relative links inside the moving document are pinned
  to workspace-relative form, resolved against its *old* directory.
- IDENTITY: the moving document's old and new canonical identities.
- INBOUND: links in every other document that resolve to the old identity
  are pointed at the new one.
- BUILD: per-document edit lists become one :class:`EditSet`.

All steps read pre-move snapshots only. The rename itself, and applying
the edits, belong to the caller: apply edits first, then rename.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from linkmend.domain.edits import EditSet, build_edit_set
from linkmend.domain.errors import (
    NoActiveWorkspaceError,
    PathEscapesWorkspaceError,
    PlanCancelledError,
)
from linkmend.domain.links import Link, StructuralParser, extract_links
from linkmend.domain.paths import (
    canonical_target,
    classify,
    document_identity,
    host_dir,
    normalize,
    to_workspace_relative,
)
from linkmend.domain.types import Document, LinkKind, TextEdit, WorkspaceContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnresolvedLink:
    """A link skipped because its target could not be placed in the workspace."""

    document: Path
    link: Link
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "document": str(self.document),
            "target_path": self.link.target_path,
            "range": self.link.range.to_dict(),
            "reason": self.reason,
        }


@dataclass(frozen=True)
class RenamePlan:
    """Everything the edit applicator needs: the edits and the move itself."""

    workspace: WorkspaceContext
    old_path: Path
    new_path: Path
    old_identity: str
    new_identity: str
    edit_set: EditSet
    unresolved: tuple[UnresolvedLink, ...] = ()

    @property
    def documents_changed(self) -> list[Path]:
        return self.edit_set.documents

    def to_dict(self) -> dict[str, Any]:
        return {
            "workspace": self.workspace.name,
            "old_path": str(self.old_path),
            "new_path": str(self.new_path),
            "old_identity": self.old_identity,
            "new_identity": self.new_identity,
            "edits": self.edit_set.to_dict(),
            "documents_changed": len(self.edit_set),
            "total_edits": self.edit_set.total_edits,
            "unresolved": [item.to_dict() for item in self.unresolved],
        }


@dataclass
class _DocumentPlan:
    document: Path
    edits: list[TextEdit]
    unresolved: list[UnresolvedLink]


def _same_path(a: Path, b: Path) -> bool:
    return normalize(a.as_posix()) == normalize(b.as_posix())


def _edit(link: Link, new_text: str) -> TextEdit | None:
    if new_text == link.target_path:
        return None
    return TextEdit(range=link.range, new_text=new_text)


# ---------------------------------------------------------------------------
# Per-document passes
# ---------------------------------------------------------------------------


def plan_outbound(
    workspace: WorkspaceContext,
    document: Document,
    parser: StructuralParser,
    *,
    old_identity: str,
    new_identity: str,
) -> _DocumentPlan:
    """Edits for links *inside* the document being moved.

    Document-relative links are pinned to workspace-relative form against
    the document's current directory. Links back to the document itself
    follow it to *new_identity*. Other workspace-relative links and
    external links are left alone.
    """
    old_dir = host_dir(document.path)
    plan = _DocumentPlan(document=document.path, edits=[], unresolved=[])
    for link in extract_links(document, parser):
        kind = classify(link.target_path)
        if kind is LinkKind.EXTERNAL:
            continue
        try:
            target = canonical_target(workspace, old_dir, link.target_path)
            if target == old_identity:
                new_text = new_identity
            elif kind is LinkKind.DOCUMENT_RELATIVE:
                new_text = to_workspace_relative(workspace, old_dir, link.target_path)
            else:
                continue
        except PathEscapesWorkspaceError as exc:
            logger.debug("Unresolved link %r in %s: %s", link.target_path, document.path, exc)
            plan.unresolved.append(UnresolvedLink(document.path, link, "escapes_workspace"))
            continue
        edit = _edit(link, new_text)
        if edit is not None:
            plan.edits.append(edit)
    return plan


def plan_inbound(
    workspace: WorkspaceContext,
    document: Document,
    parser: StructuralParser,
    *,
    old_identity: str,
    new_identity: str,
) -> _DocumentPlan:
    """Edits for links in *document* that point at the document being moved.

    Every occurrence gets its own edit. External links never match.
    """
    directory = host_dir(document.path)
    plan = _DocumentPlan(document=document.path, edits=[], unresolved=[])
    for link in extract_links(document, parser):
        try:
            target = canonical_target(workspace, directory, link.target_path)
        except PathEscapesWorkspaceError as exc:
            logger.debug("Unresolved link %r in %s: %s", link.target_path, document.path, exc)
            plan.unresolved.append(UnresolvedLink(document.path, link, "escapes_workspace"))
            continue
        if target is None or target != old_identity:
            continue
        edit = _edit(link, new_identity)
        if edit is not None:
            plan.edits.append(edit)
    return plan


# ---------------------------------------------------------------------------
# Whole-workspace plan
# ---------------------------------------------------------------------------


def plan_rename(
    workspace: WorkspaceContext | None,
    old_path: Path,
    new_path: Path,
    documents: Iterable[Document],
    parser: StructuralParser,
    *,
    max_workers: int = 1,
    cancel: threading.Event | None = None,
) -> RenamePlan:
    """Plan every edit needed to move *old_path* to *new_path*.

    *documents* are pre-move snapshots of the workspace, normally including
    the moving document itself. With ``max_workers > 1`` the inbound scan
    runs on a thread pool; results are merged in input order either way.

    Raises:
        NoActiveWorkspaceError: *workspace* is None.
        PathEscapesWorkspaceError: *old_path* or *new_path* is outside it.
        PlanCancelledError: *cancel* was set before the scan finished.
    """
    if workspace is None:
        msg = "No active workspace; cannot resolve workspace-relative links"
        raise NoActiveWorkspaceError(msg)

    old_identity = document_identity(workspace, old_path)
    new_identity = document_identity(workspace, new_path)
    logger.debug("Planning rename %s -> %s", old_identity, new_identity)

    moving: Document | None = None
    others: list[Document] = []
    for document in documents:
        if _same_path(document.path, old_path):
            moving = document
        else:
            others.append(document)

    def scan(document: Document) -> _DocumentPlan:
        if cancel is not None and cancel.is_set():
            raise PlanCancelledError(f"Rename of {old_identity} cancelled")
        return plan_inbound(
            workspace,
            document,
            parser,
            old_identity=old_identity,
            new_identity=new_identity,
        )

    results: list[_DocumentPlan] = []
    if moving is not None:
        results.append(
            plan_outbound(
                workspace,
                moving,
                parser,
                old_identity=old_identity,
                new_identity=new_identity,
            )
        )
    else:
        logger.debug("No snapshot of %s; skipping outbound links", old_path)

    if max_workers > 1 and len(others) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results.extend(executor.map(scan, others))
    else:
        results.extend(scan(document) for document in others)

    edit_set = build_edit_set((result.document, result.edits) for result in results)
    unresolved = tuple(item for result in results for item in result.unresolved)
    logger.debug(
        "Planned %d edits across %d documents (%d unresolved)",
        edit_set.total_edits,
        len(edit_set),
        len(unresolved),
    )
    return RenamePlan(
        workspace=workspace,
        old_path=old_path,
        new_path=new_path,
        old_identity=old_identity,
        new_identity=new_identity,
        edit_set=edit_set,
        unresolved=unresolved,
    )
