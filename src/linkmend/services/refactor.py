"""RefactorService — plan and perform link-preserving document moves.

Pipeline: VALIDATE → SNAPSHOT → PLAN → APPLY → RENAME → NOTIFY

The plan is computed from one snapshot of every workspace document. The
applicator writes all edits against the documents' original paths first
and moves the document last; any failure rolls every write back.
"""

from __future__ import annotations

import threading
from pathlib import Path

import structlog

from linkmend.domain.errors import (
    NoActiveWorkspaceError,
    PathEscapesWorkspaceError,
    PlanCancelledError,
    StaleDocumentError,
)
from linkmend.domain.refactor import RenamePlan, plan_rename
from linkmend.domain.types import DOCUMENT_SUFFIX, Document, WorkspaceContext
from linkmend.infrastructure.applicator import apply_rename_plan
from linkmend.services.base import BaseService, absolute_path
from linkmend.services.result import ServiceResult
from linkmend.services.telemetry import trace_span, traced

log = structlog.get_logger(__name__)


class RefactorService(BaseService):
    """Moves documents without breaking links to or from them."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @traced
    def plan_rename(
        self,
        old_path: str | Path,
        new_path: str | Path,
        *,
        workspace: str | None = None,
        include_lsp: bool = False,
        cancel: threading.Event | None = None,
    ) -> ServiceResult:
        """Compute the edit set for a move without touching any file.

        With *include_lsp*, ``data["workspace_edit"]`` holds the plan as an
        LSP ``WorkspaceEdit``: text edits first, then the file rename.
        """
        op = "plan_rename"
        warnings: list[str] = []
        prepared = self._prepare(op, old_path, new_path, workspace, warnings, cancel=cancel)
        if isinstance(prepared, ServiceResult):
            return prepared
        plan, _snapshots = prepared
        data = plan.to_dict()
        if include_lsp:
            data["workspace_edit"] = plan.edit_set.to_lsp(rename=(plan.old_path, plan.new_path))

        self._dispatch_event("post_plan", _event_payload(plan), warnings)
        return ServiceResult.success(op, data, warnings=warnings)

    @traced
    def rename(
        self,
        old_path: str | Path,
        new_path: str | Path,
        *,
        workspace: str | None = None,
        dry_run: bool = False,
        cancel: threading.Event | None = None,
    ) -> ServiceResult:
        """Move *old_path* to *new_path* and fix every affected link.

        With *dry_run*, stops after planning and reports the edits.
        """
        op = "rename"
        warnings: list[str] = []
        prepared = self._prepare(op, old_path, new_path, workspace, warnings, cancel=cancel)
        if isinstance(prepared, ServiceResult):
            return prepared
        plan, snapshots = prepared
        data = {**plan.to_dict(), "dry_run": dry_run, "renamed": False}

        if dry_run:
            self._dispatch_event("post_plan", _event_payload(plan), warnings)
            return ServiceResult.success(op, data, warnings=warnings)

        if plan.new_path.exists():
            return ServiceResult.failure(
                op,
                "TARGET_EXISTS",
                f"Target already exists: {plan.new_path}",
                detail={"new_path": str(plan.new_path)},
                warnings=warnings,
            )

        verify = self._workspaces.settings.refactor.verify_snapshots
        with trace_span("apply") as span:
            try:
                report = apply_rename_plan(plan, snapshots if verify else None)
            except StaleDocumentError as exc:
                return ServiceResult.failure(
                    op,
                    "STALE_DOCUMENT",
                    str(exc),
                    detail={"path": exc.path},
                    warnings=warnings,
                )
            except FileExistsError as exc:
                return ServiceResult.failure(op, "TARGET_EXISTS", str(exc), warnings=warnings)
            except FileNotFoundError as exc:
                return ServiceResult.failure(op, "NOT_FOUND", str(exc), warnings=warnings)
            except (OSError, ValueError) as exc:
                return ServiceResult.failure(
                    op,
                    "APPLY_FAILED",
                    f"Could not apply rename: {exc}",
                    warnings=warnings,
                )
            if span:
                span.count("edits_applied", report.edits_applied)

        log.info(
            "rename.applied",
            old=plan.old_identity,
            new=plan.new_identity,
            documents=len(report.documents_changed),
            edits=report.edits_applied,
        )
        self._dispatch_event("post_rename", _event_payload(plan), warnings)
        data["renamed"] = report.renamed
        return ServiceResult.success(op, data, warnings=warnings)

    # ------------------------------------------------------------------
    # Pipeline stages
    # ------------------------------------------------------------------

    def _prepare(
        self,
        op: str,
        old_path: str | Path,
        new_path: str | Path,
        workspace_name: str | None,
        warnings: list[str],
        *,
        cancel: threading.Event | None,
    ) -> tuple[RenamePlan, dict[Path, Document]] | ServiceResult:
        """VALIDATE → SNAPSHOT → PLAN, or a failed result."""
        # ── VALIDATE ─────────────────────────────────────────────
        old = absolute_path(old_path)
        new = _target_path(old, absolute_path(new_path))
        workspace: WorkspaceContext | ServiceResult | None = None
        if workspace_name is None:
            workspace = self._workspaces.workspace_for(old)
        if workspace is None:
            workspace = self._workspace_or_failure(op, workspace_name)
        if isinstance(workspace, ServiceResult):
            return workspace

        if not old.is_file():
            return ServiceResult.failure(
                op, "NOT_FOUND", f"No such document: {old}", detail={"old_path": str(old)}
            )
        if old.suffix != DOCUMENT_SUFFIX or new.suffix != DOCUMENT_SUFFIX:
            return ServiceResult.failure(
                op,
                "NOT_A_DOCUMENT",
                f"Only {DOCUMENT_SUFFIX} documents can be renamed: {old} -> {new}",
            )
        if old == new:
            return ServiceResult.failure(op, "SAME_PATH", f"Source and target are the same: {old}")

        # ── SNAPSHOT ─────────────────────────────────────────────
        with trace_span("snapshot") as span:
            documents = self._snapshot(workspace, old, warnings)
            if span:
                span.count("documents", len(documents))
        snapshots = {document.path: document for document in documents}

        # ── PLAN ─────────────────────────────────────────────────
        with trace_span("plan") as span:
            try:
                plan = plan_rename(
                    workspace,
                    old,
                    new,
                    documents,
                    self._parser,
                    max_workers=self._workspaces.settings.refactor.max_workers,
                    cancel=cancel,
                )
            except PathEscapesWorkspaceError as exc:
                return ServiceResult.failure(
                    op,
                    "PATH_OUTSIDE_WORKSPACE",
                    str(exc),
                    detail={"path": exc.path, "workspace": workspace.name},
                )
            except NoActiveWorkspaceError as exc:
                return ServiceResult.failure(op, "NO_ACTIVE_WORKSPACE", str(exc))
            except PlanCancelledError as exc:
                return ServiceResult.failure(op, "CANCELLED", str(exc))
            if span:
                span.count("edits", plan.edit_set.total_edits)
                span.count("unresolved", len(plan.unresolved))

        for item in plan.unresolved:
            warnings.append(
                f"Unresolved link {item.link.target_path!r} in {item.document} "
                f"(line {item.link.range.start_row + 1}): target is outside the workspace"
            )
        log.debug(
            "rename.planned",
            old=plan.old_identity,
            new=plan.new_identity,
            documents=len(plan.edit_set),
            edits=plan.edit_set.total_edits,
        )
        return plan, snapshots

    def _snapshot(
        self,
        workspace: WorkspaceContext,
        moving: Path,
        warnings: list[str],
    ) -> list[Document]:
        """Snapshot every workspace document, the moving one included."""
        documents = self._workspaces.load_documents(workspace.name, warnings)
        if not any(document.path == moving for document in documents):
            # e.g. a document under a hidden directory
            documents.insert(0, self._workspaces.load_document(moving))
        return documents


def _target_path(old: Path, new: Path) -> Path:
    """Moving into an existing directory keeps the name; a bare name gains the suffix."""
    if new.is_dir():
        return new / old.name
    if not new.suffix:
        return new.with_name(new.name + DOCUMENT_SUFFIX)
    return new


def _event_payload(plan: RenamePlan) -> dict[str, object]:
    return {
        "old_path": str(plan.old_path),
        "new_path": str(plan.new_path),
        "documents_changed": [str(path) for path in plan.documents_changed],
        "total_edits": plan.edit_set.total_edits,
    }
