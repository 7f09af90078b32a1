"""LinkService — inspect the links in one document and where they point."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from linkmend.domain.errors import PathEscapesWorkspaceError
from linkmend.domain.links import Link, extract_links
from linkmend.domain.paths import canonical_target, classify
from linkmend.domain.types import DOCUMENT_SUFFIX, LinkKind, WorkspaceContext
from linkmend.services.base import BaseService, absolute_path
from linkmend.services.result import ServiceResult
from linkmend.services.telemetry import traced


class LinkService(BaseService):
    """Read-only link queries."""

    @traced
    def list_links(self, path: str | Path, *, workspace: str | None = None) -> ServiceResult:
        """List every file link in *path* with its kind and resolved target."""
        op = "list_links"
        document_path = absolute_path(path)
        if not document_path.is_file():
            return ServiceResult.failure(
                op, "NOT_FOUND", f"No such document: {document_path}", detail={"path": str(path)}
            )

        if workspace is None:
            context = self._workspaces.workspace_for(document_path)
            if context is None:
                context = self._workspace_or_failure(op, None)
        else:
            context = self._workspace_or_failure(op, workspace)
        if isinstance(context, ServiceResult):
            return context

        document = self._workspaces.load_document(document_path)
        links = extract_links(document, self._parser)
        items = [self._describe(context, document_path, link) for link in links]
        return ServiceResult.success(
            op,
            {
                "path": str(document_path),
                "workspace": context.name,
                "count": len(items),
                "items": items,
            },
        )

    def resolve_target(
        self,
        workspace: WorkspaceContext,
        host_file: Path,
        target_path: str,
    ) -> Path | None:
        """Filesystem path a link target points at, with the suffix restored.

        Returns None for URIs and unknown named workspaces.
        """
        resolved = self._workspaces.expand_path(target_path, workspace, host_dir=host_file.parent)
        if resolved is None:
            return None
        needs_suffix = (
            resolved.name and resolved.suffix != DOCUMENT_SUFFIX and not resolved.is_dir()
        )
        if needs_suffix and classify(target_path) is not LinkKind.EXTERNAL:
            resolved = resolved.with_name(resolved.name + DOCUMENT_SUFFIX)
        return resolved.resolve()

    def _describe(self, workspace: WorkspaceContext, host_file: Path, link: Link) -> dict[str, Any]:
        kind = classify(link.target_path)
        escapes = False
        try:
            canonical = canonical_target(workspace, host_file.parent, link.target_path)
        except PathEscapesWorkspaceError:
            canonical = None
            escapes = True
        resolved = self.resolve_target(workspace, host_file, link.target_path)
        return {
            **link.to_dict(),
            "kind": kind.value,
            "canonical": canonical,
            "escapes_workspace": escapes,
            "resolved_path": str(resolved) if resolved is not None else None,
            "exists": resolved.exists() if resolved is not None else False,
        }
