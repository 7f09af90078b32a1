"""Workspace manager — workspace table, document discovery, and snapshots.

INVARIANT: Files are truth. Snapshots are read once per planning pass
and never re-read while a plan is being computed.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING

from linkmend.domain.errors import NoActiveWorkspaceError, UnknownWorkspaceError
from linkmend.domain.paths import WORKSPACE_SIGIL
from linkmend.domain.types import DOCUMENT_SUFFIX, Document, WorkspaceContext
from linkmend.infrastructure.applicator import read_source

if TYPE_CHECKING:
    from linkmend.config.settings import LinkmendSettings

logger = logging.getLogger(__name__)

_URI_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")


class WorkspaceManager:
    """Knows the configured workspaces and the documents inside them."""

    def __init__(self, settings: LinkmendSettings, *, cwd: Path | None = None) -> None:
        self._settings = settings
        self._cwd = cwd
        self._workspaces: dict[str, WorkspaceContext] = {
            name: WorkspaceContext(name=name, root=self._resolve_root(raw))
            for name, raw in settings.workspaces.items()
        }

    def _resolve_root(self, raw: str) -> Path:
        path = Path(raw).expanduser()
        if not path.is_absolute():
            path = self._settings.config_root / path
        return path.resolve()

    @property
    def settings(self) -> LinkmendSettings:
        return self._settings

    # ------------------------------------------------------------------
    # Workspaces
    # ------------------------------------------------------------------

    def list_workspaces(self) -> list[WorkspaceContext]:
        return list(self._workspaces.values())

    def get_workspace(self, name: str) -> WorkspaceContext:
        """Look up a workspace by name.

        Raises:
            UnknownWorkspaceError: *name* is not configured.
        """
        try:
            return self._workspaces[name]
        except KeyError:
            raise UnknownWorkspaceError(name) from None

    def workspace_for(self, path: Path) -> WorkspaceContext | None:
        """The workspace whose root contains *path* (deepest root wins)."""
        resolved = path.expanduser().resolve()
        candidates = [ws for ws in self._workspaces.values() if resolved.is_relative_to(ws.root)]
        if not candidates:
            return None
        return max(candidates, key=lambda ws: len(ws.root.parts))

    def current_workspace(self, name: str | None = None) -> WorkspaceContext:
        """Resolve the workspace a command operates in.

        Order: explicit *name*, ``--workspace``, ``default_workspace``,
        the workspace containing the working directory, the only
        configured workspace.

        Raises:
            UnknownWorkspaceError: A requested name is not configured.
            NoActiveWorkspaceError: Nothing identifies a workspace.
        """
        for requested in (name, self._settings.workspace, self._settings.default_workspace):
            if requested:
                return self.get_workspace(requested)

        containing = self.workspace_for(self._cwd or Path.cwd())
        if containing is not None:
            return containing
        if len(self._workspaces) == 1:
            return next(iter(self._workspaces.values()))

        if not self._workspaces:
            msg = "No workspaces configured; add a [workspaces] table to linkmend.toml"
        else:
            msg = "No active workspace; pass --workspace or set default_workspace"
        raise NoActiveWorkspaceError(msg)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def list_documents(self, name: str) -> list[Path]:
        """All ``.norg`` documents in workspace *name*, sorted.

        Hidden directories (``.git``, ``.linkmend``, …) are skipped.
        """
        workspace = self.get_workspace(name)
        if not workspace.root.is_dir():
            logger.warning("Workspace root does not exist: %s", workspace.root)
            return []
        results: list[Path] = []
        for path in workspace.root.rglob(f"*{DOCUMENT_SUFFIX}"):
            if not path.is_file():
                continue
            relative = path.relative_to(workspace.root)
            if any(part.startswith(".") for part in relative.parts[:-1]):
                continue
            results.append(path)
        return sorted(results)

    def load_document(self, path: Path) -> Document:
        """Read a snapshot of the document at *path*."""
        return Document(path=path, text=read_source(path))

    def load_documents(self, name: str, warnings: list[str] | None = None) -> list[Document]:
        """Snapshot every document in workspace *name*.

        Unreadable documents are skipped; a warning is appended to
        *warnings* for each.
        """
        documents: list[Document] = []
        for path in self.list_documents(name):
            try:
                documents.append(self.load_document(path))
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Skipping unreadable document %s: %s", path, exc)
                if warnings is not None:
                    warnings.append(f"Skipped unreadable document: {path}")
        return documents

    # ------------------------------------------------------------------
    # Path expansion
    # ------------------------------------------------------------------

    def expand_path(
        self,
        raw_path: str,
        workspace: WorkspaceContext,
        *,
        host_dir: Path | None = None,
    ) -> Path | None:
        """Expand a link path to a filesystem path.

        Handles ``$/…`` (current workspace), ``$name/…`` (named
        workspace), ``~/…`` and absolute paths; document-relative paths
        need *host_dir*. Returns None for URIs, unknown workspaces, and
        relative paths without a host directory.
        """
        if _URI_SCHEME.match(raw_path):
            return None
        if raw_path.startswith(WORKSPACE_SIGIL):
            name, _sep, rest = raw_path[len(WORKSPACE_SIGIL) :].partition("/")
            if name:
                target = self._workspaces.get(name)
                if target is None:
                    return None
            else:
                target = workspace
            return target.root / rest if rest else target.root
        if raw_path.startswith("~"):
            return Path(raw_path).expanduser()
        if raw_path.startswith("/"):
            return Path(raw_path)
        if host_dir is None:
            return None
        return host_dir / raw_path
