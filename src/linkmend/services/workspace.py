"""WorkspaceService — report configured workspaces."""

from __future__ import annotations

from linkmend.domain.errors import NoActiveWorkspaceError, UnknownWorkspaceError
from linkmend.services.base import BaseService
from linkmend.services.result import ServiceResult
from linkmend.services.telemetry import traced


class WorkspaceService(BaseService):
    """Workspace listing and selection."""

    @traced
    def list_workspaces(self) -> ServiceResult:
        op = "list_workspaces"
        try:
            current = self._workspaces.current_workspace().name
        except (NoActiveWorkspaceError, UnknownWorkspaceError):
            current = None

        items = [
            {
                "name": ws.name,
                "root": str(ws.root),
                "documents": len(self._workspaces.list_documents(ws.name)),
                "current": ws.name == current,
            }
            for ws in self._workspaces.list_workspaces()
        ]
        return ServiceResult.success(op, {"count": len(items), "items": items})

    @traced
    def current(self, name: str | None = None) -> ServiceResult:
        op = "current_workspace"
        workspace = self._workspace_or_failure(op, name)
        if isinstance(workspace, ServiceResult):
            return workspace
        return ServiceResult.success(op, {"name": workspace.name, "root": str(workspace.root)})
