"""BaseService — shared foundation for linkmend services.

Every service receives a :class:`WorkspaceManager` at construction time,
plus the structural parser and (optionally) the plugin manager. Services
translate domain errors into ``ServiceResult`` failures; nothing raises
past the service boundary.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from linkmend.domain.errors import NoActiveWorkspaceError, UnknownWorkspaceError
from linkmend.infrastructure.parser import NorgLinkParser
from linkmend.services.result import ServiceResult

if TYPE_CHECKING:
    from linkmend.domain.links import StructuralParser
    from linkmend.domain.types import WorkspaceContext
    from linkmend.infrastructure.workspace import WorkspaceManager
    from linkmend.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


def absolute_path(path: str | Path) -> Path:
    """Expand ``~`` and resolve *path* against the working directory."""
    return Path(path).expanduser().resolve()


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class LinkService(BaseService):
            def list_links(self, path: str) -> ServiceResult:
                workspace = self._workspace_or_failure("list_links", None)
                ...
    """

    def __init__(
        self,
        workspaces: WorkspaceManager,
        *,
        parser: StructuralParser | None = None,
        plugins: PluginManager | None = None,
    ) -> None:
        self._workspaces = workspaces
        self._parser: StructuralParser = parser or NorgLinkParser()
        self._plugins = plugins

    def _workspace_or_failure(
        self,
        op: str,
        name: str | None,
    ) -> WorkspaceContext | ServiceResult:
        """Resolve the active workspace, or a failed result explaining why."""
        try:
            return self._workspaces.current_workspace(name)
        except UnknownWorkspaceError as exc:
            return ServiceResult.failure(
                op,
                "UNKNOWN_WORKSPACE",
                str(exc),
                detail={"workspace": exc.name},
            )
        except NoActiveWorkspaceError as exc:
            return ServiceResult.failure(op, "NO_ACTIVE_WORKSPACE", str(exc))

    def _dispatch_event(
        self,
        hook_name: str,
        payload: dict[str, Any],
        warnings: list[str],
    ) -> None:
        """Dispatch a plugin hook. No-op without a plugin manager.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        if self._plugins is None:
            return
        try:
            self._plugins.dispatch(hook_name, payload)
        except Exception:
            logger.warning("Plugin hook %s failed", hook_name, exc_info=True)
            warnings.append(f"Plugin hook {hook_name} failed")
