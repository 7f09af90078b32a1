"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, linkmend.toml only contains
overrides. A usable config needs only a ``[workspaces]`` table.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- linkmend.toml sections ---


class RefactorConfig(BaseModel):
    """[refactor] section."""

    model_config = {"frozen": True}

    max_workers: int = Field(default=1, ge=1)
    verify_snapshots: bool = True


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: str = ".linkmend/plugins"


class LinkmendConfig(BaseModel):
    """Root configuration composing all sections.

    ``workspaces`` maps workspace names to root directories. Relative roots
    are resolved against the directory holding ``linkmend.toml``.
    """

    model_config = {"frozen": True}

    default_workspace: str | None = None
    workspaces: dict[str, str] = Field(default_factory=dict)
    refactor: RefactorConfig = Field(default_factory=RefactorConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
