"""LinkmendSettings — one frozen object for CLI flags, env vars and TOML.

Sources, strongest first: keyword arguments from Click, ``LINKMEND_*``
environment variables (``__`` separates nested keys, so
``LINKMEND_REFACTOR__MAX_WORKERS=4`` sets ``refactor.max_workers``), the
discovered ``linkmend.toml``, and the defaults in :mod:`linkmend.config.models`.
"""

from __future__ import annotations

from contextvars import ContextVar
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from linkmend.config.discovery import locate_config, read_toml
from linkmend.config.models import PluginsConfig, RefactorConfig

# Parsed TOML handed to settings_customise_sources while from_cli builds.
_toml_data: ContextVar[dict[str, Any] | None] = ContextVar("linkmend_toml_data", default=None)


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Already-parsed ``linkmend.toml`` contents as a settings source."""

    def __init__(self, settings_cls: type[BaseSettings], data: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._data = data

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return dict(self._data)


class LinkmendSettings(BaseSettings):
    """Resolved settings for one linkmend invocation.

    Attributes:
        config_root: Directory relative workspace roots resolve against.
        config_path: The TOML file that was read, if any.
        workspace: Workspace chosen with ``--workspace`` for this run.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "LINKMEND_",
        "env_nested_delimiter": "__",
    }

    config_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    workspace: str | None = None

    default_workspace: str | None = None
    workspaces: dict[str, str] = Field(default_factory=dict)
    refactor: RefactorConfig = Field(default_factory=RefactorConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @field_validator("workspaces")
    @classmethod
    def _check_workspace_names(cls, value: dict[str, str]) -> dict[str, str]:
        # names appear in links as $name/, so they must be a single component
        for name in value:
            if not name or name.startswith("$") or "/" in name or name != name.strip():
                raise ValueError(f"Invalid workspace name: {name!r}")
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml = TomlSettingsSource(settings_cls, _toml_data.get() or {})
        return init_settings, env_settings, toml

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        config_root: Path | None = None,
        **cli_flags: Any,
    ) -> LinkmendSettings:
        """Build settings for a CLI run.

        *config_root* doubles as the walk-up start; without it the search
        starts at the working directory and the root becomes the config
        file's directory. Flags passed as ``None`` are dropped so they
        never hide a TOML or environment value.
        """
        location = locate_config(config_root, explicit=config_path)
        if config_root is None:
            config_root = location.root if location else Path.cwd()

        overrides = {key: value for key, value in cli_flags.items() if value is not None}
        token = _toml_data.set(read_toml(location.path) if location else {})
        try:
            return cls(
                config_root=config_root,
                config_path=location.path if location else None,
                **overrides,
            )
        finally:
            _toml_data.reset(token)
