"""Locating and reading ``linkmend.toml``.

Lookup order: an explicit ``--config`` path, then ``LINKMEND_CONFIG``, then
a walk up from the working directory. Each directory is checked for the
visible ``linkmend.toml`` before the hidden ``.linkmend.toml``.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, NamedTuple

import click

from linkmend.config.models import LinkmendConfig

CONFIG_FILENAMES = ("linkmend.toml", ".linkmend.toml")
CONFIG_ENV_VAR = "LINKMEND_CONFIG"


class ConfigLocation(NamedTuple):
    """A config file and the directory relative workspace roots hang off."""

    path: Path
    root: Path


def locate_config(
    start: Path | None = None,
    *,
    explicit: str | Path | None = None,
) -> ConfigLocation | None:
    """Find the config file in effect, or None.

    An *explicit* path or ``LINKMEND_CONFIG`` that names a missing file
    yields None rather than falling back to the walk-up.
    """
    override = explicit or os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override).expanduser()
        return ConfigLocation(path, path.parent) if path.is_file() else None

    for directory in _ancestors((start or Path.cwd()).resolve()):
        for filename in CONFIG_FILENAMES:
            candidate = directory / filename
            if candidate.is_file():
                return ConfigLocation(candidate, directory)
    return None


def _ancestors(directory: Path) -> list[Path]:
    return [directory, *directory.parents]


def read_toml(path: Path) -> dict[str, Any]:
    """Parse *path*; malformed TOML becomes a ClickException."""
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise click.ClickException(f"Invalid TOML in {path}: {exc}") from exc


def load_config(path: Path | None = None, cwd: Path | None = None) -> LinkmendConfig:
    """Validate the config at *path* (or the discovered one) against the models.

    Without any config file the code defaults apply.
    """
    if path is None:
        location = locate_config(cwd)
        if location is None:
            return LinkmendConfig()
        path = location.path
    return LinkmendConfig.model_validate(read_toml(path))
