"""Shared pytest fixtures and test helpers for linkmend tests."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from linkmend.config.settings import LinkmendSettings
from linkmend.domain.types import WorkspaceContext
from linkmend.infrastructure.parser import NorgLinkParser
from linkmend.infrastructure.workspace import WorkspaceManager
from linkmend.services.telemetry import disable_telemetry


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's own linkmend environment out of the tests."""
    for name in ("LINKMEND_CONFIG", "LINKMEND_WORKSPACE", "LINKMEND_DEFAULT_WORKSPACE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Generator[None]:
    """``-v`` invocations enable telemetry for the whole thread."""
    yield
    disable_telemetry()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def parser() -> NorgLinkParser:
    return NorgLinkParser()


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    """Temporary workspace ``notes`` registered in ``linkmend.toml``.

    The config file sits in *tmp_path*; the workspace root is
    ``tmp_path / "notes"`` with ``a/``, ``b/``, ``tools/`` and ``x/``.
    """
    base = tmp_path.resolve()
    root = base / "notes"
    for sub in ("a", "b", "tools", "x"):
        (root / sub).mkdir(parents=True)
    (base / "linkmend.toml").write_text('[workspaces]\nnotes = "notes"\n')
    return root


@pytest.fixture
def settings(workspace_root: Path) -> LinkmendSettings:
    return LinkmendSettings.from_cli(config_path=str(workspace_root.parent / "linkmend.toml"))


@pytest.fixture
def manager(settings: LinkmendSettings, workspace_root: Path) -> WorkspaceManager:
    return WorkspaceManager(settings, cwd=workspace_root)


@pytest.fixture
def context(workspace_root: Path) -> WorkspaceContext:
    return WorkspaceContext(name="notes", root=workspace_root)


@pytest.fixture
def _isolated_workspace(workspace_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD into the temp workspace so the CLI discovers its config.

    Use via ``@pytest.mark.usefixtures("_isolated_workspace")`` on command
    test classes.
    """
    monkeypatch.chdir(workspace_root)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def write_doc(root: Path, relative: str, text: str) -> Path:
    """Write a document under *root*, creating parent directories."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path
