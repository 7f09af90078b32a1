"""Tests for WorkspaceManager — workspace table, discovery, and snapshots."""

from __future__ import annotations

from pathlib import Path

import pytest

from linkmend.config.settings import LinkmendSettings
from linkmend.domain.errors import NoActiveWorkspaceError, UnknownWorkspaceError
from linkmend.infrastructure.workspace import WorkspaceManager
from tests.conftest import write_doc


def _manager(
    tmp_path: Path, toml: str, *, cwd: Path | None = None, **flags: object
) -> WorkspaceManager:
    config = tmp_path / "linkmend.toml"
    config.write_text(toml)
    settings = LinkmendSettings.from_cli(config_path=str(config), **flags)
    return WorkspaceManager(settings, cwd=cwd or tmp_path)


class TestWorkspaceTable:
    def test_relative_roots_resolve_against_config(
        self, manager: WorkspaceManager, workspace_root: Path
    ) -> None:
        (ws,) = manager.list_workspaces()
        assert ws.name == "notes"
        assert ws.root == workspace_root

    def test_absolute_root(self, tmp_path: Path) -> None:
        root = tmp_path.resolve() / "elsewhere"
        manager = _manager(tmp_path, f'[workspaces]\nabs = "{root.as_posix()}"\n')
        assert manager.get_workspace("abs").root == root

    def test_unknown_workspace(self, manager: WorkspaceManager) -> None:
        with pytest.raises(UnknownWorkspaceError) as info:
            manager.get_workspace("missing")
        assert info.value.name == "missing"

    def test_workspace_for_deepest_root(self, tmp_path: Path) -> None:
        manager = _manager(tmp_path, '[workspaces]\nouter = "w"\ninner = "w/sub"\n')
        base = tmp_path.resolve()
        assert manager.workspace_for(base / "w" / "sub" / "x.norg").name == "inner"
        assert manager.workspace_for(base / "w" / "x.norg").name == "outer"
        assert manager.workspace_for(base / "elsewhere.norg") is None


class TestCurrentWorkspace:
    TOML = '[workspaces]\none = "one"\ntwo = "two"\n'

    def test_explicit_name(self, tmp_path: Path) -> None:
        assert _manager(tmp_path, self.TOML).current_workspace("two").name == "two"

    def test_cli_flag(self, tmp_path: Path) -> None:
        assert _manager(tmp_path, self.TOML, workspace="one").current_workspace().name == "one"

    def test_default_workspace(self, tmp_path: Path) -> None:
        toml = 'default_workspace = "two"\n' + self.TOML
        assert _manager(tmp_path, toml).current_workspace().name == "two"

    def test_containing_cwd(self, tmp_path: Path) -> None:
        cwd = tmp_path.resolve() / "one" / "deep"
        cwd.mkdir(parents=True)
        assert _manager(tmp_path, self.TOML, cwd=cwd).current_workspace().name == "one"

    def test_single_workspace(self, tmp_path: Path) -> None:
        manager = _manager(tmp_path, '[workspaces]\nonly = "somewhere"\n')
        assert manager.current_workspace().name == "only"

    def test_ambiguous(self, tmp_path: Path) -> None:
        with pytest.raises(NoActiveWorkspaceError, match="--workspace"):
            _manager(tmp_path, self.TOML).current_workspace()

    def test_none_configured(self, tmp_path: Path) -> None:
        with pytest.raises(NoActiveWorkspaceError, match="No workspaces configured"):
            _manager(tmp_path, "").current_workspace()

    def test_unknown_default(self, tmp_path: Path) -> None:
        toml = 'default_workspace = "three"\n' + self.TOML
        with pytest.raises(UnknownWorkspaceError):
            _manager(tmp_path, toml).current_workspace()


class TestDocuments:
    def test_list_documents(self, manager: WorkspaceManager, workspace_root: Path) -> None:
        write_doc(workspace_root, "b/two.norg", "")
        write_doc(workspace_root, "a/one.norg", "")
        write_doc(workspace_root, "a/readme.md", "")
        write_doc(workspace_root, ".git/hidden.norg", "")
        write_doc(workspace_root, ".linkmend/plugins/skip.norg", "")
        docs = manager.list_documents("notes")
        assert [p.relative_to(workspace_root).as_posix() for p in docs] == [
            "a/one.norg",
            "b/two.norg",
        ]

    def test_missing_root(self, tmp_path: Path) -> None:
        manager = _manager(tmp_path, '[workspaces]\ngone = "gone"\n')
        assert manager.list_documents("gone") == []

    def test_load_documents(self, manager: WorkspaceManager, workspace_root: Path) -> None:
        write_doc(workspace_root, "a/one.norg", "{:$/b/two:}\n")
        (doc,) = manager.load_documents("notes")
        assert doc.text == "{:$/b/two:}\n"
        assert doc.language == "norg"

    def test_snapshot_keeps_crlf(self, manager: WorkspaceManager, workspace_root: Path) -> None:
        path = workspace_root / "a" / "dos.norg"
        path.write_bytes(b"* Title\r\n{:$/b/two:}\r\n")
        assert manager.load_document(path).text == "* Title\r\n{:$/b/two:}\r\n"

    def test_unreadable_document_warns(
        self, manager: WorkspaceManager, workspace_root: Path
    ) -> None:
        write_doc(workspace_root, "a/good.norg", "ok\n")
        (workspace_root / "a" / "bad.norg").write_bytes(b"\xff\xfe\x00bad")
        warnings: list[str] = []
        docs = manager.load_documents("notes", warnings)
        assert [d.path.name for d in docs] == ["good.norg"]
        assert len(warnings) == 1
        assert "bad.norg" in warnings[0]


class TestExpandPath:
    def test_forms(self, tmp_path: Path) -> None:
        manager = _manager(tmp_path, '[workspaces]\none = "one"\ntwo = "two"\n')
        one = manager.get_workspace("one")
        two_root = manager.get_workspace("two").root
        host = one.root / "a"

        assert manager.expand_path("$/x/y", one) == one.root / "x" / "y"
        assert manager.expand_path("$", one) == one.root
        assert manager.expand_path("$two/z", one) == two_root / "z"
        assert manager.expand_path("$nope/z", one) is None
        assert manager.expand_path("https://example.com", one) is None
        assert manager.expand_path("/abs/p", one) == Path("/abs/p")
        assert manager.expand_path("~/p", one) == Path.home() / "p"
        assert manager.expand_path("../b", one, host_dir=host) == host / "../b"
        assert manager.expand_path("../b", one) is None
