"""Command group: inspect configured workspaces."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from linkmend.commands._base import LinkmendGroup
from linkmend.services.workspace import WorkspaceService

if TYPE_CHECKING:
    from linkmend.commands._context import AppContext

_WORKSPACE_EXAMPLES = """\
  linkmend workspace list
  linkmend workspace current
  linkmend -w notes workspace current
  linkmend --json workspace list"""


@click.group(cls=LinkmendGroup, examples=_WORKSPACE_EXAMPLES)
@click.pass_obj
def workspace(app: AppContext) -> None:
    """List workspaces and show which one is active."""


@workspace.command(
    "list",
    examples="""\
  linkmend workspace list
  linkmend -q workspace list""",
)
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List configured workspaces; the active one is starred."""
    app.emit(WorkspaceService(app.workspaces).list_workspaces())


@workspace.command(
    examples="""\
  linkmend workspace current
  linkmend --json workspace current"""
)
@click.pass_obj
def current(app: AppContext) -> None:
    """Show the active workspace."""
    app.emit(WorkspaceService(app.workspaces).current())
