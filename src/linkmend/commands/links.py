"""Command: list the file links in a document."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from linkmend.commands._base import LinkmendCommand

if TYPE_CHECKING:
    from linkmend.commands._context import AppContext


@click.command(
    cls=LinkmendCommand,
    examples="""\
  linkmend links notes/index.norg
  linkmend -v links notes/index.norg
  linkmend --json links notes/index.norg
  linkmend -q links notes/index.norg""",
)
@click.argument("path", type=click.Path(dir_okay=False))
@click.pass_obj
def links(app: AppContext, path: str) -> None:
    """List links in PATH with their kind and resolved target."""
    from linkmend.services.links import LinkService

    app.emit(LinkService(app.workspaces).list_links(path, workspace=app.settings.workspace))
