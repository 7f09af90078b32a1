"""Command: move a document and repair every link to and from it."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from linkmend.commands._base import LinkmendCommand

if TYPE_CHECKING:
    from linkmend.commands._context import AppContext


@click.command(
    cls=LinkmendCommand,
    examples="""\
  linkmend rename notes/a.norg archive/a.norg
  linkmend rename notes/a.norg archive/ --dry-run
  linkmend --json rename notes/a.norg notes/b.norg --dry-run
  linkmend rename notes/a.norg notes/b.norg --lsp""",
)
@click.argument("old_path", type=click.Path(dir_okay=False))
@click.argument("new_path", type=click.Path())
@click.option("--dry-run", is_flag=True, help="Show the planned edits without writing anything.")
@click.option(
    "--lsp",
    "as_lsp",
    is_flag=True,
    help="Print the plan as an LSP WorkspaceEdit and exit without writing.",
)
@click.pass_obj
def rename(app: AppContext, old_path: str, new_path: str, dry_run: bool, as_lsp: bool) -> None:
    """Rename OLD_PATH to NEW_PATH, rewriting links that would break."""
    from linkmend.services.refactor import RefactorService

    service = RefactorService(app.workspaces, plugins=app.plugins)
    if as_lsp:
        result = service.plan_rename(
            old_path, new_path, workspace=app.settings.workspace, include_lsp=True
        )
        app.emit_payload(result, "workspace_edit")
        return

    app.emit(
        service.rename(old_path, new_path, workspace=app.settings.workspace, dry_run=dry_run)
    )
