"""Subcommand modules for linkmend.

Provides register_commands(), which imports command modules lazily so
``linkmend --help`` stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the command group and standalone commands on the root group."""
    from linkmend.commands.links import links
    from linkmend.commands.rename import rename
    from linkmend.commands.workspace import workspace

    cli.add_command(rename)
    cli.add_command(links)
    cli.add_command(workspace)
