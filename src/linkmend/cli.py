"""Entry point: the ``linkmend`` group, its global flags, and subcommands."""

from __future__ import annotations

import click
from pydantic import ValidationError

from linkmend import __version__
from linkmend.commands import register_commands
from linkmend.commands._base import LinkmendGroup
from linkmend.commands._context import AppContext
from linkmend.config.settings import LinkmendSettings

_ROOT_EXAMPLES = """\
  linkmend workspace list
  linkmend rename notes/draft.norg notes/published/draft.norg
  linkmend -w work links projects/index.norg
  linkmend -c ~/notes/linkmend.toml --json rename a.norg b.norg --dry-run
"""


@click.group(
    cls=LinkmendGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
    examples=_ROOT_EXAMPLES,
)
@click.version_option(version=__version__, prog_name="linkmend")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print only paths and names.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logs and phase timings.")
@click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines.")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Read this config file instead of searching for linkmend.toml.",
)
@click.option("-w", "--workspace", default=None, help="Name of the workspace to use.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    workspace: str | None,
) -> None:
    """linkmend: move norg documents without breaking the links between them."""
    try:
        settings = LinkmendSettings.from_cli(
            config_path=config_path,
            json_output=json_output,
            quiet=quiet,
            verbose=verbose,
            log_json=log_json,
            workspace=workspace,
        )
    except ValidationError as exc:
        raise click.ClickException(f"Invalid configuration:\n{exc}") from exc
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
