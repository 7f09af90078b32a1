"""AppContext: per-invocation state shared by every subcommand.

The root group stores one on ``ctx.obj``; subcommands take it with
``@click.pass_obj``. Results go to stdout on success and stderr on failure,
and a failure always ends the process with exit code 1.
"""

from __future__ import annotations

import json
from functools import cached_property
from typing import TYPE_CHECKING

import click

from linkmend.config.logging import configure_logging
from linkmend.output.formatters import OutputSettings, format_result
from linkmend.services.telemetry import enable_telemetry

if TYPE_CHECKING:
    from linkmend.config.settings import LinkmendSettings
    from linkmend.infrastructure.workspace import WorkspaceManager
    from linkmend.plugins.manager import PluginManager
    from linkmend.services.result import ServiceResult


class AppContext:
    """Settings plus lazily built workspace and plugin managers.

    Building either manager touches the filesystem, so ``--help``,
    ``--version`` and ``--examples`` never do.
    """

    def __init__(self, settings: LinkmendSettings) -> None:
        self.settings = settings
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)
        if settings.verbose:
            enable_telemetry()

    @cached_property
    def workspaces(self) -> WorkspaceManager:
        from linkmend.infrastructure.workspace import WorkspaceManager

        return WorkspaceManager(self.settings)

    @cached_property
    def plugins(self) -> PluginManager | None:
        """Plugins from entry points and the local plugin directory, if enabled."""
        if not self.settings.plugins.enabled:
            return None
        from linkmend.plugins.manager import PluginManager

        manager = PluginManager()
        manager.discover_and_load(
            local_dir=self.settings.config_root / self.settings.plugins.local_dir
        )
        return manager

    @property
    def output(self) -> OutputSettings:
        return OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )

    def emit(self, result: ServiceResult) -> None:
        """Print *result* in the selected output mode; exit 1 on failure."""
        output = self.output
        if not result.ok:
            click.echo(format_result(result, settings=output), err=True)
            raise SystemExit(1)
        click.echo(format_result(result, settings=output))
        if not output.json_output:
            # JSON output already carries the warnings
            self._warn(result.warnings)

    def emit_payload(self, result: ServiceResult, key: str) -> None:
        """Print ``result.data[key]`` as bare JSON, for editor integrations.

        Failures are reported exactly as :meth:`emit` reports them.
        """
        if not result.ok:
            self.emit(result)
            return
        click.echo(json.dumps(result.data[key], indent=2))
        self._warn(result.warnings)

    @staticmethod
    def _warn(warnings: list[str]) -> None:
        for warning in warnings:
            click.echo(f"WARNING: {warning}", err=True)
