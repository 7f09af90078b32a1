"""Click base classes that add an ``--examples`` flag.

``--help`` stays short; ``--examples`` prints worked invocations and exits.
"""

from __future__ import annotations

import textwrap
from typing import Any

import click


class ExamplesOption(click.Option):
    """Eager flag that prints *examples* and exits before any callback runs."""

    def __init__(self, examples: str) -> None:
        self.examples = textwrap.dedent(examples).strip("\n")
        super().__init__(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=self._show,
            help="Show usage examples and exit.",
        )

    def _show(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(self.examples)
        ctx.exit(0)


class _ExamplesMixin:
    params: list[click.Parameter]

    def _init_examples(self, examples: str | None) -> None:
        self.examples = examples
        if examples:
            self.params.append(ExamplesOption(examples))


class LinkmendCommand(_ExamplesMixin, click.Command):
    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)


class LinkmendGroup(_ExamplesMixin, click.Group):
    """Group whose ``@group.command`` subcommands are LinkmendCommands."""

    command_class = LinkmendCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)
