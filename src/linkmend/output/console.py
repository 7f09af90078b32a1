"""Rich theme and off-screen console for linkmend output.

Renderers draw on a Console backed by StringIO and hand back the text,
so command code only ever deals in strings. Rich drops colour on its own
when stdout is not a terminal.
"""

from __future__ import annotations

from collections.abc import Callable
from io import StringIO

from rich.console import Console
from rich.theme import Theme

from linkmend.domain.types import LinkKind

_KIND_COLOURS = {
    LinkKind.WORKSPACE_RELATIVE: "cyan",
    LinkKind.DOCUMENT_RELATIVE: "yellow",
    LinkKind.EXTERNAL: "dim",
}

LINKMEND_THEME = Theme(
    {
        "lm.ok": "bold green",
        "lm.error": "bold red",
        "lm.warning": "bold yellow",
        "lm.op": "bold cyan",
        "lm.key": "dim",
        "lm.path": "blue",
        "lm.identity": "bold magenta",
        "lm.range": "dim",
        "lm.new": "green",
        **{f"lm.kind.{kind.value}": colour for kind, colour in _KIND_COLOURS.items()},
    }
)

CONSOLE_WIDTH = 120


def render_to_string(draw: Callable[[Console], None], *, no_color: bool = False) -> str:
    """Run *draw* against a fresh off-screen console and return what it printed."""
    buffer = StringIO()
    console = Console(
        file=buffer,
        theme=LINKMEND_THEME,
        no_color=no_color,
        highlight=False,
        width=CONSOLE_WIDTH,
    )
    draw(console)
    return buffer.getvalue()


def style_for_kind(kind: str) -> str:
    return f"lm.kind.{kind}" if kind else ""
