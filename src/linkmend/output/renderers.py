"""Human-readable rendering of ServiceResult, one renderer per operation.

:func:`render_result` picks a renderer by ``result.op`` and falls back to
listing ``data`` as ``key: value`` lines. All renderers draw on an
off-screen console, so colour codes only appear when stdout is a terminal.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from linkmend.output.console import render_to_string, style_for_kind

if TYPE_CHECKING:
    from rich.console import Console

    from linkmend.services.result import ServiceResult

Renderer = Callable[["ServiceResult", "Console", bool], None]


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
    else:
        renderer = _render_error
    return render_to_string(lambda console: renderer(result, console, verbose)).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """One item per line: changed documents, link targets or workspace names."""
    if not result.ok:
        code = result.error_code or "ERROR"
        message = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} [{code}] {message}"

    edits = result.data.get("edits")
    if isinstance(edits, dict):
        return "\n".join(edits)

    items = result.data.get("items")
    if isinstance(items, list):
        names = (item.get("target_path") or item.get("name") for item in items)
        return "\n".join(str(name) for name in names if name)

    return f"OK: {result.op}"


# ── Building blocks ───────────────────────────────────────────────────


def _field_style(key: str) -> str:
    if key.endswith("_identity"):
        return "lm.identity"
    if key.endswith("path") or key == "root":
        return "lm.path"
    return ""


def _header(console: Console, result: ServiceResult) -> None:
    console.print(Text.assemble(("OK", "lm.ok"), "  ", (result.op, "lm.op")))


def _fields(console: Console, pairs: list[tuple[str, Any]], *, indent: int = 2) -> None:
    pad = " " * indent
    for key, value in pairs:
        console.print(
            Text.assemble((f"{pad}{key}: ", "lm.key"), (str(value), _field_style(key)))
        )


def _table(*columns: str | tuple[str, str]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    for column in columns:
        header, style = column if isinstance(column, tuple) else (column, "")
        table.add_column(header, style=style or None, no_wrap=header == "Range")
    return table


def _range(rng: dict[str, int]) -> str:
    """1-based line, 0-based column: ``3:5-3:18``."""
    return f"{rng['start_row'] + 1}:{rng['start_col']}-{rng['end_row'] + 1}:{rng['end_col']}"


def _telemetry(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for key, value in result.meta.items():
        if key == "telemetry":
            _span(console, value, depth=2)
        else:
            console.print(f"    {key}: {value}", style="dim", markup=False)


def _span(console: Console, span: dict[str, Any], depth: int) -> None:
    line = f"{'  ' * depth}{span.get('name', '?')}  {span.get('duration_ms', 0.0):.2f}ms"
    fields = {**span.get("counters", {}), **span.get("annotations", {})}
    if fields:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in fields.items()) + ")"
    console.print(line, style="dim", markup=False)
    for child in span.get("children", []):
        _span(console, child, depth + 1)


# ── Renderers ─────────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, verbose: bool) -> None:
    error = result.error
    console.print(
        Text.assemble(
            ("ERROR", "lm.error"),
            "  ",
            (result.op, "lm.op"),
            f"  {error.code}: " if error else "  ",
            error.message if error else "Unknown error",
        )
    )
    if verbose and error and error.detail:
        console.print(Text("  detail:", style="dim"))
        _fields(console, list(error.detail.items()), indent=4)


def _render_rename(result: ServiceResult, console: Console, verbose: bool) -> None:
    """plan_rename / rename: where the document goes, then every edit."""
    d = result.data
    _header(console, result)
    keys = ("workspace", "old_path", "new_path", "old_identity", "new_identity")
    pairs = [(key, d[key]) for key in keys if key in d]
    if d.get("dry_run"):
        pairs.append(("dry_run", True))
    if "renamed" in d:
        pairs.append(("renamed", d["renamed"]))
    _fields(console, pairs)

    edits: dict[str, list[dict[str, Any]]] = d.get("edits", {})
    if edits:
        table = _table(("Document", "lm.path"), ("Range", "lm.range"), ("New text", "lm.new"))
        for document, document_edits in edits.items():
            for position, edit in enumerate(document_edits):
                label = document if position == 0 else ""
                table.add_row(Text(label), _range(edit["range"]), Text(edit["new_text"]))
        console.print()
        console.print(table)

    total, changed = d.get("total_edits", 0), d.get("documents_changed", 0)
    console.print(f"\n{total} edits in {changed} documents")
    for item in d.get("unresolved", []):
        console.print(
            Text.assemble(
                ("  unresolved ", "lm.warning"),
                f"{item['document']} {_range(item['range'])}: {item['target_path']}",
            )
        )
    if verbose:
        _telemetry(console, result)


def _render_links(result: ServiceResult, console: Console, verbose: bool) -> None:
    d = result.data
    items: list[dict[str, Any]] = d.get("items", [])
    _header(console, result)
    _fields(console, [("path", d.get("path", "")), ("workspace", d.get("workspace", ""))])
    if items:
        columns: list[str | tuple[str, str]] = [
            ("Range", "lm.range"),
            "Target",
            "Heading",
            "Kind",
            ("Canonical", "lm.identity"),
            "Exists",
        ]
        if verbose:
            columns.append(("Resolved", "lm.path"))
        table = _table(*columns)
        for item in items:
            heading = " ".join(
                part for part in (item.get("heading_type"), item.get("heading_text")) if part
            )
            kind = str(item.get("kind", ""))
            row: list[Any] = [
                _range(item["range"]),
                Text(item["target_path"]),
                Text(heading),
                Text(kind, style=style_for_kind(kind)),
                item.get("canonical") or "",
                "yes" if item.get("exists") else "no",
            ]
            if verbose:
                row.append(item.get("resolved_path") or "")
            table.add_row(*row)
        console.print()
        console.print(table)
    console.print(f"\n{d.get('count', len(items))} links")


def _render_workspaces(result: ServiceResult, console: Console, verbose: bool) -> None:
    items: list[dict[str, Any]] = result.data.get("items", [])
    table = _table("", ("Name", "lm.identity"), ("Root", "lm.path"), "Documents")
    for item in items:
        table.add_row(
            "*" if item.get("current") else "",
            item["name"],
            item["root"],
            str(item.get("documents", 0)),
        )
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} workspaces")


def _render_generic(result: ServiceResult, console: Console, verbose: bool) -> None:
    _header(console, result)
    _fields(
        console,
        [
            (key, json.dumps(value) if isinstance(value, (dict, list)) else value)
            for key, value in result.data.items()
        ],
    )
    if verbose:
        _telemetry(console, result)


_OP_RENDERERS: dict[str, Renderer] = {
    "plan_rename": _render_rename,
    "rename": _render_rename,
    "list_links": _render_links,
    "list_workspaces": _render_workspaces,
}
