"""Structural parser for norg link targets.

Implements the :class:`~linkmend.domain.links.StructuralParser` interface
for the subset of the norg grammar that carries file links::

    {:path/to/file:}
    {:path/to/file:* Heading}
    {:$/workspace/file:# generic target}

Each link yields a ``link_location`` node with ``file``, ``type`` and
``text`` child nodes. Ranged verbatim tags (``@code`` … ``@end``) and
inline verbatim (``` `…` ```) are skipped: their contents are not markup.
Columns are code-point offsets.
"""

from __future__ import annotations

import bisect
import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = frozenset({"norg"})

# {:<file>:} or {:<file>:<type> <text>}; the file part is non-empty and on one line.
_LINK_PATTERN = re.compile(
    r"\{:(?P<file>[^:{}\n]+):"
    r"(?:(?P<type>\*{1,6}|#|\$|\^)\s+(?P<text>[^}\n]+?))?"
    r"\s*\}"
)
_VERBATIM_START = re.compile(r"^\s*@(?!end\b)\w+")
_VERBATIM_END = re.compile(r"^\s*@end\b")
# Inline verbatim: `...` on one line, not opened or closed by whitespace.
_INLINE_VERBATIM = re.compile(r"`[^`\s](?:[^`\n]*[^`\s])?`")


@dataclass(frozen=True)
class SyntaxNode:
    """A node of the link tree: its kind and zero-indexed half-open span."""

    type: str
    start_offset: int
    end_offset: int
    start_point: tuple[int, int]
    end_point: tuple[int, int]
    children: dict[str, SyntaxNode] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class LinkTree:
    """Parse result: every ``link_location`` node in text order."""

    source: str
    nodes: tuple[SyntaxNode, ...]


class _Positions:
    """Map string offsets to ``(row, column)`` points."""

    def __init__(self, source: str) -> None:
        self._line_starts = [0]
        for index, char in enumerate(source):
            if char == "\n":
                self._line_starts.append(index + 1)

    def point(self, offset: int) -> tuple[int, int]:
        row = bisect.bisect_right(self._line_starts, offset) - 1
        return (row, offset - self._line_starts[row])


def _verbatim_spans(source: str) -> list[tuple[int, int]]:
    """Offsets covered by ranged verbatim tags."""
    spans: list[tuple[int, int]] = []
    offset = 0
    open_at: int | None = None
    for line in source.splitlines(keepends=True):
        if open_at is None and _VERBATIM_START.match(line):
            open_at = offset
        elif open_at is not None and _VERBATIM_END.match(line):
            spans.append((open_at, offset + len(line)))
            open_at = None
        offset += len(line)
    if open_at is not None:
        spans.append((open_at, offset))
    return spans


def _inline_verbatim_spans(source: str) -> list[tuple[int, int]]:
    return [match.span() for match in _INLINE_VERBATIM.finditer(source)]


class NorgLinkParser:
    """Lightweight structural parser answering link queries for norg."""

    def parse(self, source: str, *, language: str) -> LinkTree | None:
        """Parse *source*, or return None if *language* is not supported."""
        if language not in SUPPORTED_LANGUAGES:
            logger.debug("No parser for language %r", language)
            return None

        positions = _Positions(source)
        verbatim = _verbatim_spans(source) + _inline_verbatim_spans(source)

        def in_verbatim(offset: int) -> bool:
            return any(start <= offset < end for start, end in verbatim)

        def make(kind: str, start: int, end: int) -> SyntaxNode:
            return SyntaxNode(kind, start, end, positions.point(start), positions.point(end))

        nodes: list[SyntaxNode] = []
        for match in _LINK_PATTERN.finditer(source):
            if in_verbatim(match.start()):
                continue
            children: dict[str, SyntaxNode] = {}
            for name in ("file", "type", "text"):
                if match.group(name) is not None:
                    children[name] = make(name, match.start(name), match.end(name))
            # The location spans the braces' contents, not the braces.
            location = SyntaxNode(
                "link_location",
                match.start() + 1,
                match.end() - 1,
                positions.point(match.start() + 1),
                positions.point(match.end() - 1),
                children,
            )
            nodes.append(location)
        return LinkTree(source=source, nodes=tuple(nodes))

    def query(self, tree: LinkTree, node_type: str) -> Iterator[Mapping[str, SyntaxNode]]:
        """Yield captures for every node of *node_type*: the node as ``link``
        plus each of its named fields."""
        for node in tree.nodes:
            if node.type != node_type:
                continue
            yield {"link": node, **node.children}

    def node_text(self, node: SyntaxNode, source: str) -> str:
        return source[node.start_offset : node.end_offset]

    def node_range(self, node: SyntaxNode) -> tuple[int, int, int, int]:
        return (*node.start_point, *node.end_point)
