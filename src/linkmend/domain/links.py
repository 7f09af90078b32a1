"""Link extraction — read link targets out of a structural parse.

Pure functions over a :class:`Document` snapshot. The markup grammar is
not parsed here: a :class:`StructuralParser` answers node queries and this
module turns each ``link_location`` match into a :class:`Link`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from linkmend.domain.types import Document, TextRange

# Node kind queried for link targets; captures are named after its fields.
LINK_NODE = "link_location"
FILE_FIELD = "file"
TYPE_FIELD = "type"
TEXT_FIELD = "text"
LINK_CAPTURE = "link"


class StructuralParser(Protocol):
    """Interface of the external structural parser."""

    def parse(self, source: str, *, language: str) -> Any | None:
        """Parse *source*; None when no parser exists for *language*."""
        ...

    def query(self, tree: Any, node_type: str) -> Iterable[Mapping[str, Any]]:
        """Yield one capture mapping per node of *node_type*, in text order."""
        ...

    def node_text(self, node: Any, source: str) -> str: ...

    def node_range(self, node: Any) -> tuple[int, int, int, int]: ...


@dataclass(frozen=True)
class Link:
    """A file link found in a document.

    ``range`` covers the path sub-node only; it is the exact span a
    rewrite replaces. Heading qualifiers are carried through untouched.
    """

    raw_text: str  # full link target as written, e.g. ``:../tools/git:* Usage``
    target_path: str
    range: TextRange
    heading_type: str | None = None
    heading_text: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "raw_text": self.raw_text,
            "target_path": self.target_path,
            "heading_type": self.heading_type,
            "heading_text": self.heading_text,
            "range": self.range.to_dict(),
        }


def _optional_text(
    parser: StructuralParser,
    match: Mapping[str, Any],
    field: str,
    source: str,
) -> str | None:
    node = match.get(field)
    if node is None:
        return None
    return parser.node_text(node, source)


def extract_links(document: Document, parser: StructuralParser) -> list[Link]:
    """Extract all file links from *document*, in document order.

    Matches without a ``file`` capture are not file links and are skipped,
    as is everything in a document whose language has no parser. Returns
    an empty list in both cases.
    """
    language = document.language
    if language is None:
        return []
    tree = parser.parse(document.text, language=language)
    if tree is None:
        return []

    results: list[Link] = []
    for match in parser.query(tree, LINK_NODE):
        file_node = match.get(FILE_FIELD)
        if file_node is None:
            continue
        target = parser.node_text(file_node, document.text)
        if not target:
            continue
        raw = _optional_text(parser, match, LINK_CAPTURE, document.text) or target
        results.append(
            Link(
                raw_text=raw,
                target_path=target,
                range=TextRange(*parser.node_range(file_node)),
                heading_type=_optional_text(parser, match, TYPE_FIELD, document.text),
                heading_text=_optional_text(parser, match, TEXT_FIELD, document.text),
            )
        )
    results.sort(key=lambda link: link.range)
    return results


def extract_links_from_buffer(path: Path, text: str, parser: StructuralParser) -> list[Link]:
    """Extract links from an open, possibly unsaved buffer.

    Produces exactly the records :func:`extract_links` produces for a file
    snapshot with the same path and text.
    """
    return extract_links(Document(path=path, text=text), parser)
