"""Tests for link extraction from a structural parse."""

from __future__ import annotations

from pathlib import Path

from linkmend.domain.links import Link, extract_links, extract_links_from_buffer
from linkmend.domain.types import Document, TextRange
from linkmend.infrastructure.parser import NorgLinkParser

PARSER = NorgLinkParser()


def _doc(text: str, name: str = "/ws/a/note.norg") -> Document:
    return Document(path=Path(name), text=text)


class TestExtractLinks:
    def test_plain_file_link(self) -> None:
        links = extract_links(_doc("See {:../tools/git:} here\n"), PARSER)
        assert links == [
            Link(
                raw_text=":../tools/git:",
                target_path="../tools/git",
                range=TextRange(0, 6, 0, 18),
            )
        ]

    def test_range_covers_path_only(self) -> None:
        text = "line0\nline1\n  x {:$/tools/git:* Usage}\n"
        (link,) = extract_links(_doc(text), PARSER)
        line = text.splitlines()[link.range.start_row]
        assert line[link.range.start_col : link.range.end_col] == "$/tools/git"

    def test_heading_fields(self) -> None:
        (link,) = extract_links(_doc("{:$/a/b:** Setup notes}"), PARSER)
        assert link.target_path == "$/a/b"
        assert link.heading_type == "**"
        assert link.heading_text == "Setup notes"
        assert link.raw_text == ":$/a/b:** Setup notes"

    def test_missing_heading_is_none(self) -> None:
        (link,) = extract_links(_doc("{:$/a/b:}"), PARSER)
        assert link.heading_type is None
        assert link.heading_text is None

    def test_document_order(self) -> None:
        text = "{:c:}\n{:a:} {:b:}\n"
        links = extract_links(_doc(text), PARSER)
        assert [link.target_path for link in links] == ["c", "a", "b"]
        assert [link.range for link in links] == sorted(link.range for link in links)

    def test_no_links(self) -> None:
        assert extract_links(_doc("* Heading\n\nJust prose.\n"), PARSER) == []

    def test_unknown_language_is_empty(self) -> None:
        assert extract_links(_doc("{:a:}", name="/ws/a/readme.md"), PARSER) == []

    def test_heading_only_link_skipped(self) -> None:
        # {* Heading} links stay inside the document; no file capture.
        assert extract_links(_doc("{* Heading} and {# target}"), PARSER) == []

    def test_inline_verbatim_is_not_a_link(self) -> None:
        assert extract_links(_doc("write `{:a:}` to link\n", name="/ws/a/n.norg"), PARSER) == []

    def test_to_dict(self) -> None:
        (link,) = extract_links(_doc("{:x:}"), PARSER)
        d = link.to_dict()
        assert d["target_path"] == "x"
        assert d["range"] == {"start_row": 0, "start_col": 2, "end_row": 0, "end_col": 3}
        assert d["heading_type"] is None


class TestExtractFromBuffer:
    def test_matches_file_snapshot(self, tmp_path: Path) -> None:
        text = "{:../tools/git:* Usage}\n{:$/x/ref:}\n"
        path = tmp_path / "note.norg"
        path.write_text(text, encoding="utf-8")
        from_file = extract_links(Document(path=path, text=path.read_text()), PARSER)
        from_buffer = extract_links_from_buffer(path, text, PARSER)
        assert from_buffer == from_file

    def test_unsaved_edits_are_seen(self, tmp_path: Path) -> None:
        path = tmp_path / "note.norg"
        path.write_text("{:old:}\n", encoding="utf-8")
        links = extract_links_from_buffer(path, "{:new:}\n", PARSER)
        assert [link.target_path for link in links] == ["new"]
