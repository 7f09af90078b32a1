"""Tests for NorgLinkParser — the structural link parser."""

from __future__ import annotations

from linkmend.infrastructure.parser import LinkTree, NorgLinkParser

PARSER = NorgLinkParser()


def _captures(source: str) -> list[dict[str, str]]:
    tree = PARSER.parse(source, language="norg")
    assert isinstance(tree, LinkTree)
    return [
        {name: PARSER.node_text(node, source) for name, node in match.items()}
        for match in PARSER.query(tree, "link_location")
    ]


class TestParse:
    def test_unsupported_language(self) -> None:
        assert PARSER.parse("{:a:}", language="markdown") is None

    def test_captures(self) -> None:
        assert _captures("{:$/a/b:* Heading}") == [
            {"link": ":$/a/b:* Heading", "file": "$/a/b", "type": "*", "text": "Heading"}
        ]

    def test_file_only(self) -> None:
        assert _captures("{:../x:}") == [{"link": ":../x:", "file": "../x"}]

    def test_generic_and_definition_targets(self) -> None:
        caps = _captures("{:a:# generic} {:b:$ term} {:c:^ footnote}")
        assert [(c["type"], c["text"]) for c in caps] == [
            ("#", "generic"),
            ("$", "term"),
            ("^", "footnote"),
        ]

    def test_non_file_links_ignored(self) -> None:
        assert _captures("{* Heading} {https://example.com} {# Target}") == []

    def test_no_link_across_lines(self) -> None:
        assert _captures("{:a\nb:}") == []

    def test_verbatim_blocks_skipped(self) -> None:
        source = "{:before:}\n@code norg\n{:inside:}\n@end\n{:after:}\n"
        assert [c["file"] for c in _captures(source)] == ["before", "after"]

    def test_unterminated_verbatim_block(self) -> None:
        assert _captures("@code\n{:inside:}\n") == []

    def test_inline_verbatim_skipped(self) -> None:
        assert _captures("write `{:a:}` to link\n") == []

    def test_links_beside_inline_verbatim_kept(self) -> None:
        source = "`code` {:a:} and `{:b:}` then {:c:* use `x`}\n"
        assert [c["file"] for c in _captures(source)] == ["a", "c"]

    def test_lone_backtick_is_not_verbatim(self) -> None:
        assert [c["file"] for c in _captures("a ` b {:x:}\n")] == ["x"]

    def test_other_node_types_empty(self) -> None:
        tree = PARSER.parse("{:a:}", language="norg")
        assert list(PARSER.query(tree, "heading")) == []


class TestRanges:
    def test_points_are_row_and_column(self) -> None:
        source = "first line\n  {:../tools/git:}\n"
        tree = PARSER.parse(source, language="norg")
        (match,) = PARSER.query(tree, "link_location")
        assert PARSER.node_range(match["file"]) == (1, 4, 1, 16)

    def test_columns_count_code_points(self) -> None:
        source = "héllo → {:x:}"
        tree = PARSER.parse(source, language="norg")
        (match,) = PARSER.query(tree, "link_location")
        start_row, start_col, _end_row, end_col = PARSER.node_range(match["file"])
        assert (start_row, start_col, end_col) == (0, 10, 11)
        assert source[start_col:end_col] == "x"
