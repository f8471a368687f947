"""Tests for rdeptree.core.render module."""

from __future__ import annotations

from rdeptree.core.render import (
    HTML_FOOTER,
    RENDERERS,
    HtmlRenderer,
    PlainRenderer,
    render,
    render_document,
)

REVERSE = {"A": ["B", "C"], "B": ["D"]}


class TestPlainRender:
    """Tests for the indented text output."""

    def test_preorder_with_indent(self) -> None:
        assert list(render(["A"], REVERSE)) == ["A", "   B", "      D", "   C"]

    def test_default_renderer_is_plain(self) -> None:
        assert list(render(["A"], REVERSE)) == list(render(["A"], REVERSE, PlainRenderer()))

    def test_renderers_by_name(self) -> None:
        assert RENDERERS["plain"] is PlainRenderer
        assert RENDERERS["html"] is HtmlRenderer

    def test_multiple_roots(self) -> None:
        reverse = {"JSONKit": ["AFNetworking"], "Reachability": ["AFNetworking"]}
        lines = list(render(list(reverse), reverse))
        assert lines == ["JSONKit", "   AFNetworking", "Reachability", "   AFNetworking"]

    def test_shared_subtree_printed_under_each_parent(self) -> None:
        reverse = {"D": ["B", "C"], "B": ["A"], "C": ["A"]}
        lines = list(render(["D"], reverse))
        assert lines == ["D", "   B", "      A", "   C", "      A"]

    def test_cycle_terminates(self) -> None:
        reverse = {"A": ["C"], "B": ["A"], "C": ["B"]}
        lines = list(render(["A"], reverse))
        assert lines == ["A", "   C", "      B", "         A"]

    def test_max_depth(self) -> None:
        assert list(render(["A"], REVERSE, max_depth=1)) == ["A", "   B", "   C"]
        assert list(render(["A"], REVERSE, max_depth=0)) == ["A"]

    def test_empty(self) -> None:
        assert list(render([], {})) == []


class TestHtmlRender:
    """Tests for the collapsible HTML output."""

    def test_nested_lists(self) -> None:
        lines = list(render(["A"], REVERSE, HtmlRenderer()))
        assert lines == [
            "<ul class='rootList'>",
            "<li>A",
            "<ul class='collapsibleList'>",
            "<li>B",
            "<ul class='collapsibleList'>",
            "<li>D",
            "</li>",
            "</ul>",
            "</li>",
            "<li>C",
            "</li>",
            "</ul>",
            "</li>",
            "</ul>",
        ]

    def test_names_are_escaped(self) -> None:
        lines = list(render(["a<b>"], {}, HtmlRenderer()))
        assert "<li>a&lt;b&gt;" in lines

    def test_tags_balanced(self) -> None:
        reverse = {"A": ["C"], "B": ["A"], "C": ["B"]}
        text = "\n".join(render(["A", "B"], reverse, HtmlRenderer()))
        assert text.count("<ul") == text.count("</ul>")
        assert text.count("<li>") == text.count("</li>")


class TestRenderDocument:
    """Tests for render_document."""

    def test_plain_has_no_wrapper(self) -> None:
        assert list(render_document(["A"], REVERSE)) == list(render(["A"], REVERSE))

    def test_html_header_and_footer(self) -> None:
        lines = list(render_document(["A"], REVERSE, HtmlRenderer(title="Deps of <A>")))
        assert lines[0].startswith("<html>")
        assert "<title>Deps of &lt;A&gt;</title>" in lines[0]
        assert "applyCollapsibleLists" in lines[0]
        assert lines[1] == "<ul class='rootList'>"
        assert lines[-1] == HTML_FOOTER

    def test_html_empty_forest(self) -> None:
        lines = list(render_document([], {}, HtmlRenderer()))
        assert len(lines) == 2
        assert lines[-1] == HTML_FOOTER
