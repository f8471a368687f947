"""Render a reverse dependency map as an indented text forest or a collapsible HTML list."""

from __future__ import annotations

import html
from collections.abc import Iterator

INDENT = "   "

HTML_HEADER = """\
<html><head>
<meta charset='utf-8'>
<title>{title}</title>
<script type='text/javascript'>
function toggleList(item) {{
  var lists = item.getElementsByTagName('ul');
  if (lists.length === 0) {{ return; }}
  var open = item.className.indexOf('collapsibleListClosed') !== -1;
  for (var i = 0; i < lists.length; i++) {{
    if (lists[i].parentNode === item) {{
      lists[i].style.display = open ? 'block' : 'none';
    }}
  }}
  item.className = open ? 'collapsibleListOpen' : 'collapsibleListClosed';
}}
function applyCollapsibleLists() {{
  var items = document.querySelectorAll('ul.collapsibleList > li, ul.rootList > li');
  for (var i = 0; i < items.length; i++) {{
    (function (item) {{
      item.addEventListener('mousedown', function (e) {{ e.preventDefault(); }});
      item.addEventListener('click', function (e) {{
        var target = e.target;
        while (target && target.nodeName !== 'LI') {{ target = target.parentNode; }}
        if (target === item) {{ toggleList(item); }}
      }});
      if (item.getElementsByTagName('ul').length > 0) {{
        item.className = 'collapsibleListOpen';
        toggleList(item);
      }}
    }})(items[i]);
  }}
}}
</script>
<style type='text/css'>
li {{ list-style-type: square; cursor: auto; }}
li.collapsibleListOpen {{ list-style-type: circle; cursor: pointer; }}
li.collapsibleListClosed {{ list-style-type: disc; cursor: pointer; }}
</style>
</head><body onload='applyCollapsibleLists();'>"""

HTML_FOOTER = "</body></html>"


class PlainRenderer:
    """Indented text: three spaces per depth level, no markup."""

    def header(self) -> str | None:
        return None

    def footer(self) -> str | None:
        return None

    def open_level(self, depth: int) -> str | None:
        return None

    def emit_node(self, name: str, depth: int) -> str | None:
        return f"{INDENT * depth}{name}"

    def close_node(self, depth: int) -> str | None:
        return None

    def close_level(self, depth: int) -> str | None:
        return None


class HtmlRenderer:
    """Nested <ul>/<li> markup; every level below the roots is collapsible."""

    def __init__(self, title: str = "Reverse dependencies") -> None:
        self.title = title

    def header(self) -> str | None:
        return HTML_HEADER.format(title=html.escape(self.title))

    def footer(self) -> str | None:
        return HTML_FOOTER

    def open_level(self, depth: int) -> str | None:
        if depth == 0:
            return "<ul class='rootList'>"
        return "<ul class='collapsibleList'>"

    def emit_node(self, name: str, depth: int) -> str | None:
        return f"<li>{html.escape(name)}"

    def close_node(self, depth: int) -> str | None:
        return "</li>"

    def close_level(self, depth: int) -> str | None:
        return "</ul>"


RENDERERS = {
    "plain": PlainRenderer,
    "html": HtmlRenderer,
}


def render(
    root_names: list[str],
    reverse_dependencies: dict[str, list[str]],
    renderer: PlainRenderer | HtmlRenderer | None = None,
    *,
    max_depth: int | None = None,
) -> Iterator[str]:
    """
    Yield the lines of a pre-order, depth-first rendering of the reverse map.

    Children keep their recorded order; a name without an entry is a leaf.
    A name already on the current ancestor path is printed but not expanded,
    and max_depth (when set) stops descent below that depth.
    """
    if renderer is None:
        renderer = PlainRenderer()

    def _level(names: list[str], depth: int, ancestors: frozenset[str]) -> Iterator[str]:
        line = renderer.open_level(depth)
        if line is not None:
            yield line
        for name in names:
            line = renderer.emit_node(name, depth)
            if line is not None:
                yield line
            children = reverse_dependencies.get(name) or []
            expand = name not in ancestors and (max_depth is None or depth < max_depth)
            if children and expand:
                yield from _level(children, depth + 1, ancestors | {name})
            line = renderer.close_node(depth)
            if line is not None:
                yield line
        line = renderer.close_level(depth)
        if line is not None:
            yield line

    if not root_names:
        return
    yield from _level(list(root_names), 0, frozenset())


def render_document(
    root_names: list[str],
    reverse_dependencies: dict[str, list[str]],
    renderer: PlainRenderer | HtmlRenderer | None = None,
    *,
    max_depth: int | None = None,
) -> Iterator[str]:
    """Like render(), wrapped in the renderer's header and footer lines."""
    if renderer is None:
        renderer = PlainRenderer()
    header = renderer.header()
    if header is not None:
        yield header
    yield from render(root_names, reverse_dependencies, renderer, max_depth=max_depth)
    footer = renderer.footer()
    if footer is not None:
        yield footer
