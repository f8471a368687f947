"""Textual TUI for browsing reverse dependency trees."""

from __future__ import annotations

import io
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical
from textual.screen import ModalScreen
from textual.widgets import Footer, Header, Input, LoadingIndicator, Static, Tree
from textual.widgets.tree import TreeNode
from textual.worker import Worker, WorkerState

from rdeptree.api import build_reverse_dependencies
from rdeptree.core.tree import DependentNode, build_forest

# Limits to avoid huge trees and crashes
MAX_TREE_DEPTH = 8
MAX_TREE_NODES = 2000
EXPAND_DEPTH_DEFAULT = 1

COLOR_HEADER = "bold magenta"
COLOR_PKG = "white"
COLOR_MATCH = "bold green"
COLOR_STATS = "cyan"
COLOR_ERROR = "red"


@dataclass
class LoadResult:
    """Outcome of one background traversal."""

    forest: list[DependentNode]
    failures: list[str] = field(default_factory=list)


def _count_nodes(node: Any) -> int:
    """Count nodes in tree (for cap)."""
    n = 1
    for c in getattr(node, "children", []):
        n += _count_nodes(c)
    return n


def _node_stats(node: Any) -> tuple[int, int, int]:
    """Return (direct_dependents, total_dependents, max_depth) for a node."""
    children = getattr(node, "children", []) or []
    direct = len(children)
    total = 0
    max_d = 0
    for c in children:
        sub_direct, sub_total, sub_depth = _node_stats(c)
        total += 1 + sub_total
        max_d = max(max_d, 1 + sub_depth)
    return direct, total, max_d


def _node_label(node: Any, name_filter: str | None = None) -> str:
    color = COLOR_MATCH if name_filter and name_filter in node.name else COLOR_PKG
    version = f" [dim]v{node.version}[/]" if getattr(node, "version", "") else ""
    cycle = " [dim](cycle)[/]" if getattr(node, "cycle", False) else ""
    return f"[{color}]{node.name}[/]{version}{cycle}"


def _populate_textual_tree(
    tn: TreeNode,
    node: Any,
    *,
    name_filter: str | None = None,
    depth: int = 0,
    max_depth: int = MAX_TREE_DEPTH,
    max_nodes: int = MAX_TREE_NODES,
    node_count: list[int] | None = None,
) -> None:
    """Recursively add DependentNode children; cap depth and total nodes."""
    if node_count is None:
        node_count = [0]
    for child in getattr(node, "children", []):
        if node_count[0] >= max_nodes:
            tn.add_leaf(f"[dim]… truncated ({max_nodes} nodes max)[/]")
            return
        if depth >= max_depth:
            tn.add_leaf(f"[dim]{child.name} …[/]")
            continue
        node_count[0] += 1
        child_tn = tn.add(_node_label(child, name_filter), expand=False)
        child_tn.data = child
        _populate_textual_tree(
            child_tn,
            child,
            name_filter=name_filter,
            depth=depth + 1,
            max_depth=max_depth,
            max_nodes=max_nodes,
            node_count=node_count,
        )


def _expand_to_depth(tn: TreeNode, depth: int, current: int = 0) -> None:
    """Expand tree nodes up to given depth (0 = root only)."""
    if current >= depth:
        return
    tn.expand()
    for child in tn.children:
        _expand_to_depth(child, depth, current + 1)


class SearchScreen(ModalScreen[str | None]):
    """Modal to search for packages in the tree. Keyboard-only."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=True),
    ]

    DEFAULT_CSS = """
    SearchScreen {
        align: center middle;
        padding: 2 4;
    }
    SearchScreen #search_input {
        width: 60;
        margin: 1 0;
    }
    """

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static(
                "[bold cyan]Search[/]\n\nType a package name or partial match to find in the tree.",
                markup=True,
            )
            yield Input(placeholder="package name...", id="search_input")
            yield Static(
                "[dim]Enter[/] = Search  ·  [dim]Escape[/] = Cancel  ·  "
                "[dim]After search: [bold]n[/bold] / [bold]N[/bold] = next / previous match[/]",
                markup=True,
            )

    def on_mount(self) -> None:
        self.query_one("#search_input", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        value = event.value.strip()
        self.dismiss(value if value else None)

    def action_cancel(self) -> None:
        self.dismiss(None)


class RevDepTreeApp(App[None]):
    """Terminal UI to explore which packages depend on which."""

    TITLE = "rdeptree"
    BINDINGS = [
        Binding("/", "search", "Search"),
        Binding("n", "next_match", "Next match", show=False),
        Binding("N", "prev_match", "Prev match", show=False),
        Binding("d", "toggle_details", "Details"),
        Binding("r", "refresh", "Refresh"),
        Binding("e", "expand_all", "Expand all"),
        Binding("c", "collapse_all", "Collapse"),
        Binding("q", "quit", "Quit"),
    ]

    DEFAULT_CSS = """
    #loading {
        height: auto;
        display: none;
    }
    #loading.loading {
        display: block;
    }
    #details {
        padding: 1 2;
        border: solid $primary;
        height: auto;
        min-height: 8;
    }
    """

    def __init__(
        self,
        name_filter: str | None = None,
        *,
        workspace: Path | None = None,
        extra_source_roots: list[Path] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._name_filter = name_filter
        self._workspace = workspace
        self._extra_source_roots = extra_source_roots
        self._result: LoadResult | None = None
        self._search_matches: list[TreeNode] = []
        self._search_index: int = 0
        self._details_visible: bool = True

    def compose(self) -> ComposeResult:
        yield Header(show_clock=False)
        with Container(id="loading"):
            yield LoadingIndicator()
        yield Tree("Reverse dependencies", id="dep_tree")
        yield Static("[dim]Resolving dependencies...[/]", id="details", markup=True)
        yield Footer()

    def on_mount(self) -> None:
        self.sub_title = f"Filter: {self._name_filter}" if self._name_filter else "All packages"
        self._start_load()

    def _start_load(self) -> None:
        self.query_one("#loading").add_class("loading")
        self.run_worker(self._load_worker, thread=True, exclusive=True)

    def _load_worker(self) -> LoadResult:
        """Worker that builds the reverse graph in a background thread (fresh caches per run)."""
        errors = io.StringIO()
        builder = build_reverse_dependencies(
            self._name_filter,
            workspace=self._workspace,
            extra_source_roots=self._extra_source_roots,
            errors=errors,
        )
        context = builder.context
        forest = build_forest(context.roots(), context.reverse_dependencies, context.spec_cache)
        return LoadResult(forest=forest, failures=[str(f.error) for f in builder.failures])

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        """Handle worker completion."""
        if event.state == WorkerState.SUCCESS:
            self.query_one("#loading").remove_class("loading")
            self._result = event.worker.result
            self._show_forest()
        elif event.state == WorkerState.ERROR:
            self.query_one("#loading").remove_class("loading")
            self._set_details(f"[{COLOR_ERROR}]Error: {event.worker.error}[/]")

    def _show_forest(self) -> None:
        tree = self.query_one("#dep_tree", Tree)
        tree.clear()
        result = self._result
        if result is None:
            return
        if not result.forest:
            tree.root.add_leaf("[dim]No dependencies found[/]")
        node_count = [0]
        for root in result.forest:
            tn = tree.root.add(_node_label(root, self._name_filter), expand=False)
            tn.data = root
            _populate_textual_tree(tn, root, name_filter=self._name_filter, node_count=node_count)
        tree.root.expand()
        for tn in tree.root.children:
            _expand_to_depth(tn, EXPAND_DEPTH_DEFAULT)
        self._set_details(self._format_summary(result))
        tree.focus()

    def _format_summary(self, result: LoadResult) -> str:
        total = sum(_count_nodes(n) for n in result.forest)
        lines = [
            f"[{COLOR_HEADER}]Reverse dependency forest[/]",
            f"  Roots: [{COLOR_STATS}]{len(result.forest)}[/]  ·  Nodes: [{COLOR_STATS}]{total}[/]",
        ]
        if result.failures:
            lines.append("")
            lines.append(f"[{COLOR_ERROR}]{len(result.failures)} package(s) failed to resolve[/]")
            lines.extend(f"  [dim]{msg}[/]" for msg in result.failures[:5])
        return "\n".join(lines)

    def _format_node(self, node: DependentNode) -> str:
        direct, total, max_depth = _node_stats(node)
        lines = [
            f"[{COLOR_HEADER}]Package[/]",
            f"  [{COLOR_PKG}]{node.name}[/]  [dim]v{node.version or '?'}[/]",
            "",
            f"[{COLOR_HEADER}]Dependents[/]",
            f"  Direct dependents:    [{COLOR_STATS}]{direct}[/]",
            f"  Total dependents:     [{COLOR_STATS}]{total}[/] [dim](transitive, with repeats)[/]",
            f"  Max depth from here:  [{COLOR_STATS}]{max_depth}[/] [dim]levels[/]",
        ]
        if node.cycle:
            lines.append("")
            lines.append("[dim]Already shown above on this path (cycle); not expanded.[/]")
        return "\n".join(lines)

    def _set_details(self, text: str) -> None:
        self.query_one("#details", Static).update(text)

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        node = event.node.data
        if isinstance(node, DependentNode):
            self._set_details(self._format_node(node))

    def action_refresh(self) -> None:
        self._search_matches = []
        self._start_load()

    def action_expand_all(self) -> None:
        self.query_one("#dep_tree", Tree).root.expand_all()

    def action_collapse_all(self) -> None:
        root = self.query_one("#dep_tree", Tree).root
        root.collapse_all()
        root.expand()

    def action_search(self) -> None:
        """Open search modal."""
        self.push_screen(SearchScreen(), self._on_search_done)

    def _on_search_done(self, query: str | None) -> None:
        if not query:
            return
        self._search_matches = []
        self._search_index = 0
        self._collect_matches(self.query_one("#dep_tree", Tree).root, query.lower())
        if not self._search_matches:
            self.notify(f"No matches for '{query}'", severity="warning", timeout=2)
            return
        self.notify(f"Found {len(self._search_matches)} match(es) for '{query}'", timeout=2)
        self._goto_match(0)

    def _collect_matches(self, node: TreeNode, query: str) -> None:
        """Recursively collect nodes whose package name matches the query."""
        data = node.data
        if isinstance(data, DependentNode) and query in data.name.lower():
            self._search_matches.append(node)
        for child in node.children:
            self._collect_matches(child, query)

    def _goto_match(self, index: int) -> None:
        """Navigate to and select a specific match."""
        if not self._search_matches:
            return
        self._search_index = index % len(self._search_matches)
        match_node = self._search_matches[self._search_index]
        parent = match_node.parent
        while parent is not None:
            parent.expand()
            parent = parent.parent
        tree = self.query_one("#dep_tree", Tree)
        tree.select_node(match_node)
        tree.scroll_to_node(match_node)

    def action_next_match(self) -> None:
        """Go to next search match."""
        if not self._search_matches:
            self.notify("No active search. Press / to search.", timeout=2)
            return
        self._goto_match(self._search_index + 1)

    def action_prev_match(self) -> None:
        """Go to previous search match."""
        if not self._search_matches:
            self.notify("No active search. Press / to search.", timeout=2)
            return
        self._goto_match(self._search_index - 1)

    def action_toggle_details(self) -> None:
        """Toggle visibility of the details panel."""
        self._details_visible = not self._details_visible
        details = self.query_one("#details", Static)
        details.styles.display = "block" if self._details_visible else "none"


def main() -> None:
    """Entry point for the rdeptree TUI."""
    name_filter = None
    if len(sys.argv) > 1:
        name_filter = sys.argv[1].strip() or None
    RevDepTreeApp(name_filter=name_filter).run()


if __name__ == "__main__":
    main()
