"""Command-line interface for rdeptree: list packages, show and export reverse dependency trees."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from rdeptree.core.errors import SpecNotFound, WorkspaceError
from rdeptree.core.render import RENDERERS, render_document
from rdeptree.core.tree import ReverseGraphBuilder, TraversalContext, build_forest
from rdeptree.core.workspace import Workspace

_SOURCE_HINT = "RDEPTREE_SOURCE_PATH (or a <source> in workspace.xml)"


def _workspace(args: argparse.Namespace) -> Workspace:
    path = getattr(args, "workspace", None)
    return Workspace.load(Path(path) if path else None)


def _extra_roots(args: argparse.Namespace) -> list[Path] | None:
    source = getattr(args, "source", None)
    return [Path(p) for p in source] if source else None


def _build(args: argparse.Namespace) -> ReverseGraphBuilder | None:
    """Verify the workspace, then traverse every target. None (after printing why) on fatal errors."""
    ws = _workspace(args)
    try:
        ws.verify_workspace_exists()
        ws.verify_lockfile_exists()
        targets = ws.target_definitions()
    except WorkspaceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return None

    builder = ReverseGraphBuilder(ws.catalog(_extra_roots(args)), ws.override_store())
    try:
        for target in targets:
            print(f"Resolving dependencies for target `{target.name}' ({target})", file=sys.stderr)
            builder.build_target(target, args.name)
    except SpecNotFound as e:
        print(f"Error: {e}", file=sys.stderr)
        return None

    if getattr(args, "verbose", False):
        _print_summary(builder)
    return builder


def _print_summary(builder: ReverseGraphBuilder) -> None:
    context = builder.context
    print(
        f"{context.node_count} package(s), {context.edge_count} reverse edge(s), "
        f"{context.set_cache.queries} catalog quer{'y' if context.set_cache.queries == 1 else 'ies'}, "
        f"{len(builder.failures)} failure(s)",
        file=sys.stderr,
    )


def cmd_tree(args: argparse.Namespace) -> int:
    """Show the reverse dependency tree."""
    builder = _build(args)
    if builder is None:
        return 1
    context = builder.context

    if args.json:
        forest = build_forest(
            context.roots(),
            context.reverse_dependencies,
            context.spec_cache,
            max_depth=args.depth,
        )
        print(json.dumps([node.to_dict() for node in forest], indent=2))
        return 0

    renderer = RENDERERS["html" if args.html else "plain"]()
    for line in render_document(
        context.roots(),
        context.reverse_dependencies,
        renderer,
        max_depth=args.depth,
    ):
        print(line)
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """List packages known to the catalog."""
    try:
        catalog = _workspace(args).catalog(_extra_roots(args))
    except WorkspaceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.by_source:
        by_source = catalog.packages_by_source()
        if args.json:
            print(json.dumps(by_source, indent=2))
        else:
            if not by_source:
                print(f"No packages found. Is {_SOURCE_HINT} set?")
                return 1
            total = sum(len(pkgs) for pkgs in by_source.values())
            print(f"Found {total} package(s) from {len(by_source)} source(s):\n")
            for source, packages in by_source.items():
                print(f"  {source} ({len(packages)})")
                if args.verbose:
                    for pkg in packages[:50]:
                        print(f"    - {pkg}")
                    if len(packages) > 50:
                        print(f"    ... and {len(packages) - 50} more")
                print()
    else:
        sets = catalog.all_sets()
        if args.json:
            print(json.dumps({s.name: s.versions for s in sets}, indent=2))
        else:
            if not sets:
                print(f"No packages found. Is {_SOURCE_HINT} set?")
                return 1
            print(f"Found {len(sets)} package(s):\n")
            for pkg_set in sets:
                if args.verbose:
                    print(f"  {pkg_set.name} ({', '.join(pkg_set.versions)}): {pkg_set.specification.path}")
                else:
                    print(f"  {pkg_set.name} ({pkg_set.specification.version})")
    return 0


def _mermaid_id(name: str) -> str:
    """Convert a package name to a valid Mermaid node ID."""
    return name.replace("-", "_").replace(".", "_").replace("/", "__").replace("+", "_")


def _collect_edges(context: TraversalContext) -> list[tuple[str, str]]:
    """(dependency, dependent) pairs in recorded order."""
    return [
        (dependency, dependent)
        for dependency, dependents in context.reverse_dependencies.items()
        for dependent in dependents
    ]


def _generate_dot(
    context: TraversalContext,
    title: str | None = None,
    highlight: str | None = None,
) -> str:
    """Generate DOT (Graphviz) format; edges point from a dependency to its dependents."""
    lines = [
        "digraph reverse_dependencies {",
        "    rankdir=LR;",
        '    node [shape=box, style=rounded, fontname="sans-serif"];',
    ]
    if title:
        lines.insert(1, f'    label="{title}";')
        lines.insert(2, "    labelloc=t;")

    edges = _collect_edges(context)
    if highlight:
        names = sorted({n for edge in edges for n in edge if highlight in n})
        for name in names:
            lines.append(f'    "{name}" [style="rounded,filled", fillcolor=lightblue];')

    for dependency, dependent in edges:
        lines.append(f'    "{dependency}" -> "{dependent}";')

    lines.append("}")
    return "\n".join(lines)


def _generate_mermaid(
    context: TraversalContext,
    title: str | None = None,
    highlight: str | None = None,
) -> str:
    """Generate Mermaid format; edges point from a dependency to its dependents."""
    lines = ["graph LR"]
    if title:
        lines[0] = f"---\ntitle: {title}\n---\ngraph LR"

    edges = _collect_edges(context)
    if highlight:
        names = sorted({n for edge in edges for n in edge if highlight in n})
        for name in names:
            lines.append(f"    {_mermaid_id(name)}[{name}]")
            lines.append(f"    style {_mermaid_id(name)} fill:#lightblue")

    for dependency, dependent in edges:
        lines.append(f"    {_mermaid_id(dependency)}[{dependency}] --> {_mermaid_id(dependent)}[{dependent}]")

    return "\n".join(lines)


def cmd_graph(args: argparse.Namespace) -> int:
    """Export the reverse dependency graph in DOT or Mermaid format."""
    builder = _build(args)
    if builder is None:
        return 1
    context = builder.context

    if args.no_title:
        title = None
    elif args.name:
        title = f"Reverse dependencies: {args.name}"
    else:
        title = "Reverse dependencies"

    if args.format == "mermaid":
        output = _generate_mermaid(context, title=title, highlight=args.name)
    else:
        output = _generate_dot(context, title=title, highlight=args.name)

    if args.output:
        Path(args.output).write_text(output + "\n")
        print(f"Graph written to: {args.output}", file=sys.stderr)
    else:
        print(output)
    return 0


def cmd_tui(args: argparse.Namespace) -> int:
    """Launch the interactive TUI."""
    from rdeptree.tui.app import RevDepTreeApp

    app = RevDepTreeApp(
        name_filter=getattr(args, "name", None),
        workspace=Path(args.workspace) if getattr(args, "workspace", None) else None,
        extra_source_roots=_extra_roots(args),
    )
    app.run()
    return 0


def _add_location_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-w",
        "--workspace",
        metavar="PATH",
        help="Workspace directory holding workspace.xml (default: $RDEPTREE_WORKSPACE or cwd)",
    )
    parser.add_argument(
        "-s",
        "--source",
        action="append",
        metavar="PATH",
        help="Additional catalog source directories to scan (can be repeated)",
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the rdeptree CLI."""
    parser = argparse.ArgumentParser(
        prog="rdeptree",
        description="Show which packages depend on a package, as a tree.",
    )
    parser.add_argument("--version", action="version", version="%(prog)s 0.1.0")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # rdeptree tree
    tree_parser = subparsers.add_parser(
        "tree",
        help="Show the reverse dependency tree",
        description=(
            "Show a tree of package dependencies where the child nodes depend on the parent. "
            "Use it to see which packages are affected when updating a package."
        ),
    )
    tree_parser.add_argument(
        "name",
        nargs="?",
        help="Only traverse packages whose name contains NAME (default: all packages)",
    )
    output_group = tree_parser.add_mutually_exclusive_group()
    output_group.add_argument(
        "--html",
        action="store_true",
        help="Print output as an HTML page with collapsible lists",
    )
    output_group.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    tree_parser.add_argument(
        "-d",
        "--depth",
        type=int,
        default=None,
        help="Maximum tree depth (default: unlimited)",
    )
    tree_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print a traversal summary to stderr",
    )
    _add_location_args(tree_parser)
    tree_parser.set_defaults(func=cmd_tree)

    # rdeptree list
    list_parser = subparsers.add_parser(
        "list",
        help="List packages known to the catalog",
        description="List packages found in the catalog source directories.",
    )
    list_parser.add_argument(
        "--by-source",
        action="store_true",
        help="Group packages by source directory",
    )
    list_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show all versions and manifest paths",
    )
    list_parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    _add_location_args(list_parser)
    list_parser.set_defaults(func=cmd_list)

    # rdeptree graph
    graph_parser = subparsers.add_parser(
        "graph",
        help="Export the reverse dependency graph (DOT/Mermaid format)",
        description="Export reverse dependency edges for use with Graphviz or Mermaid.",
    )
    graph_parser.add_argument(
        "name",
        nargs="?",
        help="Only traverse packages whose name contains NAME (default: all packages)",
    )
    graph_parser.add_argument(
        "-f",
        "--format",
        choices=["dot", "mermaid"],
        default="dot",
        help="Output format: dot (Graphviz) or mermaid (default: dot)",
    )
    graph_parser.add_argument(
        "-o",
        "--output",
        metavar="FILE",
        help="Output file (default: stdout)",
    )
    graph_parser.add_argument(
        "--no-title",
        action="store_true",
        help="Don't include a title in the graph",
    )
    graph_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print a traversal summary to stderr",
    )
    _add_location_args(graph_parser)
    graph_parser.set_defaults(func=cmd_graph)

    # rdeptree tui (default if no command)
    tui_parser = subparsers.add_parser(
        "tui",
        help="Launch the interactive terminal UI",
        description="Browse the reverse dependency tree interactively.",
    )
    tui_parser.add_argument(
        "name",
        nargs="?",
        help="Optional: only traverse packages whose name contains NAME",
    )
    _add_location_args(tui_parser)
    tui_parser.set_defaults(func=cmd_tui)

    args = parser.parse_args(argv)

    # Default to TUI if no command specified
    if args.command is None:
        return cmd_tui(argparse.Namespace(name=None, workspace=None, source=None))

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
