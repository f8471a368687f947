"""Public API: use rdeptree from Python or from other tools."""

from __future__ import annotations

from pathlib import Path
from typing import TextIO

from rdeptree.core.errors import RdeptreeError, SpecNotFound
from rdeptree.core.render import RENDERERS, render_document
from rdeptree.core.tree import DependentNode, ReverseGraphBuilder, build_forest
from rdeptree.core.workspace import Workspace


def list_known_packages(
    *,
    workspace: Path | None = None,
    extra_source_roots: list[Path] | None = None,
) -> dict[str, Path]:
    """
    List every package in the catalog.

    The catalog is built from the workspace's <source> entries,
    RDEPTREE_SOURCE_PATH and extra_source_roots. Returns a mapping from package
    name to the package.xml of its highest available version.
    """
    catalog = Workspace.load(workspace).catalog(extra_source_roots)
    result: dict[str, Path] = {}
    for pkg_set in catalog.all_sets():
        spec = pkg_set.specification
        if spec.path is not None:
            result[pkg_set.name] = spec.path
    return result


def list_known_packages_by_source(
    *,
    workspace: Path | None = None,
    extra_source_roots: list[Path] | None = None,
) -> dict[str, list[str]]:
    """List package names grouped by the source directory that provides them."""
    return Workspace.load(workspace).catalog(extra_source_roots).packages_by_source()


def build_reverse_dependencies(
    name_filter: str | None = None,
    *,
    workspace: Path | None = None,
    extra_source_roots: list[Path] | None = None,
    errors: TextIO | None = None,
    strict: bool = True,
    verify: bool = True,
) -> ReverseGraphBuilder:
    """
    Build the reverse dependency map for every target of a workspace.

    Args:
        name_filter: Only packages whose name contains this string seed the
            traversal; None seeds every package in the catalog.
        workspace: Workspace directory; defaults to $RDEPTREE_WORKSPACE or cwd.
        extra_source_roots: Additional catalog source directories.
        errors: Stream for per-package error messages (default: stderr).
        strict: If True, a missing override specification (SpecNotFound)
            aborts the run; otherwise it is reported like any other failure.
        verify: If True, require workspace.xml and workspace.lock to exist.

    Returns:
        The builder, holding the traversal context and any failures.
    """
    ws = Workspace.load(workspace)
    if verify:
        ws.verify_workspace_exists()
        ws.verify_lockfile_exists()
    fatal: tuple[type[RdeptreeError], ...] = (SpecNotFound,) if strict else ()
    builder = ReverseGraphBuilder(
        ws.catalog(extra_source_roots),
        ws.override_store(),
        errors=errors,
        fatal=fatal,
    )
    builder.build(ws.target_definitions(), name_filter)
    return builder


def build_reverse_tree(
    name_filter: str | None = None,
    *,
    max_depth: int | None = None,
    workspace: Path | None = None,
    extra_source_roots: list[Path] | None = None,
    errors: TextIO | None = None,
) -> list[DependentNode]:
    """Build the reverse dependency forest: one DependentNode per dependency found."""
    builder = build_reverse_dependencies(
        name_filter,
        workspace=workspace,
        extra_source_roots=extra_source_roots,
        errors=errors,
    )
    context = builder.context
    return build_forest(
        context.roots(),
        context.reverse_dependencies,
        context.spec_cache,
        max_depth=max_depth,
    )


def render_tree(
    name_filter: str | None = None,
    *,
    html: bool = False,
    max_depth: int | None = None,
    workspace: Path | None = None,
    extra_source_roots: list[Path] | None = None,
    errors: TextIO | None = None,
) -> str:
    """Render the reverse dependency forest as plain text or a full HTML page."""
    builder = build_reverse_dependencies(
        name_filter,
        workspace=workspace,
        extra_source_roots=extra_source_roots,
        errors=errors,
    )
    context = builder.context
    renderer = RENDERERS["html" if html else "plain"]()
    lines = render_document(
        context.roots(),
        context.reverse_dependencies,
        renderer,
        max_depth=max_depth,
    )
    return "\n".join(lines)
