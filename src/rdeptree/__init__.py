"""rdeptree: show which packages depend on a package, as a tree (library, CLI, TUI)."""

from importlib.metadata import version, PackageNotFoundError

from rdeptree.api import (
    build_reverse_dependencies,
    build_reverse_tree,
    list_known_packages,
    list_known_packages_by_source,
    render_tree,
)

__all__ = [
    "build_reverse_dependencies",
    "build_reverse_tree",
    "list_known_packages",
    "list_known_packages_by_source",
    "render_tree",
    "__version__",
]

try:
    __version__ = version("rdeptree")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed as package
