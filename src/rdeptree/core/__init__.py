"""Core library: manifest parsing, catalog lookup, reverse graph building and rendering."""

from rdeptree.core.catalog import Catalog, ExternalSet, OverrideStore, PackageSet
from rdeptree.core.errors import (
    InvalidRequirement,
    RdeptreeError,
    SpecificationNotFound,
    SpecNotFound,
    WorkspaceError,
)
from rdeptree.core.model import Dependency, Specification, TargetContext
from rdeptree.core.parser import parse_package_xml, parse_workspace_xml
from rdeptree.core.render import HtmlRenderer, PlainRenderer, render, render_document
from rdeptree.core.tree import (
    DependentNode,
    ReverseGraphBuilder,
    SetCache,
    SpecCache,
    TraversalContext,
    build_forest,
)
from rdeptree.core.workspace import Workspace

__all__ = [
    "Catalog",
    "ExternalSet",
    "OverrideStore",
    "PackageSet",
    "InvalidRequirement",
    "RdeptreeError",
    "SpecificationNotFound",
    "SpecNotFound",
    "WorkspaceError",
    "Dependency",
    "Specification",
    "TargetContext",
    "parse_package_xml",
    "parse_workspace_xml",
    "HtmlRenderer",
    "PlainRenderer",
    "render",
    "render_document",
    "DependentNode",
    "ReverseGraphBuilder",
    "SetCache",
    "SpecCache",
    "TraversalContext",
    "build_forest",
    "Workspace",
]
