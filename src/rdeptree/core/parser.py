"""Parse package.xml manifests and workspace.xml target definitions."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path

from rdeptree.core.errors import WorkspaceError
from rdeptree.core.model import (
    EXTERNAL_SOURCE_KEYS,
    SUBSPEC_SEPARATOR,
    Dependency,
    Specification,
    TargetContext,
)


@dataclass
class WorkspaceDefinition:
    """Contents of a workspace.xml: catalog sources and target contexts."""

    path: Path
    sources: list[Path] = field(default_factory=list)
    targets: list[TargetContext] = field(default_factory=list)


def _text(elem: ET.Element | None) -> str:
    if elem is None or not elem.text:
        return ""
    return elem.text.strip()


def _parse_dependency(elem: ET.Element) -> Dependency | None:
    """Build a Dependency from a <depend> element; None if it names nothing."""
    name = _text(elem)
    if not name:
        return None
    external = {k: elem.attrib[k].strip() for k in EXTERNAL_SOURCE_KEYS if k in elem.attrib}
    requirement = elem.get("version", "").strip() or None
    platform = elem.get("platform", "").strip() or None
    return Dependency(
        name=name,
        requirement=requirement,
        external_source=external or None,
        platform=platform,
    )


def _parse_dependencies(parent: ET.Element) -> list[Dependency]:
    # Direct children only: nested <subspec> elements carry their own.
    deps: list[Dependency] = []
    seen: set[str] = set()
    for elem in parent.findall("depend"):
        dep = _parse_dependency(elem)
        if dep is None or dep.name in seen:
            continue
        seen.add(dep.name)
        deps.append(dep)
    return deps


def _parse_subspec(elem: ET.Element, parent_name: str) -> Specification | None:
    short = elem.get("name", "").strip()
    if not short:
        return None
    name = f"{parent_name}{SUBSPEC_SEPARATOR}{short}"
    return Specification(
        name=name,
        description=_text(elem.find("description")),
        dependencies=_parse_dependencies(elem),
        subspecs=_parse_subspecs(elem, name),
        default_subspecs=[_text(d) for d in elem.findall("default_subspec") if _text(d)],
    )


def _parse_subspecs(parent: ET.Element, parent_name: str) -> list[Specification]:
    subspecs = []
    for elem in parent.findall("subspec"):
        sub = _parse_subspec(elem, parent_name)
        if sub is not None:
            subspecs.append(sub)
    return subspecs


def _propagate(spec: Specification, version: str, path: Path) -> None:
    for sub in spec.subspecs:
        sub.version = version
        sub.path = path
        _propagate(sub, version, path)


def parse_package_xml(path: Path) -> Specification | None:
    """
    Parse a package.xml file into a Specification.

    Reads name, version, description, <depend> entries (with optional
    version/platform/external-source attributes) and nested <subspec> blocks.
    Returns None if the file cannot be read or is not a valid package.xml.
    """
    if not path.exists() or not path.is_file():
        return None
    try:
        tree = ET.parse(path)
    except (ET.ParseError, OSError):
        return None
    root = tree.getroot()
    if root.tag != "package":
        return None

    name = _text(root.find("name"))
    if not name or SUBSPEC_SEPARATOR in name:
        return None
    version = _text(root.find("version"))
    resolved = path.resolve()
    spec = Specification(
        name=name,
        version=version,
        description=_text(root.find("description")),
        path=resolved,
        dependencies=_parse_dependencies(root),
        subspecs=_parse_subspecs(root, name),
        default_subspecs=[_text(d) for d in root.findall("default_subspec") if _text(d)],
    )
    _propagate(spec, version, resolved)
    return spec


def _parse_target(elem: ET.Element) -> TargetContext:
    name = elem.get("name", "").strip()
    if not name:
        raise WorkspaceError("Every <target> in the workspace needs a name attribute.")
    return TargetContext(
        name=name,
        platform=elem.get("platform", "").strip() or None,
        platform_version=elem.get("version", "").strip() or None,
        dependencies=_parse_dependencies(elem),
    )


def parse_workspace_xml(path: Path) -> WorkspaceDefinition:
    """
    Parse a workspace.xml file.

    <source> entries are resolved relative to the workspace file's directory.
    Raises WorkspaceError if the file is missing, unreadable or malformed.
    """
    if not path.is_file():
        raise WorkspaceError(f"No workspace file found at `{path}`.")
    try:
        tree = ET.parse(path)
    except (ET.ParseError, OSError) as e:
        raise WorkspaceError(f"Unable to read workspace file `{path}`: {e}") from e
    root = tree.getroot()
    if root.tag != "workspace":
        raise WorkspaceError(f"`{path}` is not a workspace file (root tag <{root.tag}>).")

    base = path.resolve().parent
    sources = [(base / _text(s)).resolve() for s in root.findall("source") if _text(s)]
    targets = [_parse_target(t) for t in root.findall("target")]
    return WorkspaceDefinition(path=path.resolve(), sources=sources, targets=targets)
