"""Discover package.xml manifests in catalog source directories."""

from __future__ import annotations

import os
from pathlib import Path

MANIFEST_NAME = "package.xml"
SOURCE_PATH_ENV = "RDEPTREE_SOURCE_PATH"


def _env_paths(env_var: str) -> list[Path]:
    """Split an environment variable by os.pathsep and return existing Paths."""
    value = os.environ.get(env_var, "")
    if not value:
        return []
    return [Path(p).resolve() for p in value.split(os.pathsep) if p.strip() and Path(p).exists()]


def _read_manifest_name(pkg_xml: Path) -> str | None:
    """Cheap line-based read of <name> so a full parse is only done on a match."""
    try:
        with open(pkg_xml, encoding="utf-8") as f:
            for line in f:
                if "<name>" in line and "</name>" in line:
                    start = line.find("<name>") + 6
                    end = line.find("</name>")
                    return line[start:end].strip() or None
    except (OSError, UnicodeDecodeError):
        return None
    return None


def gather_source_roots(extra_source_roots: list[Path] | None = None) -> list[Path]:
    """Collect catalog source roots from RDEPTREE_SOURCE_PATH and extra roots. Deduplicated."""
    candidates: list[Path] = list(_env_paths(SOURCE_PATH_ENV))
    if extra_source_roots:
        for p in extra_source_roots:
            r = Path(p).resolve()
            if r.exists() and r.is_dir():
                candidates.append(r)
    seen: set[Path] = set()
    out: list[Path] = []
    for src in candidates:
        canonical = src.resolve()
        if canonical in seen:
            continue
        seen.add(canonical)
        out.append(canonical)
    return out


def list_manifest_paths(roots: list[Path]) -> list[Path]:
    """
    Walk each root and return every package.xml found, in walk order.

    Hidden directories are skipped. Paths are deduplicated after resolving.
    """
    seen: set[Path] = set()
    out: list[Path] = []
    for root in roots:
        if not root.is_dir():
            continue
        for dirpath, dirs, files in os.walk(root):
            dirs[:] = sorted(d for d in dirs if not d.startswith("."))
            if MANIFEST_NAME not in files:
                continue
            pkg_xml = (Path(dirpath) / MANIFEST_NAME).resolve()
            if pkg_xml in seen:
                continue
            seen.add(pkg_xml)
            out.append(pkg_xml)
    return out


def find_manifest_path(root: Path, package_name: str) -> Path | None:
    """
    Find the package.xml for a package under root.

    Checks <root>/<package_name>/package.xml first, then scans the tree for a
    manifest whose <name> matches. Returns None if not found.
    """
    candidate = root / package_name / MANIFEST_NAME
    if candidate.is_file():
        return candidate
    for pkg_xml in list_manifest_paths([root]):
        if _read_manifest_name(pkg_xml) == package_name:
            return pkg_xml
    return None
