"""Package catalog: the best available specification per package name, plus overrides."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

from rdeptree.core.errors import InvalidRequirement
from rdeptree.core.finder import find_manifest_path, list_manifest_paths
from rdeptree.core.model import Dependency, Specification
from rdeptree.core.parser import parse_package_xml

_PEP440_OPERATORS = ("~=", "==", "!=", "<=", ">=", "<", ">", "===")


def parse_version(value: str) -> Version | None:
    """Parse a version string; None if it is not a valid version."""
    try:
        return Version(value)
    except (InvalidVersion, TypeError):
        return None


def _version_sort_key(value: str) -> tuple[int, Version, str]:
    # Unparseable versions sort below every valid one.
    parsed = parse_version(value)
    if parsed is None:
        return (0, Version("0"), value)
    return (1, parsed, value)


def _translate_clause(clause: str, requirement: str) -> str:
    """Translate one requirement clause to PEP 440 (~> 1.2 -> ~=1.2, = 1.0 -> ==1.0)."""
    clause = clause.strip()
    if clause.startswith("~>"):
        operand = clause[2:].strip()
        if "." in operand:
            return f"~={operand}"
        try:
            major = int(operand)
        except ValueError as e:
            raise InvalidRequirement(requirement) from e
        return f">={major},<{major + 1}"
    if clause.startswith(_PEP440_OPERATORS):
        return clause.replace(" ", "")
    if clause.startswith("="):
        return f"=={clause[1:].strip()}"
    return f"=={clause}"


def requirement_to_specifier(requirement: str) -> SpecifierSet:
    """
    Convert a requirement string into a packaging SpecifierSet.

    Accepts comma-separated clauses using either pessimistic (~>) or PEP 440
    operators; a bare version means an exact match. Raises InvalidRequirement.
    """
    clauses = [c for c in requirement.split(",") if c.strip()]
    if not clauses:
        raise InvalidRequirement(requirement)
    try:
        return SpecifierSet(",".join(_translate_clause(c, requirement) for c in clauses))
    except InvalidSpecifier as e:
        raise InvalidRequirement(requirement) from e


def satisfies(version: str, requirement: str | None) -> bool:
    """True if the version string satisfies the requirement (None = anything)."""
    if not requirement:
        return True
    specifier = requirement_to_specifier(requirement)
    parsed = parse_version(version)
    if parsed is None:
        return False
    return specifier.contains(parsed, prereleases=True)


class PackageSet:
    """All known specifications of one package; `specification` is the highest version."""

    def __init__(self, name: str, specifications: Iterable[Specification] = ()) -> None:
        self.name = name
        self._by_version: dict[str, Specification] = {}
        for spec in specifications:
            self.add(spec)

    def add(self, spec: Specification) -> None:
        # First source to provide a version wins.
        self._by_version.setdefault(spec.version, spec)

    @property
    def versions(self) -> list[str]:
        """Available versions, newest first."""
        return sorted(self._by_version, key=_version_sort_key, reverse=True)

    @property
    def specification(self) -> Specification:
        return self._by_version[self.versions[0]]

    def restricted_to(self, requirement: str | None) -> PackageSet | None:
        """A new set holding only versions that satisfy the requirement; None if empty."""
        if not requirement:
            return self
        matching = [s for s in self._by_version.values() if satisfies(s.version, requirement)]
        if not matching:
            return None
        return PackageSet(self.name, matching)

    def __len__(self) -> int:
        return len(self._by_version)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, versions={self.versions!r})"


class ExternalSet(PackageSet):
    """Singleton set wrapping an externally sourced (override) specification."""

    def __init__(self, spec: Specification) -> None:
        super().__init__(spec.root_name, [spec])


class Catalog:
    """
    Package sets aggregated from one or more source directories.

    Each source root is walked for package.xml manifests once, on first use;
    the index is kept for the lifetime of the catalog.
    """

    def __init__(self, source_roots: list[Path] | None = None) -> None:
        self.source_roots = list(source_roots or [])
        self._sets: dict[str, PackageSet] = {}
        self._by_source: dict[str, list[str]] = {}
        self._indexed = False

    @classmethod
    def from_specifications(cls, specs: Iterable[Specification]) -> Catalog:
        """Build an in-memory catalog (no source directories) from specifications."""
        catalog = cls([])
        catalog._indexed = True
        for spec in specs:
            catalog._add(spec, "Memory")
        return catalog

    def _add(self, spec: Specification, label: str) -> None:
        pkg_set = self._sets.get(spec.name)
        if pkg_set is None:
            pkg_set = self._sets[spec.name] = PackageSet(spec.name)
        pkg_set.add(spec)
        names = self._by_source.setdefault(label, [])
        if spec.name not in names:
            names.append(spec.name)

    def _index(self) -> dict[str, PackageSet]:
        if not self._indexed:
            self._indexed = True
            for root in self.source_roots:
                label = f"Source ({root})"
                for pkg_xml in list_manifest_paths([root]):
                    spec = parse_package_xml(pkg_xml)
                    if spec is None:
                        continue
                    self._add(spec, label)
        return self._sets

    def all_sets(self) -> list[PackageSet]:
        """Every known package set, sorted by name."""
        index = self._index()
        return [index[name] for name in sorted(index)]

    def search(self, dependency: Dependency) -> PackageSet | None:
        """
        Return the set for the dependency's root name, narrowed to versions that
        satisfy its requirement. None if nothing matches.
        """
        pkg_set = self._index().get(dependency.root_name)
        if pkg_set is None:
            return None
        return pkg_set.restricted_to(dependency.requirement)

    def packages_by_source(self) -> dict[str, list[str]]:
        """Mapping source label -> sorted package names."""
        self._index()
        return {label: sorted(names) for label, names in self._by_source.items()}

    def __len__(self) -> int:
        return len(self._index())


class OverrideStore:
    """
    Specifications of externally sourced packages, keyed by root name.

    Backed by a directory holding <name>/package.xml (or any manifest whose
    <name> matches); in-memory specs can be added directly.
    """

    def __init__(self, root: Path | None = None) -> None:
        self.root = root
        self._specs: dict[str, Specification | None] = {}

    def add(self, spec: Specification) -> None:
        self._specs[spec.root_name] = spec

    def specification(self, root_name: str) -> Specification | None:
        if root_name in self._specs:
            return self._specs[root_name]
        spec = None
        if self.root is not None and self.root.is_dir():
            pkg_xml = find_manifest_path(self.root, root_name)
            if pkg_xml is not None:
                parsed = parse_package_xml(pkg_xml)
                if parsed is not None and parsed.name == root_name:
                    spec = parsed
        self._specs[root_name] = spec
        return spec
