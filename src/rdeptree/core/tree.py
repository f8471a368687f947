"""Build reverse dependency graphs and the dependent trees derived from them."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import TextIO

from rdeptree.core.catalog import Catalog, ExternalSet, OverrideStore, PackageSet
from rdeptree.core.errors import InvalidRequirement, RdeptreeError, SpecificationNotFound, SpecNotFound
from rdeptree.core.model import Dependency, Specification, TargetContext


class SpecCache:
    """Resolved specifications (subspecs included) keyed by their full name."""

    def __init__(self) -> None:
        self._specs: dict[str, Specification] = {}

    def remember(self, name: str, spec: Specification) -> None:
        self._specs[name] = spec

    def lookup(self, name: str) -> Specification | None:
        return self._specs.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __len__(self) -> int:
        return len(self._specs)


class SetCache:
    """
    Package sets keyed by root name, resolved once per run.

    Sets hold the highest available specification and are shared by every
    target: only one version of a package can be installed, so resolution is
    global rather than per target. A failed catalog lookup is cached as well
    and keeps failing without querying again.
    """

    def __init__(self, catalog: Catalog, overrides: OverrideStore | None = None) -> None:
        self.catalog = catalog
        self.overrides = overrides if overrides is not None else OverrideStore()
        self._sets: dict[str, PackageSet | None] = {}
        self.queries = 0

    def resolve(self, dependency: Dependency) -> PackageSet:
        name = dependency.root_name
        if name not in self._sets:
            self.queries += 1
            if dependency.external_source:
                spec = self.overrides.specification(name)
                if spec is None:
                    raise SpecNotFound(dependency)
                pkg_set: PackageSet | None = ExternalSet(spec)
            else:
                try:
                    pkg_set = self.catalog.search(dependency)
                except InvalidRequirement:
                    self._sets[name] = None
                    raise
            self._sets[name] = pkg_set
        pkg_set = self._sets[name]
        if pkg_set is None:
            raise SpecificationNotFound(dependency)
        return pkg_set

    def __contains__(self, name: object) -> bool:
        return name in self._sets


@dataclass
class TraversalContext:
    """Per-run state: both caches and the reverse adjacency map (dependency -> dependents)."""

    set_cache: SetCache
    spec_cache: SpecCache = field(default_factory=SpecCache)
    reverse_dependencies: dict[str, list[str]] = field(default_factory=dict)

    def roots(self) -> list[str]:
        """Keys of the reverse map in order of first discovery."""
        return list(self.reverse_dependencies)

    @property
    def edge_count(self) -> int:
        return sum(len(v) for v in self.reverse_dependencies.values())

    @property
    def node_count(self) -> int:
        names = set(self.reverse_dependencies)
        for dependents in self.reverse_dependencies.values():
            names.update(dependents)
        return len(names)


@dataclass
class ResolutionFailure:
    """A root package whose traversal stopped on an error."""

    target: str
    package: str
    error: RdeptreeError


class ReverseGraphBuilder:
    """
    Walk forward dependencies of catalog packages and record reverse edges.

    Errors for one root package are written to `errors` (stderr by default) and
    collected in `failures`; error kinds in `fatal` propagate to the caller.
    """

    def __init__(
        self,
        catalog: Catalog,
        overrides: OverrideStore | None = None,
        *,
        context: TraversalContext | None = None,
        errors: TextIO | None = None,
        fatal: tuple[type[RdeptreeError], ...] = (SpecNotFound,),
    ) -> None:
        self.catalog = catalog
        self.context = context or TraversalContext(SetCache(catalog, overrides))
        self.errors = errors
        self.fatal = fatal
        self.failures: list[ResolutionFailure] = []

    @property
    def reverse_dependencies(self) -> dict[str, list[str]]:
        return self.context.reverse_dependencies

    def record_dependencies(
        self,
        dependent_spec: Specification,
        dependencies: list[Dependency],
        target: TargetContext,
    ) -> None:
        """
        Record dependent_spec as a dependent of each dependency, then recurse
        into each newly recorded dependency's own dependencies.

        An edge that is already recorded is skipped together with its subtree;
        that check is what ends the recursion on cycles and shared subgraphs.
        """
        reverse = self.context.reverse_dependencies
        for dependency in dependencies:
            dependents = reverse.setdefault(dependency.name, [])
            if dependent_spec.name in dependents:
                continue
            dependents.append(dependent_spec.name)

            pkg_set = self.context.set_cache.resolve(dependency)
            spec = pkg_set.specification.subspec_by_name(dependency.name)
            self.context.spec_cache.remember(spec.name, spec)

            self.record_dependencies(spec, spec.all_dependencies(target.platform), target)

    def build_target(self, target: TargetContext, name_filter: str | None = None) -> TraversalContext:
        """Traverse every catalog package whose name contains name_filter (None = all)."""
        for pkg_set in self.catalog.all_sets():
            if name_filter is not None and name_filter not in pkg_set.name:
                continue
            try:
                spec = pkg_set.specification
                self.context.spec_cache.remember(spec.name, spec)
                self.record_dependencies(spec, spec.all_dependencies(target.platform), target)
            except RdeptreeError as e:
                if isinstance(e, self.fatal):
                    raise
                self.failures.append(ResolutionFailure(target.name, pkg_set.name, e))
                print(e, file=self.errors or sys.stderr)
        return self.context

    def build(self, targets: list[TargetContext], name_filter: str | None = None) -> TraversalContext:
        for target in targets:
            self.build_target(target, name_filter)
        return self.context


@dataclass
class DependentNode:
    """A node of the reverse tree: one package and the packages depending on it (children)."""

    name: str
    version: str = ""
    children: list[DependentNode] = field(default_factory=list)
    # True when the name already appears among its ancestors; not expanded.
    cycle: bool = False

    def to_dict(self) -> dict:
        """Serialize node to a JSON-friendly dict."""
        d: dict = {
            "name": self.name,
            "version": self.version,
            "dependents": [c.to_dict() for c in self.children],
        }
        if self.cycle:
            d["cycle"] = True
        return d


def build_forest(
    root_names: list[str],
    reverse_dependencies: dict[str, list[str]],
    spec_cache: SpecCache | None = None,
    *,
    max_depth: int | None = None,
) -> list[DependentNode]:
    """
    Turn a reverse map into DependentNode trees, one per root name.

    Versions come from the spec cache when given. A name already on the
    ancestor path becomes a leaf marked as a cycle.
    """

    def _node(name: str, depth: int, ancestors: frozenset[str]) -> DependentNode:
        spec = spec_cache.lookup(name) if spec_cache is not None else None
        node = DependentNode(name=name, version=spec.version if spec else "")
        if name in ancestors:
            node.cycle = True
            return node
        if max_depth is not None and depth >= max_depth:
            return node
        path = ancestors | {name}
        for child in reverse_dependencies.get(name, []):
            node.children.append(_node(child, depth + 1, path))
        return node

    return [_node(name, 0, frozenset()) for name in root_names]
