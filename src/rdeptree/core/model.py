"""Package specifications, dependencies and target contexts."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from rdeptree.core.errors import SpecificationNotFound

SUBSPEC_SEPARATOR = "/"

# Attributes of a <depend> element that mark it as externally sourced.
EXTERNAL_SOURCE_KEYS = ("path", "git", "tag", "branch", "commit", "podspec")


def root_name_of(name: str) -> str:
    """Return the root package name of a (possibly subspec) name: Foo/Core -> Foo."""
    return name.split(SUBSPEC_SEPARATOR, 1)[0]


@dataclass(frozen=True)
class Dependency:
    """A forward dependency declared by a specification or a target."""

    name: str
    requirement: str | None = None
    external_source: dict[str, str] | None = field(default=None, hash=False)
    platform: str | None = None

    @property
    def root_name(self) -> str:
        return root_name_of(self.name)

    def applies_to(self, platform: str | None) -> bool:
        """True if this dependency is declared for the given platform (None = any)."""
        return platform is None or self.platform is None or self.platform == platform

    def __str__(self) -> str:
        if self.external_source:
            source = ", ".join(f"{k}: {v}" for k, v in self.external_source.items())
            return f"{self.name} (from {source})"
        if self.requirement:
            return f"{self.name} ({self.requirement})"
        return self.name


@dataclass
class Specification:
    """A concrete package version: metadata, dependencies and nested subspecs."""

    name: str
    version: str = ""
    description: str = ""
    path: Path | None = None
    dependencies: list[Dependency] = field(default_factory=list)
    subspecs: list[Specification] = field(default_factory=list)
    default_subspecs: list[str] = field(default_factory=list)
    parent: Specification | None = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        for sub in self.subspecs:
            sub.parent = self

    @property
    def root_name(self) -> str:
        return root_name_of(self.name)

    @property
    def root(self) -> Specification:
        spec = self
        while spec.parent is not None:
            spec = spec.parent
        return spec

    @property
    def is_subspec(self) -> bool:
        return self.parent is not None

    def dependencies_for(self, platform: str | None = None) -> list[Dependency]:
        """Own and inherited (parent) dependencies that apply to the platform."""
        deps = [d for d in self.dependencies if d.applies_to(platform)]
        if self.parent is not None:
            deps = self.parent.dependencies_for(platform) + deps
        return _unique_by_name(deps)

    def subspec_dependencies(self) -> list[Dependency]:
        """Dependencies on the subspecs this spec pulls in (defaults if declared)."""
        if self.default_subspecs:
            names = [f"{self.name}{SUBSPEC_SEPARATOR}{n}" for n in self.default_subspecs]
        else:
            names = [sub.name for sub in self.subspecs]
        return [Dependency(name=n) for n in names]

    def all_dependencies(self, platform: str | None = None) -> list[Dependency]:
        """
        Full dependency list for a platform.

        Includes inherited parent dependencies and one dependency per pulled-in
        subspec, so subspecs become nodes of their own in the graph.
        """
        return _unique_by_name(self.dependencies_for(platform) + self.subspec_dependencies())

    def subspec_by_name(self, name: str) -> Specification:
        """
        Return the subspec with the given full name (or self for the own name).

        Raises SpecificationNotFound if the name does not belong to this spec tree.
        """
        if name == self.name:
            return self
        if not name.startswith(self.name + SUBSPEC_SEPARATOR):
            root = self.root
            if root is not self:
                return root.subspec_by_name(name)
            raise SpecificationNotFound(name, f"`{self.name}` has no such subspec.")
        remainder = name[len(self.name) + 1 :]
        child_name = f"{self.name}{SUBSPEC_SEPARATOR}{remainder.split(SUBSPEC_SEPARATOR, 1)[0]}"
        for sub in self.subspecs:
            if sub.name == child_name:
                return sub.subspec_by_name(name)
        raise SpecificationNotFound(name, f"`{self.name}` has no such subspec.")


@dataclass
class TargetContext:
    """A named consumer of the graph: one platform plus its declared root dependencies."""

    name: str
    platform: str | None = None
    platform_version: str | None = None
    dependencies: list[Dependency] = field(default_factory=list)

    def __str__(self) -> str:
        if self.platform is None:
            return "any platform"
        if self.platform_version:
            return f"{self.platform} {self.platform_version}"
        return self.platform


def _unique_by_name(deps: list[Dependency]) -> list[Dependency]:
    seen: set[str] = set()
    out: list[Dependency] = []
    for dep in deps:
        if dep.name in seen:
            continue
        seen.add(dep.name)
        out.append(dep)
    return out
