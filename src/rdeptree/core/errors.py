"""Error kinds raised while resolving packages and building reverse trees."""

from __future__ import annotations


class RdeptreeError(Exception):
    """Base class for errors that are reported per root package and not fatal by default."""


class SpecificationNotFound(RdeptreeError):
    """The catalog has no specification matching a dependency (or a subspec is missing)."""

    def __init__(self, dependency: object, detail: str | None = None) -> None:
        self.dependency = dependency
        message = f"Unable to find a specification for `{dependency}`."
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)


class SpecNotFound(RdeptreeError):
    """An externally sourced dependency has no specification in the override store.

    This points at an inconsistent workspace rather than a user typo, so the
    builder treats it as fatal unless told otherwise.
    """

    def __init__(self, dependency: object) -> None:
        self.dependency = dependency
        super().__init__(f"[Bug] Unable to find the specification for `{dependency}`.")


class InvalidRequirement(RdeptreeError):
    """A version requirement string could not be parsed."""

    def __init__(self, requirement: str) -> None:
        self.requirement = requirement
        super().__init__(f"Invalid version requirement: `{requirement}`.")


class WorkspaceError(RdeptreeError):
    """The workspace file or lockfile is missing or invalid."""
