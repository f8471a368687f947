"""Locate a workspace: its workspace.xml, lockfile, override store and catalog sources."""

from __future__ import annotations

import os
from pathlib import Path

from rdeptree.core.catalog import Catalog, OverrideStore
from rdeptree.core.errors import WorkspaceError
from rdeptree.core.finder import gather_source_roots
from rdeptree.core.model import TargetContext
from rdeptree.core.parser import WorkspaceDefinition, parse_workspace_xml

WORKSPACE_FILE = "workspace.xml"
LOCKFILE = "workspace.lock"
EXTERNAL_DIR = Path(".rdeptree") / "external"
WORKSPACE_ENV = "RDEPTREE_WORKSPACE"
DEFAULT_TARGET = "default"


class Workspace:
    """A directory holding workspace.xml, workspace.lock and the external override store."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root).resolve()
        self._definition: WorkspaceDefinition | None = None

    @classmethod
    def load(cls, path: Path | None = None) -> Workspace:
        """Workspace at path, else $RDEPTREE_WORKSPACE, else the current directory."""
        if path is None:
            env = os.environ.get(WORKSPACE_ENV, "").strip()
            path = Path(env) if env else Path.cwd()
        return cls(Path(path).expanduser())

    @property
    def workspace_file(self) -> Path:
        return self.root / WORKSPACE_FILE

    @property
    def lockfile(self) -> Path:
        return self.root / LOCKFILE

    @property
    def external_dir(self) -> Path:
        return self.root / EXTERNAL_DIR

    def verify_workspace_exists(self) -> None:
        if not self.workspace_file.is_file():
            raise WorkspaceError(f"No `{WORKSPACE_FILE}` found in the workspace directory ({self.root}).")

    def verify_lockfile_exists(self) -> None:
        if not self.lockfile.is_file():
            raise WorkspaceError(
                f"No `{LOCKFILE}` found in the workspace directory ({self.root}); "
                "the workspace has not been resolved yet."
            )

    @property
    def definition(self) -> WorkspaceDefinition:
        if self._definition is None:
            self._definition = parse_workspace_xml(self.workspace_file)
        return self._definition

    def target_definitions(self) -> list[TargetContext]:
        """Target contexts in declaration order; a platform-less `default` target if none."""
        return list(self.definition.targets) or [TargetContext(DEFAULT_TARGET)]

    def source_roots(self) -> list[Path]:
        """Catalog sources declared by the workspace that exist on disk ([] without a workspace file)."""
        if not self.workspace_file.is_file():
            return []
        return [p for p in self.definition.sources if p.is_dir()]

    def override_store(self) -> OverrideStore:
        return OverrideStore(self.external_dir)

    def catalog(self, extra_source_roots: list[Path] | None = None) -> Catalog:
        """Catalog over workspace sources, RDEPTREE_SOURCE_PATH and extra roots."""
        extra = self.source_roots() + list(extra_source_roots or [])
        return Catalog(gather_source_roots(extra_source_roots=extra))
