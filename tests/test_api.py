"""Tests for rdeptree.api module."""

from __future__ import annotations

import io
import re
import sys
from collections.abc import Callable
from pathlib import Path
from unittest import mock

import pytest

import rdeptree
from rdeptree.api import (
    build_reverse_dependencies,
    build_reverse_tree,
    list_known_packages,
    list_known_packages_by_source,
    render_tree,
)
from rdeptree.core.errors import SpecNotFound, WorkspaceError


class TestModuleExports:
    """Tests for rdeptree module-level exports."""

    def test_version_format(self) -> None:
        """Test that __version__ follows semver or dev format."""
        pattern = r"^\d+\.\d+\.\d+(\+.+)?$"
        assert re.match(pattern, rdeptree.__version__), f"Invalid version: {rdeptree.__version__}"

    def test_version_when_package_not_found(self) -> None:
        """Test __version__ fallback when package metadata unavailable."""
        from importlib.metadata import PackageNotFoundError

        def mock_version(name: str) -> str:
            raise PackageNotFoundError(name)

        modules_to_restore = {}
        for k in [k for k in sys.modules if k.startswith("rdeptree")]:
            modules_to_restore[k] = sys.modules.pop(k)

        try:
            with mock.patch("importlib.metadata.version", mock_version):
                import rdeptree as rdeptree_reloaded

                assert rdeptree_reloaded.__version__ == "0.0.0+unknown"
        finally:
            for k in list(sys.modules.keys()):
                if k.startswith("rdeptree"):
                    del sys.modules[k]
            sys.modules.update(modules_to_restore)

    def test_all_exports(self) -> None:
        for name in (
            "build_reverse_dependencies",
            "build_reverse_tree",
            "list_known_packages",
            "list_known_packages_by_source",
            "render_tree",
            "__version__",
        ):
            assert name in rdeptree.__all__


class TestListKnownPackages:
    """Tests for list_known_packages API."""

    def test_with_extra_roots(self, tmp_path: Path, write_package: Callable[..., Path]) -> None:
        pkg_xml = write_package(tmp_path / "src", "api_test_pkg", "0.3")
        result = list_known_packages(workspace=tmp_path, extra_source_roots=[tmp_path / "src"])
        assert result == {"api_test_pkg": pkg_xml.resolve()}

    def test_from_workspace_sources(self, workspace: Path) -> None:
        result = list_known_packages(workspace=workspace)
        assert sorted(result) == ["AFNetworking", "AppKitExt", "JSONKit", "Reachability", "SDWebImage"]
        assert result["AFNetworking"].parent.name == "2.0.0"

    def test_empty(self, tmp_path: Path) -> None:
        assert list_known_packages(workspace=tmp_path) == {}


class TestListKnownPackagesBySource:
    """Tests for list_known_packages_by_source API."""

    def test_grouped(self, workspace: Path) -> None:
        result = list_known_packages_by_source(workspace=workspace)
        assert len(result) == 1
        label, names = next(iter(result.items()))
        assert label.startswith("Source (")
        assert "JSONKit" in names


class TestBuildReverseDependencies:
    """Tests for build_reverse_dependencies API."""

    def test_filtered(self, workspace: Path) -> None:
        builder = build_reverse_dependencies("AFNetworking", workspace=workspace)
        assert builder.reverse_dependencies == {
            "JSONKit": ["AFNetworking"],
            "Reachability": ["AFNetworking"],
        }
        assert builder.failures == []

    def test_unfiltered(self, workspace: Path) -> None:
        builder = build_reverse_dependencies(workspace=workspace)
        assert builder.context.roots() == ["JSONKit", "Reachability", "AFNetworking"]
        assert builder.reverse_dependencies["AFNetworking"] == ["AppKitExt"]

    def test_requires_lockfile(self, workspace: Path) -> None:
        (workspace / "workspace.lock").unlink()
        with pytest.raises(WorkspaceError):
            build_reverse_dependencies(workspace=workspace)
        builder = build_reverse_dependencies("AFNetworking", workspace=workspace, verify=False)
        assert "JSONKit" in builder.reverse_dependencies

    def test_strict_and_lenient(self, workspace: Path) -> None:
        local = workspace.parent / "specs" / "Local"
        local.mkdir()
        (local / "package.xml").write_text(
            '<package><name>Local</name><depend path="../Pod">Pod</depend></package>'
        )
        with pytest.raises(SpecNotFound):
            build_reverse_dependencies("Local", workspace=workspace)
        errors = io.StringIO()
        builder = build_reverse_dependencies("Local", workspace=workspace, errors=errors, strict=False)
        assert [f.package for f in builder.failures] == ["Local"]
        assert "[Bug]" in errors.getvalue()


class TestBuildReverseTree:
    """Tests for build_reverse_tree API."""

    def test_forest(self, workspace: Path) -> None:
        forest = build_reverse_tree(workspace=workspace)
        assert [n.name for n in forest] == ["JSONKit", "Reachability", "AFNetworking"]
        jsonkit = forest[0]
        assert jsonkit.version == "1.4"
        assert [c.name for c in jsonkit.children] == ["AFNetworking"]
        assert [c.name for c in jsonkit.children[0].children] == ["AppKitExt"]

    def test_max_depth(self, workspace: Path) -> None:
        forest = build_reverse_tree(workspace=workspace, max_depth=1)
        assert forest[0].children[0].children == []


class TestRenderTree:
    """Tests for render_tree API."""

    def test_plain(self, workspace: Path) -> None:
        text = render_tree("AFNetworking", workspace=workspace)
        assert text == "JSONKit\n   AFNetworking\nReachability\n   AFNetworking"

    def test_html(self, workspace: Path) -> None:
        text = render_tree("AFNetworking", html=True, workspace=workspace)
        assert text.startswith("<html>")
        assert "<li>Reachability" in text
        assert text.endswith("</body></html>")
