"""Shared fixtures: isolated environment and helpers to write package manifests."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from pathlib import Path
from unittest import mock

import pytest


@pytest.fixture(autouse=True)
def _isolated_env() -> Iterator[None]:
    """Keep the developer's RDEPTREE_* variables out of every test."""
    with mock.patch.dict(
        os.environ,
        {"RDEPTREE_SOURCE_PATH": "", "RDEPTREE_WORKSPACE": ""},
        clear=False,
    ):
        yield


def _manifest(name: str, version: str, depends: tuple[str, ...] | list[str], body: str) -> str:
    deps = "".join(f"  <depend>{d}</depend>\n" for d in depends)
    return (
        '<?xml version="1.0"?>\n'
        "<package>\n"
        f"  <name>{name}</name>\n"
        f"  <version>{version}</version>\n"
        f"  <description>{name} package</description>\n"
        f"{deps}{body}"
        "</package>\n"
    )


@pytest.fixture
def write_package() -> Callable[..., Path]:
    """Return a helper writing <root>/<name>/<version>/package.xml; returns the manifest path."""

    def _write(
        root: Path,
        name: str,
        version: str = "1.0.0",
        depends: tuple[str, ...] | list[str] = (),
        body: str = "",
    ) -> Path:
        pkg_dir = root / name / version
        pkg_dir.mkdir(parents=True, exist_ok=True)
        pkg_xml = pkg_dir / "package.xml"
        pkg_xml.write_text(_manifest(name, version, depends, body))
        return pkg_xml

    return _write


@pytest.fixture
def workspace(tmp_path: Path, write_package: Callable[..., Path]) -> Path:
    """
    A resolved workspace with one iOS target and a small catalog:

    AFNetworking 2.0.0 -> JSONKit, Reachability (1.3.0 -> JSONKit is older)
    AppKitExt -> AFNetworking; JSONKit, Reachability, SDWebImage have no deps.
    """
    specs = tmp_path / "specs"
    write_package(specs, "JSONKit", "1.4")
    write_package(specs, "Reachability", "3.1")
    write_package(specs, "AFNetworking", "2.0.0", depends=["JSONKit", "Reachability"])
    write_package(specs, "AFNetworking", "1.3.0", depends=["JSONKit"])
    write_package(specs, "SDWebImage", "3.7")
    write_package(specs, "AppKitExt", "1.0", depends=["AFNetworking"])

    ws = tmp_path / "ws"
    ws.mkdir()
    (ws / "workspace.xml").write_text(
        """<?xml version="1.0"?>
<workspace>
  <source>../specs</source>
  <target name="App" platform="ios" version="12.0">
    <depend>AFNetworking</depend>
  </target>
</workspace>
"""
    )
    (ws / "workspace.lock").write_text("AFNetworking: 2.0.0\n")
    return ws
