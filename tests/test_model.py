"""Tests for rdeptree.core.model module."""

from __future__ import annotations

import pytest

from rdeptree.core.errors import SpecificationNotFound
from rdeptree.core.model import Dependency, Specification, TargetContext, root_name_of


def _spec_with_subspecs() -> Specification:
    return Specification(
        name="Foo",
        version="1.0",
        dependencies=[Dependency("Bar"), Dependency("UIKitExt", platform="ios")],
        subspecs=[
            Specification(name="Foo/Core", dependencies=[Dependency("Baz")]),
            Specification(
                name="Foo/UI",
                dependencies=[Dependency("Foo/Core")],
                subspecs=[Specification(name="Foo/UI/Widgets")],
            ),
        ],
    )


class TestDependency:
    """Tests for Dependency dataclass."""

    def test_root_name(self) -> None:
        assert Dependency("Foo/Core/Extra").root_name == "Foo"
        assert Dependency("Foo").root_name == "Foo"
        assert root_name_of("Foo/Core") == "Foo"

    def test_applies_to(self) -> None:
        dep = Dependency("Foo", platform="ios")
        assert dep.applies_to("ios") is True
        assert dep.applies_to("osx") is False
        assert dep.applies_to(None) is True
        assert Dependency("Foo").applies_to("osx") is True

    def test_str(self) -> None:
        assert str(Dependency("Foo")) == "Foo"
        assert str(Dependency("Foo", requirement="~> 1.0")) == "Foo (~> 1.0)"
        assert str(Dependency("Foo", external_source={"path": "../Foo"})) == "Foo (from path: ../Foo)"

    def test_equality_includes_external_source(self) -> None:
        assert Dependency("Foo") == Dependency("Foo")
        assert Dependency("Foo") != Dependency("Foo", external_source={"path": "x"})


class TestSpecification:
    """Tests for Specification dataclass."""

    def test_parent_links(self) -> None:
        spec = _spec_with_subspecs()
        core = spec.subspecs[0]
        widgets = spec.subspecs[1].subspecs[0]
        assert core.parent is spec
        assert core.is_subspec is True
        assert spec.is_subspec is False
        assert widgets.root is spec
        assert widgets.root_name == "Foo"

    def test_dependencies_for_platform(self) -> None:
        spec = _spec_with_subspecs()
        assert [d.name for d in spec.dependencies_for("ios")] == ["Bar", "UIKitExt"]
        assert [d.name for d in spec.dependencies_for("osx")] == ["Bar"]
        assert [d.name for d in spec.dependencies_for(None)] == ["Bar", "UIKitExt"]

    def test_subspec_inherits_parent_dependencies(self) -> None:
        core = _spec_with_subspecs().subspecs[0]
        assert [d.name for d in core.dependencies_for("osx")] == ["Bar", "Baz"]

    def test_all_dependencies_includes_subspecs(self) -> None:
        spec = _spec_with_subspecs()
        names = [d.name for d in spec.all_dependencies("osx")]
        assert names == ["Bar", "Foo/Core", "Foo/UI"]

    def test_all_dependencies_of_subspec(self) -> None:
        ui = _spec_with_subspecs().subspecs[1]
        names = [d.name for d in ui.all_dependencies("ios")]
        assert names == ["Bar", "UIKitExt", "Foo/Core", "Foo/UI/Widgets"]

    def test_default_subspecs(self) -> None:
        spec = _spec_with_subspecs()
        spec.default_subspecs = ["Core"]
        assert [d.name for d in spec.subspec_dependencies()] == ["Foo/Core"]

    def test_all_dependencies_deduplicates(self) -> None:
        spec = Specification(
            name="Dup",
            dependencies=[Dependency("A"), Dependency("A", requirement=">= 2")],
        )
        deps = spec.all_dependencies()
        assert len(deps) == 1
        assert deps[0].requirement is None

    def test_subspec_by_name(self) -> None:
        spec = _spec_with_subspecs()
        assert spec.subspec_by_name("Foo") is spec
        assert spec.subspec_by_name("Foo/Core").name == "Foo/Core"
        assert spec.subspec_by_name("Foo/UI/Widgets").name == "Foo/UI/Widgets"

    def test_subspec_by_name_from_subspec(self) -> None:
        spec = _spec_with_subspecs()
        core = spec.subspecs[0]
        assert core.subspec_by_name("Foo/UI").name == "Foo/UI"
        assert core.subspec_by_name("Foo") is spec

    def test_subspec_by_name_missing(self) -> None:
        spec = _spec_with_subspecs()
        with pytest.raises(SpecificationNotFound):
            spec.subspec_by_name("Foo/Nope")
        with pytest.raises(SpecificationNotFound):
            spec.subspec_by_name("Other")


class TestTargetContext:
    """Tests for TargetContext."""

    def test_str(self) -> None:
        assert str(TargetContext("App", platform="ios", platform_version="12.0")) == "ios 12.0"
        assert str(TargetContext("App", platform="osx")) == "osx"
        assert str(TargetContext("App")) == "any platform"
