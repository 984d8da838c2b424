"""Tests for reactor_graph.toml."""

from __future__ import annotations

from pathlib import Path

import pytest

from conftest import coord, names, write_descriptor
from reactor_graph.errors import DescriptorError, DuplicateProjectError
from reactor_graph.models import MakeBehavior
from reactor_graph.toml import (
    get_reactor_defaults,
    load_descriptor_doc,
    load_workspace,
    parse_coordinate,
)


class TestLoadWorkspace:
    def test_discovery_order_is_depth_first(self, workspace: Path) -> None:
        collection, _ = load_workspace(workspace)
        assert names(collection) == ["root", "a", "b", "c", "c1", "c2", "solo"]

    def test_descriptor_fields(self, workspace: Path) -> None:
        collection, _ = load_workspace(workspace)
        b = collection.get(coord("b"))
        assert b.parent == coord("root")
        assert b.dependencies == (coord("a"), coord("library", "org.external"))
        assert b.version == "1.0"
        assert b.path == "b"

    def test_modules_resolved_to_coordinates(self, workspace: Path) -> None:
        collection, _ = load_workspace(workspace)
        root = collection.get(coord("root"))
        assert root.modules == (coord("a"), coord("b"), coord("c"), coord("solo"))
        assert root.path == "."
        assert collection.get(coord("c2")).path == "c/c2"

    def test_namespace_inherited_from_parent(self, workspace: Path) -> None:
        collection, _ = load_workspace(workspace)
        c1 = collection.get(coord("c1"))
        assert c1.coordinate.namespace == "unittest"
        assert c1.version is None

    def test_no_defaults_without_reactor_table(self, workspace: Path) -> None:
        _, defaults = load_workspace(workspace)
        assert defaults.excluded == []
        assert defaults.make_behavior is MakeBehavior.NONE

    def test_missing_root_descriptor(self, tmp_path: Path) -> None:
        with pytest.raises(DescriptorError, match="No reactor.toml"):
            load_workspace(tmp_path)

    def test_missing_module_descriptor(self, workspace: Path) -> None:
        (workspace / "c" / "c1" / "reactor.toml").unlink()
        with pytest.raises(DescriptorError, match="c1"):
            load_workspace(workspace)

    def test_missing_project_table(self, tmp_path: Path) -> None:
        write_descriptor(tmp_path, '[reactor]\nmake-behavior = "both"\n')
        with pytest.raises(DescriptorError, match=r"Missing \[project\] table"):
            load_workspace(tmp_path)

    def test_missing_name(self, tmp_path: Path) -> None:
        write_descriptor(tmp_path, '[project]\nnamespace = "x"\n')
        with pytest.raises(DescriptorError, match="name"):
            load_workspace(tmp_path)

    def test_missing_namespace(self, tmp_path: Path) -> None:
        write_descriptor(tmp_path, '[project]\nname = "x"\n')
        with pytest.raises(DescriptorError, match="namespace"):
            load_workspace(tmp_path)

    def test_invalid_dependency(self, tmp_path: Path) -> None:
        write_descriptor(
            tmp_path, '[project]\nnamespace = "x"\nname = "y"\ndependencies = ["bare"]\n'
        )
        with pytest.raises(DescriptorError, match="invalid dependency"):
            load_workspace(tmp_path)

    def test_invalid_toml(self, tmp_path: Path) -> None:
        write_descriptor(tmp_path, "[project\n")
        with pytest.raises(DescriptorError, match="Invalid TOML"):
            load_workspace(tmp_path)

    def test_module_listed_twice(self, tmp_path: Path) -> None:
        write_descriptor(tmp_path, '[project]\nnamespace = "x"\nname = "r"\nmodules = ["m", "m"]\n')
        write_descriptor(tmp_path / "m", '[project]\nnamespace = "x"\nname = "m"\n')
        with pytest.raises(DescriptorError, match="more than once"):
            load_workspace(tmp_path)

    def test_modules_must_be_a_list(self, tmp_path: Path) -> None:
        write_descriptor(tmp_path, '[project]\nnamespace = "x"\nname = "r"\nmodules = "ab"\n')
        with pytest.raises(DescriptorError, match=r"reactor.toml: project.modules must be a list"):
            load_workspace(tmp_path)

    def test_dependencies_must_be_a_list(self, tmp_path: Path) -> None:
        write_descriptor(
            tmp_path, '[project]\nnamespace = "x"\nname = "r"\ndependencies = "x:a"\n'
        )
        with pytest.raises(DescriptorError, match="project.dependencies must be a list"):
            load_workspace(tmp_path)

    def test_duplicate_coordinate(self, tmp_path: Path) -> None:
        write_descriptor(tmp_path, '[project]\nnamespace = "x"\nname = "r"\nmodules = ["m", "n"]\n')
        write_descriptor(tmp_path / "m", '[project]\nnamespace = "x"\nname = "same"\n')
        write_descriptor(tmp_path / "n", '[project]\nnamespace = "x"\nname = "same"\n')
        with pytest.raises(DuplicateProjectError, match="x:same"):
            load_workspace(tmp_path)


class TestReactorDefaults:
    def test_reads_reactor_table(self, tmp_path: Path) -> None:
        write_descriptor(
            tmp_path,
            """\
[project]
namespace = "x"
name = "r"

[reactor]
make-behavior = "upstream"
exclude = [":r"]
""",
        )
        doc = load_descriptor_doc(tmp_path / "reactor.toml")
        defaults = get_reactor_defaults(doc, tmp_path / "reactor.toml")
        assert defaults.make_behavior is MakeBehavior.UPSTREAM
        assert defaults.excluded == [":r"]

    def test_invalid_make_behavior(self, tmp_path: Path) -> None:
        write_descriptor(
            tmp_path, '[project]\nnamespace = "x"\nname = "r"\n\n[reactor]\nmake-behavior = "sideways"\n'
        )
        with pytest.raises(DescriptorError, match="expected one of: none, upstream"):
            load_workspace(tmp_path)

    def test_exclude_string_is_rejected(self, tmp_path: Path) -> None:
        # A string would otherwise be iterated character by character
        write_descriptor(
            tmp_path, '[project]\nnamespace = "x"\nname = "r"\n\n[reactor]\nexclude = "ab"\n'
        )
        with pytest.raises(DescriptorError, match="reactor.exclude must be a list"):
            load_workspace(tmp_path)

    def test_reactor_must_be_a_table(self, tmp_path: Path) -> None:
        write_descriptor(tmp_path, 'reactor = "x"\n\n[project]\nnamespace = "x"\nname = "r"\n')
        with pytest.raises(DescriptorError, match=r"\[reactor\] must be a table"):
            load_workspace(tmp_path)


class TestParseCoordinate:
    def test_valid(self) -> None:
        assert parse_coordinate("org:lib", Path("reactor.toml"), "parent") == coord("lib", "org")

    def test_invalid_names_field_and_source(self) -> None:
        with pytest.raises(DescriptorError, match="reactor.toml: invalid parent"):
            parse_coordinate("lib", Path("reactor.toml"), "parent")
