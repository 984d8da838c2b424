"""Shared test fixtures.

The reactor used throughout mirrors a typical multi-module layout:

    root
    ├── a
    ├── b           (depends on a)
    └── c
        ├── c1
        └── c2      (depends on b)
    solo            (no parent, no dependencies)

a, b and c inherit from root; c1 and c2 inherit from c.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from reactor_graph.models import ProjectCoordinate, ProjectDescriptor

NAMESPACE = "unittest"


def coord(name: str, namespace: str = NAMESPACE) -> ProjectCoordinate:
    return ProjectCoordinate(namespace=namespace, name=name)


def project(
    name: str,
    parent: str | None = None,
    deps: list[str] | None = None,
    modules: list[str] | None = None,
    path: str | None = None,
) -> ProjectDescriptor:
    return ProjectDescriptor(
        coordinate=coord(name),
        parent=coord(parent) if parent else None,
        dependencies=tuple(coord(d) for d in deps or []),
        modules=tuple(coord(m) for m in modules or []),
        version="1.0",
        path=path,
    )


def names(projects) -> list[str]:
    return [p.coordinate.name for p in projects]


@pytest.fixture
def reactor() -> list[ProjectDescriptor]:
    """The sample reactor, in discovery order."""
    return [
        project("solo", path="solo"),
        project("root", modules=["a", "b", "c"], path="."),
        project("a", parent="root", path="a"),
        project("b", parent="root", deps=["a"], path="b"),
        project("c", parent="root", modules=["c1", "c2"], path="c"),
        project("c1", parent="c", path="c/c1"),
        project("c2", parent="c", deps=["b"], path="c/c2"),
    ]


def write_descriptor(directory: Path, body: str) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "reactor.toml").write_text(body)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """The sample reactor as reactor.toml files on disk."""
    write_descriptor(
        tmp_path,
        """\
[project]
namespace = "unittest"
name = "root"
version = "1.0"
modules = ["a", "b", "c", "solo"]
""",
    )
    write_descriptor(
        tmp_path / "a",
        """\
[project]
name = "a"
version = "1.0"
parent = "unittest:root"
""",
    )
    write_descriptor(
        tmp_path / "b",
        """\
[project]
name = "b"
version = "1.0"
parent = "unittest:root"
dependencies = ["unittest:a", "org.external:library"]
""",
    )
    write_descriptor(
        tmp_path / "c",
        """\
[project]
name = "c"
version = "1.0"
parent = "unittest:root"
modules = ["c1", "c2"]
""",
    )
    write_descriptor(
        tmp_path / "c" / "c1",
        """\
[project]
name = "c1"
parent = "unittest:c"
""",
    )
    write_descriptor(
        tmp_path / "c" / "c2",
        """\
[project]
name = "c2"
parent = "unittest:c"
dependencies = ["unittest:b"]
""",
    )
    write_descriptor(
        tmp_path / "solo",
        """\
[project]
namespace = "unittest"
name = "solo"
version = "2.0"
""",
    )
    return tmp_path
