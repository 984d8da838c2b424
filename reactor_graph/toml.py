"""TOML descriptor loading.

Each module directory of a workspace holds a reactor.toml describing one
project. Loading starts at the root directory and follows the declared
modules depth-first, which fixes the discovery order of the reactor.
Uses tomlkit, the same parser used to edit these files elsewhere, so
reading never depends on formatting.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError

from .collection import ProjectCollection
from .errors import DescriptorError
from .models import MakeBehavior, ProjectCoordinate, ProjectDescriptor, ScopeRequest

DESCRIPTOR_FILE = "reactor.toml"


def load_descriptor_doc(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a reactor.toml file.

    Raises:
        DescriptorError: If the file is missing or is not valid TOML.
    """
    if not path.is_file():
        raise DescriptorError(f"No {DESCRIPTOR_FILE} found at {path}")
    try:
        return tomlkit.parse(path.read_text())
    except TOMLKitError as e:
        raise DescriptorError(f"Invalid TOML in {path}: {e}") from e


def get_project_table(doc: tomlkit.TOMLDocument, source: Path) -> dict[str, Any]:
    """Return the [project] table, which every descriptor must have."""
    project = doc.get("project")
    if not isinstance(project, dict):
        raise DescriptorError(f"Missing [project] table in {source}")
    return project


def parse_coordinate(value: Any, source: Path, field: str) -> ProjectCoordinate:
    """Parse a "namespace:name" value from a descriptor field."""
    try:
        return ProjectCoordinate.parse(str(value))
    except ValueError as e:
        raise DescriptorError(f"{source}: invalid {field}: {e}") from e


def get_list(table: dict[str, Any], key: str, source: Path, label: str) -> list[Any]:
    """Return an optional array value, empty when the key is absent."""
    value = table.get(key, [])
    if not isinstance(value, list):
        raise DescriptorError(f"{source}: {label}.{key} must be a list")
    return value


def get_reactor_defaults(doc: tomlkit.TOMLDocument, source: Path) -> ScopeRequest:
    """Read default scope options from the optional [reactor] table.

    Only the root descriptor's table is consulted. Recognised keys:
    - make-behavior: one of none, upstream, downstream, both
    - exclude: list of project selectors
    """
    reactor = doc.get("reactor", {})
    if not isinstance(reactor, dict):
        raise DescriptorError(f"{source}: [reactor] must be a table")
    behavior = str(reactor.get("make-behavior", MakeBehavior.NONE.value))
    try:
        make_behavior = MakeBehavior(behavior)
    except ValueError:
        choices = ", ".join(m.value for m in MakeBehavior)
        raise DescriptorError(
            f"{source}: invalid make-behavior {behavior!r}, expected one of: {choices}"
        ) from None
    return ScopeRequest(
        excluded=[str(s) for s in get_list(reactor, "exclude", source, "reactor")],
        make_behavior=make_behavior,
    )


def load_workspace(root: Path) -> tuple[ProjectCollection, ScopeRequest]:
    """Load every project reachable from the root descriptor.

    Args:
        root: Workspace root directory containing the root reactor.toml.

    Returns:
        Tuple of (projects in discovery order, default scope options).

    Raises:
        DescriptorError: On missing or malformed descriptors, or a module
            directory listed twice.
        DuplicateProjectError: If two modules declare the same coordinate.
    """
    root = root.resolve()
    root_doc = load_descriptor_doc(root / DESCRIPTOR_FILE)
    defaults = get_reactor_defaults(root_doc, root / DESCRIPTOR_FILE)
    descriptors = _load_module(root, root, set(), doc=root_doc)
    return ProjectCollection(descriptors), defaults


def _load_module(
    module_dir: Path,
    root: Path,
    seen: set[Path],
    doc: tomlkit.TOMLDocument | None = None,
) -> list[ProjectDescriptor]:
    """Load one module and its submodules, the module itself first."""
    module_dir = module_dir.resolve()
    if module_dir in seen:
        raise DescriptorError(f"Module directory {module_dir} is listed more than once")
    seen.add(module_dir)

    source = module_dir / DESCRIPTOR_FILE
    if doc is None:
        doc = load_descriptor_doc(source)
    project = get_project_table(doc, source)

    name = project.get("name")
    if not name:
        raise DescriptorError(f"Missing [project].name in {source}")

    parent = None
    if project.get("parent"):
        parent = parse_coordinate(project["parent"], source, "parent")

    # Namespace is inherited from the parent when not declared
    namespace = project.get("namespace") or (parent.namespace if parent else None)
    if not namespace:
        raise DescriptorError(f"Missing [project].namespace in {source}")
    coordinate = ProjectCoordinate(namespace=str(namespace), name=str(name))

    dependencies = tuple(
        parse_coordinate(dep, source, "dependency")
        for dep in get_list(project, "dependencies", source, "project")
    )

    # Each submodule contributes its own subtree, already in discovery order
    subtrees = [
        _load_module(module_dir / str(module), root, seen)
        for module in get_list(project, "modules", source, "project")
    ]

    relative = Path(os.path.relpath(module_dir, root)).as_posix()
    version = project.get("version")
    descriptor = ProjectDescriptor(
        coordinate=coordinate,
        parent=parent,
        modules=tuple(subtree[0].coordinate for subtree in subtrees),
        dependencies=dependencies,
        version=str(version) if version is not None else None,
        path=relative,
    )

    loaded = [descriptor]
    for subtree in subtrees:
        loaded.extend(subtree)
    return loaded
