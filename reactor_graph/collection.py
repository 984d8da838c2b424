"""In-memory collection of project descriptors.

The collection is the sole owner of every descriptor taking part in one
graph build. Parent and module links between descriptors are coordinates,
resolved through the collection when needed.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .errors import DuplicateProjectError
from .models import ProjectCoordinate, ProjectDescriptor


class ProjectCollection:
    """Ordered, read-only set of descriptors keyed by coordinate.

    Iteration follows the order the descriptors were supplied in. That
    order is the discovery order used to break ties when sorting.

    Raises:
        DuplicateProjectError: If two descriptors share a coordinate.
    """

    def __init__(self, descriptors: Iterable[ProjectDescriptor]) -> None:
        self._projects: dict[ProjectCoordinate, ProjectDescriptor] = {}
        for descriptor in descriptors:
            existing = self._projects.get(descriptor.coordinate)
            if existing is not None:
                raise DuplicateProjectError(
                    descriptor.coordinate, [existing.path, descriptor.path]
                )
            self._projects[descriptor.coordinate] = descriptor

    def __iter__(self) -> Iterator[ProjectDescriptor]:
        return iter(self._projects.values())

    def __len__(self) -> int:
        return len(self._projects)

    def __contains__(self, coordinate: object) -> bool:
        return coordinate in self._projects

    def get(self, coordinate: ProjectCoordinate) -> ProjectDescriptor | None:
        return self._projects.get(coordinate)

    def coordinates(self) -> list[ProjectCoordinate]:
        return list(self._projects)

    def find_by_name(self, name: str) -> list[ProjectDescriptor]:
        """All descriptors whose name matches, in collection order."""
        return [d for d in self._projects.values() if d.coordinate.name == name]

    def find_by_path(self, path: str) -> list[ProjectDescriptor]:
        """All descriptors whose module path matches, ignoring trailing slashes."""
        wanted = _normalize_path(path)
        return [
            d
            for d in self._projects.values()
            if d.path is not None and _normalize_path(d.path) == wanted
        ]

    def reachable_from(self, root: ProjectCoordinate) -> ProjectCollection:
        """Narrow the collection to a root and its transitive child modules.

        Modules are followed depth-first in declaration order, so the
        returned collection lists each parent before its modules. Module
        coordinates that are not in the collection are skipped.

        Raises:
            KeyError: If the root is not part of the collection.
        """
        if root not in self._projects:
            raise KeyError(str(root))

        ordered: list[ProjectDescriptor] = []
        seen: set[ProjectCoordinate] = set()
        stack = [root]
        while stack:
            coordinate = stack.pop()
            if coordinate in seen or coordinate not in self._projects:
                continue
            seen.add(coordinate)
            descriptor = self._projects[coordinate]
            ordered.append(descriptor)
            # Reversed so the first declared module is visited first
            stack.extend(reversed(descriptor.modules))
        return ProjectCollection(ordered)


def _normalize_path(path: str) -> str:
    return path.replace("\\", "/").strip().rstrip("/").removeprefix("./")
