"""Reactor graph builder: descriptors → graph → order → build set.

This module wires the graph builder stages together:
1. Collect the descriptors into a ProjectCollection
2. Build the precedence graph from parent and dependency links
3. Reject cyclic graphs
4. Compute the canonical build order
5. Narrow it down with the scope request

Any failure stops the pipeline and is returned as a GraphBuildResult
carrying the error, never as a partial build set.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from pydantic import BaseModel, ConfigDict

from .collection import ProjectCollection
from .errors import GraphBuildError, UnknownProjectError
from .graph import (
    PrecedenceGraph,
    build_graph,
    check_acyclic,
    topo_sort,
    transitive_predecessors,
    transitive_successors,
)
from .models import ProjectCoordinate, ProjectDescriptor, ScopeRequest
from .scope import filter_projects

log = logging.getLogger(__name__)


class BuildSet:
    """Ordered projects to build, plus the graph they were ordered from.

    Projects are the descriptors from the input collection, shared rather
    than copied. Upstream and downstream queries consult the full graph but
    only report projects that are part of this build set.
    """

    def __init__(
        self, projects: Iterable[ProjectDescriptor], graph: PrecedenceGraph
    ) -> None:
        self._projects = tuple(projects)
        self._graph = graph
        self._index = {p.coordinate: i for i, p in enumerate(self._projects)}

    @property
    def sorted_projects(self) -> list[ProjectDescriptor]:
        return list(self._projects)

    def coordinates(self) -> list[ProjectCoordinate]:
        return [p.coordinate for p in self._projects]

    def __iter__(self) -> Iterator[ProjectDescriptor]:
        return iter(self._projects)

    def __len__(self) -> int:
        return len(self._projects)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, ProjectDescriptor):
            item = item.coordinate
        return item in self._index

    def upstream_projects(
        self, project: ProjectDescriptor | ProjectCoordinate, transitive: bool = True
    ) -> list[ProjectDescriptor]:
        """Projects in this build set that must be built before the given one.

        Raises:
            UnknownProjectError: If the project is not part of the reactor.
        """
        coordinate = self._vertex(project)
        if transitive:
            found = transitive_predecessors(self._graph, [coordinate])
        else:
            found = set(self._graph.predecessors(coordinate))
        return self._in_order(found)

    def downstream_projects(
        self, project: ProjectDescriptor | ProjectCoordinate, transitive: bool = True
    ) -> list[ProjectDescriptor]:
        """Projects in this build set that build on the given one."""
        coordinate = self._vertex(project)
        if transitive:
            found = transitive_successors(self._graph, [coordinate])
        else:
            found = set(self._graph.successors(coordinate))
        return self._in_order(found)

    def _vertex(self, project: ProjectDescriptor | ProjectCoordinate) -> ProjectCoordinate:
        coordinate = _coordinate_of(project)
        if coordinate not in self._graph:
            raise UnknownProjectError(coordinate)
        return coordinate

    def _in_order(self, coordinates: set[ProjectCoordinate]) -> list[ProjectDescriptor]:
        indexes = sorted(self._index[c] for c in coordinates if c in self._index)
        return [self._projects[i] for i in indexes]

    def __repr__(self) -> str:
        return f"BuildSet([{', '.join(str(p) for p in self._projects)}])"


class GraphBuildResult(BaseModel):
    """Outcome of one graph build: a build set or an error, never both.

    Attributes:
        build_set: Ordered projects to build, when the build succeeded.
        error: The failure that stopped the build, otherwise None.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    build_set: BuildSet | None = None
    error: GraphBuildError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def exit_code(self) -> int:
        return 0 if self.error is None else self.error.exit_code

    def get(self) -> BuildSet:
        """Return the build set, raising the stored error on failure."""
        if self.error is not None:
            raise self.error
        if self.build_set is None:
            raise ValueError("GraphBuildResult holds neither a build set nor an error")
        return self.build_set


class GraphBuilder:
    """Computes the ordered, filtered build set for a reactor.

    The builder holds no state between calls: building twice from the same
    inputs gives the same result.
    """

    def build(
        self,
        projects: Iterable[ProjectDescriptor],
        request: ScopeRequest | None = None,
        root: ProjectCoordinate | None = None,
    ) -> GraphBuildResult:
        """Order and filter the projects of a reactor.

        Args:
            projects: Every descriptor in the reactor, in discovery order.
            request: Scope options. Defaults to building everything.
            root: If given, only the root and its transitive child modules
                  are considered.

        Returns:
            A GraphBuildResult with either the build set or the error.
        """
        request = request or ScopeRequest()
        try:
            build_set = self._build(projects, request, root)
        except GraphBuildError as e:
            log.debug("Graph build failed: %s", e)
            return GraphBuildResult(error=e)
        return GraphBuildResult(build_set=build_set)

    def _build(
        self,
        projects: Iterable[ProjectDescriptor],
        request: ScopeRequest,
        root: ProjectCoordinate | None,
    ) -> BuildSet:
        collection = (
            projects
            if isinstance(projects, ProjectCollection)
            else ProjectCollection(projects)
        )
        if root is not None:
            if root not in collection:
                raise UnknownProjectError(root, option="root")
            collection = collection.reachable_from(root)

        graph = build_graph(collection)
        check_acyclic(graph)
        order = topo_sort(graph)
        selected = filter_projects(order, graph, collection, request)
        return BuildSet(selected, graph)


def _coordinate_of(project: ProjectDescriptor | ProjectCoordinate) -> ProjectCoordinate:
    if isinstance(project, ProjectDescriptor):
        return project.coordinate
    return project
