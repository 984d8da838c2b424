"""Precedence graph utilities.

Provides graph construction, cycle detection and topological sorting for
determining build order in a multi-module reactor. Projects must be built
in precedence order: a project comes after the project it inherits from
(its parent) and after every reactor project it depends on.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator

from .errors import CyclicDependencyError
from .models import ProjectCoordinate, ProjectDescriptor

log = logging.getLogger(__name__)

# DFS vertex states
_UNVISITED, _ON_STACK, _DONE = 0, 1, 2


class PrecedenceGraph:
    """Directed graph of "must be built before" edges between coordinates.

    Vertices are kept in discovery order, and the successor and predecessor
    lists of each vertex keep edge insertion order. Both orders feed the
    topological sort, which makes the resulting build order deterministic.
    """

    def __init__(self) -> None:
        self._successors: dict[ProjectCoordinate, list[ProjectCoordinate]] = {}
        self._predecessors: dict[ProjectCoordinate, list[ProjectCoordinate]] = {}

    def add_vertex(self, vertex: ProjectCoordinate) -> None:
        if vertex not in self._successors:
            self._successors[vertex] = []
            self._predecessors[vertex] = []

    def add_edge(self, before: ProjectCoordinate, after: ProjectCoordinate) -> bool:
        """Add before → after. Returns False if the edge already existed."""
        self.add_vertex(before)
        self.add_vertex(after)
        if after in self._successors[before]:
            return False
        self._successors[before].append(after)
        self._predecessors[after].append(before)
        return True

    @property
    def vertices(self) -> list[ProjectCoordinate]:
        """All vertices in discovery order."""
        return list(self._successors)

    def successors(self, vertex: ProjectCoordinate) -> list[ProjectCoordinate]:
        """Projects that must be built after this one (direct edges only)."""
        return list(self._successors[vertex])

    def predecessors(self, vertex: ProjectCoordinate) -> list[ProjectCoordinate]:
        """Projects that must be built before this one (direct edges only)."""
        return list(self._predecessors[vertex])

    def has_edge(self, before: ProjectCoordinate, after: ProjectCoordinate) -> bool:
        return after in self._successors.get(before, ())

    def edges(self) -> Iterator[tuple[ProjectCoordinate, ProjectCoordinate]]:
        for before, afters in self._successors.items():
            for after in afters:
                yield before, after

    def __contains__(self, vertex: object) -> bool:
        return vertex in self._successors

    def __len__(self) -> int:
        return len(self._successors)


def build_graph(projects: Iterable[ProjectDescriptor]) -> PrecedenceGraph:
    """Build the precedence graph for a collection of projects.

    Every project becomes a vertex, in the order given. Edges are added for
    parent → child when the parent is in the collection, and for
    dependency → dependent when the dependency is in the collection.
    Declared child modules never add an edge on their own.

    Coordinates pointing outside the collection are ignored, so this never
    fails.

    Example:
        If b inherits from root and depends on a:
        build_graph([root, a, b]) → edges root → b, a → b
    """
    projects = list(projects)
    graph = PrecedenceGraph()

    # Register all vertices first so discovery order is the collection order
    for project in projects:
        graph.add_vertex(project.coordinate)

    for project in projects:
        coordinate = project.coordinate
        parent = project.parent
        if parent is not None and parent != coordinate and parent in graph:
            graph.add_edge(parent, coordinate)
        for dep in project.dependencies:
            # External dependencies are resolved elsewhere, not ordered here
            if dep in graph:
                graph.add_edge(dep, coordinate)

    log.debug(
        "Built precedence graph with %d projects and %d edges",
        len(graph),
        sum(1 for _ in graph.edges()),
    )
    return graph


def find_cycle(graph: PrecedenceGraph) -> list[ProjectCoordinate] | None:
    """Return the first cycle found in the graph, or None if it is acyclic.

    Depth-first traversal in discovery order, tracking which vertices are on
    the current path. Reaching a vertex that is still on the path closes a
    cycle. The returned list starts and ends with the same coordinate.
    """
    state = {v: _UNVISITED for v in graph.vertices}

    for start in graph.vertices:
        if state[start] != _UNVISITED:
            continue
        path: list[ProjectCoordinate] = [start]
        stack: list[Iterator[ProjectCoordinate]] = [iter(graph.successors(start))]
        state[start] = _ON_STACK

        while stack:
            nxt = next(stack[-1], None)
            if nxt is None:
                # All successors handled, leave the current path
                stack.pop()
                state[path.pop()] = _DONE
            elif state[nxt] == _ON_STACK:
                return path[path.index(nxt) :] + [nxt]
            elif state[nxt] == _UNVISITED:
                state[nxt] = _ON_STACK
                path.append(nxt)
                stack.append(iter(graph.successors(nxt)))

    return None


def check_acyclic(graph: PrecedenceGraph) -> None:
    """Raise CyclicDependencyError if the graph has a cycle."""
    cycle = find_cycle(graph)
    if cycle is not None:
        raise CyclicDependencyError(cycle)


def topo_sort(graph: PrecedenceGraph) -> list[ProjectCoordinate]:
    """Topologically sort an acyclic precedence graph.

    Reverse-postorder depth-first sort: vertices are visited in discovery
    order, each vertex is finished only after all its successors are
    finished, and the finishing sequence is reversed. Vertices with no
    precedence between them come out in reverse discovery order, which is
    deterministic for a fixed input order.

    Returns:
        Every vertex exactly once, in build order.

    Raises:
        CyclicDependencyError: If the graph was not checked for cycles first.

    Example:
        If b depends on a, and c depends on b:
        topo_sort(graph) → [a, b, c]
    """
    state = {v: _UNVISITED for v in graph.vertices}
    finished: list[ProjectCoordinate] = []

    for start in graph.vertices:
        if state[start] != _UNVISITED:
            continue
        path: list[ProjectCoordinate] = [start]
        stack: list[Iterator[ProjectCoordinate]] = [iter(graph.successors(start))]
        state[start] = _ON_STACK

        while stack:
            nxt = next(stack[-1], None)
            if nxt is None:
                stack.pop()
                vertex = path.pop()
                state[vertex] = _DONE
                finished.append(vertex)
            elif state[nxt] == _ON_STACK:
                raise CyclicDependencyError(path[path.index(nxt) :] + [nxt])
            elif state[nxt] == _UNVISITED:
                state[nxt] = _ON_STACK
                path.append(nxt)
                stack.append(iter(graph.successors(nxt)))

    finished.reverse()
    log.debug("Canonical order: %s", ", ".join(str(c) for c in finished))
    return finished


def transitive_predecessors(
    graph: PrecedenceGraph, start: Iterable[ProjectCoordinate]
) -> set[ProjectCoordinate]:
    """Every project that must be built before any of the start projects.

    Start projects are only included when one of them is a prerequisite of
    another.
    """
    return _reachable(start, graph.predecessors)


def transitive_successors(
    graph: PrecedenceGraph, start: Iterable[ProjectCoordinate]
) -> set[ProjectCoordinate]:
    """Every project that directly or indirectly builds on a start project."""
    return _reachable(start, graph.successors)


def _reachable(
    start: Iterable[ProjectCoordinate],
    neighbors: Callable[[ProjectCoordinate], list[ProjectCoordinate]],
) -> set[ProjectCoordinate]:
    reached: set[ProjectCoordinate] = set()
    # Explicit work stack so large reactors do not hit the recursion limit
    stack = list(start)
    while stack:
        node = stack.pop()
        for other in neighbors(node):
            if other not in reached:
                reached.add(other)
                stack.append(other)
    return reached
