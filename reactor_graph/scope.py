"""Scope filtering: selection, resume point, closure and exclusion.

Turns the canonical build order of a whole reactor into the projects that
will actually be built for one request. The stages run in a fixed order:

1. Resolve every selector to exactly one project
2. Start from the selected projects, or all projects if none are selected
3. Drop projects ordered before the resume point (keeping the resume point)
4. Add upstream and/or downstream projects, over the full graph
5. Remove excluded projects, without re-closing the set
6. Emit what is left in canonical order
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from .collection import ProjectCollection
from .errors import EmptyBuildSetError, UnknownProjectError
from .graph import PrecedenceGraph, transitive_predecessors, transitive_successors
from .models import (
    MakeBehavior,
    ProjectCoordinate,
    ProjectDescriptor,
    ScopeRequest,
    Selector,
)

log = logging.getLogger(__name__)


def resolve_selector(
    selector: Selector,
    projects: ProjectCollection,
    option: str | None = None,
) -> ProjectCoordinate:
    """Resolve a user-supplied selector to the coordinate of one project.

    Accepted forms, tried in this order:
    - ProjectCoordinate or "namespace:name": exact coordinate
    - ":name": project name, must be unique in the reactor
    - "name": project name, then module path, each must be unique

    Args:
        selector: The selector to resolve.
        projects: The reactor to resolve against.
        option: Name of the option the selector came from, for messages.

    Raises:
        UnknownProjectError: If nothing matches, or the match is ambiguous.

    Examples:
        "unittest:module-a" → unittest:module-a
        ":module-a" → unittest:module-a (if only one project is named so)
        "modules/a" → the project whose path is modules/a
    """
    if isinstance(selector, ProjectCoordinate):
        if selector in projects:
            return selector
        raise UnknownProjectError(selector, option=option)

    namespace, sep, name = selector.partition(":")
    if sep and namespace:
        try:
            coordinate = ProjectCoordinate.parse(selector)
        except ValueError:
            raise UnknownProjectError(selector, option=option) from None
        if coordinate in projects:
            return coordinate
        raise UnknownProjectError(selector, option=option)

    lookup = name if sep else selector
    matches = projects.find_by_name(lookup)
    if not matches and not sep:
        # Bare selectors may also name a module directory
        matches = projects.find_by_path(selector)

    if len(matches) == 1:
        return matches[0].coordinate
    raise UnknownProjectError(selector, [m.coordinate for m in matches], option=option)


def resolve_selectors(
    selectors: Iterable[Selector],
    projects: ProjectCollection,
    option: str | None = None,
) -> list[ProjectCoordinate]:
    """Resolve several selectors, dropping duplicates but keeping order."""
    resolved = (resolve_selector(s, projects, option) for s in selectors)
    return list(dict.fromkeys(resolved))


def filter_projects(
    order: Sequence[ProjectCoordinate],
    graph: PrecedenceGraph,
    projects: ProjectCollection,
    request: ScopeRequest,
) -> list[ProjectDescriptor]:
    """Apply a scope request to the canonical build order.

    Closure is computed on the full graph: the resume point and exclusions
    never limit which prerequisites or dependents are reachable. Exclusion
    is a plain set difference applied last, so the result may omit a
    prerequisite of a project it keeps. That is what the user asked for.

    Args:
        order: Canonical order of every project in the reactor.
        graph: Full precedence graph of the reactor.
        projects: Descriptors for every coordinate in the graph.
        request: Selection, exclusion, resume and closure options.

    Returns:
        Descriptors to build, in canonical order.

    Raises:
        UnknownProjectError: If a selector cannot be resolved.
        EmptyBuildSetError: If nothing is left to build.
    """
    # Stage 1: resolve everything up front so bad input fails before filtering
    selected = resolve_selectors(request.selected, projects, "selected projects")
    excluded = set(resolve_selectors(request.excluded, projects, "excluded projects"))
    resume_from = None
    if request.resume_from is not None:
        resume_from = resolve_selector(request.resume_from, projects, "resume from")

    # Stage 2: base set
    base: set[ProjectCoordinate] = set(selected) if selected else set(order)

    # Stage 3: resume point, always re-anchored on the named project
    if resume_from is not None:
        position = {c: i for i, c in enumerate(order)}
        start = position[resume_from]
        base = {c for c in base if position[c] >= start}
        base.add(resume_from)
        log.debug("Resuming from %s: %d projects left", resume_from, len(base))

    # Stage 4: closure over the unfiltered graph
    closed = set(base)
    behavior = request.make_behavior
    if behavior.includes_upstream:
        closed |= transitive_predecessors(graph, base)
    if behavior.includes_downstream:
        closed |= transitive_successors(graph, base)
    if behavior is not MakeBehavior.NONE:
        log.debug("Make behavior %s: %d -> %d projects", behavior.value, len(base), len(closed))

    # Stage 5: exclusion
    final = closed - excluded

    # Stage 6: canonical order
    result = [projects.get(c) for c in order if c in final]
    if not result:
        raise EmptyBuildSetError(request.describe())

    log.debug("Build set: %s", ", ".join(str(d) for d in result))
    return result
