"""Errors raised while computing a reactor build order.

Every error is fatal to the current computation. Each carries the process
exit status a command-line wrapper should use, so the CLI can map failures
without inspecting error types.
"""

from __future__ import annotations

from collections.abc import Sequence

from .models import ProjectCoordinate, Selector


class GraphBuildError(Exception):
    """Base class for reactor graph failures."""

    exit_code = 1


class CyclicDependencyError(GraphBuildError):
    """The precedence graph contains a cycle.

    Attributes:
        cycle: Coordinates along the cycle, with the first one repeated at
               the end (a → b → a).
    """

    exit_code = 3

    def __init__(self, cycle: Sequence[ProjectCoordinate]) -> None:
        self.cycle = list(cycle)
        path = " → ".join(str(c) for c in self.cycle)
        super().__init__(f"The projects in the reactor contain a cyclic reference: {path}")


class UnknownProjectError(GraphBuildError):
    """A selector matched no project, or more than one.

    Attributes:
        selector: The selector as given by the user.
        candidates: Matching coordinates when the selector was ambiguous.
    """

    exit_code = 4

    def __init__(
        self,
        selector: Selector,
        candidates: Sequence[ProjectCoordinate] = (),
        option: str | None = None,
    ) -> None:
        self.selector = selector
        self.candidates = list(candidates)
        self.option = option
        where = f" (from {option})" if option else ""
        if self.candidates:
            names = ", ".join(str(c) for c in self.candidates)
            msg = f"Ambiguous project selector {str(selector)!r}{where} matches: {names}"
        else:
            msg = f"Could not find the selected project in the reactor: {str(selector)!r}{where}"
        super().__init__(msg)


class EmptyBuildSetError(GraphBuildError):
    """Scope filtering removed every project.

    Attributes:
        options: Human-readable summary of the scope options used.
    """

    exit_code = 5

    def __init__(self, options: str) -> None:
        self.options = options
        super().__init__(f"No projects left to build after applying {options}")


class DuplicateProjectError(GraphBuildError):
    """Two descriptors in one collection share a coordinate.

    Attributes:
        coordinate: The coordinate declared more than once.
    """

    exit_code = 6

    def __init__(self, coordinate: ProjectCoordinate, paths: Sequence[str | None] = ()) -> None:
        self.coordinate = coordinate
        where = ""
        known = [p for p in paths if p]
        if known:
            where = " (" + ", ".join(known) + ")"
        super().__init__(f"Project {coordinate} is declared more than once{where}")


class DescriptorError(ValueError):
    """A project descriptor file is missing or malformed."""
