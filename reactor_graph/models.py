"""Data models for reactor-graph.

These Pydantic models represent the core data structures used throughout
the graph builder: project coordinates, project descriptors and the scope
options that narrow a reactor down to the projects that will be built.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProjectCoordinate(BaseModel):
    """Unique two-part identity of a project.

    Attributes:
        namespace: Group-like namespace (e.g., "org.example").
        name: Project name within the namespace (e.g., "module-a").
    """

    model_config = ConfigDict(frozen=True)

    namespace: str
    name: str

    @classmethod
    def parse(cls, value: str) -> ProjectCoordinate:
        """Parse a fully qualified "namespace:name" string.

        Examples:
            "unittest:module-a" → ProjectCoordinate("unittest", "module-a")
            "module-a" → ValueError (namespace required)
        """
        namespace, sep, name = value.strip().partition(":")
        if not sep or not namespace or not name or ":" in name:
            raise ValueError(f"Invalid project coordinate {value!r}, expected namespace:name")
        return cls(namespace=namespace, name=name)

    def __str__(self) -> str:
        return f"{self.namespace}:{self.name}"


class ProjectDescriptor(BaseModel):
    """A single project in the reactor.

    Attributes:
        coordinate: Identity of the project.
        parent: Coordinate of the project this one inherits from. This is a
                lookup into the collection, not an owned object.
        modules: Declared child modules. Aggregation only, it never creates
                 a build-order edge on its own.
        dependencies: Declared dependencies, in declaration order. Entries
                      outside the reactor are kept but ignored for ordering.
        version: Informational version string.
        path: Module directory relative to the workspace root, if known.
    """

    model_config = ConfigDict(frozen=True)

    coordinate: ProjectCoordinate
    parent: ProjectCoordinate | None = None
    modules: tuple[ProjectCoordinate, ...] = ()
    dependencies: tuple[ProjectCoordinate, ...] = ()
    version: str | None = None
    path: str | None = None

    @field_validator("dependencies")
    @classmethod
    def _dedupe_dependencies(
        cls, deps: tuple[ProjectCoordinate, ...]
    ) -> tuple[ProjectCoordinate, ...]:
        # First occurrence wins so edge insertion order stays stable
        return tuple(dict.fromkeys(deps))

    def __str__(self) -> str:
        return str(self.coordinate)


class MakeBehavior(str, Enum):
    """Which related projects are pulled into the build set."""

    NONE = "none"
    UPSTREAM = "upstream"
    DOWNSTREAM = "downstream"
    BOTH = "both"

    @property
    def includes_upstream(self) -> bool:
        return self in (MakeBehavior.UPSTREAM, MakeBehavior.BOTH)

    @property
    def includes_downstream(self) -> bool:
        return self in (MakeBehavior.DOWNSTREAM, MakeBehavior.BOTH)


Selector = str | ProjectCoordinate


class ScopeRequest(BaseModel):
    """User-supplied options that narrow the reactor.

    Selectors are either ProjectCoordinate values or strings in one of the
    forms "namespace:name", ":name", "name" or a module path.

    Attributes:
        selected: Projects to build. Empty means every project.
        excluded: Projects removed after everything else is applied.
        resume_from: Skip projects ordered before this one.
        make_behavior: Closure over prerequisites and/or dependents.
    """

    selected: list[Selector] = Field(default_factory=list)
    excluded: list[Selector] = Field(default_factory=list)
    resume_from: Selector | None = None
    make_behavior: MakeBehavior = MakeBehavior.NONE

    @field_validator("selected", "excluded")
    @classmethod
    def _dedupe_selectors(cls, selectors: list[Selector]) -> list[Selector]:
        stripped = (_strip(s) for s in selectors)
        return list(dict.fromkeys(s for s in stripped if s != ""))

    @field_validator("resume_from")
    @classmethod
    def _blank_resume_is_none(cls, selector: Selector | None) -> Selector | None:
        if selector is None or _strip(selector) == "":
            return None
        return _strip(selector)

    def describe(self) -> str:
        """Render the request the way it would be passed on the command line."""
        parts: list[str] = []
        if self.selected:
            parts.append("selected=" + ",".join(str(s) for s in self.selected))
        if self.excluded:
            parts.append("excluded=" + ",".join(str(s) for s in self.excluded))
        if self.resume_from is not None:
            parts.append(f"resume-from={self.resume_from}")
        if self.make_behavior is not MakeBehavior.NONE:
            parts.append(f"make-behavior={self.make_behavior.value}")
        return ", ".join(parts) or "no scope options"


def _strip(selector: Selector) -> Selector:
    return selector.strip() if isinstance(selector, str) else selector
