"""Reactor graph builder - computes the ordered set of modules to build."""

from reactor_graph.builder import BuildSet, GraphBuilder, GraphBuildResult
from reactor_graph.collection import ProjectCollection
from reactor_graph.errors import (
    CyclicDependencyError,
    DescriptorError,
    DuplicateProjectError,
    EmptyBuildSetError,
    GraphBuildError,
    UnknownProjectError,
)
from reactor_graph.models import (
    MakeBehavior,
    ProjectCoordinate,
    ProjectDescriptor,
    ScopeRequest,
)

__all__ = [
    "BuildSet",
    "CyclicDependencyError",
    "DescriptorError",
    "DuplicateProjectError",
    "EmptyBuildSetError",
    "GraphBuildError",
    "GraphBuildResult",
    "GraphBuilder",
    "MakeBehavior",
    "ProjectCollection",
    "ProjectCoordinate",
    "ProjectDescriptor",
    "ScopeRequest",
    "UnknownProjectError",
]
