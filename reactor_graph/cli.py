"""CLI entry point for reactor-graph."""

from __future__ import annotations

import json
from pathlib import Path

import click

from reactor_graph.builder import GraphBuilder
from reactor_graph.collection import ProjectCollection
from reactor_graph.console import fatal, setup_logging, step
from reactor_graph.errors import DescriptorError, GraphBuildError
from reactor_graph.models import MakeBehavior, ScopeRequest
from reactor_graph.toml import load_workspace

# Prefixes that turn a --projects entry into an exclusion
EXCLUDE_PREFIXES = ("!", "-")

workspace_argument = click.argument(
    "workspace",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
)


def _split_selectors(values: tuple[str, ...]) -> list[str]:
    """Flatten repeatable, comma-separated selector options."""
    return [s.strip() for value in values for s in value.split(",") if s.strip()]


def build_request(
    defaults: ScopeRequest,
    projects: tuple[str, ...] = (),
    exclude: tuple[str, ...] = (),
    resume_from: str | None = None,
    also_make: bool = False,
    also_make_dependents: bool = False,
) -> ScopeRequest:
    """Combine command-line options with the workspace defaults.

    Command-line make flags replace the default make behavior. Exclusions
    from both sources are applied.

    Examples:
        -pl a,!b          → selected=[a], excluded=[b]
        -am -amd          → make_behavior=both
    """
    selected: list[str] = []
    excluded: list[str] = [str(s) for s in defaults.excluded]
    for selector in _split_selectors(projects):
        if selector.startswith(EXCLUDE_PREFIXES):
            excluded.append(selector[1:])
        else:
            selected.append(selector)
    excluded.extend(_split_selectors(exclude))

    if also_make and also_make_dependents:
        behavior = MakeBehavior.BOTH
    elif also_make:
        behavior = MakeBehavior.UPSTREAM
    elif also_make_dependents:
        behavior = MakeBehavior.DOWNSTREAM
    else:
        behavior = defaults.make_behavior

    return ScopeRequest(
        selected=selected,
        excluded=excluded,
        resume_from=resume_from,
        make_behavior=behavior,
    )


def _load(workspace: Path) -> tuple[ProjectCollection, ScopeRequest]:
    try:
        return load_workspace(workspace)
    except DescriptorError as e:
        raise click.ClickException(str(e)) from e
    except GraphBuildError as e:
        fatal(str(e), e.exit_code)


@click.group(context_settings={"auto_envvar_prefix": "REACTOR_GRAPH"})
@click.version_option(package_name="reactor-graph")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """Compute which reactor modules to build, and in what order."""
    setup_logging(verbose)


@cli.command()
@workspace_argument
@click.option(
    "-pl",
    "--projects",
    multiple=True,
    help="Comma-separated projects to build. Prefix with ! to exclude.",
)
@click.option("--exclude", multiple=True, help="Comma-separated projects to skip.")
@click.option("-rf", "--resume-from", default=None, help="Resume the reactor from this project.")
@click.option("-am", "--also-make", is_flag=True, help="Also build required projects.")
@click.option(
    "-amd",
    "--also-make-dependents",
    is_flag=True,
    help="Also build projects that depend on the selected ones.",
)
@click.option("--json", "as_json", is_flag=True, help="Print a JSON array.")
def order(
    workspace: Path,
    projects: tuple[str, ...],
    exclude: tuple[str, ...],
    resume_from: str | None,
    also_make: bool,
    also_make_dependents: bool,
    as_json: bool,
) -> None:
    """Print the build order of the selected reactor projects."""
    collection, defaults = _load(workspace)
    request = build_request(
        defaults, projects, exclude, resume_from, also_make, also_make_dependents
    )

    result = GraphBuilder().build(collection, request)
    if result.error is not None:
        fatal(str(result.error), result.exit_code)

    coordinates = [str(c) for c in result.get().coordinates()]
    if as_json:
        click.echo(json.dumps(coordinates))
    else:
        for coordinate in coordinates:
            click.echo(coordinate)


@cli.command()
@workspace_argument
def discover(workspace: Path) -> None:
    """List every project in the reactor with its in-reactor dependencies."""
    step("Discovering reactor projects")
    collection, _ = _load(workspace)

    for project in collection:
        # Only show dependencies that take part in the reactor order
        deps = [str(d) for d in project.dependencies if d in collection]
        if project.parent is not None and project.parent in collection:
            deps.insert(0, f"{project.parent} (parent)")
        arrow = f" → [{', '.join(deps)}]" if deps else ""
        version = f" {project.version}" if project.version else ""
        click.echo(f"  {project.coordinate}{version} ({project.path}){arrow}")
