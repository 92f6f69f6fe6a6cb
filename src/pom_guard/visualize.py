"""Rich rendering utilities for build analysis reports."""

from __future__ import annotations

from rich.table import Table
from rich.tree import Tree

from pom_guard.forest import Forest
from pom_guard.models import DependencyReport, Project
from pom_guard.updates import (
    MAJOR_UPDATE,
    NOT_FOUND,
    UNRESOLVED,
    UP_TO_DATE,
    UPDATE_AVAILABLE,
    UpdateStatus,
)

_STATUS_STYLE = {
    UP_TO_DATE: "green",
    UPDATE_AVAILABLE: "yellow",
    MAJOR_UPDATE: "red",
    NOT_FOUND: "dim",
    UNRESOLVED: "magenta",
}


def _add_project(branch: Tree, project: Project) -> None:
    node = branch.add(f"[bold]{project.compact()}[/bold] [dim]({project.relative_path})[/dim]")
    if project.has_parent():
        node.add(f"[dim]parent[/dim] {project.parent.compact()}")
    if not project.dependencies and not project.managed_dependencies:
        node.add("[dim]No direct dependencies found[/dim]")
        return
    if project.dependencies:
        deps_branch = node.add("dependencies")
        for dep in project.dependencies:
            deps_branch.add(dep.label())
    if project.managed_dependencies:
        managed_branch = node.add("dependencyManagement")
        for dep in project.managed_dependencies:
            managed_branch.add(dep.label())


def build_forest_tree(forest: Forest) -> Tree:
    """Build a Rich Tree listing every module with its declared dependencies.

    Args:
        forest: Resolved project forest.

    Returns:
        A Rich Tree object for rendering.
    """
    title = forest.root.compact() if forest.root is not None else "empty build"
    root = Tree(f"[bold blue]{title}[/bold blue] [dim]{len(forest)} module(s)[/dim]")
    for project in forest:
        _add_project(root, project)
    return root


def consolidated_table(report: DependencyReport) -> Table:
    table = Table(
        title=f"Consolidated dependencies ({len(report.consolidated_dependencies)} unique)"
    )
    table.add_column("Dependency")
    table.add_column("Version")
    table.add_column("Scope", style="dim")
    for dep in sorted(report.consolidated_dependencies, key=lambda d: d.coordinate.compact()):
        table.add_row(dep.coordinate.compact(), dep.version or "[dim]managed[/dim]", dep.scope or "")
    return table


def inconsistency_table(report: DependencyReport) -> Table:
    table = Table(title="Inconsistent dependency versions", title_style="bold yellow")
    table.add_column("Dependency")
    table.add_column("Version")
    table.add_column("Modules")
    for inconsistency in report.version_inconsistencies:
        first = True
        for version, modules in inconsistency.version_to_modules.items():
            table.add_row(inconsistency.coordinate if first else "", version, ", ".join(modules))
            first = False
    return table


def usage_table(report: DependencyReport) -> Table:
    table = Table(title="Dependency usage by module")
    table.add_column("Dependency")
    table.add_column("Declared in")
    for coordinate in sorted(report.dependency_usage_by_module):
        table.add_row(coordinate, ", ".join(report.dependency_usage_by_module[coordinate]))
    return table


def updates_table(results: list[UpdateStatus]) -> Table:
    table = Table(title="Available updates")
    table.add_column("Kind", style="dim")
    table.add_column("Coordinate")
    table.add_column("Current")
    table.add_column("Latest")
    table.add_column("Status")
    for r in results:
        status = r.status
        style = _STATUS_STYLE.get(status, "blue")
        table.add_row(
            r.kind,
            r.coordinate,
            r.current or "-",
            r.latest or "-",
            f"[{style}]{status}[/{style}]",
        )
    return table
