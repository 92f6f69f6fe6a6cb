"""Detect dependencies declared with different versions across modules."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pom_guard.conflicts import resolve_consolidated
from pom_guard.forest import Forest
from pom_guard.models import DependencyReport, Project, VersionInconsistency

logger = logging.getLogger(__name__)


def _versions_by_dependency(projects: Iterable[Project]) -> dict[str, dict[str, list[str]]]:
    versions: dict[str, dict[str, list[str]]] = {}
    for project in projects:
        module = project.artifact_id
        for dep in project.dependencies:
            if dep.version is None:
                continue
            modules = versions.setdefault(dep.coordinate.compact(), {}).setdefault(dep.version, [])
            if module not in modules:
                modules.append(module)
    return versions


def find_inconsistencies(forest: Forest) -> list[VersionInconsistency]:
    """Return every coordinate whose direct declarations use more than one version.

    Only direct dependencies with an explicit version count; dependencyManagement
    entries are ignored. Coordinates and versions are sorted lexicographically,
    modules keep discovery order.
    """
    inconsistencies: list[VersionInconsistency] = []
    versions = _versions_by_dependency(forest)
    for coordinate in sorted(versions):
        by_version = versions[coordinate]
        if len(by_version) < 2:
            continue
        inconsistencies.append(
            VersionInconsistency(
                coordinate=coordinate,
                version_to_modules={v: list(by_version[v]) for v in sorted(by_version)},
            )
        )
    return inconsistencies


def dependency_usage_by_module(forest: Forest) -> dict[str, list[str]]:
    """Map each directly declared coordinate to the modules declaring it."""
    usage: dict[str, list[str]] = {}
    for project in forest:
        for dep in project.dependencies:
            modules = usage.setdefault(dep.coordinate.compact(), [])
            if project.artifact_id not in modules:
                modules.append(project.artifact_id)
    return usage


def collect_report(forest: Forest) -> DependencyReport:
    """Run consolidation and consistency analysis over `forest`."""
    if not len(forest):
        logger.debug("No projects provided, returning empty dependency report")
        return DependencyReport()

    report = DependencyReport(
        consolidated_dependencies=resolve_consolidated(forest),
        version_inconsistencies=find_inconsistencies(forest),
        dependency_usage_by_module=dependency_usage_by_module(forest),
    )
    logger.info(
        "Dependency collection completed: %d project(s), %d consolidated, %d inconsistent",
        len(forest),
        len(report.consolidated_dependencies),
        len(report.version_inconsistencies),
    )
    return report
