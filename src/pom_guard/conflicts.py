"""Consolidate dependencies across a build using "nearest wins".

Per project, the project itself is consulted first, then its parent, then the
grandparent and so on; the first declaration of a groupId:artifactId is
authoritative. Inside a single project direct dependencies beat
dependencyManagement entries.

Merge order across projects:
    Projects are visited leaves-to-root: deepest ancestor chain first, ties in
    discovery order. Each project's view only fills keys the global result does
    not hold yet, so an ancestor processed later can never overwrite a value a
    descendant already settled. For two unrelated modules declaring the same
    coordinate, the deeper module wins, then the one discovered first.

A declaration without a version never beats one with an explicit version.
When a farther declaration supplies the missing version, only the version is
taken from it; scope, type and optional stay those of the nearer declaration.
"""

from __future__ import annotations

import logging

from pom_guard.forest import Forest
from pom_guard.models import Coordinate, Dependency, Project

logger = logging.getLogger(__name__)


def _local_declarations(project: Project) -> dict[Coordinate, Dependency]:
    declared: dict[Coordinate, Dependency] = {}
    for dep in project.dependencies:
        _offer(declared, dep)
    for dep in project.managed_dependencies:
        _offer(declared, dep)
    return declared


def _offer(resolved: dict[Coordinate, Dependency], dep: Dependency) -> None:
    """Keep the first declaration of a coordinate; a later one may only supply a missing version."""
    key = dep.coordinate
    current = resolved.get(key)
    if current is None:
        resolved[key] = dep
    elif current.version is None and dep.version is not None:
        resolved[key] = current.with_version(dep.version)


def resolve_for_project(forest: Forest, project: Project) -> dict[Coordinate, Dependency]:
    """Return the dependencies visible from `project`, nearest declaration first.

    Args:
        forest: The forest `project` belongs to.
        project: The project whose view is computed.

    Returns:
        Mapping of coordinate to the winning declaration, in first-seen order.
    """
    view: dict[Coordinate, Dependency] = {}
    for p in [project, *forest.ancestors(project)]:
        for dep in _local_declarations(p).values():
            _offer(view, dep)
    return view


def merge_order(forest: Forest) -> list[Project]:
    """Projects sorted leaves-to-root; ties keep discovery order."""
    indexed = list(enumerate(forest.projects))
    indexed.sort(key=lambda item: (-forest.depth_of(item[1]), item[0]))
    return [p for _, p in indexed]


def resolve_consolidated(forest: Forest) -> list[Dependency]:
    """Return one dependency per groupId:artifactId across the whole build.

    Returns:
        Winning declarations, in the order their coordinates were first settled.
    """
    consolidated: dict[Coordinate, Dependency] = {}
    for project in merge_order(forest):
        for dep in resolve_for_project(forest, project).values():
            _offer(consolidated, dep)
    logger.debug(
        "Consolidated %d dependencies from %d project(s)", len(consolidated), len(forest)
    )
    return list(consolidated.values())
