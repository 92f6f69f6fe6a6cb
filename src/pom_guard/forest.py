"""Discover and link every project of a multi-module build.

A forest is built in one pass:

1. load the root descriptor and, depth-first, every `<module>` it declares,
   each path taken relative to the directory of the declaring descriptor;
2. inherit a missing groupId/version from the `<parent>` reference;
3. compute each project's effective properties (ancestors first, the
   project's own declarations overlaid last);
4. substitute placeholders in every dependency version, direct and managed.

Projects are immutable; each step works on copies.
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Protocol

from pom_guard.exceptions import DescriptorError, DescriptorModelError
from pom_guard.models import Coordinate, Project
from pom_guard.parser import POM_FILE_NAME, PomLoader
from pom_guard.properties import PropertyResolver, merge_properties

logger = logging.getLogger(__name__)

MAX_ANCESTOR_DEPTH = 32


class DescriptorLoader(Protocol):
    """Anything able to turn a relative descriptor path into an unresolved Project."""

    def load(self, base_dir: Path, relative_path: str) -> Project: ...


class Forest:
    """All projects of one build, in discovery order.

    Parents are looked up by coordinate through an index; projects never hold
    references to each other.
    """

    def __init__(self, projects: Sequence[Project]) -> None:
        self.projects: list[Project] = list(projects)
        self._by_gav: dict[str, Project] = {p.compact(): p for p in self.projects}
        self._by_coordinate: dict[Coordinate, list[Project]] = {}
        for p in self.projects:
            self._by_coordinate.setdefault(p.coordinate, []).append(p)

    def __iter__(self) -> Iterator[Project]:
        return iter(self.projects)

    def __len__(self) -> int:
        return len(self.projects)

    def __getitem__(self, index: int) -> Project:
        return self.projects[index]

    @property
    def root(self) -> Project | None:
        return self.projects[0] if self.projects else None

    def get(self, gav: str) -> Project | None:
        return self._by_gav.get(gav)

    def by_artifact_id(self, artifact_id: str) -> Project | None:
        return next((p for p in self.projects if p.artifact_id == artifact_id), None)

    def parent_of(self, project: Project) -> Project | None:
        """Return the parent of `project` when it belongs to this forest.

        The exact `groupId:artifactId:version` wins; otherwise a single project
        with the same groupId:artifactId is accepted.
        """
        ref = project.parent
        if ref is None:
            return None
        found = self.get(ref.compact())
        if found is not None:
            return found
        coordinate = ref.coordinate
        if coordinate is None:
            return None
        candidates = self._by_coordinate.get(coordinate, [])
        return candidates[0] if len(candidates) == 1 else None

    def ancestors(self, project: Project) -> list[Project]:
        """Parents of `project` from nearest to farthest.

        The walk stops at a project without an in-forest parent, at a repeated
        project, or after `MAX_ANCESTOR_DEPTH` steps.
        """
        chain: list[Project] = []
        seen = {project.compact()}
        current = self.parent_of(project)
        while current is not None and len(chain) < MAX_ANCESTOR_DEPTH:
            key = current.compact()
            if key in seen:
                logger.warning("Parent cycle detected at %s", key)
                break
            seen.add(key)
            chain.append(current)
            current = self.parent_of(current)
        return chain

    def depth_of(self, project: Project) -> int:
        return len(self.ancestors(project))

    def children_of(self, project: Project) -> list[Project]:
        key = project.compact()
        children: list[Project] = []
        for p in self.projects:
            parent = self.parent_of(p)
            if parent is not None and parent.compact() == key:
                children.append(p)
        return children


def _discover(loader: DescriptorLoader, base_dir: Path, root_rel: str) -> list[Project]:
    projects: list[Project] = []
    seen: set[str] = set()
    stack: list[str] = [root_rel]

    while stack:
        rel = posixpath.normpath(stack.pop())
        if rel in seen:
            logger.warning("Module %s is referenced more than once; skipping", rel)
            continue
        seen.add(rel)
        try:
            project = loader.load(base_dir, rel)
        except DescriptorError as exc:
            if exc.relative_path is None:
                exc.relative_path = rel
            raise

        loaded_rel = posixpath.normpath(project.relative_path or rel)
        if loaded_rel != rel:
            if loaded_rel in seen:
                logger.warning("Module %s is referenced more than once; skipping", loaded_rel)
                continue
            seen.add(loaded_rel)
        if project.relative_path != loaded_rel:
            project = project.model_copy(update={"relative_path": loaded_rel})
        projects.append(project)

        module_dir = posixpath.dirname(loaded_rel)
        # Reversed so that modules are visited in declaration order.
        for module in reversed(project.modules):
            stack.append(posixpath.join(module_dir, module) if module_dir else module)

    return projects


def _inherit_coordinates(project: Project) -> Project:
    updates: dict[str, str] = {}
    ref = project.parent
    if ref is not None:
        if not project.group_id and ref.group_id:
            updates["group_id"] = ref.group_id
        if not project.version and ref.version:
            updates["version"] = ref.version
    if not (project.group_id or updates.get("group_id")):
        raise DescriptorModelError(
            f"Missing required <groupId> (or parent <groupId>) for {project.artifact_id}",
            project.relative_path,
        )
    return project.model_copy(update=updates) if updates else project


def effective_properties(forest: Forest, project: Project) -> dict[str, str]:
    """Ancestors' declared properties overlaid nearest-last by the project's own."""
    merged: dict[str, str] = {}
    for p in reversed([project, *forest.ancestors(project)]):
        merged = merge_properties(merged, p.properties)
    return merged


def resolve_project(forest: Forest, project: Project) -> Project:
    """Return a copy of `project` with effective properties and resolved dependency versions."""
    scoped = project.model_copy(update={"effective_properties": effective_properties(forest, project)})
    resolver = PropertyResolver(scoped)
    return scoped.model_copy(
        update={
            "dependencies": [d.with_version(resolver.resolve(d.version)) for d in scoped.dependencies],
            "managed_dependencies": [
                d.with_version(resolver.resolve(d.version)) for d in scoped.managed_dependencies
            ],
        }
    )


def build_forest(root: str | Path, loader: DescriptorLoader | None = None) -> Forest:
    """Load the build rooted at `root` and resolve every project.

    Args:
        root: The root pom.xml, or a directory containing one.
        loader: Descriptor loader; defaults to reading pom.xml files from disk.

    Raises:
        DescriptorNotFoundError: If any module descriptor is missing.
        DescriptorParseError: If any module descriptor is malformed.
        DescriptorModelError: If a project lacks a groupId or two projects share a coordinate.

    Returns:
        The resolved forest, root first, modules in depth-first declaration order.
    """
    loader = loader or PomLoader()
    root_path = Path(root)
    if root_path.suffix.lower() in {".xml", ".pom"}:
        base_dir, root_rel = root_path.parent, root_path.name
    else:
        base_dir, root_rel = root_path, POM_FILE_NAME

    raw = [_inherit_coordinates(p) for p in _discover(loader, base_dir, root_rel)]

    seen: dict[str, str | None] = {}
    for p in raw:
        gav = p.compact()
        if gav in seen:
            raise DescriptorModelError(
                f"Duplicate project coordinate {gav} (also declared by {seen[gav]})",
                p.relative_path,
            )
        seen[gav] = p.relative_path

    linked = Forest(raw)
    forest = Forest([resolve_project(linked, p) for p in linked])
    logger.info("Built forest of %d project(s) from %s", len(forest), root_path)
    return forest
