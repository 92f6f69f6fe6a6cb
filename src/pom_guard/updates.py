"""Check a build's dependencies and parents for newer published versions."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from pydantic import BaseModel

from pom_guard.conflicts import resolve_consolidated
from pom_guard.forest import Forest
from pom_guard.models import Dependency, ParentReference
from pom_guard.properties import is_resolved
from pom_guard.repository import VersionLookupService

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 8

UP_TO_DATE = "up-to-date"
UPDATE_AVAILABLE = "update available"
MAJOR_UPDATE = "major update available"
MANAGED = "managed dependency"
NOT_FOUND = "no version found"
UNRESOLVED = "unresolved version"


def is_major_update(current: str | None, latest: str) -> bool:
    """Return True when the leading version number of `latest` is higher.

    Versions whose leading segment is not an integer count as major updates.
    """
    if current is None:
        return False
    try:
        return int(latest.split(".")[0]) > int(current.split(".")[0])
    except ValueError:
        return True


class UpdateStatus(BaseModel):
    """Outcome of one latest-version lookup."""

    kind: str
    coordinate: str
    current: str | None = None
    latest: str | None = None

    @property
    def status(self) -> str:
        if self.current is None:
            return MANAGED
        if not is_resolved(self.current):
            return UNRESOLVED
        if self.latest is None:
            return NOT_FOUND
        if self.current == self.latest:
            return UP_TO_DATE
        if is_major_update(self.current, self.latest):
            return MAJOR_UPDATE
        return UPDATE_AVAILABLE

    @property
    def has_update(self) -> bool:
        return self.status in {UPDATE_AVAILABLE, MAJOR_UPDATE}


def _comparable(version: str | None) -> bool:
    return version is not None and is_resolved(version)


def external_parents(forest: Forest) -> list[ParentReference]:
    """Unique parent references that point outside the forest."""
    parents: dict[str, ParentReference] = {}
    for project in forest:
        if project.parent is None or forest.parent_of(project) is not None:
            continue
        parents.setdefault(project.parent.compact(), project.parent)
    return list(parents.values())


def check_updates(
    forest: Forest,
    service: VersionLookupService,
    *,
    workers: int = DEFAULT_WORKERS,
) -> list[UpdateStatus]:
    """Look up the latest version of every consolidated dependency and external parent.

    Lookups are independent and run on a bounded thread pool; results keep
    the order of the consolidated dependencies followed by the parents.
    """
    dependencies = resolve_consolidated(forest)
    parents = external_parents(forest)

    def lookup_dependency(dep: Dependency) -> UpdateStatus:
        # Versionless or unresolved entries have nothing to compare against.
        latest = service.latest_version(dep) if _comparable(dep.version) else None
        return UpdateStatus(
            kind="dependency",
            coordinate=dep.coordinate.compact(),
            current=dep.version,
            latest=latest,
        )

    def lookup_parent(parent: ParentReference) -> UpdateStatus:
        latest = service.latest_parent_version(parent) if _comparable(parent.version) else None
        return UpdateStatus(
            kind="parent",
            coordinate=f"{parent.group_id}:{parent.artifact_id}",
            current=parent.version,
            latest=latest,
        )

    logger.info(
        "Checking %d dependencies and %d parent(s) with %d worker(s)",
        len(dependencies),
        len(parents),
        workers,
    )
    with ThreadPoolExecutor(max_workers=max(1, workers)) as pool:
        dep_results = list(pool.map(lookup_dependency, dependencies))
        parent_results = list(pool.map(lookup_parent, parents))
    return [*dep_results, *parent_results]
