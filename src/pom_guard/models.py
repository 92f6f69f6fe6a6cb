"""Pydantic models for Maven projects, parents and dependencies."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


UNKNOWN = "Unknown"
DEFAULT_PARENT_PATH = "../pom.xml"


class Coordinate(BaseModel):
    """Version-independent Maven identity (GroupId, ArtifactId)."""

    model_config = ConfigDict(frozen=True)

    group_id: str = Field(..., min_length=1)
    artifact_id: str = Field(..., min_length=1)

    def compact(self) -> str:
        """Return a compact string representation.

        Returns:
            A string like `groupId:artifactId`.
        """
        return f"{self.group_id}:{self.artifact_id}"

    def __str__(self) -> str:
        return self.compact()


class Dependency(BaseModel):
    """A Maven dependency entry.

    A `None` version means the version is governed elsewhere, typically by a
    dependencyManagement section or an imported BOM.
    """

    model_config = ConfigDict(frozen=True)

    group_id: str = Field(..., min_length=1)
    artifact_id: str = Field(..., min_length=1)
    version: str | None = None
    scope: str | None = None
    optional: bool | None = None
    type: str | None = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(group_id=self.group_id, artifact_id=self.artifact_id)

    def compact(self) -> str:
        """Return `groupId:artifactId:version` (the version may be `Unknown`)."""
        return f"{self.group_id}:{self.artifact_id}:{self.version or UNKNOWN}"

    def with_version(self, version: str | None) -> Dependency:
        """Return a copy carrying `version`; the receiver is left untouched."""
        return self.model_copy(update={"version": version})

    def label(self) -> str:
        """Return a user-facing label for the dependency.

        Returns:
            A formatted string including GAV, scope, type and optional flag when present.
        """
        parts: list[str] = [self.compact()]
        if self.scope:
            parts.append(f"(scope={self.scope})")
        if self.type:
            parts.append(f"(type={self.type})")
        if self.optional is True:
            parts.append("(optional)")
        return " ".join(parts)


class ParentReference(BaseModel):
    """The `<parent>` section of a POM."""

    model_config = ConfigDict(frozen=True)

    group_id: str | None = None
    artifact_id: str | None = None
    version: str | None = None
    relative_path: str = DEFAULT_PARENT_PATH

    @property
    def coordinate(self) -> Coordinate | None:
        if not self.group_id or not self.artifact_id:
            return None
        return Coordinate(group_id=self.group_id, artifact_id=self.artifact_id)

    def compact(self) -> str:
        return f"{self.group_id or UNKNOWN}:{self.artifact_id or UNKNOWN}:{self.version or UNKNOWN}"


class Project(BaseModel):
    """A Maven project model as loaded from one descriptor.

    `properties` holds the raw declared properties; `effective_properties` is
    filled in by the forest builder with the ancestors' properties overlaid by
    this project's own declarations.
    """

    model_config = ConfigDict(frozen=True)

    group_id: str | None = None
    artifact_id: str = Field(..., min_length=1)
    version: str | None = None
    packaging: str | None = None
    name: str | None = None
    relative_path: str | None = None
    properties: dict[str, str] = Field(default_factory=dict)
    effective_properties: dict[str, str] | None = None
    dependencies: list[Dependency] = Field(default_factory=list)
    managed_dependencies: list[Dependency] = Field(default_factory=list)
    modules: list[str] = Field(default_factory=list)
    parent: ParentReference | None = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(group_id=self.group_id or UNKNOWN, artifact_id=self.artifact_id)

    def compact(self) -> str:
        """Return `groupId:artifactId:version`, the project's identity in a forest."""
        return f"{self.group_id or UNKNOWN}:{self.artifact_id}:{self.version or UNKNOWN}"

    def get_all_dependencies(self) -> list[Dependency]:
        """Direct dependencies followed by managed ones, without deduplication."""
        return [*self.dependencies, *self.managed_dependencies]

    def is_multi_module(self) -> bool:
        return bool(self.modules)

    def has_parent(self) -> bool:
        return self.parent is not None

    def scope_properties(self) -> dict[str, str]:
        """Properties visible to placeholder resolution for this project."""
        if self.effective_properties is not None:
            return self.effective_properties
        return self.properties


class VersionInconsistency(BaseModel):
    """A dependency declared with more than one explicit version across modules."""

    coordinate: str
    version_to_modules: dict[str, list[str]]

    def describe(self) -> str:
        lines = [f"Dependency {self.coordinate} has inconsistent versions:"]
        for version, modules in self.version_to_modules.items():
            lines.append(f"  - Version {version} used in modules: {', '.join(modules)}")
        return "\n".join(lines)


class DependencyReport(BaseModel):
    """Consolidated results of analyzing a multi-module build."""

    consolidated_dependencies: list[Dependency] = Field(default_factory=list)
    version_inconsistencies: list[VersionInconsistency] = Field(default_factory=list)
    dependency_usage_by_module: dict[str, list[str]] = Field(default_factory=dict)

    def has_version_inconsistencies(self) -> bool:
        return bool(self.version_inconsistencies)

    def summary(self) -> str:
        """Return a plain-text summary of the report."""
        lines = [
            "Dependency Report Summary:",
            "-------------------------",
            f"Total unique dependencies: {len(self.consolidated_dependencies)}",
            "",
        ]
        if self.has_version_inconsistencies():
            lines.append(
                f"WARNING: Found {len(self.version_inconsistencies)} dependencies "
                "with inconsistent versions across modules:"
            )
            lines.append("")
            for inconsistency in self.version_inconsistencies:
                lines.append(inconsistency.describe())
                lines.append("")
        else:
            lines.append("All dependencies have consistent versions across modules.")
        return "\n".join(lines)
