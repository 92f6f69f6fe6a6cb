from __future__ import annotations

from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class Artifact(SQLModel, table=True):
    """A build module or a declared dependency, keyed by `group:artifact:version`.

    Modules carry the descriptor path they were loaded from; "Unknown" stands
    in for a version governed by dependencyManagement.
    """
    gav: str = Field(primary_key=True)
    group_id: str = Field(index=True)
    artifact_id: str = Field(index=True)
    version: str
    is_module: bool = Field(default=False)
    relative_path: Optional[str] = Field(default=None)


class DependencyEdge(SQLModel, table=True):
    """A declaration edge (A -> B means module A declares B).

    `kind` is "dependency" for direct declarations and "managed" for
    dependencyManagement entries.
    """
    __table_args__ = (
        UniqueConstraint("from_gav", "to_gav", "kind", "scope", "optional", name="uq_dep_edge"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    from_gav: str = Field(index=True)
    to_gav: str = Field(index=True)
    kind: str = Field(default="dependency")
    scope: Optional[str] = Field(default=None)
    optional: Optional[bool] = Field(default=None)
