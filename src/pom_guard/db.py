"""Database engine creation and forest persistence (SQLite via SQLModel)."""
from __future__ import annotations

from pathlib import Path

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine, select

from pom_guard.db_models import Artifact, DependencyEdge
from pom_guard.forest import Forest
from pom_guard.models import UNKNOWN, Dependency, Project


def create_sqlite_engine(db_path: Path) -> Engine:
    """Create a SQLite engine.

    Args:
        db_path: Path to the SQLite database file.

    Returns:
        SQLAlchemy Engine connected to the SQLite database.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return create_engine(f"sqlite:///{db_path}", echo=False)


def init_db(engine: Engine) -> None:
    """Create all tables known to SQLModel metadata."""
    SQLModel.metadata.create_all(engine)


def _ensure_module(session: Session, project: Project) -> str:
    gav = project.compact()
    existing = session.get(Artifact, gav)
    if existing is None:
        session.add(
            Artifact(
                gav=gav,
                group_id=project.coordinate.group_id,
                artifact_id=project.artifact_id,
                version=project.version or UNKNOWN,
                is_module=True,
                relative_path=project.relative_path,
            )
        )
    elif not existing.is_module:
        # Seen earlier as another module's dependency.
        existing.is_module = True
        existing.relative_path = project.relative_path
        session.add(existing)
    return gav


def _ensure_dependency(session: Session, dep: Dependency) -> str:
    gav = dep.compact()
    if session.get(Artifact, gav) is None:
        session.add(
            Artifact(
                gav=gav,
                group_id=dep.group_id,
                artifact_id=dep.artifact_id,
                version=dep.version or UNKNOWN,
            )
        )
    return gav


def _edge_exists(session: Session, edge: DependencyEdge) -> bool:
    # SQLite unique constraints treat NULLs as distinct, so look the edge up explicitly.
    stmt = select(DependencyEdge).where(
        DependencyEdge.from_gav == edge.from_gav,
        DependencyEdge.to_gav == edge.to_gav,
        DependencyEdge.kind == edge.kind,
        DependencyEdge.scope == edge.scope,
        DependencyEdge.optional == edge.optional,
    )
    return session.exec(stmt).first() is not None


def ingest_forest(session: Session, forest: Forest) -> int:
    """Persist every module with its direct and managed declarations.

    Edges already stored are skipped. Returns the number of modules written.
    """
    for proj in forest:
        a_gav = _ensure_module(session, proj)
        session.flush()
        declared = [("dependency", d) for d in proj.dependencies]
        declared += [("managed", d) for d in proj.managed_dependencies]
        for kind, dep in declared:
            b_gav = _ensure_dependency(session, dep)
            edge = DependencyEdge(
                from_gav=a_gav, to_gav=b_gav, kind=kind, scope=dep.scope, optional=dep.optional
            )
            session.flush()
            if not _edge_exists(session, edge):
                session.add(edge)
    session.commit()
    return len(forest)


def load_edges(session: Session) -> list[DependencyEdge]:
    return list(session.exec(select(DependencyEdge)).all())
