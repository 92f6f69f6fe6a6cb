from __future__ import annotations

from pathlib import Path

import pytest
from sqlmodel import Session, select

from pom_guard.db import create_sqlite_engine, ingest_forest, init_db, load_edges
from pom_guard.db_models import Artifact, DependencyEdge
from pom_guard.forest import Forest
from pom_guard.graph import build_graph, graph_from_edges, reverse_dependencies
from pom_guard.models import Dependency, ParentReference, Project


@pytest.fixture
def forest() -> Forest:
    root = Project(
        group_id="com.example",
        artifact_id="root",
        version="1.0",
        relative_path="pom.xml",
        modules=["api"],
        managed_dependencies=[Dependency(group_id="org.slf4j", artifact_id="slf4j-api", version="2.0.13")],
    )
    api = Project(
        group_id="com.example",
        artifact_id="api",
        version="1.0",
        relative_path="api/pom.xml",
        parent=ParentReference(group_id="com.example", artifact_id="root", version="1.0"),
        dependencies=[
            Dependency(group_id="org.slf4j", artifact_id="slf4j-api", version="2.0.13"),
            Dependency(group_id="junit", artifact_id="junit", version="4.13.2", scope="test"),
        ],
    )
    web = Project(
        group_id="com.example",
        artifact_id="web",
        version="1.0",
        relative_path="web/pom.xml",
        parent=ParentReference(group_id="org.springframework.boot", artifact_id="spring-boot-starter-parent", version="3.2.5"),
        dependencies=[
            Dependency(group_id="com.example", artifact_id="api", version="1.0"),
            Dependency(group_id="org.slf4j", artifact_id="slf4j-api", version="2.0.13"),
        ],
    )
    return Forest([root, api, web])


@pytest.fixture
def session(tmp_path: Path):
    engine = create_sqlite_engine(tmp_path / "db" / "deps.db")
    init_db(engine)
    with Session(engine) as s:
        yield s


def test_ingest_writes_modules_and_edges(session: Session, forest: Forest) -> None:
    assert ingest_forest(session, forest) == 3

    modules = session.exec(select(Artifact).where(Artifact.is_module == True)).all()  # noqa: E712
    assert sorted(a.artifact_id for a in modules) == ["api", "root", "web"]
    api = session.get(Artifact, "com.example:api:1.0")
    assert api is not None
    assert api.relative_path == "api/pom.xml"

    edges = load_edges(session)
    assert len(edges) == 5
    managed = [e for e in edges if e.kind == "managed"]
    assert [(e.from_gav, e.to_gav) for e in managed] == [("com.example:root:1.0", "org.slf4j:slf4j-api:2.0.13")]


def test_module_first_seen_as_dependency_is_upgraded(session: Session, forest: Forest) -> None:
    web_first = Forest([forest[2], forest[1]])
    ingest_forest(session, web_first)

    api = session.get(Artifact, "com.example:api:1.0")
    assert api is not None
    assert api.is_module
    assert api.relative_path == "api/pom.xml"


def test_reingest_does_not_duplicate_edges(session: Session, forest: Forest) -> None:
    ingest_forest(session, forest)
    ingest_forest(session, forest)

    assert len(load_edges(session)) == 5
    assert len(session.exec(select(Artifact)).all()) == 5


def test_unversioned_dependency_is_stored_as_unknown(session: Session) -> None:
    project = Project(
        group_id="g",
        artifact_id="a",
        version="1",
        dependencies=[Dependency(group_id="x", artifact_id="y")],
    )
    ingest_forest(session, Forest([project]))
    ingest_forest(session, Forest([project]))

    assert session.get(Artifact, "x:y:Unknown") is not None
    edges = session.exec(select(DependencyEdge)).all()
    assert len(edges) == 1
    assert edges[0].scope is None


def test_build_graph(forest: Forest) -> None:
    g = build_graph(forest)

    assert g.nodes["com.example:root:1.0"]["module"] is True
    assert g.nodes["org.slf4j:slf4j-api:2.0.13"]["module"] is False
    assert g.edges["com.example:api:1.0", "junit:junit:4.13.2"]["scope"] == "test"
    assert g.edges["com.example:api:1.0", "com.example:root:1.0"]["kind"] == "parent"
    assert g.has_edge("com.example:web:1.0", "org.springframework.boot:spring-boot-starter-parent:3.2.5")
    # Managed entries are declarations, not usages.
    assert not g.has_edge("com.example:root:1.0", "org.slf4j:slf4j-api:2.0.13")


def test_reverse_dependencies(forest: Forest) -> None:
    g = build_graph(forest)

    assert reverse_dependencies(g, "org.slf4j:slf4j-api:2.0.13") == ["com.example:api:1.0", "com.example:web:1.0"]
    assert reverse_dependencies(g, "com.example:api:1.0") == ["com.example:web:1.0"]
    assert reverse_dependencies(g, "no:such:1") == []


def test_graph_from_persisted_edges(session: Session, forest: Forest) -> None:
    ingest_forest(session, forest)

    g = graph_from_edges(load_edges(session))

    assert reverse_dependencies(g, "org.slf4j:slf4j-api:2.0.13") == [
        "com.example:api:1.0",
        "com.example:root:1.0",
        "com.example:web:1.0",
    ]
    assert g.edges["com.example:root:1.0", "org.slf4j:slf4j-api:2.0.13"]["kind"] == "managed"
