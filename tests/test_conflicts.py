from __future__ import annotations

from pom_guard.conflicts import merge_order, resolve_consolidated, resolve_for_project
from pom_guard.forest import Forest
from pom_guard.models import Coordinate, Dependency, ParentReference, Project


def _dep(gav: str, scope: str | None = None) -> Dependency:
    parts = gav.split(":")
    return Dependency(
        group_id=parts[0],
        artifact_id=parts[1],
        version=parts[2] if len(parts) > 2 else None,
        scope=scope,
    )


def _project(
    artifact_id: str,
    *,
    parent: str | None = None,
    dependencies: list[str] | None = None,
    managed: list[str] | None = None,
) -> Project:
    return Project(
        group_id="com.example",
        artifact_id=artifact_id,
        version="1.0",
        parent=ParentReference(group_id="com.example", artifact_id=parent, version="1.0") if parent else None,
        dependencies=[_dep(d) for d in dependencies or []],
        managed_dependencies=[_dep(d) for d in managed or []],
    )


def _versions(deps: list[Dependency]) -> dict[str, str | None]:
    return {d.coordinate.compact(): d.version for d in deps}


def test_child_direct_dependency_beats_parent_management() -> None:
    root = _project("root", managed=["g:a:1.0"])
    child = _project("child", parent="root", dependencies=["g:a:2.0"])
    forest = Forest([root, child])

    view = resolve_for_project(forest, child)

    assert view[Coordinate(group_id="g", artifact_id="a")].version == "2.0"
    assert _versions(resolve_consolidated(forest)) == {"g:a": "2.0"}


def test_direct_beats_managed_within_one_project() -> None:
    project = _project("solo", dependencies=["g:a:2.0"], managed=["g:a:1.0"])
    assert _versions(resolve_consolidated(Forest([project]))) == {"g:a": "2.0"}


def test_parent_fills_keys_the_child_does_not_declare() -> None:
    root = _project("root", dependencies=["g:shared:1.0"], managed=["g:managed:3.0"])
    child = _project("child", parent="root", dependencies=["g:own:2.0"])

    view = resolve_for_project(Forest([root, child]), child)

    assert [d.compact() for d in view.values()] == ["g:own:2.0", "g:shared:1.0", "g:managed:3.0"]


def test_grandchild_wins_over_whole_chain() -> None:
    root = _project("root", managed=["g:a:1.0"])
    mid = _project("mid", parent="root", managed=["g:a:2.0"])
    leaf = _project("leaf", parent="mid", dependencies=["g:a:3.0"])
    forest = Forest([root, mid, leaf])

    assert resolve_for_project(forest, mid)[Coordinate(group_id="g", artifact_id="a")].version == "2.0"
    assert _versions(resolve_consolidated(forest)) == {"g:a": "3.0"}


def test_ancestor_processed_later_does_not_overwrite_descendant() -> None:
    # Discovery order puts the root first; the merge still settles the child first.
    root = _project("root", dependencies=["g:a:1.0"])
    child = _project("child", parent="root", dependencies=["g:a:2.0"])
    forest = Forest([root, child])

    assert [p.artifact_id for p in merge_order(forest)] == ["child", "root"]
    assert _versions(resolve_consolidated(forest)) == {"g:a": "2.0"}


def test_unrelated_modules_deeper_module_wins() -> None:
    root = _project("root")
    shallow = _project("shallow", dependencies=["g:a:1.0"])
    mid = _project("mid", parent="root")
    deep = _project("deep", parent="mid", dependencies=["g:a:2.0"])
    forest = Forest([root, shallow, mid, deep])

    assert _versions(resolve_consolidated(forest)) == {"g:a": "2.0"}


def test_unrelated_modules_at_same_depth_first_discovered_wins() -> None:
    root = _project("root")
    first = _project("first", parent="root", dependencies=["g:a:1.0"])
    second = _project("second", parent="root", dependencies=["g:a:2.0"])

    assert _versions(resolve_consolidated(Forest([root, first, second]))) == {"g:a": "1.0"}
    assert _versions(resolve_consolidated(Forest([root, second, first]))) == {"g:a": "2.0"}


def test_null_version_does_not_beat_explicit_version() -> None:
    root = _project("root", managed=["g:a:1.5"])
    child = _project("child", parent="root", dependencies=["g:a"])
    forest = Forest([root, child])

    assert resolve_for_project(forest, child)[Coordinate(group_id="g", artifact_id="a")].version == "1.5"
    assert _versions(resolve_consolidated(forest)) == {"g:a": "1.5"}


def test_null_version_kept_when_only_declaration() -> None:
    project = _project("solo", dependencies=["g:bom-managed"])
    consolidated = resolve_consolidated(Forest([project]))

    assert len(consolidated) == 1
    assert consolidated[0].version is None


def test_null_version_in_deeper_module_yields_to_unrelated_explicit() -> None:
    root = _project("root")
    mid = _project("mid", parent="root")
    deep = _project("deep", parent="mid", dependencies=["g:a"])
    other = _project("other", dependencies=["g:a:4.0"])

    assert _versions(resolve_consolidated(Forest([root, mid, deep, other]))) == {"g:a": "4.0"}


def test_one_entry_per_coordinate() -> None:
    root = _project("root", dependencies=["g:a:1.0", "g:b:1.0"], managed=["g:a:0.9"])
    child = _project("child", parent="root", dependencies=["g:b:2.0", "g:c:1.0"])

    consolidated = resolve_consolidated(Forest([root, child]))

    assert sorted(d.coordinate.compact() for d in consolidated) == ["g:a", "g:b", "g:c"]
    assert _versions(consolidated) == {"g:a": "1.0", "g:b": "2.0", "g:c": "1.0"}


def test_empty_forest() -> None:
    assert resolve_consolidated(Forest([])) == []


def test_version_from_ancestor_keeps_nearer_scope_and_flags() -> None:
    root = _project("root", managed=["g:a:1.0"])
    child = Project(
        group_id="com.example",
        artifact_id="child",
        version="1.0",
        parent=ParentReference(group_id="com.example", artifact_id="root", version="1.0"),
        dependencies=[Dependency(group_id="g", artifact_id="a", scope="test", optional=True)],
    )
    forest = Forest([root, child])

    settled = resolve_for_project(forest, child)[Coordinate(group_id="g", artifact_id="a")]
    assert (settled.version, settled.scope, settled.optional) == ("1.0", "test", True)

    (consolidated,) = resolve_consolidated(forest)
    assert (consolidated.version, consolidated.scope, consolidated.optional) == ("1.0", "test", True)
