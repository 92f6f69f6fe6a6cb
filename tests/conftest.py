"""Pytest configuration and fixtures for pom-guard tests."""
from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from pathlib import Path

import pytest


def _dependency_xml(gav: str, scope: str | None = None) -> str:
    parts = gav.split(":")
    body = f"<groupId>{parts[0]}</groupId><artifactId>{parts[1]}</artifactId>"
    if len(parts) > 2 and parts[2]:
        body += f"<version>{parts[2]}</version>"
    if scope:
        body += f"<scope>{scope}</scope>"
    return f"<dependency>{body}</dependency>"


def render_pom(
    artifact_id: str,
    *,
    group_id: str | None = "com.example",
    version: str | None = "1.0.0",
    parent: str | None = None,
    properties: Mapping[str, str] | None = None,
    dependencies: Iterable[str] = (),
    managed: Iterable[str] = (),
    modules: Iterable[str] = (),
) -> str:
    """Render a minimal pom.xml; dependencies are `group:artifact[:version]` strings."""
    lines = ['<project xmlns="http://maven.apache.org/POM/4.0.0">', "<modelVersion>4.0.0</modelVersion>"]
    if parent:
        g, a, v = parent.split(":")
        lines.append(f"<parent><groupId>{g}</groupId><artifactId>{a}</artifactId><version>{v}</version></parent>")
    if group_id:
        lines.append(f"<groupId>{group_id}</groupId>")
    lines.append(f"<artifactId>{artifact_id}</artifactId>")
    if version:
        lines.append(f"<version>{version}</version>")
    if properties:
        lines.append("<properties>")
        lines.extend(f"<{k}>{v}</{k}>" for k, v in properties.items())
        lines.append("</properties>")
    mods = list(modules)
    if mods:
        lines.append("<modules>" + "".join(f"<module>{m}</module>" for m in mods) + "</modules>")
    deps = list(dependencies)
    if deps:
        lines.append("<dependencies>" + "".join(_dependency_xml(d) for d in deps) + "</dependencies>")
    managed_deps = list(managed)
    if managed_deps:
        lines.append(
            "<dependencyManagement><dependencies>"
            + "".join(_dependency_xml(d) for d in managed_deps)
            + "</dependencies></dependencyManagement>"
        )
    lines.append("</project>")
    return "\n".join(lines)


@pytest.fixture
def pom() -> Callable[..., str]:
    return render_pom


@pytest.fixture
def write_pom(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write `content` to `tmp_path/relative` and return the file path."""

    def _write(relative: str, content: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep tests independent of the caller's POMGUARD_* environment."""
    for name in (
        "POMGUARD_REPOSITORY_TYPE",
        "POMGUARD_REPOSITORY_URL",
        "POMGUARD_NEXUS_USERNAME",
        "POMGUARD_NEXUS_PASSWORD",
        "POMGUARD_NEXUS_REPOSITORY",
        "POMGUARD_CONNECT_TIMEOUT",
        "POMGUARD_READ_TIMEOUT",
        "POMGUARD_LOOKUP_WORKERS",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("POMGUARD_DB_PATH", str(tmp_path / "dependencies.db"))
