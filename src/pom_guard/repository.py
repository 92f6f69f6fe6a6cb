"""Latest-version lookups against remote Maven repositories.

Both backends read `maven-metadata.xml` over HTTP with `httpx`. Transport
failures, HTTP errors and malformed metadata are logged and reported as
"no version found"; they never propagate to the analysis core.
"""

from __future__ import annotations

import logging
from typing import Protocol

import httpx
from lxml import etree
from pydantic import BaseModel, Field

from pom_guard.config import MAVEN_CENTRAL, NEXUS, RepositoryConfig
from pom_guard.exceptions import UnknownRepositoryError
from pom_guard.models import Coordinate, Dependency, ParentReference

logger = logging.getLogger(__name__)

USER_AGENT = "pom-guard/0.1"
METADATA_FILE = "maven-metadata.xml"


class MavenMetadata(BaseModel):
    """The parts of `maven-metadata.xml` used for version lookups."""

    group_id: str | None = None
    artifact_id: str | None = None
    latest: str | None = None
    release: str | None = None
    versions: list[str] = Field(default_factory=list)

    def latest_release(self) -> str | None:
        """Newest non-SNAPSHOT version: `<release>`, then `<latest>`, then the last listed."""
        for candidate in (self.release, self.latest):
            if candidate and not _is_snapshot(candidate):
                return candidate
        for version in reversed(self.versions):
            if not _is_snapshot(version):
                return version
        return None


def _is_snapshot(version: str) -> bool:
    return version.upper().endswith("-SNAPSHOT")


def parse_metadata(content: bytes) -> MavenMetadata:
    """Parse a `maven-metadata.xml` document.

    Raises:
        etree.XMLSyntaxError: If the document is not well-formed XML.
    """
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    root = etree.fromstring(content, parser=parser)

    def text(xpath_expr: str) -> str | None:
        found = root.xpath(xpath_expr)
        if not found:
            return None
        return (found[0].text or "").strip() or None

    versions = [
        (n.text or "").strip()
        for n in root.xpath(
            "./*[local-name()='versioning']/*[local-name()='versions']/*[local-name()='version']"
        )
        if (n.text or "").strip()
    ]
    return MavenMetadata(
        group_id=text("./*[local-name()='groupId']"),
        artifact_id=text("./*[local-name()='artifactId']"),
        latest=text("./*[local-name()='versioning']/*[local-name()='latest']"),
        release=text("./*[local-name()='versioning']/*[local-name()='release']"),
        versions=versions,
    )


class VersionLookupService(Protocol):
    repository_type: str

    def available_versions(self, coordinate: Coordinate) -> list[str]: ...

    def latest_version(self, dependency: Dependency) -> str | None: ...

    def latest_parent_version(self, parent: ParentReference) -> str | None: ...

    def has_newer_version(self, dependency: Dependency) -> bool: ...


class MetadataRepository:
    """Shared lookup logic for repositories exposing `maven-metadata.xml`."""

    repository_type = ""

    def __init__(self, config: RepositoryConfig, client: httpx.Client | None = None) -> None:
        self.config = config
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(config.read_timeout, connect=config.connect_timeout),
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        )

    def _auth(self) -> httpx.Auth | None:
        return None

    def metadata_url(self, coordinate: Coordinate) -> str:
        raise NotImplementedError

    def fetch_metadata(self, coordinate: Coordinate) -> MavenMetadata | None:
        url = self.metadata_url(coordinate)
        try:
            resp = self._client.get(url, auth=self._auth())
            resp.raise_for_status()
            return parse_metadata(resp.content)
        except httpx.TimeoutException:
            logger.warning("Timeout fetching %s", url)
        except httpx.HTTPStatusError as exc:
            logger.warning("HTTP %d from %s", exc.response.status_code, url)
        except httpx.RequestError as exc:
            logger.warning("Request to %s failed: %s", url, exc)
        except etree.XMLSyntaxError as exc:
            logger.warning("Malformed metadata at %s: %s", url, exc)
        return None

    def available_versions(self, coordinate: Coordinate) -> list[str]:
        """All published versions, newest first."""
        metadata = self.fetch_metadata(coordinate)
        if metadata is None:
            return []
        logger.debug("Fetched %d version(s) for %s", len(metadata.versions), coordinate)
        return list(reversed(metadata.versions))

    def latest_version(self, dependency: Dependency) -> str | None:
        metadata = self.fetch_metadata(dependency.coordinate)
        return metadata.latest_release() if metadata else None

    def latest_parent_version(self, parent: ParentReference) -> str | None:
        coordinate = parent.coordinate
        if coordinate is None:
            return None
        metadata = self.fetch_metadata(coordinate)
        return metadata.latest_release() if metadata else None

    def has_newer_version(self, dependency: Dependency) -> bool:
        latest = self.latest_version(dependency)
        return latest is not None and latest != dependency.version

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> MetadataRepository:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class MavenCentralRepository(MetadataRepository):
    """Maven Central layout: `{base}/{group/path}/{artifact}/maven-metadata.xml`."""

    repository_type = MAVEN_CENTRAL

    def metadata_url(self, coordinate: Coordinate) -> str:
        group_path = coordinate.group_id.replace(".", "/")
        return f"{self.config.base_url.rstrip('/')}/{group_path}/{coordinate.artifact_id}/{METADATA_FILE}"


class NexusRepository(MetadataRepository):
    """Nexus repository groups: `{base}/content/groups/{repository}/...`, basic auth."""

    repository_type = NEXUS

    def _auth(self) -> httpx.Auth | None:
        if self.config.username and self.config.password:
            return httpx.BasicAuth(self.config.username, self.config.password)
        return None

    def metadata_url(self, coordinate: Coordinate) -> str:
        group_path = coordinate.group_id.replace(".", "/")
        return (
            f"{self.config.base_url.rstrip('/')}/content/groups/{self.config.repository}"
            f"/{group_path}/{coordinate.artifact_id}/{METADATA_FILE}"
        )


_BACKENDS: dict[str, type[MetadataRepository]] = {
    MAVEN_CENTRAL: MavenCentralRepository,
    NEXUS: NexusRepository,
}


def create_repository_service(
    config: RepositoryConfig, client: httpx.Client | None = None
) -> MetadataRepository:
    """Create the lookup backend matching `config.repository_type`.

    Raises:
        UnknownRepositoryError: If no backend matches the configured type.
        ConfigurationError: If the configuration is invalid.
    """
    backend = _BACKENDS.get(config.repository_type)
    if backend is None:
        logger.error("No repository service found for type %s", config.repository_type)
        raise UnknownRepositoryError(
            f"No repository service found for type: {config.repository_type} "
            f"(expected one of: {', '.join(sorted(_BACKENDS))})"
        )
    config.validate()
    logger.info("Using %s for version lookups", backend.__name__)
    return backend(config, client)
