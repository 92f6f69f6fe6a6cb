"""Configuration for repository lookups and local persistence.

Configuration is read from environment variables.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from pom_guard.exceptions import ConfigurationError

MAVEN_CENTRAL = "maven_central"
NEXUS = "nexus"
MAVEN_CENTRAL_URL = "https://repo1.maven.org/maven2"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass
class RepositoryConfig:
    """Version lookup backend configuration.

    Attributes:
        repository_type: Either "maven_central" or "nexus"
        base_url: Repository base URL
        username: Nexus user (nexus only)
        password: Nexus password (nexus only)
        repository: Nexus repository group name (nexus only)
        connect_timeout: Seconds to wait for a connection
        read_timeout: Seconds to wait for a response
        workers: Maximum number of concurrent lookups
    """

    repository_type: str = MAVEN_CENTRAL
    base_url: str = MAVEN_CENTRAL_URL

    # Nexus config
    username: str | None = None
    password: str | None = None
    repository: str | None = None

    connect_timeout: float = 5.0
    read_timeout: float = 10.0
    workers: int = 8

    @classmethod
    def from_env(cls) -> "RepositoryConfig":
        """Create configuration from environment variables.

        Environment variables:
            POMGUARD_REPOSITORY_TYPE: "maven_central" or "nexus" (default: "maven_central")
            POMGUARD_REPOSITORY_URL: Repository base URL (default: Maven Central)
            POMGUARD_NEXUS_USERNAME: Nexus user
            POMGUARD_NEXUS_PASSWORD: Nexus password
            POMGUARD_NEXUS_REPOSITORY: Nexus repository group
            POMGUARD_CONNECT_TIMEOUT: Connection timeout in seconds (default: 5)
            POMGUARD_READ_TIMEOUT: Read timeout in seconds (default: 10)
            POMGUARD_LOOKUP_WORKERS: Concurrent lookups (default: 8)
        """
        return cls(
            repository_type=os.getenv("POMGUARD_REPOSITORY_TYPE", MAVEN_CENTRAL).strip().lower(),
            base_url=os.getenv("POMGUARD_REPOSITORY_URL", MAVEN_CENTRAL_URL).rstrip("/"),
            username=os.getenv("POMGUARD_NEXUS_USERNAME"),
            password=os.getenv("POMGUARD_NEXUS_PASSWORD"),
            repository=os.getenv("POMGUARD_NEXUS_REPOSITORY"),
            connect_timeout=_env_float("POMGUARD_CONNECT_TIMEOUT", 5.0),
            read_timeout=_env_float("POMGUARD_READ_TIMEOUT", 10.0),
            workers=_env_int("POMGUARD_LOOKUP_WORKERS", 8),
        )

    def validate(self) -> None:
        """Validate the configuration.

        Raises:
            ConfigurationError: If required configuration is missing.
        """
        if not self.base_url.startswith(("http://", "https://")):
            raise ConfigurationError("Base URL must start with http:// or https://")
        if self.connect_timeout <= 0 or self.read_timeout <= 0:
            raise ConfigurationError("Timeouts must be positive")
        if self.workers < 1:
            raise ConfigurationError("POMGUARD_LOOKUP_WORKERS must be at least 1")
        if self.repository_type == NEXUS:
            if not self.username:
                raise ConfigurationError("POMGUARD_NEXUS_USERNAME is required for Nexus")
            if not self.password:
                raise ConfigurationError("POMGUARD_NEXUS_PASSWORD is required for Nexus")
            if not self.repository:
                raise ConfigurationError("POMGUARD_NEXUS_REPOSITORY is required for Nexus")


@dataclass
class DatabaseConfig:
    """SQLite database configuration."""

    sqlite_path: Path = Path("dependencies.db")

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        """Read POMGUARD_DB_PATH (default: "dependencies.db")."""
        return cls(sqlite_path=Path(os.getenv("POMGUARD_DB_PATH", "dependencies.db")).resolve())
