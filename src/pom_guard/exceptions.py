"""Custom exceptions for POM Guard."""

from __future__ import annotations


class PomGuardError(Exception):
    """Base exception for POM Guard."""


class DescriptorError(PomGuardError):
    """Base for failures while loading a project descriptor.

    The offending relative path is kept so forest-level failures can point at
    the module that broke the build.
    """

    def __init__(self, message: str, relative_path: str | None = None) -> None:
        super().__init__(message)
        self.relative_path = relative_path

    def __str__(self) -> str:
        message = super().__str__()
        if self.relative_path and self.relative_path not in message:
            return f"{message} (module: {self.relative_path})"
        return message


class DescriptorNotFoundError(DescriptorError):
    """Raised when a pom.xml file cannot be found."""


class DescriptorParseError(DescriptorError):
    """Raised when a pom.xml file cannot be parsed."""


class DescriptorModelError(DescriptorError):
    """Raised when required Maven model fields are missing or invalid."""


class UnknownRepositoryError(PomGuardError):
    """Raised when no version lookup backend matches the configured type."""


class ConfigurationError(PomGuardError):
    """Raised when environment configuration is missing or invalid."""
