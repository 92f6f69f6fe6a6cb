"""Resolve Maven `${...}` property placeholders.

Resolution is best-effort: unknown names, circular definitions and overly deep
chains leave the original placeholder text in the output instead of raising.
Callers treat a result that still contains `${` as unresolved.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping

from pom_guard.models import Project

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"\$\{([^}]+)\}")

MAX_RESOLUTION_DEPTH = 10

# Built-in names that read straight from the project model.
_BUILTIN_FIELDS: dict[str, str] = {
    "project.version": "version",
    "project.groupId": "group_id",
    "project.artifactId": "artifact_id",
    "project.name": "name",
    "project.packaging": "packaging",
}


class _CircularReference(Exception):
    """Raised inside an expansion that reaches a name already being expanded."""


def is_placeholder(value: str | None) -> bool:
    """Return True when `value` contains at least one `${...}` placeholder."""
    return value is not None and _PLACEHOLDER_RE.search(value) is not None


def is_resolved(value: str | None) -> bool:
    """Return True when no placeholder text is left in `value`."""
    return value is None or "${" not in value


def _placeholders(value: str) -> Iterator[tuple[int, int, str]]:
    """Yield `(start, end, name)` for each top-level placeholder in `value`.

    Braces are balanced so `${project.${other}.version}` is one placeholder
    whose name still carries the inner `${other}`. An unterminated `${` ends
    the scan and the remainder is literal text.
    """
    pos = 0
    while True:
        start = value.find("${", pos)
        if start < 0:
            return
        depth = 0
        i = start
        end = -1
        while i < len(value):
            if value.startswith("${", i):
                depth += 1
                i += 2
                continue
            if value[i] == "}":
                depth -= 1
                if depth == 0:
                    end = i
                    break
            i += 1
        if end < 0:
            return
        yield start, end + 1, value[start + 2 : end]
        pos = end + 1


class PropertyResolver:
    """Placeholder resolver bound to one project and its visible properties.

    Names are looked up first among the built-in `project.*` fields, then in
    the property map. The property map defaults to the project's effective
    properties (ancestors overlaid by the project's own declarations).
    """

    def __init__(
        self,
        project: Project,
        properties: Mapping[str, str] | None = None,
        *,
        max_depth: int = MAX_RESOLUTION_DEPTH,
    ) -> None:
        self.project = project
        self.properties = properties if properties is not None else project.scope_properties()
        self.max_depth = max_depth

    def resolve(self, value: str | None) -> str | None:
        if value is None or not is_placeholder(value):
            return value
        return self._resolve(value, 0, ())

    def _resolve(self, value: str, depth: int, chain: tuple[str, ...]) -> str:
        if depth > self.max_depth:
            logger.debug("Resolution depth exceeded for %r", value)
            return value

        out: list[str] = []
        pos = 0
        for start, end, name in _placeholders(value):
            out.append(value[pos:start])
            token = value[start:end]
            replacement = self._substitute(name, depth, chain)
            out.append(token if replacement is None else replacement)
            pos = end
        out.append(value[pos:])
        return "".join(out)

    def _substitute(self, name: str, depth: int, chain: tuple[str, ...]) -> str | None:
        if "${" in name:
            # Inner placeholders first; a name that stays unknown afterwards
            # leaves the whole outer placeholder untouched.
            name = self._resolve(name, depth + 1, chain)
            if not is_resolved(name):
                return None
        return self._lookup(name, depth, chain)

    def _lookup(self, name: str, depth: int, chain: tuple[str, ...]) -> str | None:
        if name in chain:
            raise _CircularReference(" -> ".join((*chain, name)))
        try:
            return self._find(name, depth, chain)
        except _CircularReference as exc:
            if chain:
                raise
            # The outermost name keeps its placeholder; no partial expansion leaks out.
            logger.debug("Circular property reference: %s", exc)
            return None

    def _find(self, name: str, depth: int, chain: tuple[str, ...]) -> str | None:
        field = _BUILTIN_FIELDS.get(name)
        if field is not None:
            builtin = getattr(self.project, field)
            if builtin is not None:
                return self._expand(name, builtin, depth, chain)

        found = self.properties.get(name)
        if found is None:
            logger.debug("Property %s not found for %s", name, self.project.artifact_id)
            return None
        return self._expand(name, found, depth, chain)

    def _expand(self, name: str, found: str, depth: int, chain: tuple[str, ...]) -> str:
        if not is_placeholder(found):
            return found
        return self._resolve(found, depth + 1, (*chain, name))


def resolve(value: str | None, project: Project) -> str | None:
    """Resolve placeholders in `value` against `project`.

    Args:
        value: Raw string, possibly containing `${name}` placeholders.
        project: Project providing built-ins and the property scope.

    Returns:
        The substituted string; unknown or circular placeholders are kept verbatim.
    """
    return PropertyResolver(project).resolve(value)


def merge_properties(
    inherited: Mapping[str, str] | None, declared: Mapping[str, str]
) -> dict[str, str]:
    """Overlay `declared` on `inherited`; the project's own declaration wins."""
    merged: dict[str, str] = dict(inherited or {})
    merged.update(declared)
    return merged
