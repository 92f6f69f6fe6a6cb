"""Parse Maven pom.xml files using lxml.

The parser returns the descriptor exactly as declared: no inheritance and no
placeholder substitution. Both happen later in `pom_guard.forest`.
"""

from __future__ import annotations

import logging
from pathlib import Path

from lxml import etree

from pom_guard.exceptions import DescriptorModelError, DescriptorNotFoundError, DescriptorParseError
from pom_guard.models import DEFAULT_PARENT_PATH, Dependency, ParentReference, Project

logger = logging.getLogger(__name__)

_PROJECT = "/*[local-name()='project']"
POM_FILE_NAME = "pom.xml"


def _text_first(node: etree._Element, xpath_expr: str) -> str | None:
    """Get text of the first matching element using namespace-agnostic XPath.

    Args:
        node: Root element to query under.
        xpath_expr: XPath expression (should use local-name()).

    Returns:
        Text content if found and non-empty, otherwise None.
    """
    found = node.xpath(xpath_expr)
    if not found:
        return None
    first = found[0]
    if isinstance(first, etree._Element):
        text = (first.text or "").strip()
        return text or None
    if isinstance(first, str):
        text = first.strip()
        return text or None
    return None


def _bool_text(value: str | None) -> bool | None:
    """Convert Maven boolean-ish text to bool.

    Args:
        value: String like 'true'/'false' or None.

    Returns:
        True/False for recognized values, otherwise None.
    """
    if value is None:
        return None
    v = value.strip().lower()
    if v == "true":
        return True
    if v == "false":
        return False
    return None


def _parse_xml(path: Path, relative_path: str | None = None) -> etree._Element:
    """Parse an XML file and return its root element.

    Args:
        path: Path to the pom.xml file.
        relative_path: Path reported in errors; defaults to `path`.

    Raises:
        DescriptorNotFoundError: If the file does not exist.
        DescriptorParseError: If XML cannot be parsed.

    Returns:
        Root XML element.
    """
    label = relative_path or str(path)
    if not path.is_file():
        raise DescriptorNotFoundError(f"pom.xml not found: {path}", label)
    try:
        parser = etree.XMLParser(resolve_entities=False, no_network=True, recover=False)
        tree = etree.parse(str(path), parser=parser)
        return tree.getroot()
    except (OSError, etree.XMLSyntaxError) as exc:
        raise DescriptorParseError(f"Failed to parse pom.xml: {path}", label) from exc


def _parse_properties(root: etree._Element) -> dict[str, str]:
    props: dict[str, str] = {}
    nodes = root.xpath(f"{_PROJECT}/*[local-name()='properties']/*")
    for n in nodes:
        if not isinstance(n, etree._Element):
            continue
        key = etree.QName(n).localname
        if key:
            props[key] = (n.text or "").strip()
    return props


def _parse_dependencies(root: etree._Element, xpath_expr: str) -> list[Dependency]:
    deps: list[Dependency] = []
    for dep in root.xpath(xpath_expr):
        group_id = _text_first(dep, "./*[local-name()='groupId']")
        artifact_id = _text_first(dep, "./*[local-name()='artifactId']")
        if group_id is None or artifact_id is None:
            logger.debug("Skipping dependency without groupId/artifactId")
            continue
        deps.append(
            Dependency(
                group_id=group_id,
                artifact_id=artifact_id,
                version=_text_first(dep, "./*[local-name()='version']"),
                scope=_text_first(dep, "./*[local-name()='scope']"),
                optional=_bool_text(_text_first(dep, "./*[local-name()='optional']")),
                type=_text_first(dep, "./*[local-name()='type']"),
            )
        )
    return deps


def _parse_parent(root: etree._Element) -> ParentReference | None:
    nodes = root.xpath(f"{_PROJECT}/*[local-name()='parent']")
    if not nodes:
        return None
    node = nodes[0]
    return ParentReference(
        group_id=_text_first(node, "./*[local-name()='groupId']"),
        artifact_id=_text_first(node, "./*[local-name()='artifactId']"),
        version=_text_first(node, "./*[local-name()='version']"),
        relative_path=_text_first(node, "./*[local-name()='relativePath']") or DEFAULT_PARENT_PATH,
    )


def _parse_modules(root: etree._Element) -> list[str]:
    modules: list[str] = []
    for n in root.xpath(f"{_PROJECT}/*[local-name()='modules']/*[local-name()='module']"):
        text = (n.text or "").strip()
        if text:
            modules.append(text)
    return modules


def parse_pom(path: str | Path, relative_path: str | None = None) -> Project:
    """Parse a Maven pom.xml into an unresolved `Project`.

    Notes:
        - Namespace handling: uses `local-name()` XPath so it works with or without XML namespaces.
        - groupId/version stay None when only the parent declares them.
        - Placeholders like `${...}` are kept verbatim.

    Args:
        path: Path to a pom.xml.
        relative_path: Path recorded on the project and in error messages.

    Raises:
        DescriptorNotFoundError: If the file does not exist.
        DescriptorParseError: If the XML is malformed.
        DescriptorModelError: If required fields are missing.

    Returns:
        A `Project` with declared coordinates, properties, dependencies and modules.
    """
    pom_path = Path(path)
    label = relative_path or pom_path.name
    root = _parse_xml(pom_path, label)

    if etree.QName(root).localname != "project":
        raise DescriptorParseError(f"Root element is not <project>: {pom_path}", label)

    artifact_id = _text_first(root, f"{_PROJECT}/*[local-name()='artifactId']")
    if artifact_id is None:
        raise DescriptorModelError(f"Missing required <artifactId> in {pom_path}", label)

    return Project(
        group_id=_text_first(root, f"{_PROJECT}/*[local-name()='groupId']"),
        artifact_id=artifact_id,
        version=_text_first(root, f"{_PROJECT}/*[local-name()='version']"),
        packaging=_text_first(root, f"{_PROJECT}/*[local-name()='packaging']"),
        name=_text_first(root, f"{_PROJECT}/*[local-name()='name']"),
        relative_path=label,
        properties=_parse_properties(root),
        dependencies=_parse_dependencies(
            root,
            f"{_PROJECT}/*[local-name()='dependencies']/*[local-name()='dependency']",
        ),
        managed_dependencies=_parse_dependencies(
            root,
            f"{_PROJECT}/*[local-name()='dependencyManagement']"
            "/*[local-name()='dependencies']/*[local-name()='dependency']",
        ),
        modules=_parse_modules(root),
        parent=_parse_parent(root),
    )


class PomLoader:
    """Load pom.xml descriptors from the local file system.

    A module path naming a directory resolves to the `pom.xml` inside it.
    """

    def load(self, base_dir: Path, relative_path: str) -> Project:
        target = Path(base_dir) / relative_path
        if target.is_dir():
            target = target / POM_FILE_NAME
            relative_path = f"{relative_path.rstrip('/')}/{POM_FILE_NAME}"
        logger.debug("Loading descriptor %s", target)
        return parse_pom(target, relative_path)
