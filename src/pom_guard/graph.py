from __future__ import annotations

from collections.abc import Iterable

import networkx as nx

from pom_guard.db_models import DependencyEdge
from pom_guard.forest import Forest


def build_graph(forest: Forest) -> nx.DiGraph:
    """Build a directed graph where A -> B means A depends on B.

    Modules also point at their parent with `kind="parent"` edges. Dependency
    nodes use the resolved `group:artifact:version` id.
    """
    g = nx.DiGraph()
    for proj in forest:
        a = proj.compact()
        g.add_node(a, module=True, relative_path=proj.relative_path)
        for dep in proj.dependencies:
            b = dep.compact()
            if not g.has_node(b):
                g.add_node(b, module=False)
            g.add_edge(a, b, kind="dependency", scope=dep.scope, optional=dep.optional)
        if proj.parent is not None:
            parent = forest.parent_of(proj)
            p = parent.compact() if parent is not None else proj.parent.compact()
            if not g.has_node(p):
                g.add_node(p, module=False)
            g.add_edge(a, p, kind="parent", scope="parent", optional=None)
    return g


def graph_from_edges(edges: Iterable[DependencyEdge]) -> nx.DiGraph:
    """Rebuild the declaration graph from persisted edges."""
    g = nx.DiGraph()
    for e in edges:
        g.add_edge(e.from_gav, e.to_gav, kind=e.kind, scope=e.scope, optional=e.optional)
    return g


def reverse_dependencies(g: nx.DiGraph, target_gav: str) -> list[str]:
    """Return predecessors of target_gav (who depends on it)."""
    if target_gav not in g:
        return []
    return sorted(list(g.predecessors(target_gav)))
