from __future__ import annotations

from pathlib import Path

import networkx as nx
from pyvis.network import Network


def export_pyvis(g: nx.DiGraph, out: Path, height: str = "800px") -> Path:
    """Write an interactive HTML view of `g`; modules are drawn as boxes."""
    net = Network(height=height, width="100%", directed=True)
    for node, data in g.nodes(data=True):
        net.add_node(node, label=node, shape="box" if data.get("module") else "dot")
    for u, v, data in g.edges(data=True):
        net.add_edge(u, v, title=data.get("scope") or "compile", dashes=data.get("kind") == "parent")
    out.parent.mkdir(parents=True, exist_ok=True)
    net.write_html(str(out))
    return out
