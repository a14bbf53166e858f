"""Graph semantics of expressions and export for external renderers.

The vertex and edge sets are computed straight from the expression tree,
without normalizing first, which makes them a useful oracle: normalizing
an expression must never change either set.

Rendering itself is left to Graphviz; this module only produces the DOT,
edge-list or node-link JSON description it consumes.
"""

from __future__ import annotations

import json
import logging
from itertools import combinations
from pathlib import Path
from typing import FrozenSet, List, Set, Tuple

import networkx as nx
from networkx.drawing.nx_pydot import to_pydot, write_dot

from grapl.errors import UndefinedVariable
from grapl.expr import Connected, GraphExpr, VarRef, Vertex

logger = logging.getLogger("grapl.export")

Edge = Tuple[str, str]


def _edge(a: str, b: str) -> Edge:
    return (a, b) if a < b else (b, a)


def _collect(expr: GraphExpr) -> Tuple[FrozenSet[str], Set[Edge]]:
    if isinstance(expr, Vertex):
        return frozenset({expr.name}), set()
    if isinstance(expr, VarRef):
        raise UndefinedVariable(expr.name)

    parts = [_collect(member) for member in expr.members]
    names = frozenset().union(*(part_names for part_names, _ in parts))
    found: Set[Edge] = set().union(*(part_edges for _, part_edges in parts))
    if isinstance(expr, Connected):
        for (left, _), (right, _) in combinations(parts, 2):
            found.update(_edge(a, b) for a in left for b in right if a != b)
    return names, found


def vertices(expr: GraphExpr) -> FrozenSet[str]:
    """Return the names of every vertex in a reference-free expression."""
    return _collect(expr)[0]


def edges(expr: GraphExpr) -> FrozenSet[Edge]:
    """Return the undirected edges of a reference-free expression.

    Each edge is a pair of distinct names in sorted order.
    """
    return frozenset(_collect(expr)[1])


def to_networkx(expr: GraphExpr) -> nx.Graph:
    """Build an undirected networkx graph for a reference-free expression.

    Nodes and edges are inserted in sorted order so that every export of
    the same graph is byte-identical.
    """
    names, graph_edges = _collect(expr)
    graph = nx.Graph()
    graph.add_nodes_from(sorted(names))
    graph.add_edges_from(sorted(graph_edges))
    return graph


def edge_list(expr: GraphExpr) -> str:
    """Describe the graph as text, one ``A B`` line per edge.

    Vertices without edges appear alone on their own line. Lines are sorted.
    """
    graph = to_networkx(expr)
    lines: List[str] = [f"{a} {b}" for a, b in (_edge(u, v) for u, v in graph.edges())]
    lines.extend(node for node in graph.nodes() if graph.degree(node) == 0)
    lines.sort()
    return "".join(f"{line}\n" for line in lines)


def to_dot(expr: GraphExpr) -> str:
    """Return a Graphviz DOT description of the graph."""
    return to_pydot(to_networkx(expr)).to_string()


def export_dot(expr: GraphExpr, output_path: Path) -> None:
    """Export graph to DOT format.

    Args:
        expr: Reference-free expression, typically a normal form.
        output_path: Output file path.
    """
    logger.info("Exporting graph to DOT: %s", output_path)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    graph = to_networkx(expr)
    write_dot(graph, str(output_path))

    logger.info("DOT export completed: %d nodes, %d edges",
                graph.number_of_nodes(), graph.number_of_edges())


def export_json(expr: GraphExpr, output_path: Path) -> None:
    """Export graph to node-link JSON format.

    Args:
        expr: Reference-free expression, typically a normal form.
        output_path: Output file path.
    """
    logger.info("Exporting graph to JSON: %s", output_path)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    graph = to_networkx(expr)
    data = nx.readwrite.json_graph.node_link_data(graph, edges="edges")

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)

    logger.info("JSON export completed: %d nodes, %d edges",
                graph.number_of_nodes(), graph.number_of_edges())


__all__ = [
    "Edge",
    "edge_list",
    "edges",
    "export_dot",
    "export_json",
    "to_dot",
    "to_networkx",
    "vertices",
]
