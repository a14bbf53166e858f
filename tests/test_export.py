"""Tests for graph semantics and the export formats."""

from __future__ import annotations

import json
from pathlib import Path

import networkx as nx
import pytest

from grapl.errors import UndefinedVariable
from grapl.expr import Connected, VarRef, Vertex
from grapl.export import (
    edge_list,
    edges,
    export_dot,
    export_json,
    to_dot,
    to_networkx,
    vertices,
)
from grapl.normal import normalize
from grapl.parser import parse_expr


def test_vertices_and_edges() -> None:
    expr = parse_expr("{A, [B, C]}")
    assert vertices(expr) == {"A", "B", "C"}
    assert edges(expr) == {("A", "B"), ("A", "C")}


def test_union_adds_no_edges() -> None:
    assert edges(parse_expr("[A, B, {C, D}]")) == {("C", "D")}


def test_clique_of_cliques_joins_everything() -> None:
    expr = parse_expr("{{A, B}, C}")
    assert edges(expr) == {("A", "B"), ("A", "C"), ("B", "C")}


def test_repeated_vertex_has_no_self_loop() -> None:
    assert edges(parse_expr("{A, [A, B]}")) == {("A", "B")}


@pytest.mark.parametrize(
    "text",
    [
        "{S, [A, B, C, D]}",
        "{[A, B], [X, Y]}",
        "{A, [{B, C}, D], E, [F, G]}",
        "{A, [A, B], [B, C]}",
    ],
)
def test_normalization_preserves_graph(text: str) -> None:
    expr = parse_expr(text)
    result = normalize(expr)
    assert vertices(result) == vertices(expr)
    assert edges(result) == edges(expr)


def test_reference_is_rejected() -> None:
    with pytest.raises(UndefinedVariable):
        edges(Connected(frozenset({Vertex("A"), VarRef("G")})))


def test_edge_list() -> None:
    assert edge_list(normalize(parse_expr("[{A, B}, C]"))) == "A B\nC\n"
    assert edge_list(normalize(parse_expr("{C, [B, A]}"))) == "A C\nB C\n"


def test_to_networkx() -> None:
    graph = to_networkx(normalize(parse_expr("[{A, B, C}, D]")))
    assert isinstance(graph, nx.Graph)
    assert sorted(graph.nodes()) == ["A", "B", "C", "D"]
    assert graph.number_of_edges() == 3
    assert graph.degree("D") == 0


def test_to_dot() -> None:
    dot = to_dot(parse_expr("{A, B}"))
    assert "A -- B" in dot


def test_export_dot(tmp_path: Path) -> None:
    output = tmp_path / "out" / "graph.dot"
    export_dot(parse_expr("[{A, B}, C]"), output)

    text = output.read_text(encoding="utf-8")
    assert "--" in text
    assert "C" in text


def test_export_json(tmp_path: Path) -> None:
    output = tmp_path / "graph.json"
    export_json(normalize(parse_expr("{S, [A, B]}")), output)

    data = json.loads(output.read_text(encoding="utf-8"))
    assert {node["id"] for node in data["nodes"]} == {"A", "B", "S"}
    pairs = {tuple(sorted((e["source"], e["target"]))) for e in data["edges"]}
    assert pairs == {("A", "S"), ("B", "S")}
