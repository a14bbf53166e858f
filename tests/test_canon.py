"""Tests for flattening, dedup and single-member collapse."""

from __future__ import annotations

import pytest

from grapl.canon import canon, canonicalize, is_canonical
from grapl.expr import Connected, Disconnected, VarRef, Vertex
from grapl.parser import parse_expr

A = Vertex("A")
B = Vertex("B")
C = Vertex("C")


@pytest.mark.parametrize(
    "text, expected",
    [
        ("A", A),
        ("{A}", A),
        ("[[A]]", A),
        ("{[A]}", A),
        ("{A, A}", A),
        ("{{A, B}, C}", Connected(frozenset({A, B, C}))),
        ("[[A, B], C]", Disconnected(frozenset({A, B, C}))),
        ("[A, [{B, C}]]", Disconnected(frozenset({A, Connected(frozenset({B, C}))}))),
        ("{A, {B, {C}}}", Connected(frozenset({A, B, C}))),
    ],
)
def test_canonicalize(text: str, expected) -> None:
    assert canonicalize(parse_expr(text)) == expected


def test_mixed_operators_are_not_flattened() -> None:
    """Only same-operator nesting is spliced into the parent."""
    expr = canonicalize(parse_expr("{A, [B, C]}"))
    assert expr == Connected(frozenset({A, Disconnected(frozenset({B, C}))}))


def test_collapse_can_expose_flattening() -> None:
    """`{A, [{B, C}]}` collapses the union and then merges the cliques."""
    assert canonicalize(parse_expr("{A, [{B, C}]}")) == Connected(frozenset({A, B, C}))


def test_dedup_after_flatten() -> None:
    assert canonicalize(parse_expr("{A, {A, B}}")) == Connected(frozenset({A, B}))


def test_references_are_kept() -> None:
    expr = Connected(frozenset({VarRef("G"), Connected(frozenset({A}))}))
    assert canonicalize(expr) == Connected(frozenset({VarRef("G"), A}))


def test_idempotent() -> None:
    expr = canonicalize(parse_expr("[{A, {B, [C]}}, [[A]], {C, B, A}]"))
    assert canonicalize(expr) == expr
    assert canon is canonicalize


def test_is_canonical() -> None:
    assert is_canonical(A)
    assert is_canonical(parse_expr("{A, [B, C]}"))
    assert not is_canonical(parse_expr("{A}"))
    assert not is_canonical(parse_expr("{A, {B, C}}"))
    assert not is_canonical(parse_expr("[A, [B, {C}]]"))
    assert is_canonical(canonicalize(parse_expr("[A, [B, {C}]]")))
