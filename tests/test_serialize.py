"""Tests for normal-form comparison and deterministic output."""

from __future__ import annotations

import pytest

from grapl.canon import canonicalize
from grapl.expr import Vertex
from grapl.normal import normalize
from grapl.parser import parse_expr
from grapl.serialize import cliques, equal, serialize


def norm(text: str):
    return normalize(parse_expr(text))


@pytest.mark.parametrize(
    "text, output",
    [
        ("A", "A"),
        ("{B, A}", "{A, B}"),
        ("[D, B, {C, A}]", "[{A, C}, B, D]"),
        ("{S, [A, B]}", "[{A, S}, {B, S}]"),
        ("{[Y, X], [B, A]}", "[{A, X}, {A, Y}, {B, X}, {B, Y}]"),
        ("[{A, B, C}, {A, B}, A]", "[A, {A, B}, {A, B, C}]"),
    ],
)
def test_serialize(text: str, output: str) -> None:
    assert serialize(norm(text)) == output


def test_reordered_inputs_serialize_identically() -> None:
    outputs = {
        serialize(norm(text))
        for text in (
            "{[A, B], [X, Y]}",
            "{[Y, X], [B, A]}",
            "{[X, Y], {[B, A]}}",
            "[{A, X}, {B, Y}, {A, Y}, {B, X}]",
        )
    }
    assert outputs == {"[{A, X}, {A, Y}, {B, X}, {B, Y}]"}


def test_serialized_text_parses_back() -> None:
    result = norm("{A, [{B, C}, D], E, [F, G]}")
    assert norm(serialize(result)) == result


def test_cliques() -> None:
    assert cliques(norm("{S, [A, B]}")) == (("A", "S"), ("B", "S"))
    assert cliques(Vertex("A")) == (("A",),)


def test_equal_ignores_member_order() -> None:
    assert equal(norm("{S,[A,B,C,D]}"), norm("[{S,D},{S,C},{S,B},{S,A}]"))
    assert not equal(norm("{A, B}"), norm("[A, B]"))


def test_rejects_expressions_not_in_normal_form() -> None:
    raw = canonicalize(parse_expr("{A, [B, C]}"))
    with pytest.raises(ValueError):
        serialize(raw)
    with pytest.raises(ValueError):
        equal(raw, Vertex("A"))
