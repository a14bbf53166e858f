"""Canonical comparison and deterministic text output for normal forms.

A normal form is viewed as a set of cliques, each clique a set of vertex
names (a bare vertex is a clique of one). Ordering is computed here and
nowhere else: names are sorted inside each clique and cliques are sorted
by their name sequence, so two equal normal forms always serialize to the
same text, whatever order their members were built in.
"""

from __future__ import annotations

from typing import FrozenSet, Tuple

from grapl.expr import Connected, Disconnected, GraphExpr, Vertex
from grapl.normal import is_normal_form

Clique = Tuple[str, ...]


def _terms(expr: GraphExpr) -> FrozenSet[FrozenSet[str]]:
    if not is_normal_form(expr):
        raise ValueError(f"Expression is not in normal form: {expr}")
    if isinstance(expr, Disconnected):
        members = expr.members
    else:
        members = frozenset({expr})
    return frozenset(_names(member) for member in members)


def _names(term: GraphExpr) -> FrozenSet[str]:
    if isinstance(term, Vertex):
        return frozenset({term.name})
    assert isinstance(term, Connected)
    return frozenset(member.name for member in term.members)


def cliques(expr: GraphExpr) -> Tuple[Clique, ...]:
    """Return the cliques of a normal form in deterministic order.

    Args:
        expr: Normal form.

    Returns:
        Tuple of sorted name tuples, sorted lexicographically.

    Raises:
        ValueError: If ``expr`` is not a normal form.
    """
    return tuple(sorted(tuple(sorted(term)) for term in _terms(expr)))


def equal(a: GraphExpr, b: GraphExpr) -> bool:
    """Compare two normal forms as sets of vertex-name sets.

    Raises:
        ValueError: If either argument is not a normal form.
    """
    return _terms(a) == _terms(b)


def _format_clique(clique: Clique) -> str:
    if len(clique) == 1:
        return clique[0]
    return "{" + ", ".join(clique) + "}"


def serialize(expr: GraphExpr) -> str:
    """Render a normal form as deterministic text in the input notation.

    ``[{A, B}, {A, C}, D]`` for a union, ``{A, B}`` for a lone clique and
    ``A`` for a lone vertex. The output parses back to an equal expression.

    Raises:
        ValueError: If ``expr`` is not a normal form.
    """
    rendered = [_format_clique(clique) for clique in cliques(expr)]
    if len(rendered) == 1:
        return rendered[0]
    return "[" + ", ".join(rendered) + "]"


__all__ = ["Clique", "cliques", "equal", "serialize"]
