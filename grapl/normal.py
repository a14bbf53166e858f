"""Reduction of graph expressions to normal form.

The normal form is a union of cliques: a ``Disconnected`` whose members
are vertices or ``Connected`` groups of vertices (or just one such member
when the union has a single term).

Besides the canonical rewrites (see :mod:`grapl.canon`) there is one rule,
the distributive law. A clique containing unions is replaced by the union
of cliques formed from every combination of one member per union::

    {S, [A, B]}          => [{S, A}, {S, B}]
    {[A, B], [X, Y]}     => [{A, X}, {A, Y}, {B, X}, {B, Y}]
    {A, [{B, C}, D], E}  => [{A, B, C, E}, {A, D, E}]

Each rewrite removes the unions below a clique and places the new union
above it, so the number of ``Disconnected`` nodes nested under a
``Connected`` strictly decreases (see :func:`nesting_measure`) and the
process terminates. Distribution over independent unions commutes, so the
result does not depend on rewrite order.
"""

from __future__ import annotations

import logging
import sys
from itertools import product
from math import prod
from typing import List, Optional

from grapl.canon import canonicalize
from grapl.config import NormalizerConfig
from grapl.errors import ResourceLimitExceeded, UndefinedVariable
from grapl.expr import Connected, Disconnected, GraphExpr, VarRef, Vertex

logger = logging.getLogger("grapl.normal")


class Normalizer:
    """Rewrites expressions to normal form under a size guard.

    Attributes:
        config: Size guard applied to each distributive expansion.
        rewrites: Number of distributive rewrites applied so far.
    """

    def __init__(self, config: Optional[NormalizerConfig] = None) -> None:
        self.config = config or NormalizerConfig()
        self.rewrites = 0

    def normalize(self, expr: GraphExpr) -> GraphExpr:
        """Return the normal form of a reference-free expression.

        Raises:
            UndefinedVariable: If ``expr`` still contains a reference.
            ResourceLimitExceeded: If an expansion exceeds ``max_nodes`` or
                the tree is too deep to walk.
        """
        try:
            result = self._normalize(canonicalize(expr))
        except RecursionError as exc:
            raise ResourceLimitExceeded("recursion", sys.getrecursionlimit()) from exc
        logger.debug("Normalized expression with %d rewrite(s)", self.rewrites)
        return result

    def _normalize(self, expr: GraphExpr) -> GraphExpr:
        if isinstance(expr, Vertex):
            return expr
        if isinstance(expr, VarRef):
            raise UndefinedVariable(expr.name)

        members = frozenset(self._normalize(member) for member in expr.members)
        node = canonicalize(type(expr)(members))
        if isinstance(node, Connected) and any(
            isinstance(member, Disconnected) for member in node.members
        ):
            node = self._distribute(node)
        return node

    def _distribute(self, node: Connected) -> GraphExpr:
        """Apply the distributive law to a clique of normalized members."""
        unions: List[Disconnected] = []
        rest: List[GraphExpr] = []
        for member in node.members:
            if isinstance(member, Disconnected):
                unions.append(member)
            else:
                rest.append(member)

        terms = prod(len(union.members) for union in unions)
        width = len(rest) + len(unions)
        if terms * (width + 1) > self.config.max_nodes:
            logger.warning(
                "Distribution of %d union(s) would produce %d cliques; aborting",
                len(unions),
                terms,
            )
            raise ResourceLimitExceeded("max_nodes", self.config.max_nodes)

        self.rewrites += 1
        cliques = [
            Connected(frozenset(rest).union(choice))
            for choice in product(*(union.members for union in unions))
        ]
        return canonicalize(Disconnected(frozenset(cliques)))


def normalize(expr: GraphExpr, config: Optional[NormalizerConfig] = None) -> GraphExpr:
    """Return the normal form of ``expr``.

    Args:
        expr: Expression without variable references.
        config: Size guard; defaults to ``NormalizerConfig()``.

    Raises:
        UndefinedVariable: If ``expr`` still contains a reference.
        ResourceLimitExceeded: If the expansion grows past the guard.
    """
    return Normalizer(config).normalize(expr)


def is_normal_form(expr: GraphExpr) -> bool:
    """Check the union-of-cliques shape."""
    if isinstance(expr, Vertex):
        return True
    if isinstance(expr, Connected):
        return len(expr.members) > 1 and all(
            isinstance(member, Vertex) for member in expr.members
        )
    if isinstance(expr, Disconnected):
        return len(expr.members) > 1 and all(
            isinstance(member, (Vertex, Connected)) and is_normal_form(member)
            for member in expr.members
        )
    return False


def nesting_measure(expr: GraphExpr, under_clique: bool = False) -> int:
    """Count ``Disconnected`` nodes that have a ``Connected`` ancestor.

    This is the quantity every distributive rewrite decreases; it is zero
    exactly when no clique contains a union.
    """
    if isinstance(expr, (Vertex, VarRef)):
        return 0
    own = 1 if isinstance(expr, Disconnected) and under_clique else 0
    below = under_clique or isinstance(expr, Connected)
    return own + sum(nesting_measure(member, below) for member in expr.members)


__all__ = [
    "Normalizer",
    "is_normal_form",
    "nesting_measure",
    "normalize",
]
