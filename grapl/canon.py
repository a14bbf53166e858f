"""Local simplification of graph expressions.

Three rewrites are applied bottom-up until none matches:

- ``{{A, B}, C} => {A, B, C}`` and ``[[A, B], C] => [A, B, C]`` (flatten)
- ``{A, A} => {A}`` (dedup, implied by the member set)
- ``{A} => A`` and ``[A] => A`` (single-member groups collapse)

The result is idempotent: canonicalizing a canonical tree returns an equal
tree.
"""

from __future__ import annotations

from grapl.expr import GROUP_TYPES, GraphExpr


def canonicalize(expr: GraphExpr) -> GraphExpr:
    """Return the canonical form of ``expr``.

    Args:
        expr: Any expression, possibly containing variable references.

    Returns:
        An equivalent expression with no same-operator nesting and no
        single-member groups.
    """
    if not isinstance(expr, GROUP_TYPES):
        return expr

    kind = type(expr)
    members = set()
    for child in expr.members:
        child = canonicalize(child)
        if type(child) is kind:
            members.update(child.members)
        else:
            members.add(child)

    if len(members) == 1:
        return members.pop()
    return kind(frozenset(members))


def is_canonical(expr: GraphExpr) -> bool:
    """Check that no rewrite of :func:`canonicalize` applies anywhere."""
    if not isinstance(expr, GROUP_TYPES):
        return True
    if len(expr.members) < 2:
        return False
    return all(
        type(member) is not type(expr) and is_canonical(member)
        for member in expr.members
    )


canon = canonicalize

__all__ = ["canon", "canonicalize", "is_canonical"]
