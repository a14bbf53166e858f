"""Graph expression data model.

Every expression is an immutable, hashable value. Group members are held
in a ``frozenset`` so member order never matters and structurally equal
members collapse into one occurrence. Structural equality is plain
dataclass equality, which makes ``Connected({A, B}) == Connected({B, A})``
while ``Connected({A}) != Disconnected({A})``.

    Vertex("A")                           A
    Connected({Vertex("A"), Vertex("B")}) {A, B}
    Disconnected({...})                   [A, B]
    VarRef("G")                           G (bound to a definition)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple, Union


@dataclass(frozen=True)
class Vertex:
    """A single graph node identified by its name."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class VarRef:
    """Reference to a named definition, replaced during resolution."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class _Group:
    """Shared behaviour of the two composition operators."""

    members: FrozenSet["GraphExpr"]

    open_delim = ""
    close_delim = ""

    def __post_init__(self) -> None:
        if not isinstance(self.members, frozenset):
            object.__setattr__(self, "members", frozenset(self.members))
        if not self.members:
            raise ValueError(f"{type(self).__name__} requires at least one member")

    def __str__(self) -> str:
        inner = ", ".join(sorted(str(member) for member in self.members))
        return f"{self.open_delim}{inner}{self.close_delim}"


@dataclass(frozen=True)
class Connected(_Group):
    """Clique: every member is joined to every other member."""

    open_delim = "{"
    close_delim = "}"


@dataclass(frozen=True)
class Disconnected(_Group):
    """Disjoint union: no edges cross between members."""

    open_delim = "["
    close_delim = "]"


GraphExpr = Union[Vertex, VarRef, Connected, Disconnected]
GROUP_TYPES = (Connected, Disconnected)


@dataclass(frozen=True)
class Definition:
    """Assignment statement binding ``name`` to ``body``."""

    name: str
    body: GraphExpr

    def __str__(self) -> str:
        return f"{self.name} = {self.body}"


@dataclass(frozen=True)
class Program:
    """Ordered definitions plus an optional target expression.

    Attributes:
        definitions: Assignments in source order.
        target: Expression to normalize and emit, if the program has one.
    """

    definitions: Tuple[Definition, ...] = field(default_factory=tuple)
    target: Optional[GraphExpr] = None

    def __post_init__(self) -> None:
        if not isinstance(self.definitions, tuple):
            object.__setattr__(self, "definitions", tuple(self.definitions))

    @property
    def names(self) -> Tuple[str, ...]:
        """Defined names in source order (duplicates preserved)."""
        return tuple(definition.name for definition in self.definitions)

    def __str__(self) -> str:
        lines = [str(definition) for definition in self.definitions]
        if self.target is not None:
            lines.append(str(self.target))
        return "\n".join(lines)


__all__ = [
    "Connected",
    "Definition",
    "Disconnected",
    "GraphExpr",
    "GROUP_TYPES",
    "Program",
    "VarRef",
    "Vertex",
]
