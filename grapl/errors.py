"""Exception hierarchy for the grapl engine.

Every failure the engine can report derives from :class:`GraplError`, so
callers (and fuzz harnesses) can treat "an expression or a GraplError" as
the complete set of outcomes for any input.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple


class GraplError(Exception):
    """Base class for all errors raised by the engine."""

    pass


class GraphSyntaxError(GraplError):
    """Malformed input text.

    Attributes:
        position: Zero-based offset of the offending character (or byte,
            for undecodable input).
        expected: Description of what the parser expected at ``position``.
        found: The text actually found there, or None at end of input.
        line: One-based line of ``position`` when the source is known.
        column: One-based column of ``position`` when the source is known.
    """

    def __init__(
        self,
        position: int,
        expected: str,
        found: Optional[str] = None,
        source: Optional[str] = None,
    ) -> None:
        self.position = position
        self.expected = expected
        self.found = found
        self.line: Optional[int] = None
        self.column: Optional[int] = None
        if source is not None:
            self.line = source.count("\n", 0, position) + 1
            self.column = position - (source.rfind("\n", 0, position) + 1) + 1

        where = f"position {position}"
        if self.line is not None:
            where = f"line {self.line}, column {self.column}"
        got = "end of input" if found is None else repr(found)
        super().__init__(f"Syntax error at {where}: expected {expected}, found {got}")


class ResolutionError(GraplError):
    """Base class for failures while expanding named definitions."""

    pass


class UndefinedVariable(ResolutionError):
    """A reference names no definition."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Undefined variable: {name}")


class CyclicDefinition(ResolutionError):
    """A definition transitively references itself.

    Attributes:
        chain: Names involved in the cycle, in the order they were visited,
            starting with the name that closes the loop.
    """

    def __init__(self, chain: Sequence[str]) -> None:
        self.chain: Tuple[str, ...] = tuple(chain)
        loop = list(self.chain) + list(self.chain[:1])
        super().__init__(f"Cyclic definition: {' -> '.join(loop)}")


class DuplicateDefinition(ResolutionError):
    """A name is assigned more than once while shadowing is disabled."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Duplicate definition: {name}")


class ResourceLimitExceeded(GraplError):
    """A size or depth guard tripped.

    Attributes:
        limit: Name of the configured limit (e.g. ``"max_depth"``).
        value: The configured bound that was exceeded.
    """

    def __init__(self, limit: str, value: int) -> None:
        self.limit = limit
        self.value = value
        super().__init__(f"Resource limit exceeded: {limit}={value}")


__all__ = [
    "CyclicDefinition",
    "DuplicateDefinition",
    "GraphSyntaxError",
    "GraplError",
    "ResolutionError",
    "ResourceLimitExceeded",
    "UndefinedVariable",
]
