"""Resolution of named graphs.

Definitions live in a :class:`DefinitionTable`. Resolving a name expands
every reference in its body depth-first, keeping the definitions currently
being expanded on an explicit stack; meeting one that is already on the
stack means the definitions form a cycle::

    G1 = [A, B]
    G2 = {X, G1}
    G2  =>  {X, [A, B]}  =>  [{X, A}, {X, B}]

    G1 = {X, G2}
    G2 = {Y, G1}
    G1  =>  CyclicDefinition(G1 -> G2 -> G1)

By default every name has a single definition visible from anywhere in
the program. With ``allow_shadowing`` a name may be assigned again, and
scoping becomes sequential: a reference inside a definition body sees the
latest earlier assignment of that name, and a name assigned only later
stays a plain vertex. The target sees the final assignment::

    G = A
    G = {G, B}
    G   =>  {A, B}

Every definition body is resolved, canonicalized and normalized once per
resolver and then substituted wherever it is referenced. Expressions are
immutable, so substituting the same resolved tree at several sites can
never let a later rewrite of one occurrence leak into another.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from grapl.canon import canonicalize
from grapl.config import NormalizerConfig, ResolverConfig
from grapl.errors import (
    CyclicDefinition,
    DuplicateDefinition,
    GraplError,
    ResolutionError,
    ResourceLimitExceeded,
    UndefinedVariable,
)
from grapl.expr import GROUP_TYPES, Definition, GraphExpr, Program, VarRef, Vertex
from grapl.normal import normalize

logger = logging.getLogger("grapl.resolve")


class DefinitionTable(Mapping[str, GraphExpr]):
    """Read-only mapping from names to their final definition bodies.

    Every definition is kept in source order, so shadowed assignments stay
    reachable through :meth:`bind`.
    """

    def __init__(
        self,
        definitions: Sequence[Definition] = (),
        config: Optional[ResolverConfig] = None,
    ) -> None:
        """Build the table, enforcing the redefinition policy.

        Args:
            definitions: Definitions in source order.
            config: Resolver options; ``allow_shadowing`` permits a name to
                be assigned more than once.

        Raises:
            DuplicateDefinition: If a name repeats and shadowing is off.
        """
        self.config = config or ResolverConfig()
        self.definitions: Tuple[Definition, ...] = tuple(definitions)
        self._latest: Dict[str, int] = {}
        for index, definition in enumerate(self.definitions):
            self._insert(index, definition)

    def _insert(self, index: int, definition: Definition) -> None:
        if definition.name in self._latest:
            if not self.config.allow_shadowing:
                raise DuplicateDefinition(definition.name)
            logger.warning("Definition of %s shadows an earlier one", definition.name)
        self._latest[definition.name] = index

    def bind(self, name: str, scope: Optional[int] = None) -> Optional[int]:
        """Return the index of the definition a reference to ``name`` sees.

        Args:
            name: Referenced name.
            scope: Index of the definition whose body holds the reference,
                or None for the target expression.

        Returns:
            Definition index, or None when nothing visible binds ``name``.
        """
        if name not in self._latest:
            return None
        if scope is None or not self.config.allow_shadowing:
            return self._latest[name]
        for index in range(scope - 1, -1, -1):
            if self.definitions[index].name == name:
                return index
        return None

    def __getitem__(self, name: str) -> GraphExpr:
        return self.definitions[self._latest[name]].body

    def __iter__(self) -> Iterator[str]:
        return iter(self._latest)

    def __len__(self) -> int:
        return len(self._latest)


class Resolver:
    """Expands references against a definition table.

    Resolved definitions are memoized, so a resolver may be shared by
    several threads; each call keeps its own in-progress stack.
    """

    def __init__(
        self,
        table: DefinitionTable,
        config: Optional[ResolverConfig] = None,
        normalizer_config: Optional[NormalizerConfig] = None,
    ) -> None:
        self.table = table
        self.config = config or table.config
        self.normalizer_config = normalizer_config or NormalizerConfig()
        self._resolved: Dict[int, GraphExpr] = {}
        self._lock = threading.Lock()

    def resolve_name(self, name: str) -> GraphExpr:
        """Return the normal form of the final definition called ``name``.

        Raises:
            UndefinedVariable: ``name`` or a name it references is unbound.
            CyclicDefinition: The definitions reference each other in a loop.
            ResourceLimitExceeded: Nesting or expansion too large.
        """
        return self._guarded(lambda: self._lookup(name, None, []))

    def resolve_expr(self, expr: GraphExpr) -> GraphExpr:
        """Substitute every reference in ``expr`` and normalize the result."""

        def run() -> GraphExpr:
            expanded = self._expand(expr, None, [])
            return normalize(canonicalize(expanded), self.normalizer_config)

        return self._guarded(run)

    def _guarded(self, run: Callable[[], GraphExpr]) -> GraphExpr:
        try:
            return run()
        except RecursionError as exc:
            raise ResourceLimitExceeded("max_depth", self.config.max_depth) from exc

    def _lookup(self, name: str, scope: Optional[int], stack: List[int]) -> GraphExpr:
        index = self.table.bind(name, scope)
        if index is None:
            if name in self.table:
                # assigned only further down under sequential scoping
                return Vertex(name)
            raise UndefinedVariable(name)
        if index in stack:
            chain = [self.table.definitions[i].name for i in stack[stack.index(index):]]
            logger.debug("Cycle detected while resolving %s: %s", chain[0], chain)
            raise CyclicDefinition(chain)

        with self._lock:
            cached = self._resolved.get(index)
        if cached is not None:
            return cached

        if len(stack) >= self.config.max_depth:
            raise ResourceLimitExceeded("max_depth", self.config.max_depth)

        stack.append(index)
        expanded = self._expand(self.table.definitions[index].body, index, stack)
        stack.pop()

        resolved = normalize(canonicalize(expanded), self.normalizer_config)
        with self._lock:
            self._resolved[index] = resolved
        return resolved

    def _expand(self, expr: GraphExpr, scope: Optional[int], stack: List[int]) -> GraphExpr:
        if isinstance(expr, VarRef):
            return self._lookup(expr.name, scope, stack)
        if isinstance(expr, GROUP_TYPES):
            return type(expr)(
                frozenset(self._expand(m, scope, stack) for m in expr.members)
            )
        return expr


def resolve(
    program: Program,
    name: Optional[str] = None,
    config: Optional[ResolverConfig] = None,
    normalizer_config: Optional[NormalizerConfig] = None,
) -> GraphExpr:
    """Resolve a program's target (or a named definition) to normal form.

    Args:
        program: Parsed program.
        name: Definition to resolve; defaults to the program's target.
        config: Resolver options.
        normalizer_config: Size guard for the normalization passes.

    Returns:
        Normal form with every reference substituted.

    Raises:
        ResolutionError: Undefined, cyclic or duplicate definitions, or a
            program with nothing to resolve.
        ResourceLimitExceeded: Nesting or expansion too large.
    """
    resolver = Resolver(DefinitionTable(program.definitions, config), config, normalizer_config)
    if name is not None:
        return resolver.resolve_name(name)
    if program.target is None:
        raise ResolutionError("Program has no target expression; pass a definition name")
    return resolver.resolve_expr(program.target)


def resolve_all(
    program: Program,
    config: Optional[ResolverConfig] = None,
    normalizer_config: Optional[NormalizerConfig] = None,
) -> Dict[str, GraphExpr]:
    """Resolve every definition of a program concurrently.

    Definitions are independent until one references another, so each is
    submitted to a thread pool; the shared memo avoids resolving the same
    body twice in most cases. When several definitions fail, the error of
    the earliest one in source order is raised.

    Returns:
        Mapping from definition name to normal form, in table order.
    """
    config = config or ResolverConfig()
    table = DefinitionTable(program.definitions, config)
    resolver = Resolver(table, config, normalizer_config)
    names = list(table)
    if not names:
        return {}

    results: Dict[str, GraphExpr] = {}
    errors: Dict[str, GraplError] = {}
    logger.info(
        "Resolving %d definition(s) with %d worker(s)", len(names), config.max_workers
    )
    with ThreadPoolExecutor(
        max_workers=config.max_workers, thread_name_prefix="GraplResolve"
    ) as executor:
        futures = {executor.submit(resolver.resolve_name, name): name for name in names}
        for future in as_completed(futures):
            name = futures[future]
            try:
                results[name] = future.result()
            except GraplError as exc:
                logger.debug("Definition %s failed: %s", name, exc)
                errors[name] = exc

    for name in names:
        if name in errors:
            raise errors[name]
    return {name: results[name] for name in names}


__all__ = [
    "DefinitionTable",
    "Resolver",
    "resolve",
    "resolve_all",
]
