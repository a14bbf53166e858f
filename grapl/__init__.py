"""grapl: a notation for graphs built from cliques and disjoint unions.

Public API surface::

    >>> from grapl import evaluate, serialize
    >>> serialize(evaluate("{S, [A, B]}"))
    '[{A, S}, {B, S}]'
"""

from grapl.api import evaluate, evaluate_text
from grapl.canon import canon, canonicalize, is_canonical
from grapl.config import (
    GraplConfig,
    NormalizerConfig,
    ParserConfig,
    ResolverConfig,
    load_config,
)
from grapl.errors import (
    CyclicDefinition,
    DuplicateDefinition,
    GraphSyntaxError,
    GraplError,
    ResolutionError,
    ResourceLimitExceeded,
    UndefinedVariable,
)
from grapl.export import (
    edge_list,
    edges,
    export_dot,
    export_json,
    to_dot,
    to_networkx,
    vertices,
)
from grapl.expr import (
    Connected,
    Definition,
    Disconnected,
    GraphExpr,
    Program,
    VarRef,
    Vertex,
)
from grapl.normal import Normalizer, is_normal_form, nesting_measure, normalize
from grapl.parser import parse, parse_expr, parse_program
from grapl.resolve import DefinitionTable, Resolver, resolve, resolve_all
from grapl.serialize import cliques, equal, serialize

__all__ = [
    "Connected",
    "CyclicDefinition",
    "Definition",
    "DefinitionTable",
    "Disconnected",
    "DuplicateDefinition",
    "GraphExpr",
    "GraphSyntaxError",
    "GraplConfig",
    "GraplError",
    "Normalizer",
    "NormalizerConfig",
    "ParserConfig",
    "Program",
    "ResolutionError",
    "Resolver",
    "ResolverConfig",
    "ResourceLimitExceeded",
    "UndefinedVariable",
    "VarRef",
    "Vertex",
    "canon",
    "canonicalize",
    "cliques",
    "edge_list",
    "edges",
    "equal",
    "evaluate",
    "evaluate_text",
    "export_dot",
    "export_json",
    "is_canonical",
    "is_normal_form",
    "load_config",
    "nesting_measure",
    "normalize",
    "parse",
    "parse_expr",
    "parse_program",
    "resolve",
    "resolve_all",
    "serialize",
    "to_dot",
    "to_networkx",
    "vertices",
]
