"""Lexer and recursive-descent parser for the graph notation.

Grammar::

    program      := (assignment ';'?)* (expr ';'?)?
    assignment   := identifier '=' expr
    expr         := identifier | connected | disconnected
    connected    := '{' expr (',' expr)* ','? '}'
    disconnected := '[' expr (',' expr)* ','? ']'

Identifiers become :class:`Vertex` nodes unless the program defines a
variable with that name, in which case they become :class:`VarRef`.
Definitions are program-scoped, so a body may refer to a name that is
assigned later in the text. Which assignment a reference finds is the
resolver's decision (see :mod:`grapl.resolve` for shadowing).

The parser accepts arbitrary ``str`` or ``bytes`` input and reports every
problem as a :class:`GraplError`; nothing else escapes.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import AbstractSet, List, Optional, Union

from grapl.config import ParserConfig
from grapl.errors import GraphSyntaxError, ResourceLimitExceeded
from grapl.expr import (
    GROUP_TYPES,
    Connected,
    Definition,
    Disconnected,
    GraphExpr,
    Program,
    VarRef,
    Vertex,
)

logger = logging.getLogger("grapl.parser")

Source = Union[str, bytes, bytearray]

TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)                            # whitespace, including newlines
    |(?P<ident>[A-Za-z_][A-Za-z0-9_]*)     # ASCII identifier
    |(?P<punct>[{}\[\],=;])                # delimiters
    """,
    re.VERBOSE,
)

CLOSING = {"{": "}", "[": "]"}
GROUP_KIND = {"{": Connected, "[": Disconnected}

IDENT = "ident"
PUNCT = "punct"
EOF = "eof"


@dataclass(frozen=True)
class Token:
    """Lexical token with its source offset."""

    kind: str
    value: str
    position: int

    def describe(self) -> Optional[str]:
        """Return the token text for error messages (None at end of input)."""
        return None if self.kind == EOF else self.value


def tokenize(text: str) -> List[Token]:
    """Split source text into tokens, dropping whitespace.

    Args:
        text: Source text.

    Returns:
        Token list terminated by an EOF token.

    Raises:
        GraphSyntaxError: On a character that starts no token.
    """
    tokens: List[Token] = []
    position = 0
    while position < len(text):
        match = TOKEN_RE.match(text, position)
        if match is None:
            raise GraphSyntaxError(
                position,
                "identifier or one of '{', '}', '[', ']', ',', '=', ';'",
                text[position],
                source=text,
            )
        kind = match.lastgroup
        if kind != "ws":
            tokens.append(Token(kind, match.group(), position))
        position = match.end()
    tokens.append(Token(EOF, "", len(text)))
    return tokens


class _Parser:
    """Single-use parser over a token list."""

    def __init__(self, text: str, config: ParserConfig) -> None:
        self.text = text
        self.config = config
        self.tokens = tokenize(text)
        self.index = 0
        self.depth = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def _peek(self, offset: int = 1) -> Token:
        index = min(self.index + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        if token.kind != EOF:
            self.index += 1
        return token

    def _error(self, expected: str) -> GraphSyntaxError:
        token = self.current
        return GraphSyntaxError(token.position, expected, token.describe(), source=self.text)

    def _at(self, value: str) -> bool:
        return self.current.kind == PUNCT and self.current.value == value

    def _expect_end(self) -> None:
        if self.current.kind != EOF:
            raise self._error("end of input")

    def _skip_separator(self) -> None:
        if self._at(";"):
            self._advance()

    def _at_assignment(self) -> bool:
        following = self._peek()
        return (
            self.current.kind == IDENT
            and following.kind == PUNCT
            and following.value == "="
        )

    def parse_program(self) -> Program:
        definitions: List[Definition] = []
        while self._at_assignment():
            name = self._advance().value
            self._advance()  # '='
            definitions.append(Definition(name, self.parse_expr()))
            self._skip_separator()

        target: Optional[GraphExpr] = None
        if self.current.kind != EOF:
            target = self.parse_expr()
            self._skip_separator()
        self._expect_end()
        return Program(tuple(definitions), target)

    def parse_expr(self) -> GraphExpr:
        token = self.current
        if token.kind == IDENT:
            self._advance()
            return Vertex(token.value)
        if token.kind == PUNCT and token.value in CLOSING:
            return self._parse_group()
        raise self._error("identifier, '{' or '['")

    def _parse_group(self) -> GraphExpr:
        opener = self._advance().value
        closer = CLOSING[opener]

        self.depth += 1
        if self.depth > self.config.max_depth:
            raise ResourceLimitExceeded("max_depth", self.config.max_depth)

        if self._at(closer):
            raise self._error("expression (groups may not be empty)")

        members = [self.parse_expr()]
        while True:
            if self._at(","):
                self._advance()
                if self._at(closer):
                    break
                members.append(self.parse_expr())
            elif self._at(closer):
                break
            else:
                raise self._error(f"',' or '{closer}'")
        self._advance()
        self.depth -= 1
        return GROUP_KIND[opener](frozenset(members))


def _decode(source: Source, config: ParserConfig) -> str:
    if not isinstance(source, (str, bytes, bytearray)):
        raise TypeError(f"Unsupported source type: {type(source)!r}")
    if len(source) > config.max_length:
        raise ResourceLimitExceeded("max_length", config.max_length)
    if isinstance(source, str):
        return source
    try:
        return bytes(source).decode("utf-8")
    except UnicodeDecodeError as exc:
        found = repr(bytes(source[exc.start:exc.start + 1]))
        raise GraphSyntaxError(exc.start, "valid UTF-8 text", found) from exc


def bind_references(expr: GraphExpr, names: AbstractSet[str]) -> GraphExpr:
    """Turn vertices named in ``names`` into variable references.

    Args:
        expr: Expression as produced by the parser.
        names: Names bound by definitions in scope.

    Returns:
        A new expression; subtrees without bound names are reused as-is.
    """
    if isinstance(expr, Vertex):
        return VarRef(expr.name) if expr.name in names else expr
    if isinstance(expr, GROUP_TYPES):
        return type(expr)(frozenset(bind_references(m, names) for m in expr.members))
    return expr


def parse_program(source: Source, config: Optional[ParserConfig] = None) -> Program:
    """Parse a program of assignments and an optional target expression.

    Args:
        source: Program text (``str`` or UTF-8 ``bytes``).
        config: Parser guards; defaults to ``ParserConfig()``.

    Returns:
        Program whose identifiers are bound to definitions where possible.

    Raises:
        GraphSyntaxError: Malformed text.
        ResourceLimitExceeded: Input too long or nested too deeply.
    """
    config = config or ParserConfig()
    text = _decode(source, config)
    try:
        program = _Parser(text, config).parse_program()
        if not program.definitions:
            return program

        names = frozenset(program.names)
        definitions = tuple(
            Definition(d.name, bind_references(d.body, names))
            for d in program.definitions
        )
        target = None
        if program.target is not None:
            target = bind_references(program.target, names)
    except RecursionError as exc:
        raise ResourceLimitExceeded("max_depth", config.max_depth) from exc

    logger.debug("Parsed program with %d definition(s)", len(definitions))
    return Program(definitions, target)


def parse_expr(source: Source, config: Optional[ParserConfig] = None) -> GraphExpr:
    """Parse a single expression with no assignments.

    Raises:
        GraphSyntaxError: Malformed text, including any assignment.
        ResourceLimitExceeded: Input too long or nested too deeply.
    """
    config = config or ParserConfig()
    text = _decode(source, config)
    parser = _Parser(text, config)
    try:
        expr = parser.parse_expr()
        parser._expect_end()
    except RecursionError as exc:
        raise ResourceLimitExceeded("max_depth", config.max_depth) from exc
    return expr


def parse(
    source: Source, config: Optional[ParserConfig] = None
) -> Union[GraphExpr, Program]:
    """Parse text into an expression, or a program when it has assignments.

    Raises:
        GraphSyntaxError: Malformed text, including empty input.
        ResourceLimitExceeded: Input too long or nested too deeply.
    """
    program = parse_program(source, config)
    if program.definitions:
        return program
    if program.target is None:
        raise GraphSyntaxError(len(source), "identifier, '{' or '['")
    return program.target


__all__ = [
    "TOKEN_RE",
    "Token",
    "bind_references",
    "parse",
    "parse_expr",
    "parse_program",
    "tokenize",
]
