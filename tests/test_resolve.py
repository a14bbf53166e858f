"""Tests for definition tables and reference resolution."""

from __future__ import annotations

import dataclasses

import pytest

from grapl.config import ResolverConfig
from grapl.errors import (
    CyclicDefinition,
    DuplicateDefinition,
    GraplError,
    ResolutionError,
    ResourceLimitExceeded,
    UndefinedVariable,
)
from grapl.expr import Connected, Definition, Disconnected, Program, VarRef, Vertex
from grapl.normal import normalize
from grapl.parser import parse_expr, parse_program
from grapl.resolve import DefinitionTable, Resolver, resolve, resolve_all
from grapl.serialize import serialize


def test_resolve_named_definition() -> None:
    program = parse_program("G1 = [A, B]; G2 = {X, G1}")
    result = resolve(program, "G2")
    assert result == normalize(parse_expr("[{X,A},{X,B}]"))


def test_resolve_target() -> None:
    program = parse_program("G1 = [A, B]\nG2 = {X, G1}\n[G2, Y]")
    assert serialize(resolve(program)) == "[{A, X}, {B, X}, Y]"


def test_forward_reference() -> None:
    program = parse_program("G2 = {X, G1}\nG1 = [A, B]\nG2")
    assert serialize(resolve(program)) == "[{A, X}, {B, X}]"


def test_substitution_is_renormalized() -> None:
    """A substituted clique merges with the clique it lands in."""
    program = parse_program("G = {A, B}\n{G, C}")
    assert serialize(resolve(program)) == "{A, B, C}"


def test_shared_definition_used_twice() -> None:
    program = parse_program("G = [A, B]\n{G, [G, C]}")
    assert serialize(resolve(program)) == "[A, {A, B}, {A, C}, B, {B, C}]"


def test_cycle_names_the_chain() -> None:
    program = parse_program("G1 = {X, G2}; G2 = {Y, G1}")
    with pytest.raises(CyclicDefinition) as excinfo:
        resolve(program, "G1")
    assert excinfo.value.chain == ("G1", "G2")
    assert "G1 -> G2 -> G1" in str(excinfo.value)


def test_self_reference() -> None:
    with pytest.raises(CyclicDefinition) as excinfo:
        resolve(parse_program("G = {A, G}"), "G")
    assert excinfo.value.chain == ("G",)


def test_cycle_reached_from_target() -> None:
    program = parse_program("G1 = G2\nG2 = [A, G1]\n{B, G1}")
    with pytest.raises(CyclicDefinition):
        resolve(program)


def test_undefined_reference() -> None:
    program = Program(
        (Definition("G", Connected(frozenset({Vertex("A"), VarRef("Q")}))),),
        VarRef("G"),
    )
    with pytest.raises(UndefinedVariable) as excinfo:
        resolve(program)
    assert excinfo.value.name == "Q"


def test_undefined_name_argument() -> None:
    with pytest.raises(UndefinedVariable) as excinfo:
        resolve(parse_program("G = A"), "H")
    assert excinfo.value.name == "H"


def test_duplicate_definition_is_rejected() -> None:
    program = parse_program("G = A\nG = B\nG")
    with pytest.raises(DuplicateDefinition) as excinfo:
        resolve(program)
    assert excinfo.value.name == "G"
    assert isinstance(excinfo.value, ResolutionError)


def test_shadowing_keeps_last_definition() -> None:
    program = parse_program("G = A\nG = B\nG")
    config = ResolverConfig(allow_shadowing=True)
    assert resolve(program, config=config) == Vertex("B")


def test_program_without_target() -> None:
    with pytest.raises(ResolutionError):
        resolve(parse_program("G = A"))


def test_depth_guard() -> None:
    text = "\n".join(f"G{i} = G{i + 1}" for i in range(5)) + "\nG5 = A"
    program = parse_program(text)
    with pytest.raises(ResourceLimitExceeded) as excinfo:
        resolve(program, "G0", config=ResolverConfig(max_depth=3))
    assert excinfo.value.limit == "max_depth"

    assert resolve(program, "G0") == Vertex("A")


def test_resolve_all_in_source_order() -> None:
    program = parse_program("G1 = [A, B]\nG2 = {X, G1}\nG3 = {G2, G1}")
    results = resolve_all(program, ResolverConfig(max_workers=2))

    assert list(results) == ["G1", "G2", "G3"]
    assert serialize(results["G1"]) == "[A, B]"
    assert serialize(results["G2"]) == "[{A, X}, {B, X}]"
    assert serialize(results["G3"]) == "[{A, B, X}, {A, X}, {B, X}]"


def test_resolve_all_raises_earliest_error() -> None:
    program = parse_program("G1 = A\nG2 = {G3, B}\nG3 = [G2, C]\nG4 = Q")
    with pytest.raises(CyclicDefinition):
        resolve_all(program)


def test_resolve_all_empty_program() -> None:
    assert resolve_all(Program()) == {}


def test_definition_table_mapping() -> None:
    program = parse_program("G1 = A\nG2 = [G1, B]")
    table = DefinitionTable(program.definitions)

    assert len(table) == 2
    assert list(table) == ["G1", "G2"]
    assert table["G1"] == Vertex("A")
    assert "G3" not in table


def test_resolver_memoizes_definitions() -> None:
    program = parse_program("G1 = {A, [B, C]}\nG2 = [G1, D]")
    resolver = Resolver(DefinitionTable(program.definitions))

    first = resolver.resolve_name("G1")
    assert resolver.resolve_name("G1") is first
    assert serialize(resolver.resolve_name("G2")) == "[{A, B}, {A, C}, D]"


def test_expressions_are_immutable() -> None:
    vertex = Vertex("A")
    with pytest.raises(dataclasses.FrozenInstanceError):
        vertex.name = "B"  # type: ignore[misc]


SHADOWING = ResolverConfig(allow_shadowing=True)


def test_shadowed_name_refers_to_earlier_assignment() -> None:
    """With shadowing, a body sees the assignment made before it."""
    program = parse_program("G = A\nG = {G, B}\nG")
    assert serialize(resolve(program, config=SHADOWING)) == "{A, B}"


def test_shadowing_later_reference_sees_latest_assignment() -> None:
    program = parse_program("G1 = A\nG1 = B\nG2 = G1")
    assert resolve(program, "G2", config=SHADOWING) == Vertex("B")
    assert resolve(program, "G1", config=SHADOWING) == Vertex("B")


def test_shadowing_leaves_names_assigned_later_free() -> None:
    """Sequential scoping turns `G1 = G2; G2 = G1` into `G2 = G2`."""
    program = parse_program("G1 = G2\nG2 = G1\nG1")
    assert resolve(program, config=SHADOWING) == Vertex("G2")

    results = resolve_all(program, SHADOWING)
    assert results == {"G1": Vertex("G2"), "G2": Vertex("G2")}


def test_default_scoping_still_detects_mutual_cycle() -> None:
    program = parse_program("G1 = G2\nG2 = G1\nG1")
    with pytest.raises(CyclicDefinition):
        resolve(program)


def test_definition_table_bind() -> None:
    program = parse_program("G = A\nH = G\nG = {G, B}")
    table = DefinitionTable(program.definitions, SHADOWING)

    assert table.bind("G") == 2
    assert table.bind("G", scope=2) == 0
    assert table.bind("H", scope=0) is None
    assert table.bind("Q") is None
    assert table["G"] == program.definitions[2].body


def test_deep_definition_body_fails_cleanly() -> None:
    body = Vertex("V")
    for index in range(5000):
        kind = Connected if index % 2 else Disconnected
        body = kind(frozenset({body, Vertex(f"V{index}")}))
    program = Program((Definition("G", body),), VarRef("G"))

    with pytest.raises(ResourceLimitExceeded) as excinfo:
        resolve(program, "G")
    assert isinstance(excinfo.value, GraplError)
    with pytest.raises(GraplError):
        resolve(program)
