"""Tests for call chains and parameter maps."""

from typing import Optional

import pytest

from sqlmorph.core.chain import CallChain, Operation, ParameterMap, parameter_name, to_node
from sqlmorph.core.normalizer import normalize_sql
from sqlmorph.nodes import ArrayItem, ArrayLiteral, Literal, MethodCall, Node, Variable


def test_to_node() -> None:
    assert to_node("x") == Literal("x")
    assert to_node(None) == Literal(None)
    assert to_node(Variable("v")) == Variable("v")
    assert to_node({"a": 1}) == ArrayLiteral((ArrayItem(Literal(1), Literal("a")),))
    assert to_node([1, "b"]) == ArrayLiteral((ArrayItem(Literal(1)), ArrayItem(Literal("b"))))


def test_to_node_rejects_other_objects() -> None:
    with pytest.raises(TypeError):
        to_node(object())


def test_call_chain_is_immutable_and_ordered() -> None:
    base = CallChain(Variable("qb"))
    chain = base.then("select", "*").then("from", "users")

    assert len(base) == 0
    assert len(chain) == 2
    assert chain.operation_names == ("select", "from")
    assert chain.find("from") == Operation("from", (Literal("users"),))
    assert chain.find("where") is None


def test_to_expression_nests_innermost_first() -> None:
    expression = CallChain(Variable("qb")).then("select", "*").then("from", "t").to_expression()
    assert expression == MethodCall(
        MethodCall(Variable("qb"), "select", (Literal("*"),)),
        "from",
        (Literal("t"),),
    )


def positional(*values: object) -> ArrayLiteral:
    return ArrayLiteral(tuple(ArrayItem(Literal(value)) for value in values))


def keyed(**values: object) -> ArrayLiteral:
    return ArrayLiteral(tuple(ArrayItem(Literal(value), Literal(key)) for key, value in values.items()))


def test_parameter_map_from_positional_array() -> None:
    parameters = ParameterMap.from_arguments([positional(25, "John")])

    assert parameters is not None
    assert parameters.positional
    assert parameters.entries == (("param1", Literal(25)), ("param2", Literal("John")))
    assert parameters.names == ("param1", "param2")
    assert len(parameters) == 2


def test_parameter_map_from_keyed_array_strips_colons() -> None:
    array = ArrayLiteral((
        ArrayItem(Literal(7), Literal(":id")),
        ArrayItem(Variable("name"), Literal("name")),
    ))
    parameters = ParameterMap.from_arguments([array])

    assert parameters is not None
    assert not parameters.positional
    assert parameters.entries == (("id", Literal(7)), ("name", Variable("name")))


def test_parameter_map_keeps_non_literal_values() -> None:
    array = ArrayLiteral((ArrayItem(Variable("age")),))
    parameters = ParameterMap.from_arguments([array])
    assert parameters is not None
    assert parameters.entries == (("param1", Variable("age")),)


@pytest.mark.parametrize(
    "arguments",
    [
        [],
        [Variable("params")],
        [positional(1), positional(2)],
        [ArrayLiteral((ArrayItem(Literal(1)), ArrayItem(Literal(2), Literal("b"))))],
        [ArrayLiteral((ArrayItem(Literal(1), Variable("key")),))],
    ],
)
def test_parameter_map_rejects_non_literal_arrays(arguments: "list[Node]") -> None:
    assert ParameterMap.from_arguments(arguments) is None


def test_empty_array_is_an_empty_positional_map() -> None:
    parameters = ParameterMap.from_arguments([ArrayLiteral()])
    assert parameters is not None
    assert len(parameters) == 0


def test_parameter_map_matches() -> None:
    positional_sql = normalize_sql("SELECT * FROM t WHERE a = ? AND b = ?")
    named_sql = normalize_sql("SELECT * FROM t WHERE a = :a AND b = :b")

    two = ParameterMap.from_arguments([positional(1, 2)])
    one = ParameterMap.from_arguments([positional(1)])
    named = ParameterMap.from_arguments([keyed(b=2, a=1)])
    assert two is not None and one is not None and named is not None

    assert two.matches(positional_sql)
    assert not one.matches(positional_sql)
    assert not two.matches(named_sql)
    assert named.matches(named_sql)
    assert not named.matches(positional_sql)


def test_parameter_map_to_node() -> None:
    parameters = ParameterMap.from_arguments([positional(25)])
    assert parameters is not None
    assert parameters.to_node() == ArrayLiteral((ArrayItem(Literal(25), Literal("param1")),))


@pytest.mark.parametrize(
    ("key", "expected"),
    [
        (Literal(1), "param1"),
        (Literal(3), "param3"),
        (Literal(0), None),
        (Literal(":id"), "id"),
        (Literal("id"), "id"),
        (Literal(":"), None),
        (Literal(True), None),
        (Variable("key"), None),
    ],
)
def test_parameter_name(key: Node, expected: Optional[str]) -> None:
    assert parameter_name(key) == expected
