from typing import Optional

import pytest

from sqlmorph.nodes import (
    ArrayItem,
    ArrayLiteral,
    Literal,
    MethodCall,
    Node,
    Opaque,
    PropertyFetch,
    Variable,
    identity_key,
)
from sqlmorph.utils.type_guards import (
    is_array_literal,
    is_int_literal,
    is_method_call,
    is_node,
    is_string_literal,
)


@pytest.mark.parametrize(
    ("node", "expected"),
    [
        (Variable("stmt"), "stmt"),
        (PropertyFetch(Variable("this"), "stmt"), "this.stmt"),
        (PropertyFetch(PropertyFetch(Variable("this"), "repo"), "stmt"), "this.repo.stmt"),
        (PropertyFetch(MethodCall(Variable("this"), "repo"), "stmt"), None),
        (MethodCall(Variable("pdo"), "prepare"), None),
        (Literal("stmt"), None),
    ],
)
def test_identity_key(node: Node, expected: Optional[str]) -> None:
    assert identity_key(node) == expected


def test_nodes_are_hashable_values() -> None:
    assert Variable("a") == Variable("a")
    assert len({Literal(1), Literal(1), Literal("1")}) == 2
    assert Opaque().text == "<expr>"


def test_array_shape() -> None:
    positional = ArrayLiteral((ArrayItem(Literal(1)),))
    keyed = ArrayLiteral((ArrayItem(Literal(1), Literal("a")),))
    mixed = ArrayLiteral((ArrayItem(Literal(1)), ArrayItem(Literal(2), Literal("b"))))

    assert positional.is_positional and not positional.is_keyed
    assert keyed.is_keyed and not keyed.is_positional
    assert not mixed.is_keyed and not mixed.is_positional
    assert ArrayLiteral().is_positional and not ArrayLiteral().is_keyed


def test_type_guards() -> None:
    call = MethodCall(Variable("pdo"), "prepare")

    assert is_node(call)
    assert not is_node("prepare")
    assert is_method_call(call)
    assert is_method_call(call, "prepare", "query")
    assert not is_method_call(call, "exec")
    assert not is_method_call(Variable("pdo"))
    assert is_string_literal(Literal("x"))
    assert not is_string_literal(Literal(1))
    assert is_int_literal(Literal(1))
    assert not is_int_literal(Literal(True))
    assert is_array_literal(ArrayLiteral())
    assert not is_array_literal(Literal(()))
