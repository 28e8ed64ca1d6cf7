import pytest

from sqlmorph.nodes import (
    ArrayItem,
    ArrayLiteral,
    Assignment,
    Concat,
    InterpolatedString,
    Literal,
    MethodCall,
    Node,
    Opaque,
    PropertyFetch,
    Variable,
)
from sqlmorph.rendering import render, render_literal


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, "null"),
        (True, "true"),
        (False, "false"),
        (25, "25"),
        (1.5, "1.5"),
        ("John", "'John'"),
        ("O'Brien", "'O\\'Brien'"),
        ("a\\b", "'a\\\\b'"),
    ],
)
def test_render_literal(value: object, expected: str) -> None:
    assert render_literal(value) == expected


@pytest.mark.parametrize(
    ("node", "expected"),
    [
        (Variable("stmt"), "stmt"),
        (PropertyFetch(Variable("this"), "db"), "this.db"),
        (MethodCall(Variable("qb"), "setMaxResults", (Literal(10),)), "qb.setMaxResults(10)"),
        (MethodCall(MethodCall(Variable("qb"), "select", (Literal("*"),)), "distinct"), "qb.select('*').distinct()"),
        (ArrayLiteral((ArrayItem(Literal(1)), ArrayItem(Variable("x")))), "[1, x]"),
        (ArrayLiteral((ArrayItem(Literal(7), Literal("id")),)), "['id' => 7]"),
        (ArrayLiteral(), "[]"),
        (Concat(Literal("SELECT "), Variable("columns")), "'SELECT ' . columns"),
        (InterpolatedString(("SELECT * FROM ", Variable("table"))), '"SELECT * FROM {table}"'),
        (Assignment(Variable("rows"), MethodCall(Variable("stmt"), "fetchAll")), "rows = stmt.fetchAll()"),
        (Opaque("$callback()"), "$callback()"),
    ],
)
def test_render(node: Node, expected: str) -> None:
    assert render(node) == expected


def test_render_rejects_foreign_objects() -> None:
    with pytest.raises(TypeError):
        render("not a node")  # type: ignore[arg-type]
