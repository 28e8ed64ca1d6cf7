from typing import Optional

import pytest

from sqlmorph.core.extractor import extract_sql
from sqlmorph.nodes import Concat, InterpolatedString, Literal, MethodCall, Node, Opaque, Variable


@pytest.mark.parametrize(
    ("node", "expected"),
    [
        (Literal("SELECT 1"), "SELECT 1"),
        (Concat(Literal("SELECT * "), Literal("FROM users")), "SELECT * FROM users"),
        (Concat(Concat(Literal("SELECT "), Literal("* ")), Literal("FROM t")), "SELECT * FROM t"),
        (InterpolatedString(("SELECT * ", "FROM t")), "SELECT * FROM t"),
        (InterpolatedString(()), ""),
        (Literal(42), None),
        (Literal(None), None),
        (Variable("sql"), None),
        (Concat(Literal("SELECT * FROM "), Variable("table")), None),
        (Concat(Variable("prefix"), Literal("FROM t")), None),
        (InterpolatedString(("SELECT * FROM ", Variable("table"))), None),
        (MethodCall(Variable("this"), "buildSql"), None),
        (Opaque(), None),
        (None, None),
    ],
)
def test_extract_sql(node: Optional[Node], expected: Optional[str]) -> None:
    assert extract_sql(node) == expected
