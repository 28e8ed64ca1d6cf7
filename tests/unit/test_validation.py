import pytest
from sqlglot import exp

from sqlmorph.core.normalizer import StatementKind, normalize_sql
from sqlmorph.core.validation import SUPPORTED_ARGUMENTS, validate_grammar
from sqlmorph.exceptions import UnknownStatementKindError, UnsupportedClauseError


@pytest.mark.parametrize(
    ("sql", "expected"),
    [
        ("SELECT * FROM users WHERE age > ? AND name = ?", exp.Select),
        ("SELECT u.id FROM users u LEFT JOIN orders o ON o.user_id = u.id ORDER BY u.id DESC LIMIT 5", exp.Select),
        ("INSERT INTO users (name, email) VALUES (?, ?)", exp.Insert),
        ("UPDATE users SET name = :name WHERE id = :id", exp.Update),
        ("DELETE FROM sessions WHERE expires_at < ?", exp.Delete),
    ],
)
def test_supported_statements_pass(sql: str, expected: "type[exp.Expression]") -> None:
    assert isinstance(validate_grammar(normalize_sql(sql)), expected)


@pytest.mark.parametrize(
    "sql",
    [
        "SELECT * FROM a UNION SELECT * FROM b",
        "SELECT * FROM (SELECT id FROM t) AS x",
        "SELECT * FROM a CROSS JOIN b",
        "SELECT * FROM a NATURAL JOIN b",
        "SELECT * FROM a JOIN b USING (id)",
        "SELECT * FROM a JOIN b",
        "SELECT * FROM a FULL OUTER JOIN b ON a.id = b.id",
        "SELECT * FROM t FOR UPDATE",
        "SELECT * FROM t; SELECT 1",
        "INSERT INTO t (a) VALUES (1), (2)",
        "INSERT INTO t (a) SELECT a FROM u",
    ],
)
def test_unsupported_statements_raise(sql: str) -> None:
    with pytest.raises(UnsupportedClauseError):
        validate_grammar(normalize_sql(sql))


def test_unknown_kind_raises() -> None:
    with pytest.raises(UnknownStatementKindError):
        validate_grammar(normalize_sql("SHOW TABLES"))


def test_every_translatable_kind_has_an_allow_list() -> None:
    assert set(SUPPORTED_ARGUMENTS) == {kind for kind in StatementKind if kind is not StatementKind.UNKNOWN}
