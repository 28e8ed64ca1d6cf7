"""Grammar gate backed by sqlglot.

The clause parser keeps clause text verbatim and never re-renders SQL, so
sqlglot is used only as a second opinion: the normalized statement must
parse into exactly one expression of the expected type, and every clause
argument sqlglot populated must belong to the supported set for that
statement kind. Anything else is rejected before a builder runs.
"""

from typing import TYPE_CHECKING

import sqlglot
from sqlglot import exp
from sqlglot.errors import ParseError, TokenError

from sqlmorph.core.normalizer import SqlText, StatementKind
from sqlmorph.exceptions import UnknownStatementKindError, UnsupportedClauseError
from sqlmorph.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlglot.dialects.dialect import DialectType

__all__ = ("SUPPORTED_ARGUMENTS", "validate_grammar")

logger = get_logger("core.validation")

_EXPRESSION_TYPES: "dict[StatementKind, type[exp.Expression]]" = {
    StatementKind.SELECT: exp.Select,
    StatementKind.INSERT: exp.Insert,
    StatementKind.UPDATE: exp.Update,
    StatementKind.DELETE: exp.Delete,
}

# "from_" covers sqlglot releases that renamed the FROM argument.
SUPPORTED_ARGUMENTS: "dict[StatementKind, frozenset[str]]" = {
    StatementKind.SELECT: frozenset((
        "expressions",
        "from",
        "from_",
        "joins",
        "where",
        "group",
        "having",
        "order",
        "limit",
        "offset",
        "distinct",
    )),
    StatementKind.INSERT: frozenset(("this", "expression")),
    StatementKind.UPDATE: frozenset(("this", "expressions", "where")),
    StatementKind.DELETE: frozenset(("this", "where", "tables")),
}


def _unsupported(message: str, sql: SqlText) -> UnsupportedClauseError:
    return UnsupportedClauseError(message, sql.text)


def _check_joins(statement: exp.Expression, sql: SqlText) -> None:
    for join in statement.find_all(exp.Join):
        if join.args.get("using") or join.args.get("method"):
            msg = "JOIN ... USING and NATURAL joins are not supported"
            raise _unsupported(msg, sql)
        if str(join.args.get("kind") or "").upper() == "CROSS" or str(join.args.get("side") or "").upper() == "FULL":
            msg = "CROSS and FULL joins are not supported"
            raise _unsupported(msg, sql)
        if not join.args.get("on"):
            msg = "JOIN without an ON condition is not supported"
            raise _unsupported(msg, sql)


def validate_grammar(sql: SqlText, dialect: "DialectType" = "mysql") -> exp.Expression:
    """Check a normalized statement against the supported grammar.

    Args:
        sql: The normalized statement.
        dialect: sqlglot dialect used to parse it.

    Raises:
        UnknownStatementKindError: If the statement kind is unknown.
        UnsupportedClauseError: If sqlglot cannot parse the statement, finds
            more than one statement, or finds a clause outside the supported set.

    Returns:
        The parsed sqlglot expression.
    """
    if sql.kind is StatementKind.UNKNOWN:
        raise UnknownStatementKindError(sql=sql.text)
    try:
        parsed = [statement for statement in sqlglot.parse(sql.text, read=dialect) if statement is not None]
    except (ParseError, TokenError) as e:
        msg = f"SQL could not be parsed: {e}"
        raise _unsupported(msg, sql) from e

    if len(parsed) != 1:
        msg = f"Expected one statement, found {len(parsed)}"
        raise _unsupported(msg, sql)
    statement = parsed[0]
    expected = _EXPRESSION_TYPES[sql.kind]
    if not isinstance(statement, expected):
        msg = f"Expected {expected.__name__}, parsed {type(statement).__name__}"
        raise _unsupported(msg, sql)

    allowed = SUPPORTED_ARGUMENTS[sql.kind]
    unexpected = sorted(name for name, value in statement.args.items() if value and name not in allowed)
    if unexpected:
        msg = f"Unsupported clauses: {', '.join(unexpected)}"
        raise _unsupported(msg, sql)

    for subquery in statement.find_all(exp.Subquery):
        if isinstance(subquery.parent, (exp.From, exp.Join)):
            msg = "Derived tables are not supported"
            raise _unsupported(msg, sql)
    _check_joins(statement, sql)

    if isinstance(statement, exp.Insert):
        values = statement.args.get("expression")
        if not isinstance(values, exp.Values) or len(values.expressions) != 1:
            msg = "INSERT needs exactly one VALUES row"
            raise _unsupported(msg, sql)

    logger.debug("Grammar check passed", extra={"extra_fields": {"kind": sql.kind.value, "dialect": str(dialect)}})
    return statement
