"""Clause decomposition of normalized statements.

:func:`parse_clauses` cuts a normalized statement into its clause
categories. Clause text is kept verbatim: WHERE conditions, select lists,
join conditions and value expressions are passed to the builder exactly as
written. Only the supported grammar is accepted, anything else raises
:class:`~sqlmorph.exceptions.UnsupportedClauseError`:

- ``SELECT [DISTINCT] cols [FROM table [alias] {joins}] [WHERE] [GROUP BY]
  [HAVING] [ORDER BY] [LIMIT n [OFFSET m] | LIMIT m, n] [OFFSET m]``
- ``INSERT [INTO] table (cols) VALUES (values)``
- ``UPDATE table [alias] SET col = value, ... [WHERE]``
- ``DELETE [alias] FROM table [alias] {joins} [WHERE]``

where a join is ``[INNER | LEFT [OUTER] | RIGHT [OUTER]] JOIN table [alias] ON cond``.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from typing_extensions import assert_never

from sqlmorph.core.normalizer import SqlText, StatementKind
from sqlmorph.core.splitter import (
    find_closing_parenthesis,
    find_top_level_position,
    is_balanced,
    iter_top_level_words,
    split_respecting_delimiters,
)
from sqlmorph.exceptions import MalformedExpressionError, UnknownStatementKindError, UnsupportedClauseError

__all__ = (
    "ClauseCategory",
    "ClauseSet",
    "JoinClause",
    "JoinKind",
    "OrderItem",
    "SetAssignment",
    "TableReference",
    "parse_clauses",
)

_NAME = r"(?:`[^`]+`|\"[^\"]+\"|[A-Za-z_][A-Za-z0-9_$]*)"
_QUALIFIED_NAME = rf"{_NAME}(?:\.{_NAME})*"
_NAME_RE = re.compile(rf"^{_NAME}$")
_QUALIFIED_NAME_RE = re.compile(rf"^{_QUALIFIED_NAME}$")
_TABLE_REFERENCE_RE = re.compile(rf"^(?P<name>{_QUALIFIED_NAME})(?:\s+(?:AS\s+)?(?P<alias>{_NAME}))?$", re.IGNORECASE)
_INSERT_TARGET_RE = re.compile(rf"^\s*(?P<name>{_QUALIFIED_NAME})\s*\(")
_VALUES_RE = re.compile(r"^\s*VALUES?\s*\(", re.IGNORECASE)
_INTEGER_RE = re.compile(r"^\d+$")

_CLAUSE_NAMES = frozenset(("FROM", "WHERE", "GROUP BY", "HAVING", "ORDER BY", "LIMIT", "OFFSET", "SET"))
_SELECT_CLAUSES = ("FROM", "WHERE", "GROUP BY", "HAVING", "ORDER BY", "LIMIT", "OFFSET")
_UPDATE_CLAUSES = ("SET", "WHERE")
_DELETE_CLAUSES = ("FROM", "WHERE")

_UNSUPPORTED_WORDS = frozenset((
    "CROSS",
    "DUPLICATE",
    "EXCEPT",
    "FOR",
    "FULL",
    "INTERSECT",
    "INTO",
    "LOCK",
    "MINUS",
    "NATURAL",
    "PARTITION",
    "QUALIFY",
    "RETURNING",
    "STRAIGHT_JOIN",
    "UNION",
    "USING",
    "WINDOW",
    "WITH",
))
_MODIFIERS = frozenset((
    "ALL",
    "DELAYED",
    "DISTINCTROW",
    "HIGH_PRIORITY",
    "IGNORE",
    "LOW_PRIORITY",
    "ONLY",
    "QUICK",
    "SQL_BIG_RESULT",
    "SQL_BUFFER_RESULT",
    "SQL_CACHE",
    "SQL_CALC_FOUND_ROWS",
    "SQL_NO_CACHE",
    "SQL_SMALL_RESULT",
    "TOP",
))
_RESERVED_ALIASES = frozenset(("AS", "ON", "JOIN", "INNER", "LEFT", "RIGHT", "OUTER", "SET", "WHERE", "VALUES"))


class ClauseCategory(Enum):
    """Named section of a statement."""

    COLUMNS = "columns"
    TABLE = "table"
    JOINS = "joins"
    WHERE = "where"
    GROUP_BY = "group_by"
    HAVING = "having"
    ORDER_BY = "order_by"
    LIMIT = "limit"
    OFFSET = "offset"
    VALUES = "values"
    ASSIGNMENTS = "assignments"


class JoinKind(Enum):
    INNER = "INNER"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    PLAIN = "JOIN"


@dataclass(frozen=True)
class TableReference:
    """A table name with its optional alias."""

    name: str
    alias: Optional[str] = None

    @property
    def reference(self) -> str:
        """How the rest of the statement refers to this table."""
        return self.alias or self.name


@dataclass(frozen=True)
class JoinClause:
    kind: JoinKind
    table: TableReference
    condition: str


@dataclass(frozen=True)
class OrderItem:
    expression: str
    direction: str = "ASC"


@dataclass(frozen=True)
class SetAssignment:
    """``column = value`` pair of an UPDATE SET list or an INSERT row."""

    column: str
    value: str


class ClauseSet:
    """Ordered mapping of clause category to parsed content.

    Only categories present in the statement are populated, in source order.
    """

    __slots__ = ("_clauses", "distinct", "kind")

    def __init__(self, kind: StatementKind, distinct: bool = False) -> None:
        self.kind = kind
        self.distinct = distinct
        self._clauses: dict[ClauseCategory, Any] = {}

    def add(self, category: ClauseCategory, content: Any) -> None:
        if category in self._clauses:
            msg = f"Duplicate {category.value} clause"
            raise UnsupportedClauseError(msg)
        self._clauses[category] = content

    def get(self, category: ClauseCategory, default: Any = None) -> Any:
        return self._clauses.get(category, default)

    def __getitem__(self, category: ClauseCategory) -> Any:
        return self._clauses[category]

    def __contains__(self, category: object) -> bool:
        return category in self._clauses

    @property
    def categories(self) -> "tuple[ClauseCategory, ...]":
        return tuple(self._clauses)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ClauseSet):
            return NotImplemented
        return self.kind is other.kind and self.distinct == other.distinct and self._clauses == other._clauses

    def __hash__(self) -> int:
        return hash((self.kind, self.distinct, tuple(self._clauses)))

    def __repr__(self) -> str:
        return f"ClauseSet({self.kind.value}, distinct={self.distinct}, {self._clauses!r})"


def parse_clauses(sql: SqlText) -> ClauseSet:
    """Decompose a normalized statement into its clauses.

    Args:
        sql: The normalized statement.

    Raises:
        UnknownStatementKindError: If the statement kind is unknown.
        UnsupportedClauseError: If the statement uses grammar outside the supported set.
        MalformedExpressionError: If quotes or parentheses are unbalanced.

    Returns:
        The populated clause set.
    """
    kind = sql.kind
    if kind is StatementKind.UNKNOWN:
        raise UnknownStatementKindError(sql=sql.text)
    text = sql.text
    _check_statement(text, kind)
    if kind is StatementKind.SELECT:
        return _parse_select(text)
    if kind is StatementKind.INSERT:
        return _parse_insert(text)
    if kind is StatementKind.UPDATE:
        return _parse_update(text)
    if kind is StatementKind.DELETE:
        return _parse_delete(text)
    assert_never(kind)


def _check_statement(text: str, kind: StatementKind) -> None:
    if not is_balanced(text):
        msg = "Unbalanced quotes or parentheses"
        raise MalformedExpressionError(msg, text)
    if find_top_level_position(text, ";") >= 0:
        msg = "Multiple statements are not supported"
        raise UnsupportedClauseError(msg, text)
    for index, (_, _, word) in enumerate(iter_top_level_words(text)):
        if word == "INTO" and kind is StatementKind.INSERT and index == 1:
            continue
        if word in _UNSUPPORTED_WORDS:
            msg = f"{word} is not supported"
            raise UnsupportedClauseError(msg, text)


def _locate(text: str, allowed: "tuple[str, ...]", statement: str) -> "list[tuple[str, int, int]]":
    """Find the top-level clause keywords of a statement.

    Returns:
        ``(name, start, end)`` for every clause keyword, in source order.
    """
    words = list(iter_top_level_words(text))
    found: list[tuple[str, int, int]] = []
    position = -1
    i = 1
    while i < len(words):
        start, end, name = words[i]
        if name in {"GROUP", "ORDER"} and i + 1 < len(words) and words[i + 1][2] == "BY":
            end = words[i + 1][1]
            name = f"{name} BY"
            i += 1
        i += 1
        if name not in _CLAUSE_NAMES:
            continue
        if name not in allowed:
            msg = f"{name} is not supported in {statement}"
            raise UnsupportedClauseError(msg, text)
        index = allowed.index(name)
        if index <= position:
            msg = f"{name} is duplicated or out of order"
            raise UnsupportedClauseError(msg, text)
        position = index
        found.append((name, start, end))
    return found


def _bodies(text: str, head_start: int, markers: "list[tuple[str, int, int]]") -> "tuple[str, dict[str, str]]":
    head_end = markers[0][1] if markers else len(text)
    bodies: dict[str, str] = {}
    for index, (name, _, end) in enumerate(markers):
        stop = markers[index + 1][1] if index + 1 < len(markers) else len(text)
        body = text[end:stop].strip()
        if not body:
            msg = f"Empty {name} clause"
            raise UnsupportedClauseError(msg, text)
        bodies[name] = body
    return text[head_start:head_end].strip(), bodies


def _first_word(text: str) -> "Optional[tuple[int, int, str]]":
    return next(iter_top_level_words(text), None)


def _check_modifiers(head: str, sql: str) -> None:
    word = _first_word(head)
    if word is not None and word[0] == 0 and word[2] in _MODIFIERS:
        msg = f"{word[2]} modifier is not supported"
        raise UnsupportedClauseError(msg, sql)


def _split_list(body: str, sql: str, what: str) -> "list[str]":
    parts = split_respecting_delimiters(body)
    if not all(parts):
        msg = f"Empty item in {what} list"
        raise UnsupportedClauseError(msg, sql)
    return parts


def _parse_integer(value: str, sql: str, what: str) -> int:
    value = value.strip()
    if not _INTEGER_RE.match(value):
        msg = f"Non-integer {what} is not supported"
        raise UnsupportedClauseError(msg, sql)
    return int(value)


def _parse_table_reference(reference: str, sql: str) -> TableReference:
    reference = reference.strip()
    if reference.startswith("("):
        msg = "Derived tables are not supported"
        raise UnsupportedClauseError(msg, sql)
    if find_top_level_position(reference, ",") >= 0:
        msg = "Comma joins are not supported"
        raise UnsupportedClauseError(msg, sql)
    match = _TABLE_REFERENCE_RE.match(reference)
    if match is None:
        msg = f"Unsupported table reference: {reference}"
        raise UnsupportedClauseError(msg, sql)
    alias = match.group("alias")
    if alias is not None and alias.upper() in _RESERVED_ALIASES:
        msg = f"Unsupported table reference: {reference}"
        raise UnsupportedClauseError(msg, sql)
    return TableReference(match.group("name"), alias)


def _parse_from(body: str, sql: str) -> "tuple[TableReference, tuple[JoinClause, ...]]":
    """Split a FROM body into its main table and joins."""
    words = list(iter_top_level_words(body))
    join_starts: list[tuple[int, int, JoinKind]] = []
    for index, (start, end, word) in enumerate(words):
        if word != "JOIN":
            continue
        kind = JoinKind.PLAIN
        first = start
        previous = words[index - 1][2] if index > 0 else None
        if previous == "OUTER":
            side = words[index - 2][2] if index > 1 else None
            if side not in {"LEFT", "RIGHT"}:
                msg = "Only LEFT and RIGHT outer joins are supported"
                raise UnsupportedClauseError(msg, sql)
            kind = JoinKind(side)
            first = words[index - 2][0]
        elif previous in {"INNER", "LEFT", "RIGHT"}:
            kind = JoinKind(previous)
            first = words[index - 1][0]
        join_starts.append((first, end, kind))

    table = _parse_table_reference(body[: join_starts[0][0]] if join_starts else body, sql)
    joins: list[JoinClause] = []
    for index, (_, join_end, kind) in enumerate(join_starts):
        stop = join_starts[index + 1][0] if index + 1 < len(join_starts) else len(body)
        segment = body[join_end:stop]
        on = next((word for word in iter_top_level_words(segment) if word[2] == "ON"), None)
        if on is None:
            msg = "JOIN without an ON condition is not supported"
            raise UnsupportedClauseError(msg, sql)
        condition = segment[on[1] :].strip()
        if not condition:
            msg = "Empty JOIN condition"
            raise UnsupportedClauseError(msg, sql)
        joins.append(JoinClause(kind, _parse_table_reference(segment[: on[0]], sql), condition))
    return table, tuple(joins)


def _parse_order_by(body: str, sql: str) -> "tuple[OrderItem, ...]":
    items: list[OrderItem] = []
    for part in _split_list(body, sql, "ORDER BY"):
        words = list(iter_top_level_words(part))
        if any(word[2] == "NULLS" for word in words):
            msg = "NULLS FIRST/LAST is not supported"
            raise UnsupportedClauseError(msg, sql)
        if words and words[-1][2] in {"ASC", "DESC"} and words[-1][1] == len(part):
            expression = part[: words[-1][0]].strip()
            if not expression:
                msg = "Empty ORDER BY expression"
                raise UnsupportedClauseError(msg, sql)
            items.append(OrderItem(expression, words[-1][2]))
        else:
            items.append(OrderItem(part))
    return tuple(items)


def _parse_limit(body: str, sql: str) -> "tuple[int, Optional[int]]":
    """Parse ``n`` or MySQL's ``offset, n``."""
    parts = split_respecting_delimiters(body)
    if len(parts) == 2:
        return _parse_integer(parts[1], sql, "LIMIT"), _parse_integer(parts[0], sql, "OFFSET")
    if len(parts) != 1:
        msg = "Unsupported LIMIT clause"
        raise UnsupportedClauseError(msg, sql)
    return _parse_integer(parts[0], sql, "LIMIT"), None


def _parse_select(text: str) -> ClauseSet:
    markers = _locate(text, _SELECT_CLAUSES, "SELECT")
    head, bodies = _bodies(text, len("SELECT"), markers)

    distinct = False
    first = _first_word(head)
    if first is not None and first[0] == 0 and first[2] == "DISTINCT":
        distinct = True
        head = head[first[1] :].strip()
    _check_modifiers(head, text)
    if not head:
        msg = "Empty select list"
        raise UnsupportedClauseError(msg, text)
    _split_list(head, text, "select")

    clauses = ClauseSet(StatementKind.SELECT, distinct=distinct)
    clauses.add(ClauseCategory.COLUMNS, head)
    if "FROM" in bodies:
        table, joins = _parse_from(bodies["FROM"], text)
        clauses.add(ClauseCategory.TABLE, table)
        if joins:
            clauses.add(ClauseCategory.JOINS, joins)
    if "WHERE" in bodies:
        clauses.add(ClauseCategory.WHERE, bodies["WHERE"])
    if "GROUP BY" in bodies:
        clauses.add(ClauseCategory.GROUP_BY, tuple(_split_list(bodies["GROUP BY"], text, "GROUP BY")))
    if "HAVING" in bodies:
        clauses.add(ClauseCategory.HAVING, bodies["HAVING"])
    if "ORDER BY" in bodies:
        clauses.add(ClauseCategory.ORDER_BY, _parse_order_by(bodies["ORDER BY"], text))
    if "LIMIT" in bodies:
        limit, offset = _parse_limit(bodies["LIMIT"], text)
        clauses.add(ClauseCategory.LIMIT, limit)
        if offset is not None:
            clauses.add(ClauseCategory.OFFSET, offset)
    if "OFFSET" in bodies:
        clauses.add(ClauseCategory.OFFSET, _parse_integer(bodies["OFFSET"], text, "OFFSET"))
    return clauses


def _parse_insert(text: str) -> ClauseSet:
    words = list(iter_top_level_words(text))
    if len(words) > 1 and words[1][2] in _MODIFIERS:
        msg = f"{words[1][2]} modifier is not supported"
        raise UnsupportedClauseError(msg, text)
    rest = text[words[1][1] :] if len(words) > 1 and words[1][2] == "INTO" else text[words[0][1] :]

    target = _INSERT_TARGET_RE.match(rest)
    if target is None:
        msg = "INSERT needs a table and a column list"
        raise UnsupportedClauseError(msg, text)
    columns_open = target.end() - 1
    columns_close = find_closing_parenthesis(rest, columns_open)
    after_columns = rest[columns_close + 1 :]
    values_match = _VALUES_RE.match(after_columns)
    if values_match is None:
        msg = "INSERT without a VALUES list is not supported"
        raise UnsupportedClauseError(msg, text)
    values_open = values_match.end() - 1
    values_close = find_closing_parenthesis(after_columns, values_open)
    trailing = after_columns[values_close + 1 :].strip()
    if trailing:
        msg = "Multi-row VALUES is not supported"
        if not trailing.startswith(","):
            msg = f"Unsupported INSERT tail: {trailing}"
        raise UnsupportedClauseError(msg, text)

    columns = _split_list(rest[columns_open + 1 : columns_close], text, "column")
    values = _split_list(after_columns[values_open + 1 : values_close], text, "VALUES")
    if len(columns) != len(values):
        msg = "Column count does not match value count"
        raise UnsupportedClauseError(msg, text)
    for column in columns:
        if not _QUALIFIED_NAME_RE.match(column):
            msg = f"Unsupported column: {column}"
            raise UnsupportedClauseError(msg, text)

    clauses = ClauseSet(StatementKind.INSERT)
    clauses.add(ClauseCategory.TABLE, TableReference(target.group("name")))
    clauses.add(ClauseCategory.VALUES, tuple(SetAssignment(c, v) for c, v in zip(columns, values)))
    return clauses


def _parse_update(text: str) -> ClauseSet:
    markers = _locate(text, _UPDATE_CLAUSES, "UPDATE")
    head, bodies = _bodies(text, len("UPDATE"), markers)
    if "SET" not in bodies:
        msg = "UPDATE without SET"
        raise UnsupportedClauseError(msg, text)
    _check_modifiers(head, text)
    if find_top_level_position(head, ",") >= 0 or any(word[2] == "JOIN" for word in iter_top_level_words(head)):
        msg = "Multi-table UPDATE is not supported"
        raise UnsupportedClauseError(msg, text)

    assignments: list[SetAssignment] = []
    for part in _split_list(bodies["SET"], text, "SET"):
        equals = find_top_level_position(part, "=")
        column = part[:equals].strip() if equals > 0 else ""
        value = part[equals + 1 :].strip() if equals > 0 else ""
        if not _QUALIFIED_NAME_RE.match(column) or not value:
            msg = f"Unsupported assignment: {part}"
            raise UnsupportedClauseError(msg, text)
        assignments.append(SetAssignment(column, value))

    clauses = ClauseSet(StatementKind.UPDATE)
    clauses.add(ClauseCategory.TABLE, _parse_table_reference(head, text))
    clauses.add(ClauseCategory.ASSIGNMENTS, tuple(assignments))
    if "WHERE" in bodies:
        clauses.add(ClauseCategory.WHERE, bodies["WHERE"])
    return clauses


def _parse_delete(text: str) -> ClauseSet:
    markers = _locate(text, _DELETE_CLAUSES, "DELETE")
    head, bodies = _bodies(text, len("DELETE"), markers)
    if "FROM" not in bodies:
        msg = "DELETE without FROM"
        raise UnsupportedClauseError(msg, text)
    _check_modifiers(head, text)
    table, joins = _parse_from(bodies["FROM"], text)
    if head:
        if not _NAME_RE.match(head) or head not in {table.name, table.reference}:
            msg = "Multi-table DELETE is not supported"
            raise UnsupportedClauseError(msg, text)
    elif joins:
        msg = "DELETE with joins needs an explicit target"
        raise UnsupportedClauseError(msg, text)

    clauses = ClauseSet(StatementKind.DELETE)
    clauses.add(ClauseCategory.TABLE, table)
    if joins:
        clauses.add(ClauseCategory.JOINS, joins)
    if "WHERE" in bodies:
        clauses.add(ClauseCategory.WHERE, bodies["WHERE"])
    return clauses
