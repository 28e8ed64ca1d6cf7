"""SQL text normalization and statement classification.

Every extracted SQL literal goes through :func:`normalize_sql` exactly once:

1. comments outside quoted text (``/* */``, ``#``, ``-- ``) are removed,
2. whitespace outside quoted text is collapsed and the ends are trimmed,
3. trailing statement terminators are dropped,
4. positional ``?`` placeholders become ``:param1``, ``:param2``, ... in
   order of occurrence, with a counter private to this statement,
5. the leading keyword decides the :class:`StatementKind`.

Quoted text (strings and quoted identifiers) is never modified.
"""

import re
from dataclasses import dataclass
from enum import Enum

from mypy_extensions import mypyc_attr

from sqlmorph.core.splitter import QUOTE_CHARS, skip_quoted
from sqlmorph.exceptions import MalformedExpressionError, ParameterStyleMismatchError
from sqlmorph.utils.logging import get_logger

__all__ = (
    "POSITIONAL_PARAMETER_PREFIX",
    "SqlText",
    "StatementKind",
    "Token",
    "TokenType",
    "classify",
    "find_named_placeholders",
    "normalize",
    "normalize_sql",
    "renumber_placeholders",
    "tokenize",
)

logger = get_logger("core.normalizer")

POSITIONAL_PARAMETER_PREFIX = "param"

_WHITESPACE_RE = re.compile(r"\s+")
_NAMED_PLACEHOLDER_RE = re.compile(r"(?<![:\w]):([A-Za-z_][A-Za-z0-9_]*)")
_LEADING_KEYWORD_RE = re.compile(r"^(SELECT|INSERT|UPDATE|DELETE)\b", re.IGNORECASE)

TOKEN_SLOTS = ("type", "value")


class StatementKind(Enum):
    """Kind of statement, derived from its leading keyword."""

    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    UNKNOWN = "UNKNOWN"

    @property
    def returns_rows(self) -> bool:
        return self is StatementKind.SELECT


class TokenType(Enum):
    """Lexical categories relevant to normalization."""

    CODE = "CODE"
    QUOTED = "QUOTED"
    COMMENT = "COMMENT"


@mypyc_attr(allow_interpreted_subclasses=True)
class Token:
    """A run of SQL text of a single lexical category."""

    __slots__ = TOKEN_SLOTS

    def __init__(self, type: TokenType, value: str) -> None:  # noqa: A002
        self.type = type
        self.value = value

    def __repr__(self) -> str:
        return f"Token({self.type.value}, {self.value!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return self.type is other.type and self.value == other.value

    def __hash__(self) -> int:
        return hash((self.type, self.value))


@dataclass(frozen=True)
class SqlText:
    """Normalized SQL of one statement.

    ``text`` is whitespace-collapsed with positional placeholders renamed to
    ``:param1..:paramN``; ``original`` is the extracted literal as written.
    """

    text: str
    original: str
    kind: StatementKind
    positional_count: int = 0
    named_parameters: "tuple[str, ...]" = ()

    @property
    def placeholder_names(self) -> "tuple[str, ...]":
        """Names of every placeholder the statement binds, in order."""
        if self.positional_count:
            return tuple(f"{POSITIONAL_PARAMETER_PREFIX}{k}" for k in range(1, self.positional_count + 1))
        return self.named_parameters

    @property
    def has_parameters(self) -> bool:
        return bool(self.positional_count or self.named_parameters)


def _starts_line_comment(sql: str, index: int) -> bool:
    """``#`` or ``--`` followed by whitespace or the end of the text.

    ``5--1`` is ``5 - -1``, not a comment.
    """
    if sql[index] == "#":
        return True
    if not sql.startswith("--", index):
        return False
    following = index + 2
    return following == len(sql) or sql[following].isspace()


def tokenize(sql: str) -> "list[Token]":
    """Split SQL into code, quoted and comment runs.

    Comments follow MySQL: ``/* ... */``, ``#`` to the end of the line, and
    ``--`` to the end of the line when followed by whitespace. Adjacent code
    is merged into one token.

    Raises:
        MalformedExpressionError: On an unterminated quote or block comment.
    """
    tokens: list[Token] = []
    code: list[str] = []

    def flush() -> None:
        if code:
            tokens.append(Token(TokenType.CODE, "".join(code)))
            code.clear()

    i = 0
    length = len(sql)
    while i < length:
        char = sql[i]
        if char in QUOTE_CHARS:
            end = skip_quoted(sql, i)
            if end < 0:
                msg = "Unterminated quoted text"
                raise MalformedExpressionError(msg, sql)
            flush()
            tokens.append(Token(TokenType.QUOTED, sql[i:end]))
            i = end
            continue
        if _starts_line_comment(sql, i):
            end = sql.find("\n", i)
            end = length if end < 0 else end
            flush()
            tokens.append(Token(TokenType.COMMENT, sql[i:end]))
            i = end
            continue
        if sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            if end < 0:
                msg = "Unterminated block comment"
                raise MalformedExpressionError(msg, sql)
            flush()
            tokens.append(Token(TokenType.COMMENT, sql[i : end + 2]))
            i = end + 2
            continue
        code.append(char)
        i += 1
    flush()
    return tokens


def _join(tokens: "list[Token]") -> str:
    return "".join(token.value for token in tokens)


def _strip_comments(tokens: "list[Token]") -> "list[Token]":
    """Replace comments with a single space and merge the code around them."""
    result: list[Token] = []
    for token in tokens:
        value = " " if token.type is TokenType.COMMENT else token.value
        kind = TokenType.QUOTED if token.type is TokenType.QUOTED else TokenType.CODE
        if kind is TokenType.CODE and result and result[-1].type is TokenType.CODE:
            result[-1] = Token(TokenType.CODE, result[-1].value + value)
        else:
            result.append(Token(kind, value))
    return result


def _collapse(tokens: "list[Token]") -> "list[Token]":
    return [
        Token(TokenType.CODE, _WHITESPACE_RE.sub(" ", token.value)) if token.type is TokenType.CODE else token
        for token in tokens
    ]


def normalize(sql: str) -> str:
    """Collapse whitespace runs outside quoted text to one space and trim.

    Raises:
        MalformedExpressionError: On an unterminated quote or block comment.
    """
    return _join(_collapse(_strip_comments(tokenize(sql)))).strip()


def renumber_placeholders(sql: str) -> "tuple[str, int]":
    """Replace every bare ``?`` with ``:paramK``.

    ``K`` starts at 1 for every call: two statements never share a counter.

    Returns:
        The rewritten SQL and the number of placeholders replaced.
    """
    counter = 0
    parts: list[str] = []
    for token in tokenize(sql):
        if token.type is not TokenType.CODE:
            parts.append(token.value)
            continue
        pieces = token.value.split("?")
        rebuilt = [pieces[0]]
        for piece in pieces[1:]:
            counter += 1
            rebuilt.append(f":{POSITIONAL_PARAMETER_PREFIX}{counter}{piece}")
        parts.append("".join(rebuilt))
    return "".join(parts), counter


def find_named_placeholders(sql: str) -> "tuple[str, ...]":
    """Names of the ``:name`` placeholders outside quoted text, first occurrence order.

    ``::type`` casts are not placeholders.
    """
    names: dict[str, None] = {}
    for token in tokenize(sql):
        if token.type is TokenType.CODE:
            for match in _NAMED_PLACEHOLDER_RE.finditer(token.value):
                names.setdefault(match.group(1), None)
    return tuple(names)


def classify(sql: str) -> StatementKind:
    """Kind of a statement from its case-insensitive leading keyword."""
    match = _LEADING_KEYWORD_RE.match(sql.lstrip())
    if match is None:
        return StatementKind.UNKNOWN
    return StatementKind(match.group(1).upper())


def normalize_sql(sql: str) -> SqlText:
    """Normalize one extracted SQL literal.

    Args:
        sql: The literal as extracted from the call site.

    Raises:
        MalformedExpressionError: On an unterminated quote or block comment.
        ParameterStyleMismatchError: When ``?`` and ``:name`` placeholders are mixed.

    Returns:
        The normalized statement.
    """
    text = normalize(sql)
    while text.endswith(";"):
        text = text[:-1].rstrip()
    named = find_named_placeholders(text)
    text, positional_count = renumber_placeholders(text)
    if positional_count and named:
        raise ParameterStyleMismatchError(sql=text)
    kind = classify(text)
    logger.debug(
        "Normalized SQL",
        extra={"extra_fields": {"kind": kind.value, "positional": positional_count, "named": list(named)}},
    )
    return SqlText(text=text, original=sql, kind=kind, positional_count=positional_count, named_parameters=named)
