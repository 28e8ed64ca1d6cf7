"""Quote and parenthesis aware scanning of SQL fragments.

The predicate splitter decomposes a boolean WHERE/HAVING expression into
its top-level AND/OR operands. Everything that is quoted, parenthesized or
inside a ``CASE ... END`` block is opaque, and the ``AND`` of a
``BETWEEN x AND y`` is never a split point.

The module also provides the scanning helpers the clause parser relies on:
top-level delimiter search, delimiter splitting and keyword iteration.

Splitting never fails. Unbalanced quotes or parentheses, and dangling
operators, produce a single opaque predicate holding the whole input.
"""

import re
from collections.abc import Iterator
from enum import Enum
from typing import NamedTuple, Optional

from sqlmorph.utils.logging import get_logger

__all__ = (
    "QUOTE_CHARS",
    "BooleanOperator",
    "Predicate",
    "find_closing_parenthesis",
    "find_top_level_position",
    "is_balanced",
    "is_wrapped_in_parentheses",
    "iter_top_level_words",
    "skip_quoted",
    "split_predicates",
    "split_respecting_delimiters",
)

logger = get_logger("core.splitter")

QUOTE_CHARS = frozenset(("'", '"', "`"))
_BACKSLASH_ESCAPED = frozenset(("'", '"'))
_WORD_START = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_")
_WORD_CHARS = _WORD_START | frozenset("0123456789$")
# A word glued to one of these is a placeholder, qualified name or variable, never a keyword.
_WORD_PREFIXES = _WORD_CHARS | frozenset(".:@")
_DANGLING_OPERATOR_RE = re.compile(r"^(?:AND|OR)(?:\s|$)|\s(?:AND|OR)$", re.IGNORECASE)


class BooleanOperator(str, Enum):
    """Operator joining a predicate to the previous one."""

    AND = "AND"
    OR = "OR"


class Predicate(NamedTuple):
    """One top-level operand of a boolean clause.

    ``operator`` joins it to the previous predicate and is ``None`` for the
    first one.
    """

    text: str
    operator: Optional[BooleanOperator] = None


def skip_quoted(text: str, start: int) -> int:
    """Return the index just past the quoted section opening at ``start``.

    Doubled quote characters are an escaped quote. Backslash escapes are
    honoured in single and double quoted strings.

    Args:
        text: Text being scanned.
        start: Index of the opening quote character.

    Returns:
        Index after the closing quote, or -1 when the quote is never closed.
    """
    quote = text[start]
    i = start + 1
    length = len(text)
    while i < length:
        char = text[i]
        if char == "\\" and quote in _BACKSLASH_ESCAPED:
            i += 2
            continue
        if char == quote:
            if i + 1 < length and text[i + 1] == quote:
                i += 2
                continue
            return i + 1
        i += 1
    return -1


def _iter_top_level(text: str) -> Iterator[int]:
    """Yield indexes of characters outside quotes and parentheses."""
    depth = 0
    i = 0
    length = len(text)
    while i < length:
        char = text[i]
        if char in QUOTE_CHARS:
            end = skip_quoted(text, i)
            if end < 0:
                return
            i = end
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif depth == 0:
            yield i
        i += 1


def is_balanced(text: str) -> bool:
    """Check that every quote is closed and parentheses nest correctly."""
    depth = 0
    i = 0
    length = len(text)
    while i < length:
        char = text[i]
        if char in QUOTE_CHARS:
            end = skip_quoted(text, i)
            if end < 0:
                return False
            i = end
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                return False
        i += 1
    return depth == 0


def is_wrapped_in_parentheses(text: str) -> bool:
    """Check whether one outer parenthesis pair encloses the whole text.

    ``(a OR b)`` is wrapped, ``(a) AND (b)`` is not: its first group closes
    before the final character.
    """
    stripped = text.strip()
    if not stripped.startswith("(") or not stripped.endswith(")") or not is_balanced(stripped):
        return False
    depth = 0
    i = 0
    length = len(stripped)
    while i < length:
        char = stripped[i]
        if char in QUOTE_CHARS:
            i = skip_quoted(stripped, i)
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return i == length - 1
        i += 1
    return False


def find_closing_parenthesis(text: str, open_index: int) -> int:
    """Index of the parenthesis closing the one at ``open_index``, or -1."""
    depth = 0
    i = open_index
    length = len(text)
    while i < length:
        char = text[i]
        if char in QUOTE_CHARS:
            i = skip_quoted(text, i)
            if i < 0:
                return -1
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def find_top_level_position(text: str, char: str, start: int = 0) -> int:
    """Find the first ``char`` outside quotes and parentheses.

    Args:
        text: Text to search.
        char: Single character to look for.
        start: Ignore matches before this index.

    Returns:
        The index of the match, or -1.
    """
    for index in _iter_top_level(text):
        if index >= start and text[index] == char:
            return index
    return -1


def split_respecting_delimiters(text: str, delimiter: str = ",") -> "list[str]":
    """Split on a delimiter that is outside quotes and parentheses.

    Parts are stripped. Empty parts are kept so callers can reject
    ``a,,b`` or a trailing delimiter.
    """
    parts: list[str] = []
    last = 0
    for index in _iter_top_level(text):
        if text[index] == delimiter:
            parts.append(text[last:index].strip())
            last = index + 1
    parts.append(text[last:].strip())
    return parts


def iter_top_level_words(text: str) -> "Iterator[tuple[int, int, str]]":
    """Yield ``(start, end, WORD)`` for bare words outside quotes and parentheses.

    Words glued to ``.``, ``:`` or ``@`` (qualified names, placeholders,
    variables) are skipped. ``WORD`` is upper-cased.
    """
    depth = 0
    i = 0
    length = len(text)
    while i < length:
        char = text[i]
        if char in QUOTE_CHARS:
            end = skip_quoted(text, i)
            if end < 0:
                return
            i = end
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif char in _WORD_START:
            end = i + 1
            while end < length and text[end] in _WORD_CHARS:
                end += 1
            if depth == 0 and (i == 0 or text[i - 1] not in _WORD_PREFIXES):
                yield i, end, text[i:end].upper()
            i = end
            continue
        i += 1


def _is_boolean_keyword(text: str, start: int, end: int) -> bool:
    """A boolean keyword needs whitespace on both sides."""
    return 0 < start and end < len(text) and text[start - 1].isspace() and text[end].isspace()


def split_predicates(expression: str) -> "list[Predicate]":
    """Split a boolean expression into its top-level predicates.

    ``a = 1 AND b = 2 OR c = 3`` gives ``[("a = 1", None), ("b = 2", AND),
    ("c = 3", OR)]``. Parenthesized groups, quoted text, ``CASE`` blocks and
    ``BETWEEN ... AND ...`` ranges stay inside one predicate.

    Args:
        expression: WHERE or HAVING condition without its keyword.

    Returns:
        The predicates in source order. A single predicate holding the
        trimmed expression when nothing can be split or the input is
        malformed; an empty list for an empty expression.
    """
    trimmed = expression.strip()
    if not trimmed:
        return []
    whole = [Predicate(trimmed, None)]
    if _DANGLING_OPERATOR_RE.search(trimmed):
        logger.warning("Dangling boolean operator, keeping expression opaque: %s", trimmed)
        return whole
    if not is_balanced(trimmed):
        logger.warning("Unbalanced quotes or parentheses, keeping expression opaque: %s", trimmed)
        return whole
    if is_wrapped_in_parentheses(trimmed):
        return whole

    predicates: list[Predicate] = []
    pending: Optional[BooleanOperator] = None
    segment_start = 0
    depth = 0
    case_depth = 0
    between_pending = False
    i = 0
    length = len(trimmed)
    while i < length:
        char = trimmed[i]
        if char in QUOTE_CHARS:
            i = skip_quoted(trimmed, i)
            continue
        if char == "(":
            depth += 1
            i += 1
            continue
        if char == ")":
            depth -= 1
            i += 1
            continue
        if char not in _WORD_START or (i > 0 and trimmed[i - 1] in _WORD_PREFIXES):
            i += 1
            continue

        end = i + 1
        while end < length and trimmed[end] in _WORD_CHARS:
            end += 1
        word = trimmed[i:end].upper()
        if depth == 0:
            if word == "CASE":
                case_depth += 1
            elif word == "END" and case_depth:
                case_depth -= 1
            elif word == "BETWEEN" and not case_depth:
                between_pending = True
            elif word in {"AND", "OR"} and not case_depth and _is_boolean_keyword(trimmed, i, end):
                if word == "AND" and between_pending:
                    between_pending = False
                else:
                    predicates.append(Predicate(trimmed[segment_start:i].strip(), pending))
                    pending = BooleanOperator(word)
                    segment_start = end
        i = end
    predicates.append(Predicate(trimmed[segment_start:].strip(), pending))

    if any(not predicate.text for predicate in predicates):
        logger.warning("Dangling boolean operator, keeping expression opaque: %s", trimmed)
        return whole
    if len(predicates) <= 1:
        return whole
    return predicates
