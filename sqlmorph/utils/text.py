"""Identifier helpers."""

import re
from functools import lru_cache

# Handles sequences like "HTTPRequest" -> "HTTP_Request" or "PDOHandle" -> "PDO_Handle"
_SNAKE_CASE_RE_ACRONYM_SEQUENCE = re.compile(r"([A-Z\d]+)([A-Z][a-z])")
# Handles transitions like "camelCase" -> "camel_Case"
_SNAKE_CASE_RE_LOWER_UPPER_TRANSITION = re.compile(r"([a-z\d])([A-Z])")
# Replaces hyphens, spaces, and dots with a single underscore
_SNAKE_CASE_RE_REPLACE_SEP = re.compile(r"[-\s.]+")
_SNAKE_CASE_RE_CLEAN_MULTIPLE_UNDERSCORE = re.compile(r"__+")
_SNAKE_CASE_RE_LEADING_DIGIT_UNDERSCORE = re.compile(r"^([0-9])_+")

__all__ = (
    "identifier_words",
    "snake_case",
)


@lru_cache(maxsize=256)
def snake_case(string: str) -> str:
    """Convert a string to snake_case.

    Handles CamelCase, PascalCase, strings with spaces, hyphens, or dots
    as separators, and ensures single underscores. Acronyms are kept together
    (e.g., "PDOStatement" becomes "pdo_statement").

    Args:
        string: The string to convert.

    Returns:
        The snake_case version of the string.
    """
    if not string:
        return ""
    s = string.strip()
    s = _SNAKE_CASE_RE_REPLACE_SEP.sub("_", s)
    s = _SNAKE_CASE_RE_ACRONYM_SEQUENCE.sub(r"\1_\2", s)
    s = _SNAKE_CASE_RE_LOWER_UPPER_TRANSITION.sub(r"\1_\2", s)
    s = re.sub(r"[^\w_]", "", s, flags=re.UNICODE)
    s = _SNAKE_CASE_RE_CLEAN_MULTIPLE_UNDERSCORE.sub("_", s)
    s = s.lower()
    s = s.strip("_")
    return _SNAKE_CASE_RE_LEADING_DIGIT_UNDERSCORE.sub(r"\1", s)


def identifier_words(identifier: str) -> "tuple[str, ...]":
    """Split an identifier into its lowercase words.

    ``"dbConnection"``, ``"db_connection"`` and ``"_DB_Connection"`` all give
    ``("db", "connection")``.

    Args:
        identifier: Variable or property name.

    Returns:
        The words of the identifier, in order, without empty parts.
    """
    return tuple(word for word in snake_case(identifier).split("_") if word)
