"""SQL text extraction from call-site arguments."""

from typing import Optional

from sqlmorph.nodes import Concat, InterpolatedString, Literal, Node

__all__ = ("extract_sql",)


def extract_sql(node: "Optional[Node]") -> "Optional[str]":
    """Return the SQL string held by a literal argument.

    String literals, concatenations of string literals and interpolated
    strings without embedded expressions are accepted. Anything that needs a
    runtime value gives ``None``.

    Args:
        node: The SQL argument of a prepare/query/exec call.

    Returns:
        The literal SQL, or None when it is not statically known.
    """
    if isinstance(node, Literal):
        return node.value if isinstance(node.value, str) else None
    if isinstance(node, Concat):
        left = extract_sql(node.left)
        if left is None:
            return None
        right = extract_sql(node.right)
        if right is None:
            return None
        return left + right
    if isinstance(node, InterpolatedString):
        if all(isinstance(part, str) for part in node.parts):
            return "".join(part for part in node.parts if isinstance(part, str))
        return None
    return None
