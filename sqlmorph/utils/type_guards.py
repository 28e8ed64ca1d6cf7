"""Type guard functions for runtime checks on command objects.

These help the type checker narrow ``Node`` unions at the call-site
classifier instead of scattering ``isinstance`` chains.
"""

from typing import TYPE_CHECKING, Any

from sqlmorph.nodes import (
    ArrayItem,
    ArrayLiteral,
    Assignment,
    Concat,
    InterpolatedString,
    Literal,
    MethodCall,
    Opaque,
    PropertyFetch,
    Variable,
)

if TYPE_CHECKING:
    from typing_extensions import TypeGuard

    from sqlmorph.nodes import Node

__all__ = (
    "NODE_TYPES",
    "is_array_literal",
    "is_int_literal",
    "is_method_call",
    "is_node",
    "is_string_literal",
)

NODE_TYPES = (
    Literal,
    Variable,
    PropertyFetch,
    Concat,
    InterpolatedString,
    ArrayLiteral,
    ArrayItem,
    MethodCall,
    Assignment,
    Opaque,
)


def is_node(obj: Any) -> "TypeGuard[Node]":
    """Check if an object is a command object.

    Args:
        obj: The object to check

    Returns:
        True if the object is one of the node types, False otherwise
    """
    return isinstance(obj, NODE_TYPES)


def is_string_literal(obj: Any) -> "TypeGuard[Literal]":
    """Check if an object is a string literal.

    Args:
        obj: The object to check

    Returns:
        True if the object is a ``Literal`` holding a ``str``, False otherwise
    """
    return isinstance(obj, Literal) and isinstance(obj.value, str)


def is_int_literal(obj: Any) -> "TypeGuard[Literal]":
    # bool is an int subclass
    return isinstance(obj, Literal) and isinstance(obj.value, int) and not isinstance(obj.value, bool)


def is_array_literal(obj: Any) -> "TypeGuard[ArrayLiteral]":
    return isinstance(obj, ArrayLiteral)


def is_method_call(obj: Any, *names: str) -> "TypeGuard[MethodCall]":
    """Check if an object is a method call, optionally to one of ``names``.

    Args:
        obj: The object to check
        *names: Accepted method names. Any name when empty.

    Returns:
        True if the object is a matching ``MethodCall``, False otherwise
    """
    if not isinstance(obj, MethodCall):
        return False
    return not names or obj.name in names
