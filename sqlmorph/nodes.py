"""In-memory command objects exchanged with the rewrite driver.

A driver that walks a real syntax tree describes each call site with these
small immutable objects and receives replacements built from the same
vocabulary. The translator never sees the host language's syntax: literal
detection, identity comparison and rendering all happen on these objects.

A unit such as::

    stmt = this.db.prepare("SELECT * FROM users WHERE id = ?")
    stmt.execute([42])

is described as::

    Assignment(
        target=Variable("stmt"),
        value=MethodCall(PropertyFetch(Variable("this"), "db"), "prepare", (Literal("SELECT ..."),)),
    )
    MethodCall(Variable("stmt"), "execute", (ArrayLiteral((ArrayItem(Literal(42)),)),))
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from typing_extensions import TypeAlias

__all__ = (
    "ArrayItem",
    "ArrayLiteral",
    "Assignment",
    "Concat",
    "InterpolatedString",
    "Literal",
    "MethodCall",
    "Node",
    "Opaque",
    "PropertyFetch",
    "Variable",
    "identity_key",
)


@dataclass(frozen=True)
class Literal:
    """A scalar literal: string, integer, float, boolean or null."""

    value: Any


@dataclass(frozen=True)
class Variable:
    """A plain variable reference."""

    name: str


@dataclass(frozen=True)
class PropertyFetch:
    """Property access ``owner.name``."""

    owner: "Node"
    name: str


@dataclass(frozen=True)
class Concat:
    """Binary string concatenation ``left . right``."""

    left: "Node"
    right: "Node"


@dataclass(frozen=True)
class InterpolatedString:
    """A string with embedded expressions.

    ``parts`` holds plain ``str`` chunks and ``Node`` objects for the
    interpolated expressions, in source order.
    """

    parts: "tuple[Union[str, Node], ...]"


@dataclass(frozen=True)
class ArrayItem:
    """One array element, keyed or positional."""

    value: "Node"
    key: "Optional[Node]" = None


@dataclass(frozen=True)
class ArrayLiteral:
    """An array/list/map literal."""

    items: "tuple[ArrayItem, ...]" = ()

    @property
    def is_keyed(self) -> bool:
        return bool(self.items) and all(item.key is not None for item in self.items)

    @property
    def is_positional(self) -> bool:
        return all(item.key is None for item in self.items)


@dataclass(frozen=True)
class MethodCall:
    """``receiver.name(arguments...)``."""

    receiver: "Node"
    name: str
    arguments: "tuple[Node, ...]" = ()


@dataclass(frozen=True)
class Assignment:
    """``target = value``."""

    target: "Node"
    value: "Node"


@dataclass(frozen=True)
class Opaque:
    """Any expression the translator does not inspect.

    ``text`` is only used for rendering and logging.
    """

    text: str = field(default="<expr>")


Node: TypeAlias = Union[
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
]


def identity_key(node: "Node") -> "Optional[str]":
    """Stable identity of a variable or property path.

    Variables are identified by name, property paths by their dotted path
    (``this.stmt``). Anything else has no identity and cannot be tracked.

    Args:
        node: Receiver or assignment target.

    Returns:
        The identity string, or None when the node is not trackable.
    """
    if isinstance(node, Variable):
        return node.name
    if isinstance(node, PropertyFetch):
        owner = identity_key(node.owner)
        if owner is None:
            return None
        return f"{owner}.{node.name}"
    return None
