"""Builder call chains and parameter maps.

A :class:`CallChain` is the only artifact a translation produces: an
immutable receiver expression followed by an ordered list of builder
operations. :meth:`CallChain.to_expression` turns it into nested
``MethodCall`` nodes for the driver to render.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Optional

from sqlmorph.core.normalizer import POSITIONAL_PARAMETER_PREFIX, SqlText
from sqlmorph.nodes import ArrayItem, ArrayLiteral, Literal, MethodCall, Node
from sqlmorph.utils.logging import get_logger
from sqlmorph.utils.type_guards import is_array_literal, is_int_literal, is_node, is_string_literal

__all__ = (
    "CallChain",
    "Operation",
    "ParameterMap",
    "parameter_name",
    "to_node",
)

logger = get_logger("core.chain")


def to_node(value: Any) -> Node:
    """Convert a plain Python value into a node.

    Nodes are returned as-is, scalars become literals, mappings become keyed
    array literals and other sequences positional ones.
    """
    if is_node(value):
        return value
    if value is None or isinstance(value, (str, int, float, bool)):
        return Literal(value)
    if isinstance(value, Mapping):
        return ArrayLiteral(tuple(ArrayItem(to_node(item), Literal(key)) for key, item in value.items()))
    if isinstance(value, Sequence):
        return ArrayLiteral(tuple(ArrayItem(to_node(item)) for item in value))
    msg = f"Cannot convert {type(value).__name__} to a node"
    raise TypeError(msg)


@dataclass(frozen=True)
class Operation:
    """One builder call: a method name and its arguments."""

    name: str
    arguments: "tuple[Node, ...]" = ()

    @classmethod
    def of(cls, name: str, *arguments: Any) -> "Operation":
        return cls(name, tuple(to_node(argument) for argument in arguments))


@dataclass(frozen=True)
class CallChain:
    """A receiver followed by builder operations, in call order."""

    source: Node
    operations: "tuple[Operation, ...]" = ()

    def then(self, name: str, *arguments: Any) -> "CallChain":
        """Return a new chain with one more operation appended."""
        return CallChain(self.source, (*self.operations, Operation.of(name, *arguments)))

    @property
    def operation_names(self) -> "tuple[str, ...]":
        return tuple(operation.name for operation in self.operations)

    def find(self, name: str) -> "Optional[Operation]":
        """First operation called ``name``, if any."""
        return next((operation for operation in self.operations if operation.name == name), None)

    def to_expression(self) -> Node:
        """Nest the operations into ``MethodCall`` nodes, innermost first."""
        node = self.source
        for operation in self.operations:
            node = MethodCall(node, operation.name, operation.arguments)
        return node

    def __len__(self) -> int:
        return len(self.operations)


@dataclass(frozen=True)
class ParameterMap:
    """Parameter values keyed by placeholder name, in binding order.

    Positional arguments are keyed ``param1..paramN`` in argument order, which
    is the left-to-right placeholder order of the renumbered SQL.
    """

    entries: "tuple[tuple[str, Node], ...]"
    positional: bool = False

    @classmethod
    def from_arguments(cls, arguments: "Sequence[Node]") -> "Optional[ParameterMap]":
        """Build a map from the arguments of an ``execute()`` call.

        The single argument must be an array literal whose items are either all
        positional or all keyed by a string literal. A leading ``:`` is dropped
        from keys.

        Returns:
            The parameter map, or None when the arguments are not a literal array.
        """
        array = arguments[0] if len(arguments) == 1 else None
        if not is_array_literal(array):
            return None
        if array.is_positional:
            return cls(
                tuple(
                    (f"{POSITIONAL_PARAMETER_PREFIX}{index}", item.value)
                    for index, item in enumerate(array.items, start=1)
                ),
                positional=True,
            )
        if not array.is_keyed:
            return None
        entries: list[tuple[str, Node]] = []
        for item in array.items:
            if not is_string_literal(item.key):
                return None
            entries.append((item.key.value.lstrip(":"), item.value))
        return cls(tuple(entries))

    @property
    def names(self) -> "tuple[str, ...]":
        return tuple(name for name, _ in self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def matches(self, sql: SqlText) -> bool:
        """Check the map binds exactly the placeholders of ``sql``."""
        if self.positional:
            return len(self.entries) == sql.positional_count and not sql.named_parameters
        return not sql.positional_count and set(self.names) == set(sql.named_parameters)

    def to_node(self) -> ArrayLiteral:
        return ArrayLiteral(tuple(ArrayItem(value, Literal(name)) for name, value in self.entries))


def parameter_name(key: Node) -> "Optional[str]":
    """Placeholder name addressed by a ``bindValue``/``bindParam`` key.

    ``1`` gives ``param1`` and ``":id"`` gives ``id``.
    """
    if is_int_literal(key):
        return f"{POSITIONAL_PARAMETER_PREFIX}{key.value}" if key.value >= 1 else None
    if is_string_literal(key):
        name = key.value.lstrip(":")
        return name or None
    return None
