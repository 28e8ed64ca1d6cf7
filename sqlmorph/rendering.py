"""Debug rendering of command objects.

Renders nodes as compact dotted call chains, for example::

    this.connection.createQueryBuilder().select('*').from('users').where('age > :param1')

This is not the concrete syntax of any host language; a rewrite driver
prints replacement nodes with its own printer. The text form is used in
log records and makes test expectations readable.
"""

from typing import Any

from sqlmorph.nodes import (
    ArrayItem,
    ArrayLiteral,
    Assignment,
    Concat,
    InterpolatedString,
    Literal,
    MethodCall,
    Node,
    Opaque,
    PropertyFetch,
    Variable,
)

__all__ = ("render", "render_literal")


def render_literal(value: Any) -> str:
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace("'", "\\'")
        return f"'{escaped}'"
    return repr(value)


def _render_item(item: ArrayItem) -> str:
    if item.key is None:
        return render(item.value)
    return f"{render(item.key)} => {render(item.value)}"


def render(node: Node) -> str:
    """Render a node as a single line of text."""
    if isinstance(node, Literal):
        return render_literal(node.value)
    if isinstance(node, Variable):
        return node.name
    if isinstance(node, PropertyFetch):
        return f"{render(node.owner)}.{node.name}"
    if isinstance(node, MethodCall):
        arguments = ", ".join(render(argument) for argument in node.arguments)
        return f"{render(node.receiver)}.{node.name}({arguments})"
    if isinstance(node, ArrayLiteral):
        return "[" + ", ".join(_render_item(item) for item in node.items) + "]"
    if isinstance(node, ArrayItem):
        return _render_item(node)
    if isinstance(node, Concat):
        return f"{render(node.left)} . {render(node.right)}"
    if isinstance(node, InterpolatedString):
        parts = (part if isinstance(part, str) else "{" + render(part) + "}" for part in node.parts)
        return '"' + "".join(parts) + '"'
    if isinstance(node, Assignment):
        return f"{render(node.target)} = {render(node.value)}"
    if isinstance(node, Opaque):
        return node.text
    msg = f"Cannot render {type(node).__name__}"
    raise TypeError(msg)
