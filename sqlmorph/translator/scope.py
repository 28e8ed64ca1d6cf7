"""Per-unit variable state.

A :class:`TranslationScope` belongs to the traversal of exactly one unit
(a method or function body). It maps the identity of every variable or
property path the dispatcher has seen assigned to a :class:`VariableBinding`.
Identities never seen are implicitly ``UNKNOWN``.

State moves one way, ``UNKNOWN`` to ``BUILDER_CHAIN`` or ``RAW_HANDLE``.
Only a new assignment to the same identity replaces a binding.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlmorph.core.normalizer import SqlText, StatementKind

__all__ = (
    "OriginKind",
    "TranslationScope",
    "VariableBinding",
)


class OriginKind(Enum):
    """What a variable holds after its last assignment."""

    UNKNOWN = "unknown"
    BUILDER_CHAIN = "builder_chain"
    RAW_HANDLE = "raw_handle"


@dataclass(frozen=True)
class VariableBinding:
    """Classification of one variable identity.

    ``sql`` and ``statement_kind`` are set for builder chains. ``executed`` is
    set when the variable holds the result of a one-shot ``query()``, which
    can be fetched from but not executed again.
    """

    identity: str
    origin_kind: OriginKind = OriginKind.UNKNOWN
    statement_kind: Optional[StatementKind] = None
    sql: Optional[SqlText] = None
    executed: bool = False

    @property
    def is_builder_chain(self) -> bool:
        return self.origin_kind is OriginKind.BUILDER_CHAIN

    @classmethod
    def builder_chain(cls, identity: str, sql: SqlText, executed: bool = False) -> "VariableBinding":
        return cls(identity, OriginKind.BUILDER_CHAIN, sql.kind, sql, executed)

    @classmethod
    def raw_handle(cls, identity: str, statement_kind: Optional[StatementKind] = None) -> "VariableBinding":
        return cls(identity, OriginKind.RAW_HANDLE, statement_kind)


class TranslationScope:
    """Variable bindings of one unit, in assignment order."""

    __slots__ = ("_bindings", "name")

    def __init__(self, name: str = "<unit>") -> None:
        self.name = name
        self._bindings: dict[str, VariableBinding] = {}

    def lookup(self, identity: str) -> VariableBinding:
        """Binding of ``identity``; an ``UNKNOWN`` binding if never assigned."""
        return self._bindings.get(identity) or VariableBinding(identity)

    def bind(self, binding: VariableBinding) -> None:
        self._bindings[binding.identity] = binding

    def reset(self, identity: str) -> None:
        """Forget what ``identity`` held: it was reassigned to something untracked."""
        self._bindings.pop(identity, None)

    def __contains__(self, identity: object) -> bool:
        return identity in self._bindings

    def __iter__(self) -> Iterator[VariableBinding]:
        return iter(tuple(self._bindings.values()))

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        return f"TranslationScope({self.name!r}, {len(self._bindings)} bindings)"
