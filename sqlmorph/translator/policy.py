"""Connection-handle recognition."""

from typing import Optional

from sqlmorph.config import TranslatorConfig
from sqlmorph.nodes import Node, PropertyFetch, Variable
from sqlmorph.utils.text import identifier_words

__all__ = ("FUZZY_CONNECTION_WORDS", "ConnectionPolicy")

FUZZY_CONNECTION_WORDS = frozenset(("pdo", "db", "database", "conn", "connection"))


class ConnectionPolicy:
    """Decides whether a receiver is a database connection handle.

    A plain variable matches when its name is in the configured variable
    allowlist, a property of the owner (``this.db``) when its name is in the
    property allowlist. With fuzzy detection on, any name containing one of
    the words ``pdo``, ``db``, ``database``, ``conn`` or ``connection`` matches
    too (``userDb``, ``legacy_pdo``).
    """

    __slots__ = ("_config", "_property_names", "_variable_names")

    def __init__(self, config: "Optional[TranslatorConfig]" = None) -> None:
        self._config = config or TranslatorConfig()
        self._variable_names = frozenset(self._config.connection_variable_names)
        self._property_names = frozenset(self._config.connection_property_names)

    def _fuzzy_match(self, name: str) -> bool:
        return self._config.fuzzy_detection and not FUZZY_CONNECTION_WORDS.isdisjoint(identifier_words(name))

    def is_connection(self, node: Node) -> bool:
        if isinstance(node, Variable):
            return node.name in self._variable_names or self._fuzzy_match(node.name)
        if isinstance(node, PropertyFetch):
            owner = node.owner
            if not isinstance(owner, Variable) or owner.name != self._config.owner_name:
                return False
            return node.name in self._property_names or self._fuzzy_match(node.name)
        return False

    __call__ = is_connection
