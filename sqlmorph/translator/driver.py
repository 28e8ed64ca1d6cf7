"""Reference driver for whole units.

A real rewrite driver walks a syntax tree and feeds call sites to a
:class:`~sqlmorph.translator.dispatcher.CallSiteDispatcher` itself. This
module does the same for units already described as a flat list of
statements, which is what the tests and simple integrations need.

Each unit gets its own :class:`TranslationScope`. A unit is translated
atomically: if anything unexpected goes wrong, the error is logged and the
unit comes back unchanged, and the remaining units are still translated.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Optional

from sqlmorph.config import TranslatorConfig, check_config
from sqlmorph.nodes import Node
from sqlmorph.translator.dispatcher import CallSiteDispatcher
from sqlmorph.translator.policy import ConnectionPolicy
from sqlmorph.translator.scope import TranslationScope
from sqlmorph.utils.logging import correlation_context, get_logger

__all__ = (
    "TranslationUnit",
    "UnitResult",
    "translate_unit",
    "translate_units",
)

logger = get_logger("translator.driver")


@dataclass(frozen=True)
class TranslationUnit:
    """The statements of one method or function body, in source order."""

    name: str
    statements: "tuple[Node, ...]" = ()

    @classmethod
    def of(cls, name: str, statements: "Iterable[Node]") -> "TranslationUnit":
        return cls(name, tuple(statements))


@dataclass(frozen=True)
class UnitResult:
    """Outcome of translating one unit.

    ``replacements`` lines up with the unit's statements: a node where the
    statement was rewritten, ``None`` where it is unchanged.
    """

    unit: TranslationUnit
    replacements: "tuple[Optional[Node], ...]"
    bindings: "dict[str, str]" = field(default_factory=dict)
    failed: bool = False

    @property
    def statements(self) -> "tuple[Node, ...]":
        """The unit's statements with every replacement applied."""
        return tuple(
            original if replacement is None else replacement
            for original, replacement in zip(self.unit.statements, self.replacements)
        )

    @property
    def changed(self) -> int:
        return sum(replacement is not None for replacement in self.replacements)


def _unchanged(unit: TranslationUnit, failed: bool = False) -> UnitResult:
    return UnitResult(unit, tuple(None for _ in unit.statements), failed=failed)


def translate_unit(
    unit: TranslationUnit,
    config: "Optional[TranslatorConfig]" = None,
    policy: "Optional[ConnectionPolicy]" = None,
) -> UnitResult:
    """Translate one unit with a fresh scope.

    Args:
        unit: The unit to translate.
        config: Translator configuration.
        policy: Connection recognition. Built from ``config`` when omitted.

    Returns:
        The per-statement replacements and the final binding of every identity.
    """
    scope = TranslationScope(unit.name)
    dispatcher = CallSiteDispatcher(scope, config, policy)
    replacements = tuple(dispatcher.visit(statement) for statement in unit.statements)
    result = UnitResult(unit, replacements, {binding.identity: binding.origin_kind.value for binding in scope})
    logger.debug(
        "Translated unit %s",
        unit.name,
        extra={"extra_fields": {"statements": len(unit.statements), "changed": result.changed}},
    )
    return result


def translate_units(
    units: "Iterable[TranslationUnit]", config: "Optional[TranslatorConfig]" = None
) -> "Sequence[UnitResult]":
    """Translate units independently, in order.

    A unit that raises is logged and returned unchanged with ``failed`` set.

    Raises:
        ImproperConfigurationError: If ``config`` is invalid, before any unit is visited.
    """
    config = check_config(config or TranslatorConfig())
    policy = ConnectionPolicy(config)
    results: list[UnitResult] = []
    for unit in units:
        with correlation_context(unit.name):
            try:
                results.append(translate_unit(unit, config, policy))
            except Exception:
                logger.exception("Translation of unit %s failed, leaving it unchanged", unit.name)
                results.append(_unchanged(unit, failed=True))
    return results
