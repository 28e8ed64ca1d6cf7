"""Statement translation: the single translate-or-pass-through decision.

:func:`translate_statement` runs extraction, normalization, classification,
the grammar gate, clause decomposition and the chain builder in order. Every
failure along the way is a :class:`~sqlmorph.exceptions.TranslationError`,
and this is the only place they are caught: the caller receives either a
complete translation or ``None``, never a partial chain.
"""

import logging
from collections.abc import Collection
from dataclasses import dataclass
from typing import Optional

from sqlmorph.builder import build_chain
from sqlmorph.config import TranslatorConfig
from sqlmorph.core.chain import CallChain
from sqlmorph.core.clauses import ClauseSet, parse_clauses
from sqlmorph.core.extractor import extract_sql
from sqlmorph.core.normalizer import SqlText, StatementKind, normalize_sql
from sqlmorph.core.validation import validate_grammar
from sqlmorph.exceptions import (
    ExtractionFailure,
    MalformedExpressionError,
    TranslationError,
    UnknownStatementKindError,
    UnsupportedClauseError,
)
from sqlmorph.nodes import Node
from sqlmorph.utils.logging import get_logger

__all__ = ("StatementTranslation", "translate_statement")

logger = get_logger("translator.statement")


@dataclass(frozen=True)
class StatementTranslation:
    """A successfully translated statement."""

    sql: SqlText
    clauses: ClauseSet
    chain: CallChain

    @property
    def kind(self) -> StatementKind:
        return self.sql.kind


def _translate(
    argument: "Optional[Node]", config: TranslatorConfig, kinds: "Optional[Collection[StatementKind]]"
) -> StatementTranslation:
    raw = extract_sql(argument)
    if raw is None:
        raise ExtractionFailure
    sql = normalize_sql(raw)
    if sql.kind is StatementKind.UNKNOWN:
        raise UnknownStatementKindError(sql=sql.text)
    if kinds is not None and sql.kind not in kinds:
        msg = f"{sql.kind.value} is not translated at this call site"
        raise UnsupportedClauseError(msg, sql.text)
    if config.validate_grammar:
        validate_grammar(sql, config.dialect)
    clauses = parse_clauses(sql)
    chain = build_chain(clauses, config.builder_source_node())
    return StatementTranslation(sql, clauses, chain)


def translate_statement(
    argument: "Optional[Node]",
    config: "Optional[TranslatorConfig]" = None,
    kinds: "Optional[Collection[StatementKind]]" = None,
) -> "Optional[StatementTranslation]":
    """Translate the SQL argument of a prepare/query/exec call.

    Args:
        argument: The SQL argument node.
        config: Translator configuration. Defaults apply when omitted.
        kinds: Statement kinds accepted at this call site. Any kind when None.

    Returns:
        The translation, or None when the call site must stay unchanged.
    """
    config = config or TranslatorConfig()
    try:
        translation = _translate(argument, config, kinds)
    except TranslationError as e:
        logger.log(
            logging.WARNING if isinstance(e, MalformedExpressionError) else logging.DEBUG,
            "Leaving statement unchanged: %s",
            e.detail,
            extra={"extra_fields": {"reason": type(e).__name__, "sql": getattr(e, "sql", None)}},
        )
        return None
    logger.debug(
        "Translated %s statement",
        translation.kind.value,
        extra={
            "extra_fields": {
                "kind": translation.kind.value,
                "sql": translation.sql.text,
                "operations": list(translation.chain.operation_names),
            }
        },
    )
    return translation
