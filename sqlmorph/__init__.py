"""sqlmorph: rewrite prepared-statement call chains into fluent query-builder chains."""

from sqlmorph import builder, config, core, exceptions, nodes, translator, utils
from sqlmorph.__metadata__ import __version__
from sqlmorph.config import TranslatorConfig, load_config_from_env
from sqlmorph.core import CallChain, SqlText, StatementKind, normalize_sql, split_predicates
from sqlmorph.exceptions import ImproperConfigurationError, SQLMorphError, TranslationError
from sqlmorph.rendering import render
from sqlmorph.utils.logging import configure_logging
from sqlmorph.translator import (
    CallSiteDispatcher,
    OriginKind,
    TranslationScope,
    TranslationUnit,
    UnitResult,
    translate_statement,
    translate_unit,
    translate_units,
)

__all__ = (
    "CallChain",
    "CallSiteDispatcher",
    "ImproperConfigurationError",
    "OriginKind",
    "SQLMorphError",
    "SqlText",
    "StatementKind",
    "TranslationError",
    "TranslationScope",
    "TranslationUnit",
    "TranslatorConfig",
    "UnitResult",
    "__version__",
    "builder",
    "config",
    "configure_logging",
    "core",
    "exceptions",
    "load_config_from_env",
    "nodes",
    "normalize_sql",
    "render",
    "split_predicates",
    "translate_statement",
    "translate_unit",
    "translate_units",
    "translator",
    "utils",
)
