from sqlmorph.translator.dispatcher import FETCH_METHODS, CallSiteDispatcher
from sqlmorph.translator.driver import TranslationUnit, UnitResult, translate_unit, translate_units
from sqlmorph.translator.policy import ConnectionPolicy
from sqlmorph.translator.scope import OriginKind, TranslationScope, VariableBinding
from sqlmorph.translator.statement import StatementTranslation, translate_statement

__all__ = (
    "FETCH_METHODS",
    "CallSiteDispatcher",
    "ConnectionPolicy",
    "OriginKind",
    "StatementTranslation",
    "TranslationScope",
    "TranslationUnit",
    "UnitResult",
    "VariableBinding",
    "translate_statement",
    "translate_unit",
    "translate_units",
)
