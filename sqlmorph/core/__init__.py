"""Statement-level building blocks: extraction, normalization, splitting and clause parsing."""

from sqlmorph.core.chain import CallChain, Operation, ParameterMap
from sqlmorph.core.clauses import (
    ClauseCategory,
    ClauseSet,
    JoinClause,
    JoinKind,
    OrderItem,
    SetAssignment,
    TableReference,
    parse_clauses,
)
from sqlmorph.core.extractor import extract_sql
from sqlmorph.core.normalizer import SqlText, StatementKind, classify, normalize, normalize_sql, renumber_placeholders
from sqlmorph.core.splitter import BooleanOperator, Predicate, split_predicates
from sqlmorph.core.validation import validate_grammar

__all__ = (
    "BooleanOperator",
    "CallChain",
    "ClauseCategory",
    "ClauseSet",
    "JoinClause",
    "JoinKind",
    "Operation",
    "OrderItem",
    "ParameterMap",
    "Predicate",
    "SetAssignment",
    "SqlText",
    "StatementKind",
    "TableReference",
    "classify",
    "extract_sql",
    "normalize",
    "normalize_sql",
    "parse_clauses",
    "renumber_placeholders",
    "split_predicates",
    "validate_grammar",
)
