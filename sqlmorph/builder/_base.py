"""Base class of the per-statement chain builders.

A builder walks a :class:`~sqlmorph.core.clauses.ClauseSet` and appends one
builder operation per clause element to a :class:`CallChain` that starts
with ``<source>.createQueryBuilder()``.
"""

from dataclasses import dataclass, field
from typing import Any

from sqlmorph.core.chain import CallChain
from sqlmorph.core.clauses import ClauseCategory, ClauseSet, JoinClause, JoinKind, TableReference
from sqlmorph.core.splitter import BooleanOperator, split_predicates
from sqlmorph.nodes import MethodCall, Node
from sqlmorph.utils.logging import get_logger

__all__ = ("ChainBuilder",)

logger = get_logger("builder")

_JOIN_METHODS: "dict[JoinKind, str]" = {
    JoinKind.INNER: "innerJoin",
    JoinKind.LEFT: "leftJoin",
    JoinKind.RIGHT: "rightJoin",
    JoinKind.PLAIN: "join",
}


@dataclass
class ChainBuilder:
    """Base class for statement chain builders."""

    clauses: ClauseSet
    source: Node
    _chain: CallChain = field(init=False)

    def __post_init__(self) -> None:
        """Start the chain at the query builder factory call."""
        self._chain = CallChain(MethodCall(self.source, "createQueryBuilder"))

    def _call(self, name: str, *arguments: Any) -> "ChainBuilder":
        self._chain = self._chain.then(name, *arguments)
        return self

    def _apply(self) -> None:
        """Append the statement-specific operations."""
        msg = "Subclasses must implement _apply"
        raise NotImplementedError(msg)

    def build(self) -> CallChain:
        """Build the call chain for the clause set.

        Returns:
            CallChain: The completed chain, ending before any execute call.
        """
        self._apply()
        return self._chain

    def _add_conditions(self, expression: str, first: str, and_method: str, or_method: str) -> None:
        """Append a WHERE or HAVING condition as a predicate chain.

        The builder folds conditions left to right, so ``a OR b AND c`` would
        become ``(a OR b) AND c``. When an AND follows an OR at the top level
        the whole condition is passed to ``first`` unsplit.

        Args:
            expression: The condition without its keyword.
            first: Method for the first predicate (``where``/``having``).
            and_method: Method for AND-joined predicates.
            or_method: Method for OR-joined predicates.
        """
        predicates = split_predicates(expression)
        seen_or = False
        for predicate in predicates:
            if predicate.operator is BooleanOperator.OR:
                seen_or = True
            elif predicate.operator is BooleanOperator.AND and seen_or:
                logger.debug("Mixed AND/OR precedence, keeping condition whole: %s", expression)
                self._call(first, expression.strip())
                return
        for predicate in predicates:
            if predicate.operator is None:
                self._call(first, predicate.text)
            elif predicate.operator is BooleanOperator.AND:
                self._call(and_method, predicate.text)
            else:
                self._call(or_method, predicate.text)

    def _add_where(self) -> None:
        if ClauseCategory.WHERE in self.clauses:
            self._add_conditions(self.clauses[ClauseCategory.WHERE], "where", "andWhere", "orWhere")

    def _add_joins(self, table: TableReference) -> None:
        joins: tuple[JoinClause, ...] = self.clauses.get(ClauseCategory.JOINS, ())
        for join in joins:
            self._call(
                _JOIN_METHODS[join.kind],
                table.reference,
                join.table.name,
                join.table.reference,
                join.condition,
            )
