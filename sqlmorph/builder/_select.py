"""SELECT chain builder."""

from dataclasses import dataclass
from typing import Optional

from sqlmorph.builder._base import ChainBuilder
from sqlmorph.core.clauses import ClauseCategory, OrderItem, TableReference

__all__ = ("SelectChainBuilder",)


@dataclass
class SelectChainBuilder(ChainBuilder):
    """Builder for SELECT statements.

    Operations follow clause order: ``select``, ``distinct``, ``from``, joins,
    ``where`` chain, ``groupBy``, ``having`` chain, ``orderBy``,
    ``setMaxResults`` and ``setFirstResult``.
    """

    def _apply(self) -> None:
        clauses = self.clauses
        self._call("select", clauses[ClauseCategory.COLUMNS])
        if clauses.distinct:
            self._call("distinct")

        table: Optional[TableReference] = clauses.get(ClauseCategory.TABLE)
        if table is not None:
            if table.alias:
                self._call("from", table.name, table.alias)
            else:
                self._call("from", table.name)
            self._add_joins(table)

        self._add_where()

        for index, expression in enumerate(clauses.get(ClauseCategory.GROUP_BY, ())):
            self._call("groupBy" if index == 0 else "addGroupBy", expression)

        if ClauseCategory.HAVING in clauses:
            self._add_conditions(clauses[ClauseCategory.HAVING], "having", "andHaving", "orHaving")

        order: tuple[OrderItem, ...] = clauses.get(ClauseCategory.ORDER_BY, ())
        for index, item in enumerate(order):
            self._call("orderBy" if index == 0 else "addOrderBy", item.expression, item.direction)

        if ClauseCategory.LIMIT in clauses:
            self._call("setMaxResults", clauses[ClauseCategory.LIMIT])
        if ClauseCategory.OFFSET in clauses:
            self._call("setFirstResult", clauses[ClauseCategory.OFFSET])
