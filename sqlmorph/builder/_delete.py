"""DELETE chain builder."""

from dataclasses import dataclass

from sqlmorph.builder._base import ChainBuilder
from sqlmorph.core.clauses import ClauseCategory, TableReference

__all__ = ("DeleteChainBuilder",)


@dataclass
class DeleteChainBuilder(ChainBuilder):
    """Builder for DELETE statements.

    The table alias is passed whenever the statement declares one, since
    WHERE and join conditions refer to it.
    """

    def _apply(self) -> None:
        table: TableReference = self.clauses[ClauseCategory.TABLE]
        if table.alias:
            self._call("delete", table.name, table.alias)
        else:
            self._call("delete", table.name)
        self._add_joins(table)
        self._add_where()
