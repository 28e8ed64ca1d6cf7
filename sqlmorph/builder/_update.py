"""UPDATE chain builder."""

from dataclasses import dataclass

from sqlmorph.builder._base import ChainBuilder
from sqlmorph.core.clauses import ClauseCategory, SetAssignment, TableReference

__all__ = ("UpdateChainBuilder",)


@dataclass
class UpdateChainBuilder(ChainBuilder):
    """Builder for UPDATE statements."""

    def _apply(self) -> None:
        table: TableReference = self.clauses[ClauseCategory.TABLE]
        if table.alias:
            self._call("update", table.name, table.alias)
        else:
            self._call("update", table.name)
        assignments: tuple[SetAssignment, ...] = self.clauses[ClauseCategory.ASSIGNMENTS]
        for assignment in assignments:
            self._call("set", assignment.column, assignment.value)
        self._add_where()
