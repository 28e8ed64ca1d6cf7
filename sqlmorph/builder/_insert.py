"""INSERT chain builder."""

from dataclasses import dataclass

from sqlmorph.builder._base import ChainBuilder
from sqlmorph.core.clauses import ClauseCategory, SetAssignment, TableReference

__all__ = ("InsertChainBuilder",)


@dataclass
class InsertChainBuilder(ChainBuilder):
    """Builder for single-row INSERT statements.

    Emits ``insert(table)`` and one ``values({column: expression})`` call
    pairing the column list with the row values, which are the renumbered
    placeholders or literal SQL expressions as written.
    """

    def _apply(self) -> None:
        table: TableReference = self.clauses[ClauseCategory.TABLE]
        row: tuple[SetAssignment, ...] = self.clauses[ClauseCategory.VALUES]
        self._call("insert", table.name)
        self._call("values", {assignment.column: assignment.value for assignment in row})
