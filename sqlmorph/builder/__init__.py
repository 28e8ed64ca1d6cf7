"""Call-chain builders, one per supported statement kind.

:func:`build_chain` is the single entry point: it dispatches on the clause
set's statement kind with an exhaustive match, so a new kind cannot be added
without a builder.
"""

from typing_extensions import assert_never

from sqlmorph.builder._base import ChainBuilder
from sqlmorph.builder._delete import DeleteChainBuilder
from sqlmorph.builder._insert import InsertChainBuilder
from sqlmorph.builder._select import SelectChainBuilder
from sqlmorph.builder._update import UpdateChainBuilder
from sqlmorph.core.chain import CallChain
from sqlmorph.core.clauses import ClauseSet
from sqlmorph.core.normalizer import StatementKind
from sqlmorph.exceptions import UnknownStatementKindError
from sqlmorph.nodes import Node

__all__ = (
    "ChainBuilder",
    "DeleteChainBuilder",
    "InsertChainBuilder",
    "SelectChainBuilder",
    "UpdateChainBuilder",
    "build_chain",
    "result_method",
)


def build_chain(clauses: ClauseSet, source: Node) -> CallChain:
    """Build the call chain for a parsed statement.

    Args:
        clauses: The statement's clauses.
        source: Receiver of the ``createQueryBuilder()`` call.

    Raises:
        UnknownStatementKindError: If the clause set has no supported kind.

    Returns:
        CallChain: The builder chain, without parameters or execution.
    """
    kind = clauses.kind
    builder: ChainBuilder
    if kind is StatementKind.SELECT:
        builder = SelectChainBuilder(clauses, source)
    elif kind is StatementKind.INSERT:
        builder = InsertChainBuilder(clauses, source)
    elif kind is StatementKind.UPDATE:
        builder = UpdateChainBuilder(clauses, source)
    elif kind is StatementKind.DELETE:
        builder = DeleteChainBuilder(clauses, source)
    elif kind is StatementKind.UNKNOWN:
        raise UnknownStatementKindError
    else:
        assert_never(kind)
    return builder.build()


def result_method(kind: StatementKind) -> str:
    """Execute call for a statement kind: rows for SELECT, affected count otherwise."""
    return "executeQuery" if kind.returns_rows else "executeStatement"
