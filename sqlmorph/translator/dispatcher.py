"""Call-site classification and rewriting.

The dispatcher is fed every statement of one unit in source order. For
each it returns a replacement node or ``None`` for "unchanged", and it is
the only code that mutates the unit's :class:`TranslationScope`.

Recognised call sites:

- ``stmt = <conn>.prepare(sql)``: translated to a builder chain; ``stmt``
  becomes a builder chain, or a raw handle when the SQL cannot be translated.
- ``rows = <conn>.query(sql)``: SELECT only, chain plus ``executeQuery()``;
  ``rows`` becomes an executed builder chain.
- ``<conn>.exec(sql)``: non-SELECT only, chain plus ``executeStatement()``.
- ``<conn>.prepare(sql).execute(params)``: translated as one unit or not at all.
- ``stmt.execute(params)``, ``stmt.bindValue(name, value)``,
  ``stmt.bindParam(name, value)`` and the fetch family on a builder-chain
  variable.

Any other assignment to a tracked identity forgets its binding.
"""

from typing import Optional, cast

from sqlmorph.builder import result_method
from sqlmorph.config import TranslatorConfig, check_config
from sqlmorph.core.chain import CallChain, ParameterMap, parameter_name
from sqlmorph.core.normalizer import SqlText, StatementKind
from sqlmorph.nodes import Assignment, MethodCall, Node, identity_key
from sqlmorph.translator.policy import ConnectionPolicy
from sqlmorph.translator.scope import TranslationScope, VariableBinding
from sqlmorph.translator.statement import StatementTranslation, translate_statement
from sqlmorph.utils.logging import get_logger
from sqlmorph.utils.type_guards import is_int_literal, is_method_call

__all__ = ("FETCH_METHODS", "CallSiteDispatcher")

logger = get_logger("translator.dispatcher")

FETCH_METHODS: "dict[str, str]" = {
    "fetch": "fetchAssociative",
    "fetchAssoc": "fetchAssociative",
    "fetchAll": "fetchAllAssociative",
    "fetchColumn": "fetchOne",
}
_BIND_METHODS = frozenset(("bindValue", "bindParam"))
_MUTATION_KINDS = frozenset((StatementKind.INSERT, StatementKind.UPDATE, StatementKind.DELETE))
_SELECT_KINDS = frozenset((StatementKind.SELECT,))


class CallSiteDispatcher:
    """Rewrites the call sites of one unit against its scope."""

    __slots__ = ("_config", "_policy", "scope")

    def __init__(
        self,
        scope: TranslationScope,
        config: "Optional[TranslatorConfig]" = None,
        policy: "Optional[ConnectionPolicy]" = None,
    ) -> None:
        self.scope = scope
        self._config = check_config(config or TranslatorConfig())
        self._policy = policy or ConnectionPolicy(self._config)

    def visit(self, node: Node) -> "Optional[Node]":
        """Classify one statement and return its replacement.

        Args:
            node: An assignment or a call used as a statement.

        Returns:
            The replacement node, or None to leave the statement unchanged.
        """
        if isinstance(node, Assignment):
            return self._visit_assignment(node)
        if isinstance(node, MethodCall):
            return self._visit_call(node)
        return None

    def _translate(
        self, call: MethodCall, kinds: "Optional[frozenset[StatementKind]]" = None
    ) -> "Optional[StatementTranslation]":
        if len(call.arguments) != 1:
            logger.debug("Leaving %s() with %d arguments unchanged", call.name, len(call.arguments))
            return None
        return translate_statement(call.arguments[0], self._config, kinds)

    def _is_connection_call(self, node: Node, *names: str) -> bool:
        return is_method_call(node, *names) and self._policy.is_connection(node.receiver)

    def _visit_assignment(self, node: Assignment) -> "Optional[Node]":
        identity = identity_key(node.target)
        value = node.value

        if self._is_connection_call(value, "prepare"):
            translation = self._translate(cast("MethodCall", value))
            if identity is not None:
                if translation is None:
                    self.scope.bind(VariableBinding.raw_handle(identity))
                else:
                    self.scope.bind(VariableBinding.builder_chain(identity, translation.sql))
            if translation is None:
                return None
            return Assignment(node.target, translation.chain.to_expression())

        if self._is_connection_call(value, "query"):
            translation = self._translate(cast("MethodCall", value), _SELECT_KINDS)
            if identity is not None:
                if translation is None:
                    self.scope.bind(VariableBinding.raw_handle(identity))
                else:
                    self.scope.bind(VariableBinding.builder_chain(identity, translation.sql, executed=True))
            if translation is None:
                return None
            return Assignment(node.target, translation.chain.then(result_method(translation.kind)).to_expression())

        replacement = self._visit_call(value) if isinstance(value, MethodCall) else None
        if identity is not None and identity in self.scope:
            logger.debug("Reassignment of %s, forgetting its binding", identity)
            self.scope.reset(identity)
        if replacement is None:
            return None
        return Assignment(node.target, replacement)

    def _visit_call(self, call: MethodCall) -> "Optional[Node]":
        receiver = call.receiver

        if call.name == "execute" and self._is_connection_call(receiver, "prepare"):
            return self._visit_prepare_execute(call, cast("MethodCall", receiver))
        if self._is_connection_call(call, "prepare"):
            translation = self._translate(call)
            return translation.chain.to_expression() if translation else None
        if self._is_connection_call(call, "query"):
            translation = self._translate(call, _SELECT_KINDS)
            return translation.chain.then(result_method(translation.kind)).to_expression() if translation else None
        if self._is_connection_call(call, "exec"):
            translation = self._translate(call, _MUTATION_KINDS)
            return translation.chain.then(result_method(translation.kind)).to_expression() if translation else None

        identity = identity_key(receiver)
        if identity is None:
            return None
        binding = self.scope.lookup(identity)
        if not binding.is_builder_chain or binding.sql is None:
            return None
        if call.name == "execute":
            return self._visit_execute(call, binding, binding.sql)
        if call.name in _BIND_METHODS:
            return self._visit_bind(call, binding, binding.sql)
        if call.name in FETCH_METHODS:
            return self._visit_fetch(call, binding)
        return None

    def _visit_prepare_execute(self, call: MethodCall, prepare: MethodCall) -> "Optional[Node]":
        translation = self._translate(prepare)
        if translation is None:
            return None
        chain = self._continue(translation.chain, call, translation.sql)
        return chain.to_expression() if chain is not None else None

    def _visit_execute(self, call: MethodCall, binding: VariableBinding, sql: SqlText) -> "Optional[Node]":
        if binding.executed:
            logger.debug("execute() on already executed %s left unchanged", binding.identity)
            return None
        chain = self._continue(CallChain(call.receiver), call, sql)
        return chain.to_expression() if chain is not None else None

    def _continue(self, chain: CallChain, call: MethodCall, sql: SqlText) -> "Optional[CallChain]":
        """Append ``setParameters`` and the execute call for ``execute(...)``."""
        if call.arguments:
            parameters = self._parameter_map(call, sql)
            if parameters is None:
                return None
            if parameters:
                chain = chain.then("setParameters", parameters.to_node())
        return chain.then(result_method(sql.kind))

    def _parameter_map(self, call: MethodCall, sql: SqlText) -> "Optional[ParameterMap]":
        parameters = ParameterMap.from_arguments(call.arguments)
        if parameters is None:
            logger.warning(
                "execute() arguments are not a literal array, leaving call unchanged",
                extra={"extra_fields": {"sql": sql.text}},
            )
            return None
        if not parameters.matches(sql):
            logger.warning(
                "execute() parameters do not match placeholders, leaving call unchanged",
                extra={
                    "extra_fields": {
                        "sql": sql.text,
                        "given": list(parameters.names),
                        "expected": list(sql.placeholder_names),
                    }
                },
            )
            return None
        return parameters

    def _visit_bind(self, call: MethodCall, binding: VariableBinding, sql: SqlText) -> "Optional[Node]":
        if binding.executed or len(call.arguments) != 2:
            return None
        name = parameter_name(call.arguments[0])
        if name is None or name not in sql.placeholder_names:
            logger.warning(
                "%s() names an unknown placeholder, leaving call unchanged",
                call.name,
                extra={"extra_fields": {"sql": sql.text, "expected": list(sql.placeholder_names)}},
            )
            return None
        return CallChain(call.receiver).then("setParameter", name, call.arguments[1]).to_expression()

    def _visit_fetch(self, call: MethodCall, binding: VariableBinding) -> "Optional[Node]":
        if binding.statement_kind is not StatementKind.SELECT:
            return None
        if call.arguments and not _is_first_column(call):
            # Fetch modes and column indexes change the result shape.
            return None
        return MethodCall(call.receiver, FETCH_METHODS[call.name])


def _is_first_column(call: MethodCall) -> bool:
    """``fetchColumn(0)``, the same as ``fetchColumn()``."""
    if call.name != "fetchColumn" or len(call.arguments) != 1:
        return False
    argument = call.arguments[0]
    return is_int_literal(argument) and argument.value == 0
