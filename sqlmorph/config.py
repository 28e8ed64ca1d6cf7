"""Translator configuration.

The only policy the translator depends on is how connection handles are
recognised and where the query builder comes from. Everything is optional
and has a default that matches common code bases.

Environment Variables Supported:
- SQLMORPH_CONNECTION_VARIABLES: Comma separated connection variable names
- SQLMORPH_CONNECTION_PROPERTIES: Comma separated connection property names
- SQLMORPH_FUZZY_DETECTION: Match connection names by word (true/false)
- SQLMORPH_BUILDER_SOURCE: Property path or method producing the builder
- SQLMORPH_OWNER_NAME: Receiver that owns connection properties
- SQLMORPH_DIALECT: sqlglot dialect of the grammar gate
- SQLMORPH_VALIDATE_GRAMMAR: Enable the sqlglot grammar gate (true/false)
"""

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any, Optional

from sqlglot.dialects.dialect import Dialect

from sqlmorph.exceptions import ImproperConfigurationError
from sqlmorph.nodes import MethodCall, Node, PropertyFetch, Variable
from sqlmorph.utils.logging import get_logger

__all__ = (
    "DEFAULT_CONNECTION_PROPERTY_NAMES",
    "DEFAULT_CONNECTION_VARIABLE_NAMES",
    "TranslatorConfig",
    "check_config",
    "create_default_config",
    "load_config_from_env",
    "validate_config",
)

logger = get_logger("config")

DEFAULT_CONNECTION_VARIABLE_NAMES: "tuple[str, ...]" = ("pdo", "db", "connection", "database", "conn")
DEFAULT_CONNECTION_PROPERTY_NAMES: "tuple[str, ...]" = (
    "_db",
    "db",
    "pdo",
    "connection",
    "database",
    "conn",
    "dbConnection",
)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_TRUE_VALUES = frozenset(("true", "1", "yes", "on", "enabled"))
_FALSE_VALUES = frozenset(("false", "0", "no", "off", "disabled"))

# Keys used by existing rule configurations.
_LEGACY_KEYS: "dict[str, str]" = {
    "pdoVariableNames": "connection_variable_names",
    "pdoPropertyNames": "connection_property_names",
    "autoDetectPdoVariables": "fuzzy_detection",
    "connectionProperty": "builder_source",
}


@dataclass(frozen=True)
class TranslatorConfig:
    """Connection-handle recognition and builder-source settings."""

    connection_variable_names: "tuple[str, ...]" = DEFAULT_CONNECTION_VARIABLE_NAMES
    connection_property_names: "tuple[str, ...]" = DEFAULT_CONNECTION_PROPERTY_NAMES
    fuzzy_detection: bool = True
    builder_source: str = "connection"
    owner_name: str = "this"
    dialect: str = "mysql"
    validate_grammar: bool = True
    extra: "dict[str, Any]" = field(default_factory=dict, compare=False, hash=False)

    @classmethod
    def from_mapping(cls, mapping: "Mapping[str, Any]") -> "TranslatorConfig":
        """Build a configuration from a plain mapping.

        Both the field names and the camelCase keys of existing rule
        configurations are accepted. Unknown keys are kept in ``extra``.

        Args:
            mapping: Configuration values.

        Raises:
            ImproperConfigurationError: If a value has the wrong type or the result is invalid.

        Returns:
            The validated configuration.
        """
        known = {f.name for f in fields(cls)} - {"extra"}
        values: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in mapping.items():
            name = _LEGACY_KEYS.get(key, key)
            if name in known:
                values[name] = _coerce(name, value)
            else:
                extra[key] = value
        return check_config(cls(**values, extra=extra))

    def builder_source_node(self) -> Node:
        """Receiver expression the ``createQueryBuilder()`` call is made on.

        ``"connection"`` gives ``this.connection``, ``"em.connection"`` gives
        ``this.em.connection`` and ``"getConnection()"`` gives
        ``this.getConnection()``.
        """
        node: Node = Variable(self.owner_name)
        for segment in self.builder_source.split("."):
            if segment.endswith("()"):
                node = MethodCall(node, segment[:-2])
            else:
                node = PropertyFetch(node, segment)
        return node


def _coerce(name: str, value: Any) -> Any:
    if name in {"connection_variable_names", "connection_property_names"}:
        if isinstance(value, str):
            return tuple(part.strip() for part in value.split(",") if part.strip())
        if isinstance(value, (list, tuple, set, frozenset)):
            return tuple(str(item) for item in value)
        msg = f"{name} must be a list of names, got {type(value).__name__}"
        raise ImproperConfigurationError(detail=msg)
    if name in {"fuzzy_detection", "validate_grammar"}:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in _TRUE_VALUES | _FALSE_VALUES:
            return value.lower() in _TRUE_VALUES
        msg = f"{name} must be a boolean, got {value!r}"
        raise ImproperConfigurationError(detail=msg)
    if not isinstance(value, str):
        msg = f"{name} must be a string, got {type(value).__name__}"
        raise ImproperConfigurationError(detail=msg)
    return value


def validate_config(config: TranslatorConfig) -> "list[str]":
    """Validate configuration completeness and consistency.

    Args:
        config: Configuration to validate

    Returns:
        List of validation errors (empty if valid)
    """
    errors: list[str] = []
    for name in (*config.connection_variable_names, *config.connection_property_names):
        if not _IDENTIFIER_RE.match(name):
            errors.append(f"Invalid connection name: {name!r}")
    if not _IDENTIFIER_RE.match(config.owner_name):
        errors.append(f"Invalid owner name: {config.owner_name!r}")
    segments = config.builder_source.split(".")
    for segment in segments:
        segment_name = segment[:-2] if segment.endswith("()") else segment
        if not _IDENTIFIER_RE.match(segment_name):
            errors.append(f"Invalid builder source: {config.builder_source!r}")
            break
    if not config.dialect:
        errors.append("Dialect must not be empty")
    else:
        try:
            Dialect.get_or_raise(config.dialect)
        except ValueError:
            errors.append(f"Unknown dialect: {config.dialect!r}")
    return errors


def check_config(config: TranslatorConfig) -> TranslatorConfig:
    """Return ``config`` unchanged if it is valid.

    Raises:
        ImproperConfigurationError: Listing every problem :func:`validate_config` finds.
    """
    errors = validate_config(config)
    if errors:
        raise ImproperConfigurationError(detail="; ".join(errors))
    return config


def create_default_config() -> TranslatorConfig:
    return TranslatorConfig()


def load_config_from_env(environ: "Optional[Mapping[str, str]]" = None) -> TranslatorConfig:
    """Load configuration from environment variables.

    Variables that are not set keep their defaults.

    Args:
        environ: Environment to read. Defaults to ``os.environ``.

    Raises:
        ImproperConfigurationError: If a variable holds an invalid value.

    Returns:
        TranslatorConfig loaded from environment variables
    """
    env = os.environ if environ is None else environ
    mapping: dict[str, Any] = {}
    for name, variable in (
        ("connection_variable_names", "SQLMORPH_CONNECTION_VARIABLES"),
        ("connection_property_names", "SQLMORPH_CONNECTION_PROPERTIES"),
        ("fuzzy_detection", "SQLMORPH_FUZZY_DETECTION"),
        ("builder_source", "SQLMORPH_BUILDER_SOURCE"),
        ("owner_name", "SQLMORPH_OWNER_NAME"),
        ("dialect", "SQLMORPH_DIALECT"),
        ("validate_grammar", "SQLMORPH_VALIDATE_GRAMMAR"),
    ):
        value = env.get(variable)
        if value is not None:
            mapping[name] = value
    config = TranslatorConfig.from_mapping(mapping)
    logger.debug("Loaded translator configuration from environment", extra={"extra_fields": {"keys": sorted(mapping)}})
    return config
