"""Unit tests for logging configuration and correlation IDs."""

import io
import logging

import msgspec
import pytest

from sqlmorph import TranslationUnit, translate_units
from sqlmorph.nodes import Literal, MethodCall, Variable
from sqlmorph.utils.logging import (
    CorrelationIDFilter,
    StructuredFormatter,
    configure_logging,
    correlation_context,
    get_correlation_id,
    get_logger,
    set_correlation_id,
)


def make_record(message: str = "hello", **attributes: object) -> logging.LogRecord:
    record = logging.LogRecord("sqlmorph.test", logging.INFO, __file__, 10, message, None, None, func="test")
    for name, value in attributes.items():
        setattr(record, name, value)
    return record


def test_get_logger_prefixes_names() -> None:
    assert get_logger().name == "sqlmorph"
    assert get_logger("core.splitter").name == "sqlmorph.core.splitter"
    assert get_logger("sqlmorph.builder").name == "sqlmorph.builder"


def test_get_logger_adds_one_correlation_filter() -> None:
    logger = get_logger("test.filters")
    get_logger("test.filters")
    assert sum(isinstance(f, CorrelationIDFilter) for f in logger.filters) == 1


def test_correlation_context_restores_previous_value() -> None:
    set_correlation_id(None)
    with correlation_context("UserRepository::find") as correlation_id:
        assert correlation_id == "UserRepository::find"
        assert get_correlation_id() == "UserRepository::find"
        with correlation_context("inner"):
            assert get_correlation_id() == "inner"
        assert get_correlation_id() == "UserRepository::find"
    assert get_correlation_id() is None


def test_correlation_context_restores_on_error() -> None:
    with pytest.raises(RuntimeError), correlation_context("failing"):
        raise RuntimeError("boom")
    assert get_correlation_id() is None


def test_filter_sets_correlation_id() -> None:
    record = make_record()
    with correlation_context("unit-1"):
        assert CorrelationIDFilter().filter(record)
    assert record.correlation_id == "unit-1"  # type: ignore[attr-defined]


def test_structured_formatter_outputs_json() -> None:
    record = make_record("Translated statement", extra_fields={"kind": "SELECT", "operations": ["select", "from"]})
    with correlation_context("unit-2"):
        entry = msgspec.json.decode(StructuredFormatter().format(record))

    assert entry["level"] == "INFO"
    assert entry["logger"] == "sqlmorph.test"
    assert entry["message"] == "Translated statement"
    assert entry["unit"] == "unit-2"
    assert entry["translation"] == {"kind": "SELECT", "operations": ["select", "from"]}


def test_structured_formatter_omits_absent_fields() -> None:
    set_correlation_id(None)
    entry = msgspec.json.decode(StructuredFormatter().format(make_record()))
    assert "unit" not in entry
    assert "translation" not in entry
    assert "exception" not in entry


def test_structured_formatter_serializes_unknown_values() -> None:
    record = make_record(extra_fields={"value": object()})
    entry = msgspec.json.decode(StructuredFormatter().format(record))
    assert entry["translation"]["value"].startswith("<object object")


def test_configure_logging_writes_translation_decisions(sqlmorph_logger: logging.Logger) -> None:
    stream = io.StringIO()
    configure_logging(level="debug", stream=stream)

    (result,) = translate_units([
        TranslationUnit.of("Repo::find", [MethodCall(Variable("pdo"), "exec", (Literal("DELETE FROM t"),))])
    ])

    assert result.changed == 1
    assert sqlmorph_logger.level == logging.DEBUG
    assert not sqlmorph_logger.propagate
    assert len(sqlmorph_logger.handlers) == 1
    entries = [msgspec.json.decode(line) for line in stream.getvalue().splitlines()]
    translated = [entry for entry in entries if entry["message"] == "Translated DELETE statement"]
    assert translated
    assert translated[0]["unit"] == "Repo::find"
    assert translated[0]["translation"]["kind"] == "DELETE"
    assert translated[0]["translation"]["operations"] == ["delete"]


def test_configure_logging_text_format(sqlmorph_logger: logging.Logger) -> None:
    stream = io.StringIO()
    configure_logging(level="WARNING", structured=False, stream=stream)

    get_logger("test.text").warning("outside any unit")
    with correlation_context("Repo::save"):
        get_logger("test.text").warning("inside a unit")

    first, second = stream.getvalue().splitlines()
    assert "WARNING [-] sqlmorph.test.text: outside any unit" in first
    assert "WARNING [Repo::save] sqlmorph.test.text: inside a unit" in second
