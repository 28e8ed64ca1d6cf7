import pytest

from sqlmorph.exceptions import (
    ExtractionFailure,
    ImproperConfigurationError,
    MalformedExpressionError,
    ParameterStyleMismatchError,
    SQLMorphError,
    TranslationError,
    UnknownStatementKindError,
    UnsupportedClauseError,
)


def test_exception_hierarchy():
    """Test every translation failure is a TranslationError and every error a SQLMorphError."""
    for error in (
        ExtractionFailure,
        UnknownStatementKindError,
        UnsupportedClauseError,
        ParameterStyleMismatchError,
        MalformedExpressionError,
    ):
        assert issubclass(error, TranslationError)

    assert issubclass(TranslationError, SQLMorphError)
    assert issubclass(ImproperConfigurationError, SQLMorphError)
    assert not issubclass(ImproperConfigurationError, TranslationError)


def test_exception_instantiation():
    """Test exceptions can be instantiated with messages."""
    exc = ImproperConfigurationError("Invalid owner name")
    assert str(exc) == "Invalid owner name"
    assert repr(exc) == "ImproperConfigurationError - Invalid owner name"


def test_translation_error_carries_sql():
    exc = UnsupportedClauseError("UNION is not supported", "SELECT 1 UNION SELECT 2")
    assert exc.sql == "SELECT 1 UNION SELECT 2"
    assert str(exc) == "UNION is not supported SQL: SELECT 1 UNION SELECT 2"


@pytest.mark.parametrize(
    ("error", "message"),
    [
        (ExtractionFailure, "SQL text is not available as a literal."),
        (UnknownStatementKindError, "Unrecognized statement kind."),
        (UnsupportedClauseError, "Unsupported clause."),
        (ParameterStyleMismatchError, "Positional and named placeholders cannot be mixed."),
        (MalformedExpressionError, "Malformed expression."),
    ],
)
def test_default_messages(error: "type[TranslationError]", message: str):
    exc = error()
    assert str(exc) == message
    assert exc.sql is None


def test_exception_chaining():
    """Test exceptions support chaining with 'from'."""
    with pytest.raises(UnsupportedClauseError) as info:
        try:
            raise ValueError("Original error")
        except ValueError as e:
            raise UnsupportedClauseError("Mapped error") from e
    assert isinstance(info.value.__cause__, ValueError)
