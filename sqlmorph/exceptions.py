from typing import Any, Optional

__all__ = (
    "ExtractionFailure",
    "ImproperConfigurationError",
    "MalformedExpressionError",
    "ParameterStyleMismatchError",
    "SQLMorphError",
    "TranslationError",
    "UnknownStatementKindError",
    "UnsupportedClauseError",
)


class SQLMorphError(Exception):
    """Base exception class from which all sqlmorph exceptions inherit."""

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        """Initialize ``SQLMorphError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class ImproperConfigurationError(SQLMorphError):
    """Improper configuration error.

    This exception is raised when a translator setting is missing or has an invalid value.
    """


class TranslationError(SQLMorphError):
    """Base class for non-fatal translation failures.

    These never reach the driver: the statement translator absorbs them and
    leaves the call site unchanged.
    """

    sql: Optional[str]

    def __init__(self, message: Optional[str] = None, sql: Optional[str] = None) -> None:
        if message is None:
            message = "Statement could not be translated."
        detail_message = message
        if sql:
            detail_message = f"{message} SQL: {sql}"
        super().__init__(detail=detail_message)
        self.sql = sql


class ExtractionFailure(TranslationError):
    """The SQL argument is not a literal or a constant concatenation of literals."""

    def __init__(self, message: Optional[str] = None, sql: Optional[str] = None) -> None:
        super().__init__(message or "SQL text is not available as a literal.", sql)


class UnknownStatementKindError(TranslationError):
    """Literal SQL whose leading keyword is not SELECT, INSERT, UPDATE or DELETE."""

    def __init__(self, message: Optional[str] = None, sql: Optional[str] = None) -> None:
        super().__init__(message or "Unrecognized statement kind.", sql)


class UnsupportedClauseError(TranslationError):
    """A recognized statement that uses a clause outside the supported grammar."""

    def __init__(self, message: Optional[str] = None, sql: Optional[str] = None) -> None:
        super().__init__(message or "Unsupported clause.", sql)


class ParameterStyleMismatchError(TranslationError):
    """Positional and named placeholders are mixed in one statement."""

    def __init__(self, message: Optional[str] = None, sql: Optional[str] = None) -> None:
        super().__init__(message or "Positional and named placeholders cannot be mixed.", sql)


class MalformedExpressionError(TranslationError):
    """Unbalanced quotes or parentheses, or a dangling boolean operator."""

    def __init__(self, message: Optional[str] = None, sql: Optional[str] = None) -> None:
        super().__init__(message or "Malformed expression.", sql)
