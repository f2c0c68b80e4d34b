"""Domain error types carrying a machine-readable code and context."""

from typing import Any, Literal

StorageOperation = Literal["save", "load", "clear"]


class PortfolioError(Exception):
    """Base class for all portfolio errors."""

    code = "PORTFOLIO_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class CSVParseError(PortfolioError):
    """A structural or per-field problem in uploaded CSV text.

    ``row`` is 1-based and counts the header as row 1.
    """

    code = "CSV_PARSE_ERROR"

    def __init__(self, message: str, row: int | None = None, column: str | None = None) -> None:
        super().__init__(message, {"row": row, "column": column})
        self.row = row
        self.column = column


class StorageError(PortfolioError):
    """Persisting, reading or deleting a portfolio snapshot failed."""

    code = "STORAGE_ERROR"

    def __init__(self, message: str, operation: StorageOperation) -> None:
        super().__init__(message, {"operation": operation})
        self.operation = operation


class TradeValidationError(PortfolioError):
    """A single trade record built outside the CSV path was rejected."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str, value: Any = None) -> None:
        super().__init__(message, {"field": field, "value": value})
        self.field = field
        self.value = value


def get_error_message(error: object) -> str:
    """Return a human-readable message for any error-like object."""
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    if isinstance(error, str):
        return error
    return "An unknown error occurred"
