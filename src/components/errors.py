"""Exceptions raised by the result rendering components."""


class RenderingError(Exception):
    """Base class for result viewer failures that reach the user."""


class ExportError(RenderingError):
    """Raised when a result set cannot be written out as CSV."""


class QueryExecutionError(RenderingError):
    """Raised when the result source fails to run a query."""

    def __init__(self, message: str, sql: str = ""):
        super().__init__(message)
        self.sql = sql
