"""Repository exceptions raised when a query returns an unexpected row count."""

from typing import Any, Optional, Sequence


class RepositoryError(Exception):
    """Base class for repository errors."""

    def __init__(self, message: str, table: Optional[str] = None):
        super().__init__(message)
        self.table = table


class NotFoundError(RepositoryError):
    """Raised when zero rows come back where exactly one was required."""

    def __init__(self, message: str, table: Optional[str] = None,
                 key: Optional[str] = None, value: Any = None):
        super().__init__(message, table)
        self.key = key
        self.value = value


class TooManyResultsError(RepositoryError):
    """Raised when more than one row comes back where exactly one was required."""

    def __init__(self, message: str, table: Optional[str] = None,
                 key: Optional[str] = None, value: Any = None):
        super().__init__(message, table)
        self.key = key
        self.value = value


class HydrationError(RepositoryError):
    """Raised when a row cannot be turned into a model instance."""

    def __init__(self, message: str, model: Optional[type] = None,
                 missing: Sequence[str] = ()):
        super().__init__(message)
        self.model = model
        self.missing = tuple(missing)
