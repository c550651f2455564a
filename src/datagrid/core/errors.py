"""Exceptions raised by the grid engine."""

from typing import Any, Dict, List, Optional, Sequence


class GridError(Exception):
    """Base class for every grid engine error."""


class UnknownColumnError(GridError, KeyError):
    """Raised when an operation names a column that is not configured."""

    def __init__(self, column_key: str):
        self.column_key = column_key
        super().__init__(f"Unknown column: {column_key}")

    def __str__(self) -> str:
        return self.args[0]


class ColumnCapabilityError(GridError):
    """Raised when a column does not support the requested operation."""

    def __init__(self, column_key: str, capability: str):
        self.column_key = column_key
        self.capability = capability
        super().__init__(f"Column {column_key} is not {capability}")


class UnknownRowError(GridError, KeyError):
    """Raised when a row key is not present in the row store."""

    def __init__(self, key: Any):
        self.key = key
        super().__init__(f"Unknown row: {key}")

    def __str__(self) -> str:
        return self.args[0]


class EditStateError(GridError):
    """Raised when an edit operation is not allowed in the row's current state."""

    def __init__(self, key: Any, state: str, operation: str):
        self.key = key
        self.state = state
        self.operation = operation
        super().__init__(f"Cannot {operation} row {key} while it is {state}")


class RowValidationError(GridError):
    """Raised when required fields are missing.

    ``missing_fields`` lists column titles for a single row; ``report`` maps
    each failing row key to its missing titles when several rows are checked
    at once.
    """

    def __init__(
        self,
        key: Any = None,
        missing_fields: Optional[List[str]] = None,
        report: Optional[Dict[Any, List[str]]] = None,
    ):
        self.key = key
        self.missing_fields = list(missing_fields or [])
        self.report = dict(report or {})
        if self.report:
            lines = [f"{k}: {', '.join(titles)}" for k, titles in self.report.items()]
            message = "Required values are missing:\n" + "\n".join(lines)
        else:
            message = f"Required values are missing: {', '.join(self.missing_fields)}"
        super().__init__(message)


class PersistenceError(GridError):
    """Wraps a failure reported by the persistence gateway."""

    def __init__(self, operation: str, keys: Sequence[Any], message: str):
        self.operation = operation
        self.keys = list(keys)
        super().__init__(f"{operation} failed for {self.keys}: {message}")


class InvalidPageSizeError(GridError, ValueError):
    """Raised when a page size is not one of the selectable options."""

    def __init__(self, page_size: int, options: Sequence[int]):
        self.page_size = page_size
        self.options = list(options)
        super().__init__(f"Page size {page_size} is not one of {self.options}")


class DuplicateColumnError(GridError, ValueError):
    """Raised when two columns share a key."""

    def __init__(self, column_key: str):
        self.column_key = column_key
        super().__init__(f"Duplicate column key: {column_key}")
