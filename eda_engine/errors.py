"""Exception classes for consistent error reporting.

Every error raised by the engine derives from ``EDAError`` so the CLI can
catch one type, print a readable message and exit non-zero. DuckDB's own
errors for malformed statements are not wrapped.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class EDAError(Exception):
    """Base exception for all engine errors.

    Attributes:
        message: Human-readable error message
        hints: Optional list of actionable suggestions
        context: Optional additional context data
    """

    def __init__(
        self,
        message: str,
        *,
        hints: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.hints = hints or []
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        result: Dict[str, Any] = {
            "message": self.message,
            "error_type": self.__class__.__name__,
        }
        if self.hints:
            result["hints"] = self.hints
        if self.context:
            result["context"] = self.context
        return result


class DatasetLoadError(EDAError):
    """Raised when a CSV cannot be read or lacks required columns."""


class TableNotFoundError(EDAError):
    """Raised when a referenced table does not exist."""

    def __init__(self, table: str, *, available: Optional[List[str]] = None):
        hints = ["Run `eda-engine load <csv>` first to create the tables."]
        if available:
            hints.append(f"Available tables: {', '.join(available)}")
        super().__init__(
            f"Table '{table}' not found",
            hints=hints,
            context={"table": table},
        )
        self.table = table


class ColumnNotFoundError(EDAError):
    """Raised when a referenced column does not exist in a table."""

    def __init__(self, table: str, column: str, *, available: Optional[List[str]] = None):
        super().__init__(
            f"Column '{column}' not found in table '{table}'",
            hints=[f"Available columns: {', '.join(available)}"] if available else None,
            context={"table": table, "column": column},
        )
        self.table = table
        self.column = column


class InvalidParameterError(EDAError):
    """Raised when recipe or statistic parameters fail validation."""
