"""Exception hierarchy for schemashift.

All errors raised by the engine derive from ``SchemaShiftError`` so a
migration driver can catch the whole family in one place. Precondition
batch errors live in ``schemashift.preconditions.base`` and share the same
root.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from schemashift.change.base import Change
    from schemashift.statement.base import SqlStatement


class SchemaShiftError(Exception):
    """Base exception for all schemashift errors."""

    pass


# =============================================================================
# Change Errors
# =============================================================================


class DefinitionError(SchemaShiftError):
    """Raised when a change definition is structurally incomplete.

    Detected by ``Change.validate`` before any statement is compiled.
    """

    def __init__(self, message: str, change: "Change | None" = None) -> None:
        self.change = change
        self.reason = message
        if change is not None:
            message = f"{change.change_name}: {message}"
        super().__init__(message)


class UnsupportedChangeError(SchemaShiftError):
    """Raised when a change needs information the compiler cannot infer."""

    pass


class RollbackImpossibleError(SchemaShiftError):
    """Raised when a change has no meaningful inverse."""

    def __init__(self, change_name: str, message: str = "") -> None:
        self.change_name = change_name
        super().__init__(
            message or f"No inverse to {change_name} change; rollback is not supported"
        )


# =============================================================================
# Statement Errors
# =============================================================================


class UnsupportedStatementError(SchemaShiftError):
    """Raised when a statement cannot be rendered for a dialect."""

    def __init__(self, statement: "SqlStatement", dialect: str) -> None:
        self.statement = statement
        self.dialect = dialect
        super().__init__(
            f"{type(statement).__name__} is not supported on {dialect}"
        )


# =============================================================================
# History / Execution Errors
# =============================================================================


class HistoryStoreError(SchemaShiftError):
    """Raised when the execution history store cannot be read or written."""

    def __init__(self, operation: str, message: str) -> None:
        self.operation = operation
        super().__init__(f"History store {operation} failed: {message}")


class MigrationFailedError(SchemaShiftError):
    """Raised when executing a changeset against the database fails."""

    def __init__(self, changeset_key: str, message: str, sql: str | None = None) -> None:
        self.changeset_key = changeset_key
        self.sql = sql
        details = f"Migration failed for changeset {changeset_key}: {message}"
        if sql:
            details = f"{details}\n  SQL: {sql}"
        super().__init__(details)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for reporting."""
        return {
            "changeset": self.changeset_key,
            "message": str(self),
            "sql": self.sql,
        }


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigError(SchemaShiftError):
    """Raised when configuration cannot be loaded or is invalid."""

    pass
