"""Abstract, dialect-neutral SQL statements."""

from schemashift.statement.base import (
    AddColumnStatement,
    AutoIncrementConstraint,
    CreateIndexStatement,
    CreateTableStatement,
    DropColumnStatement,
    DropIndexStatement,
    DropTableStatement,
    ForeignKeyConstraint,
    NotNullConstraint,
    RenameColumnStatement,
    RenameTableStatement,
    SetColumnRemarksStatement,
    SetTableRemarksStatement,
    SqlStatement,
    UniqueConstraint,
)

__all__ = [
    "SqlStatement",
    # Constraints
    "NotNullConstraint",
    "ForeignKeyConstraint",
    "UniqueConstraint",
    "AutoIncrementConstraint",
    # Statements
    "CreateTableStatement",
    "DropTableStatement",
    "RenameTableStatement",
    "AddColumnStatement",
    "DropColumnStatement",
    "RenameColumnStatement",
    "CreateIndexStatement",
    "DropIndexStatement",
    "SetTableRemarksStatement",
    "SetColumnRemarksStatement",
]
