"""Dialect-neutral SQL statement objects.

Statements are plain data produced by changes and consumed by the SQL
generator registry. They never hold concrete SQL text; rendering is the
registry's job.
"""

from __future__ import annotations

from dataclasses import dataclass, field


class SqlStatement:
    """Marker base class for all abstract statements."""

    statement_name: str = "statement"

    def affected_table(self) -> str | None:
        """Table this statement operates on, if any."""
        return getattr(self, "table_name", None)


# =============================================================================
# Column Constraints
# =============================================================================


@dataclass(frozen=True)
class NotNullConstraint:
    """NOT NULL on a single column."""

    column_name: str


@dataclass(frozen=True)
class ForeignKeyConstraint:
    """Foreign key declared inline on a column.

    Attributes:
        foreign_key_name: Constraint name (always present at this point).
        references: Referenced target, e.g. ``"customers(id)"``.
        column_name: Referencing column.
        delete_cascade: Add ``ON DELETE CASCADE``.
        deferrable: Constraint may be deferred.
        initially_deferred: Constraint starts deferred.
    """

    foreign_key_name: str
    references: str
    column_name: str
    delete_cascade: bool = False
    deferrable: bool = False
    initially_deferred: bool = False


@dataclass(frozen=True)
class UniqueConstraint:
    """UNIQUE over one or more columns, optionally named."""

    constraint_name: str | None = None
    columns: tuple[str, ...] = ()


@dataclass(frozen=True)
class AutoIncrementConstraint:
    """Marks a column as database-generated."""

    column_name: str


ColumnConstraint = (
    NotNullConstraint | ForeignKeyConstraint | UniqueConstraint | AutoIncrementConstraint
)


# =============================================================================
# Table Statements
# =============================================================================


@dataclass
class CreateTableStatement(SqlStatement):
    """CREATE TABLE with its columns and inline constraints.

    Columns keep declaration order. Primary-key columns are listed in
    ``primary_key_columns`` in the order they were added.
    """

    schema_name: str | None
    table_name: str
    columns: list[str] = field(default_factory=list)
    column_types: dict[str, str] = field(default_factory=dict)
    default_values: dict[str, str] = field(default_factory=dict)
    primary_key_columns: list[str] = field(default_factory=list)
    primary_key_name: str | None = None
    constraints: list[ColumnConstraint] = field(default_factory=list)
    tablespace: str | None = None

    statement_name = "createTable"

    def add_column(
        self,
        column_name: str,
        column_type: str,
        default_value: str | None = None,
    ) -> "CreateTableStatement":
        self.columns.append(column_name)
        self.column_types[column_name] = column_type
        if default_value is not None:
            self.default_values[column_name] = default_value
        return self

    def add_primary_key_column(
        self,
        column_name: str,
        column_type: str,
        default_value: str | None = None,
        primary_key_name: str | None = None,
    ) -> "CreateTableStatement":
        self.add_column(column_name, column_type, default_value)
        self.primary_key_columns.append(column_name)
        if primary_key_name:
            self.primary_key_name = primary_key_name
        return self

    def add_column_constraint(self, constraint: ColumnConstraint) -> "CreateTableStatement":
        self.constraints.append(constraint)
        return self

    def constraints_for(self, column_name: str) -> list[ColumnConstraint]:
        """Single-column constraints attached to ``column_name``, in order."""
        result = []
        for constraint in self.constraints:
            if isinstance(constraint, UniqueConstraint):
                if constraint.columns == (column_name,):
                    result.append(constraint)
            elif constraint.column_name == column_name:
                result.append(constraint)
        return result

    def is_not_null(self, column_name: str) -> bool:
        return any(
            isinstance(c, NotNullConstraint) and c.column_name == column_name
            for c in self.constraints
        )

    def is_auto_increment(self, column_name: str) -> bool:
        return any(
            isinstance(c, AutoIncrementConstraint) and c.column_name == column_name
            for c in self.constraints
        )


@dataclass
class DropTableStatement(SqlStatement):
    schema_name: str | None
    table_name: str
    cascade_constraints: bool = False

    statement_name = "dropTable"


@dataclass
class RenameTableStatement(SqlStatement):
    schema_name: str | None
    old_table_name: str
    new_table_name: str

    statement_name = "renameTable"

    def affected_table(self) -> str | None:
        return self.old_table_name


# =============================================================================
# Column Statements
# =============================================================================


@dataclass
class AddColumnStatement(SqlStatement):
    """ALTER TABLE ... ADD a single column."""

    schema_name: str | None
    table_name: str
    column_name: str
    column_type: str
    default_value: str | None = None
    nullable: bool = True
    primary_key: bool = False
    unique: bool = False
    auto_increment: bool = False

    statement_name = "addColumn"


@dataclass
class DropColumnStatement(SqlStatement):
    schema_name: str | None
    table_name: str
    column_name: str

    statement_name = "dropColumn"


@dataclass
class RenameColumnStatement(SqlStatement):
    schema_name: str | None
    table_name: str
    old_column_name: str
    new_column_name: str
    column_type: str | None = None

    statement_name = "renameColumn"


# =============================================================================
# Index Statements
# =============================================================================


@dataclass
class CreateIndexStatement(SqlStatement):
    schema_name: str | None
    table_name: str
    index_name: str
    columns: tuple[str, ...]
    unique: bool = False
    tablespace: str | None = None

    statement_name = "createIndex"


@dataclass
class DropIndexStatement(SqlStatement):
    schema_name: str | None
    table_name: str | None
    index_name: str

    statement_name = "dropIndex"


# =============================================================================
# Remarks Statements
# =============================================================================


@dataclass
class SetTableRemarksStatement(SqlStatement):
    schema_name: str | None
    table_name: str
    remarks: str

    statement_name = "setTableRemarks"


@dataclass
class SetColumnRemarksStatement(SqlStatement):
    schema_name: str | None
    table_name: str
    column_name: str
    remarks: str

    statement_name = "setColumnRemarks"
