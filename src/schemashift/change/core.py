"""Core change types: tables, columns and indexes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from schemashift.change.base import (
    Change,
    ColumnConfig,
    register_change,
    trim_to_none,
)
from schemashift.exceptions import DefinitionError, UnsupportedChangeError
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

if TYPE_CHECKING:
    from schemashift.database.base import Database
    from schemashift.sqlgen.registry import SqlGeneratorRegistry

logger = logging.getLogger(__name__)


def _resolve_registry(
    registry: "SqlGeneratorRegistry | None",
) -> "SqlGeneratorRegistry":
    if registry is None:
        from schemashift.sqlgen.registry import get_registry

        registry = get_registry()
    return registry


def _validate_columns(change: Change, columns: list[ColumnConfig]) -> None:
    if not columns:
        raise DefinitionError("No columns defined", change)
    for column in columns:
        if trim_to_none(column.name) is None:
            raise DefinitionError("Column name is required", change)
        if trim_to_none(column.type) is None:
            raise DefinitionError(f"Column type is required for {column.name}", change)


# =============================================================================
# Tables
# =============================================================================


@register_change("createTable")
@dataclass
class CreateTableChange(Change):
    """Creates a new table.

    Example:
        >>> change = CreateTableChange(
        ...     table_name="customers",
        ...     columns=[
        ...         ColumnConfig(name="id", type="INT", auto_increment=True,
        ...                      constraints=ConstraintsConfig(primary_key=True)),
        ...         ColumnConfig(name="email", type="VARCHAR(255)",
        ...                      constraints=ConstraintsConfig(nullable=False, unique=True)),
        ...     ],
        ...     remarks="Registered customers",
        ... )
        >>> change.validate(database)
        >>> statements = change.generate_statements(database)
    """

    table_name: str | None = None
    schema_name: str | None = None
    tablespace: str | None = None
    remarks: str | None = None
    columns: list[ColumnConfig] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.schema_name = trim_to_none(self.schema_name)

    def add_column(self, column: ColumnConfig) -> "CreateTableChange":
        self.columns.append(column)
        return self

    def validate(self, database: "Database") -> None:
        self._require(self.table_name, "tableName")
        _validate_columns(self, self.columns)

    def generate_statements(
        self,
        database: "Database",
        registry: "SqlGeneratorRegistry | None" = None,
    ) -> list[SqlStatement]:
        registry = _resolve_registry(registry)
        schema_name = self.resolve_schema(database)
        statement = CreateTableStatement(schema_name, self.table_name)

        for column in self.columns:
            constraints = column.constraints
            auto_increment = column.is_auto_increment
            column_type = database.get_column_type(column.type, auto_increment)

            default_value = None
            if column.has_default_value:
                default_value = trim_to_none(column.default_column_value(database))

            if constraints is not None and constraints.is_primary_key:
                statement.add_primary_key_column(
                    column.name,
                    column_type,
                    default_value,
                    constraints.primary_key_name,
                )
            else:
                statement.add_column(column.name, column_type, default_value)

            if constraints is not None:
                if constraints.is_not_null:
                    statement.add_column_constraint(NotNullConstraint(column.name))

                if trim_to_none(constraints.references) is not None:
                    if trim_to_none(constraints.foreign_key_name) is None:
                        raise UnsupportedChangeError(
                            f"createTable with references requires foreignKeyName "
                            f"(column {column.name})"
                        )
                    statement.add_column_constraint(
                        ForeignKeyConstraint(
                            foreign_key_name=constraints.foreign_key_name,
                            references=constraints.references,
                            column_name=column.name,
                            delete_cascade=bool(constraints.delete_cascade),
                            deferrable=bool(constraints.deferrable),
                            initially_deferred=bool(constraints.initially_deferred),
                        )
                    )

                if constraints.is_unique:
                    statement.add_column_constraint(
                        UniqueConstraint(constraints.unique_constraint_name, (column.name,))
                    )

            if auto_increment:
                statement.add_column_constraint(AutoIncrementConstraint(column.name))

        statement.tablespace = trim_to_none(self.tablespace)

        statements: list[SqlStatement] = [statement]

        remarks = trim_to_none(self.remarks)
        if remarks is not None:
            remarks_statement = SetTableRemarksStatement(schema_name, self.table_name, remarks)
            if registry.supports(remarks_statement, database):
                statements.append(remarks_statement)
            else:
                logger.debug(
                    f"Table remarks on {self.table_name} skipped: "
                    f"not supported on {database.short_name}"
                )

        for column in self.columns:
            column_remarks = trim_to_none(column.remarks)
            if column_remarks is None:
                continue
            remarks_statement = SetColumnRemarksStatement(
                schema_name, self.table_name, column.name, column_remarks
            )
            if registry.supports(remarks_statement, database):
                statements.append(remarks_statement)

        return statements

    def inverses(self) -> list[Change]:
        return [DropTableChange(table_name=self.table_name, schema_name=self.schema_name)]

    def confirmation_message(self) -> str:
        return f"Table {self.table_name} created"


@register_change("dropTable")
@dataclass
class DropTableChange(Change):
    """Drops a table. Not reversible: the prior definition is not known."""

    table_name: str | None = None
    schema_name: str | None = None
    cascade_constraints: bool = False

    def validate(self, database: "Database") -> None:
        self._require(self.table_name, "tableName")

    def generate_statements(
        self,
        database: "Database",
        registry: "SqlGeneratorRegistry | None" = None,
    ) -> list[SqlStatement]:
        return [
            DropTableStatement(
                self.resolve_schema(database),
                self.table_name,
                self.cascade_constraints,
            )
        ]

    def confirmation_message(self) -> str:
        return f"Table {self.table_name} dropped"


@register_change("renameTable")
@dataclass
class RenameTableChange(Change):
    old_table_name: str | None = None
    new_table_name: str | None = None
    schema_name: str | None = None

    def validate(self, database: "Database") -> None:
        self._require(self.old_table_name, "oldTableName")
        self._require(self.new_table_name, "newTableName")

    def generate_statements(
        self,
        database: "Database",
        registry: "SqlGeneratorRegistry | None" = None,
    ) -> list[SqlStatement]:
        return [
            RenameTableStatement(
                self.resolve_schema(database),
                self.old_table_name,
                self.new_table_name,
            )
        ]

    def inverses(self) -> list[Change]:
        return [
            RenameTableChange(
                old_table_name=self.new_table_name,
                new_table_name=self.old_table_name,
                schema_name=self.schema_name,
            )
        ]

    def confirmation_message(self) -> str:
        return f"Table {self.old_table_name} renamed to {self.new_table_name}"


# =============================================================================
# Columns
# =============================================================================


@register_change("addColumn")
@dataclass
class AddColumnChange(Change):
    """Adds one or more columns to an existing table."""

    table_name: str | None = None
    schema_name: str | None = None
    columns: list[ColumnConfig] = field(default_factory=list)

    def validate(self, database: "Database") -> None:
        self._require(self.table_name, "tableName")
        _validate_columns(self, self.columns)

    def generate_statements(
        self,
        database: "Database",
        registry: "SqlGeneratorRegistry | None" = None,
    ) -> list[SqlStatement]:
        registry = _resolve_registry(registry)
        schema_name = self.resolve_schema(database)
        statements: list[SqlStatement] = []

        for column in self.columns:
            constraints = column.constraints
            if constraints is not None and trim_to_none(constraints.references) is not None:
                raise UnsupportedChangeError(
                    f"addColumn cannot declare a foreign key on {column.name}; "
                    "add the constraint in a separate change"
                )

            default_value = None
            if column.has_default_value:
                default_value = trim_to_none(column.default_column_value(database))

            statements.append(
                AddColumnStatement(
                    schema_name=schema_name,
                    table_name=self.table_name,
                    column_name=column.name,
                    column_type=database.get_column_type(
                        column.type, column.is_auto_increment
                    ),
                    default_value=default_value,
                    nullable=not (constraints is not None and constraints.is_not_null),
                    primary_key=constraints is not None and constraints.is_primary_key,
                    unique=constraints is not None and constraints.is_unique,
                    auto_increment=column.is_auto_increment,
                )
            )

        for column in self.columns:
            column_remarks = trim_to_none(column.remarks)
            if column_remarks is None:
                continue
            remarks_statement = SetColumnRemarksStatement(
                schema_name, self.table_name, column.name, column_remarks
            )
            if registry.supports(remarks_statement, database):
                statements.append(remarks_statement)

        return statements

    def inverses(self) -> list[Change]:
        return [
            DropColumnChange(
                table_name=self.table_name,
                column_name=column.name,
                schema_name=self.schema_name,
            )
            for column in reversed(self.columns)
        ]

    def confirmation_message(self) -> str:
        names = ", ".join(str(column.name) for column in self.columns)
        return f"Columns {names} added to {self.table_name}"


@register_change("dropColumn")
@dataclass
class DropColumnChange(Change):
    table_name: str | None = None
    column_name: str | None = None
    schema_name: str | None = None

    def validate(self, database: "Database") -> None:
        self._require(self.table_name, "tableName")
        self._require(self.column_name, "columnName")

    def generate_statements(
        self,
        database: "Database",
        registry: "SqlGeneratorRegistry | None" = None,
    ) -> list[SqlStatement]:
        return [
            DropColumnStatement(
                self.resolve_schema(database),
                self.table_name,
                self.column_name,
            )
        ]

    def confirmation_message(self) -> str:
        return f"Column {self.table_name}.{self.column_name} dropped"


@register_change("renameColumn")
@dataclass
class RenameColumnChange(Change):
    table_name: str | None = None
    old_column_name: str | None = None
    new_column_name: str | None = None
    column_data_type: str | None = None
    schema_name: str | None = None

    def validate(self, database: "Database") -> None:
        self._require(self.table_name, "tableName")
        self._require(self.old_column_name, "oldColumnName")
        self._require(self.new_column_name, "newColumnName")

    def generate_statements(
        self,
        database: "Database",
        registry: "SqlGeneratorRegistry | None" = None,
    ) -> list[SqlStatement]:
        column_type = None
        if self.column_data_type:
            column_type = database.get_column_type(self.column_data_type)
        return [
            RenameColumnStatement(
                self.resolve_schema(database),
                self.table_name,
                self.old_column_name,
                self.new_column_name,
                column_type,
            )
        ]

    def inverses(self) -> list[Change]:
        return [
            RenameColumnChange(
                table_name=self.table_name,
                old_column_name=self.new_column_name,
                new_column_name=self.old_column_name,
                column_data_type=self.column_data_type,
                schema_name=self.schema_name,
            )
        ]

    def confirmation_message(self) -> str:
        return (
            f"Column {self.table_name}.{self.old_column_name} "
            f"renamed to {self.new_column_name}"
        )


# =============================================================================
# Indexes
# =============================================================================


@register_change("createIndex")
@dataclass
class CreateIndexChange(Change):
    index_name: str | None = None
    table_name: str | None = None
    columns: list[str] = field(default_factory=list)
    unique: bool = False
    schema_name: str | None = None
    tablespace: str | None = None

    def validate(self, database: "Database") -> None:
        self._require(self.index_name, "indexName")
        self._require(self.table_name, "tableName")
        if not self.columns:
            raise DefinitionError("No columns defined", self)

    def generate_statements(
        self,
        database: "Database",
        registry: "SqlGeneratorRegistry | None" = None,
    ) -> list[SqlStatement]:
        return [
            CreateIndexStatement(
                schema_name=self.resolve_schema(database),
                table_name=self.table_name,
                index_name=self.index_name,
                columns=tuple(self.columns),
                unique=self.unique,
                tablespace=trim_to_none(self.tablespace),
            )
        ]

    def inverses(self) -> list[Change]:
        return [
            DropIndexChange(
                index_name=self.index_name,
                table_name=self.table_name,
                schema_name=self.schema_name,
            )
        ]

    def confirmation_message(self) -> str:
        return f"Index {self.index_name} created"


@register_change("dropIndex")
@dataclass
class DropIndexChange(Change):
    index_name: str | None = None
    table_name: str | None = None
    schema_name: str | None = None

    # Dialects whose DROP INDEX syntax names the owning table
    _TABLE_REQUIRED = frozenset({"mysql", "mariadb", "mssql"})

    def validate(self, database: "Database") -> None:
        self._require(self.index_name, "indexName")
        if database.short_name in self._TABLE_REQUIRED:
            if trim_to_none(self.table_name) is None:
                raise DefinitionError(
                    f"tableName is required on {database.short_name}", self
                )

    def generate_statements(
        self,
        database: "Database",
        registry: "SqlGeneratorRegistry | None" = None,
    ) -> list[SqlStatement]:
        return [
            DropIndexStatement(
                self.resolve_schema(database),
                self.table_name,
                self.index_name,
            )
        ]

    def confirmation_message(self) -> str:
        return f"Index {self.index_name} dropped"
