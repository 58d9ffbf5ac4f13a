"""Bundled SQL generators for the statement family.

Generators registered for ``"*"`` emit ANSI-leaning SQL and branch on the
dialect only where the syntax genuinely differs. Remarks generators are
registered only for dialects that can attach comments with a standalone
statement; elsewhere the compiler omits remarks.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from schemashift.statement.base import (
    AddColumnStatement,
    CreateIndexStatement,
    CreateTableStatement,
    DropColumnStatement,
    DropIndexStatement,
    DropTableStatement,
    ForeignKeyConstraint,
    RenameColumnStatement,
    RenameTableStatement,
    SetColumnRemarksStatement,
    SetTableRemarksStatement,
    UniqueConstraint,
)

if TYPE_CHECKING:
    from schemashift.database.base import Database
    from schemashift.sqlgen.registry import SqlGeneratorRegistry

logger = logging.getLogger(__name__)

_DEFERRABLE_DIALECTS = frozenset({"postgresql", "oracle", "sqlite"})
_TABLESPACE_DIALECTS = frozenset({"postgresql", "oracle", "mysql", "mariadb"})


def _auto_increment_clause(database: "Database") -> str | None:
    """Column clause that makes a column database-generated."""
    name = database.short_name
    if name in ("mysql", "mariadb"):
        return "AUTO_INCREMENT"
    if name == "mssql":
        return "IDENTITY"
    if name in ("postgresql", "sqlite"):
        # postgresql resolves the type to SERIAL, sqlite handles it inline on the key
        return None
    return "GENERATED BY DEFAULT AS IDENTITY"


def _column_list(database: "Database", columns: list[str] | tuple[str, ...]) -> str:
    return ", ".join(database.quote(column) for column in columns)


# =============================================================================
# Tables
# =============================================================================


def _column_definition(
    statement: CreateTableStatement,
    column: str,
    database: "Database",
    inline_primary_key: bool,
) -> str:
    column_type = statement.column_types[column]
    auto_increment = statement.is_auto_increment(column)
    parts = [database.quote(column), column_type]

    if inline_primary_key:
        parts.append("PRIMARY KEY")
        if auto_increment:
            parts.append("AUTOINCREMENT")
    elif auto_increment:
        clause = _auto_increment_clause(database)
        if clause:
            parts.append(clause)

    default_value = statement.default_values.get(column)
    if default_value is not None and not auto_increment:
        parts.append(f"DEFAULT {default_value}")

    if statement.is_not_null(column) or column in statement.primary_key_columns:
        parts.append("NOT NULL")

    return " ".join(parts)


def _foreign_key_clause(constraint: ForeignKeyConstraint, database: "Database") -> str:
    clause = (
        f"CONSTRAINT {database.quote(constraint.foreign_key_name)} "
        f"FOREIGN KEY ({database.quote(constraint.column_name)}) "
        f"REFERENCES {constraint.references}"
    )
    if constraint.delete_cascade:
        clause += " ON DELETE CASCADE"
    if database.short_name in _DEFERRABLE_DIALECTS:
        if constraint.deferrable:
            clause += " DEFERRABLE"
        if constraint.initially_deferred:
            clause += " INITIALLY DEFERRED"
    return clause


def _unique_clause(constraint: UniqueConstraint, database: "Database") -> str:
    clause = f"UNIQUE ({_column_list(database, constraint.columns)})"
    if constraint.constraint_name:
        clause = f"CONSTRAINT {database.quote(constraint.constraint_name)} {clause}"
    return clause


def generate_create_table(
    statement: CreateTableStatement, database: "Database"
) -> list[str]:
    pk_columns = statement.primary_key_columns
    # sqlite only honours AUTOINCREMENT on an inline "INTEGER PRIMARY KEY"
    inline_pk = (
        database.short_name == "sqlite"
        and len(pk_columns) == 1
        and statement.is_auto_increment(pk_columns[0])
    )

    definitions = [
        _column_definition(
            statement, column, database, inline_pk and column == pk_columns[0]
        )
        for column in statement.columns
    ]

    if pk_columns and not inline_pk:
        clause = f"PRIMARY KEY ({_column_list(database, pk_columns)})"
        if statement.primary_key_name:
            clause = f"CONSTRAINT {database.quote(statement.primary_key_name)} {clause}"
        definitions.append(clause)

    for constraint in statement.constraints:
        if isinstance(constraint, ForeignKeyConstraint):
            definitions.append(_foreign_key_clause(constraint, database))
        elif isinstance(constraint, UniqueConstraint):
            definitions.append(_unique_clause(constraint, database))

    sql = (
        f"CREATE TABLE {database.qualify(statement.schema_name, statement.table_name)} "
        f"({', '.join(definitions)})"
    )

    if statement.tablespace:
        if database.short_name in _TABLESPACE_DIALECTS:
            sql += f" TABLESPACE {statement.tablespace}"
        elif database.short_name == "mssql":
            sql += f" ON {statement.tablespace}"
        else:
            logger.debug(
                f"Tablespace {statement.tablespace} ignored on {database.short_name}"
            )

    return [sql]


def generate_drop_table(statement: DropTableStatement, database: "Database") -> list[str]:
    sql = f"DROP TABLE {database.qualify(statement.schema_name, statement.table_name)}"
    if statement.cascade_constraints:
        if database.short_name == "postgresql":
            sql += " CASCADE"
        elif database.short_name == "oracle":
            sql += " CASCADE CONSTRAINTS"
    return [sql]


def generate_rename_table(
    statement: RenameTableStatement, database: "Database"
) -> list[str]:
    old_name = database.qualify(statement.schema_name, statement.old_table_name)
    if database.short_name == "mssql":
        target = (
            f"{statement.schema_name}.{statement.old_table_name}"
            if statement.schema_name
            else statement.old_table_name
        )
        return [
            f"EXEC sp_rename {database.escape_string_literal(target)}, "
            f"{database.escape_string_literal(statement.new_table_name)}"
        ]
    if database.short_name in ("mysql", "mariadb"):
        new_name = database.qualify(statement.schema_name, statement.new_table_name)
        return [f"RENAME TABLE {old_name} TO {new_name}"]
    return [f"ALTER TABLE {old_name} RENAME TO {database.quote(statement.new_table_name)}"]


# =============================================================================
# Columns
# =============================================================================


def generate_add_column(statement: AddColumnStatement, database: "Database") -> list[str]:
    parts = [database.quote(statement.column_name), statement.column_type]
    if statement.auto_increment:
        clause = _auto_increment_clause(database)
        if clause:
            parts.append(clause)
    if statement.default_value is not None and not statement.auto_increment:
        parts.append(f"DEFAULT {statement.default_value}")
    if not statement.nullable or statement.primary_key:
        parts.append("NOT NULL")
    if statement.primary_key:
        parts.append("PRIMARY KEY")
    elif statement.unique:
        parts.append("UNIQUE")

    table = database.qualify(statement.schema_name, statement.table_name)
    return [f"ALTER TABLE {table} ADD {' '.join(parts)}"]


def generate_drop_column(statement: DropColumnStatement, database: "Database") -> list[str]:
    table = database.qualify(statement.schema_name, statement.table_name)
    return [f"ALTER TABLE {table} DROP COLUMN {database.quote(statement.column_name)}"]


def generate_rename_column(
    statement: RenameColumnStatement, database: "Database"
) -> list[str]:
    if database.short_name == "mssql":
        parts = [statement.table_name, statement.old_column_name]
        if statement.schema_name:
            parts.insert(0, statement.schema_name)
        return [
            f"EXEC sp_rename {database.escape_string_literal('.'.join(parts))}, "
            f"{database.escape_string_literal(statement.new_column_name)}, 'COLUMN'"
        ]
    table = database.qualify(statement.schema_name, statement.table_name)
    return [
        f"ALTER TABLE {table} RENAME COLUMN {database.quote(statement.old_column_name)} "
        f"TO {database.quote(statement.new_column_name)}"
    ]


# =============================================================================
# Indexes
# =============================================================================


def generate_create_index(
    statement: CreateIndexStatement, database: "Database"
) -> list[str]:
    unique = "UNIQUE " if statement.unique else ""
    table = database.qualify(statement.schema_name, statement.table_name)
    sql = (
        f"CREATE {unique}INDEX {database.quote(statement.index_name)} "
        f"ON {table} ({_column_list(database, statement.columns)})"
    )
    if statement.tablespace and database.short_name in ("postgresql", "oracle"):
        sql += f" TABLESPACE {statement.tablespace}"
    return [sql]


def generate_drop_index(statement: DropIndexStatement, database: "Database") -> list[str]:
    if database.short_name in ("mysql", "mariadb", "mssql"):
        table = database.qualify(statement.schema_name, statement.table_name or "")
        return [f"DROP INDEX {database.quote(statement.index_name)} ON {table}"]
    return [f"DROP INDEX {database.qualify(statement.schema_name, statement.index_name)}"]


# =============================================================================
# Remarks
# =============================================================================


def generate_comment_on_table(
    statement: SetTableRemarksStatement, database: "Database"
) -> list[str]:
    table = database.qualify(statement.schema_name, statement.table_name)
    return [f"COMMENT ON TABLE {table} IS {database.escape_string_literal(statement.remarks)}"]


def generate_comment_on_column(
    statement: SetColumnRemarksStatement, database: "Database"
) -> list[str]:
    table = database.qualify(statement.schema_name, statement.table_name)
    column = database.quote(statement.column_name)
    return [
        f"COMMENT ON COLUMN {table}.{column} IS "
        f"{database.escape_string_literal(statement.remarks)}"
    ]


def generate_mysql_table_comment(
    statement: SetTableRemarksStatement, database: "Database"
) -> list[str]:
    table = database.qualify(statement.schema_name, statement.table_name)
    return [f"ALTER TABLE {table} COMMENT = {database.escape_string_literal(statement.remarks)}"]


def register_defaults(registry: "SqlGeneratorRegistry") -> None:
    """Populate a registry with the bundled generators."""
    registry.add(CreateTableStatement, generate_create_table)
    registry.add(DropTableStatement, generate_drop_table)
    registry.add(RenameTableStatement, generate_rename_table)
    registry.add(AddColumnStatement, generate_add_column)
    registry.add(DropColumnStatement, generate_drop_column)
    registry.add(RenameColumnStatement, generate_rename_column)
    registry.add(CreateIndexStatement, generate_create_index)
    registry.add(DropIndexStatement, generate_drop_index)

    registry.add(SetTableRemarksStatement, generate_comment_on_table, "postgresql", "oracle")
    registry.add(SetColumnRemarksStatement, generate_comment_on_column, "postgresql", "oracle")
    registry.add(SetTableRemarksStatement, generate_mysql_table_comment, "mysql", "mariadb")
