"""Per-dialect mapping of abstract column types to concrete storage types.

Changes declare abstract type names (``INT``, ``VARCHAR(255)``,
``DATETIME``, ``BOOLEAN``...). Each dialect resolves them to what the
database actually stores. Unknown types are passed through unchanged so
users can always write native types directly.
"""

from __future__ import annotations

import re

_TYPE_PATTERN = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_ ]*?)\s*(\(.*\))?\s*$")


def split_type(type_name: str) -> tuple[str, str]:
    """Split ``"VARCHAR(255)"`` into ``("VARCHAR", "(255)")``.

    Args:
        type_name: Declared type.

    Returns:
        Upper-cased base name and the parenthesized parameters (or "").
    """
    match = _TYPE_PATTERN.match(type_name)
    if match is None:
        return type_name.strip().upper(), ""
    base, params = match.groups()
    return base.upper(), (params or "").replace(" ", "")


class TypeMapper:
    """Generic ANSI-leaning type mapping.

    Subclasses override ``type_map`` and ``auto_increment_map`` for their
    dialect. A mapped value that already carries parameters replaces the
    declared parameters; otherwise declared parameters are kept.
    """

    dialect_name = "*"

    type_map: dict[str, str] = {
        "BOOLEAN": "BOOLEAN",
        "BOOL": "BOOLEAN",
        "TINYINT": "SMALLINT",
        "SMALLINT": "SMALLINT",
        "INT": "INT",
        "INTEGER": "INT",
        "BIGINT": "BIGINT",
        "FLOAT": "FLOAT",
        "DOUBLE": "DOUBLE PRECISION",
        "DECIMAL": "DECIMAL",
        "NUMBER": "DECIMAL",
        "NUMERIC": "DECIMAL",
        "CURRENCY": "DECIMAL(18,4)",
        "CHAR": "CHAR",
        "VARCHAR": "VARCHAR",
        "NVARCHAR": "NVARCHAR",
        "TEXT": "CLOB",
        "CLOB": "CLOB",
        "BLOB": "BLOB",
        "DATE": "DATE",
        "TIME": "TIME",
        "DATETIME": "TIMESTAMP",
        "TIMESTAMP": "TIMESTAMP",
        "UUID": "CHAR(36)",
    }

    auto_increment_map: dict[str, str] = {}

    def get_column_type(self, type_name: str, auto_increment: bool = False) -> str:
        """Resolve a declared type for this dialect.

        Args:
            type_name: Abstract type as declared on the column.
            auto_increment: Whether the column is database-generated.

        Returns:
            Concrete type expression.
        """
        base, params = split_type(type_name)

        if auto_increment and base in self.auto_increment_map:
            return self.auto_increment_map[base]

        mapped = self.type_map.get(base)
        if mapped is None:
            return type_name.strip()
        if params and "(" not in mapped:
            return f"{mapped}{params}"
        return mapped


class PostgreSQLTypeMapper(TypeMapper):
    dialect_name = "postgresql"

    type_map = {
        **TypeMapper.type_map,
        "TINYINT": "SMALLINT",
        "DOUBLE": "DOUBLE PRECISION",
        "NVARCHAR": "VARCHAR",
        "TEXT": "TEXT",
        "CLOB": "TEXT",
        "BLOB": "BYTEA",
        "DATETIME": "TIMESTAMP WITHOUT TIME ZONE",
        "UUID": "UUID",
        "CURRENCY": "DECIMAL",
    }

    auto_increment_map = {
        "SMALLINT": "SMALLSERIAL",
        "INT": "SERIAL",
        "INTEGER": "SERIAL",
        "BIGINT": "BIGSERIAL",
    }


class MySQLTypeMapper(TypeMapper):
    dialect_name = "mysql"

    type_map = {
        **TypeMapper.type_map,
        "BOOLEAN": "TINYINT(1)",
        "BOOL": "TINYINT(1)",
        "TINYINT": "TINYINT",
        "DOUBLE": "DOUBLE",
        "TEXT": "TEXT",
        "CLOB": "LONGTEXT",
        "BLOB": "LONGBLOB",
        "DATETIME": "DATETIME",
        "NVARCHAR": "VARCHAR",
    }


class SQLiteTypeMapper(TypeMapper):
    dialect_name = "sqlite"

    type_map = {
        **TypeMapper.type_map,
        "INT": "INTEGER",
        "INTEGER": "INTEGER",
        "TINYINT": "INTEGER",
        "SMALLINT": "INTEGER",
        "BIGINT": "INTEGER",
        "DOUBLE": "REAL",
        "FLOAT": "REAL",
        "TEXT": "TEXT",
        "CLOB": "TEXT",
        "DATETIME": "TEXT",
        "TIMESTAMP": "TEXT",
        "UUID": "TEXT",
        "NVARCHAR": "VARCHAR",
    }

    # AUTOINCREMENT only works on "INTEGER PRIMARY KEY"
    auto_increment_map = {
        "INT": "INTEGER",
        "INTEGER": "INTEGER",
        "BIGINT": "INTEGER",
        "SMALLINT": "INTEGER",
    }


class OracleTypeMapper(TypeMapper):
    dialect_name = "oracle"

    type_map = {
        **TypeMapper.type_map,
        "BOOLEAN": "NUMBER(1)",
        "BOOL": "NUMBER(1)",
        "TINYINT": "NUMBER(3)",
        "SMALLINT": "NUMBER(5)",
        "INT": "INTEGER",
        "INTEGER": "INTEGER",
        "BIGINT": "NUMBER(38,0)",
        "DOUBLE": "FLOAT(24)",
        "DECIMAL": "DECIMAL",
        "NUMBER": "NUMBER",
        "VARCHAR": "VARCHAR2",
        "NVARCHAR": "NVARCHAR2",
        "TEXT": "CLOB",
        "DATETIME": "TIMESTAMP",
        "UUID": "RAW(16)",
    }


class SQLServerTypeMapper(TypeMapper):
    dialect_name = "mssql"

    type_map = {
        **TypeMapper.type_map,
        "BOOLEAN": "BIT",
        "BOOL": "BIT",
        "TINYINT": "TINYINT",
        "DOUBLE": "FLOAT",
        "TEXT": "NVARCHAR(MAX)",
        "CLOB": "NVARCHAR(MAX)",
        "BLOB": "VARBINARY(MAX)",
        "DATETIME": "DATETIME2",
        "TIMESTAMP": "DATETIME2",
        "UUID": "UNIQUEIDENTIFIER",
        "CURRENCY": "MONEY",
    }


_TYPE_MAPPERS: dict[str, TypeMapper] = {
    mapper.dialect_name: mapper
    for mapper in (
        PostgreSQLTypeMapper(),
        MySQLTypeMapper(),
        SQLiteTypeMapper(),
        OracleTypeMapper(),
        SQLServerTypeMapper(),
    )
}
_TYPE_MAPPERS["mariadb"] = _TYPE_MAPPERS["mysql"]

_GENERIC_MAPPER = TypeMapper()


def get_type_mapper(dialect_name: str) -> TypeMapper:
    """Get the type mapper for a dialect, falling back to the generic one."""
    return _TYPE_MAPPERS.get(dialect_name, _GENERIC_MAPPER)
