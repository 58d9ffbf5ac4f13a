"""Target database abstraction.

A ``Database`` bundles what the change compiler and the SQL generators need
to know about the target: the SQLAlchemy dialect (for identifier quoting and
capability flags), the default schema, and the type mapping. An engine is
optional; without one the database can still compile and render SQL, which
is what ``update-sql`` relies on.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import inspect
from sqlalchemy.dialects import mssql, mysql, oracle, postgresql, sqlite

from schemashift.database.types import TypeMapper, get_type_mapper

if TYPE_CHECKING:
    from sqlalchemy.engine import Dialect, Engine

logger = logging.getLogger(__name__)


_DIALECT_FACTORIES: dict[str, Any] = {
    "postgresql": postgresql.dialect,
    "mysql": mysql.dialect,
    "mariadb": mysql.dialect,
    "sqlite": sqlite.dialect,
    "oracle": oracle.dialect,
    "mssql": mssql.dialect,
}

_DIALECT_ALIASES: dict[str, str] = {
    "postgres": "postgresql",
    "pg": "postgresql",
    "sqlserver": "mssql",
    "sql_server": "mssql",
}

# Dialects that spell booleans as TRUE/FALSE rather than 1/0
_NATIVE_BOOLEAN_DIALECTS = frozenset({"postgresql"})


def normalize_dialect_name(name: str) -> str:
    """Normalize a user-supplied dialect name (``postgres`` -> ``postgresql``)."""
    key = name.strip().lower()
    return _DIALECT_ALIASES.get(key, key)


def supported_dialects() -> list[str]:
    """List dialect names that can be created without an engine."""
    return sorted(_DIALECT_FACTORIES)


class Database:
    """Target database capabilities.

    Example:
        >>> db = Database("postgresql", default_schema_name="public")
        >>> db.get_column_type("INT", auto_increment=True)
        'SERIAL'
        >>> db.qualify("public", "user")
        'public."user"'

        >>> engine = create_engine("sqlite:///app.db")
        >>> db = Database.from_engine(engine)
    """

    def __init__(
        self,
        dialect_name: str,
        *,
        default_schema_name: str | None = None,
        engine: "Engine | None" = None,
        dialect: "Dialect | None" = None,
    ) -> None:
        """Initialize the database.

        Args:
            dialect_name: Dialect name (postgresql, mysql, sqlite, oracle, mssql).
            default_schema_name: Schema used when a change declares none.
            engine: Optional SQLAlchemy engine for execution and introspection.
            dialect: Optional dialect instance; created from the name if omitted.

        Raises:
            ValueError: If the dialect is unknown and no instance was given.
        """
        self._name = normalize_dialect_name(dialect_name)

        if dialect is None:
            factory = _DIALECT_FACTORIES.get(self._name)
            if factory is None:
                raise ValueError(
                    f"Unknown dialect: {dialect_name}. "
                    f"Supported: {', '.join(supported_dialects())}"
                )
            dialect = factory()

        self._dialect = dialect
        self._engine = engine
        self._default_schema_name = default_schema_name
        self._type_mapper: TypeMapper = get_type_mapper(self._name)

    @classmethod
    def from_engine(
        cls,
        engine: "Engine",
        default_schema_name: str | None = None,
    ) -> "Database":
        """Create a database bound to an engine.

        The default schema is read from the live connection unless given.
        """
        if default_schema_name is None:
            default_schema_name = inspect(engine).default_schema_name
        logger.debug(
            f"Connected to {engine.dialect.name} (default schema: {default_schema_name})"
        )
        return cls(
            engine.dialect.name,
            default_schema_name=default_schema_name,
            engine=engine,
            dialect=engine.dialect,
        )

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def short_name(self) -> str:
        """Normalized dialect name."""
        return self._name

    @property
    def dialect(self) -> "Dialect":
        """SQLAlchemy dialect instance."""
        return self._dialect

    @property
    def engine(self) -> "Engine | None":
        """Bound engine, if any."""
        return self._engine

    @property
    def default_schema_name(self) -> str | None:
        return self._default_schema_name

    @property
    def supports_comments(self) -> bool:
        return bool(getattr(self._dialect, "supports_comments", False))

    # -------------------------------------------------------------------------
    # Type Mapping
    # -------------------------------------------------------------------------

    def get_column_type(self, type_name: str, auto_increment: bool = False) -> str:
        """Resolve an abstract type name to this dialect's storage type."""
        return self._type_mapper.get_column_type(type_name, auto_increment)

    # -------------------------------------------------------------------------
    # Identifiers and Literals
    # -------------------------------------------------------------------------

    def quote(self, identifier: str) -> str:
        """Quote an identifier if the dialect requires it."""
        return self._dialect.identifier_preparer.quote(identifier)

    def qualify(self, schema_name: str | None, object_name: str) -> str:
        """Build a (schema-)qualified, quoted object name."""
        if schema_name:
            preparer = self._dialect.identifier_preparer
            return f"{preparer.quote_schema(schema_name)}.{self.quote(object_name)}"
        return self.quote(object_name)

    def escape_string_literal(self, value: str) -> str:
        """Render a string as a SQL literal."""
        escaped = value.replace("'", "''")
        return f"'{escaped}'"

    def format_boolean(self, value: bool) -> str:
        if self._name in _NATIVE_BOOLEAN_DIALECTS:
            return "TRUE" if value else "FALSE"
        return "1" if value else "0"

    def format_literal(self, value: Any) -> str:
        """Render a Python value as a SQL literal for this dialect."""
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            return self.format_boolean(value)
        if isinstance(value, (int, float)):
            return str(value)
        return self.escape_string_literal(str(value))

    def __repr__(self) -> str:
        return (
            f"Database(dialect={self._name!r}, "
            f"default_schema={self._default_schema_name!r}, "
            f"bound={self._engine is not None})"
        )
