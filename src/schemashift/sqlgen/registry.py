"""Registry of SQL generators keyed by statement type and dialect.

Rendering a statement means looking up a generator for its exact type and
the target dialect, falling back to a generator registered for every
dialect (``"*"``). Adding a dialect only requires registering generators;
changes and statements are untouched.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from schemashift.exceptions import UnsupportedStatementError

if TYPE_CHECKING:
    from schemashift.database.base import Database
    from schemashift.statement.base import SqlStatement

logger = logging.getLogger(__name__)

ANY_DIALECT = "*"

SqlGenerator = Callable[["SqlStatement", "Database"], list[str]]


class SqlGeneratorRegistry:
    """Maps ``(statement type, dialect)`` to a generator function.

    Example:
        >>> registry = SqlGeneratorRegistry()
        >>>
        >>> @registry.register(DropTableStatement)
        ... def drop_table(statement, database):
        ...     return [f"DROP TABLE {database.qualify(statement.schema_name, statement.table_name)}"]
        >>>
        >>> @registry.register(SetTableRemarksStatement, "postgresql", "oracle")
        ... def table_remarks(statement, database):
        ...     ...
        >>>
        >>> registry.supports(statement, database)
        >>> registry.generate(statement, database)
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._generators: dict[tuple[type, str], SqlGenerator] = {}

    def add(
        self,
        statement_type: type,
        generator: SqlGenerator,
        *dialects: str,
    ) -> None:
        """Register a generator.

        Args:
            statement_type: Statement class handled by the generator.
            generator: Callable returning the SQL strings for a statement.
            *dialects: Dialect names; none means every dialect.
        """
        for dialect in dialects or (ANY_DIALECT,):
            self._generators[(statement_type, dialect)] = generator
            logger.debug(
                f"Registered SQL generator: {statement_type.__name__} [{dialect}]"
            )

    def register(
        self,
        statement_type: type,
        *dialects: str,
    ) -> Callable[[SqlGenerator], SqlGenerator]:
        """Decorator form of ``add``."""

        def decorator(func: SqlGenerator) -> SqlGenerator:
            self.add(statement_type, func, *dialects)
            return func

        return decorator

    def unregister(self, statement_type: type, dialect: str = ANY_DIALECT) -> bool:
        """Remove a generator.

        Returns:
            True if removed, False if not found.
        """
        return self._generators.pop((statement_type, dialect), None) is not None

    def get(self, statement: "SqlStatement", database: "Database") -> SqlGenerator | None:
        """Find the generator for a statement, preferring dialect-specific entries."""
        statement_type = type(statement)
        generator = self._generators.get((statement_type, database.short_name))
        if generator is None:
            generator = self._generators.get((statement_type, ANY_DIALECT))
        return generator

    def supports(self, statement: "SqlStatement", database: "Database") -> bool:
        """Check whether a statement can be rendered for the database."""
        return self.get(statement, database) is not None

    def generate(self, statement: "SqlStatement", database: "Database") -> list[str]:
        """Render a statement to SQL.

        Raises:
            UnsupportedStatementError: If no generator is registered.
        """
        generator = self.get(statement, database)
        if generator is None:
            raise UnsupportedStatementError(statement, database.short_name)
        return generator(statement, database)

    def generate_all(
        self,
        statements: list["SqlStatement"],
        database: "Database",
    ) -> list[str]:
        """Render statements in order, concatenating their SQL."""
        sql: list[str] = []
        for statement in statements:
            sql.extend(self.generate(statement, database))
        return sql

    def copy(self) -> "SqlGeneratorRegistry":
        """Create an independent copy, e.g. to customize one dialect in tests."""
        clone = SqlGeneratorRegistry()
        clone._generators = dict(self._generators)
        return clone

    def __len__(self) -> int:
        return len(self._generators)

    def __contains__(self, key: tuple[type, str]) -> bool:
        return key in self._generators


_default_registry = SqlGeneratorRegistry()
_defaults_loaded = False


def get_registry() -> SqlGeneratorRegistry:
    """Get the default registry, populated with the bundled generators."""
    global _defaults_loaded
    if not _defaults_loaded:
        from schemashift.sqlgen import generators

        generators.register_defaults(_default_registry)
        _defaults_loaded = True
    return _default_registry
