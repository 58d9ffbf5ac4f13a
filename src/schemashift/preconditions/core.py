"""Built-in preconditions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import inspect

from schemashift.database.base import normalize_dialect_name
from schemashift.exceptions import SchemaShiftError
from schemashift.preconditions.base import Precondition, PreconditionCheckFailed

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from schemashift.changelog.model import ChangeLog
    from schemashift.database.base import Database


def _require_engine(database: "Database", precondition: Precondition) -> "Engine":
    if database.engine is None:
        raise SchemaShiftError(
            f"{precondition.name} requires a database connection"
        )
    return database.engine


@dataclass
class DbmsPrecondition(Precondition):
    """Passes when the target dialect is in a comma-separated list."""

    type: str

    name = "dbms"

    def check(self, database: "Database", changelog: "ChangeLog | None") -> None:
        allowed = {normalize_dialect_name(t) for t in self.type.split(",") if t.strip()}
        if database.short_name not in allowed:
            raise PreconditionCheckFailed(
                f"DBMS precondition failed: expected {self.type}, got {database.short_name}"
            )

    def __str__(self) -> str:
        return f"dbms({self.type})"


@dataclass
class TableExistsPrecondition(Precondition):
    table_name: str
    schema_name: str | None = None

    name = "tableExists"

    def check(self, database: "Database", changelog: "ChangeLog | None") -> None:
        engine = _require_engine(database, self)
        schema = self.schema_name or database.default_schema_name
        if not inspect(engine).has_table(self.table_name, schema=schema):
            raise PreconditionCheckFailed(f"Table {self.table_name} does not exist")

    def __str__(self) -> str:
        return f"tableExists({self.table_name})"


@dataclass
class ColumnExistsPrecondition(Precondition):
    table_name: str
    column_name: str
    schema_name: str | None = None

    name = "columnExists"

    def check(self, database: "Database", changelog: "ChangeLog | None") -> None:
        engine = _require_engine(database, self)
        schema = self.schema_name or database.default_schema_name
        inspector = inspect(engine)
        if not inspector.has_table(self.table_name, schema=schema):
            raise PreconditionCheckFailed(f"Table {self.table_name} does not exist")
        columns = {column["name"] for column in inspector.get_columns(self.table_name, schema=schema)}
        if self.column_name not in columns:
            raise PreconditionCheckFailed(
                f"Column {self.table_name}.{self.column_name} does not exist"
            )

    def __str__(self) -> str:
        return f"columnExists({self.table_name}.{self.column_name})"


@dataclass
class SqlCheckPrecondition(Precondition):
    """Runs a scalar query and compares its result to ``expected_result``.

    Results are compared as strings so ``"0"`` matches an integer 0.
    """

    sql: str
    expected_result: Any

    name = "sqlCheck"

    def check(self, database: "Database", changelog: "ChangeLog | None") -> None:
        engine = _require_engine(database, self)
        with engine.connect() as conn:
            result = conn.exec_driver_sql(self.sql).scalar()
        if str(result) != str(self.expected_result):
            raise PreconditionCheckFailed(
                f"SQL check failed: {self.sql!r} returned {result!r}, "
                f"expected {self.expected_result!r}"
            )

    def __str__(self) -> str:
        return f"sqlCheck({self.sql})"
