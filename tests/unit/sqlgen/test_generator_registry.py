"""Unit tests for the SQL generator registry."""

from __future__ import annotations

import pytest

from schemashift.database import Database
from schemashift.exceptions import UnsupportedStatementError
from schemashift.sqlgen import ANY_DIALECT, SqlGeneratorRegistry, get_registry
from schemashift.statement import (
    DropTableStatement,
    SetColumnRemarksStatement,
    SetTableRemarksStatement,
)


def _drop(statement, database) -> list[str]:
    return [f"DROP {statement.table_name}"]


def _drop_pg(statement, database) -> list[str]:
    return [f"DROP PG {statement.table_name}"]


class TestSqlGeneratorRegistry:
    """Tests for SqlGeneratorRegistry."""

    def test_empty_registry_rejects(self, postgres: Database) -> None:
        registry = SqlGeneratorRegistry()
        statement = DropTableStatement(None, "t")

        assert registry.supports(statement, postgres) is False
        with pytest.raises(UnsupportedStatementError, match="DropTableStatement"):
            registry.generate(statement, postgres)

    def test_any_dialect_fallback(self, postgres: Database, sqlite: Database) -> None:
        registry = SqlGeneratorRegistry()
        registry.add(DropTableStatement, _drop)
        statement = DropTableStatement(None, "t")

        assert registry.generate(statement, postgres) == ["DROP t"]
        assert registry.generate(statement, sqlite) == ["DROP t"]

    def test_dialect_specific_wins(self, postgres: Database, sqlite: Database) -> None:
        registry = SqlGeneratorRegistry()
        registry.add(DropTableStatement, _drop)
        registry.add(DropTableStatement, _drop_pg, "postgresql")
        statement = DropTableStatement(None, "t")

        assert registry.generate(statement, postgres) == ["DROP PG t"]
        assert registry.generate(statement, sqlite) == ["DROP t"]

    def test_register_decorator(self, postgres: Database) -> None:
        registry = SqlGeneratorRegistry()

        @registry.register(DropTableStatement, "postgresql")
        def generate(statement, database):
            return ["x"]

        assert (DropTableStatement, "postgresql") in registry
        assert registry.generate(DropTableStatement(None, "t"), postgres) == ["x"]

    def test_unregister(self) -> None:
        registry = SqlGeneratorRegistry()
        registry.add(DropTableStatement, _drop)

        assert registry.unregister(DropTableStatement) is True
        assert registry.unregister(DropTableStatement) is False
        assert len(registry) == 0

    def test_generate_all_preserves_order(self, postgres: Database) -> None:
        registry = SqlGeneratorRegistry()
        registry.add(DropTableStatement, _drop)

        sql = registry.generate_all(
            [DropTableStatement(None, "a"), DropTableStatement(None, "b")], postgres
        )

        assert sql == ["DROP a", "DROP b"]

    def test_copy_is_independent(self) -> None:
        registry = SqlGeneratorRegistry()
        registry.add(DropTableStatement, _drop)

        clone = registry.copy()
        clone.add(DropTableStatement, _drop_pg, "postgresql")

        assert len(registry) == 1
        assert len(clone) == 2


class TestDefaultRegistry:
    """Tests for the bundled registry contents."""

    def test_bundled_generators_loaded(self) -> None:
        assert (DropTableStatement, ANY_DIALECT) in get_registry()

    @pytest.mark.parametrize(
        "dialect,expected",
        [
            ("postgresql", True),
            ("oracle", True),
            ("mysql", True),
            ("sqlite", False),
            ("mssql", False),
        ],
    )
    def test_table_remarks_support(self, dialect: str, expected: bool) -> None:
        statement = SetTableRemarksStatement(None, "t", "remark")

        assert get_registry().supports(statement, Database(dialect)) is expected

    def test_column_remarks_not_on_mysql(self) -> None:
        statement = SetColumnRemarksStatement(None, "t", "c", "remark")

        assert get_registry().supports(statement, Database("mysql")) is False
        assert get_registry().supports(statement, Database("postgresql")) is True
