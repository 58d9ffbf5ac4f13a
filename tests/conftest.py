"""Shared fixtures for the schemashift test suite."""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import create_engine

from schemashift.change import ColumnConfig, ConstraintsConfig, CreateTableChange
from schemashift.changelog import ChangeLog
from schemashift.database import Database
from schemashift.sqlgen import get_registry


@pytest.fixture
def postgres() -> Database:
    """Unbound PostgreSQL target with a default schema."""
    return Database("postgresql", default_schema_name="public")


@pytest.fixture
def sqlite() -> Database:
    """Unbound SQLite target."""
    return Database("sqlite")


@pytest.fixture
def registry():
    """Independent copy of the bundled generator registry."""
    return get_registry().copy()


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'app.db'}"


@pytest.fixture
def sqlite_engine(sqlite_url: str):
    engine = create_engine(sqlite_url)
    yield engine
    engine.dispose()


@pytest.fixture
def customers_table() -> CreateTableChange:
    """A small create-table change used across tests."""
    return CreateTableChange(
        table_name="customers",
        columns=[
            ColumnConfig(
                name="id",
                type="INT",
                constraints=ConstraintsConfig(primary_key=True),
            ),
            ColumnConfig(
                name="email",
                type="VARCHAR(255)",
                constraints=ConstraintsConfig(nullable=False),
            ),
        ],
    )


@pytest.fixture
def changelog(customers_table: CreateTableChange) -> ChangeLog:
    changelog = ChangeLog("db/changelog.py")
    changelog.changeset("1", "alice", customers_table)
    return changelog
