"""Unit tests for the create-table change compiler."""

from __future__ import annotations

import pytest

from schemashift.change import (
    ColumnConfig,
    ConstraintsConfig,
    CreateTableChange,
    DropTableChange,
)
from schemashift.database import Database
from schemashift.exceptions import DefinitionError, UnsupportedChangeError
from schemashift.statement import (
    AutoIncrementConstraint,
    CreateTableStatement,
    ForeignKeyConstraint,
    NotNullConstraint,
    SetColumnRemarksStatement,
    SetTableRemarksStatement,
    UniqueConstraint,
)


class TestCreateTableValidation:
    """Tests for CreateTableChange.validate."""

    def test_zero_columns_is_definition_error(self, postgres: Database) -> None:
        """Test that a table without columns is rejected."""
        change = CreateTableChange(table_name="empty")

        with pytest.raises(DefinitionError, match="No columns defined"):
            change.validate(postgres)

    def test_missing_table_name(self, postgres: Database) -> None:
        change = CreateTableChange(columns=[ColumnConfig(name="id", type="INT")])

        with pytest.raises(DefinitionError, match="tableName is required"):
            change.validate(postgres)

    def test_blank_table_name(self, postgres: Database) -> None:
        change = CreateTableChange(
            table_name="  ", columns=[ColumnConfig(name="id", type="INT")]
        )

        with pytest.raises(DefinitionError, match="tableName is required"):
            change.validate(postgres)

    def test_missing_column_type(self, postgres: Database) -> None:
        change = CreateTableChange(
            table_name="t", columns=[ColumnConfig(name="id", type="  ")]
        )

        with pytest.raises(DefinitionError, match="Column type is required for id"):
            change.validate(postgres)

    def test_missing_column_name(self, postgres: Database) -> None:
        change = CreateTableChange(table_name="t", columns=[ColumnConfig(type="INT")])

        with pytest.raises(DefinitionError, match="Column name is required"):
            change.validate(postgres)

    def test_error_carries_change(self, postgres: Database) -> None:
        change = CreateTableChange(table_name="empty")

        with pytest.raises(DefinitionError) as exc_info:
            change.validate(postgres)

        assert exc_info.value.change is change
        assert str(exc_info.value).startswith("createTable:")


class TestCreateTableCompilation:
    """Tests for CreateTableChange.generate_statements."""

    def test_primary_key_and_not_null(
        self, postgres: Database, registry, customers_table: CreateTableChange
    ) -> None:
        """Test statement shape for a key column and a required column."""
        statements = customers_table.generate_statements(postgres, registry)

        assert len(statements) == 1
        statement = statements[0]
        assert isinstance(statement, CreateTableStatement)
        assert statement.schema_name == "public"
        assert statement.table_name == "customers"
        assert statement.columns == ["id", "email"]
        assert statement.column_types == {"id": "INT", "email": "VARCHAR(255)"}
        assert statement.primary_key_columns == ["id"]
        assert statement.constraints == [NotNullConstraint("email")]

    def test_declared_schema_wins_over_default(self, postgres: Database, registry) -> None:
        change = CreateTableChange(
            table_name="t",
            schema_name="  sales ",
            columns=[ColumnConfig(name="id", type="INT")],
        )

        statement = change.generate_statements(postgres, registry)[0]

        assert statement.schema_name == "sales"

    def test_blank_schema_falls_back_to_default(self, postgres: Database, registry) -> None:
        change = CreateTableChange(
            table_name="t",
            schema_name="   ",
            columns=[ColumnConfig(name="id", type="INT")],
        )

        assert change.schema_name is None
        assert change.generate_statements(postgres, registry)[0].schema_name == "public"

    def test_named_primary_key(self, postgres: Database, registry) -> None:
        change = CreateTableChange(
            table_name="t",
            columns=[
                ColumnConfig(
                    name="id",
                    type="BIGINT",
                    constraints=ConstraintsConfig(primary_key=True, primary_key_name="pk_t"),
                )
            ],
        )

        statement = change.generate_statements(postgres, registry)[0]

        assert statement.primary_key_name == "pk_t"

    def test_nullable_true_adds_no_constraint(self, postgres: Database, registry) -> None:
        change = CreateTableChange(
            table_name="t",
            columns=[
                ColumnConfig(
                    name="note",
                    type="TEXT",
                    constraints=ConstraintsConfig(nullable=True),
                )
            ],
        )

        statement = change.generate_statements(postgres, registry)[0]

        assert statement.constraints == []
        assert statement.column_types == {"note": "TEXT"}

    def test_auto_increment_resolves_type(self, postgres: Database, registry) -> None:
        change = CreateTableChange(
            table_name="t",
            columns=[
                ColumnConfig(
                    name="id",
                    type="INT",
                    auto_increment=True,
                    constraints=ConstraintsConfig(primary_key=True),
                )
            ],
        )

        statement = change.generate_statements(postgres, registry)[0]

        assert statement.column_types["id"] == "SERIAL"
        assert AutoIncrementConstraint("id") in statement.constraints

    def test_default_values_are_rendered_per_dialect(
        self, postgres: Database, registry
    ) -> None:
        change = CreateTableChange(
            table_name="t",
            columns=[
                ColumnConfig(name="status", type="VARCHAR(20)", default_value="active"),
                ColumnConfig(name="enabled", type="BOOLEAN", default_value=True),
                ColumnConfig(
                    name="created_at",
                    type="DATETIME",
                    default_value_computed="CURRENT_TIMESTAMP",
                ),
            ],
        )

        statement = change.generate_statements(postgres, registry)[0]

        assert statement.default_values == {
            "status": "'active'",
            "enabled": "TRUE",
            "created_at": "CURRENT_TIMESTAMP",
        }

    def test_foreign_key(self, postgres: Database, registry) -> None:
        change = CreateTableChange(
            table_name="orders",
            columns=[
                ColumnConfig(
                    name="customer_id",
                    type="INT",
                    constraints=ConstraintsConfig(
                        references="customers(id)",
                        foreign_key_name="fk_orders_customer",
                        delete_cascade=True,
                        deferrable=True,
                    ),
                )
            ],
        )

        statement = change.generate_statements(postgres, registry)[0]

        assert statement.constraints == [
            ForeignKeyConstraint(
                foreign_key_name="fk_orders_customer",
                references="customers(id)",
                column_name="customer_id",
                delete_cascade=True,
                deferrable=True,
                initially_deferred=False,
            )
        ]

    def test_foreign_key_without_name_is_unsupported(
        self, postgres: Database, registry
    ) -> None:
        """Test that an unnamed foreign key cannot be compiled."""
        change = CreateTableChange(
            table_name="orders",
            columns=[
                ColumnConfig(
                    name="customer_id",
                    type="INT",
                    constraints=ConstraintsConfig(references="customers(id)"),
                )
            ],
        )

        with pytest.raises(UnsupportedChangeError, match="foreignKeyName"):
            change.generate_statements(postgres, registry)

    def test_unique_constraint(self, postgres: Database, registry) -> None:
        change = CreateTableChange(
            table_name="t",
            columns=[
                ColumnConfig(
                    name="email",
                    type="VARCHAR(255)",
                    constraints=ConstraintsConfig(
                        unique=True, unique_constraint_name="uq_email"
                    ),
                )
            ],
        )

        statement = change.generate_statements(postgres, registry)[0]

        assert statement.constraints == [UniqueConstraint("uq_email", ("email",))]

    def test_tablespace_is_trimmed(self, postgres: Database, registry) -> None:
        change = CreateTableChange(
            table_name="t",
            tablespace=" fast ",
            columns=[ColumnConfig(name="id", type="INT")],
        )

        assert change.generate_statements(postgres, registry)[0].tablespace == "fast"


class TestCreateTableRemarks:
    """Tests for table and column remarks."""

    def _change(self) -> CreateTableChange:
        return CreateTableChange(
            table_name="customers",
            remarks="Registered customers",
            columns=[
                ColumnConfig(name="id", type="INT", remarks="Surrogate key"),
            ],
        )

    def test_remarks_emitted_where_supported(self, postgres: Database, registry) -> None:
        statements = self._change().generate_statements(postgres, registry)

        assert len(statements) == 3
        assert statements[1] == SetTableRemarksStatement(
            "public", "customers", "Registered customers"
        )
        assert statements[2] == SetColumnRemarksStatement(
            "public", "customers", "id", "Surrogate key"
        )

    def test_remarks_omitted_where_unsupported(self, sqlite: Database, registry) -> None:
        """Test that remarks are silently dropped when no generator exists."""
        statements = self._change().generate_statements(sqlite, registry)

        assert len(statements) == 1
        assert isinstance(statements[0], CreateTableStatement)

    def test_remarks_follow_registry(self, sqlite: Database, registry) -> None:
        """Test that registering a generator enables remarks for a dialect."""
        registry.add(SetTableRemarksStatement, lambda s, db: ["-- remark"], "sqlite")

        statements = self._change().generate_statements(sqlite, registry)

        assert [type(s) for s in statements] == [
            CreateTableStatement,
            SetTableRemarksStatement,
        ]

    def test_blank_remarks_ignored(self, postgres: Database, registry) -> None:
        change = CreateTableChange(
            table_name="t", remarks="   ", columns=[ColumnConfig(name="id", type="INT")]
        )

        assert len(change.generate_statements(postgres, registry)) == 1


class TestCreateTableInverse:
    """Tests for CreateTableChange rollback."""

    def test_inverse_is_drop_table(self) -> None:
        """Test that the inverse is exactly one drop of the same table."""
        change = CreateTableChange(
            table_name="customers",
            schema_name="sales",
            columns=[ColumnConfig(name="id", type="INT")],
        )

        inverses = change.inverses()

        assert inverses == [DropTableChange(table_name="customers", schema_name="sales")]
        assert change.supports_rollback() is True

    def test_rollback_statements(self, postgres: Database, registry) -> None:
        change = CreateTableChange(
            table_name="customers", columns=[ColumnConfig(name="id", type="INT")]
        )

        sql = registry.generate_all(
            change.generate_rollback_statements(postgres, registry), postgres
        )

        assert sql == ["DROP TABLE public.customers"]

    def test_confirmation_message(self, customers_table: CreateTableChange) -> None:
        assert customers_table.confirmation_message() == "Table customers created"
