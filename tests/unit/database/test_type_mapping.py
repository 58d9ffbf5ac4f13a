"""Unit tests for per-dialect type mapping."""

from __future__ import annotations

import pytest

from schemashift.database import TypeMapper, get_type_mapper, split_type


class TestSplitType:
    """Tests for split_type."""

    @pytest.mark.parametrize(
        "declared,expected",
        [
            ("VARCHAR(255)", ("VARCHAR", "(255)")),
            ("varchar (255)", ("VARCHAR", "(255)")),
            ("DECIMAL(10, 2)", ("DECIMAL", "(10,2)")),
            ("INT", ("INT", "")),
            ("double precision", ("DOUBLE PRECISION", "")),
        ],
    )
    def test_split(self, declared: str, expected: tuple[str, str]) -> None:
        assert split_type(declared) == expected


class TestTypeMapper:
    """Tests for TypeMapper and dialect subclasses."""

    def test_generic_mapping(self) -> None:
        mapper = TypeMapper()

        assert mapper.get_column_type("INTEGER") == "INT"
        assert mapper.get_column_type("DATETIME") == "TIMESTAMP"
        assert mapper.get_column_type("varchar(30)") == "VARCHAR(30)"

    def test_unknown_type_passes_through(self) -> None:
        assert TypeMapper().get_column_type("  GEOMETRY(Point, 4326) ") == "GEOMETRY(Point, 4326)"

    def test_mapped_parameters_replace_declared(self) -> None:
        assert get_type_mapper("mysql").get_column_type("BOOLEAN(5)") == "TINYINT(1)"

    @pytest.mark.parametrize(
        "dialect,declared,auto_increment,expected",
        [
            ("postgresql", "INT", True, "SERIAL"),
            ("postgresql", "BIGINT", True, "BIGSERIAL"),
            ("postgresql", "BIGINT", False, "BIGINT"),
            ("postgresql", "DATETIME", False, "TIMESTAMP WITHOUT TIME ZONE"),
            ("postgresql", "BLOB", False, "BYTEA"),
            ("mysql", "BOOLEAN", False, "TINYINT(1)"),
            ("mysql", "CLOB", False, "LONGTEXT"),
            ("mariadb", "DATETIME", False, "DATETIME"),
            ("sqlite", "BIGINT", True, "INTEGER"),
            ("sqlite", "DATETIME", False, "TEXT"),
            ("oracle", "VARCHAR(40)", False, "VARCHAR2(40)"),
            ("oracle", "BOOLEAN", False, "NUMBER(1)"),
            ("mssql", "BOOLEAN", False, "BIT"),
            ("mssql", "UUID", False, "UNIQUEIDENTIFIER"),
        ],
    )
    def test_dialect_mapping(
        self, dialect: str, declared: str, auto_increment: bool, expected: str
    ) -> None:
        mapper = get_type_mapper(dialect)

        assert mapper.get_column_type(declared, auto_increment) == expected

    def test_unknown_dialect_uses_generic(self) -> None:
        assert type(get_type_mapper("informix")) is TypeMapper
