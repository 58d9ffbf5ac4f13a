"""Unit tests for the command-line interface."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
from sqlalchemy import create_engine, inspect
from typer.testing import CliRunner

from schemashift.changelog import ChangeLog
from schemashift.cli import app, load_changelog
from schemashift.exceptions import ConfigError

CHANGELOG_MODULE = '''
from schemashift import ChangeLog, ColumnConfig, ConstraintsConfig, CreateTableChange

changelog = ChangeLog("db/changelog.py")
changelog.changeset(
    "1",
    "alice",
    CreateTableChange(
        table_name="customers",
        columns=[
            ColumnConfig(
                name="id",
                type="INT",
                constraints=ConstraintsConfig(primary_key=True),
            ),
        ],
    ),
)

not_a_changelog = 42


def build():
    return changelog
'''

REFERENCE = "cli_test_changelog:changelog"


@pytest.fixture(autouse=True)
def changelog_module(tmp_path: Path, monkeypatch) -> None:
    """Make a changelog module importable and clear ambient configuration."""
    for key in list(os.environ):
        if key.startswith("SCHEMASHIFT_"):
            monkeypatch.delenv(key)
    (tmp_path / "cli_test_changelog.py").write_text(CHANGELOG_MODULE)
    monkeypatch.syspath_prepend(str(tmp_path))


@pytest.fixture
def cli() -> CliRunner:
    return CliRunner()


class TestLoadChangelog:
    """Tests for resolving changelog references."""

    def test_attribute(self) -> None:
        changelog = load_changelog(REFERENCE)

        assert isinstance(changelog, ChangeLog)
        assert len(changelog) == 1

    def test_callable(self) -> None:
        assert isinstance(load_changelog("cli_test_changelog:build"), ChangeLog)

    @pytest.mark.parametrize(
        "reference,message",
        [
            (None, "No changelog given"),
            ("cli_test_changelog", "module:attribute"),
            ("no_such_module_xyz:changelog", "Cannot import"),
            ("cli_test_changelog:missing", "has no attribute"),
            ("cli_test_changelog:not_a_changelog", "is not a ChangeLog"),
        ],
    )
    def test_invalid_references(self, reference, message: str) -> None:
        with pytest.raises(ConfigError, match=message):
            load_changelog(reference)


class TestUpdateCommands:
    """Tests for update, update-sql, status and history."""

    def test_update_then_status(self, cli: CliRunner, sqlite_url: str) -> None:
        result = cli.invoke(app, ["update", "--url", sqlite_url, "-c", REFERENCE])

        assert result.exit_code == 0, result.output
        assert "Applied 1 changeset(s)" in result.output
        assert "db/changelog.py::1::alice" in result.output
        assert inspect(create_engine(sqlite_url)).has_table("customers")

        status = cli.invoke(app, ["status", "--url", sqlite_url, "-c", REFERENCE])

        assert status.exit_code == 0, status.output
        assert "0 changeset(s) pending" in status.output

    def test_status_lists_pending(self, cli: CliRunner, sqlite_url: str) -> None:
        result = cli.invoke(app, ["status", "--url", sqlite_url, "-c", REFERENCE])

        assert result.exit_code == 0, result.output
        assert "1 changeset(s) pending" in result.output

    def test_update_sql_prints_without_executing(
        self, cli: CliRunner, sqlite_url: str
    ) -> None:
        result = cli.invoke(app, ["update-sql", "--url", sqlite_url, "-c", REFERENCE])

        assert result.exit_code == 0, result.output
        assert "CREATE TABLE" in result.output
        assert "customers" in result.output
        assert not inspect(create_engine(sqlite_url)).has_table("customers")

    def test_update_dry_run(self, cli: CliRunner, sqlite_url: str) -> None:
        result = cli.invoke(
            app, ["update", "--dry-run", "--url", sqlite_url, "-c", REFERENCE]
        )

        assert result.exit_code == 0, result.output
        assert "CREATE TABLE" in result.output
        assert not inspect(create_engine(sqlite_url)).has_table("customers")

    def test_history(self, cli: CliRunner, sqlite_url: str) -> None:
        cli.invoke(app, ["update", "--url", sqlite_url, "-c", REFERENCE])

        result = cli.invoke(app, ["history", "--url", sqlite_url])
        as_json = cli.invoke(app, ["history", "--url", sqlite_url, "--json"])

        assert result.exit_code == 0, result.output
        assert "1 changeset(s) ran" in result.output
        records = json.loads(as_json.stdout)
        assert records[0]["id"] == "1"
        assert records[0]["author"] == "alice"

    def test_config_file(self, cli: CliRunner, sqlite_url: str, tmp_path: Path) -> None:
        config = tmp_path / "schemashift.yaml"
        config.write_text(f"url: {sqlite_url}\nchangelog: {REFERENCE}\n")

        result = cli.invoke(app, ["update", "--config", str(config)])

        assert result.exit_code == 0, result.output
        assert "Applied 1 changeset(s)" in result.output

    def test_path_case_flag(self, cli: CliRunner, sqlite_url: str) -> None:
        result = cli.invoke(
            app,
            [
                "status",
                "--url",
                sqlite_url,
                "-c",
                REFERENCE,
                "--case-insensitive-paths",
            ],
        )

        assert result.exit_code == 0, result.output


class TestRollbackCommand:
    """Tests for the rollback command."""

    def test_rollback(self, cli: CliRunner, sqlite_url: str) -> None:
        cli.invoke(app, ["update", "--url", sqlite_url, "-c", REFERENCE])

        result = cli.invoke(app, ["rollback", "--url", sqlite_url, "-c", REFERENCE])

        assert result.exit_code == 0, result.output
        assert "Rolled back 1 changeset(s)" in result.output
        assert not inspect(create_engine(sqlite_url)).has_table("customers")

    def test_rollback_dry_run(self, cli: CliRunner, sqlite_url: str) -> None:
        cli.invoke(app, ["update", "--url", sqlite_url, "-c", REFERENCE])

        result = cli.invoke(
            app,
            ["rollback", "--dry-run", "--count", "1", "--url", sqlite_url, "-c", REFERENCE],
        )

        assert result.exit_code == 0, result.output
        assert "DROP TABLE" in result.output
        assert inspect(create_engine(sqlite_url)).has_table("customers")


class TestErrors:
    """Tests for error reporting."""

    def test_missing_url(self, cli: CliRunner) -> None:
        result = cli.invoke(app, ["update", "-c", REFERENCE])

        assert result.exit_code == 1
        assert "No database URL" in result.output

    def test_bad_changelog_reference(self, cli: CliRunner, sqlite_url: str) -> None:
        result = cli.invoke(app, ["update", "--url", sqlite_url, "-c", "nope"])

        assert result.exit_code == 1
        assert "module:attribute" in result.output

    def test_invalid_url(self, cli: CliRunner) -> None:
        result = cli.invoke(app, ["status", "--url", "notadialect://x", "-c", REFERENCE])

        assert result.exit_code == 1
        assert "Error:" in result.output
