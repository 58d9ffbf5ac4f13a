"""Command-line interface for schemashift."""

import importlib
import json
import logging
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError

from schemashift.changelog.history import DatabaseHistoryStore
from schemashift.changelog.model import ChangeLog
from schemashift.config import MigrationConfig, load_config
from schemashift.database.base import Database
from schemashift.exceptions import ConfigError, SchemaShiftError
from schemashift.runner import MigrationRunner

app = typer.Typer(
    name="schemashift",
    help="Declarative database schema migrations",
    add_completion=False,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Shared options
# =============================================================================

UrlOption = Annotated[
    Optional[str],
    typer.Option("--url", help="SQLAlchemy database URL"),
]
ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", help="YAML or JSON configuration file"),
]
ChangelogOption = Annotated[
    Optional[str],
    typer.Option("--changelog", "-c", help="Changelog reference as module:attribute"),
]
SchemaOption = Annotated[
    Optional[str],
    typer.Option("--schema", help="Default schema for changes that name none"),
]
PathCaseOption = Annotated[
    Optional[bool],
    typer.Option(
        "--case-insensitive-paths/--case-sensitive-paths",
        help="Compare changelog paths ignoring case (default: platform)",
    ),
]
LogLevelOption = Annotated[
    Optional[str],
    typer.Option("--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)"),
]


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for command-line use."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _build_config(
    config_file: Optional[Path],
    url: Optional[str] = None,
    changelog: Optional[str] = None,
    schema: Optional[str] = None,
    case_insensitive_paths: Optional[bool] = None,
    log_level: Optional[str] = None,
) -> MigrationConfig:
    """Load file and environment configuration, then apply CLI overrides."""
    config = load_config(config_file)
    if url is not None:
        config.url = url
    if changelog is not None:
        config.changelog = changelog
    if schema is not None:
        config.default_schema = schema
    if case_insensitive_paths is not None:
        config.case_insensitive_paths = case_insensitive_paths
    if log_level is not None:
        config.log_level = log_level.upper()

    if not config.url:
        raise ConfigError("No database URL given; use --url or the config file")
    configure_logging(config.log_level)
    return config


def load_changelog(reference: Optional[str]) -> ChangeLog:
    """Import a changelog from a ``module:attribute`` reference.

    The attribute may be a ``ChangeLog`` or a callable returning one.

    Raises:
        ConfigError: If the reference cannot be resolved to a changelog.
    """
    if not reference:
        raise ConfigError("No changelog given; use --changelog or the config file")

    module_name, _, attribute = reference.partition(":")
    if not module_name or not attribute:
        raise ConfigError(f"Changelog reference must be module:attribute, got {reference!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Cannot import changelog module {module_name}: {e}") from e

    try:
        changelog = getattr(module, attribute)
    except AttributeError as e:
        raise ConfigError(f"Module {module_name} has no attribute {attribute}") from e

    if callable(changelog) and not isinstance(changelog, ChangeLog):
        changelog = changelog()
    if not isinstance(changelog, ChangeLog):
        raise ConfigError(f"{reference} is not a ChangeLog")
    logger.debug(f"Loaded changelog {reference} with {len(changelog)} changeset(s)")
    return changelog


def _build_runner(config: MigrationConfig) -> MigrationRunner:
    engine = create_engine(config.url, echo=config.echo)
    database = Database.from_engine(engine, default_schema_name=config.default_schema)
    store = DatabaseHistoryStore(
        engine,
        table_name=config.changelog_table,
        schema=config.default_schema,
    )
    return MigrationRunner(
        load_changelog(config.changelog),
        database,
        store,
        case_insensitive_paths=bool(config.case_insensitive_paths),
    )


def _fail(error: Exception) -> NoReturn:
    typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(1)


def _echo_sql(statements: list[str]) -> None:
    for statement in statements:
        typer.echo(f"{statement};")


# =============================================================================
# Commands
# =============================================================================


@app.command(name="update")
def update_cmd(
    url: UrlOption = None,
    config: ConfigOption = None,
    changelog: ChangelogOption = None,
    schema: SchemaOption = None,
    case_insensitive_paths: PathCaseOption = None,
    log_level: LogLevelOption = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Print SQL instead of executing it"),
    ] = False,
) -> None:
    """Apply every pending changeset."""
    try:
        settings = _build_config(
            config, url, changelog, schema, case_insensitive_paths, log_level
        )
        result = _build_runner(settings).update(dry_run=dry_run or settings.dry_run)
    except (SchemaShiftError, SQLAlchemyError) as e:
        _fail(e)

    if result.dry_run:
        _echo_sql(result.statements)
        return

    typer.echo(f"Applied {len(result.changesets_applied)} changeset(s)")
    for key in result.changesets_applied:
        typer.echo(f"  {key}")
    if result.changesets_skipped:
        typer.echo(f"Skipped {len(result.changesets_skipped)} changeset(s)")


@app.command(name="update-sql")
def update_sql_cmd(
    url: UrlOption = None,
    config: ConfigOption = None,
    changelog: ChangelogOption = None,
    schema: SchemaOption = None,
    case_insensitive_paths: PathCaseOption = None,
    log_level: LogLevelOption = None,
) -> None:
    """Print the SQL an update would execute."""
    try:
        settings = _build_config(
            config, url, changelog, schema, case_insensitive_paths, log_level
        )
        statements = _build_runner(settings).update_sql()
    except (SchemaShiftError, SQLAlchemyError) as e:
        _fail(e)

    _echo_sql(statements)


@app.command(name="rollback")
def rollback_cmd(
    url: UrlOption = None,
    config: ConfigOption = None,
    changelog: ChangelogOption = None,
    schema: SchemaOption = None,
    case_insensitive_paths: PathCaseOption = None,
    log_level: LogLevelOption = None,
    count: Annotated[
        int,
        typer.Option("--count", "-n", min=0, help="Number of changesets to roll back"),
    ] = 1,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Print SQL instead of executing it"),
    ] = False,
) -> None:
    """Roll back the most recently applied changesets."""
    try:
        settings = _build_config(
            config, url, changelog, schema, case_insensitive_paths, log_level
        )
        result = _build_runner(settings).rollback(
            count=count, dry_run=dry_run or settings.dry_run
        )
    except (SchemaShiftError, SQLAlchemyError) as e:
        _fail(e)

    if result.dry_run:
        _echo_sql(result.statements)
        return

    typer.echo(f"Rolled back {len(result.changesets_rolled_back)} changeset(s)")
    for key in result.changesets_rolled_back:
        typer.echo(f"  {key}")


@app.command(name="status")
def status_cmd(
    url: UrlOption = None,
    config: ConfigOption = None,
    changelog: ChangelogOption = None,
    schema: SchemaOption = None,
    case_insensitive_paths: PathCaseOption = None,
    log_level: LogLevelOption = None,
) -> None:
    """List changesets an update would run."""
    try:
        settings = _build_config(
            config, url, changelog, schema, case_insensitive_paths, log_level
        )
        pending = _build_runner(settings).status()
    except (SchemaShiftError, SQLAlchemyError) as e:
        _fail(e)

    typer.echo(f"{len(pending)} changeset(s) pending")
    for changeset in pending:
        typer.echo(f"  {changeset.key}")


@app.command(name="history")
def history_cmd(
    url: UrlOption = None,
    config: ConfigOption = None,
    schema: SchemaOption = None,
    log_level: LogLevelOption = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print records as JSON"),
    ] = False,
) -> None:
    """List changesets recorded in the execution history."""
    try:
        settings = _build_config(config, url, schema=schema, log_level=log_level)
        engine = create_engine(settings.url, echo=settings.echo)
        store = DatabaseHistoryStore(
            engine,
            table_name=settings.changelog_table,
            schema=settings.default_schema,
        )
        records = store.load_history()
    except (SchemaShiftError, SQLAlchemyError) as e:
        _fail(e)

    if as_json:
        typer.echo(json.dumps([record.to_dict() for record in records], indent=2))
        return

    typer.echo(f"{len(records)} changeset(s) ran")
    for record in records:
        executed = record.date_executed.isoformat() if record.date_executed else "-"
        order = record.order_executed if record.order_executed is not None else "-"
        typer.echo(f"  {order:>4}  {executed}  {record.key}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
