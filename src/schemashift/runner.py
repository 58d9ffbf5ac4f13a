"""Migration runner: applies, previews and rolls back changelogs.

The runner ties the pieces together for one run against one database:

1. evaluate the changelog-level preconditions;
2. snapshot the execution history once and build the execution filter;
3. for each changeset in declaration order, reconcile its checksum and
   decide whether it runs;
4. evaluate changeset preconditions, compile every change to statements,
   render them through the dialect registry and execute them in one
   transaction per changeset;
5. record the changeset in the history store.

Example:
    >>> from sqlalchemy import create_engine
    >>> from schemashift import Database, DatabaseHistoryStore, MigrationRunner
    >>>
    >>> engine = create_engine("sqlite:///app.db")
    >>> runner = MigrationRunner(
    ...     changelog,
    ...     Database.from_engine(engine),
    ...     DatabaseHistoryStore(engine),
    ... )
    >>> result = runner.update()
    >>> print(result.changesets_applied)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import SQLAlchemyError

from schemashift.changelog.filters import (
    AlreadyRanChangeSetFilter,
    ShouldRunChangeSetFilter,
)
from schemashift.exceptions import MigrationFailedError, SchemaShiftError
from schemashift.preconditions.base import PreconditionOutcome
from schemashift.sqlgen.registry import get_registry

if TYPE_CHECKING:
    from schemashift.change.base import Change
    from schemashift.changelog.history import ExecutionHistoryStore
    from schemashift.changelog.model import ChangeLog, ChangeSet, RanChangeSet
    from schemashift.database.base import Database
    from schemashift.sqlgen.registry import SqlGeneratorRegistry

logger = logging.getLogger(__name__)


# =============================================================================
# Result
# =============================================================================


@dataclass
class MigrationResult:
    """Result of a runner operation.

    Attributes:
        start_time: When the operation started.
        end_time: When the operation finished.
        operation: ``update`` or ``rollback``.
        changesets_applied: Keys of changesets executed (or, in a dry run,
            that would be executed).
        changesets_skipped: Keys of changesets the run left alone.
        changesets_marked_ran: Keys recorded as ran without executing.
        changesets_rolled_back: Keys of changesets rolled back.
        statements: Rendered SQL, in execution order.
        dry_run: Whether this was a dry run.
    """

    start_time: datetime
    end_time: datetime | None = None
    operation: str = "update"
    changesets_applied: list[str] = field(default_factory=list)
    changesets_skipped: list[str] = field(default_factory=list)
    changesets_marked_ran: list[str] = field(default_factory=list)
    changesets_rolled_back: list[str] = field(default_factory=list)
    statements: list[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def duration_seconds(self) -> float:
        """Get operation duration in seconds."""
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()

    @property
    def success(self) -> bool:
        """A result only exists for operations that completed."""
        return self.end_time is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "operation": self.operation,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "duration_seconds": self.duration_seconds,
            "changesets_applied": self.changesets_applied,
            "changesets_skipped": self.changesets_skipped,
            "changesets_marked_ran": self.changesets_marked_ran,
            "changesets_rolled_back": self.changesets_rolled_back,
            "statements": self.statements,
            "dry_run": self.dry_run,
            "success": self.success,
        }


# =============================================================================
# Runner
# =============================================================================


class MigrationRunner:
    """Runs a changelog against a database.

    The runner is synchronous and meant for one run at a time against a
    given history store.
    """

    def __init__(
        self,
        changelog: "ChangeLog",
        database: "Database",
        history_store: "ExecutionHistoryStore",
        *,
        registry: "SqlGeneratorRegistry | None" = None,
        case_insensitive_paths: bool = False,
    ) -> None:
        """Initialize the runner.

        Args:
            changelog: Changelog to run.
            database: Target database.
            history_store: Record of previously applied changesets.
            registry: SQL generator registry. Defaults to the bundled one.
            case_insensitive_paths: Compare changelog paths ignoring case.
        """
        self._changelog = changelog
        self._database = database
        self._store = history_store
        self._registry = registry if registry is not None else get_registry()
        self._case_insensitive_paths = case_insensitive_paths

    @property
    def changelog(self) -> "ChangeLog":
        return self._changelog

    @property
    def database(self) -> "Database":
        return self._database

    @property
    def history_store(self) -> "ExecutionHistoryStore":
        return self._store

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    def status(self) -> list["ChangeSet"]:
        """Changesets an update would run. Nothing is written."""
        changeset_filter = self._build_filter()
        return [cs for cs in self._changelog if changeset_filter.decide(cs)]

    # -------------------------------------------------------------------------
    # Update
    # -------------------------------------------------------------------------

    def update(self, dry_run: bool = False) -> MigrationResult:
        """Apply every pending changeset.

        Args:
            dry_run: Render SQL without executing it or touching the store.

        Returns:
            MigrationResult describing the run.

        Raises:
            PreconditionError: If preconditions could not be evaluated
                under a HALT policy.
            PreconditionFailedError: If preconditions failed under a HALT
                policy.
            DefinitionError: If a change definition is incomplete.
            UnsupportedChangeError: If a change cannot be compiled.
            HistoryStoreError: If the history store cannot be read or written.
            MigrationFailedError: If executing a changeset fails.
        """
        result = MigrationResult(start_time=datetime.now(), dry_run=dry_run)
        mode = " (dry run)" if dry_run else ""
        logger.info(
            f"Updating {self._database.short_name} from {self._changelog.physical_path}{mode}"
        )

        if self._changelog.preconditions is not None:
            outcome = self._changelog.preconditions.run(self._database, self._changelog)
            if outcome is not PreconditionOutcome.PROCEED:
                logger.info("Changelog preconditions not met; nothing to update")
                result.changesets_skipped.extend(cs.key for cs in self._changelog)
                result.end_time = datetime.now()
                return result

        changeset_filter = self._build_filter()

        for changeset in self._changelog:
            if not dry_run:
                changeset_filter.reconcile_checksum(changeset)
            if not changeset_filter.decide(changeset):
                logger.debug(f"Skipping {changeset.key}: already ran")
                result.changesets_skipped.append(changeset.key)
                continue

            ran = changeset_filter.find_ran(changeset)
            recorded_path = ran.file_path if ran is not None else None

            if changeset.preconditions is not None:
                outcome = changeset.preconditions.run(self._database, self._changelog)
                if outcome is PreconditionOutcome.SKIP:
                    result.changesets_skipped.append(changeset.key)
                    continue
                if outcome is PreconditionOutcome.MARK_RAN:
                    if not dry_run:
                        self._store.mark_ran(changeset, recorded_path)
                    result.changesets_marked_ran.append(changeset.key)
                    continue

            sql = self._render(changeset.changes)
            result.statements.extend(sql)
            if not dry_run:
                self._execute(changeset, sql)
                self._store.mark_ran(changeset, recorded_path)
                for message in changeset.confirmation_messages():
                    logger.info(f"{changeset.key}: {message}")
            result.changesets_applied.append(changeset.key)

        result.end_time = datetime.now()
        logger.info(
            f"Update complete{mode}: {len(result.changesets_applied)} applied, "
            f"{len(result.changesets_skipped)} skipped "
            f"in {result.duration_seconds:.2f}s"
        )
        return result

    def update_sql(self) -> list[str]:
        """SQL an update would execute, without executing anything."""
        return self.update(dry_run=True).statements

    # -------------------------------------------------------------------------
    # Rollback
    # -------------------------------------------------------------------------

    def rollback(self, count: int = 1, dry_run: bool = False) -> MigrationResult:
        """Roll back the most recently applied changesets.

        The rollback SQL of every targeted changeset is compiled before
        anything executes, so a changeset without an inverse aborts the
        whole rollback untouched.

        Args:
            count: Number of changesets to roll back, newest first.
            dry_run: Render SQL without executing it or touching the store.

        Returns:
            MigrationResult describing the rollback.

        Raises:
            ValueError: If count is negative.
            RollbackImpossibleError: If a targeted change has no inverse.
            MigrationFailedError: If executing the rollback fails.
        """
        if count < 0:
            raise ValueError(f"count must be non-negative, got {count}")

        result = MigrationResult(
            start_time=datetime.now(), operation="rollback", dry_run=dry_run
        )
        targets = self._rollback_targets(count)
        plan = [
            (changeset, record, self._render_rollback(changeset))
            for changeset, record in targets
        ]

        for changeset, record, sql in plan:
            result.statements.extend(sql)
            if not dry_run:
                self._execute(changeset, sql)
                self._store.remove(changeset, record.file_path)
                logger.info(f"Rolled back {changeset.key}")
            result.changesets_rolled_back.append(changeset.key)

        result.end_time = datetime.now()
        return result

    def _rollback_targets(
        self, count: int
    ) -> list[tuple["ChangeSet", "RanChangeSet"]]:
        lookup = AlreadyRanChangeSetFilter(
            self._store.load_history(),
            case_insensitive_paths=self._case_insensitive_paths,
        )
        ran = []
        for changeset in self._changelog:
            record = lookup.find_ran(changeset)
            if record is not None:
                ran.append((changeset, record))
        ran.sort(key=lambda item: item[1].order_executed or 0, reverse=True)
        return ran[:count]

    def _render_rollback(self, changeset: "ChangeSet") -> list[str]:
        if changeset.rollback_changes:
            return self._render(changeset.rollback_changes)

        statements = []
        for change in reversed(changeset.changes):
            statements.extend(
                change.generate_rollback_statements(self._database, self._registry)
            )
        return self._registry.generate_all(statements, self._database)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _build_filter(self) -> ShouldRunChangeSetFilter:
        return ShouldRunChangeSetFilter.from_store(
            self._store,
            case_insensitive_paths=self._case_insensitive_paths,
        )

    def _render(self, changes: list["Change"]) -> list[str]:
        statements = []
        for change in changes:
            change.validate(self._database)
            statements.extend(change.generate_statements(self._database, self._registry))
        return self._registry.generate_all(statements, self._database)

    def _execute(self, changeset: "ChangeSet", sql: list[str]) -> None:
        engine = self._database.engine
        if engine is None:
            raise SchemaShiftError(
                f"Cannot execute {changeset.key}: database has no engine"
            )

        current: str | None = None
        try:
            with engine.begin() as conn:
                for current in sql:
                    logger.debug(f"Executing: {current}")
                    conn.exec_driver_sql(current)
        except SQLAlchemyError as e:
            logger.error(f"Changeset {changeset.key} failed: {e}")
            raise MigrationFailedError(changeset.key, str(e), current) from e
