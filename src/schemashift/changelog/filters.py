"""Changeset filters deciding which changesets a run should touch.

``ShouldRunChangeSetFilter`` is the heart of re-entrant migrations. It holds
a snapshot of the execution history taken once per run and, for each
candidate changeset:

1. ``reconcile_checksum`` writes the current checksum back to the history
   store when the recorded one has drifted, whether or not the changeset
   will run again;
2. ``decide`` answers whether the changeset must run: unseen changesets
   always run, ``run_always`` changesets always run, ``run_on_change``
   changesets run when their checksum drifted, everything else is skipped.

``should_run`` performs both steps in order. Dry runs call ``decide`` alone.
"""

from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

from schemashift.changelog.model import ChangeSet, RanChangeSet

if TYPE_CHECKING:
    from schemashift.changelog.history import ExecutionHistoryStore

logger = logging.getLogger(__name__)


def default_case_insensitive_paths(platform: str | None = None) -> bool:
    """Platform default for path case sensitivity.

    Only meant for configuration defaults; filters always receive the
    decision explicitly.
    """
    platform = platform if platform is not None else sys.platform
    return platform.startswith(("win", "cygwin"))


def paths_equal(left: str, right: str, case_insensitive: bool) -> bool:
    if case_insensitive:
        return left.casefold() == right.casefold()
    return left == right


class ChangeSetFilter(ABC):
    """Accepts or rejects changesets for a run."""

    @abstractmethod
    def accepts(self, changeset: ChangeSet) -> bool:
        pass


class _HistoryLookup:
    """First-match lookup of changesets in a history snapshot."""

    def __init__(
        self,
        ran_changesets: Sequence[RanChangeSet],
        case_insensitive_paths: bool,
    ) -> None:
        self._ran_changesets: tuple[RanChangeSet, ...] = tuple(ran_changesets)
        self._case_insensitive_paths = case_insensitive_paths

    @property
    def ran_changesets(self) -> tuple[RanChangeSet, ...]:
        return self._ran_changesets

    @property
    def case_insensitive_paths(self) -> bool:
        return self._case_insensitive_paths

    def find_ran(self, changeset: ChangeSet) -> RanChangeSet | None:
        """Find the first history record with the changeset's identity.

        Duplicate records with one identity are not expected; if present,
        the first one encountered governs.
        """
        for ran in self._ran_changesets:
            if (
                ran.id == changeset.id
                and ran.author == changeset.author
                and paths_equal(
                    ran.file_path, changeset.file_path, self._case_insensitive_paths
                )
            ):
                return ran
        return None


class ShouldRunChangeSetFilter(_HistoryLookup, ChangeSetFilter):
    """Decides which changesets must run and keeps checksums current.

    Example:
        >>> changeset_filter = ShouldRunChangeSetFilter.from_store(
        ...     store, case_insensitive_paths=False
        ... )
        >>> for changeset in changelog:
        ...     if changeset_filter.should_run(changeset):
        ...         execute(changeset)
    """

    def __init__(
        self,
        ran_changesets: Sequence[RanChangeSet],
        history_store: "ExecutionHistoryStore",
        *,
        case_insensitive_paths: bool,
    ) -> None:
        """Initialize the filter.

        Args:
            ran_changesets: History snapshot, held for the whole run.
            history_store: Store receiving checksum reconciliation writes.
            case_insensitive_paths: Compare changelog paths ignoring case.
        """
        super().__init__(ran_changesets, case_insensitive_paths)
        self._store = history_store
        self._reconciled: dict[tuple[str, str, str], str] = {}

    @classmethod
    def from_store(
        cls,
        history_store: "ExecutionHistoryStore",
        *,
        case_insensitive_paths: bool,
    ) -> "ShouldRunChangeSetFilter":
        """Snapshot the store's history once and build a filter on it."""
        return cls(
            history_store.load_history(),
            history_store,
            case_insensitive_paths=case_insensitive_paths,
        )

    def reconcile_checksum(self, changeset: ChangeSet) -> bool:
        """Write the changeset's checksum back if the recorded one drifted.

        Returns:
            True if the store was updated.

        Raises:
            HistoryStoreError: If the store rejects the write. The run must
                abort rather than decide on data the store does not hold.
        """
        ran = self.find_ran(changeset)
        if ran is None:
            return False

        checksum = changeset.checksum
        if checksum == ran.checksum:
            return False

        identity = (ran.id, ran.author, ran.file_path)
        if self._reconciled.get(identity) == checksum:
            return False

        logger.debug(
            f"Checksum of {changeset.key} changed from {ran.checksum} to {checksum}"
        )
        self._store.update_checksum(ran.id, ran.author, ran.file_path, checksum)
        self._reconciled[identity] = checksum
        return True

    def decide(self, changeset: ChangeSet) -> bool:
        """Whether the changeset must run. Never writes to the store."""
        ran = self.find_ran(changeset)
        if ran is None:
            return True
        if changeset.run_always:
            return True
        if changeset.run_on_change and changeset.checksum != ran.checksum:
            return True
        return False

    def should_run(self, changeset: ChangeSet) -> bool:
        """Reconcile the recorded checksum, then decide."""
        self.reconcile_checksum(changeset)
        result = self.decide(changeset)
        logger.debug(f"{changeset.key}: {'run' if result else 'skip'}")
        return result

    def accepts(self, changeset: ChangeSet) -> bool:
        return self.should_run(changeset)


class AlreadyRanChangeSetFilter(_HistoryLookup, ChangeSetFilter):
    """Accepts changesets that have a history record."""

    def __init__(
        self,
        ran_changesets: Sequence[RanChangeSet],
        *,
        case_insensitive_paths: bool,
    ) -> None:
        super().__init__(ran_changesets, case_insensitive_paths)

    def accepts(self, changeset: ChangeSet) -> bool:
        return self.find_ran(changeset) is not None
