"""Changelogs, execution history and changeset filtering.

Example:
    >>> from schemashift.changelog import (
    ...     ChangeLog,
    ...     InMemoryHistoryStore,
    ...     ShouldRunChangeSetFilter,
    ... )
    >>>
    >>> changelog = ChangeLog("db/changelog.py")
    >>> changelog.changeset("1", "alice", CreateTableChange(...))
    >>>
    >>> store = InMemoryHistoryStore()
    >>> changeset_filter = ShouldRunChangeSetFilter.from_store(
    ...     store, case_insensitive_paths=False
    ... )
    >>> pending = [cs for cs in changelog if changeset_filter.should_run(cs)]
"""

from schemashift.changelog.filters import (
    AlreadyRanChangeSetFilter,
    ChangeSetFilter,
    ShouldRunChangeSetFilter,
    default_case_insensitive_paths,
    paths_equal,
)
from schemashift.changelog.history import (
    DEFAULT_CHANGELOG_TABLE,
    DatabaseHistoryStore,
    ExecutionHistoryStore,
    InMemoryHistoryStore,
)
from schemashift.changelog.model import (
    ChangeLog,
    ChangeSet,
    RanChangeSet,
    compute_checksum,
    normalize_path,
)

__all__ = [
    # Model
    "ChangeLog",
    "ChangeSet",
    "RanChangeSet",
    "compute_checksum",
    "normalize_path",
    # History
    "ExecutionHistoryStore",
    "InMemoryHistoryStore",
    "DatabaseHistoryStore",
    "DEFAULT_CHANGELOG_TABLE",
    # Filters
    "ChangeSetFilter",
    "ShouldRunChangeSetFilter",
    "AlreadyRanChangeSetFilter",
    "default_case_insensitive_paths",
    "paths_equal",
]
