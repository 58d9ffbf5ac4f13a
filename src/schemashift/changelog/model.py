"""Changelog data model: changesets and their execution records.

A changeset is identified by ``(id, author, file_path)``. Its checksum is
derived only from its declared changes, so editing a changeset's content
changes the checksum while editing comments does not.
"""

from __future__ import annotations

import hashlib
import json
import posixpath
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from schemashift.change.base import Change
    from schemashift.preconditions.base import PreconditionContainer


def normalize_path(path: str) -> str:
    """Normalize a changelog path for identity comparison.

    Backslashes become forward slashes and redundant segments are collapsed,
    so ``db\\changelog\\.\\main.xml`` and ``db/changelog/main.xml`` match.
    Case is preserved; case folding is a comparison policy, not part of
    the identity.
    """
    if not path:
        return path
    return posixpath.normpath(path.replace("\\", "/"))


def compute_checksum(changes: list["Change"]) -> str:
    """MD5 of the canonical JSON form of a list of changes."""
    payload = json.dumps(
        [change.to_dict() for change in changes],
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )
    return hashlib.md5(payload.encode("utf-8")).hexdigest()


@dataclass
class ChangeSet:
    """One uniquely identified unit of schema change intent.

    Attributes:
        id: Identifier, unique per author and file.
        author: Author of the changeset.
        file_path: Path of the changelog that declares it (normalized).
        changes: Ordered changes.
        run_always: Execute on every run, even if already ran.
        run_on_change: Re-execute when the checksum drifts.
        comments: Free-text comments (not part of the checksum).
        preconditions: Optional guard evaluated before execution.
        rollback_changes: Explicit rollback; replaces computed inverses.

    Example:
        >>> changeset = ChangeSet(
        ...     id="1",
        ...     author="alice",
        ...     file_path="db/changelog.py",
        ...     changes=[CreateTableChange(table_name="t", columns=[...])],
        ... )
        >>> changeset.checksum
        '4f1c...'
    """

    id: str
    author: str
    file_path: str
    changes: list["Change"] = field(default_factory=list)
    run_always: bool = False
    run_on_change: bool = False
    comments: str | None = None
    preconditions: "PreconditionContainer | None" = None
    rollback_changes: list["Change"] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.file_path = normalize_path(self.file_path)

    @property
    def key(self) -> str:
        """Display form of the identity: ``path::id::author``."""
        return f"{self.file_path}::{self.id}::{self.author}"

    @property
    def checksum(self) -> str:
        """Content fingerprint of the declared changes."""
        return compute_checksum(self.changes)

    @property
    def description(self) -> str:
        """Short summary of the change types, e.g. ``createTable, addColumn``."""
        return ", ".join(change.change_name for change in self.changes)

    def confirmation_messages(self) -> list[str]:
        return [change.confirmation_message() for change in self.changes]

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class RanChangeSet:
    """Persisted record of a changeset's last successful execution."""

    id: str
    author: str
    file_path: str
    checksum: str | None
    date_executed: datetime | None = None
    order_executed: int | None = None
    description: str | None = None

    @property
    def key(self) -> str:
        return f"{self.file_path}::{self.id}::{self.author}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "author": self.author,
            "file_path": self.file_path,
            "checksum": self.checksum,
            "date_executed": self.date_executed.isoformat() if self.date_executed else None,
            "order_executed": self.order_executed,
            "description": self.description,
        }


@dataclass
class ChangeLog:
    """An ordered collection of changesets from one changelog source."""

    physical_path: str
    changesets: list[ChangeSet] = field(default_factory=list)
    preconditions: "PreconditionContainer | None" = None

    def __post_init__(self) -> None:
        self.physical_path = normalize_path(self.physical_path)

    def add(self, changeset: ChangeSet) -> "ChangeLog":
        self.changesets.append(changeset)
        return self

    def changeset(
        self,
        id: str,
        author: str,
        *changes: "Change",
        **options: Any,
    ) -> ChangeSet:
        """Declare a changeset in this changelog and return it.

        Example:
            >>> changelog = ChangeLog("db/changelog.py")
            >>> changelog.changeset("1", "alice", CreateTableChange(...))
            >>> changelog.changeset("2", "bob", AddColumnChange(...), run_on_change=True)
        """
        changeset = ChangeSet(
            id=id,
            author=author,
            file_path=self.physical_path,
            changes=list(changes),
            **options,
        )
        self.add(changeset)
        return changeset

    def __iter__(self):
        return iter(self.changesets)

    def __len__(self) -> int:
        return len(self.changesets)
