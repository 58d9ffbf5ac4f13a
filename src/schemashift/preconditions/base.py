"""Precondition model and failure aggregation.

Preconditions guard a changelog or changeset. Sibling preconditions are
always evaluated independently: a failure in one never stops its siblings
from running. Everything collected in one scope is raised once, as a single
batched error, so every broken precondition is reported in one pass.

Two outcomes are distinguished:

* a *failure* means the check ran and its condition was false
  (``PreconditionCheckFailed`` inside ``check``);
* an *error* means the check itself could not be evaluated (any other
  exception).

Example:
    >>> container = PreconditionContainer(
    ...     [DbmsPrecondition("postgresql"), TableExistsPrecondition("customers")],
    ...     on_fail=OnFailure.HALT,
    ... )
    >>> try:
    ...     container.check(database, changelog)
    ... except PreconditionError as e:
    ...     for entry in e.error_preconditions:
    ...         print(entry.precondition, entry.cause)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Iterable, Sequence

from schemashift.exceptions import SchemaShiftError

if TYPE_CHECKING:
    from schemashift.changelog.model import ChangeLog
    from schemashift.database.base import Database

logger = logging.getLogger(__name__)


# =============================================================================
# Records
# =============================================================================


def _changelog_path(changelog: "ChangeLog | None") -> str:
    return changelog.physical_path if changelog is not None else "<unknown>"


@dataclass(frozen=True, eq=False)
class ErrorPrecondition:
    """A precondition that could not be evaluated.

    Attributes:
        cause: The underlying exception.
        changelog: Changelog whose preconditions were being evaluated.
        precondition: The precondition that raised.
    """

    cause: BaseException
    changelog: "ChangeLog | None"
    precondition: "Precondition"

    def __str__(self) -> str:
        return f"{_changelog_path(self.changelog)} : {self.precondition}: {self.cause}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "changelog": _changelog_path(self.changelog),
            "precondition": str(self.precondition),
            "cause": f"{type(self.cause).__name__}: {self.cause}",
        }


@dataclass(frozen=True, eq=False)
class FailedPrecondition:
    """A precondition whose condition evaluated to false."""

    message: str
    changelog: "ChangeLog | None"
    precondition: "Precondition"

    def __str__(self) -> str:
        return f"{_changelog_path(self.changelog)} : {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "changelog": _changelog_path(self.changelog),
            "precondition": str(self.precondition),
            "message": self.message,
        }


# =============================================================================
# Exceptions
# =============================================================================


class PreconditionCheckFailed(SchemaShiftError):
    """Raised inside ``Precondition.check`` when the condition is false."""

    pass


class PreconditionError(SchemaShiftError):
    """Batched error carrying every precondition that could not be evaluated.

    Constructible from a list of records, a single record, or via
    ``from_cause`` from a single ``(cause, changelog, precondition)`` triple.
    Always carries at least one error entry. Failures collected in the same
    scope travel with it in ``failed_preconditions``.
    """

    def __init__(
        self,
        error_preconditions: ErrorPrecondition | Sequence[ErrorPrecondition],
        failed_preconditions: Sequence[FailedPrecondition] = (),
    ) -> None:
        if isinstance(error_preconditions, ErrorPrecondition):
            error_preconditions = [error_preconditions]
        entries = list(error_preconditions)
        if not entries:
            raise ValueError("PreconditionError requires at least one ErrorPrecondition")
        self.error_preconditions: list[ErrorPrecondition] = entries
        self.failed_preconditions: list[FailedPrecondition] = list(failed_preconditions)

        lines = [f"{len(entries)} precondition(s) raised errors:"]
        lines.extend(f"  {entry}" for entry in entries)
        if self.failed_preconditions:
            lines.append(f"{len(self.failed_preconditions)} precondition(s) failed:")
            lines.extend(f"  {entry}" for entry in self.failed_preconditions)
        super().__init__("\n".join(lines))

    @classmethod
    def from_cause(
        cls,
        cause: BaseException,
        changelog: "ChangeLog | None",
        precondition: "Precondition",
    ) -> "PreconditionError":
        return cls(ErrorPrecondition(cause, changelog, precondition))

    def to_dict(self) -> dict[str, Any]:
        return {
            "errors": [entry.to_dict() for entry in self.error_preconditions],
            "failures": [entry.to_dict() for entry in self.failed_preconditions],
        }


class PreconditionFailedError(SchemaShiftError):
    """Batched error carrying every precondition whose condition was false."""

    def __init__(
        self,
        failed_preconditions: FailedPrecondition | Sequence[FailedPrecondition],
    ) -> None:
        if isinstance(failed_preconditions, FailedPrecondition):
            failed_preconditions = [failed_preconditions]
        entries = list(failed_preconditions)
        if not entries:
            raise ValueError(
                "PreconditionFailedError requires at least one FailedPrecondition"
            )
        self.failed_preconditions: list[FailedPrecondition] = entries

        lines = [f"{len(entries)} precondition(s) failed:"]
        lines.extend(f"  {entry}" for entry in entries)
        super().__init__("\n".join(lines))

    @classmethod
    def from_message(
        cls,
        message: str,
        changelog: "ChangeLog | None",
        precondition: "Precondition",
    ) -> "PreconditionFailedError":
        return cls(FailedPrecondition(message, changelog, precondition))

    def to_dict(self) -> dict[str, Any]:
        return {"failures": [entry.to_dict() for entry in self.failed_preconditions]}


# =============================================================================
# Precondition Base
# =============================================================================


class Precondition(ABC):
    """A guard evaluated before a changelog or changeset runs."""

    name: ClassVar[str] = "precondition"

    @abstractmethod
    def check(self, database: "Database", changelog: "ChangeLog | None") -> None:
        """Evaluate the precondition.

        Raises:
            PreconditionCheckFailed: If the condition is false.
        """
        pass

    def __str__(self) -> str:
        return self.name


def evaluate_all(
    preconditions: Iterable[Precondition],
    database: "Database",
    changelog: "ChangeLog | None",
) -> tuple[list[ErrorPrecondition], list[FailedPrecondition]]:
    """Evaluate every precondition without short-circuiting.

    Nested batches are flattened so each entry keeps its own originating
    precondition.

    Returns:
        Errors and failures, each in evaluation order.
    """
    errors: list[ErrorPrecondition] = []
    failures: list[FailedPrecondition] = []

    for precondition in preconditions:
        try:
            precondition.check(database, changelog)
        except PreconditionCheckFailed as e:
            failures.append(FailedPrecondition(str(e), changelog, precondition))
        except PreconditionFailedError as e:
            failures.extend(e.failed_preconditions)
        except PreconditionError as e:
            errors.extend(e.error_preconditions)
            failures.extend(e.failed_preconditions)
        except Exception as e:
            logger.debug(f"Precondition {precondition} raised {type(e).__name__}: {e}")
            errors.append(ErrorPrecondition(e, changelog, precondition))

    return errors, failures


def raise_collected(
    errors: list[ErrorPrecondition],
    failures: list[FailedPrecondition],
) -> None:
    """Raise one batched error for everything collected in a scope.

    A scope with any evaluation error raises ``PreconditionError`` carrying
    both the errors and the failures; otherwise failures alone raise
    ``PreconditionFailedError``.
    """
    if errors:
        raise PreconditionError(errors, failures)
    if failures:
        raise PreconditionFailedError(failures)


# =============================================================================
# Composite Preconditions
# =============================================================================


class AndPrecondition(Precondition):
    """Passes when every nested precondition passes."""

    name = "and"

    def __init__(self, preconditions: Iterable[Precondition] = ()) -> None:
        self.preconditions: list[Precondition] = list(preconditions)

    def add(self, precondition: Precondition) -> "AndPrecondition":
        self.preconditions.append(precondition)
        return self

    def check(self, database: "Database", changelog: "ChangeLog | None") -> None:
        errors, failures = evaluate_all(self.preconditions, database, changelog)
        raise_collected(errors, failures)

    def __len__(self) -> int:
        return len(self.preconditions)

    def __str__(self) -> str:
        return f"{self.name}({', '.join(str(p) for p in self.preconditions)})"


class OrPrecondition(AndPrecondition):
    """Passes when any nested precondition passes."""

    name = "or"

    def check(self, database: "Database", changelog: "ChangeLog | None") -> None:
        errors: list[ErrorPrecondition] = []
        failures: list[FailedPrecondition] = []
        for precondition in self.preconditions:
            nested_errors, nested_failures = evaluate_all(
                [precondition], database, changelog
            )
            if not nested_errors and not nested_failures:
                return
            errors.extend(nested_errors)
            failures.extend(nested_failures)
        raise_collected(errors, failures)


class NotPrecondition(Precondition):
    """Passes when the wrapped precondition fails. Errors still propagate."""

    name = "not"

    def __init__(self, precondition: Precondition) -> None:
        self.precondition = precondition

    def check(self, database: "Database", changelog: "ChangeLog | None") -> None:
        try:
            self.precondition.check(database, changelog)
        except (PreconditionCheckFailed, PreconditionFailedError):
            return
        raise PreconditionCheckFailed(f"Expected {self.precondition} to fail")

    def __str__(self) -> str:
        return f"not({self.precondition})"


# =============================================================================
# Container
# =============================================================================


class OnFailure(str, Enum):
    """What to do when a precondition scope fails or errors."""

    HALT = "halt"  # Propagate the batched error
    WARN = "warn"  # Log and carry on as if it passed
    CONTINUE = "continue"  # Skip the changeset, try again next run
    MARK_RAN = "mark_ran"  # Skip the changeset and record it as ran


class PreconditionOutcome(Enum):
    """Result of running a container under its failure policy."""

    PROCEED = "proceed"
    SKIP = "skip"
    MARK_RAN = "mark_ran"


class PreconditionContainer(AndPrecondition):
    """Top-level precondition scope of a changelog or changeset.

    ``check`` always raises on failure. ``run`` applies the ``on_fail`` /
    ``on_error`` policies and tells the caller how to proceed.
    """

    name = "preconditions"

    def __init__(
        self,
        preconditions: Iterable[Precondition] = (),
        *,
        on_fail: OnFailure = OnFailure.HALT,
        on_error: OnFailure = OnFailure.HALT,
        on_fail_message: str | None = None,
        on_error_message: str | None = None,
    ) -> None:
        super().__init__(preconditions)
        self.on_fail = OnFailure(on_fail)
        self.on_error = OnFailure(on_error)
        self.on_fail_message = on_fail_message
        self.on_error_message = on_error_message

    def run(
        self,
        database: "Database",
        changelog: "ChangeLog | None",
    ) -> PreconditionOutcome:
        """Evaluate and apply the failure policy.

        Raises:
            PreconditionError: On errors when ``on_error`` is HALT.
            PreconditionFailedError: On failures when ``on_fail`` is HALT.
        """
        try:
            self.check(database, changelog)
        except PreconditionError as e:
            return self._apply_policy(self.on_error, e, self.on_error_message)
        except PreconditionFailedError as e:
            return self._apply_policy(self.on_fail, e, self.on_fail_message)
        return PreconditionOutcome.PROCEED

    def _apply_policy(
        self,
        policy: OnFailure,
        error: SchemaShiftError,
        message: str | None,
    ) -> PreconditionOutcome:
        if policy is OnFailure.HALT:
            raise error
        detail = f"{message}: {error}" if message else str(error)
        if policy is OnFailure.WARN:
            logger.warning(detail)
            return PreconditionOutcome.PROCEED
        logger.info(f"Preconditions not met ({policy.value}): {detail}")
        if policy is OnFailure.MARK_RAN:
            return PreconditionOutcome.MARK_RAN
        return PreconditionOutcome.SKIP
