"""Preconditions and precondition failure aggregation."""

from schemashift.preconditions.base import (
    AndPrecondition,
    ErrorPrecondition,
    FailedPrecondition,
    NotPrecondition,
    OnFailure,
    OrPrecondition,
    Precondition,
    PreconditionCheckFailed,
    PreconditionContainer,
    PreconditionError,
    PreconditionFailedError,
    PreconditionOutcome,
    evaluate_all,
    raise_collected,
)
from schemashift.preconditions.core import (
    ColumnExistsPrecondition,
    DbmsPrecondition,
    SqlCheckPrecondition,
    TableExistsPrecondition,
)

__all__ = [
    # Records and errors
    "ErrorPrecondition",
    "FailedPrecondition",
    "PreconditionCheckFailed",
    "PreconditionError",
    "PreconditionFailedError",
    # Evaluation
    "Precondition",
    "evaluate_all",
    "raise_collected",
    "AndPrecondition",
    "OrPrecondition",
    "NotPrecondition",
    "PreconditionContainer",
    "OnFailure",
    "PreconditionOutcome",
    # Built-ins
    "DbmsPrecondition",
    "TableExistsPrecondition",
    "ColumnExistsPrecondition",
    "SqlCheckPrecondition",
]
