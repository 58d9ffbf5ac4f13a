"""Base classes for declarative changes.

Every change follows the same three-phase contract:

1. ``validate(database)`` rejects structurally incomplete definitions.
2. ``generate_statements(database)`` compiles the change into an ordered
   list of abstract statements.
3. ``inverses()`` returns the changes that undo it, or raises
   ``RollbackImpossibleError``.

Changes are dataclasses; ``to_dict()`` is their canonical content and feeds
the changeset checksum.
"""

from __future__ import annotations

import dataclasses
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, ClassVar, TypeVar

from schemashift.exceptions import DefinitionError, RollbackImpossibleError

if TYPE_CHECKING:
    from schemashift.database.base import Database
    from schemashift.sqlgen.registry import SqlGeneratorRegistry
    from schemashift.statement.base import SqlStatement


def trim_to_none(value: str | None) -> str | None:
    """Strip a string, mapping empty results to None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


# =============================================================================
# Column Descriptors
# =============================================================================


@dataclass
class ConstraintsConfig:
    """Constraints declared on a column.

    ``None`` means "not declared", which differs from an explicit ``False``
    for ``nullable``: only an explicit ``False`` produces NOT NULL.
    """

    nullable: bool | None = None
    primary_key: bool | None = None
    primary_key_name: str | None = None
    unique: bool | None = None
    unique_constraint_name: str | None = None
    references: str | None = None
    foreign_key_name: str | None = None
    delete_cascade: bool | None = None
    deferrable: bool | None = None
    initially_deferred: bool | None = None

    @property
    def is_primary_key(self) -> bool:
        return bool(self.primary_key)

    @property
    def is_not_null(self) -> bool:
        return self.nullable is not None and not self.nullable

    @property
    def is_unique(self) -> bool:
        return bool(self.unique)


@dataclass
class ColumnConfig:
    """A column as declared on a change.

    Attributes:
        name: Column name.
        type: Abstract type name, resolved per dialect at compile time.
        auto_increment: Whether the database generates values.
        default_value: Literal default (str, int, float or bool).
        default_value_computed: Raw SQL expression used as the default.
        remarks: Column comment.
        constraints: Declared constraints.
    """

    name: str | None = None
    type: str | None = None
    auto_increment: bool | None = None
    default_value: Any = None
    default_value_computed: str | None = None
    remarks: str | None = None
    constraints: ConstraintsConfig | None = None

    @property
    def is_auto_increment(self) -> bool:
        return bool(self.auto_increment)

    @property
    def has_default_value(self) -> bool:
        return self.default_value is not None or self.default_value_computed is not None

    def default_column_value(self, database: "Database") -> str | None:
        """Render the declared default for a database."""
        if self.default_value_computed is not None:
            return self.default_value_computed
        if self.default_value is None:
            return None
        return database.format_literal(self.default_value)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ColumnConfig":
        """Create a ColumnConfig from its ``asdict`` form."""
        values = dict(data)
        constraints = values.pop("constraints", None)
        if constraints is not None:
            constraints = ConstraintsConfig(**constraints)
        return cls(constraints=constraints, **values)


# =============================================================================
# Change Base Class
# =============================================================================


class Change(ABC):
    """Abstract base class for a single declarative schema change.

    Subclasses are dataclasses registered with ``@register_change`` so the
    family stays a closed, discoverable set.
    """

    change_name: ClassVar[str] = "change"

    def validate(self, database: "Database") -> None:
        """Reject structurally incomplete definitions.

        Raises:
            DefinitionError: If a required field is missing.
        """
        pass

    @abstractmethod
    def generate_statements(
        self,
        database: "Database",
        registry: "SqlGeneratorRegistry | None" = None,
    ) -> list["SqlStatement"]:
        """Compile the change into ordered abstract statements.

        Args:
            database: Target database (schema default, type mapping).
            registry: Capability registry used to decide optional statements.

        Raises:
            UnsupportedChangeError: If the change cannot be expressed.
        """
        pass

    @abstractmethod
    def confirmation_message(self) -> str:
        """Human-readable message shown after the change runs."""
        pass

    def inverses(self) -> list["Change"]:
        """Changes that undo this one, in execution order.

        Raises:
            RollbackImpossibleError: If the change has no meaningful inverse.
        """
        raise RollbackImpossibleError(self.change_name)

    def supports_rollback(self) -> bool:
        """Whether ``inverses()`` can produce a rollback."""
        try:
            self.inverses()
            return True
        except RollbackImpossibleError:
            return False

    def generate_rollback_statements(
        self,
        database: "Database",
        registry: "SqlGeneratorRegistry | None" = None,
    ) -> list["SqlStatement"]:
        """Validate and compile every inverse change."""
        statements: list[SqlStatement] = []
        for inverse in self.inverses():
            inverse.validate(database)
            statements.extend(inverse.generate_statements(database, registry))
        return statements

    def resolve_schema(self, database: "Database") -> str | None:
        """Declared schema, else the database default."""
        schema_name = getattr(self, "schema_name", None)
        return schema_name if schema_name is not None else database.default_schema_name

    def _require(self, value: Any, field_name: str) -> None:
        if isinstance(value, str):
            value = trim_to_none(value)
        if value is None:
            raise DefinitionError(f"{field_name} is required", self)

    def to_dict(self) -> dict[str, Any]:
        """Canonical content of the change."""
        data: dict[str, Any] = {"change": self.change_name}
        if dataclasses.is_dataclass(self):
            data.update(dataclasses.asdict(self))
        return data


# =============================================================================
# Change Type Registry
# =============================================================================


ChangeT = TypeVar("ChangeT", bound=type[Change])

CHANGE_TYPES: dict[str, type[Change]] = {}


def register_change(name: str) -> Callable[[ChangeT], ChangeT]:
    """Class decorator adding a change type to ``CHANGE_TYPES``."""

    def decorator(cls: ChangeT) -> ChangeT:
        if name in CHANGE_TYPES:
            raise ValueError(f"Change type '{name}' already registered")
        cls.change_name = name
        CHANGE_TYPES[name] = cls
        return cls

    return decorator


def get_change_type(name: str) -> type[Change]:
    """Look up a change class by name.

    Raises:
        KeyError: If no change type has that name.
    """
    try:
        return CHANGE_TYPES[name]
    except KeyError:
        raise KeyError(
            f"Unknown change type: {name}. Available: {', '.join(sorted(CHANGE_TYPES))}"
        ) from None


def change_from_dict(data: dict[str, Any]) -> Change:
    """Build a change from the output of ``Change.to_dict()``."""
    values = dict(data)
    change_type = get_change_type(values.pop("change"))
    if "columns" in values and values["columns"] and isinstance(values["columns"][0], dict):
        values["columns"] = [ColumnConfig.from_dict(column) for column in values["columns"]]
    return change_type(**values)
