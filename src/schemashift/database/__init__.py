"""Target database abstraction and type mapping."""

from schemashift.database.base import (
    Database,
    normalize_dialect_name,
    supported_dialects,
)
from schemashift.database.types import TypeMapper, get_type_mapper, split_type

__all__ = [
    "Database",
    "normalize_dialect_name",
    "supported_dialects",
    "TypeMapper",
    "get_type_mapper",
    "split_type",
]
