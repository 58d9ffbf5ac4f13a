"""Dialect capability registry and bundled SQL generators.

Example:
    >>> from schemashift.sqlgen import get_registry
    >>> registry = get_registry()
    >>> if registry.supports(statement, database):
    ...     for sql in registry.generate(statement, database):
    ...         print(sql)
"""

from schemashift.sqlgen.registry import (
    ANY_DIALECT,
    SqlGenerator,
    SqlGeneratorRegistry,
    get_registry,
)

__all__ = [
    "ANY_DIALECT",
    "SqlGenerator",
    "SqlGeneratorRegistry",
    "get_registry",
]
