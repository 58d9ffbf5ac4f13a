"""Declarative schema changes.

Example:
    >>> from schemashift.change import ColumnConfig, ConstraintsConfig, CreateTableChange
    >>>
    >>> change = CreateTableChange(
    ...     table_name="orders",
    ...     columns=[
    ...         ColumnConfig(name="id", type="BIGINT",
    ...                      constraints=ConstraintsConfig(primary_key=True)),
    ...         ColumnConfig(name="customer_id", type="BIGINT",
    ...                      constraints=ConstraintsConfig(
    ...                          nullable=False,
    ...                          references="customers(id)",
    ...                          foreign_key_name="fk_orders_customer",
    ...                      )),
    ...     ],
    ... )
    >>> change.inverses()
    [DropTableChange(table_name='orders', schema_name=None, cascade_constraints=False)]
"""

from schemashift.change.base import (
    CHANGE_TYPES,
    Change,
    ColumnConfig,
    ConstraintsConfig,
    change_from_dict,
    get_change_type,
    register_change,
    trim_to_none,
)
from schemashift.change.core import (
    AddColumnChange,
    CreateIndexChange,
    CreateTableChange,
    DropColumnChange,
    DropIndexChange,
    DropTableChange,
    RenameColumnChange,
    RenameTableChange,
)

__all__ = [
    # Base
    "Change",
    "ColumnConfig",
    "ConstraintsConfig",
    "CHANGE_TYPES",
    "register_change",
    "get_change_type",
    "change_from_dict",
    "trim_to_none",
    # Change types
    "CreateTableChange",
    "DropTableChange",
    "RenameTableChange",
    "AddColumnChange",
    "DropColumnChange",
    "RenameColumnChange",
    "CreateIndexChange",
    "DropIndexChange",
]
