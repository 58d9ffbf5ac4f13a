"""schemashift - Declarative Database Schema Migrations."""

from schemashift.change import (
    AddColumnChange,
    Change,
    ColumnConfig,
    ConstraintsConfig,
    CreateIndexChange,
    CreateTableChange,
    DropColumnChange,
    DropIndexChange,
    DropTableChange,
    RenameColumnChange,
    RenameTableChange,
)
from schemashift.changelog import (
    ChangeLog,
    ChangeSet,
    DatabaseHistoryStore,
    InMemoryHistoryStore,
    RanChangeSet,
    ShouldRunChangeSetFilter,
)
from schemashift.config import MigrationConfig, load_config
from schemashift.database import Database
from schemashift.exceptions import (
    ConfigError,
    DefinitionError,
    HistoryStoreError,
    MigrationFailedError,
    RollbackImpossibleError,
    SchemaShiftError,
    UnsupportedChangeError,
    UnsupportedStatementError,
)
from schemashift.preconditions import (
    OnFailure,
    PreconditionContainer,
    PreconditionError,
    PreconditionFailedError,
)
from schemashift.runner import MigrationResult, MigrationRunner
from schemashift.sqlgen import SqlGeneratorRegistry, get_registry

__version__ = "0.1.0"

__all__ = [
    # Changes
    "Change",
    "ColumnConfig",
    "ConstraintsConfig",
    "CreateTableChange",
    "DropTableChange",
    "RenameTableChange",
    "AddColumnChange",
    "DropColumnChange",
    "RenameColumnChange",
    "CreateIndexChange",
    "DropIndexChange",
    # Changelog
    "ChangeLog",
    "ChangeSet",
    "RanChangeSet",
    "ShouldRunChangeSetFilter",
    "InMemoryHistoryStore",
    "DatabaseHistoryStore",
    # Database and rendering
    "Database",
    "SqlGeneratorRegistry",
    "get_registry",
    # Preconditions
    "PreconditionContainer",
    "OnFailure",
    "PreconditionError",
    "PreconditionFailedError",
    # Running
    "MigrationRunner",
    "MigrationResult",
    "MigrationConfig",
    "load_config",
    # Errors
    "SchemaShiftError",
    "ConfigError",
    "DefinitionError",
    "UnsupportedChangeError",
    "RollbackImpossibleError",
    "UnsupportedStatementError",
    "HistoryStoreError",
    "MigrationFailedError",
]
