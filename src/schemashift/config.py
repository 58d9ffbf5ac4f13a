"""Run configuration.

Configuration comes from three layers, later layers winning:

1. ``MigrationConfig`` defaults;
2. a YAML (or JSON) file;
3. ``SCHEMASHIFT_*`` environment variables.

Example:
    schemashift.yaml::

        url: postgresql://app@localhost/app
        changelog: myapp.migrations:changelog
        default_schema: public

    Environment::

        SCHEMASHIFT_DRY_RUN=true
        SCHEMASHIFT_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from schemashift.changelog.filters import default_case_insensitive_paths
from schemashift.changelog.history import DEFAULT_CHANGELOG_TABLE
from schemashift.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_ENV_PREFIX = "SCHEMASHIFT"


@dataclass
class MigrationConfig:
    """Configuration for a migration run.

    Attributes:
        url: SQLAlchemy database URL.
        changelog: Changelog reference as ``module:attribute``.
        default_schema: Schema used when a change names none.
        changelog_table: Name of the execution history table.
        case_insensitive_paths: Compare changelog paths ignoring case.
            ``None`` picks the platform default.
        dry_run: Render SQL without executing it.
        echo: Echo SQL emitted by the engine.
        log_level: Logging level name.
    """

    url: str | None = None
    changelog: str | None = None
    default_schema: str | None = None
    changelog_table: str = DEFAULT_CHANGELOG_TABLE
    case_insensitive_paths: bool | None = None
    dry_run: bool = False
    echo: bool = False
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.case_insensitive_paths is None:
            self.case_insensitive_paths = default_case_insensitive_paths()
        self.log_level = str(self.log_level).upper()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MigrationConfig":
        """Create from a dictionary, rejecting unknown keys.

        Raises:
            ConfigError: If a key is not a configuration field.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _parse_value(value: str) -> Any:
    """Parse an environment string to the appropriate type."""
    lowered = value.lower()
    if lowered in ("true", "yes", "on"):
        return True
    if lowered in ("false", "no", "off"):
        return False
    if lowered in ("null", "none", ""):
        return None

    try:
        if "." in value:
            return float(value)
        return int(value)
    except ValueError:
        pass

    if value.startswith(("[", "{")):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass

    return value


def load_file(path: str | Path) -> dict[str, Any]:
    """Load a YAML or JSON configuration file.

    Raises:
        ConfigError: If the file is missing, malformed or not a mapping.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        if path.suffix.lower() == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content) or {}
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to load config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {path} must contain a mapping")
    return data


def load_env(prefix: str = DEFAULT_ENV_PREFIX) -> dict[str, Any]:
    """Collect known configuration keys from prefixed environment variables."""
    known = {f.name for f in fields(MigrationConfig)}
    env_prefix = f"{prefix}_"
    result: dict[str, Any] = {}

    for key, value in os.environ.items():
        if not key.startswith(env_prefix):
            continue
        config_key = key[len(env_prefix) :].lower()
        if config_key in known:
            result[config_key] = _parse_value(value)

    return result


def load_config(
    path: str | Path | None = None,
    env_prefix: str = DEFAULT_ENV_PREFIX,
) -> MigrationConfig:
    """Load configuration from an optional file and the environment.

    Args:
        path: YAML or JSON file. Skipped when None.
        env_prefix: Prefix of the environment variables to read.

    Returns:
        Merged configuration; environment values override the file.

    Raises:
        ConfigError: If the file cannot be loaded or holds unknown keys.
    """
    data: dict[str, Any] = {}
    if path is not None:
        data.update(load_file(path))
        logger.debug(f"Loaded configuration from {path}")
    data.update(load_env(env_prefix))
    return MigrationConfig.from_dict(data)
