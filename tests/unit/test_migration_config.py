"""Unit tests for run configuration loading."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from schemashift.config import MigrationConfig, load_config, load_env, load_file
from schemashift.exceptions import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    """Remove ambient SCHEMASHIFT_* variables."""
    for key in list(os.environ):
        if key.startswith("SCHEMASHIFT_"):
            monkeypatch.delenv(key)


class TestMigrationConfig:
    """Tests for MigrationConfig."""

    def test_defaults(self) -> None:
        config = MigrationConfig(case_insensitive_paths=False)

        assert config.url is None
        assert config.changelog_table == "DATABASECHANGELOG"
        assert config.dry_run is False
        assert config.log_level == "INFO"

    @pytest.mark.parametrize("platform,expected", [("win32", True), ("linux", False)])
    def test_path_case_defaults_to_platform(
        self, monkeypatch, platform: str, expected: bool
    ) -> None:
        monkeypatch.setattr("sys.platform", platform)

        assert MigrationConfig().case_insensitive_paths is expected

    def test_explicit_path_case_kept(self, monkeypatch) -> None:
        monkeypatch.setattr("sys.platform", "win32")

        assert MigrationConfig(case_insensitive_paths=False).case_insensitive_paths is False

    def test_log_level_upper_cased(self) -> None:
        assert MigrationConfig(log_level="debug").log_level == "DEBUG"

    def test_from_dict_rejects_unknown_keys(self) -> None:
        with pytest.raises(ConfigError, match="Unknown configuration keys: colour"):
            MigrationConfig.from_dict({"url": "sqlite://", "colour": "blue"})

    def test_to_dict(self) -> None:
        config = MigrationConfig(url="sqlite://", case_insensitive_paths=True)

        data = config.to_dict()

        assert data["url"] == "sqlite://"
        assert data["case_insensitive_paths"] is True


class TestLoadConfig:
    """Tests for load_config and its sources."""

    def test_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "schemashift.yaml"
        path.write_text(
            "url: sqlite:///app.db\n"
            "changelog: myapp.migrations:changelog\n"
            "default_schema: main\n"
            "dry_run: true\n"
        )

        config = load_config(path)

        assert config.url == "sqlite:///app.db"
        assert config.changelog == "myapp.migrations:changelog"
        assert config.default_schema == "main"
        assert config.dry_run is True

    def test_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "schemashift.json"
        path.write_text('{"url": "sqlite://", "echo": true}')

        assert load_file(path) == {"url": "sqlite://", "echo": True}

    def test_environment_overrides_file(self, tmp_path: Path, monkeypatch) -> None:
        path = tmp_path / "schemashift.yaml"
        path.write_text("url: sqlite:///file.db\nlog_level: INFO\n")
        monkeypatch.setenv("SCHEMASHIFT_URL", "sqlite:///env.db")
        monkeypatch.setenv("SCHEMASHIFT_LOG_LEVEL", "debug")
        monkeypatch.setenv("SCHEMASHIFT_CASE_INSENSITIVE_PATHS", "yes")

        config = load_config(path)

        assert config.url == "sqlite:///env.db"
        assert config.log_level == "DEBUG"
        assert config.case_insensitive_paths is True

    def test_environment_only(self, monkeypatch) -> None:
        monkeypatch.setenv("SCHEMASHIFT_DRY_RUN", "off")
        monkeypatch.setenv("SCHEMASHIFT_CHANGELOG_TABLE", "history")

        config = load_config()

        assert config.dry_run is False
        assert config.changelog_table == "history"

    def test_custom_prefix(self, monkeypatch) -> None:
        monkeypatch.setenv("MIGRATE_URL", "sqlite://")

        assert load_config(env_prefix="MIGRATE").url == "sqlite://"

    def test_unrelated_variables_ignored(self, monkeypatch) -> None:
        monkeypatch.setenv("SCHEMASHIFT_UNKNOWN_SETTING", "1")

        assert "unknown_setting" not in load_env()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yaml")

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("url: [unclosed\n")

        with pytest.raises(ConfigError, match="Failed to load config"):
            load_config(path)

    def test_non_mapping_file(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="must contain a mapping"):
            load_config(path)

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert load_config(path).url is None
