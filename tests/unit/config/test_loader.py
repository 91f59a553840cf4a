"""Unit tests for TOML configuration loader."""

import tomllib
from pathlib import Path

import pytest

from engram.config.loader import (
    deep_merge,
    get_config_dir,
    get_environment,
    load_config,
    load_toml,
)


class TestDeepMerge:
    """Tests for deep_merge function."""

    def test_nested_sections_merge_recursively(self) -> None:
        base = {"storage": {"db_path": "a.duckdb", "dimensions": 768}, "debug": False}
        override = {"storage": {"db_path": "b.duckdb"}}

        result = deep_merge(base, override)

        assert result == {"storage": {"db_path": "b.duckdb", "dimensions": 768}, "debug": False}

    def test_scalar_replaces_section(self) -> None:
        result = deep_merge({"storage": {"db_path": "a"}}, {"storage": "flat"})
        assert result == {"storage": "flat"}

    def test_inputs_are_not_modified(self) -> None:
        base = {"storage": {"db_path": "a"}}
        override = {"storage": {"dimensions": 4}}

        deep_merge(base, override)

        assert base == {"storage": {"db_path": "a"}}
        assert override == {"storage": {"dimensions": 4}}


class TestLoadToml:
    """Tests for load_toml function."""

    def test_load_valid_toml(self, tmp_path: Path) -> None:
        toml_file = tmp_path / "test.toml"
        toml_file.write_text('[storage]\ndb_path = "x.duckdb"\ndimensions = 4')

        assert load_toml(toml_file) == {"storage": {"db_path": "x.duckdb", "dimensions": 4}}

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_toml(tmp_path / "nonexistent.toml")

    def test_invalid_toml_raises(self, tmp_path: Path) -> None:
        invalid_file = tmp_path / "invalid.toml"
        invalid_file.write_text("dimensions = [unclosed")

        with pytest.raises(tomllib.TOMLDecodeError):
            load_toml(invalid_file)


class TestEnvironmentLookup:
    """Tests for get_environment and get_config_dir."""

    def test_environment_from_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENGRAM_ENV", "production")
        assert get_environment() == "production"

    def test_environment_defaults_to_development(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ENGRAM_ENV", raising=False)
        assert get_environment() == "development"

    def test_config_dir_from_env_var(
        self, test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ENGRAM_CONFIG_DIR", str(test_config_dir))
        assert get_config_dir() == test_config_dir

    def test_missing_config_dir_raises(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ENGRAM_CONFIG_DIR", str(tmp_path / "missing"))

        with pytest.raises(FileNotFoundError):
            get_config_dir()


class TestLoadConfig:
    """Tests for load_config function."""

    def test_environment_file_overrides_default(
        self,
        test_config_dir: Path,
        mock_toml_files,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        mock_toml_files(
            {
                "default.toml": "debug = false\n[storage]\ndb_path = 'a.duckdb'\ndimensions = 768",
                "test.toml": "[storage]\ndimensions = 4",
            }
        )
        monkeypatch.setenv("ENGRAM_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("ENGRAM_ENV", "test")

        result = load_config()

        assert result == {"debug": False, "storage": {"db_path": "a.duckdb", "dimensions": 4}}

    def test_missing_environment_file_is_ignored(
        self,
        test_config_dir: Path,
        mock_toml_files,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        mock_toml_files({"default.toml": "debug = true"})
        monkeypatch.setenv("ENGRAM_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("ENGRAM_ENV", "staging")

        assert load_config() == {"debug": True}

    def test_missing_default_raises(
        self, test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ENGRAM_CONFIG_DIR", str(test_config_dir))

        with pytest.raises(FileNotFoundError, match="default.toml"):
            load_config()
