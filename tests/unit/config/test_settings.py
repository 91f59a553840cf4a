"""Unit tests for Settings class and get_settings function."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from engram.config import get_settings, reload_settings
from engram.config.models.api import APIConfig
from engram.config.settings import Settings


class TestSettings:
    """Tests for Settings model defaults."""

    def test_default_values(self) -> None:
        settings = Settings()
        assert settings.app_name == "engram"
        assert settings.debug is False

    def test_storage_defaults(self) -> None:
        settings = Settings()
        assert settings.storage.backend == "duckdb"
        assert settings.storage.db_path == "./engram.duckdb"
        assert settings.storage.dimensions == 768
        assert settings.storage.enable_vector_index is True

    def test_embedding_defaults(self) -> None:
        settings = Settings()
        assert settings.embedding.provider == "openai_compatible"
        assert settings.embedding.timeout_seconds == 5.0
        assert settings.embedding.request_timeout_seconds == 30.0
        assert settings.embedding.api_key is None

    def test_server_defaults(self) -> None:
        settings = Settings()
        assert settings.api.port == 8080
        assert settings.api.default_group_id == "default"
        assert settings.mcp.mode == "stdio"
        assert settings.mcp.mount_path == "/mcp"
        assert settings.observability.logging.format == "json"

    def test_dimensions_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            Settings(storage={"dimensions": 0})

    def test_cors_origins_from_comma_separated_string(self) -> None:
        config = APIConfig(cors_origins="http://a.test, http://b.test")
        assert config.cors_origins == ["http://a.test", "http://b.test"]


class TestGetSettings:
    """Tests for get_settings function."""

    def test_reads_toml_files(
        self,
        test_config_dir: Path,
        mock_toml_files,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        mock_toml_files(
            {
                "default.toml": "app_name = 'from-toml'\n[storage]\ndimensions = 384",
                "development.toml": "debug = true",
            }
        )
        monkeypatch.setenv("ENGRAM_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("ENGRAM_ENV", "development")

        settings = get_settings()

        assert settings.app_name == "from-toml"
        assert settings.debug is True
        assert settings.storage.dimensions == 384
        assert settings.storage.db_path == "./engram.duckdb"

    def test_settings_cached(
        self,
        test_config_dir: Path,
        mock_toml_files,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        mock_toml_files({"default.toml": "app_name = 'cached'"})
        monkeypatch.setenv("ENGRAM_CONFIG_DIR", str(test_config_dir))

        assert get_settings() is get_settings()

    def test_reload_picks_up_changes(
        self,
        test_config_dir: Path,
        mock_toml_files,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        mock_toml_files({"default.toml": "app_name = 'original'"})
        monkeypatch.setenv("ENGRAM_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("ENGRAM_ENV", "nonexistent")
        assert get_settings().app_name == "original"

        mock_toml_files({"default.toml": "app_name = 'updated'"})

        assert reload_settings().app_name == "updated"

    def test_missing_default_falls_back_to_model_defaults(
        self, test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ENGRAM_CONFIG_DIR", str(test_config_dir))

        settings = get_settings()

        assert settings.app_name == "engram"


class TestEnvironmentVariableOverrides:
    """Tests for ENGRAM_* environment variable overrides."""

    def test_nested_override_beats_toml(
        self,
        test_config_dir: Path,
        mock_toml_files,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        mock_toml_files({"default.toml": "[storage]\ndb_path = 'toml.duckdb'"})
        monkeypatch.setenv("ENGRAM_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("ENGRAM_STORAGE__DB_PATH", "/data/env.duckdb")

        settings = get_settings()

        assert settings.storage.db_path == "/data/env.duckdb"

    def test_top_level_override(self, env_override) -> None:
        with env_override({"ENGRAM_DEBUG": "true"}):
            assert Settings().debug is True

    def test_api_key_from_environment(self, env_override) -> None:
        with env_override({"ENGRAM_EMBEDDING__API_KEY": "sk-test"}):
            assert Settings().embedding.api_key == "sk-test"
