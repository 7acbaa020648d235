"""
Unit tests for settings loading.
"""

import pytest
from pydantic import ValidationError

from config import Settings, invalid_variables, missing_variables
from empress.cli.main import load_settings
from empress.core.errors import ConfigInvalid, ConfigMissing


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("MONGO_URI", "DB_NAME", "COLLECTION_NAME", "STRICT_EXIT_CODES", "SERVER_SELECTION_TIMEOUT_MS"):
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    """Tests for the Settings model."""

    def test_defaults(self, env_settings):
        assert env_settings.verbs_collection == "verbs"
        assert env_settings.activity_types_collection == "activityTypes"
        assert env_settings.strict_exit_codes is False
        assert env_settings.export_dir == "."

    def test_reads_dotenv(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text(
            "MONGO_URI=mongodb://db:27017\nDB_NAME=lrs\nCOLLECTION_NAME=statements\n",
            encoding="utf-8",
        )

        settings = Settings()

        assert settings.mongo_uri == "mongodb://db:27017"

    def test_missing_variables_names(self, clean_env, monkeypatch):
        monkeypatch.setenv("DB_NAME", "lrs")

        with pytest.raises(ValidationError) as excinfo:
            Settings()

        assert missing_variables(excinfo.value) == ["MONGO_URI", "COLLECTION_NAME"]

    def test_empty_value_counts_as_missing(self, clean_env, monkeypatch):
        monkeypatch.setenv("MONGO_URI", "")
        monkeypatch.setenv("DB_NAME", "lrs")
        monkeypatch.setenv("COLLECTION_NAME", "statements")

        with pytest.raises(ValidationError) as excinfo:
            Settings()

        assert missing_variables(excinfo.value) == ["MONGO_URI"]

    def test_bad_optional_value_is_not_reported_missing(self, env_settings, monkeypatch):
        monkeypatch.setenv("SERVER_SELECTION_TIMEOUT_MS", "abc")

        with pytest.raises(ValidationError) as excinfo:
            Settings()

        assert missing_variables(excinfo.value) == []
        problems = invalid_variables(excinfo.value)
        assert len(problems) == 1
        assert problems[0].startswith("SERVER_SELECTION_TIMEOUT_MS: ")


class TestLoadSettings:
    """load_settings raises ConfigMissing or ConfigInvalid instead of ValidationError."""

    def test_config_missing(self, clean_env):
        from config import get_settings

        get_settings.cache_clear()
        with pytest.raises(ConfigMissing) as excinfo:
            load_settings()
        get_settings.cache_clear()

        assert excinfo.value.variables == ["MONGO_URI", "DB_NAME", "COLLECTION_NAME"]
        assert str(excinfo.value) == "Environment variables MONGO_URI, DB_NAME, COLLECTION_NAME are not set"

    def test_config_invalid(self, env_settings, monkeypatch):
        from config import get_settings

        monkeypatch.setenv("SERVER_SELECTION_TIMEOUT_MS", "abc")
        get_settings.cache_clear()
        with pytest.raises(ConfigInvalid) as excinfo:
            load_settings()
        get_settings.cache_clear()

        assert str(excinfo.value).startswith("Invalid configuration: SERVER_SELECTION_TIMEOUT_MS: ")
        assert "not set" not in str(excinfo.value)
