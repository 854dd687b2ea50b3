"""Tests for app configuration.

Tests the configuration loading, engine settings, and fallbacks.
"""

import pytest

from mocktest.config.app_config import (
    AppConfig,
    ConfigError,
    EngineConfig,
    clear_config_cache,
    load_app_config,
)


class TestLoadAppConfig:
    """Tests for load_app_config function."""

    def test_defaults_when_file_missing(self, tmp_path, monkeypatch):
        """Falls back to built-in defaults."""
        monkeypatch.setenv("MOCKTEST_CONFIG", str(tmp_path / "missing.yaml"))
        config = load_app_config()
        assert isinstance(config, AppConfig)
        assert config.engine.free_test_limit == 5
        assert config.engine.single_subject_count == 60
        assert config.engine.stream_subject_count == 20
        assert str(config.db_path).endswith("mocktest.db")

    def test_load_from_yaml_merges_defaults(self, tmp_path, monkeypatch):
        """Keys missing from the file keep their defaults."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "engine:\n  free_test_limit: 2\npaths:\n  db_path: /tmp/x.db\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("MOCKTEST_CONFIG", str(path))

        config = load_app_config()
        assert config.engine.free_test_limit == 2
        assert config.engine.stream_subject_count == 20
        assert set(config.engine.streams) == {"PCM", "PCB"}
        assert str(config.db_path) == "/tmp/x.db"

    def test_config_is_cached(self, tmp_path, monkeypatch):
        """Second call returns the cached object until force_reload."""
        monkeypatch.setenv("MOCKTEST_CONFIG", str(tmp_path / "missing.yaml"))
        first = load_app_config()
        assert load_app_config() is first
        assert load_app_config(force_reload=True) is not first

    def test_invalid_values_raise(self, tmp_path, monkeypatch):
        """Negative limits are rejected."""
        path = tmp_path / "config.yaml"
        path.write_text("engine:\n  free_test_limit: -1\n", encoding="utf-8")
        monkeypatch.setenv("MOCKTEST_CONFIG", str(path))
        clear_config_cache()

        with pytest.raises(ConfigError, match="free_test_limit"):
            load_app_config()


class TestEngineConfig:
    """Tests for EngineConfig."""

    def test_streams_keep_order(self):
        """Stream subjects keep their configured order."""
        config = EngineConfig()
        assert config.stream_subjects("PCB") == ("physics-11th-12th", "chemistry", "biology")
        assert config.stream_subjects("PCM") == (
            "physics-11th-12th",
            "chemistry",
            "mathematics",
        )

    def test_unknown_stream(self):
        """Unknown stream resolves to None."""
        assert EngineConfig().stream_subjects("XYZ") is None

    def test_immutable(self):
        """Config and its streams cannot be modified."""
        config = EngineConfig()
        with pytest.raises(AttributeError):
            config.free_test_limit = 10
        with pytest.raises(TypeError):
            config.streams["NEW"] = ("biology",)

    def test_empty_stream_rejected(self):
        """A stream must name at least one subject."""
        with pytest.raises(ConfigError, match="no subjects"):
            EngineConfig(streams={"EMPTY": []})
