"""
Unit tests for pipeline settings loading.
"""

import pytest

from catalog_ingest.config import PipelineSettings, load_settings
from catalog_ingest.config.settings import ENV_VARS


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for env_var in ENV_VARS:
        monkeypatch.delenv(env_var, raising=False)


class TestLoadSettings:
    """Tests for load_settings"""

    def test_defaults(self):
        settings = load_settings(load_env_file=False)
        assert settings == PipelineSettings()
        assert settings.chunk_size == 100
        assert settings.max_workers == 4

    def test_yaml_file(self, tmp_path):
        config = tmp_path / "pipeline.yaml"
        config.write_text(
            "pipeline:\n"
            "  chunk_size: 50\n"
            "  catalog_base_url: https://catalog.example.com/api\n"
        )
        settings = load_settings(config, load_env_file=False)
        assert settings.chunk_size == 50
        assert settings.catalog_base_url == "https://catalog.example.com/api"

    def test_environment_overrides_yaml(self, tmp_path, monkeypatch):
        config = tmp_path / "pipeline.yaml"
        config.write_text("pipeline:\n  chunk_size: 50\n  max_workers: 2\n")
        monkeypatch.setenv("CATALOG_CHUNK_SIZE", "25")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        settings = load_settings(config, load_env_file=False)
        assert settings.chunk_size == 25
        assert settings.max_workers == 2
        assert settings.log_level == "DEBUG"

    def test_overrides_win_and_none_is_ignored(self, monkeypatch):
        monkeypatch.setenv("CATALOG_MAX_WORKERS", "8")
        settings = load_settings(overrides={"max_workers": 3, "chunk_size": None}, load_env_file=False)
        assert settings.max_workers == 3
        assert settings.chunk_size == 100

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "absent.yaml", load_env_file=False)

    def test_unknown_key_rejected(self, tmp_path):
        config = tmp_path / "pipeline.yaml"
        config.write_text("pipeline:\n  chunk_sise: 10\n")
        with pytest.raises(ValueError, match="chunk_sise"):
            load_settings(config, load_env_file=False)

    def test_invalid_value_rejected(self, monkeypatch):
        monkeypatch.setenv("CATALOG_CHUNK_SIZE", "0")
        with pytest.raises(ValueError, match="Invalid pipeline settings"):
            load_settings(load_env_file=False)

    def test_non_mapping_file_rejected(self, tmp_path):
        config = tmp_path / "pipeline.yaml"
        config.write_text("- just\n- a list\n")
        with pytest.raises(ValueError, match="mapping"):
            load_settings(config, load_env_file=False)
