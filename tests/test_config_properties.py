"""Property-based tests for configuration models and loading.

Feature: offline-sync
"""

import structlog
import pytest
from hypothesis import given
from hypothesis import strategies as st
from pydantic import ValidationError

from offline_sync.models import AppConfig, RemoteConfig, SyncConfig
from offline_sync.utils.config_loader import ConfigLoader, ConfigurationError

log = structlog.stdlib.get_logger()


@given(st.integers(min_value=1, max_value=500))
def test_news_batch_size_bounds(batch_size: int):
    """Any batch size between 1 and 500 is accepted as is."""
    config = SyncConfig(news_batch_size=batch_size)

    assert config.news_batch_size == batch_size


@given(st.integers().filter(lambda x: x < 1 or x > 500))
def test_news_batch_size_out_of_bounds_rejected(batch_size: int):
    """Batch sizes outside bounds are rejected."""
    with pytest.raises(ValidationError) as exc_info:
        SyncConfig(news_batch_size=batch_size)

    assert "news_batch_size" in str(exc_info.value)


@given(st.integers(max_value=0))
def test_max_attempts_must_be_positive(max_attempts: int):
    with pytest.raises(ValidationError):
        SyncConfig(max_attempts=max_attempts)


def test_defaults():
    config = AppConfig()

    assert config.remote.demo is True
    assert config.remote.base_url is None
    assert config.storage.persist is True
    assert config.sync.max_attempts == 3
    assert config.sync.news_batch_size == 40
    assert config.logging.log_level == "INFO"


def test_remote_requires_base_url_outside_demo():
    with pytest.raises(ValidationError):
        RemoteConfig(demo=False)

    config = RemoteConfig(demo=False, base_url="https://news.example.com/api")
    assert str(config.base_url).startswith("https://news.example.com")


def test_environment_variable_loading(monkeypatch):
    """Nested settings are read from OFFLINE_SYNC_ prefixed environment variables."""
    log.info("test_environment_variable_loading")

    monkeypatch.setenv("OFFLINE_SYNC_REMOTE__DEMO", "false")
    monkeypatch.setenv("OFFLINE_SYNC_REMOTE__BASE_URL", "https://news.example.com")
    monkeypatch.setenv("OFFLINE_SYNC_STORAGE__DATA_DIRECTORY", "/var/lib/offline-sync")
    monkeypatch.setenv("OFFLINE_SYNC_SYNC__MAX_ATTEMPTS", "7")
    monkeypatch.setenv("OFFLINE_SYNC_LOGGING__JSON_LOGS", "false")

    config = AppConfig()

    # HttpUrl normalizes URLs by adding a trailing slash
    assert str(config.remote.base_url).rstrip("/") == "https://news.example.com"
    assert config.remote.demo is False
    assert config.storage.data_directory == "/var/lib/offline-sync"
    assert config.sync.max_attempts == 7
    assert config.logging.json_logs is False


class TestConfigLoader:
    """Tests for ConfigLoader."""

    def test_loads_yaml_with_env_substitution(self, tmp_path, monkeypatch):
        monkeypatch.setenv("NEWS_BACKEND", "https://news.example.com/api")
        config_file = tmp_path / "custom.yaml"
        config_file.write_text(
            "remote:\n"
            "  demo: false\n"
            "  base_url: ${NEWS_BACKEND}\n"
            "sync:\n"
            "  max_attempts: 4\n"
            "  news_batch_size: 10\n"
        )

        config = ConfigLoader(tmp_path).load_config(str(config_file))

        assert str(config.remote.base_url).startswith("https://news.example.com/api")
        assert config.sync.max_attempts == 4
        assert config.sync.news_batch_size == 10
        assert config.storage.data_directory == "./data"

    def test_missing_env_var_raises(self, tmp_path, monkeypatch):
        monkeypatch.delenv("NEWS_BACKEND_MISSING", raising=False)
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("remote:\n  base_url: ${NEWS_BACKEND_MISSING}\n")

        with pytest.raises(ConfigurationError, match="NEWS_BACKEND_MISSING"):
            ConfigLoader(tmp_path).load_config(str(config_file))

    def test_app_env_selects_file(self, tmp_path, monkeypatch):
        (tmp_path / "default.yaml").write_text("sync:\n  max_attempts: 2\n")
        (tmp_path / "staging.yaml").write_text("sync:\n  max_attempts: 9\n")

        monkeypatch.setenv("APP_ENV", "staging")
        assert ConfigLoader(tmp_path).load_config().sync.max_attempts == 9

        monkeypatch.setenv("APP_ENV", "unknown")
        assert ConfigLoader(tmp_path).load_config().sync.max_attempts == 2

    def test_missing_default_file_raises(self, tmp_path, monkeypatch):
        monkeypatch.delenv("APP_ENV", raising=False)

        with pytest.raises(ConfigurationError):
            ConfigLoader(tmp_path).load_config()

    @pytest.mark.parametrize(
        "content",
        ["", "- just\n- a list\n", "sync: [unclosed\n", "sync:\n  max_attempts: 0\n"],
    )
    def test_invalid_files_raise(self, tmp_path, content):
        config_file = tmp_path / "bad.yaml"
        config_file.write_text(content)

        with pytest.raises(ConfigurationError):
            ConfigLoader(tmp_path).load_config(str(config_file))

    def test_bundled_production_config_loads_without_log_file(self, monkeypatch):
        monkeypatch.setenv("OFFLINE_SYNC_BACKEND_URL", "https://news.example.com/api")
        monkeypatch.setenv("OFFLINE_SYNC_DATA_DIR", "/var/lib/offline-sync")
        monkeypatch.delenv("OFFLINE_SYNC_LOG_FILE", raising=False)
        monkeypatch.delenv("OFFLINE_SYNC_LOGGING__LOG_FILE", raising=False)
        monkeypatch.setenv("APP_ENV", "production")

        config = ConfigLoader().load_config()

        assert config.remote.demo is False
        assert config.remote.retry_max_delay == 30.0
        assert config.storage.data_directory == "/var/lib/offline-sync"
        assert config.logging.log_file is None

    def test_bundled_default_config_loads(self, monkeypatch):
        monkeypatch.delenv("APP_ENV", raising=False)

        config = ConfigLoader().load_config()

        assert config.remote.demo is True
        assert config.sync.news_batch_size == 40

    def test_validate_config_warnings(self):
        config = AppConfig(
            remote={"demo": True, "base_url": "https://news.example.com"},
            storage={"persist": False},
            sync={"base_delay": 120.0, "max_delay": 60.0},
            logging={"log_level": "CHATTY"},
        )

        warnings = ConfigLoader().validate_config(config)

        assert len(warnings) == 4
        assert any("base_delay" in w for w in warnings)
        assert any("base_url" in w for w in warnings)
        assert any("CHATTY" in w for w in warnings)
        assert any("persist" in w for w in warnings)

    def test_validate_config_clean(self):
        assert ConfigLoader().validate_config(AppConfig()) == []
