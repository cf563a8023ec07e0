"""Tests for configuration validation with Pydantic."""

import pytest
import yaml
from pydantic import ValidationError

from apisync.domain.config import AppConfig, RetryPolicy, SourceSpec, SyncConfig
from apisync.infrastructure.config.config_manager import ConfigManager, ConfigurationError


@pytest.fixture(autouse=True)
def _isolate(tmp_path, monkeypatch):
    """Run from an empty directory without APISYNC_* variables"""
    monkeypatch.chdir(tmp_path)
    for name in ConfigManager.ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)


class TestRetryPolicyValidation:
    """Tests for RetryPolicy validation."""

    def test_defaults(self):
        """Test default retry policy"""
        policy = RetryPolicy()
        assert policy.max_attempts == 3
        assert policy.timeout == 5.0
        assert policy.delay == 1.0

    def test_max_attempts_zero(self):
        """Test max_attempts must be positive"""
        with pytest.raises(ValidationError, match="max_attempts"):
            RetryPolicy(max_attempts=0)

    def test_timeout_must_be_positive(self):
        """Test timeout must be strictly positive"""
        with pytest.raises(ValidationError, match="timeout"):
            RetryPolicy(timeout=0)

    def test_many_attempts_allowed(self):
        """Test max_attempts has no upper bound"""
        assert RetryPolicy(max_attempts=25).max_attempts == 25

    def test_zero_delay_allowed(self):
        """Test zero delay is a valid immediate retry"""
        assert RetryPolicy(delay=0).delay == 0

    def test_negative_delay(self):
        """Test negative delay is rejected"""
        with pytest.raises(ValidationError, match="delay"):
            RetryPolicy(delay=-1)

    def test_policy_is_immutable(self):
        """Test policy cannot be mutated after construction"""
        policy = RetryPolicy()
        with pytest.raises(ValidationError):
            policy.max_attempts = 5


class TestSourceSpecValidation:
    """Tests for SourceSpec validation."""

    def test_valid_source(self):
        source = SourceSpec(name="users", endpoint="https://example.test/users", destination="users.json")
        assert source.name == "users"

    def test_endpoint_must_be_http(self):
        with pytest.raises(ValidationError, match="endpoint"):
            SourceSpec(name="users", endpoint="ftp://example.test/users", destination="users.json")

    def test_empty_name(self):
        with pytest.raises(ValidationError, match="name"):
            SourceSpec(name="", endpoint="https://example.test", destination="users.json")

    @pytest.mark.parametrize("destination", ["/etc/passwd", "../users.json", "data/../../x.json"])
    def test_destination_must_stay_relative(self, destination):
        with pytest.raises(ValidationError, match="destination"):
            SourceSpec(name="users", endpoint="https://example.test", destination=destination)


class TestAppConfigValidation:
    """Tests for AppConfig validation."""

    def test_default_sources(self):
        """Test the default source registry"""
        config = AppConfig()
        assert [s.name for s in config.sources] == ["users", "posts"]
        assert config.sources[0].destination == "usuarios_sync.json"

    def test_default_sync_policy(self):
        """Test sync policy defaults differ from the one-off fetch policy"""
        config = AppConfig()
        assert config.sync.retry == RetryPolicy(max_attempts=3, timeout=4.0, delay=1.5)
        assert config.retry == RetryPolicy()

    def test_unknown_field_rejected(self):
        """Test unknown fields are rejected"""
        with pytest.raises(ValidationError, match="extra"):
            AppConfig(unknown_field="value")

    def test_duplicate_source_names(self):
        """Test source names must be unique"""
        source = {"name": "a", "endpoint": "http://a.test", "destination": "a.json"}
        with pytest.raises(ValidationError, match="duplicate source name"):
            AppConfig(sources=[source, source])

    def test_nested_validation(self):
        """Test nested validation works"""
        with pytest.raises(ValidationError, match="max_attempts"):
            AppConfig(sync={"retry": {"max_attempts": 0}})


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_default_config_is_valid(self):
        """Test default configuration is valid"""
        manager = ConfigManager()
        assert manager.config_path is None
        assert isinstance(manager.config, AppConfig)
        assert isinstance(manager.get_sync_config(), SyncConfig)
        assert isinstance(manager.get_retry_config(), RetryPolicy)

    def test_load_config_from_file(self, tmp_path):
        """Test file values are merged over defaults"""
        config_path = tmp_path / "custom.yml"
        config_path.write_text(
            yaml.dump(
                {
                    "sources": [
                        {"name": "todos", "endpoint": "https://example.test/todos", "destination": "todos.json"}
                    ],
                    "sync": {"retry": {"max_attempts": 5}},
                }
            ),
            encoding="utf-8",
        )

        manager = ConfigManager(config_path=config_path)

        assert [s.name for s in manager.get_sources()] == ["todos"]
        assert manager.get_sync_config().retry.max_attempts == 5
        # untouched keys keep their defaults
        assert manager.get_sync_config().retry.delay == 1.5

    def test_config_file_is_found_from_subdirectory(self, tmp_path, monkeypatch):
        """Test .apisync.yml is searched in parent directories"""
        (tmp_path / ".apisync.yml").write_text("sync:\n  output_dir: data\n", encoding="utf-8")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        manager = ConfigManager()

        assert manager.get_sync_config().output_dir == "data"

    def test_invalid_config_raises_error(self, tmp_path):
        """Test loading invalid configuration raises error"""
        config_path = tmp_path / "bad.yml"
        config_path.write_text(yaml.dump({"retry": {"timeout": -1}}), encoding="utf-8")

        with pytest.raises(ConfigurationError, match="retry.timeout"):
            ConfigManager(config_path=config_path)

    def test_unparseable_yaml_raises_error(self, tmp_path):
        config_path = tmp_path / "broken.yml"
        config_path.write_text("sources: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Failed to load config"):
            ConfigManager(config_path=config_path)

    def test_env_overrides_work(self, monkeypatch):
        """Test environment variable overrides"""
        monkeypatch.setenv("APISYNC_OUTPUT_DIR", "/tmp/out")
        monkeypatch.setenv("APISYNC_MAX_ATTEMPTS", "7")
        monkeypatch.setenv("APISYNC_DELAY", "0")

        manager = ConfigManager()

        sync_config = manager.get_sync_config()
        assert sync_config.output_dir == "/tmp/out"
        assert sync_config.retry.max_attempts == 7
        assert sync_config.retry.delay == 0

    def test_invalid_env_override(self, monkeypatch):
        monkeypatch.setenv("APISYNC_TIMEOUT", "soon")

        with pytest.raises(ConfigurationError, match="APISYNC_TIMEOUT"):
            ConfigManager()

    def test_get_source_by_name(self):
        manager = ConfigManager()

        assert manager.get_source("posts").destination == "posts_sync.json"
        with pytest.raises(KeyError, match="Available sources: users, posts"):
            manager.get_source("missing")

    def test_retry_env_overrides_apply_to_fetch_policy(self, monkeypatch):
        """Test APISYNC_* retry variables reach both sync and fetch policies"""
        monkeypatch.setenv("APISYNC_MAX_ATTEMPTS", "4")
        monkeypatch.setenv("APISYNC_TIMEOUT", "2.5")
        monkeypatch.setenv("APISYNC_DELAY", "0")

        manager = ConfigManager()

        expected = RetryPolicy(max_attempts=4, timeout=2.5, delay=0)
        assert manager.get_retry_config() == expected
        assert manager.get_sync_config().retry == expected
