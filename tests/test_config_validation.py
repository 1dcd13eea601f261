"""Tests for configuration validation with Pydantic."""

import pytest
import yaml
from pydantic import ValidationError

from axonflow.domain.config import AxonFlowConfig, CachePolicy, Mode, RetryPolicy
from axonflow.domain.errors import ConfigurationError
from axonflow.infrastructure.config.config_manager import ConfigManager


class TestRetryPolicyValidation:
    """Tests for RetryPolicy validation."""

    def test_defaults(self):
        policy = RetryPolicy.defaults()
        assert policy.enabled is True
        assert policy.max_attempts == 3
        assert policy.initial_delay == 1.0
        assert policy.max_delay == 30.0
        assert policy.multiplier == 2.0

    def test_disabled(self):
        assert RetryPolicy.disabled().enabled is False

    @pytest.mark.parametrize("attempts", [0, 11, -1])
    def test_max_attempts_out_of_range(self, attempts):
        with pytest.raises(ValidationError, match="max_attempts"):
            RetryPolicy(max_attempts=attempts)

    def test_multiplier_below_one_rejected(self):
        with pytest.raises(ValidationError, match="multiplier"):
            RetryPolicy(multiplier=0.5)

    def test_negative_delays_rejected(self):
        with pytest.raises(ValidationError, match="initial_delay"):
            RetryPolicy(initial_delay=-1)
        with pytest.raises(ValidationError, match="max_delay"):
            RetryPolicy(max_delay=-0.1)

    def test_policy_is_immutable(self):
        policy = RetryPolicy()
        with pytest.raises(ValidationError):
            policy.max_attempts = 5


class TestDelayForAttempt:
    def test_growth_and_ceiling(self):
        policy = RetryPolicy(initial_delay=1.0, multiplier=2.0, max_delay=30.0)
        assert policy.delay_for_attempt(1) == 1.0
        assert policy.delay_for_attempt(2) == 2.0
        assert policy.delay_for_attempt(3) == 4.0
        assert policy.delay_for_attempt(5) == 16.0
        # Raw 32s is clamped
        assert policy.delay_for_attempt(6) == 30.0

    def test_attempt_zero_uses_initial_delay(self):
        assert RetryPolicy(initial_delay=0.25).delay_for_attempt(0) == 0.25

    def test_multiplier_one_is_constant(self):
        policy = RetryPolicy(initial_delay=0.5, multiplier=1.0)
        assert [policy.delay_for_attempt(n) for n in range(1, 5)] == [0.5, 0.5, 0.5, 0.5]


class TestCachePolicyValidation:
    def test_defaults(self):
        policy = CachePolicy.defaults()
        assert policy.enabled is True
        assert policy.ttl == 60.0
        assert policy.max_entries == 1000

    def test_max_entries_must_be_positive(self):
        with pytest.raises(ValidationError, match="max_entries"):
            CachePolicy(max_entries=0)

    def test_negative_ttl_rejected(self):
        with pytest.raises(ValidationError, match="ttl"):
            CachePolicy(ttl=-1)


class TestAxonFlowConfigValidation:
    def test_defaults(self):
        config = AxonFlowConfig()
        assert config.agent_url == "http://localhost:8080"
        assert config.mode is Mode.PRODUCTION
        assert config.is_localhost
        assert config.retry == RetryPolicy()
        assert config.cache == CachePolicy()

    def test_trailing_slash_stripped(self):
        assert AxonFlowConfig(agent_url="https://agent.example.com/").agent_url == "https://agent.example.com"

    def test_empty_url_rejected(self):
        with pytest.raises(ValidationError, match="agent_url"):
            AxonFlowConfig(agent_url="  ")

    def test_remote_url_is_not_localhost(self):
        assert not AxonFlowConfig(agent_url="https://agent.example.com").is_localhost

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            AxonFlowConfig(license="nope")

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError, match="timeout"):
            AxonFlowConfig(timeout=0)

    def test_nested_policies_from_dict(self):
        config = AxonFlowConfig(retry={"max_attempts": 5}, cache={"enabled": False})
        assert config.retry.max_attempts == 5
        assert config.cache.enabled is False


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "AXONFLOW_AGENT_URL",
        "AXONFLOW_CLIENT_ID",
        "AXONFLOW_MODE",
        "AXONFLOW_TIMEOUT_SECONDS",
        "AXONFLOW_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)


class TestConfigManager:
    def test_defaults_without_file(self, clean_env):
        manager = ConfigManager(search=False)
        assert manager.config == AxonFlowConfig()

    def test_loads_yaml_file(self, clean_env, tmp_path):
        config_file = tmp_path / ".axonflow.yml"
        config_file.write_text(
            yaml.safe_dump(
                {
                    "agent_url": "https://agent.example.com",
                    "mode": "sandbox",
                    "retry": {"max_attempts": 5, "initial_delay": 0.5},
                    "cache": {"ttl": 120, "max_entries": 10},
                    "headers": {"X-License-Key": "lic-123"},
                }
            )
        )

        manager = ConfigManager(config_file)

        assert manager.config.agent_url == "https://agent.example.com"
        assert manager.config.mode is Mode.SANDBOX
        assert manager.get_retry_policy().max_attempts == 5
        assert manager.get_cache_policy().max_entries == 10
        assert manager.get("retry.initial_delay") == 0.5
        assert manager.get("headers")["X-License-Key"] == "lic-123"
        assert manager.get("retry.unknown", "fallback") == "fallback"

    def test_finds_config_in_parent_directory(self, clean_env, tmp_path, monkeypatch):
        (tmp_path / ".axonflow.yml").write_text("client_id: from-file\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        assert ConfigManager().config.client_id == "from-file"

    def test_env_overrides_file(self, clean_env, tmp_path, monkeypatch):
        config_file = tmp_path / "config.yml"
        config_file.write_text("agent_url: https://file.example.com\nclient_id: file-client\n")
        monkeypatch.setenv("AXONFLOW_AGENT_URL", "https://env.example.com")
        monkeypatch.setenv("AXONFLOW_MODE", "SANDBOX")
        monkeypatch.setenv("AXONFLOW_TIMEOUT_SECONDS", "15")
        monkeypatch.setenv("AXONFLOW_DEBUG", "True")

        config = ConfigManager(config_file).config

        assert config.agent_url == "https://env.example.com"
        assert config.client_id == "file-client"
        assert config.mode is Mode.SANDBOX
        assert config.timeout == 15.0
        assert config.debug is True

    def test_invalid_timeout_env_is_ignored(self, clean_env, monkeypatch):
        monkeypatch.setenv("AXONFLOW_TIMEOUT_SECONDS", "soon")
        assert ConfigManager(search=False).config.timeout == 60.0

    def test_invalid_values_raise_configuration_error(self, clean_env, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text("retry:\n  max_attempts: 50\n")

        with pytest.raises(ConfigurationError, match="retry.max_attempts"):
            ConfigManager(config_file)

    def test_partial_section_keeps_model_defaults(self, clean_env, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text("retry:\n  max_attempts: 5\n")

        manager = ConfigManager(config_file)

        assert manager.get_retry_policy() == RetryPolicy(max_attempts=5)
        assert manager.get_cache_policy() == CachePolicy()

    def test_non_mapping_yaml_falls_back_to_defaults(self, clean_env, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text("- agent_url\n- client_id\n")

        assert ConfigManager(config_file).config == AxonFlowConfig()

    def test_unreadable_yaml_falls_back_to_defaults(self, clean_env, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text("agent_url: [unclosed\n")

        assert ConfigManager(config_file).config == AxonFlowConfig()
