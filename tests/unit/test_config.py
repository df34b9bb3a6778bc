"""Tests for environment configuration loading."""

from __future__ import annotations

import pytest

from src.config import DEFAULT_MODEL, ConfigError, RelayConfig

REQUIRED = {
    "SYNOLOGY_CHAT_BASE_URL": "https://nas.example.com:5001",
    "SYNOLOGY_CHAT_OUTGOING_TOKEN": "outgoing-token",
    "ANTHROPIC_API_KEY": "sk-ant-test",
}


def _env(**overrides: str) -> dict[str, str]:
    env = dict(REQUIRED)
    env.update(overrides)
    return env


def test_defaults_applied() -> None:
    config = RelayConfig.from_env(_env())
    assert config.chat_base_url == "https://nas.example.com:5001"
    assert config.outgoing_token == "outgoing-token"
    assert config.anthropic_model == DEFAULT_MODEL
    assert config.port == 8080
    assert config.anthropic_max_tokens == 1024
    assert config.upstream_timeout == 120.0
    assert config.audit_log_path is None


@pytest.mark.parametrize("name", sorted(REQUIRED))
def test_missing_required_value_raises(name: str) -> None:
    env = _env()
    del env[name]
    with pytest.raises(ConfigError) as exc_info:
        RelayConfig.from_env(env)
    assert exc_info.value.variable == name
    assert name in str(exc_info.value)


def test_empty_value_counts_as_missing() -> None:
    with pytest.raises(ConfigError, match="ANTHROPIC_API_KEY"):
        RelayConfig.from_env(_env(ANTHROPIC_API_KEY=""))


def test_optional_overrides() -> None:
    config = RelayConfig.from_env(_env(
        ANTHROPIC_MODEL="claude-3-haiku-20240307",
        ANTHROPIC_MAX_TOKENS="256",
        PORT="9000",
        AUDIT_LOG_PATH="/tmp/audit.jsonl",
    ))
    assert config.anthropic_model == "claude-3-haiku-20240307"
    assert config.anthropic_max_tokens == 256
    assert config.port == 9000
    assert config.audit_log_path == "/tmp/audit.jsonl"


def test_empty_model_falls_back_to_default() -> None:
    config = RelayConfig.from_env(_env(ANTHROPIC_MODEL=""))
    assert config.anthropic_model == DEFAULT_MODEL


def test_invalid_port_raises() -> None:
    with pytest.raises(ConfigError, match="PORT"):
        RelayConfig.from_env(_env(PORT="http"))
    with pytest.raises(ConfigError, match="PORT"):
        RelayConfig.from_env(_env(PORT="70000"))


def test_zero_timeout_disables_timeout() -> None:
    config = RelayConfig.from_env(_env(RELAY_UPSTREAM_TIMEOUT="0"))
    assert config.upstream_timeout is None


def test_reads_os_environ_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    for name, value in REQUIRED.items():
        monkeypatch.setenv(name, value)
    monkeypatch.setenv("PORT", "8181")
    assert RelayConfig.from_env().port == 8181


def test_config_is_immutable() -> None:
    config = RelayConfig.from_env(_env())
    with pytest.raises(ValueError):
        config.port = 1  # type: ignore[misc]


def test_redacted_masks_secrets() -> None:
    data = RelayConfig.from_env(_env()).redacted()
    assert data["outgoing_token"] == "***"
    assert data["anthropic_api_key"] == "***"
    assert data["chat_base_url"] == "https://nas.example.com:5001"
