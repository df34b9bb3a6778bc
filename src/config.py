"""Relay configuration assembled once from environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MODEL = "claude-3-5-sonnet-20240620"
DEFAULT_ANTHROPIC_BASE_URL = "https://api.anthropic.com"
DEFAULT_PORT = 8080

_SECRET_FIELDS = ("outgoing_token", "anthropic_api_key")


class ConfigError(Exception):
    """Raised when a required environment value is missing or malformed."""

    def __init__(self, variable: str, reason: str = "is not set") -> None:
        self.variable = variable
        super().__init__(f"{variable} environment variable {reason}")


class RelayConfig(BaseModel):
    """Immutable process configuration, injected into the app factory."""

    model_config = ConfigDict(frozen=True)

    chat_base_url: str
    outgoing_token: str
    anthropic_api_key: str
    anthropic_model: str = DEFAULT_MODEL
    anthropic_max_tokens: int = Field(default=1024, gt=0)
    anthropic_base_url: str = DEFAULT_ANTHROPIC_BASE_URL
    port: int = Field(default=DEFAULT_PORT, gt=0, lt=65536)
    upstream_timeout: float | None = 120.0
    audit_log_path: str | None = None
    audit_log_max_bytes: int = 10_485_760
    audit_log_backup_count: int = 5

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RelayConfig:
        """Read configuration from ``environ`` (defaults to ``os.environ``).

        Empty values count as unset. Raises ConfigError on the first
        missing required variable or unparseable number.
        """
        env = os.environ if environ is None else environ

        def required(name: str) -> str:
            value = env.get(name, "")
            if not value:
                raise ConfigError(name)
            return value

        def optional(name: str, default: str) -> str:
            return env.get(name, "") or default

        def number(name: str, default: str, kind: type[int] | type[float]) -> int | float:
            raw = optional(name, default)
            try:
                return kind(raw)
            except ValueError:
                raise ConfigError(name, f"must be a number, got {raw!r}") from None

        chat_base_url = required("SYNOLOGY_CHAT_BASE_URL")
        outgoing_token = required("SYNOLOGY_CHAT_OUTGOING_TOKEN")
        api_key = required("ANTHROPIC_API_KEY")

        port = number("PORT", str(DEFAULT_PORT), int)
        if not 0 < port < 65536:
            raise ConfigError("PORT", f"must be between 1 and 65535, got {port}")
        max_tokens = number("ANTHROPIC_MAX_TOKENS", "1024", int)
        if max_tokens <= 0:
            raise ConfigError("ANTHROPIC_MAX_TOKENS", "must be positive")
        # 0 disables the upstream timeout
        timeout = number("RELAY_UPSTREAM_TIMEOUT", "120", float)

        return cls(
            chat_base_url=chat_base_url,
            outgoing_token=outgoing_token,
            anthropic_api_key=api_key,
            anthropic_model=optional("ANTHROPIC_MODEL", DEFAULT_MODEL),
            anthropic_max_tokens=max_tokens,
            anthropic_base_url=optional("ANTHROPIC_BASE_URL", DEFAULT_ANTHROPIC_BASE_URL),
            port=port,
            upstream_timeout=timeout if timeout > 0 else None,
            audit_log_path=env.get("AUDIT_LOG_PATH") or None,
            audit_log_max_bytes=number("AUDIT_LOG_MAX_BYTES", "10485760", int),
            audit_log_backup_count=number("AUDIT_LOG_BACKUP_COUNT", "5", int),
        )

    def redacted(self) -> dict[str, object]:
        """Config as a dict with secret values masked, for display."""
        data = self.model_dump()
        for name in _SECRET_FIELDS:
            data[name] = "***"
        return data
