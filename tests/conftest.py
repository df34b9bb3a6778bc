"""Shared test fixtures for the chat relay."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.audit.logger import AuditLogger
from src.clients.base import AIResponder, ChatNotifier
from src.config import RelayConfig
from src.models import AuditEvent, AuditEventType, RiskLevel, WebhookPayload

TOKEN = "T"


@pytest.fixture
def mock_audit_logger() -> MagicMock:
    return MagicMock(spec=AuditLogger)


@pytest.fixture
def ai_responder() -> AsyncMock:
    responder = AsyncMock(spec=AIResponder)
    responder.send_message.return_value = "hi there"
    return responder


@pytest.fixture
def chat_notifier() -> AsyncMock:
    notifier = AsyncMock(spec=ChatNotifier)
    notifier.send_message.return_value = None
    return notifier


@pytest.fixture
def relay_config() -> RelayConfig:
    return make_config()


# --- Factory functions for test data ---


def make_config(**kwargs: Any) -> RelayConfig:
    """Factory for RelayConfig with sensible defaults."""
    defaults: dict[str, Any] = {
        "chat_base_url": "https://nas.example.com:5001",
        "outgoing_token": TOKEN,
        "anthropic_api_key": "sk-ant-test",
    }
    defaults.update(kwargs)
    return RelayConfig(**defaults)


def make_payload(**kwargs: Any) -> WebhookPayload:
    """Factory for WebhookPayload with sensible defaults."""
    defaults: dict[str, Any] = {
        "token": TOKEN,
        "channel_id": "12",
        "channel_name": "general",
        "user_id": "4",
        "username": "alice",
        "post_id": "9001",
        "timestamp": "1718000000000",
        "text": "claude hello",
        "trigger_word": "claude",
    }
    defaults.update(kwargs)
    return WebhookPayload(**defaults)


def payload_body(**kwargs: Any) -> bytes:
    return make_payload(**kwargs).model_dump_json().encode()


def make_audit_event(**kwargs: Any) -> AuditEvent:
    """Factory for AuditEvent with sensible defaults."""
    defaults: dict[str, Any] = {
        "event_type": AuditEventType.AUTH_FAILURE,
        "action": "verify_token",
        "result": "rejected",
        "risk_level": RiskLevel.HIGH,
    }
    defaults.update(kwargs)
    return AuditEvent(**defaults)


def anthropic_reply(*texts: str) -> dict[str, Any]:
    """A Messages API response body with one text block per argument."""
    return {
        "id": "msg_01",
        "type": "message",
        "role": "assistant",
        "content": [{"type": "text", "text": t} for t in texts],
        "stop_reason": "end_turn",
    }
