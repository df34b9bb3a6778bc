"""Shared Pydantic data models for the chat relay."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# --- Enums ---


class AuditEventType(str, Enum):
    AUTH_FAILURE = "auth_failure"
    PAYLOAD_REJECTED = "payload_rejected"
    AI_FAILURE = "ai_failure"
    CHAT_FAILURE = "chat_failure"
    RELAY_SUCCESS = "relay_success"


class RiskLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


# --- Webhook Models ---


class WebhookPayload(BaseModel):
    """Outgoing-webhook notification posted by a Synology Chat channel.

    Every field is a string; absent fields decode as "". Only ``token``
    and ``text`` drive the relay, the rest is channel metadata.
    """

    model_config = ConfigDict(frozen=True, strict=True, extra="ignore")

    token: str = ""
    channel_id: str = ""
    channel_name: str = ""
    user_id: str = ""
    username: str = ""
    post_id: str = ""
    timestamp: str = ""
    text: str = ""
    trigger_word: str = ""


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str


# --- Audit Models ---


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class AuditEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    event_type: AuditEventType
    source_ip: str | None = None
    user_id: str | None = None
    action: str
    result: str  # "success" | "failure" | "rejected"
    risk_level: RiskLevel
    details: dict[str, object] | None = None
