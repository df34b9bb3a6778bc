"""Result types for the webhook relay handler."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RelayOutcome(str, Enum):
    """Terminal outcome of one webhook request."""

    METHOD_REJECTED = "method_rejected"
    PARSE_REJECTED = "parse_rejected"
    AUTH_REJECTED = "auth_rejected"
    AI_FAILED = "ai_failed"
    CHAT_FAILED = "chat_failed"
    SUCCEEDED = "succeeded"


@dataclass(frozen=True)
class WebhookResponse:
    """Plain-text response to return to the chat platform."""

    outcome: RelayOutcome
    status_code: int
    text: str = ""
