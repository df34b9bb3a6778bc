"""Webhook relay handler: Synology Chat → Anthropic → Synology Chat.

Each request runs the same linear pipeline and stops at the first
failure:

1. Method check (POST only)
2. Read body
3. Decode payload
4. Token check (constant time)
5. Ask the AI responder for a reply
6. Post the reply back to the chat platform
"""

from __future__ import annotations

import hmac
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from pydantic import ValidationError
from starlette.requests import ClientDisconnect

from src.clients.base import AIResponderError, ChatNotifierError
from src.models import AuditEvent, AuditEventType, ChatMessage, RiskLevel, WebhookPayload
from src.webhook.models import RelayOutcome, WebhookResponse

if TYPE_CHECKING:
    from src.audit.logger import AuditLogger
    from src.clients.base import AIResponder, ChatNotifier

logger = logging.getLogger(__name__)

BodyReader = Callable[[], Awaitable[bytes]]

_AUDIT_RESULTS: dict[AuditEventType, tuple[str, RiskLevel]] = {
    AuditEventType.AUTH_FAILURE: ("rejected", RiskLevel.HIGH),
    AuditEventType.PAYLOAD_REJECTED: ("rejected", RiskLevel.MEDIUM),
    AuditEventType.AI_FAILURE: ("failure", RiskLevel.LOW),
    AuditEventType.CHAT_FAILURE: ("failure", RiskLevel.LOW),
    AuditEventType.RELAY_SUCCESS: ("success", RiskLevel.INFO),
}


class WebhookRelayHandler:
    """Relays one outgoing-webhook notification per call to :meth:`handle`.

    The configured outgoing token both authenticates the inbound webhook
    and authorizes the reply post; Synology Chat issues a single token
    per integration.
    """

    def __init__(
        self,
        ai_responder: AIResponder,
        chat_notifier: ChatNotifier,
        outgoing_token: str,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._ai = ai_responder
        self._chat = chat_notifier
        self._token = outgoing_token
        self._audit = audit_logger

    async def handle(
        self,
        method: str,
        read_body: BodyReader,
        source_ip: str | None = None,
    ) -> WebhookResponse:
        if method.upper() != "POST":
            return WebhookResponse(RelayOutcome.METHOD_REJECTED, 405, "Method not allowed")

        try:
            body = await read_body()
        except (ClientDisconnect, OSError) as exc:
            logger.warning("Failed to read webhook body: %r", exc)
            self._record(AuditEventType.PAYLOAD_REJECTED, "read_body", source_ip)
            return WebhookResponse(
                RelayOutcome.PARSE_REJECTED, 400, "Failed to read request body",
            )

        payload = self.parse_payload(body)
        if payload is None:
            self._record(AuditEventType.PAYLOAD_REJECTED, "parse_payload", source_ip)
            return WebhookResponse(
                RelayOutcome.PARSE_REJECTED, 400, "Failed to parse JSON payload",
            )

        if not self.verify_token(payload):
            logger.warning("Rejected webhook with invalid token from %s", source_ip or "unknown")
            self._record(AuditEventType.AUTH_FAILURE, "verify_token", source_ip, payload)
            return WebhookResponse(RelayOutcome.AUTH_REJECTED, 401, "Invalid token")

        return await self.relay(payload, source_ip)

    async def relay(
        self, payload: WebhookPayload, source_ip: str | None = None,
    ) -> WebhookResponse:
        """Forward an authenticated payload's text and post the reply."""
        try:
            reply = await self._ai.send_message(payload.text)
        except AIResponderError as exc:
            logger.error("Failed to get response from AI responder: %s", exc)
            self._record(AuditEventType.AI_FAILURE, "ai_completion", source_ip, payload)
            return WebhookResponse(RelayOutcome.AI_FAILED, 500, "Failed to process message")

        try:
            await self._chat.send_message(ChatMessage(text=reply), self._token)
        except ChatNotifierError as exc:
            logger.error("Failed to send message to chat platform: %s", exc)
            self._record(AuditEventType.CHAT_FAILURE, "chat_send", source_ip, payload)
            return WebhookResponse(RelayOutcome.CHAT_FAILED, 500, "Failed to send response")

        logger.info(
            "Relayed message for channel %s post %s",
            payload.channel_id or "-", payload.post_id or "-",
        )
        self._record(AuditEventType.RELAY_SUCCESS, "relay", source_ip, payload)
        return WebhookResponse(RelayOutcome.SUCCEEDED, 200)

    @staticmethod
    def parse_payload(body: bytes) -> WebhookPayload | None:
        """Decode a webhook body; None when it is not a payload object."""
        try:
            return WebhookPayload.model_validate_json(body)
        except ValidationError as exc:
            logger.warning("Failed to parse webhook payload: %d error(s)", exc.error_count())
            return None

    def verify_token(self, payload: WebhookPayload) -> bool:
        return hmac.compare_digest(payload.token.encode(), self._token.encode())

    def _record(
        self,
        event_type: AuditEventType,
        action: str,
        source_ip: str | None,
        payload: WebhookPayload | None = None,
    ) -> None:
        if not self._audit:
            return
        result, risk = _AUDIT_RESULTS[event_type]
        details: dict[str, object] | None = None
        if payload is not None:
            details = {
                "channel_id": payload.channel_id,
                "user_id": payload.user_id,
                "post_id": payload.post_id,
            }
        self._audit.log(AuditEvent(
            event_type=event_type,
            source_ip=source_ip,
            user_id=payload.user_id if payload else None,
            action=action,
            result=result,
            risk_level=risk,
            details=details,
        ))
