"""Tests for webhook payload and audit models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.models import AuditEventType, ChatMessage, WebhookPayload
from tests.conftest import make_audit_event


class TestWebhookPayload:
    def test_decodes_full_payload(self) -> None:
        body = (
            '{"token":"T","channel_id":"1","channel_name":"general","user_id":"2",'
            '"username":"bob","post_id":"3","timestamp":"1700000000",'
            '"text":"claude hi","trigger_word":"claude"}'
        )
        payload = WebhookPayload.model_validate_json(body)
        assert payload.token == "T"
        assert payload.channel_name == "general"
        assert payload.text == "claude hi"
        assert payload.trigger_word == "claude"

    def test_missing_fields_default_to_empty(self) -> None:
        payload = WebhookPayload.model_validate_json('{"token":"T","text":"hello"}')
        assert payload.channel_id == ""
        assert payload.username == ""
        assert payload.trigger_word == ""

    def test_unknown_fields_ignored(self) -> None:
        payload = WebhookPayload.model_validate_json('{"token":"T","extra":42}')
        assert payload.token == "T"

    def test_non_string_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            WebhookPayload.model_validate_json('{"token":123,"text":"hi"}')

    @pytest.mark.parametrize("body", ["not json", "[1, 2]", '"text"', "null", ""])
    def test_non_object_body_rejected(self, body: str) -> None:
        with pytest.raises(ValidationError):
            WebhookPayload.model_validate_json(body)

    def test_payload_is_immutable(self) -> None:
        payload = WebhookPayload(token="T", text="hi")
        with pytest.raises(ValidationError):
            payload.text = "changed"  # type: ignore[misc]


def test_chat_message_serializes_text_only() -> None:
    assert ChatMessage(text="hi there").model_dump_json() == '{"text":"hi there"}'


def test_audit_event_has_iso_timestamp() -> None:
    event = make_audit_event(event_type=AuditEventType.RELAY_SUCCESS)
    assert "T" in event.timestamp
    assert event.model_dump()["event_type"] == "relay_success"
