"""Anthropic Messages API client."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from src.clients.base import AIResponder, AIResponderError

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicClient(AIResponder):
    """Single-turn completion against ``/v1/messages``."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://api.anthropic.com",
        max_tokens: int = 1024,
        timeout: float | None = 120.0,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._base_url = base_url
        self._max_tokens = max_tokens
        self._timeout = timeout

    @property
    def model(self) -> str:
        return self._model

    def build_request(self, text: str) -> dict[str, Any]:
        """Translate user text into a Messages API request body."""
        return {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "messages": [{"role": "user", "content": text}],
        }

    async def send_message(self, text: str) -> str:
        url = f"{self._base_url.rstrip('/')}/v1/messages"
        headers = {
            "x-api-key": self._api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(verify=True) as client:
                resp = await client.post(
                    url, json=self.build_request(text), headers=headers,
                    timeout=self._timeout,
                )
        except httpx.HTTPError as exc:
            logger.warning("Anthropic request to %s failed: %r", url, exc)
            raise AIResponderError(f"Anthropic request failed: {exc!r}") from exc

        # ValueError also covers bodies that are not valid UTF-8
        try:
            body = resp.json()
        except ValueError as exc:
            logger.warning("Anthropic returned undecodable body (status %d)", resp.status_code)
            raise AIResponderError(
                f"Anthropic returned non-JSON response (status {resp.status_code})",
            ) from exc

        if resp.status_code >= 400:
            logger.warning("Anthropic returned status %d", resp.status_code)
            raise AIResponderError(
                f"Anthropic returned status {resp.status_code}: {_error_message(body)}",
            )

        return self.extract_reply(body)

    @staticmethod
    def extract_reply(body: Any) -> str:
        """Join the text blocks of a Messages API response."""
        content = body.get("content") if isinstance(body, dict) else None
        if not isinstance(content, list):
            raise AIResponderError("Anthropic response has no content")
        texts = [
            block["text"] for block in content
            if isinstance(block, dict)
            and block.get("type") == "text"
            and isinstance(block.get("text"), str)
        ]
        if not texts:
            raise AIResponderError("Anthropic response has no text content")
        return "".join(texts)


def _error_message(body: Any) -> str:
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return "unknown error"
