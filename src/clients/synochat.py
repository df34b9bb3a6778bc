"""Synology Chat incoming-webhook client.

Messages are posted to ``/webapi/entry.cgi`` of the Synology DSM host as
a form field ``payload`` holding the JSON message, authorized by the
integration token passed (quoted) in the query string.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from src.clients.base import ChatClientConfigError, ChatNotifier, ChatNotifierError
from src.models import ChatMessage

logger = logging.getLogger(__name__)

_ENTRY_PATH = "/webapi/entry.cgi"
_API_NAME = "SYNO.Chat.External"
_API_VERSION = "2"


class SynologyChatClient(ChatNotifier):
    """Posts messages to Synology Chat through its incoming webhook API."""

    def __init__(self, base_url: str, timeout: float | None = 120.0) -> None:
        try:
            url = httpx.URL(base_url)
        except (httpx.InvalidURL, TypeError) as exc:
            raise ChatClientConfigError(f"Invalid Synology Chat base URL: {base_url!r}") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise ChatClientConfigError(
                f"Synology Chat base URL must be an absolute http(s) URL: {base_url!r}",
            )
        self._base_url = str(url).rstrip("/")
        self._timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}{_ENTRY_PATH}"

    @staticmethod
    def build_params(token: str) -> dict[str, str]:
        return {
            "api": _API_NAME,
            "method": "incoming",
            "version": _API_VERSION,
            "token": f'"{token}"',
        }

    async def send_message(self, message: ChatMessage, token: str) -> None:
        form = {"payload": message.model_dump_json()}

        try:
            async with httpx.AsyncClient(verify=True) as client:
                resp = await client.post(
                    self.endpoint, params=self.build_params(token), data=form,
                    timeout=self._timeout,
                )
        except httpx.HTTPError as exc:
            logger.warning("Synology Chat request to %s failed: %r", self.endpoint, exc)
            raise ChatNotifierError(f"Synology Chat request failed: {exc!r}") from exc

        if resp.status_code >= 400:
            logger.warning("Synology Chat returned status %d", resp.status_code)
            raise ChatNotifierError(f"Synology Chat returned status {resp.status_code}")

        # ValueError also covers bodies that are not valid UTF-8
        try:
            body = resp.json()
        except ValueError as exc:
            logger.warning("Synology Chat returned undecodable body")
            raise ChatNotifierError("Synology Chat returned non-JSON response") from exc

        if not isinstance(body, dict) or body.get("success") is not True:
            raise ChatNotifierError(f"Synology Chat rejected message: {_error_detail(body)}")


def _error_detail(body: Any) -> str:
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        error = body["error"]
        code = error.get("code")
        errors = error.get("errors")
        if errors:
            return f"code {code}: {errors}"
        return f"code {code}"
    return "unexpected response"
