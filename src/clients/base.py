"""Capability interfaces for the two services the relay talks to."""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models import ChatMessage


class AIResponderError(Exception):
    """Raised when the AI completion service does not produce a reply."""


class ChatNotifierError(Exception):
    """Raised when a message could not be delivered to the chat platform."""


class ChatClientConfigError(Exception):
    """Raised when a chat client cannot be constructed."""


class AIResponder(ABC):
    """Generates a reply for a single piece of user text."""

    @abstractmethod
    async def send_message(self, text: str) -> str:
        """Return the generated reply, or raise AIResponderError."""
        ...


class ChatNotifier(ABC):
    """Posts a message into a chat channel."""

    @abstractmethod
    async def send_message(self, message: ChatMessage, token: str) -> None:
        """Deliver ``message`` authorized by ``token``, or raise ChatNotifierError."""
        ...
