"""
messaging/base.py
-----------------
The provider contract shared by the Telegram and WhatsApp transports.
"""

import io
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class MessageResult:
    """Outcome of a single send call."""
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class MessagingProvider(ABC):
    """
    Minimal outbound messaging interface.

    Providers never raise on delivery failures; they report them through
    MessageResult so callers can classify and retry.
    """

    platform: str = ""

    @abstractmethod
    def is_connected(self) -> bool:
        """True when the provider is able to send right now."""

    @abstractmethod
    async def send_text(self, chat_id: str, text: str) -> MessageResult:
        """Send a plain text message."""

    @abstractmethod
    async def send_photo(self, chat_id: str, photo: io.BytesIO,
                         caption: Optional[str] = None) -> MessageResult:
        """Send an image with an optional caption."""

    async def close(self) -> None:
        """Release network resources."""
