"""
messaging/whatsapp_provider.py
------------------------------
Outbound messaging through the WhatsApp Cloud API over httpx.

Chat IDs may be full JIDs ("5511999999999@s.whatsapp.net"); the API only
needs the phone number, so everything after '@' is dropped. LIDs
("123456789@lid") are anonymous ids, not numbers, and are refused without
a request.
"""

import io
from typing import Optional

import httpx

from config import (
    WHATSAPP_API_BASE,
    WHATSAPP_API_TOKEN,
    WHATSAPP_PHONE_NUMBER_ID,
    WHATSAPP_TIMEOUT_SECONDS,
)
from messaging.base import MessageResult, MessagingProvider
from utils.logger import get_logger

logger = get_logger(__name__)

LID_UNSUPPORTED_ERROR = "invalid number: LID recipients are not supported by the Cloud API"


def jid_to_number(chat_id: str) -> str:
    """'5511999999999@s.whatsapp.net' → '5511999999999'."""
    return chat_id.split("@", 1)[0].split(":", 1)[0]


def is_lid(chat_id: str) -> bool:
    return chat_id.endswith("@lid")


def _lid_unsupported(chat_id: str) -> MessageResult:
    logger.warning(f"Cannot send to {chat_id}: LID recipients are not supported, a phone number is needed")
    return MessageResult(success=False, error=LID_UNSUPPORTED_ERROR)


class WhatsAppProvider(MessagingProvider):
    """Client for the WhatsApp Cloud API messages endpoint."""

    platform = "whatsapp"

    def __init__(self, token: str | None = None, phone_number_id: str | None = None,
                 client: httpx.AsyncClient | None = None):
        self.token = token or WHATSAPP_API_TOKEN
        self.phone_number_id = phone_number_id or WHATSAPP_PHONE_NUMBER_ID
        self.client = client or httpx.AsyncClient(
            base_url=WHATSAPP_API_BASE,
            timeout=WHATSAPP_TIMEOUT_SECONDS,
        )

    def is_connected(self) -> bool:
        return bool(self.token and self.phone_number_id) and not self.client.is_closed

    async def _post(self, path: str, **kwargs) -> httpx.Response:
        return await self.client.post(
            path,
            headers={"Authorization": f"Bearer {self.token}"},
            **kwargs,
        )

    async def send_text(self, chat_id: str, text: str) -> MessageResult:
        if is_lid(chat_id):
            return _lid_unsupported(chat_id)
        payload = {
            "messaging_product": "whatsapp",
            "to": jid_to_number(chat_id),
            "type": "text",
            "text": {"body": text},
        }
        try:
            response = await self._post(f"/{self.phone_number_id}/messages", json=payload)
            response.raise_for_status()
            messages = response.json().get("messages") or [{}]
            return MessageResult(success=True, message_id=messages[0].get("id"))
        except httpx.HTTPStatusError as e:
            error = f"{e.response.status_code} {e.response.text}"
            logger.warning(f"WhatsApp send to {chat_id} rejected: {error}")
            return MessageResult(success=False, error=error)
        except httpx.RequestError as e:
            logger.warning(f"WhatsApp send to {chat_id} failed: network error {e!r}")
            return MessageResult(success=False, error=f"network error: {e!r}")

    async def send_photo(self, chat_id: str, photo: io.BytesIO,
                         caption: Optional[str] = None) -> MessageResult:
        if is_lid(chat_id):
            return _lid_unsupported(chat_id)
        try:
            upload = await self._post(
                f"/{self.phone_number_id}/media",
                data={"messaging_product": "whatsapp", "type": "image/png"},
                files={"file": ("chart.png", photo.getvalue(), "image/png")},
            )
            upload.raise_for_status()
            media_id = upload.json()["id"]

            payload = {
                "messaging_product": "whatsapp",
                "to": jid_to_number(chat_id),
                "type": "image",
                "image": {"id": media_id, "caption": caption or ""},
            }
            response = await self._post(f"/{self.phone_number_id}/messages", json=payload)
            response.raise_for_status()
            messages = response.json().get("messages") or [{}]
            return MessageResult(success=True, message_id=messages[0].get("id"))
        except httpx.HTTPStatusError as e:
            error = f"{e.response.status_code} {e.response.text}"
            logger.warning(f"WhatsApp photo to {chat_id} rejected: {error}")
            return MessageResult(success=False, error=error)
        except httpx.RequestError as e:
            logger.warning(f"WhatsApp photo to {chat_id} failed: network error {e!r}")
            return MessageResult(success=False, error=f"network error: {e!r}")

    async def close(self) -> None:
        await self.client.aclose()
