"""Telegram Bot API implementation of the notifier port."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import httpx

from ...settings import Settings
from ..application.ports import DispatchError, InlineButton, NotifierPort

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"


class TelegramNotifier(NotifierPort):
    """Send Markdown messages through the Telegram Bot API."""

    def __init__(self, http_client: httpx.AsyncClient, settings: Settings) -> None:
        self._http_client = http_client
        self._base_url = f"{TELEGRAM_API_URL}/bot{settings.telegram_bot_token}"

    async def send_message(
        self,
        target: str,
        text: str,
        *,
        buttons: Optional[Sequence[InlineButton]] = None,
    ) -> None:
        payload: dict[str, Any] = {
            "chat_id": target,
            "text": text,
            "parse_mode": "Markdown",
            "disable_web_page_preview": True,
        }
        if buttons:
            payload["reply_markup"] = {
                "inline_keyboard": [
                    [{"text": button.text, "url": button.url}] for button in buttons
                ]
            }

        try:
            response = await self._http_client.post(f"{self._base_url}/sendMessage", json=payload)
        except httpx.HTTPError as exc:
            raise DispatchError(f"Telegram request failed: {exc}") from exc

        if response.status_code != 200:
            logger.error(
                "Failed to send Telegram message to %s (%s): %s",
                target,
                response.status_code,
                response.text,
            )
            raise DispatchError(f"Telegram responded with {response.status_code}")


def create_telegram_notifier(
    *, http_client: httpx.AsyncClient, settings: Settings
) -> NotifierPort:
    """Create a Telegram notifier without FastAPI dependencies."""
    return TelegramNotifier(http_client=http_client, settings=settings)


__all__ = ["TelegramNotifier", "create_telegram_notifier"]
