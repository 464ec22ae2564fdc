from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from ...credentials.application.ports import CredentialStore, StorageError
from ..domain.markdown import escape_markdown
from .ports import DispatchError, InlineButton, NotifierPort

logger = logging.getLogger(__name__)


class ChatCommandHandler:
    """Answer the handful of chat commands the bot understands."""

    def __init__(
        self,
        store: CredentialStore,
        notifier: NotifierPort,
        authorization_url: Callable[[str], str],
        *,
        project_url: Optional[str] = None,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._authorization_url = authorization_url
        self._project_url = project_url

    async def handle_update(self, update: dict[str, Any]) -> Optional[str]:
        """Dispatch one Telegram update; return the command handled, if any."""
        message = update.get("message") or update.get("channel_post") or {}
        text = (message.get("text") or "").strip()
        chat_id = (message.get("chat") or {}).get("id")
        if not text.startswith("/") or chat_id is None:
            return None

        # "/auth@SomeBot extra" -> "auth"
        command = text.split()[0][1:].split("@", 1)[0].lower()
        target = str(chat_id)
        try:
            if command in {"start", "auth"}:
                await self._send_authorization_link(target)
            elif command == "status":
                await self._send_status(target)
            elif command == "ping":
                await self._notifier.send_message(target, "pong")
            elif command == "credit":
                await self._notifier.send_message(target, self._credit_text())
            else:
                return None
        except DispatchError:
            logger.exception("Failed to answer /%s in chat %s", command, target)
        return command

    async def _send_authorization_link(self, target: str) -> None:
        url = self._authorization_url(target)
        await self._notifier.send_message(
            target,
            "🤖 Connect Strava to post your activities here.",
            buttons=[InlineButton("Authorize Strava", url)],
        )

    async def _send_status(self, target: str) -> None:
        try:
            credential = await self._store.find_by_notify_target(target)
        except StorageError:
            logger.exception("Could not load status for chat %s", target)
            await self._notifier.send_message(
                target, "🚨 Could not fetch the status. Please try again later."
            )
            return

        if credential is None:
            await self._notifier.send_message(
                target, "😢 *Not authorized.* Use /auth to connect Strava."
            )
            return
        await self._notifier.send_message(
            target,
            f"*Athlete:* {escape_markdown(credential.display_name)}\n*Status:* ✅ Authorized",
        )

    def _credit_text(self) -> str:
        if self._project_url:
            return f"Strava Notifier: [source code]({self._project_url})"
        return "Strava Notifier relays your Strava activities to this chat."


__all__ = ["ChatCommandHandler"]
