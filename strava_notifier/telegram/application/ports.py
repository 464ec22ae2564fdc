"""Ports for delivering notifications to chats."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import NamedTuple, Optional, Sequence


class DispatchError(RuntimeError):
    """Raised when a notification could not be delivered."""


class InlineButton(NamedTuple):
    """Link button rendered in an inline keyboard."""

    text: str
    url: str


class NotifierPort(ABC):
    """Interface describing notification dispatch."""

    @abstractmethod
    async def send_message(
        self,
        target: str,
        text: str,
        *,
        buttons: Optional[Sequence[InlineButton]] = None,
    ) -> None:
        """Send ``text`` (Markdown) to ``target``; raise ``DispatchError`` on failure."""


__all__ = ["DispatchError", "InlineButton", "NotifierPort"]
