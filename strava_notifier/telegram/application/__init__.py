"""Application layer for Telegram delivery."""

from .commands import ChatCommandHandler
from .ports import DispatchError, InlineButton, NotifierPort

__all__ = ["ChatCommandHandler", "DispatchError", "InlineButton", "NotifierPort"]
