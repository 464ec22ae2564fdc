"""Telegram integration package."""

from .application import DispatchError, InlineButton, NotifierPort

__all__ = ["DispatchError", "InlineButton", "NotifierPort"]
