"""Pure helpers for Telegram message text."""

from .markdown import escape_markdown

__all__ = ["escape_markdown"]
