"""Infrastructure adapters for Telegram."""

from .client import TelegramNotifier, create_telegram_notifier

__all__ = ["TelegramNotifier", "create_telegram_notifier"]
