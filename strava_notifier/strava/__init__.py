"""Strava integration package."""

from .application import ActivityEventProcessor, Outcome, TokenRefresher
from .domain.formatting import format_activity_message

__all__ = [
    "ActivityEventProcessor",
    "Outcome",
    "TokenRefresher",
    "format_activity_message",
]
