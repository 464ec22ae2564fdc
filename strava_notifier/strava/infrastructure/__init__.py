"""Infrastructure adapters for the Strava integration."""

from .client import StravaClient, create_strava_client_adapter

__all__ = ["StravaClient", "create_strava_client_adapter"]
