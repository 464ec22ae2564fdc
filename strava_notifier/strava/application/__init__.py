"""Application layer for the Strava integration."""

from .authorization import AuthorizeAthleteUseCase, build_authorization_url
from .handshake import HandshakeRejected, SubscriptionHandshake
from .ports import (
    RefreshFailed,
    StravaAuthError,
    StravaClientPort,
    StravaError,
    TransportError,
)
from .processor import ActivityEventProcessor, Outcome
from .refresher import TokenRefresher

__all__ = [
    "ActivityEventProcessor",
    "AuthorizeAthleteUseCase",
    "HandshakeRejected",
    "Outcome",
    "RefreshFailed",
    "StravaAuthError",
    "StravaClientPort",
    "StravaError",
    "SubscriptionHandshake",
    "TokenRefresher",
    "TransportError",
    "build_authorization_url",
]
