from __future__ import annotations

import hmac
from typing import Optional


class HandshakeRejected(Exception):
    """Raised when a subscription verification request does not match."""


class SubscriptionHandshake:
    """Validate the Strava push-subscription verification request."""

    def __init__(self, expected_token: str) -> None:
        self._expected_token = expected_token

    def verify(
        self,
        mode: Optional[str],
        token: Optional[str],
        challenge: Optional[str],
    ) -> Optional[str]:
        """Return the challenge to echo, or ``None`` when mode and token are absent or empty.

        Raises ``HandshakeRejected`` for any other combination that is not a
        ``subscribe`` request carrying the expected token.
        """
        if not mode and not token:
            return None
        if (
            mode != "subscribe"
            or token is None
            or not hmac.compare_digest(token.encode(), self._expected_token.encode())
            or challenge is None
        ):
            raise HandshakeRejected("Invalid verification token")
        return challenge


__all__ = ["HandshakeRejected", "SubscriptionHandshake"]
