"""Strava client double with expectation helpers."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from strava_notifier.models import ActivityDetail, TokenGrant
from strava_notifier.strava.application import StravaClientPort


@dataclass
class _Expectation:
    returns: Any = None
    raises: Exception | None = None


class StravaClientFake(StravaClientPort):
    """Queue responses per operation and record the calls made."""

    def __init__(self) -> None:
        self._expectations: Dict[str, List[_Expectation]] = {
            "exchange_code": [],
            "refresh_token": [],
            "get_activity": [],
        }
        self.calls: Dict[str, List[tuple]] = {name: [] for name in self._expectations}
        self.refresh_gate: Optional[asyncio.Event] = None

    def expect_exchange_code(
        self, *, returns: TokenGrant | None = None, raises: Exception | None = None
    ) -> "StravaClientFake":
        self._expectations["exchange_code"].append(_Expectation(returns, raises))
        return self

    def expect_refresh_token(
        self, *, returns: TokenGrant | None = None, raises: Exception | None = None
    ) -> "StravaClientFake":
        self._expectations["refresh_token"].append(_Expectation(returns, raises))
        return self

    def expect_get_activity(
        self, *, returns: ActivityDetail | None = None, raises: Exception | None = None
    ) -> "StravaClientFake":
        self._expectations["get_activity"].append(_Expectation(returns, raises))
        return self

    def call_count(self, name: str) -> int:
        return len(self.calls[name])

    def total_calls(self) -> int:
        return sum(len(calls) for calls in self.calls.values())

    async def exchange_code(self, code: str) -> TokenGrant:
        return self._respond("exchange_code", code)

    async def refresh_token(self, refresh_token: str) -> TokenGrant:
        self.calls["refresh_token"].append((refresh_token,))
        if self.refresh_gate is not None:
            await self.refresh_gate.wait()
        return self._pop("refresh_token")

    async def get_activity(self, activity_id: int, access_token: str) -> ActivityDetail:
        return self._respond("get_activity", activity_id, access_token)

    async def create_subscription(self, callback_url: str, verify_token: str) -> dict[str, Any]:
        return {"id": 1, "callback_url": callback_url}

    async def list_subscriptions(self) -> list[dict[str, Any]]:
        return []

    def _respond(self, name: str, *args: Any) -> Any:
        self.calls[name].append(args)
        return self._pop(name)

    def _pop(self, name: str) -> Any:
        expectations = self._expectations[name]
        if not expectations:
            raise AssertionError(f"Unexpected {name}() call")
        expectation = expectations.pop(0)
        if expectation.raises:
            raise expectation.raises
        return expectation.returns
