"""Shared test fixtures and doubles."""

from __future__ import annotations

import threading
from collections.abc import AsyncIterator, Iterator
from typing import Any, Dict, List, Optional, Set

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from strava_notifier import main
from strava_notifier.models import ActivityEvent
from strava_notifier.platform.clients import RedisClient
from strava_notifier.platform.wiring import (
    provide_authorize_use_case,
    provide_command_handler,
    provide_credential_store,
    provide_event_processor,
    provide_strava_client,
)
from strava_notifier.settings import Settings, get_settings
from strava_notifier.strava.application import Outcome, TokenRefresher
from strava_notifier.telegram.application import ChatCommandHandler

from tests.builders import NOW
from tests.fakes import InMemoryCredentialStore, NotifierSpy, StravaClientFake


class RedisFake(RedisClient):
    """In-memory Redis double that records interactions."""

    def __init__(self) -> None:
        self.store: Dict[str, str] = {}
        self.expirations: Dict[str, Optional[int]] = {}
        self._last_set: tuple[str, str, Optional[int]] | None = None
        self._error: Exception | None = None
        self.sets: Dict[str, Set[str]] = {}
        self.thread_ids: Set[int] = set()

    def failing_with(self, error: Exception) -> "RedisFake":
        self._error = error
        return self

    def assert_last_set(self, key: str, value: Optional[str] = None) -> None:
        """Assert the most recent ``set`` call matched the provided values."""

        assert self._last_set is not None, "No set() call was recorded"
        last_key, last_value, _ = self._last_set
        assert last_key == key, f"Expected last set for {key!r}, saw {last_key!r}"
        if value is not None:
            assert last_value == value, f"Expected last set value {value!r}, saw {last_value!r}"

    def get(self, key: str) -> Optional[str]:
        self._maybe_fail()
        return self.store.get(key)

    def set(self, key: str, value: str, ex: Optional[int] = None) -> None:
        self._maybe_fail()
        self._last_set = (key, value, ex)
        self.store[key] = value
        self.expirations[key] = ex

    def delete(self, *keys: str) -> int:
        self._maybe_fail()
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
        return removed

    def sadd(self, key: str, *members: str) -> int:
        self._maybe_fail()
        current = self.sets.setdefault(key, set())
        added = len(set(members) - current)
        current.update(members)
        return added

    def smembers(self, key: str) -> List[str]:
        self._maybe_fail()
        return sorted(self.sets.get(key, set()))

    def _maybe_fail(self) -> None:
        self.thread_ids.add(threading.get_ident())
        if self._error is not None:
            raise self._error


class EventProcessorSpy:
    """Spy double for ``ActivityEventProcessor`` interactions."""

    def __init__(self) -> None:
        self.handled: List[ActivityEvent] = []
        self._outcome: Outcome = Outcome.DELIVERED

    def returning(self, outcome: Outcome) -> "EventProcessorSpy":
        self._outcome = outcome
        return self

    def assert_last_handled(self, object_id: int | None = None) -> ActivityEvent:
        assert self.handled, "handle() was not invoked"
        last = self.handled[-1]
        if object_id is not None:
            assert last.object_id == object_id, f"Expected {object_id}, saw {last.object_id}"
        return last

    async def handle(self, event: ActivityEvent) -> Outcome:
        self.handled.append(event)
        return self._outcome


class AuthorizeSpy:
    """Spy double for ``AuthorizeAthleteUseCase``."""

    def __init__(self) -> None:
        self.calls: List[tuple[str, str]] = []
        self._raises: Exception | None = None

    def raising(self, error: Exception) -> "AuthorizeSpy":
        self._raises = error
        return self

    async def __call__(self, code: str, notify_target: str) -> Any:
        self.calls.append((code, notify_target))
        if self._raises:
            raise self._raises
        return None


@pytest.fixture
def settings() -> Settings:
    """Canonical settings instance reused across tests."""

    return Settings(
        api_key="test-key",
        app_url="https://relay.example.com",
        strava_client_id="strava-client",
        strava_client_secret="strava-secret",
        strava_verify_token="verify-token",
        telegram_bot_token="123:bot-token",
        telegram_webhook_secret="telegram-secret",
        credential_backend="sql",
        database_url="sqlite+pysqlite:///:memory:",
    )


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(NOW)


@pytest.fixture
def redis_fake() -> RedisFake:
    return RedisFake()


@pytest.fixture
def credential_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture
def strava_fake() -> StravaClientFake:
    return StravaClientFake()


@pytest.fixture
def notifier_spy() -> NotifierSpy:
    return NotifierSpy()


@pytest.fixture
def refresher(
    strava_fake: StravaClientFake,
    credential_store: InMemoryCredentialStore,
    clock: FrozenClock,
) -> TokenRefresher:
    return TokenRefresher(strava_fake, credential_store, clock=clock)


@pytest.fixture
def event_processor_spy() -> EventProcessorSpy:
    return EventProcessorSpy()


@pytest.fixture
def authorize_spy() -> AuthorizeSpy:
    return AuthorizeSpy()


@pytest.fixture
def app(
    settings: Settings,
    strava_fake: StravaClientFake,
    credential_store: InMemoryCredentialStore,
    notifier_spy: NotifierSpy,
    event_processor_spy: EventProcessorSpy,
    authorize_spy: AuthorizeSpy,
) -> Iterator[FastAPI]:
    """Configured FastAPI application instance for integration tests."""

    app = main.app
    commands = ChatCommandHandler(
        credential_store, notifier_spy, lambda target: f"https://auth.example/{target}"
    )
    overrides = {
        get_settings: lambda: settings,
        provide_event_processor: lambda: event_processor_spy,
        provide_authorize_use_case: lambda: authorize_spy,
        provide_strava_client: lambda: strava_fake,
        provide_command_handler: lambda: commands,
        provide_credential_store: lambda: credential_store,
    }
    app.dependency_overrides.update(overrides)
    try:
        yield app
    finally:
        for dependency in overrides:
            app.dependency_overrides.pop(dependency, None)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    """Async HTTP client bound to the FastAPI app."""

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as api_client:
        yield api_client


class FrozenClock:
    """Mutable epoch-seconds clock injected into the token refresher."""

    def __init__(self, current: float) -> None:
        self.current = current

    def advance(self, seconds: float) -> None:
        self.current += seconds

    def __call__(self) -> float:
        return self.current

