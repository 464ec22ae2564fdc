"""FastAPI dependency wiring for application use cases."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from functools import partial
from typing import AsyncIterator, Optional

import httpx
from fastapi import Depends, FastAPI, Request

from ..credentials.application.ports import CredentialStore
from ..credentials.infrastructure import create_credential_store
from ..settings import Settings, get_settings
from ..strava.application import (
    ActivityEventProcessor,
    AuthorizeAthleteUseCase,
    StravaClientPort,
    SubscriptionHandshake,
    TokenRefresher,
    build_authorization_url,
)
from ..strava.infrastructure import create_strava_client_adapter
from ..telegram.application import ChatCommandHandler, NotifierPort
from ..telegram.infrastructure import create_telegram_notifier

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Process-wide collaborators, built once at start-up."""

    settings: Settings
    store: CredentialStore
    strava_client: StravaClientPort
    notifier: NotifierPort
    refresher: TokenRefresher
    processor: ActivityEventProcessor
    authorize: AuthorizeAthleteUseCase
    commands: ChatCommandHandler


def build_services(
    settings: Settings,
    http_client: httpx.AsyncClient,
    *,
    store: Optional[CredentialStore] = None,
) -> ServiceContainer:
    store = store or create_credential_store(settings)
    strava_client = create_strava_client_adapter(http_client=http_client, settings=settings)
    notifier = create_telegram_notifier(http_client=http_client, settings=settings)
    refresher = TokenRefresher(strava_client, store)
    authorization_url = partial(build_authorization_url, settings)
    processor = ActivityEventProcessor(
        strava_client,
        store,
        refresher,
        notifier,
        authorization_url=(
            authorization_url if settings.reauth_prompt_on_refresh_failure else None
        ),
    )
    return ServiceContainer(
        settings=settings,
        store=store,
        strava_client=strava_client,
        notifier=notifier,
        refresher=refresher,
        processor=processor,
        authorize=AuthorizeAthleteUseCase(strava_client, store, notifier),
        commands=ChatCommandHandler(
            store, notifier, authorization_url, project_url=settings.project_url
        ),
    )


@asynccontextmanager
async def service_lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as http_client:
        services = build_services(settings, http_client)
        await services.store.initialize()
        logger.info("Credential store ready (%s backend)", settings.credential_backend)
        app.state.services = services
        yield


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def provide_event_processor(
    services: ServiceContainer = Depends(get_services),
) -> ActivityEventProcessor:
    return services.processor


def provide_authorize_use_case(
    services: ServiceContainer = Depends(get_services),
) -> AuthorizeAthleteUseCase:
    return services.authorize


def provide_credential_store(
    services: ServiceContainer = Depends(get_services),
) -> CredentialStore:
    return services.store


def provide_strava_client(
    services: ServiceContainer = Depends(get_services),
) -> StravaClientPort:
    return services.strava_client


def provide_command_handler(
    services: ServiceContainer = Depends(get_services),
) -> ChatCommandHandler:
    return services.commands


def provide_subscription_handshake(
    settings: Settings = Depends(get_settings),
) -> SubscriptionHandshake:
    return SubscriptionHandshake(settings.strava_verify_token)


__all__ = [
    "ServiceContainer",
    "build_services",
    "get_services",
    "provide_authorize_use_case",
    "provide_command_handler",
    "provide_credential_store",
    "provide_event_processor",
    "provide_strava_client",
    "provide_subscription_handshake",
    "service_lifespan",
]
