from __future__ import annotations

from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException, Query

from ..credentials import CredentialStore, StorageError
from ..models import AuthorizationLink, AuthorizedAthlete
from ..platform.wiring import provide_credential_store, provide_strava_client
from ..settings import Settings, get_settings
from ..strava.application import StravaClientPort, TransportError, build_authorization_url

router: APIRouter = APIRouter()


@router.get("/authorize-url", response_model=AuthorizationLink)
async def get_authorization_url(
    notify_target: str = Query(..., description="Chat that should receive notifications."),
    settings: Settings = Depends(get_settings),
) -> AuthorizationLink:
    return AuthorizationLink(url=build_authorization_url(settings, notify_target))


@router.post("/subscriptions")
async def create_subscription(
    settings: Settings = Depends(get_settings),
    client: StravaClientPort = Depends(provide_strava_client),
) -> dict[str, Any]:
    try:
        return await client.create_subscription(
            f"{settings.app_url.rstrip('/')}/webhook", settings.strava_verify_token
        )
    except TransportError as exc:
        raise HTTPException(status_code=400, detail={"error": str(exc)})


@router.get("/subscriptions")
async def list_subscriptions(
    client: StravaClientPort = Depends(provide_strava_client),
) -> list[dict[str, Any]]:
    try:
        return await client.list_subscriptions()
    except TransportError as exc:
        raise HTTPException(status_code=400, detail={"error": str(exc)})


@router.get("/athletes", response_model=List[AuthorizedAthlete])
async def list_athletes(
    store: CredentialStore = Depends(provide_credential_store),
) -> List[AuthorizedAthlete]:
    try:
        credentials = await store.list_credentials()
    except StorageError as exc:
        raise HTTPException(status_code=503, detail={"error": str(exc)})
    return [
        AuthorizedAthlete(
            athlete_id=credential.athlete_id,
            display_name=credential.display_name,
            notify_target=credential.notify_target,
            expires_at=credential.expires_at,
        )
        for credential in credentials
    ]
