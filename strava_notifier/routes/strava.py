from __future__ import annotations

import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import HTMLResponse
from pydantic import ValidationError

from ..credentials import StorageError
from ..models import ActivityEvent, OperationStatus
from ..platform.wiring import (
    provide_authorize_use_case,
    provide_event_processor,
    provide_subscription_handshake,
)
from ..strava.application import (
    ActivityEventProcessor,
    AuthorizeAthleteUseCase,
    HandshakeRejected,
    Outcome,
    StravaError,
    SubscriptionHandshake,
)

logger = logging.getLogger(__name__)

router: APIRouter = APIRouter()

AUTHORIZED_PAGE = (
    "<!doctype html><html><head><meta charset=\"utf-8\"><title>Strava connected</title>"
    "</head><body><p>Everything worked, you can close this window.</p></body></html>"
)


@router.get("/auth", response_class=HTMLResponse, include_in_schema=False)
async def authorization_callback(
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    authorize: AuthorizeAthleteUseCase = Depends(provide_authorize_use_case),
) -> HTMLResponse:
    if error or not code or not state:
        logger.warning("Authorization callback without code/state (error=%s)", error)
        raise HTTPException(status_code=400, detail={"error": "Authorization was not granted"})

    try:
        await authorize(code, state)
    except (StravaError, StorageError):
        logger.exception("Authorization callback failed for chat %s", state)
        raise HTTPException(status_code=500, detail={"error": "Server error"})
    return HTMLResponse(AUTHORIZED_PAGE)


@router.get("/webhook", include_in_schema=False)
async def verify_subscription(
    hub_mode: Optional[str] = Query(None, alias="hub.mode"),
    hub_challenge: Optional[str] = Query(None, alias="hub.challenge"),
    hub_verify_token: Optional[str] = Query(None, alias="hub.verify_token"),
    handshake: SubscriptionHandshake = Depends(provide_subscription_handshake),
) -> dict[str, str]:
    try:
        challenge = handshake.verify(hub_mode, hub_verify_token, hub_challenge)
    except HandshakeRejected:
        raise HTTPException(status_code=403, detail={"error": "Invalid verification token"})
    if challenge is None:
        raise HTTPException(
            status_code=400, detail={"error": "Missing hub.mode and hub.verify_token"}
        )
    logger.info("Webhook subscription verified")
    return {"hub.challenge": challenge}


@router.post("/webhook", response_model=OperationStatus, include_in_schema=False)
async def activity_event(
    request: Request,
    processor: ActivityEventProcessor = Depends(provide_event_processor),
) -> OperationStatus:
    body = await request.body()

    try:
        payload: Any = json.loads(body)
        event = ActivityEvent.model_validate(payload)
    except (ValueError, ValidationError):
        logger.warning("Invalid Strava webhook payload: %s", body.decode("utf-8", "replace"))
        return OperationStatus(status="ok", outcome=Outcome.IGNORED.value)

    logger.info("[ACTIVITY] %s %s %s", event.object_type, event.aspect_type, event.object_id)
    try:
        outcome = await processor.handle(event)
    except Exception:
        # Every event is acknowledged.
        logger.exception("Unhandled error processing activity %s", event.object_id)
        outcome = Outcome.DROPPED
    return OperationStatus(status="ok", outcome=outcome.value)
