from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict

from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse

from .platform.security import verify_api_key
from .platform.wiring import service_lifespan
from .routes.admin import router as admin_router
from .routes.strava import router as strava_router
from .routes.telegram import router as telegram_router
from .settings import get_settings

logger = logging.getLogger(__name__)

_QUIET_PATHS = {"/", "/healthz"}


def configure_logging() -> None:
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging()
    async with service_lifespan(app):
        yield


app: FastAPI = FastAPI(
    title="Strava Notifier",
    version="1.0.0",
    description="Relays completed Strava activities to Telegram chats",
    lifespan=lifespan,
)


@app.middleware("http")
async def log_requests(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    if request.url.path not in _QUIET_PATHS:
        logger.info("[%s] %s", request.method, request.url.path)
    return await call_next(request)


@app.api_route("/", methods=["GET", "HEAD"], include_in_schema=False)
@app.api_route("/healthz", methods=["GET", "HEAD"], include_in_schema=False)
async def healthz() -> dict[str, str]:
    """Lightweight endpoint used for health checks."""
    return {"status": "ok"}


@app.get("/v2/api-schema")
async def get_api_schema(request: Request, _: Any = Depends(verify_api_key)) -> JSONResponse:
    """Return the OpenAPI schema for this API version."""
    openapi_schema: Dict[str, Any] = request.app.openapi()
    return JSONResponse(openapi_schema)


app.include_router(admin_router, prefix="/v2", dependencies=[Depends(verify_api_key)])

# Strava and Telegram call these directly (no API key security)
app.include_router(strava_router)
app.include_router(telegram_router)
