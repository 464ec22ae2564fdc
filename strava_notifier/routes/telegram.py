from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends

from ..models import OperationStatus
from ..platform.security import verify_telegram_secret
from ..platform.wiring import provide_command_handler
from ..telegram.application import ChatCommandHandler

logger = logging.getLogger(__name__)

router: APIRouter = APIRouter()


@router.post(
    "/telegram-webhook",
    response_model=OperationStatus,
    include_in_schema=False,
    dependencies=[Depends(verify_telegram_secret)],
)
async def telegram_update(
    update: dict[str, Any] = Body(...),
    commands: ChatCommandHandler = Depends(provide_command_handler),
) -> OperationStatus:
    command = await commands.handle_update(update)
    if command:
        logger.info("Handled /%s for update %s", command, update.get("update_id"))
    return OperationStatus(status="ok")
