import logging

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from .. import schemas
from ..dependencies import get_http_client
from ..limiter import limiter
from ..notifications import kakao_share_message, post_to_webhook, subscribe_message
from ..upstream import UpstreamError

logger = logging.getLogger("astrocat.webhooks")
router = APIRouter(prefix="/api", tags=["webhooks"])


async def _notify(client: httpx.AsyncClient, text: str, source: str):
    try:
        await post_to_webhook(client, text)
    except UpstreamError as exc:
        logger.error("%s notification failed: %s", source, exc)
        return JSONResponse(status_code=500, content={"success": False})
    return schemas.SuccessResponse(success=True)


@router.post("/subscribe", response_model=schemas.SuccessResponse)
@limiter.limit("5/minute")
async def subscribe(
    request: Request,
    payload: schemas.SubscribeRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
):
    return await _notify(client, subscribe_message(payload.email), "Subscribe")


@router.post("/kakao-callback", response_model=schemas.SuccessResponse)
@limiter.limit("30/minute")
async def kakao_callback(
    request: Request,
    payload: schemas.KakaoCallbackRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
):
    return await _notify(client, kakao_share_message(payload.referrer), "Kakao callback")
