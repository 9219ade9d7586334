import logging

import httpx
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse

from .. import schemas, upstream
from ..analytics import AnalyticsEvent, track
from ..dependencies import get_http_client, request_language
from ..fortune import birth_date_label, fallback_reading, fallback_saju_payload, params_from_request, reading_from_backend
from ..limiter import limiter
from ..localization import Language

logger = logging.getLogger("astrocat.saju")
router = APIRouter(prefix="/api", tags=["saju"])


@router.post("/saju")
@limiter.limit("20/minute")
async def proxy_saju_reading(
    request: Request,
    language: Language = Depends(request_language),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """Relay a reading request (JSON or multipart) to the saju backend.

    The backend's JSON and 2xx status are returned untouched on success. Any
    failure yields the fixed fallback payload with status 500 so the page can
    still render.
    """
    body = await request.body()
    content_type = request.headers.get("content-type", "")
    try:
        status_code, data = await upstream.forward_saju_request(client, body, content_type)
    except upstream.UpstreamError as exc:
        logger.warning("Saju proxy fallback | status=%s | reason=%s", exc.status_code, exc)
        return JSONResponse(status_code=500, content=fallback_saju_payload(language))
    return JSONResponse(status_code=status_code, content=data)


@router.post("/fortune", response_model=schemas.ReadingResult)
@limiter.limit("20/minute")
async def request_fortune(
    request: Request,
    payload: schemas.FortuneRequest,
    background_tasks: BackgroundTasks,
    client: httpx.AsyncClient = Depends(get_http_client),
):
    track(
        background_tasks,
        client,
        request,
        AnalyticsEvent.FORTUNE_SUBMITTED,
        {
            "birth_date": birth_date_label(payload.year, payload.month, payload.day),
            "gender": payload.gender,
            "reading_type": payload.reading_type,
        },
    )
    params = params_from_request(payload)
    try:
        data = await upstream.request_reading(client, params)
    except upstream.UpstreamError as exc:
        logger.warning("Fortune request failed | reading_type=%s | reason=%s", payload.reading_type, exc)
        return JSONResponse(status_code=500, content=fallback_reading(payload.language).model_dump())
    return reading_from_backend(data, payload.language)
