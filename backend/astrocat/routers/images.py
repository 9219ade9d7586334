import logging

import httpx
from fastapi import APIRouter, BackgroundTasks, Depends, Header, Query, Request
from fastapi.responses import JSONResponse, Response

from .. import schemas, upstream
from ..analytics import AnalyticsEvent, track
from ..dependencies import get_http_client, request_language
from ..fortune import birth_date_label
from ..limiter import limiter
from ..localization import Language, translations_for
from ..rendering import is_mobile_user_agent, templates

logger = logging.getLogger("astrocat.images")
router = APIRouter(tags=["images"])

DOWNLOAD_FAILED = "이미지 다운로드에 실패했습니다."
IMAGE_URL_REJECTED = "허용되지 않은 이미지 주소입니다."


def _attachment(image: upstream.FetchedImage, filename: str) -> Response:
    return Response(
        content=image.content,
        media_type=image.content_type,
        headers={"Content-Disposition": upstream.attachment_disposition(filename)},
    )


@router.post("/api/download-image", responses={400: {"model": schemas.ErrorResponse}, 500: {"model": schemas.ErrorResponse}})
@limiter.limit("30/minute")
async def download_image_proxy(
    request: Request,
    payload: schemas.DownloadImageRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
):
    try:
        image = await upstream.fetch_image(client, payload.image_url)
    except upstream.ImageUrlNotAllowed as exc:
        logger.warning("Image download rejected: %s", exc)
        return JSONResponse(status_code=400, content={"error": IMAGE_URL_REJECTED})
    except upstream.UpstreamError:
        return JSONResponse(status_code=500, content={"error": DOWNLOAD_FAILED})
    return _attachment(image, upstream.image_filename(payload.image_url))


@router.get("/download")
@limiter.limit("30/minute")
async def download_helper(
    request: Request,
    background_tasks: BackgroundTasks,
    image_url: str = Query(min_length=1, max_length=2000),
    reading_type: str = Query(default="fortune", alias="type", max_length=32),
    year: str = Query(default="", max_length=8),
    month: str = Query(default="", max_length=4),
    day: str = Query(default="", max_length=4),
    gender: str = Query(default="", max_length=16),
    user_agent: str | None = Header(default=None, alias="User-Agent"),
    language: Language = Depends(request_language),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """Save a reading image.

    Mobile browsers cannot trigger a file save for cross-origin images, so they
    get a page with the image and a long-press hint. Everyone else gets the
    bytes as an attachment.
    """
    track(
        background_tasks,
        client,
        request,
        AnalyticsEvent.IMAGE_DOWNLOAD,
        {"birth_date": birth_date_label(year, month, day), "gender": gender, "type": reading_type},
    )
    copy = translations_for(language)

    if is_mobile_user_agent(user_agent):
        return templates.TemplateResponse(
            request,
            "mobile_save.html",
            {"copy": copy, "lang": language, "image_url": image_url},
        )

    try:
        image = await upstream.fetch_image(client, image_url)
    except (upstream.ImageUrlNotAllowed, upstream.UpstreamError) as exc:
        logger.warning("Download helper failed | url=%s | reason=%s", image_url, exc)
        return JSONResponse(status_code=500, content={"error": copy["toast"]["downloadFailed"]})
    return _attachment(image, upstream.image_filename(image_url, reading_type))
