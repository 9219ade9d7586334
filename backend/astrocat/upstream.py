import logging
import time
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, urlparse

import httpx

from . import schemas
from .config import settings

logger = logging.getLogger("astrocat.upstream")

SAJU_READING_PATH = "/saju-reading"
MAX_IMAGE_REDIRECTS = 3


class UpstreamError(Exception):
    """An external service failed or answered with something unusable."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ImageUrlNotAllowed(ValueError):
    pass


@dataclass(frozen=True)
class ImageFile:
    filename: str
    content: bytes
    content_type: str


@dataclass(frozen=True)
class FetchedImage:
    content: bytes
    content_type: str


def saju_reading_url() -> str:
    return f"{settings.saju_backend_url()}{SAJU_READING_PATH}"


def _decode_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise UpstreamError("backend returned a non-JSON body", status_code=response.status_code) from exc


async def _post_backend(client: httpx.AsyncClient, **kwargs: Any) -> httpx.Response:
    url = saju_reading_url()
    started_at = time.perf_counter()
    try:
        response = await client.post(url, timeout=settings.saju_backend_timeout_seconds, **kwargs)
    except httpx.TimeoutException as exc:
        elapsed = time.perf_counter() - started_at
        logger.error("Saju backend timeout after %.1fs | url=%s", elapsed, url)
        raise UpstreamError("backend timeout") from exc
    except httpx.RequestError as exc:
        logger.error("Saju backend unreachable | url=%s | error=%s", url, exc)
        raise UpstreamError(f"backend unreachable: {exc}") from exc

    elapsed = time.perf_counter() - started_at
    if not response.is_success:
        logger.error(
            "Saju backend HTTP error | status=%s | t=%.2fs | body=%s",
            response.status_code,
            elapsed,
            response.text[:300],
        )
        raise UpstreamError("backend returned an error", status_code=response.status_code)

    logger.info("Saju backend success | status=%s | t=%.2fs", response.status_code, elapsed)
    return response


async def forward_saju_request(client: httpx.AsyncClient, body: bytes, content_type: str) -> tuple[int, Any]:
    """Relay a browser request body to the backend byte for byte.

    Returns the backend status code with its decoded JSON body.
    """
    headers = {"Content-Type": content_type} if content_type else {}
    response = await _post_backend(client, content=body, headers=headers)
    return response.status_code, _decode_json(response)


async def request_reading(
    client: httpx.AsyncClient,
    params: schemas.SajuRequestParams,
    image: ImageFile | None = None,
) -> Any:
    files = None
    if image is not None:
        files = {"image": (image.filename, image.content, image.content_type)}
    response = await _post_backend(client, data=params.payload(), files=files)
    return _decode_json(response)


def check_image_url(image_url: str) -> None:
    parsed = urlparse(image_url)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise ImageUrlNotAllowed(f"unsupported image url: {image_url!r}")
    allowed = settings.image_hosts()
    if allowed and parsed.hostname.lower() not in allowed:
        raise ImageUrlNotAllowed(f"image host not allowed: {parsed.hostname}")


async def fetch_image(client: httpx.AsyncClient, image_url: str) -> FetchedImage:
    """Download an image, checking every redirect hop against the host allowlist."""
    url = image_url
    for _ in range(MAX_IMAGE_REDIRECTS + 1):
        check_image_url(url)
        try:
            response = await client.get(
                url,
                timeout=settings.image_download_timeout_seconds,
                follow_redirects=False,
            )
            if response.is_redirect:
                url = str(response.url.join(response.headers["location"]))
                continue
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error("Image download failed | status=%s | url=%s", exc.response.status_code, url)
            raise UpstreamError("image download failed", status_code=exc.response.status_code) from exc
        except httpx.RequestError as exc:
            logger.error("Image download failed | url=%s | error=%s", url, exc)
            raise UpstreamError(f"image download failed: {exc}") from exc

        content_type = response.headers.get("content-type", "").split(";", 1)[0].strip() or "image/png"
        return FetchedImage(content=response.content, content_type=content_type)

    logger.error("Image download failed | too many redirects | url=%s", image_url)
    raise UpstreamError("image download failed: too many redirects")


def image_filename(image_url: str, reading_type: str = "fortune") -> str:
    last_segment = urlparse(image_url).path.rsplit("/", 1)[-1]
    return last_segment or f"{reading_type}-fortune.png"


def attachment_disposition(filename: str) -> str:
    safe_name = filename.replace('"', "").replace("\\", "")
    if not safe_name.isascii():
        safe_name = quote(safe_name)
    return f'attachment; filename="{safe_name}"'
