import httpx
from fastapi import Header, Query, Request

from .config import settings
from .localization import Language, normalize_language


def create_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=settings.saju_backend_timeout_seconds,
        follow_redirects=True,
    )


def get_http_client(request: Request) -> httpx.AsyncClient:
    client = getattr(request.app.state, "http_client", None)
    if client is None or client.is_closed:
        client = create_http_client()
        request.app.state.http_client = client
    return client


def request_language(
    lang: str | None = Query(default=None, max_length=16),
    accept_language: str | None = Header(default=None, alias="Accept-Language"),
) -> Language:
    """Explicit ?lang= wins over the browser's Accept-Language."""
    return normalize_language(lang or accept_language)
