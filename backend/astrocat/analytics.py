"""Best-effort analytics via the GA4 Measurement Protocol.

Events are always logged. When GA credentials are configured they are also
posted to GA4 from a background task; delivery failures are only logged.
"""

import logging
from enum import Enum
from typing import Any
from uuid import uuid4

import httpx
from fastapi import BackgroundTasks, Request

from .config import settings

logger = logging.getLogger("astrocat.analytics")

CLIENT_ID_COOKIE = "astrocat_cid"


class AnalyticsEvent(str, Enum):
    LANGUAGE_SELECTED = "initial_setup_complete"
    FORTUNE_SUBMITTED = "fortune_submit"
    IMAGE_DOWNLOAD = "image_download"
    KAKAO_SHARE = "kakao_share"
    RECOMMENDED_CLICK = "recommended_reading_click"
    PAGE_VIEW = "page_view"


EVENT_LABELS = {
    AnalyticsEvent.LANGUAGE_SELECTED.value: "초기_설정_완료",
    AnalyticsEvent.FORTUNE_SUBMITTED.value: "사주 보기",
    AnalyticsEvent.IMAGE_DOWNLOAD.value: "이미지 다운로드",
    AnalyticsEvent.KAKAO_SHARE.value: "카카오톡 공유하기",
    AnalyticsEvent.RECOMMENDED_CLICK.value: "추천 사주풀이 클릭",
    AnalyticsEvent.PAGE_VIEW.value: "페이지 조회",
}


def client_id_for(request: Request) -> str:
    client_id = request.cookies.get(CLIENT_ID_COOKIE) or getattr(request.state, "analytics_client_id", None)
    if not client_id:
        client_id = uuid4().hex
        request.state.analytics_client_id = client_id
    return client_id


def _clean_params(params: dict[str, Any]) -> dict[str, Any]:
    # GA4 only accepts scalar parameter values.
    return {k: v for k, v in params.items() if isinstance(v, (str, int, float, bool))}


async def send_event(
    client: httpx.AsyncClient,
    client_id: str,
    event_name: str,
    params: dict[str, Any] | None = None,
) -> bool:
    params = _clean_params(params or {})
    logger.info(
        "Analytics event | client_id=%s | event=%s | params=%s",
        client_id,
        EVENT_LABELS.get(event_name, event_name),
        params,
    )
    if not settings.analytics_enabled():
        return False

    try:
        response = await client.post(
            settings.ga_collect_url,
            params={"measurement_id": settings.ga_measurement_id, "api_secret": settings.ga_api_secret},
            json={"client_id": client_id, "events": [{"name": event_name, "params": params}]},
            timeout=settings.analytics_timeout_seconds,
        )
        response.raise_for_status()
    except Exception as exc:
        logger.warning("Analytics delivery failed | event=%s | error=%s", event_name, exc)
        return False
    return True


def track(
    background_tasks: BackgroundTasks,
    client: httpx.AsyncClient,
    request: Request,
    event: AnalyticsEvent | str,
    params: dict[str, Any] | None = None,
) -> None:
    event_name = event.value if isinstance(event, AnalyticsEvent) else event
    background_tasks.add_task(send_event, client, client_id_for(request), event_name, params)
