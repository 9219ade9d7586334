import json
import logging
from typing import Any

import httpx

from .config import settings

logger = logging.getLogger("astrocat.share")

KAKAO_MEMO_PATH = "/v2/api/talk/memo/default/send"
DESCRIPTION_LIMIT = 100


def build_feed_card(
    image_url: str,
    name: str,
    description: str,
    page_url: str,
    copy: dict[str, Any],
) -> dict[str, Any]:
    """Kakao "feed" template for a reading result."""
    link = {"web_url": page_url, "mobile_web_url": page_url}
    return {
        "object_type": "feed",
        "content": {
            "title": f"{name}{copy['toast']['kakaoTitle']}",
            "description": description[:DESCRIPTION_LIMIT] + "...",
            "image_url": image_url,
            "link": link,
        },
        "buttons": [{"title": copy["toast"]["kakaoButton"], "link": dict(link)}],
    }


def to_js_sdk_options(card: dict[str, Any]) -> dict[str, Any]:
    """Same card in the camelCase shape Kakao.Share.sendDefault expects."""
    link = card["content"]["link"]
    js_link = {"webUrl": link["web_url"], "mobileWebUrl": link["mobile_web_url"]}
    return {
        "objectType": card["object_type"],
        "content": {
            "title": card["content"]["title"],
            "description": card["content"]["description"],
            "imageUrl": card["content"]["image_url"],
            "link": js_link,
        },
        "buttons": [{"title": button["title"], "link": dict(js_link)} for button in card["buttons"]],
    }


async def share_to_kakao(
    client: httpx.AsyncClient,
    image_url: str,
    name: str,
    description: str,
    page_url: str,
    copy: dict[str, Any],
) -> bool:
    if not image_url:
        return False
    if not settings.kakao_access_token:
        logger.warning("Kakao share skipped: KAKAO_ACCESS_TOKEN is not configured")
        return False

    card = build_feed_card(image_url, name, description, page_url, copy)
    try:
        response = await client.post(
            f"{settings.kakao_api_base_url.rstrip('/')}{KAKAO_MEMO_PATH}",
            headers={"Authorization": f"Bearer {settings.kakao_access_token}"},
            data={"template_object": json.dumps(card, ensure_ascii=False)},
            timeout=settings.kakao_timeout_seconds,
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        logger.warning("Kakao share rejected | status=%s | body=%s", exc.response.status_code, exc.response.text[:300])
        return False
    except httpx.RequestError as exc:
        logger.warning("Kakao share failed: %s", exc)
        return False
    return True
