import logging

import httpx

from .config import settings
from .upstream import UpstreamError

logger = logging.getLogger("astrocat.notifications")


def subscribe_message(email: str) -> str:
    return f"📧 정식출시 알림 신청\n이메일: {email}"


def kakao_share_message(referrer: str | None) -> str:
    return f"🔔 카카오톡 공유 발생!\n공유된 URL: {referrer or '알 수 없음'}"


async def post_to_webhook(client: httpx.AsyncClient, text: str) -> None:
    if not settings.slack_webhook_url:
        raise UpstreamError("SLACK_WEBHOOK_URL is not configured")
    try:
        response = await client.post(
            settings.slack_webhook_url,
            json={"text": text},
            timeout=settings.webhook_timeout_seconds,
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        logger.warning("Slack webhook rejected message | status=%s", exc.response.status_code)
        raise UpstreamError("webhook rejected message", status_code=exc.response.status_code) from exc
    except httpx.RequestError as exc:
        logger.warning("Slack webhook unreachable: %s", exc)
        raise UpstreamError(f"webhook unreachable: {exc}") from exc
