"""Request building and response normalization for saju readings."""

from __future__ import annotations

import math
import re
from typing import Any

from . import schemas
from .localization import translations_for

PLACEHOLDER_IMAGE_URL = "/static/placeholder.svg"

_LEADING_INT_RE = re.compile(r"\s*([+-]?[0-9]+)")


def _parse_leading_int(text: str) -> float | None:
    """ASCII integer prefix of ``text`` ("14abc" -> 14.0), or None when there is none.

    The value is a float, so digit runs too long for a double become +/-inf.
    """
    match = _LEADING_INT_RE.match(text)
    if match is None:
        return None
    return float(match.group(1))


def to_twelve_hour(hour24: float | None) -> tuple[int, str]:
    """Convert a 24h hour to (hour12, am_pm).

    An unparseable hour (None) yields (12, "pm"), the values the backend has
    always received for such input.
    """
    if hour24 is None:
        return 12, "pm"
    if not math.isfinite(hour24):
        # No remainder for an infinite hour; the sign still decides am/pm.
        return 12, "am" if hour24 < 12 else "pm"
    # Truncated remainder, so negative hours keep their sign.
    hour12 = int(math.fmod(hour24, 12)) or 12
    return hour12, "am" if hour24 < 12 else "pm"


def create_saju_params(
    name: str,
    gender: str,
    year: str,
    month: str,
    day: str,
    birth_time: str,
    reading_type: str,
    language: str,
) -> schemas.SajuRequestParams:
    fields: dict[str, Any] = {
        "name": name,
        "gender": gender.upper(),
        "datetime": f"{year}-{month.rjust(2, '0')}-{day.rjust(2, '0')}",
        "reading_type": reading_type,
        "language": language,
    }

    if birth_time:
        parts = birth_time.split(":")
        hour12, am_pm = to_twelve_hour(_parse_leading_int(parts[0]))
        fields["hour"] = str(hour12).rjust(2, "0")
        fields["minute"] = (parts[1] if len(parts) > 1 else "") or "00"
        fields["am_pm"] = am_pm

    return schemas.SajuRequestParams(**fields)


def params_from_request(payload: schemas.FortuneRequest) -> schemas.SajuRequestParams:
    return create_saju_params(
        name=payload.name,
        gender=payload.gender,
        year=payload.year,
        month=payload.month,
        day=payload.day,
        birth_time=payload.birth_time,
        reading_type=payload.reading_type,
        language=payload.language,
    )


def reading_from_backend(payload: Any, language: str) -> schemas.ReadingResult:
    """Normalize a backend reading payload, filling gaps with display defaults."""
    copy = translations_for(language)
    data = payload if isinstance(payload, dict) else {}
    return schemas.ReadingResult(
        fortune_text=data.get("reading") or copy["errors"]["apiCallFailed"],
        image_url=data.get("image_url") or PLACEHOLDER_IMAGE_URL,
        image_description=data.get("image_description") or "",
    )


def fallback_reading(language: str) -> schemas.ReadingResult:
    copy = translations_for(language)
    return schemas.ReadingResult(
        fortune_text=copy["errors"]["tryAgainLater"],
        image_url=PLACEHOLDER_IMAGE_URL,
        image_description="",
    )


def fallback_saju_payload(language: str) -> dict[str, str]:
    copy = translations_for(language)
    return schemas.SajuFallbackResponse(
        reading=copy["errors"]["tryAgainLater"],
        image_url=PLACEHOLDER_IMAGE_URL,
        image_description="",
        error="API 호출 실패",
    ).model_dump()


def birth_date_label(year: str, month: str, day: str) -> str:
    # Analytics keeps the date exactly as entered.
    return f"{year}-{month}-{day}"


def compose_birth_time(hour: str, minute: str) -> str:
    """Join the hour/minute selects the way the form does ("" when both are blank)."""
    hour = hour.strip()
    minute = minute.strip()
    if not hour and not minute:
        return ""
    return f"{hour.rjust(2, '0') if hour else '00'}:{minute or '00'}"
