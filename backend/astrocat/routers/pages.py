"""Server-rendered pages: language setup, birth data form and reading results."""

import logging
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse

from .. import schemas, upstream
from ..analytics import CLIENT_ID_COOKIE, AnalyticsEvent, client_id_for, track
from ..catalog import DIVINE_READING_TAG, get_reading, list_readings, reading_tag
from ..config import settings
from ..dependencies import get_http_client, request_language
from ..fortune import birth_date_label, compose_birth_time, create_saju_params, fallback_reading, reading_from_backend
from ..limiter import limiter
from ..localization import Language, normalize_language, translations_for
from ..rendering import render_markdown, templates
from ..share import build_feed_card, share_to_kakao, to_js_sdk_options
from .readings import reading_view

logger = logging.getLogger("astrocat.pages")
router = APIRouter(tags=["pages"])

CLIENT_ID_MAX_AGE = 60 * 60 * 24 * 365


@dataclass(frozen=True)
class ProfileForm:
    name: str
    gender: str
    year: str
    month: str
    day: str
    hour: str = ""
    minute: str = ""

    @property
    def birth_time(self) -> str:
        return compose_birth_time(self.hour, self.minute)

    def validation_error(self, copy: dict[str, Any]) -> str | None:
        if not self.name.strip():
            return copy["errors"]["nameRequired"]
        if not (self.year and self.month and self.day):
            return copy["errors"]["birthdayRequired"]
        if self.gender not in ("male", "female"):
            return copy["errors"]["genderRequired"]
        return None

    def analytics_params(self) -> dict[str, str]:
        return {"birth_date": birth_date_label(self.year, self.month, self.day), "gender": self.gender}


def profile_form(
    name: str = Form(default="", max_length=100),
    gender: str = Form(default="", max_length=16),
    year: str = Form(default="", max_length=8),
    month: str = Form(default="", max_length=4),
    day: str = Form(default="", max_length=4),
    hour: str = Form(default="", max_length=4),
    minute: str = Form(default="", max_length=4),
) -> ProfileForm:
    return ProfileForm(name=name, gender=gender, year=year, month=month, day=day, hour=hour, minute=minute)


def _with_client_cookie(request: Request, response: HTMLResponse) -> HTMLResponse:
    if CLIENT_ID_COOKIE not in request.cookies:
        response.set_cookie(
            CLIENT_ID_COOKIE,
            client_id_for(request),
            max_age=CLIENT_ID_MAX_AGE,
            httponly=True,
            samesite="lax",
        )
    return response


def _form_context(language: str, profile: ProfileForm | None = None, error: str | None = None) -> dict[str, Any]:
    current_year = date.today().year
    return {
        "copy": translations_for(language),
        "lang": language,
        "profile": profile,
        "error": error,
        "years": range(current_year, 1899, -1),
        "months": range(1, 13),
        "days": range(1, 32),
        "hours": [f"{h:02d}" for h in range(24)],
    }


def _render_form(request: Request, language: str, profile: ProfileForm | None = None, error: str | None = None, status_code: int = 200):
    return templates.TemplateResponse(
        request,
        "form.html",
        _form_context(language, profile, error),
        status_code=status_code,
    )


def _download_url(fortune: schemas.ReadingResult, profile: ProfileForm, language: str, reading_type: str) -> str:
    query = {
        "image_url": fortune.image_url,
        "type": reading_type,
        "lang": language,
        "year": profile.year,
        "month": profile.month,
        "day": profile.day,
        "gender": profile.gender,
    }
    return f"/download?{urlencode(query)}"


def _render_result(
    request: Request,
    language: str,
    profile: ProfileForm,
    fortune: schemas.ReadingResult | None,
    *,
    reading_type: str = "fortune",
    heading: str | None = None,
    notice: str | None = None,
):
    copy = translations_for(language)
    context: dict[str, Any] = {
        "copy": copy,
        "lang": language,
        "profile": asdict(profile),
        "fortune": fortune,
        "heading": heading,
        "notice": notice,
        "reading_type": reading_type,
        "readings": [reading_view(reading, language) for reading in list_readings(language)],
        "kakao_js_key": settings.kakao_js_key,
        "fortune_html": None,
        "download_url": None,
        "kakao_options": None,
    }
    if fortune is not None:
        context["fortune_html"] = render_markdown(fortune.fortune_text)
        context["download_url"] = _download_url(fortune, profile, language, reading_type)
        if settings.kakao_js_key and language == "ko":
            card = build_feed_card(fortune.image_url, profile.name, fortune.image_description, str(request.url), copy)
            context["kakao_options"] = to_js_sdk_options(card)
    return templates.TemplateResponse(request, "result.html", context)


async def _image_from_upload(image: UploadFile | None) -> upstream.ImageFile | None:
    # Browsers send an empty part when no file was chosen.
    if image is None or not image.filename:
        return None
    content = await image.read()
    if not content:
        return None
    return upstream.ImageFile(
        filename=image.filename,
        content=content,
        content_type=image.content_type or "application/octet-stream",
    )


async def _fetch_reading(
    client: httpx.AsyncClient,
    profile: ProfileForm,
    reading_type: str,
    language: Language,
    image: upstream.ImageFile | None = None,
) -> schemas.ReadingResult:
    params = create_saju_params(
        profile.name,
        profile.gender,
        profile.year,
        profile.month,
        profile.day,
        profile.birth_time,
        reading_type,
        language,
    )
    try:
        data = await upstream.request_reading(client, params, image)
    except upstream.UpstreamError as exc:
        logger.warning("Reading failed | reading_type=%s | reason=%s", reading_type, exc)
        return fallback_reading(language)
    return reading_from_backend(data, language)


@router.get("/", response_class=HTMLResponse)
def setup_page(
    request: Request,
    background_tasks: BackgroundTasks,
    language: Language = Depends(request_language),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    track(background_tasks, client, request, AnalyticsEvent.PAGE_VIEW, {"page_path": "/"})
    response = templates.TemplateResponse(
        request,
        "setup.html",
        {"copy": translations_for(language), "lang": language},
    )
    return _with_client_cookie(request, response)


@router.post("/setup")
def complete_setup(
    request: Request,
    background_tasks: BackgroundTasks,
    language: str = Form(default="ko", max_length=16),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    lang = normalize_language(language)
    track(background_tasks, client, request, AnalyticsEvent.LANGUAGE_SELECTED, {"language": lang})
    return RedirectResponse(url=f"/fortune?lang={lang}", status_code=303)


@router.get("/fortune", response_class=HTMLResponse)
def fortune_form(
    request: Request,
    background_tasks: BackgroundTasks,
    language: Language = Depends(request_language),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    track(background_tasks, client, request, AnalyticsEvent.PAGE_VIEW, {"page_path": "/fortune"})
    return _with_client_cookie(request, _render_form(request, language))


@router.post("/fortune", response_class=HTMLResponse)
@limiter.limit("20/minute")
async def submit_fortune(
    request: Request,
    background_tasks: BackgroundTasks,
    profile: ProfileForm = Depends(profile_form),
    lang: str = Form(default="ko", max_length=16),
    image: UploadFile | None = File(default=None),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    language = normalize_language(lang)
    error = profile.validation_error(translations_for(language))
    if error:
        return _render_form(request, language, profile, error, status_code=400)

    track(background_tasks, client, request, AnalyticsEvent.FORTUNE_SUBMITTED, profile.analytics_params())
    fortune = await _fetch_reading(client, profile, DIVINE_READING_TAG, language, await _image_from_upload(image))
    return _render_result(request, language, profile, fortune)


@router.post("/fortune/recommended/{reading_id}", response_class=HTMLResponse)
@limiter.limit("20/minute")
async def recommended_fortune(
    request: Request,
    reading_id: int,
    background_tasks: BackgroundTasks,
    profile: ProfileForm = Depends(profile_form),
    lang: str = Form(default="ko", max_length=16),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    language = normalize_language(lang)
    reading = get_reading(language, reading_id)
    if reading is None:
        raise HTTPException(status_code=404, detail="Reading not found")

    error = profile.validation_error(translations_for(language))
    if error:
        return _render_form(request, language, profile, error, status_code=400)

    track(
        background_tasks,
        client,
        request,
        AnalyticsEvent.RECOMMENDED_CLICK,
        {
            **profile.analytics_params(),
            "reading_type": reading.type,
            "price": reading.price,
            "is_promotion": reading.is_promotion,
        },
    )

    tag = reading_tag(reading)
    if tag is None:
        return _render_result(
            request,
            language,
            profile,
            None,
            reading_type=reading.type,
            heading=reading.title,
            notice=translations_for(language)["comingSoon"],
        )

    fortune = await _fetch_reading(client, profile, tag, language)
    return _render_result(request, language, profile, fortune, reading_type=reading.type, heading=reading.title)


@router.post("/share", response_model=schemas.ShareResponse)
@limiter.limit("10/minute")
async def share_result(
    request: Request,
    background_tasks: BackgroundTasks,
    image_url: str = Form(max_length=2000),
    name: str = Form(default="", max_length=100),
    description: str = Form(default="", max_length=5000),
    page_url: str = Form(default="", max_length=2000),
    reading_type: str = Form(default="fortune", alias="type", max_length=32),
    lang: str = Form(default="ko", max_length=16),
    year: str = Form(default="", max_length=8),
    month: str = Form(default="", max_length=4),
    day: str = Form(default="", max_length=4),
    gender: str = Form(default="", max_length=16),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    copy = translations_for(lang)
    track(
        background_tasks,
        client,
        request,
        AnalyticsEvent.KAKAO_SHARE,
        {"birth_date": birth_date_label(year, month, day), "gender": gender, "type": reading_type},
    )
    target_url = page_url or request.headers.get("referer") or str(request.base_url)
    success = await share_to_kakao(client, image_url, name, description, target_url, copy)
    if not success:
        return schemas.ShareResponse(success=False, message=copy["toast"]["shareFailed"])
    return schemas.ShareResponse(success=True)
