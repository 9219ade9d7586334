from __future__ import annotations

from typing import Any, Literal

Language = Literal["ko", "en"]

DEFAULT_LANGUAGE: Language = "ko"
SUPPORTED_LANGUAGES: tuple[Language, ...] = ("ko", "en")

TRANSLATIONS: dict[str, dict[str, Any]] = {
    "ko": {
        "title": "사주보는 우주고양이",
        "welcome": "안녕! 나는 사주보는 우주고양이. 너의 사주팔자를 그림으로 그려줄게. 생년월일과 태어난 시간을 양력으로 입력해 달라냥~",
        "languageSelect": "언어 선택",
        "koreanText": "한국어",
        "englishText": "English",
        "startButton": "시작하기",
        "name": "이름",
        "birthday": "생년월일",
        "year": "년도",
        "month": "월",
        "day": "일",
        "birthTime": "태어난 시간",
        "birthTimeNote": "모르면 비워두세요",
        "hour": "시",
        "minute": "분",
        "minuteOptions": [("00", "0~29분"), ("30", "30~59분")],
        "gender": "태어난 성별",
        "male": "남",
        "female": "여",
        "imageUpload": "이미지 업로드 (선택)",
        "viewFortune": "🔮 운세 보기",
        "loading": "잠시만 기다려 달라냥~ 🐱",
        "saveImage": "이미지 저장하기",
        "shareKakao": "카카오톡 공유하기",
        "recommendedTitle": "추천 사주풀이",
        "free": "무료",
        "comingSoon": "곧 출시될 예정이에요!",
        "imageAlt": "운세 이미지",
        "errors": {
            "nameRequired": "이름을 입력해주세요.",
            "genderRequired": "성별을 선택해주세요.",
            "birthdayRequired": "생년월일을 입력해주세요.",
            "apiCallFailed": "운세를 불러오는데 실패했습니다.",
            "tryAgainLater": "죄송합니다. 잠시 후 다시 시도해주세요.",
        },
        "toast": {
            "imageDownloaded": "이미지가 저장되었습니다.",
            "downloadFailed": "이미지 저장에 실패했습니다.",
            "shareFailed": "공유하기에 실패했습니다.",
            "kakaoTitle": "님의 사주 이미지",
            "kakaoButton": "나도 사주 보기",
        },
        "currency": {"symbol": "원", "position": "after"},
    },
    "en": {
        "title": "Cosmic Fortune Cat",
        "welcome": "Hi! I'm the cosmic fortune cat. I'll paint your fortune as a picture. Tell me your birth date and time, meow~",
        "languageSelect": "Choose language",
        "koreanText": "한국어",
        "englishText": "English",
        "startButton": "Start",
        "name": "Name",
        "birthday": "Date of birth",
        "year": "Year",
        "month": "Month",
        "day": "Day",
        "birthTime": "Time of birth",
        "birthTimeNote": "leave empty if unknown",
        "hour": "Hour",
        "minute": "Minute",
        "minuteOptions": [("00", "0-29 min"), ("30", "30-59 min")],
        "gender": "Gender",
        "male": "Male",
        "female": "Female",
        "imageUpload": "Upload an image (optional)",
        "viewFortune": "🔮 See my fortune",
        "loading": "Just a moment, meow~ 🐱",
        "saveImage": "Save image",
        "shareKakao": "Share on KakaoTalk",
        "recommendedTitle": "Recommended readings",
        "free": "Free",
        "comingSoon": "Coming soon!",
        "imageAlt": "Fortune image",
        "errors": {
            "nameRequired": "Please enter your name.",
            "genderRequired": "Please select your gender.",
            "birthdayRequired": "Please enter your date of birth.",
            "apiCallFailed": "Failed to load your fortune.",
            "tryAgainLater": "Sorry, please try again later.",
        },
        "toast": {
            "imageDownloaded": "Image saved.",
            "downloadFailed": "Failed to save the image.",
            "shareFailed": "Failed to share.",
            "kakaoTitle": "'s fortune image",
            "kakaoButton": "Read my fortune too",
        },
        "currency": {"symbol": "$", "position": "before"},
    },
}


def normalize_language(raw: str | None) -> Language:
    """Map a language code, locale tag or Accept-Language value to ko/en."""
    if not raw:
        return DEFAULT_LANGUAGE
    candidate = str(raw).strip().lower()
    candidate = candidate.split(",", 1)[0].split(";", 1)[0].strip()
    candidate = candidate.replace("_", "-")
    base = candidate.split("-", 1)[0].strip()
    return "en" if base == "en" else DEFAULT_LANGUAGE


def translations_for(language: str | None) -> dict[str, Any]:
    return TRANSLATIONS[normalize_language(language)]


def format_price(price: int, language: str) -> str:
    currency = translations_for(language)["currency"]
    formatted = f"{price:,}"
    if currency["position"] == "before":
        return f"{currency['symbol']}{formatted}"
    return f"{formatted}{currency['symbol']}"
