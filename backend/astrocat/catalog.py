from enum import Enum

from . import schemas
from .localization import normalize_language


class ReadingType(str, Enum):
    NATURE = "nature"
    ANIMAL = "animal"
    TRAVEL = "travel"


# Backend reading_type tags.
DIVINE_READING_TAG = "five_elements_divine"
READING_TAGS: dict[ReadingType, str | None] = {
    ReadingType.NATURE: "five_elements_nature",
    ReadingType.ANIMAL: "day_pillar",
    # Not implemented by the backend yet.
    ReadingType.TRAVEL: None,
}

RECOMMENDED_READINGS: dict[str, list[schemas.RecommendedReading]] = {
    "ko": [
        schemas.RecommendedReading(
            id=1,
            title="내 사주를 닮은 자연",
            description="당신의 사주를 아름다운 자연의 모습으로 표현한 이미지를 생성합니다.",
            image_url="/static/images/nature-fortune.svg",
            type=ReadingType.NATURE.value,
            original_price=9000,
            price=0,
            is_promotion=True,
        ),
        schemas.RecommendedReading(
            id=2,
            title="내 사주의 동물상은?",
            description="당신의 사주를 동물상으로 표현한 이미지를 생성합니다.",
            image_url="/static/images/animal-fortune.svg",
            type=ReadingType.ANIMAL.value,
            original_price=9000,
            price=0,
            is_promotion=True,
        ),
        schemas.RecommendedReading(
            id=3,
            title="나 사주에 맞는 여행지는?",
            description="행운을 가져다 주는 여행지 이미지를 만들어 드립니다.",
            image_url="/static/images/travel-fortune.svg",
            type=ReadingType.TRAVEL.value,
            original_price=9000,
            price=900,
            is_promotion=False,
        ),
    ],
    "en": [
        schemas.RecommendedReading(
            id=1,
            title="My Fortune in Nature",
            description="Generate an image of your fortune in the form of nature.",
            image_url="/static/images/nature-fortune.svg",
            type=ReadingType.NATURE.value,
            original_price=10,
            price=0,
            is_promotion=True,
        ),
        schemas.RecommendedReading(
            id=2,
            title="My Fortune in Animal",
            description="Generate an image of your fortune in the form of an animal.",
            image_url="/static/images/animal-fortune.svg",
            type=ReadingType.ANIMAL.value,
            original_price=10,
            price=0,
            is_promotion=True,
        ),
        schemas.RecommendedReading(
            id=3,
            title="My Fortune in Travel",
            description="Create an image of a travel destination that brings you good luck",
            image_url="/static/images/travel-fortune.svg",
            type=ReadingType.TRAVEL.value,
            original_price=10,
            price=1,
            is_promotion=False,
        ),
    ],
}


def list_readings(language: str | None) -> list[schemas.RecommendedReading]:
    return RECOMMENDED_READINGS[normalize_language(language)]


def get_reading(language: str | None, reading_id: int) -> schemas.RecommendedReading | None:
    for reading in list_readings(language):
        if reading.id == reading_id:
            return reading
    return None


def reading_tag(reading: schemas.RecommendedReading) -> str | None:
    return READING_TAGS[ReadingType(reading.type)]
