from fastapi import APIRouter, Depends

from .. import schemas
from ..catalog import list_readings
from ..dependencies import request_language
from ..localization import Language, format_price

router = APIRouter(prefix="/api", tags=["readings"])


def reading_view(reading: schemas.RecommendedReading, language: str) -> schemas.RecommendedReadingResponse:
    return schemas.RecommendedReadingResponse(
        **reading.model_dump(),
        price_label=format_price(reading.price, language),
        original_price_label=format_price(reading.original_price, language),
    )


@router.get("/readings", response_model=list[schemas.RecommendedReadingResponse])
def recommended_readings(language: Language = Depends(request_language)):
    return [reading_view(reading, language) for reading in list_readings(language)]
