from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class SajuRequestParams(BaseModel):
    """Wire payload for the saju backend's /saju-reading endpoint."""

    model_config = ConfigDict(frozen=True)

    name: str
    gender: str
    datetime: str
    reading_type: str
    language: str
    hour: str | None = None
    minute: str | None = None
    am_pm: Literal["am", "pm"] | None = None

    def payload(self) -> dict[str, str]:
        # Birth time fields are omitted, not blank, when the time is unknown.
        return self.model_dump(exclude_none=True)


class FortuneRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(max_length=100)
    gender: str = Field(max_length=16)
    year: str = Field(max_length=8)
    month: str = Field(max_length=4)
    day: str = Field(max_length=4)
    birth_time: str = Field(default="", max_length=16)
    reading_type: str = Field(default="five_elements_divine", max_length=64)
    language: Literal["ko", "en"] = "ko"


class ReadingResult(BaseModel):
    fortune_text: str
    image_url: str
    image_description: str = ""


class SajuFallbackResponse(BaseModel):
    reading: str
    image_url: str
    image_description: str = ""
    error: str


class DownloadImageRequest(BaseModel):
    image_url: str = Field(alias="imageUrl", min_length=1, max_length=2000)


class ErrorResponse(BaseModel):
    error: str


class SubscribeRequest(BaseModel):
    email: str = Field(min_length=1, max_length=320)


class KakaoCallbackRequest(BaseModel):
    referrer: str | None = Field(default=None, max_length=2000)


class SuccessResponse(BaseModel):
    success: bool


class ShareResponse(BaseModel):
    success: bool
    message: str | None = None


class TelemetryEventRequest(BaseModel):
    event_name: str = Field(pattern=r"^[A-Za-z][A-Za-z0-9_]{0,39}$")
    params: dict[str, Any] = Field(default_factory=dict)


class TelemetryEventResponse(BaseModel):
    ok: bool


class RecommendedReading(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    description: str
    image_url: str
    type: str
    original_price: int
    price: int
    is_promotion: bool


class RecommendedReadingResponse(RecommendedReading):
    price_label: str
    original_price_label: str
