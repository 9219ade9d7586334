import pytest

from astrocat.fortune import (
    PLACEHOLDER_IMAGE_URL,
    compose_birth_time,
    create_saju_params,
    fallback_reading,
    reading_from_backend,
    to_twelve_hour,
)


def _build(**overrides):
    fields = {
        "name": "Kim",
        "gender": "male",
        "year": "1990",
        "month": "3",
        "day": "5",
        "birth_time": "14:30",
        "reading_type": "five_elements_divine",
        "language": "ko",
    }
    fields.update(overrides)
    return create_saju_params(**fields)


def test_params_with_birth_time():
    assert _build().payload() == {
        "name": "Kim",
        "gender": "MALE",
        "datetime": "1990-03-05",
        "reading_type": "five_elements_divine",
        "language": "ko",
        "hour": "02",
        "minute": "30",
        "am_pm": "pm",
    }


def test_empty_birth_time_omits_time_fields():
    payload = _build(birth_time="").payload()
    assert not {"hour", "minute", "am_pm"} & payload.keys()
    assert payload["datetime"] == "1990-03-05"


@pytest.mark.parametrize("hour24", range(24))
def test_every_hour_maps_to_twelve_hour_clock(hour24):
    params = _build(birth_time=f"{hour24:02d}:00")
    assert params.hour == f"{hour24 % 12 or 12:02d}"
    assert params.am_pm == ("am" if hour24 < 12 else "pm")


@pytest.mark.parametrize(
    "birth_time,hour,am_pm",
    [("00:00", "12", "am"), ("12:00", "12", "pm"), ("9:00", "09", "am"), ("23:30", "11", "pm")],
)
def test_boundary_hours(birth_time, hour, am_pm):
    params = _build(birth_time=birth_time)
    assert (params.hour, params.am_pm) == (hour, am_pm)


@pytest.mark.parametrize(
    "month,day,expected",
    [("3", "5", "1990-03-05"), ("03", "05", "1990-03-05"), ("12", "31", "1990-12-31"), ("1", "10", "1990-01-10")],
)
def test_date_is_zero_padded(month, day, expected):
    assert _build(month=month, day=day).datetime == expected


@pytest.mark.parametrize("gender,expected", [("male", "MALE"), ("Female", "FEMALE"), ("FEMALE", "FEMALE")])
def test_gender_is_uppercased(gender, expected):
    assert _build(gender=gender).gender == expected


def test_language_and_reading_type_pass_through():
    params = _build(language="en", reading_type="day_pillar")
    assert params.language == "en"
    assert params.reading_type == "day_pillar"


@pytest.mark.parametrize("birth_time", ["7", "7:"])
def test_missing_minute_defaults_to_zero(birth_time):
    params = _build(birth_time=birth_time)
    assert (params.hour, params.minute, params.am_pm) == ("07", "00", "am")


def test_unparseable_hour_keeps_legacy_values():
    params = _build(birth_time="ab:30")
    assert (params.hour, params.minute, params.am_pm) == ("12", "30", "pm")


def test_hour_with_trailing_characters_uses_leading_digits():
    params = _build(birth_time="09h:15")
    assert (params.hour, params.minute, params.am_pm) == ("09", "15", "am")


def test_builder_never_raises_on_garbage():
    params = _build(birth_time=":::", month="x")
    assert params.datetime == "1990-0x-05"
    assert (params.hour, params.minute, params.am_pm) == ("12", "00", "pm")


def test_to_twelve_hour_without_hour():
    assert to_twelve_hour(None) == (12, "pm")


@pytest.mark.parametrize(
    "hour,minute,expected",
    [("", "", ""), ("14", "", "14:00"), ("", "30", "00:30"), ("7", "30", "07:30"), (" 23 ", "00", "23:00")],
)
def test_compose_birth_time(hour, minute, expected):
    assert compose_birth_time(hour, minute) == expected


def test_reading_from_backend_maps_fields():
    result = reading_from_backend({"reading": "X", "image_url": "Y", "image_description": "Z"}, "ko")
    assert (result.fortune_text, result.image_url, result.image_description) == ("X", "Y", "Z")


@pytest.mark.parametrize("payload", [{}, None, [], {"reading": "", "image_url": None}])
def test_reading_from_backend_fills_defaults(payload):
    result = reading_from_backend(payload, "en")
    assert result.fortune_text == "Failed to load your fortune."
    assert result.image_url == PLACEHOLDER_IMAGE_URL
    assert result.image_description == ""


def test_fallback_reading_is_localized():
    assert fallback_reading("ko").fortune_text == "죄송합니다. 잠시 후 다시 시도해주세요."
    assert fallback_reading("en").fortune_text == "Sorry, please try again later."


@pytest.mark.parametrize("birth_time", ["١٤:30", "１４:30"])
def test_non_ascii_digits_are_not_a_number(birth_time):
    params = _build(birth_time=birth_time)
    assert (params.hour, params.minute, params.am_pm) == ("12", "30", "pm")


def test_hour_too_large_for_a_double_does_not_raise():
    params = _build(birth_time="9" * 400 + ":00")
    assert (params.hour, params.minute, params.am_pm) == ("12", "00", "pm")


def test_negative_hour_too_large_for_a_double_is_am():
    params = _build(birth_time="-" + "9" * 400 + ":00")
    assert (params.hour, params.am_pm) == ("12", "am")


def test_whitespace_only_birth_time_is_still_a_time():
    params = _build(birth_time="   ")
    assert (params.hour, params.minute, params.am_pm) == ("12", "00", "pm")
