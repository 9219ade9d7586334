from datetime import date
from urllib.parse import parse_qs

import httpx

from astrocat.config import settings

PROFILE = {
    "name": "Kim",
    "gender": "male",
    "year": "1990",
    "month": "3",
    "day": "5",
    "hour": "14",
    "minute": "30",
    "lang": "ko",
}
IMAGE_URL = "https://catbot-image-bucket.s3.ap-northeast-2.amazonaws.com/readings/abc.png"


def _reading(reading="## 운세\n\n**좋은** 하루", description="별을 보는 고양이"):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"reading": reading, "image_url": IMAGE_URL, "image_description": description})

    return handler


def _sent(request: httpx.Request) -> dict[str, str]:
    return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}


def test_setup_page_sets_client_cookie(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "언어 선택" in response.text
    assert "astrocat_cid" in response.cookies


def test_setup_page_follows_accept_language(client):
    response = client.get("/", headers={"Accept-Language": "en-GB,en;q=0.8"})
    assert "Choose language" in response.text


def test_setup_redirects_to_form(client):
    response = client.post("/setup", data={"language": "en"}, follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/fortune?lang=en"


def test_form_lists_years_down_to_1900(client):
    response = client.get("/fortune", params={"lang": "en"})
    assert response.status_code == 200
    assert f'<option value="{date.today().year}"' in response.text
    assert '<option value="1900"' in response.text
    assert "30-59 min" in response.text


def test_blank_name_blocks_before_network(client, upstream):
    seen = upstream(_reading())
    response = client.post("/fortune", data={**PROFILE, "name": "   "})
    assert response.status_code == 400
    assert "이름을 입력해주세요." in response.text
    assert seen == []


def test_missing_birthday_blocks(client, upstream):
    seen = upstream(_reading())
    response = client.post("/fortune", data={**PROFILE, "day": "", "lang": "en"})
    assert response.status_code == 400
    assert "Please enter your date of birth." in response.text
    assert seen == []


def test_missing_gender_blocks(client, upstream):
    seen = upstream(_reading())
    response = client.post("/fortune", data={**PROFILE, "gender": "", "lang": "en"})
    assert response.status_code == 400
    assert "Please select your gender." in response.text
    assert seen == []


def test_submit_renders_backend_reading(client, upstream):
    seen = upstream(_reading())
    response = client.post("/fortune", data=PROFILE)

    assert response.status_code == 200
    assert "<h2>운세</h2>" in response.text
    assert "<strong>좋은</strong> 하루" in response.text
    assert "별을 보는 고양이" in response.text
    assert IMAGE_URL in response.text
    assert "/download?image_url=" in response.text
    assert _sent(seen[0]) == {
        "name": "Kim",
        "gender": "MALE",
        "datetime": "1990-03-05",
        "reading_type": "five_elements_divine",
        "language": "ko",
        "hour": "02",
        "minute": "30",
        "am_pm": "pm",
    }


def test_submit_without_birth_time_omits_time_fields(client, upstream):
    seen = upstream(_reading())
    client.post("/fortune", data={**PROFILE, "hour": "", "minute": ""})
    assert not {"hour", "minute", "am_pm"} & _sent(seen[0]).keys()


def test_submit_with_image_forwards_multipart(client, upstream):
    seen = upstream(_reading())
    response = client.post("/fortune", data=PROFILE, files={"image": ("me.png", b"selfie-bytes", "image/png")})

    assert response.status_code == 200
    assert seen[0].headers["content-type"].startswith("multipart/form-data")
    assert b"selfie-bytes" in seen[0].content
    assert b'name="reading_type"' in seen[0].content


def test_backend_failure_renders_fallback(client, upstream):
    upstream(lambda request: httpx.Response(500))
    response = client.post("/fortune", data=PROFILE)

    assert response.status_code == 200
    assert "죄송합니다. 잠시 후 다시 시도해주세요." in response.text
    assert "/static/placeholder.svg" in response.text


def test_reading_html_is_escaped(client, upstream):
    upstream(_reading(reading="<script>alert(1)</script>"))
    response = client.post("/fortune", data=PROFILE)
    assert "<script>alert(1)" not in response.text
    assert "&lt;script&gt;alert(1)" in response.text


def test_share_button_only_in_korean(client, upstream):
    upstream(_reading())
    korean = client.post("/fortune", data=PROFILE)
    english = client.post("/fortune", data={**PROFILE, "lang": "en"})
    assert "카카오톡 공유하기" in korean.text
    assert "Share on KakaoTalk" not in english.text
    assert 'id="share-button"' not in english.text


def test_kakao_sdk_loaded_only_with_js_key(client, upstream):
    upstream(_reading())
    assert "kakao.min.js" not in client.post("/fortune", data=PROFILE).text

    original = settings.kakao_js_key
    settings.kakao_js_key = "js-key"
    try:
        response = client.post("/fortune", data=PROFILE)
    finally:
        settings.kakao_js_key = original
    assert "kakao.min.js" in response.text
    assert '"objectType": "feed"' in response.text


def test_recommended_prices_are_localized(client, upstream):
    upstream(_reading())
    response = client.post("/fortune", data={**PROFILE, "lang": "en"})
    assert "$10" in response.text
    assert "$1<" in response.text
    assert "Free" in response.text


def test_recommended_nature_uses_nature_tag(client, upstream):
    seen = upstream(_reading())
    response = client.post("/fortune/recommended/1", data=PROFILE)
    assert response.status_code == 200
    assert "내 사주를 닮은 자연" in response.text
    assert _sent(seen[0])["reading_type"] == "five_elements_nature"


def test_recommended_animal_uses_day_pillar_tag(client, upstream):
    seen = upstream(_reading())
    client.post("/fortune/recommended/2", data=PROFILE)
    assert _sent(seen[0])["reading_type"] == "day_pillar"


def test_recommended_travel_is_coming_soon(client, upstream):
    seen = upstream(_reading())
    response = client.post("/fortune/recommended/3", data=PROFILE)
    assert response.status_code == 200
    assert "곧 출시될 예정이에요!" in response.text
    assert seen == []


def test_recommended_unknown_reading(client):
    assert client.post("/fortune/recommended/99", data=PROFILE).status_code == 404


def test_recommended_validates_profile(client, upstream):
    seen = upstream(_reading())
    response = client.post("/fortune/recommended/1", data={**PROFILE, "name": ""})
    assert response.status_code == 400
    assert seen == []
