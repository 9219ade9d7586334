import os

import httpx
import pytest
from fastapi.testclient import TestClient

os.environ["APP_ENV"] = "development"
# Limits are per-process and would leak between tests.
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SLACK_WEBHOOK_URL"] = ""
os.environ["KAKAO_ACCESS_TOKEN"] = ""
os.environ["KAKAO_JS_KEY"] = ""
os.environ["GA_MEASUREMENT_ID"] = ""
os.environ["GA_API_SECRET"] = ""

from astrocat.dependencies import get_http_client  # noqa: E402
from astrocat.main import app  # noqa: E402


def _unreachable(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("network disabled in tests", request=request)


@pytest.fixture(autouse=True)
def upstream():
    """Route all outbound HTTP of the app through a handler.

    Calling the fixture with a handler installs it and returns the list of
    requests the app sent. Until then every outbound call fails to connect.
    """

    def install(handler):
        seen: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        mock_client = httpx.AsyncClient(transport=httpx.MockTransport(record))
        app.dependency_overrides[get_http_client] = lambda: mock_client
        return seen

    install(_unreachable)
    yield install
    app.dependency_overrides.pop(get_http_client, None)


@pytest.fixture()
def client():
    with TestClient(app) as c:
        yield c
