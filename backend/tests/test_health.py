from astrocat.main import _content_length


def test_health_endpoint(client):
    response = client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["ok"] is True
    assert payload["env"] == "development"
    assert "timestamp" in payload


def test_responses_carry_request_id(client):
    response = client.get("/health")
    assert len(response.headers["X-Request-Id"]) == 8


def test_malformed_content_length_is_tolerated(client):
    response = client.get("/health", headers={"Content-Length": "not-a-number"})
    assert response.status_code == 200


def test_content_length_parsing():
    assert _content_length(None) == 0
    assert _content_length("512") == 512
    assert _content_length("abc") is None
