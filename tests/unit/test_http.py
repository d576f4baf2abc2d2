from __future__ import annotations

import pytest
import requests

from luminaria.common.http import HttpClient, HttpRequestError, RetryConfig, RetryableHttpError


class FakeResponse:
    def __init__(self, status_code: int, payload=None, raises_json: bool = False):
        self.status_code = status_code
        self._payload = payload
        self._raises_json = raises_json

    def json(self):
        if self._raises_json:
            raise ValueError("bad json")
        return self._payload


def test_http_get_json_success(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))

    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(200, [{"ok": True}]))
    payload = client.get_json("https://example.com", source_type="nominatim")

    assert payload == [{"ok": True}]


def test_http_sends_configured_user_agent(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1), user_agent="luminaria-test/0.1")
    seen = {}

    def fake_request(**kwargs):
        seen.update(kwargs)
        return FakeResponse(200, [])

    monkeypatch.setattr(client.session, "request", fake_request)
    client.get_json("https://example.com/search", source_type="other", params={"q": "x"})

    assert seen["headers"]["User-Agent"] == "luminaria-test/0.1"
    assert seen["params"] == {"q": "x"}


def test_http_retryable_status_raises_retryable_error(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(503, {"x": 1}))

    with pytest.raises(RetryableHttpError):
        client.get_json("https://example.com", source_type="nominatim")


def test_http_client_error_is_not_retried(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=3, multiplier=0.0, max_wait=0.0))
    calls = []

    def fake_request(**_kwargs):
        calls.append(1)
        return FakeResponse(404)

    monkeypatch.setattr(client.session, "request", fake_request)

    with pytest.raises(HttpRequestError):
        client.get_json("https://example.com", source_type="nominatim")
    assert len(calls) == 1


def test_http_retries_transport_failure_then_succeeds(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=2, multiplier=0.0, max_wait=0.0))
    responses = iter([requests.ConnectionError("reset"), FakeResponse(200, [])])

    def fake_request(**_kwargs):
        item = next(responses)
        if isinstance(item, Exception):
            raise item
        return item

    monkeypatch.setattr(client.session, "request", fake_request)

    assert client.get_json("https://example.com", source_type="other") == []


def test_http_invalid_json_raises(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(200, raises_json=True))

    with pytest.raises(HttpRequestError):
        client.get_json("https://example.com", source_type="nominatim")


def test_http_error_carries_status_and_error_body(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    body = {"error": {"code": "billing_hard_limit_reached"}}
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(400, body))

    with pytest.raises(HttpRequestError) as excinfo:
        client.get_json("https://example.com", source_type="other")

    assert excinfo.value.status_code == 400
    assert excinfo.value.payload == body


def test_http_post_json_sends_body(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    seen = {}

    def fake_request(**kwargs):
        seen.update(kwargs)
        return FakeResponse(200, {"data": []})

    monkeypatch.setattr(client.session, "request", fake_request)

    assert client.post_json("https://example.com/v1/items", source_type="other", json_body={"n": 1}) == {"data": []}
    assert seen["method"] == "POST"
    assert seen["json"] == {"n": 1}
