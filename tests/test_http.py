"""Tests for util.http.post_json."""

import pytest
import requests

from util import http


class FakeResponse:
    def __init__(self, body=None, status=200):
        self.body = body
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)

    def json(self):
        return self.body


@pytest.fixture
def calls(monkeypatch):
    recorded = []

    def install(result):
        def fake_post(url, json=None, headers=None, timeout=None):
            recorded.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
            if isinstance(result, Exception):
                raise result
            return result
        monkeypatch.setattr(http.requests, "post", fake_post)
        return recorded

    return install


def test_posts_json_and_decodes_reply(calls):
    recorded = calls(FakeResponse({"ok": True}))
    assert http.post_json("https://x.example", {"a": 1}, headers={"H": "v"}) == {"ok": True}
    assert recorded == [{"url": "https://x.example", "json": {"a": 1}, "headers": {"H": "v"}, "timeout": 30.0}]


def test_timeout_from_env(calls, monkeypatch):
    monkeypatch.setenv("HTTP_TIMEOUT", "2.5")
    recorded = calls(FakeResponse({}))
    http.post_json("https://x.example", {})
    assert recorded[0]["timeout"] == 2.5


def test_bad_timeout_env_falls_back(calls, monkeypatch):
    monkeypatch.setenv("HTTP_TIMEOUT", "soon")
    recorded = calls(FakeResponse({}))
    http.post_json("https://x.example", {})
    assert recorded[0]["timeout"] == 30.0


def test_http_error_is_single_attempt(calls):
    recorded = calls(FakeResponse(status=503))
    with pytest.raises(requests.HTTPError):
        http.post_json("https://x.example", {})
    assert len(recorded) == 1


def test_network_error_is_single_attempt(calls):
    recorded = calls(requests.ConnectionError("down"))
    with pytest.raises(requests.ConnectionError):
        http.post_json("https://x.example", {})
    assert len(recorded) == 1
