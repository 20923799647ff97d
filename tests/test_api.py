"""HTTP tests for api.py using FastAPI's TestClient."""

import pytest
from fastapi.testclient import TestClient

import api
from assistant.session import SessionStore


@pytest.fixture
def client(fake_llm):
    store = SessionStore(ttl_seconds=0, max_sessions=0)
    api.app.dependency_overrides[api.get_store] = lambda: store
    api.app.dependency_overrides[api.get_llm] = lambda: fake_llm
    with TestClient(api.app) as c:
        c.store = store
        yield c
    api.app.dependency_overrides.clear()


def test_ask_returns_reply(client, fake_llm):
    fake_llm.queue('{"location": "Paris", "topic": null, "isFollowUp": false}', "yes", "Bienvenue à Paris !")
    resp = client.post("/api/chatbot/ask", json={"message": "Tell me about Paris", "language": "fr", "sessionId": "s1"})
    assert resp.status_code == 200
    assert resp.json() == {"reply": "Bienvenue à Paris !"}
    assert client.store.get("s1").context.location == "Paris"


def test_defaults_language_and_session(client, fake_llm):
    fake_llm.queue("{}", "no", "Travel only, please.")
    resp = client.post("/api/chatbot/ask", json={"message": "What's 2+2?"})
    assert resp.status_code == 200
    assert "default" in client.store
    assert "to English:" in fake_llm.calls[-1]["system"]


def test_answer_failure_is_opaque_500(client, fake_llm, llm_error):
    fake_llm.queue("{}", "yes", llm_error)
    resp = client.post("/api/chatbot/ask", json={"message": "Tell me about Paris", "sessionId": "s"})
    assert resp.status_code == 500
    assert resp.json() == {"error": api.GENERIC_ERROR}


def test_unexpected_error_is_500(client, fake_llm):
    fake_llm.queue(ValueError("boom"))
    resp = client.post("/api/chatbot/ask", json={"message": "Rome"})
    assert resp.status_code == 500
    assert resp.json() == {"error": api.GENERIC_ERROR}


def test_busy_session_is_500(client, fake_llm):
    client.store.lock_timeout = 0.05
    sess = client.store.get_or_create("default")
    sess.lock.acquire()
    try:
        resp = client.post("/api/chatbot/ask", json={"message": "Rome"})
    finally:
        sess.lock.release()
    assert resp.status_code == 500
    assert resp.json() == {"error": api.GENERIC_ERROR}
    assert fake_llm.calls == []
    assert sess.messages == []


def test_missing_message_is_rejected(client):
    resp = client.post("/api/chatbot/ask", json={"language": "fr"})
    assert resp.status_code == 422


def test_cors_is_open(client):
    resp = client.options(
        "/api/chatbot/ask",
        headers={"Origin": "http://example.com", "Access-Control-Request-Method": "POST"},
    )
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] in {"*", "http://example.com"}


def test_languages_endpoint(client):
    data = client.get("/api/chatbot/languages").json()
    assert data["default"] == "en"
    assert data["languages"]["ja"] == "Japanese (日本語)"


def test_health_counts_sessions(client, fake_llm):
    fake_llm.queue("{}", "yes", "ok")
    client.post("/api/chatbot/ask", json={"message": "Oslo", "sessionId": "a"})
    assert client.get("/health").json() == {"status": "ok", "sessions": 1}


@pytest.fixture
def dist(tmp_path):
    (tmp_path / "index.html").write_text("<html>client</html>", encoding="utf-8")
    (tmp_path / "assets").mkdir()
    (tmp_path / "assets" / "app.js").write_text("console.log('hi')", encoding="utf-8")
    (tmp_path / "favicon.ico").write_bytes(b"\x00\x01")
    return tmp_path


def test_static_client_fallback(dist):
    with TestClient(api.create_app(str(dist))) as c:
        assert c.get("/").text == "<html>client</html>"
        assert c.get("/trips/paris/day-2").text == "<html>client</html>"
        assert c.get("/assets/app.js").text == "console.log('hi')"
        assert c.get("/favicon.ico").content == b"\x00\x01"
        assert c.get("/api/nope").status_code == 404


def test_static_client_disabled_without_index(tmp_path):
    with TestClient(api.create_app(str(tmp_path))) as c:
        assert c.get("/somewhere").status_code == 404
