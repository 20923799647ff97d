"""Shared fixtures: a scripted stand-in for llm.client.call_llm."""

from __future__ import annotations

import pytest

from assistant.session import SessionStore
from llm.client import LLMError, build_messages


class FakeLLM:
    """Returns scripted replies in call order and records every call.

    A reply that is an Exception instance is raised instead of returned.
    """

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.calls: list[dict] = []

    def __call__(self, system_prompt, user_prompt=None, history=None, max_tokens=None, temperature=0.3, model=None):
        self.calls.append(
            {
                "system": system_prompt,
                "user": user_prompt,
                "history": list(history or []),
                "messages": build_messages(system_prompt, user_prompt, history),
                "max_tokens": max_tokens,
                "temperature": temperature,
                "model": model,
            }
        )
        if not self.replies:
            raise AssertionError("FakeLLM ran out of scripted replies")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def queue(self, *replies):
        self.replies.extend(replies)
        return self


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def store():
    return SessionStore(ttl_seconds=0, max_sessions=0, window=10)


@pytest.fixture
def llm_error():
    return LLMError("OpenAI error (HTTP 429).", status=429)


@pytest.fixture(autouse=True)
def _clean_llm_env(monkeypatch):
    for name in ("LLM_PROVIDER", "LLM_OFFLINE", "OPENAI_MODEL", "OPENAI_CHAT_MODEL", "OPENAI_API_KEY", "OPENAI_API_URL",
                 "HTTP_TIMEOUT", "SESSION_LOCK_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
