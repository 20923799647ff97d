"""
llm/client.py

Chat-completion client for OpenAI-compatible endpoints (and Ollama).
- Provides a single entrypoint: call_llm(system_prompt, user_prompt, history=None, ...)
- History is a list of {'role': 'user'|'assistant', 'content': str}
- Failures raise LLMError so callers can decide how to degrade

Environment variables:
- LLM_PROVIDER       (openai | ollama) default openai
- OPENAI_API_URL     (default: https://api.openai.com)
- OPENAI_API_KEY     (required for openai)
- OPENAI_MODEL       (default: gpt-3.5-turbo)
- OPENAI_CHAT_MODEL  (default: gpt-4, see answer_model)
- OLLAMA_BASE_URL    (default: http://localhost:11434)
- OLLAMA_MODEL       (default: qwen2.5:3b)
- LLM_OFFLINE        (set to 1/true to stub responses without calling the API)
"""

import logging
import os

import requests

from util import http


logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-3.5-turbo"


class LLMError(RuntimeError):
    """Raised when the completion endpoint cannot produce a reply."""

    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status


def answer_model():
    """Model for user-facing answers (OPENAI_CHAT_MODEL, default gpt-4).

    Returns None for other providers so their own model env var applies.
    """
    if os.getenv("LLM_PROVIDER", "openai").strip().lower() != "openai":
        return None
    return os.getenv("OPENAI_CHAT_MODEL", "gpt-4")


def build_messages(system_prompt, user_prompt=None, history=None):
    """Assemble the role-tagged message list sent to the model."""
    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    if history:
        messages.extend(history)
    if user_prompt:
        messages.append({"role": "user", "content": user_prompt})
    return messages


def call_llm(system_prompt, user_prompt=None, history=None, max_tokens=None, temperature=0.3, model=None):
    """
    Call an LLM with system + user prompts and optional history.
    Provider is selected by LLM_PROVIDER env: 'openai' (default) or 'ollama'.

    Args:
        system_prompt: Instruction placed first in the message list (str)
        user_prompt: Per-turn user message; omitted when None (str)
        history: List of past messages as dicts: {'role': 'user'|'assistant', 'content': str}
        max_tokens: Upper bound on generated tokens (int or None)
        temperature: Sampling temperature (float)
        model: Overrides the provider's model env var (str or None)

    Returns:
        Model response text (str), trimmed. May be empty.

    Raises:
        LLMError: on HTTP, network or payload errors.
    """
    provider = os.getenv("LLM_PROVIDER", "openai").strip().lower()
    offline = os.getenv("LLM_OFFLINE", "").strip().lower() in {"1", "true", "yes"}

    messages = build_messages(system_prompt, user_prompt, history)

    if offline:
        source = user_prompt or system_prompt or ""
        preview = source.strip().splitlines()[0][:120] if source.strip() else ""
        return f"[offline] {preview}" if preview else "[offline] OK"

    if provider == "ollama":
        base = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434").rstrip("/")
        options = {"temperature": temperature, "num_ctx": 4096}
        if max_tokens:
            options["num_predict"] = max_tokens
        payload = {
            "model": model or os.getenv("OLLAMA_MODEL", "qwen2.5:3b"),
            "messages": messages,
            "stream": False,
            "options": options,
        }
        data = _post(f"{base}/api/chat", payload, {"Content-Type": "application/json", "Accept": "application/json"}, "Ollama")
        try:
            content = (data.get("message") or {}).get("content", "")
        except AttributeError:
            raise LLMError("Ollama returned a malformed payload.")
        return _text(content, "Ollama")

    base = os.getenv("OPENAI_API_URL", "https://api.openai.com")
    key = os.getenv("OPENAI_API_KEY", "")
    endpoint = f"{base.rstrip('/')}/v1/chat/completions"
    headers = {"Authorization": f"Bearer {key}", "Content-Type": "application/json", "Accept": "application/json"}
    payload = {
        "model": model or os.getenv("OPENAI_MODEL", DEFAULT_MODEL),
        "messages": messages,
        "temperature": temperature,
    }
    if max_tokens:
        payload["max_tokens"] = max_tokens

    data = _post(endpoint, payload, headers, "OpenAI")
    try:
        content = (
            data.get("choices", [{}])[0]
            .get("message", {})
            .get("content", "")
        )
    except (AttributeError, IndexError, TypeError):
        raise LLMError("OpenAI returned a malformed payload.")
    return _text(content, "OpenAI")


def _text(content, label):
    if content is None:
        return ""
    if not isinstance(content, str):
        raise LLMError(f"{label} returned a malformed payload.")
    return content.strip()


def _post(endpoint, payload, headers, label):
    try:
        return http.post_json(endpoint, payload, headers=headers)
    except requests.HTTPError as http_err:
        status = getattr(http_err.response, "status_code", None)
        logger.warning("%s request failed with HTTP %s", label, status)
        raise LLMError(f"{label} error (HTTP {status}).", status=status) from http_err
    except requests.RequestException as exc:
        logger.warning("%s request failed: %s", label, exc.__class__.__name__)
        raise LLMError(f"Network issue while contacting {label}.") from exc
