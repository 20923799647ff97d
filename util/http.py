"""
util/http.py

Tiny HTTP helper for JSON POST.
- Timeout can be configured via HTTP_TIMEOUT env (default 30s)
- Single attempt: raises for HTTP status errors and network errors
"""

import os

import requests


def _env_timeout():
    try:
        return float(os.getenv("HTTP_TIMEOUT", "30"))
    except Exception:
        return 30.0


def post_json(url, payload, headers=None, timeout=None):
    """HTTP POST a JSON body and decode the JSON reply."""
    if timeout is None:
        timeout = _env_timeout()
    resp = requests.post(url, json=payload, headers=headers, timeout=timeout)
    resp.raise_for_status()
    return resp.json()
