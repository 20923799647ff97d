"""
assistant/postprocess.py

Reply post-processing utilities applied after model generation.

Functions:
- clean_reply(text): trims whitespace and unwraps one layer of matching quotes, which
  translation replies tend to echo back from the quoted template.
"""

from __future__ import annotations

_QUOTE_PAIRS = {'"': '"', "'": "'", "“": "”", "«": "»", "„": "“", "「": "」"}


def clean_reply(text: str | None) -> str:
    out = (text or "").strip()
    if len(out) >= 2:
        closing = _QUOTE_PAIRS.get(out[0])
        if closing and out.endswith(closing):
            inner = out[1:-1]
            # leave replies like "A" and "B" alone
            if closing not in inner and out[0] not in inner:
                out = inner.strip()
    return out
