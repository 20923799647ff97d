"""
assistant/router.py

Model-backed classification stages run before answering.

Key functions:
- classify_context(message, context): ask the model for {"location", "topic", "isFollowUp"} and
  parse it against a strict schema. Unparseable output degrades to an all-null update.
- parse_context_update(text): strict parser for the classifier reply; raises ContextParseError.
- is_travel_related(message, context): permissive topic gate; only a bare "yes" is in-domain.
- gate_says_yes(reply): the yes/no decision on its own.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from assistant.prompts import CONTEXT_ANALYSIS_PROMPT, TOPIC_GATE_PROMPT, context_turn
from assistant.results import StageResult
from assistant.session import ConversationContext
from llm.client import LLMError, call_llm


logger = logging.getLogger(__name__)

_NULL_WORDS = {"", "null", "none", "n/a", "unknown"}


class ContextParseError(ValueError):
    """Classifier output did not match the expected JSON object."""


class ContextUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    location: Optional[str] = None
    topic: Optional[str] = None
    isFollowUp: bool = False

    @field_validator("location", "topic", mode="before")
    @classmethod
    def _nullish(cls, v):
        if v is None:
            return None
        if not isinstance(v, str):
            raise ValueError("expected a string or null")
        v = v.strip()
        return None if v.lower() in _NULL_WORDS else v

    @field_validator("isFollowUp", mode="before")
    @classmethod
    def _null_flag(cls, v):
        return False if v is None else v


FALLBACK_UPDATE = ContextUpdate()


def parse_context_update(text) -> ContextUpdate:
    """Parse the classifier reply into a ContextUpdate."""
    try:
        data = json.loads((text or "").strip())
    except json.JSONDecodeError as exc:
        raise ContextParseError(f"not JSON: {exc.msg}") from exc
    if not isinstance(data, dict):
        raise ContextParseError(f"expected an object, got {type(data).__name__}")
    try:
        return ContextUpdate.model_validate(data)
    except ValidationError as exc:
        raise ContextParseError(f"schema mismatch: {exc.error_count()} error(s)") from exc


def classify_context(message: str, context: ConversationContext, llm=call_llm) -> StageResult:
    """Infer location/topic/follow-up for `message` given the previous context.

    - ok: value is the parsed ContextUpdate
    - parse failure: not ok, value is FALLBACK_UPDATE (merge keeps old topic/location)
    - model failure: not ok, value is None (caller keeps the context as is)
    """
    try:
        raw = llm(
            CONTEXT_ANALYSIS_PROMPT,
            context_turn(context, message),
            max_tokens=150,
            temperature=0.1,
        )
    except LLMError as exc:
        logger.warning("Context classification skipped: %s", exc)
        return StageResult.failure(exc)

    try:
        update = parse_context_update(raw)
    except ContextParseError as exc:
        logger.warning("Context classification unparseable (%s); using empty update", exc)
        return StageResult.failure(exc, value=FALLBACK_UPDATE)
    return StageResult.success(update)


def gate_says_yes(reply) -> bool:
    return (reply or "").strip().lower() == "yes"


def is_travel_related(message: str, context: ConversationContext, llm=call_llm) -> StageResult:
    """Topic gate. A model failure counts as out-of-domain (value False)."""
    try:
        raw = llm(
            TOPIC_GATE_PROMPT,
            context_turn(context, message),
            max_tokens=10,
            temperature=0.1,
        )
    except LLMError as exc:
        logger.warning("Topic gate failed, treating as out-of-domain: %s", exc)
        return StageResult.failure(exc, value=False)
    return StageResult.success(gate_says_yes(raw))
