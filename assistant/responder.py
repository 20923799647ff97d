"""
assistant/responder.py

Final reply stages.
- answer_in_domain: full conversation (system instruction + prior turns + current message) to the answer model.
- refuse_out_of_domain: translate the fixed refusal into the reply language; never fails.
"""

from __future__ import annotations

import logging

from assistant.postprocess import clean_reply
from assistant.prompts import FALLBACK_REFUSAL, expand_follow_up, refusal_prompt, system_instruction
from assistant.results import StageResult
from assistant.session import Session
from llm.client import LLMError, answer_model, call_llm


logger = logging.getLogger(__name__)

NO_RESPONSE = "No response"


def answer_in_domain(session: Session, message: str, language_name: str, llm=call_llm) -> StageResult:
    """Answer a travel question in `language_name` using the session's history and context."""
    context = session.context
    prompt = expand_follow_up(message, context)
    if prompt != message:
        logger.info("Session %s: expanded short follow-up toward topic %r", session.session_id, context.last_topic)
    try:
        reply = llm(
            system_instruction(language_name, context),
            prompt,
            history=session.prior_turns(),
            max_tokens=500,
            temperature=0.7,
            model=answer_model(),
        )
    except LLMError as exc:
        logger.warning("Session %s: answer failed: %s", session.session_id, exc)
        return StageResult.failure(exc)
    return StageResult.success(clean_reply(reply) or NO_RESPONSE)


def refuse_out_of_domain(language_name: str, llm=call_llm) -> StageResult:
    """Refusal in `language_name`; falls back to the English text when translation fails."""
    try:
        reply = clean_reply(llm(refusal_prompt(language_name), None, max_tokens=150, temperature=0.3))
    except LLMError as exc:
        logger.warning("Refusal translation failed, using English fallback: %s", exc)
        return StageResult.failure(exc, value=FALLBACK_REFUSAL)
    if not reply:
        return StageResult.failure("empty translation", value=FALLBACK_REFUSAL)
    return StageResult.success(reply)
