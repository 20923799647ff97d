"""
assistant/pipeline.py

One chat turn: classify context -> topic gate -> answer or refuse.

Each stage returns a StageResult; only a failed in-domain answer aborts the turn
(PipelineError). The store pins and locks the session for the whole turn, so concurrent
requests for the same session id run one after another and eviction leaves
the session alone until the turn ends.
"""

from __future__ import annotations

import logging

from assistant.languages import language_name, normalize_language
from assistant.responder import answer_in_domain, refuse_out_of_domain
from assistant.results import PipelineError
from assistant.router import classify_context, is_travel_related
from assistant.session import DEFAULT_SESSION_ID, SessionStore
from llm.client import call_llm


logger = logging.getLogger(__name__)


def handle_turn(store: SessionStore, message, language="en", session_id=DEFAULT_SESSION_ID, llm=call_llm) -> str:
    """Run the pipeline for one user message and return the assistant reply."""
    user = (message or "").strip()
    if not user:
        return ""

    code = normalize_language(language)
    lang_name = language_name(code)
    with store.turn(session_id) as sess:
        sess.append_user_turn(user)
        logger.info("Session %s: turn start lang=%s len=%d history=%d", sess.session_id, code, len(user), len(sess.messages))

        classified = classify_context(user, sess.context, llm=llm)
        if classified.value is not None:
            sess.update_context(classified.value)
        logger.info(
            "Session %s: context ok=%s topic=%r location=%r follow_up=%s",
            sess.session_id, classified.ok, sess.context.last_topic, sess.context.location, sess.context.is_follow_up,
        )

        gate = is_travel_related(user, sess.context, llm=llm)
        in_domain = bool(gate.value)
        logger.info("Session %s: gate ok=%s in_domain=%s", sess.session_id, gate.ok, in_domain)

        if in_domain:
            result = answer_in_domain(sess, user, lang_name, llm=llm)
            if not result.ok:
                raise PipelineError(f"answer stage failed: {result.error}")
        else:
            result = refuse_out_of_domain(lang_name, llm=llm)
        reply = result.value
        logger.info("Session %s: reply ok=%s len=%d", sess.session_id, result.ok, len(reply))

        sess.append_assistant_turn(reply)
    return reply
