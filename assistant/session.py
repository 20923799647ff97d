"""
assistant/session.py

Conversation session state and the in-memory session repository.

Classes:
- ConversationContext: inferred location/topic/follow-up metadata used to steer prompts.
- Session: bounded turn history plus context, with helpers to append, trim and slice.
- SessionStore: get/create/update/evict sessions by id, with idle expiry and a capacity cap.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable


logger = logging.getLogger(__name__)

DEFAULT_SESSION_ID = "default"


def _env_int(name, default):
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


@dataclass(frozen=True)
class ConversationContext:
    last_topic: str | None = None
    location: str | None = None
    is_follow_up: bool = False

    def to_dict(self) -> dict:
        """Wire form embedded in classifier prompts."""
        return {
            "lastTopic": self.last_topic,
            "location": self.location,
            "isFollowUp": self.is_follow_up,
        }

    def merge(self, update) -> "ConversationContext":
        """Fold a classifier update into this context.

        Topic and location only move forward: an empty value keeps what we had.
        The follow-up flag always takes the fresh value.
        """
        return ConversationContext(
            last_topic=getattr(update, "topic", None) or self.last_topic,
            location=getattr(update, "location", None) or self.location,
            is_follow_up=bool(getattr(update, "isFollowUp", False)),
        )


@dataclass
class Session:
    session_id: str = DEFAULT_SESSION_ID
    messages: list[dict[str, str]] = field(default_factory=list)  # list of {role, content}
    context: ConversationContext = field(default_factory=ConversationContext)
    window: int = 10
    created_at: float = field(default_factory=time.monotonic)
    last_seen: float = field(default_factory=time.monotonic)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)
    in_flight: int = field(default=0, repr=False, compare=False)

    def add(self, role, content):
        """Append a message to the conversation history."""
        self.messages.append({"role": role, "content": content})

    def append_user_turn(self, content):
        self.add("user", content)
        self.trim_to_window()

    def append_assistant_turn(self, content):
        self.add("assistant", content)
        self.trim_to_window()

    def trim_to_window(self, n=None):
        """Drop the oldest turns so at most `n` (default: the session window) remain."""
        n = self.window if n is None else n
        if len(self.messages) > n:
            del self.messages[: len(self.messages) - n]

    def update_context(self, update):
        self.context = self.context.merge(update)
        return self.context

    @property
    def busy(self):
        """A turn holds or waits on this session."""
        return self.in_flight > 0 or self.lock.locked()

    def prior_turns(self):
        """History visible to the model: everything but the just-appended user turn."""
        if self.messages and self.messages[-1]["role"] == "user":
            return list(self.messages[:-1])
        return list(self.messages)


class SessionBusy(RuntimeError):
    """A turn could not acquire its session lock in time."""


class SessionStore:
    """In-memory session repository.

    Sessions idle longer than ``ttl_seconds`` are dropped on the next lookup
    (``0`` keeps them for the process lifetime). When more than
    ``max_sessions`` exist, the least recently seen one is evicted. Sessions
    with a turn in flight are never evicted.
    """

    def __init__(
        self,
        ttl_seconds: float | None = None,
        max_sessions: int | None = None,
        window: int | None = None,
        lock_timeout: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = _env_int("SESSION_TTL_SECONDS", 3600) if ttl_seconds is None else ttl_seconds
        self.max_sessions = _env_int("MAX_SESSIONS", 1000) if max_sessions is None else max_sessions
        self.window = _env_int("HISTORY_TURNS", 10) if window is None else window
        self.lock_timeout = _env_int("SESSION_LOCK_TIMEOUT", 60) if lock_timeout is None else lock_timeout
        self._clock = clock
        self._sessions: OrderedDict[str, Session] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._sessions)

    def __contains__(self, session_id):
        return _normalize_id(session_id) in self._sessions

    def get(self, session_id) -> Session | None:
        with self._lock:
            return self._sessions.get(_normalize_id(session_id))

    def get_or_create(self, session_id) -> Session:
        with self._lock:
            return self._get_or_create_locked(_normalize_id(session_id))

    @contextmanager
    def turn(self, session_id):
        """Hold a session for one turn: pinned against eviction and locked.

        Raises SessionBusy when the lock is not acquired within ``lock_timeout``
        seconds (``0`` or less waits forever).
        """
        with self._lock:
            sess = self._get_or_create_locked(_normalize_id(session_id), pin=True)
        try:
            timeout = self.lock_timeout if self.lock_timeout and self.lock_timeout > 0 else -1
            if not sess.lock.acquire(timeout=timeout):
                raise SessionBusy(f"session {sess.session_id} is busy")
            try:
                yield sess
                self.update(sess)
            finally:
                sess.lock.release()
        finally:
            with self._lock:
                sess.in_flight -= 1

    def update(self, session: Session) -> Session:
        """Store `session` and refresh it; a different live session under the same id wins."""
        with self._lock:
            current = self._sessions.get(session.session_id)
            if current is not None and current is not session:
                logger.warning("Session %s was replaced while in use; keeping the newer one", session.session_id)
                return current
            session.last_seen = self._clock()
            self._sessions[session.session_id] = session
            self._sessions.move_to_end(session.session_id)
            self._enforce_capacity_locked()
        return session

    def evict(self, session_id) -> bool:
        with self._lock:
            return self._sessions.pop(_normalize_id(session_id), None) is not None

    def evict_expired(self) -> int:
        with self._lock:
            return self._evict_expired_locked()

    def _get_or_create_locked(self, sid, pin=False):
        self._evict_expired_locked()
        sess = self._sessions.get(sid)
        now = self._clock()
        if sess is None:
            sess = Session(session_id=sid, window=self.window, created_at=now, last_seen=now)
            if pin:
                sess.in_flight += 1
            self._sessions[sid] = sess
            logger.info("Created session %s (%d active)", sid, len(self._sessions))
            self._enforce_capacity_locked(keep=sid)
        else:
            sess.last_seen = now
            self._sessions.move_to_end(sid)
            if pin:
                sess.in_flight += 1
        return sess

    def _evict_expired_locked(self):
        if not self.ttl_seconds or self.ttl_seconds <= 0:
            return 0
        now = self._clock()
        expired = [
            sid for sid, s in self._sessions.items()
            if now - s.last_seen > self.ttl_seconds and not s.busy
        ]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info("Expired %d idle session(s)", len(expired))
        return len(expired)

    def _enforce_capacity_locked(self, keep=None):
        if not self.max_sessions or self.max_sessions <= 0:
            return
        excess = len(self._sessions) - self.max_sessions
        if excess <= 0:
            return
        # oldest first; busy sessions stay even if that leaves us over the cap
        victims = [sid for sid, s in self._sessions.items() if not s.busy and sid != keep][:excess]
        for sid in victims:
            del self._sessions[sid]
            logger.info("Evicted least recently used session %s", sid)


def _normalize_id(session_id):
    return (session_id or "").strip() or DEFAULT_SESSION_ID
