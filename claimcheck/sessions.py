"""In-memory claim sessions shared between verification requests."""

from __future__ import annotations

import dataclasses
import logging
import threading
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from .models.claim import ClaimRecord

logger = logging.getLogger(__name__)

DEFAULT_MAX_SESSIONS = 1000
DEFAULT_SESSION_TTL_SECONDS = 3600


@dataclass(frozen=True)
class StoredUpload:
    """In-memory representation of an uploaded file."""

    filename: str
    content_type: str
    data: bytes
    size: int


@dataclass
class ClaimSession:
    """Claim context for one caller: the latest claim and verification image."""

    session_id: str
    claim: Optional[ClaimRecord] = None
    image: Optional[StoredUpload] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)


class ClaimSessionStore:
    """
    Bounded, lock-guarded map of session id to ClaimSession.

    At most ``max_sessions`` sessions are held; opening one more evicts the
    least recently used. A session idle for longer than ``ttl_seconds`` is
    dropped on the next store access. Reads return copies so a caller never
    observes a half-applied update.
    """

    def __init__(
        self,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        ttl_seconds: Optional[float] = DEFAULT_SESSION_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self.max_sessions = max_sessions
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        # Ordered oldest access first
        self._sessions: "OrderedDict[str, ClaimSession]" = OrderedDict()
        self._last_seen: Dict[str, float] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            self._expire()
            return len(self._sessions)

    def get(self, session_id: Optional[str]) -> Optional[ClaimSession]:
        if not session_id:
            return None
        with self._lock:
            self._expire()
            session = self._sessions.get(session_id)
            if session is None:
                return None
            self._touch(session_id)
            return dataclasses.replace(session)

    def get_or_create(self, session_id: Optional[str]) -> ClaimSession:
        """Return the named session, or a new one with a fresh id if it is unknown."""
        with self._lock:
            self._expire()
            session = self._sessions.get(session_id) if session_id else None
            if session is None:
                session = self._insert(ClaimSession(session_id=uuid.uuid4().hex))
            else:
                self._touch(session.session_id)
            return dataclasses.replace(session)

    def update(self, session_id: str, **changes: Any) -> ClaimSession:
        """
        Replace fields of a session atomically.

        A session evicted since the caller last read it is reopened under
        the same id, holding only the given changes.
        """
        with self._lock:
            self._expire()
            session = self._sessions.get(session_id)
            if session is None:
                logger.info(f"Session {session_id} was evicted, reopening it")
                session = self._insert(ClaimSession(session_id=session_id))
            else:
                self._touch(session_id)
            for key, value in changes.items():
                setattr(session, key, value)
            session.updated_at = datetime.utcnow()
            return dataclasses.replace(session)

    def _touch(self, session_id: str) -> None:
        self._sessions.move_to_end(session_id)
        self._last_seen[session_id] = self._clock()

    def _insert(self, session: ClaimSession) -> ClaimSession:
        while len(self._sessions) >= self.max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            self._last_seen.pop(evicted, None)
            logger.info(f"Evicted least recently used session {evicted}")
        self._sessions[session.session_id] = session
        self._last_seen[session.session_id] = self._clock()
        return session

    def _expire(self) -> None:
        if self.ttl_seconds is None:
            return
        cutoff = self._clock() - self.ttl_seconds
        while self._sessions:
            oldest = next(iter(self._sessions))
            if self._last_seen[oldest] > cutoff:
                break
            del self._sessions[oldest]
            del self._last_seen[oldest]
            logger.info(f"Expired idle session {oldest}")
