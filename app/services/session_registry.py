"""Registry of live menu sessions.

Sessions are created on start, looked up by id for every call, and dropped
on end. A session left unused for ``session_idle_ttl_ms`` is ended by the
next start or lookup. Nothing survives a process restart.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from app.core.config import settings
from app.core.errors import NotFoundAppError
from app.services.menu_session import MenuSession

logger = logging.getLogger(__name__)


def _now_ms() -> float:
    return time.time() * 1000


def _session_not_found(session_id: str) -> NotFoundAppError:
    return NotFoundAppError(
        code="session_not_found",
        message="Session not found",
        details={"session_id": session_id},
    )


class SessionRegistry:
    """Thread-safe map of session id to MenuSession with idle expiry."""

    def __init__(
        self,
        session_factory: Callable[[], MenuSession] = MenuSession,
        *,
        idle_ttl_ms: int | None = None,
        clock: Callable[[], float] = _now_ms,
    ) -> None:
        self._session_factory = session_factory
        self._idle_ttl_ms = idle_ttl_ms or settings.app.session_idle_ttl_ms
        self._clock = clock
        self._sessions: dict[str, MenuSession] = {}
        self._last_seen: dict[str, float] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _sweep(self, now: float) -> None:
        with self._lock:
            expired = [
                session_id
                for session_id, seen in self._last_seen.items()
                if now - seen >= self._idle_ttl_ms
            ]
            sessions = [self._sessions.pop(session_id) for session_id in expired]
            for session_id in expired:
                del self._last_seen[session_id]

        for session in sessions:
            session.end()
            logger.info("session.expired", extra={"session_id": session.session_id})

    async def start(self) -> MenuSession:
        """Create a session, register it and run its initial menu fetch.

        A session whose fetch fails is unregistered and ended before the
        error propagates.
        """
        now = self._clock()
        self._sweep(now)

        session = self._session_factory()
        with self._lock:
            self._sessions[session.session_id] = session
            self._last_seen[session.session_id] = now

        try:
            await session.start()
        except Exception:
            with self._lock:
                self._sessions.pop(session.session_id, None)
                self._last_seen.pop(session.session_id, None)
            session.end()
            logger.exception("session.start_failed", extra={"session_id": session.session_id})
            raise
        return session

    def get(self, session_id: str) -> MenuSession:
        """Look up a live session and mark it as used."""
        now = self._clock()
        self._sweep(now)
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                self._last_seen[session_id] = now
        if session is None:
            raise _session_not_found(session_id)
        return session

    def end(self, session_id: str) -> None:
        """End and forget a session.

        Raises:
            NotFoundAppError: If the session id is unknown.
        """
        with self._lock:
            session = self._sessions.pop(session_id, None)
            self._last_seen.pop(session_id, None)
        if session is None:
            raise _session_not_found(session_id)
        session.end()

    def clear(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
            self._last_seen.clear()
        for session in sessions:
            session.end()
        logger.info("session_registry.cleared", extra={"count": len(sessions)})
