"""TTL-based store for practice sessions."""

from __future__ import annotations

import threading
import time
from typing import Callable

from cachetools import TTLCache

from cardcoach.config import get_scheduler_settings
from cardcoach.srs.scheduler import DEFAULT_CONFIG, SchedulerConfig
from cardcoach.srs.session import PracticeSession


# Key used when a session spans all of the user's cards rather than one set
ALL_CARDS_KEY = "*"


class SessionStore:
    """Thread-safe TTL-based session store.

    Stores PracticeSession keyed by (user_id, set_id).
    Sessions expire after TTL seconds of inactivity (sliding window).
    """

    # Default TTL: 30 minutes
    DEFAULT_TTL_SECONDS = 30 * 60
    # Max sessions to cache
    MAX_SESSIONS = 10000

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        maxsize: int = MAX_SESSIONS,
        config: SchedulerConfig = DEFAULT_CONFIG,
        timer: Callable[[], float] = time.monotonic,
    ):
        """Initialize the session store.

        Args:
            ttl_seconds: Time-to-live for sessions in seconds
            maxsize: Maximum number of sessions to cache
            config: Scheduling policy given to newly created sessions
            timer: Clock used for expiry
        """
        self._cache: TTLCache[tuple[str, str], PracticeSession] = TTLCache(
            maxsize=maxsize, ttl=ttl_seconds, timer=timer
        )
        self._lock = threading.Lock()
        self._config = config

    def _make_key(self, user_id: str, set_id: str | None) -> tuple[str, str]:
        """Create a cache key from user and set IDs."""
        return (user_id, set_id or ALL_CARDS_KEY)

    def get(self, user_id: str, set_id: str | None) -> PracticeSession | None:
        """Get the session for a user and set.

        Returns None if no session exists or it has expired.
        Accessing the session refreshes its TTL (sliding window).
        """
        key = self._make_key(user_id, set_id)
        with self._lock:
            session = self._cache.get(key)
            if session is not None:
                # Re-set to refresh TTL (sliding window)
                self._cache[key] = session
            return session

    def get_or_create(self, user_id: str, set_id: str | None) -> PracticeSession:
        """Get the existing session or create an idle one."""
        key = self._make_key(user_id, set_id)
        with self._lock:
            session = self._cache.get(key)
            if session is None:
                session = PracticeSession(config=self._config)
            self._cache[key] = session
            return session

    def update(self, user_id: str, set_id: str | None, session: PracticeSession) -> None:
        """Update session state (also refreshes TTL)."""
        key = self._make_key(user_id, set_id)
        with self._lock:
            self._cache[key] = session

    def reset(self, user_id: str, set_id: str | None) -> None:
        """Remove the session for a user and set."""
        key = self._make_key(user_id, set_id)
        with self._lock:
            self._cache.pop(key, None)

    def remove_card(self, user_id: str, card_id: str) -> int:
        """Drop a deleted card from every session the user has open.

        Returns the number of sessions that held the card.
        """
        with self._lock:
            sessions = [session for key, session in self._cache.items() if key[0] == user_id]
            return sum(1 for session in sessions if session.remove_card(card_id))

    def clear(self) -> None:
        """Clear all sessions (for testing)."""
        with self._lock:
            self._cache.clear()


# Singleton instance
_session_store: SessionStore | None = None


def get_session_store() -> SessionStore:
    """Get the singleton session store instance."""
    global _session_store
    if _session_store is None:
        settings = get_scheduler_settings()
        _session_store = SessionStore(
            ttl_seconds=settings.session_ttl_seconds,
            config=settings.to_config(),
        )
    return _session_store


def reset_session_store() -> None:
    """Reset the session store (for testing)."""
    global _session_store
    _session_store = None
