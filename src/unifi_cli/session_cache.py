from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from .configmanager import ConfigManager

if TYPE_CHECKING:
    from .session_manager import Session

logger = ConfigManager.get_logger(__name__)

Clock = Callable[[], datetime]

SESSION_CACHE_KEY = "unifi_session"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionCache:
    """Time-aware store for the one active session of a client.

    Entries are only returned while `clock()` is strictly before their expiry;
    an expired entry is evicted on read. `get` and `set` are serialized by a
    lock so a reader never sees a half-replaced entry.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock: Clock = clock or utc_now
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[Session, datetime]] = {}

    def now(self) -> datetime:
        return self._clock()

    def get(self, key: str = SESSION_CACHE_KEY) -> Session | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.debug("Session cache miss key=%s", key)
                return None
            session, expires_at = entry
            if self._clock() < expires_at:
                logger.debug("Session cache hit key=%s expires_at=%s", key, expires_at.isoformat())
                return session
            del self._entries[key]
            logger.debug("Session cache entry expired key=%s expires_at=%s", key, expires_at.isoformat())
            return None

    def set(self, session: Session, expires_at: datetime, key: str = SESSION_CACHE_KEY) -> None:
        with self._lock:
            self._entries[key] = (session, expires_at)

    def evict(self, key: str = SESSION_CACHE_KEY) -> None:
        with self._lock:
            self._entries.pop(key, None)
