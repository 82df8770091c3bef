from __future__ import annotations

import secrets
import time
from threading import RLock
from typing import Callable, Dict, Optional, Tuple


class SessionRegistry:
    """
    Maps opaque login tokens to user ids for the lifetime of the process.
    Expired tokens are dropped when they are next resolved and swept
    whenever a new session is opened.
    """

    def __init__(self, ttl_seconds: int = 24 * 60 * 60, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = RLock()
        self._sessions: Dict[str, Tuple[str, float]] = {}

    def open(self, user_id: str) -> str:
        token = secrets.token_urlsafe(32)
        with self._lock:
            now = self._clock()
            self._sessions = {t: e for t, e in self._sessions.items() if e[1] > now}
            self._sessions[token] = (user_id, now + self._ttl)
        return token

    def resolve(self, token: Optional[str]) -> Optional[str]:
        """Return the user id behind ``token``, or None if unknown or expired."""
        if not token:
            return None
        with self._lock:
            entry = self._sessions.get(token)
            if entry is None:
                return None
            user_id, expires_at = entry
            if self._clock() >= expires_at:
                del self._sessions[token]
                return None
            return user_id

    def close(self, token: Optional[str]) -> bool:
        if not token:
            return False
        with self._lock:
            return self._sessions.pop(token, None) is not None
