"""CSRF state storage for the authorization code flow."""

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol, Tuple, runtime_checkable


logger = logging.getLogger(__name__)

STATE_KEY_PREFIX = "oauth2:state:"


@runtime_checkable
class Cache(Protocol):
    """Minimal cache contract used to hold CSRF state.

    Implementations may be process-local or shared; only a shared cache lets
    a flow started on one node finish on another.
    """

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str, ttl: float) -> None:
        ...


class InMemoryCache:
    """Process-local cache with per-entry expiry."""

    def __init__(self):
        self._entries: Dict[str, Tuple[str, float]] = {}

    def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if time.monotonic() >= expires_at:
            self._entries.pop(key, None)
            return None
        return value

    def set(self, key: str, value: str, ttl: float) -> None:
        self._purge_expired()
        self._entries[key] = (value, time.monotonic() + ttl)

    def _purge_expired(self):
        now = time.monotonic()
        expired = [key for key, (_, expires_at) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]

    def __len__(self) -> int:
        self._purge_expired()
        return len(self._entries)


@dataclass(frozen=True)
class CsrfState:
    """State token issued for one session."""

    session_id: str
    state_token: str
    created_at: float = field(default_factory=time.time)


class CsrfStateStore:
    """Stores the outstanding state token of each session."""

    def __init__(self, cache: Cache, ttl: float):
        """Initialize the store.

        Args:
            cache: Backing cache
            ttl: Seconds a state token stays valid; must be positive
        """
        if ttl is None or ttl <= 0:
            raise ValueError("CSRF state TTL must be a positive number of seconds")
        self.cache = cache
        self.ttl = ttl

    def put(self, session_id: str, state_token: str) -> CsrfState:
        """Record ``state_token`` as the outstanding state of ``session_id``."""
        self.cache.set(self._key(session_id), state_token, self.ttl)
        return CsrfState(session_id=session_id, state_token=state_token)

    def get(self, session_id: str) -> Optional[str]:
        """Return the outstanding state token, or None if expired or unknown."""
        state = self.cache.get(self._key(session_id))
        if state is None:
            logger.debug("No CSRF state found for session %s", session_id)
        return state

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{STATE_KEY_PREFIX}{session_id}"
