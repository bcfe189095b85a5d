"""In-memory single-use confirmation tokens for bookings."""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Callable, Dict, List, Optional

from agenda.services.exceptions import ConfirmationError, NotFoundError


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ConfirmationToken:
    """Links a token to the booking it confirms."""

    token: str
    booking_id: str
    expires_at: datetime
    used_at: Optional[datetime] = None


class ConfirmationTokenStore:
    """Thread-safe token store with lazy expiry.

    Expired entries are dropped when they are redeemed or swept. ``sweep``
    runs on application shutdown and can also be called explicitly.
    """

    def __init__(
        self,
        ttl_minutes: int = 30,
        *,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._ttl = timedelta(minutes=ttl_minutes)
        self._clock = clock
        self._tokens: Dict[str, ConfirmationToken] = {}
        self._lock = Lock()

    def issue(self, booking_id: str) -> ConfirmationToken:
        """Create a new token for ``booking_id``."""

        entry = ConfirmationToken(
            token=secrets.token_urlsafe(16),
            booking_id=booking_id,
            expires_at=self._clock() + self._ttl,
        )
        with self._lock:
            self._tokens[entry.token] = entry
        return entry

    def redeem(self, token: str) -> ConfirmationToken:
        """Mark ``token`` used and return it.

        Raises ``NotFoundError`` for unknown or already swept tokens and
        ``ConfirmationError`` for expired or previously used ones.
        """

        now = self._clock()
        with self._lock:
            entry = self._tokens.get(token)
            if entry is None:
                raise NotFoundError("Unknown confirmation token")
            if entry.used_at is not None:
                raise ConfirmationError("Confirmation link already used")
            if entry.expires_at <= now:
                del self._tokens[token]
                raise ConfirmationError("Confirmation link expired")
            entry.used_at = now
            return entry

    def peek(self, token: str) -> Optional[ConfirmationToken]:
        """Return the unexpired entry for ``token`` without consuming it."""

        now = self._clock()
        with self._lock:
            entry = self._tokens.get(token)
            if entry is None or entry.expires_at <= now:
                return None
            return entry

    def sweep(self) -> int:
        """Drop expired tokens. Returns how many were removed."""

        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._tokens.items() if entry.expires_at <= now]
            for key in expired:
                del self._tokens[key]
            return len(expired)

    def values(self) -> List[ConfirmationToken]:
        """Return a snapshot of all stored tokens."""

        with self._lock:
            return list(self._tokens.values())
