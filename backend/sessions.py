"""
Session registry: opaque cookie tokens mapped to a username and expiry.

Sessions are held in memory only. They end when they expire (checked lazily
in validate(), there is no background sweep), when revoked at logout, or
when the process exits.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from models.session import Session

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=1)
TOKEN_BYTES = 16   # 128-bit tokens, hex encoded


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionRegistry:
    def __init__(self, ttl: timedelta = DEFAULT_TTL, now: Callable[[], datetime] = _utcnow):
        self.ttl = ttl
        self._now = now
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, token: str) -> bool:
        return token in self._sessions

    def create(self, username: str) -> str:
        token = secrets.token_hex(TOKEN_BYTES)
        self._sessions[token] = Session(
            token=token,
            username=username,
            expires_at=self._now() + self.ttl,
        )
        return token

    def validate(self, token: Optional[str]) -> Optional[Session]:
        """Return the live session for token; an expired one is dropped and treated as absent."""
        if not token:
            return None

        session = self._sessions.get(token)
        if session is None:
            return None

        if session.expires_at <= self._now():
            self._sessions.pop(token, None)
            logger.info("Session for %r expired", session.username)
            return None

        return session

    def revoke(self, token: Optional[str]) -> bool:
        if not token:
            return False
        return self._sessions.pop(token, None) is not None

    def clear(self) -> None:
        self._sessions.clear()
