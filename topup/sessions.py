import secrets
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional


@dataclass
class AdminSession:
    token: str
    admin_id: int
    username: str
    must_rotate: bool
    expires_at: float


class SessionStore:
    """In-process admin sessions keyed by an opaque random token.

    Entries expire ``ttl_seconds`` after creation and are dropped lazily on
    access. Sessions do not survive a restart and are not shared between
    worker processes.
    """

    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._sessions: Dict[str, AdminSession] = {}

    def create(self, admin_id: int, username: str, must_rotate: bool = False) -> AdminSession:
        self.purge_expired()
        session = AdminSession(
            token=secrets.token_urlsafe(32),
            admin_id=admin_id,
            username=username,
            must_rotate=must_rotate,
            expires_at=self._clock() + self.ttl_seconds,
        )
        self._sessions[session.token] = session
        return session

    def get(self, token: str) -> Optional[AdminSession]:
        session = self._sessions.get(token)
        if session is None:
            return None
        if session.expires_at <= self._clock():
            self._sessions.pop(token, None)
            return None
        return session

    def destroy(self, token: Optional[str]) -> Optional[AdminSession]:
        if not token:
            return None
        return self._sessions.pop(token, None)

    def mark_rotated(self, admin_id: int) -> None:
        for session in list(self._sessions.values()):
            if session.admin_id == admin_id:
                session.must_rotate = False

    def purge_expired(self) -> None:
        now = self._clock()
        for token, session in list(self._sessions.items()):
            if session.expires_at <= now:
                self._sessions.pop(token, None)

    def __len__(self) -> int:
        return len(self._sessions)
