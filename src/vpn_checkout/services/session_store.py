"""Session storage abstractions."""

import threading
from datetime import datetime
from typing import Protocol

from vpn_checkout.domain.sessions import PaymentSession


class SessionStore(Protocol):
    """Key-value storage for payment sessions."""

    def get(self, session_id: str) -> PaymentSession | None:
        """Return a stored session, expired or not."""

    def put(self, session: PaymentSession) -> None:
        """Insert or replace a session."""

    def delete(self, session_id: str) -> PaymentSession | None:
        """Remove a session and return it, if present."""

    def sweep(self, now: datetime) -> int:
        """Remove sessions that expired before ``now`` and return the count."""


class InMemorySessionStore(SessionStore):
    """Process-local session store guarded by a lock."""

    def __init__(self) -> None:
        self._sessions: dict[str, PaymentSession] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def get(self, session_id: str) -> PaymentSession | None:
        with self._lock:
            return self._sessions.get(session_id)

    def put(self, session: PaymentSession) -> None:
        with self._lock:
            self._sessions[session.id] = session

    def delete(self, session_id: str) -> PaymentSession | None:
        with self._lock:
            return self._sessions.pop(session_id, None)

    def sweep(self, now: datetime) -> int:
        with self._lock:
            expired = [
                session_id
                for session_id, session in self._sessions.items()
                if session.expires_at < now
            ]
            for session_id in expired:
                del self._sessions[session_id]
        return len(expired)
