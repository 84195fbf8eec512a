"""Payment session lifecycle."""

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from solders.pubkey import Pubkey
from spl.token.instructions import get_associated_token_address

from vpn_checkout.domain.sessions import BurnerCredential, PaymentSession
from vpn_checkout.services.session_store import SessionStore

DEFAULT_SESSION_TTL = timedelta(minutes=15)

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def derive_deposit_address(owner: Pubkey, mint: Pubkey) -> Pubkey:
    """Derive the associated token account for an owner and mint."""
    return get_associated_token_address(owner, mint)


def generate_session_id() -> str:
    """Return an opaque, unguessable session handle."""
    return f"session_{secrets.token_hex(16)}"


@dataclass
class SessionService:
    """Creates, resolves and removes payment sessions."""

    store: SessionStore
    mint: str
    ttl: timedelta = DEFAULT_SESSION_TTL
    clock: Callable[[], datetime] = field(default=_utcnow)

    def create_session(self) -> PaymentSession:
        """Allocate a burner keypair and its deposit address."""
        burner = BurnerCredential.generate()
        deposit_address = derive_deposit_address(
            Pubkey.from_string(burner.address), Pubkey.from_string(self.mint)
        )
        now = self.clock()
        session = PaymentSession(
            id=generate_session_id(),
            burner=burner,
            deposit_address=str(deposit_address),
            created_at=now,
            expires_at=now + self.ttl,
        )
        self.store.put(session)
        evicted = self.store.sweep(now)
        _logger.info(
            "Created session %s with burner %s",
            session.id,
            burner.address,
            extra={"evicted_sessions": evicted},
        )
        return session

    def get_session(self, session_id: str) -> PaymentSession | None:
        """Return an active session, treating expired entries as absent."""
        session = self.store.get(session_id)
        if session is None:
            return None
        if session.is_expired(self.clock()):
            self.store.delete(session_id)
            return None
        return session

    def delete_session(self, session_id: str) -> None:
        """Remove a session; absent ids are ignored."""
        self.store.delete(session_id)
