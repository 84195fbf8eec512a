"""Domain models for payment sessions."""

from dataclasses import dataclass, field
from datetime import datetime

from solders.keypair import Keypair


@dataclass
class BurnerCredential:
    """Single-use Solana keypair owned by exactly one payment session.

    The secret is kept in a mutable buffer so it can be zeroed once the
    session is consumed. It is excluded from ``repr`` and never serialised.
    """

    address: str
    _secret: bytearray = field(repr=False)
    _wiped: bool = field(default=False, repr=False)

    @classmethod
    def generate(cls) -> "BurnerCredential":
        """Create a fresh random keypair."""
        keypair = Keypair()
        return cls(address=str(keypair.pubkey()), _secret=bytearray(bytes(keypair)))

    @classmethod
    def from_keypair(cls, keypair: Keypair) -> "BurnerCredential":
        return cls(address=str(keypair.pubkey()), _secret=bytearray(bytes(keypair)))

    @property
    def is_wiped(self) -> bool:
        return self._wiped

    def keypair(self) -> Keypair:
        """Rebuild the signing keypair from the held secret."""
        if self._wiped:
            raise RuntimeError("Burner credential has been wiped")
        return Keypair.from_bytes(bytes(self._secret))

    def secret_base58(self) -> str:
        """Return the 64-byte secret in the base58 form wallet SDKs expect."""
        return str(self.keypair())

    def wipe(self) -> None:
        """Zero the secret in place; the credential is unusable afterwards."""
        for index in range(len(self._secret)):
            self._secret[index] = 0
        self._wiped = True


@dataclass(frozen=True)
class PaymentSession:
    """One in-flight payment attempt."""

    id: str
    burner: BurnerCredential
    deposit_address: str
    created_at: datetime
    expires_at: datetime

    @property
    def burner_address(self) -> str:
        return self.burner.address

    def is_expired(self, now: datetime) -> bool:
        """Return true once the session TTL has elapsed."""
        return now >= self.expires_at
