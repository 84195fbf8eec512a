"""Models for Solana ledger responses."""

from dataclasses import dataclass

CONFIRMED_STATUSES = frozenset({"confirmed", "finalized"})


@dataclass(frozen=True)
class LatestBlockhash:
    """Latest finalized blockhash and the height it stays valid until."""

    blockhash: str
    last_valid_block_height: int


@dataclass(frozen=True)
class SignatureStatus:
    """Confirmation status reported for a transaction signature."""

    confirmation_status: str | None
    err: object | None = None

    @property
    def has_error(self) -> bool:
        return self.err is not None

    @property
    def is_confirmed(self) -> bool:
        return self.confirmation_status in CONFIRMED_STATUSES
