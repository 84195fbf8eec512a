"""Token balance verification."""

import asyncio
import logging
from dataclasses import dataclass, field

from vpn_checkout.adapters.solana_rpc_client import LedgerClient
from vpn_checkout.domain.errors import InsufficientFundsError, LedgerRpcError
from vpn_checkout.services.retry import BALANCE_POLICY, RetryPolicy, Sleep

_logger = logging.getLogger(__name__)


@dataclass
class BalanceVerifier:
    """Polls a token account until it holds at least the required amount."""

    ledger: LedgerClient
    policy: RetryPolicy = BALANCE_POLICY
    sleep: Sleep = field(default=asyncio.sleep)

    async def verify(self, address: str, required: int) -> int:
        """Return the observed balance once it meets ``required``."""
        observed = 0
        for attempt in self.policy.attempts():
            try:
                observed = await self.ledger.get_token_account_balance(address)
            except LedgerRpcError as exc:
                _logger.info(
                    "Balance check attempt %s/%s for %s failed: %s",
                    attempt,
                    self.policy.max_attempts,
                    address,
                    exc,
                )
            else:
                _logger.info("Token balance for %s: %s", address, observed)
                if observed >= required:
                    return observed
            await self.policy.pause(attempt, self.sleep)
        raise InsufficientFundsError(observed=observed, required=required)
