"""Funding transaction confirmation polling."""

import asyncio
import logging
from dataclasses import dataclass, field

from vpn_checkout.adapters.solana_rpc_client import LedgerClient
from vpn_checkout.domain.errors import (
    ConfirmationTimeoutError,
    FundingTransactionFailedError,
    LedgerRpcError,
)
from vpn_checkout.domain.ledger import SignatureStatus
from vpn_checkout.services.retry import CONFIRMATION_POLICY, RetryPolicy, Sleep

_logger = logging.getLogger(__name__)


@dataclass
class ConfirmationWaiter:
    """Waits until a transaction signature is confirmed on-chain."""

    ledger: LedgerClient
    policy: RetryPolicy = CONFIRMATION_POLICY
    sleep: Sleep = field(default=asyncio.sleep)

    async def wait(self, signature: str) -> SignatureStatus:
        """Poll until confirmed, failing fast on an on-chain error."""
        for attempt in self.policy.attempts():
            try:
                status = await self.ledger.get_signature_status(signature)
            except LedgerRpcError as exc:
                _logger.warning(
                    "Signature status check %s/%s failed: %s",
                    attempt,
                    self.policy.max_attempts,
                    exc,
                )
                status = None
            if status is not None and status.has_error:
                _logger.warning(
                    "Funding transaction %s failed: %s", signature, status.err
                )
                raise FundingTransactionFailedError()
            if status is not None and status.is_confirmed:
                _logger.info("Funding transaction %s confirmed", signature)
                return status
            await self.policy.pause(attempt, self.sleep)
        raise ConfirmationTimeoutError(
            "Funding transaction did not confirm within "
            f"{self.policy.max_attempts} attempts"
        )
