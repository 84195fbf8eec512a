"""Two-phase privacy pool transfer."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from vpn_checkout.adapters.privacy_pool_client import (
    PrivacyPoolClient,
    PrivacyPoolClientFactory,
)
from vpn_checkout.domain.errors import PrivacyPoolError, WithdrawalFailedError
from vpn_checkout.domain.payments import PoolSettlement
from vpn_checkout.domain.sessions import BurnerCredential
from vpn_checkout.services.retry import Sleep

_logger = logging.getLogger(__name__)


@dataclass
class PrivacyRelay:
    """Moves the payment through the pool: burner deposit, then payout withdrawal.

    The burner key is the pool-facing identity for both legs. Between the legs
    the relay waits a fixed settle delay so the pool can index the deposit.
    """

    pool_factory: PrivacyPoolClientFactory
    destination_wallet: str
    mint: str
    payment_amount: int
    settle_delay_seconds: float = 3.0
    sleep: Sleep = field(default=asyncio.sleep)

    def client_for(self, burner: BurnerCredential) -> PrivacyPoolClient:
        """Build a pool client signing as the burner."""
        return self.pool_factory.for_owner(burner.secret_base58())

    async def deposit(self, client: PrivacyPoolClient, amount: int) -> str:
        """Deposit the exact payment amount and return its signature."""
        self._check_amount(amount)
        _logger.info("Depositing %s into privacy pool", amount)
        signature = await client.deposit(mint=self.mint, amount=amount)
        _logger.info("Deposit successful: %s", signature)
        return signature

    async def withdraw(
        self,
        client: PrivacyPoolClient,
        amount: int,
        *,
        deposit_signature: str,
        burner_address: str,
    ) -> str:
        """Wait for the deposit to settle, then withdraw to the payout wallet."""
        self._check_amount(amount)
        await self.sleep(self.settle_delay_seconds)
        _logger.info("Withdrawing %s to %s", amount, self.destination_wallet)
        try:
            signature = await client.withdraw(
                mint=self.mint, amount=amount, recipient=self.destination_wallet
            )
        except PrivacyPoolError as exc:
            _logger.error(
                "Withdrawal failed after deposit %s; funds held in pool for burner %s",
                deposit_signature,
                burner_address,
                extra={
                    "deposit_signature": deposit_signature,
                    "burner_address": burner_address,
                },
            )
            raise WithdrawalFailedError(
                f"Withdrawal failed after deposit {deposit_signature}: {exc}",
                deposit_signature=deposit_signature,
                burner_address=burner_address,
            ) from exc
        _logger.info("Withdrawal successful: %s", signature)
        return signature

    async def relay(
        self,
        burner: BurnerCredential,
        amount: int,
        *,
        on_withdraw: Callable[[], None] | None = None,
    ) -> PoolSettlement:
        """Run both legs for a funded burner.

        ``on_withdraw`` fires once the deposit has landed, before the withdrawal leg.
        """
        client = self.client_for(burner)
        deposit_signature = await self.deposit(client, amount)
        if on_withdraw is not None:
            on_withdraw()
        withdrawal_signature = await self.withdraw(
            client,
            amount,
            deposit_signature=deposit_signature,
            burner_address=burner.address,
        )
        return PoolSettlement(
            deposit_signature=deposit_signature,
            withdrawal_signature=withdrawal_signature,
        )

    def _check_amount(self, amount: int) -> None:
        if amount != self.payment_amount:
            raise ValueError(
                f"Pool transfers must move exactly {self.payment_amount}, got {amount}"
            )
