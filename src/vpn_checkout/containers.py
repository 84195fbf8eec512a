"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta

from vpn_checkout.adapters.dvpn_client import HttpxDvpnClient
from vpn_checkout.adapters.privacy_pool_client import HttpxPrivacyPoolClientFactory
from vpn_checkout.adapters.solana_rpc_client import HttpxSolanaRpcClient, LedgerClient
from vpn_checkout.config import PaymentConfiguration, Settings
from vpn_checkout.services.activation import ActivationIssuer
from vpn_checkout.services.balance import BalanceVerifier
from vpn_checkout.services.confirmation import ConfirmationWaiter
from vpn_checkout.services.orchestrator import PaymentOrchestrator
from vpn_checkout.services.privacy_relay import PrivacyRelay
from vpn_checkout.services.retry import RetryPolicy
from vpn_checkout.services.session_store import InMemorySessionStore
from vpn_checkout.services.sessions import SessionService
from vpn_checkout.services.transactions import TransactionRelay


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    payment: PaymentConfiguration
    ledger_client: LedgerClient
    session_service: SessionService
    orchestrator: PaymentOrchestrator
    transaction_relay: TransactionRelay
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    payment = resolved_settings.payment_configuration()
    ledger_client = HttpxSolanaRpcClient.create(payment.rpc_url)
    pool_factory = HttpxPrivacyPoolClientFactory.create(
        base_url=resolved_settings.privacy_pool_url,
        rpc_url=payment.rpc_url,
    )
    dvpn_client = HttpxDvpnClient.create(payment.provisioning_url)
    session_service = SessionService(
        store=InMemorySessionStore(),
        mint=payment.mint,
        ttl=timedelta(seconds=resolved_settings.session_ttl_seconds),
    )
    orchestrator = PaymentOrchestrator(
        session_service=session_service,
        confirmation_waiter=ConfirmationWaiter(
            ledger=ledger_client,
            policy=RetryPolicy(
                max_attempts=resolved_settings.confirmation_attempts,
                delay_seconds=resolved_settings.confirmation_delay_seconds,
            ),
        ),
        balance_verifier=BalanceVerifier(
            ledger=ledger_client,
            policy=RetryPolicy(
                max_attempts=resolved_settings.balance_attempts,
                delay_seconds=resolved_settings.balance_delay_seconds,
            ),
        ),
        privacy_relay=PrivacyRelay(
            pool_factory=pool_factory,
            destination_wallet=payment.destination_wallet,
            mint=payment.mint,
            payment_amount=payment.payment_amount,
            settle_delay_seconds=resolved_settings.pool_settle_delay_seconds,
        ),
        activation_issuer=ActivationIssuer(
            client=dvpn_client,
            app_token=payment.provisioning_app_token,
            desktop_scheme=payment.desktop_scheme,
            platform=payment.device_platform,
        ),
        payment_amount=payment.payment_amount,
    )
    transaction_relay = TransactionRelay(ledger=ledger_client)

    async def close_resources() -> None:
        await ledger_client.close()
        await pool_factory.close()
        await dvpn_client.close()

    return AppContainer(
        settings=resolved_settings,
        payment=payment,
        ledger_client=ledger_client,
        session_service=session_service,
        orchestrator=orchestrator,
        transaction_relay=transaction_relay,
        close_resources=close_resources,
    )
