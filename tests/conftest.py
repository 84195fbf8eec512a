"""Shared test fixtures."""

from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest
from vpn_checkout.adapters.dvpn_client import ProvisioningClient
from vpn_checkout.adapters.privacy_pool_client import (
    PrivacyPoolClient,
    PrivacyPoolClientFactory,
)
from vpn_checkout.adapters.solana_rpc_client import LedgerClient
from vpn_checkout.config import USDC_MINT, Settings
from vpn_checkout.containers import AppContainer
from vpn_checkout.domain.errors import LedgerRpcError, PrivacyPoolError
from vpn_checkout.domain.ledger import LatestBlockhash, SignatureStatus
from vpn_checkout.services.activation import ActivationIssuer
from vpn_checkout.services.balance import BalanceVerifier
from vpn_checkout.services.confirmation import ConfirmationWaiter
from vpn_checkout.services.orchestrator import PaymentOrchestrator
from vpn_checkout.services.privacy_relay import PrivacyRelay
from vpn_checkout.services.retry import RetryPolicy
from vpn_checkout.services.session_store import InMemorySessionStore
from vpn_checkout.services.sessions import SessionService
from vpn_checkout.services.transactions import TransactionRelay

PAYMENT_WALLET = "Vote111111111111111111111111111111111111111"
PAYMENT_AMOUNT = 1_000_000


@dataclass
class FrozenClock:
    """Controllable clock for expiry tests."""

    now: datetime = field(default_factory=lambda: datetime(2025, 1, 1, tzinfo=UTC))

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@dataclass
class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    delays: list[float] = field(default_factory=list)

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@dataclass
class FakeLedgerClient(LedgerClient):
    """Scripted ledger responses.

    Queued items are returned in order and exception instances are raised.
    Balances fall back to ``default_balance`` once the queue is drained.
    """

    statuses: deque = field(default_factory=deque)
    balances: deque = field(default_factory=deque)
    default_balance: int = 0
    blockhash: LatestBlockhash = field(
        default_factory=lambda: LatestBlockhash(
            blockhash="GHtXQBsoZHVnNFa9YevAzFr17DJjgHXk3ycTKD5xD3Zi",
            last_valid_block_height=1234,
        )
    )
    status_calls: int = 0
    balance_calls: int = 0
    balance_addresses: list[str] = field(default_factory=list)
    sent: list[tuple[bytes, bool, int]] = field(default_factory=list)

    async def get_latest_blockhash(self) -> LatestBlockhash:
        return self.blockhash

    async def get_signature_status(self, signature: str) -> SignatureStatus | None:
        self.status_calls += 1
        item = self.statuses.popleft() if self.statuses else None
        if isinstance(item, Exception):
            raise item
        return item

    async def get_token_account_balance(self, address: str) -> int:
        self.balance_calls += 1
        self.balance_addresses.append(address)
        item = self.balances.popleft() if self.balances else self.default_balance
        if isinstance(item, Exception):
            raise item
        return item

    async def send_raw_transaction(
        self, transaction: bytes, *, skip_preflight: bool = False, max_retries: int = 3
    ) -> str:
        self.sent.append((transaction, skip_preflight, max_retries))
        return f"sig-{len(self.sent)}"


@dataclass
class FakePoolClient(PrivacyPoolClient):
    """Pool client recording deposits and withdrawals."""

    owner_secret: str
    calls: list[tuple[str, dict[str, object]]]
    fail_deposit: bool = False
    fail_withdraw: bool = False

    async def deposit(self, *, mint: str, amount: int) -> str:
        self.calls.append(("deposit", {"mint": mint, "amount": amount}))
        if self.fail_deposit:
            raise PrivacyPoolError("deposit rejected")
        return "deposit-sig"

    async def withdraw(self, *, mint: str, amount: int, recipient: str) -> str:
        self.calls.append(
            ("withdraw", {"mint": mint, "amount": amount, "recipient": recipient})
        )
        if self.fail_withdraw:
            raise PrivacyPoolError("withdraw rejected")
        return "withdraw-sig"


@dataclass
class FakePoolClientFactory(PrivacyPoolClientFactory):
    """Factory handing out recording pool clients."""

    fail_deposit: bool = False
    fail_withdraw: bool = False
    owners: list[str] = field(default_factory=list)
    calls: list[tuple[str, dict[str, object]]] = field(default_factory=list)

    def for_owner(self, owner_secret: str) -> FakePoolClient:
        self.owners.append(owner_secret)
        return FakePoolClient(
            owner_secret=owner_secret,
            calls=self.calls,
            fail_deposit=self.fail_deposit,
            fail_withdraw=self.fail_withdraw,
        )


@dataclass
class FakeProvisioningClient(ProvisioningClient):
    """Provisioning client returning a fixed payload."""

    payload: dict[str, object] = field(
        default_factory=lambda: {"data": {"id": "device-1", "token": "device-token"}}
    )
    error: Exception | None = None
    requests: list[tuple[str, str]] = field(default_factory=list)

    async def create_device(self, platform: str, app_token: str) -> dict[str, object]:
        self.requests.append((platform, app_token))
        if self.error is not None:
            raise self.error
        return self.payload


def transient_rpc_error() -> LedgerRpcError:
    return LedgerRpcError("connection reset")


def build_orchestrator(  # noqa: PLR0913
    *,
    ledger: FakeLedgerClient,
    pool_factory: FakePoolClientFactory | None = None,
    provisioning: ProvisioningClient | None = None,
    session_service: SessionService | None = None,
    sleep: RecordingSleep | None = None,
    payment_amount: int = PAYMENT_AMOUNT,
) -> PaymentOrchestrator:
    """Wire an orchestrator around fakes with instant sleeps."""
    sleep = sleep or RecordingSleep()
    return PaymentOrchestrator(
        session_service=session_service
        or SessionService(store=InMemorySessionStore(), mint=USDC_MINT),
        confirmation_waiter=ConfirmationWaiter(
            ledger=ledger,
            policy=RetryPolicy(max_attempts=30, delay_seconds=1.0),
            sleep=sleep,
        ),
        balance_verifier=BalanceVerifier(
            ledger=ledger,
            policy=RetryPolicy(max_attempts=10, delay_seconds=2.0),
            sleep=sleep,
        ),
        privacy_relay=PrivacyRelay(
            pool_factory=pool_factory or FakePoolClientFactory(),
            destination_wallet=PAYMENT_WALLET,
            mint=USDC_MINT,
            payment_amount=payment_amount,
            sleep=sleep,
        ),
        activation_issuer=ActivationIssuer(
            client=provisioning or FakeProvisioningClient(),
            app_token="app-token",
            desktop_scheme="exidvpn",
        ),
        payment_amount=payment_amount,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        payment_wallet=PAYMENT_WALLET,
        dvpn_app_token="app-token",
        static_dir="tests/does-not-exist",
    )


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def session_service(clock: FrozenClock) -> SessionService:
    return SessionService(store=InMemorySessionStore(), mint=USDC_MINT, clock=clock)


@pytest.fixture
def ledger() -> FakeLedgerClient:
    return FakeLedgerClient(default_balance=PAYMENT_AMOUNT)


@pytest.fixture
def pool_factory() -> FakePoolClientFactory:
    return FakePoolClientFactory()


@pytest.fixture
def provisioning() -> FakeProvisioningClient:
    return FakeProvisioningClient()


@pytest.fixture
def container(
    settings: Settings,
    session_service: SessionService,
    ledger: FakeLedgerClient,
    pool_factory: FakePoolClientFactory,
    provisioning: FakeProvisioningClient,
) -> AppContainer:
    orchestrator = build_orchestrator(
        ledger=ledger,
        pool_factory=pool_factory,
        provisioning=provisioning,
        session_service=session_service,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        payment=settings.payment_configuration(),
        ledger_client=ledger,
        session_service=session_service,
        orchestrator=orchestrator,
        transaction_relay=TransactionRelay(ledger=ledger),
        close_resources=close_resources,
    )
