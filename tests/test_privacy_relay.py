"""Tests for the privacy pool relay."""

import asyncio

import pytest

from tests.conftest import (
    PAYMENT_AMOUNT,
    PAYMENT_WALLET,
    FakePoolClientFactory,
    RecordingSleep,
)
from vpn_checkout.config import USDC_MINT
from vpn_checkout.domain.errors import PrivacyPoolError, WithdrawalFailedError
from vpn_checkout.domain.sessions import BurnerCredential
from vpn_checkout.services.privacy_relay import PrivacyRelay


def _relay(factory: FakePoolClientFactory, sleep: RecordingSleep) -> PrivacyRelay:
    return PrivacyRelay(
        pool_factory=factory,
        destination_wallet=PAYMENT_WALLET,
        mint=USDC_MINT,
        payment_amount=PAYMENT_AMOUNT,
        settle_delay_seconds=3.0,
        sleep=sleep,
    )


def test_relay_deposits_waits_then_withdraws() -> None:
    factory = FakePoolClientFactory()
    sleep = RecordingSleep()
    burner = BurnerCredential.generate()

    settlement = asyncio.run(_relay(factory, sleep).relay(burner, PAYMENT_AMOUNT))

    assert settlement.deposit_signature == "deposit-sig"
    assert settlement.withdrawal_signature == "withdraw-sig"
    assert factory.owners == [burner.secret_base58()]
    assert factory.calls == [
        ("deposit", {"mint": USDC_MINT, "amount": PAYMENT_AMOUNT}),
        (
            "withdraw",
            {"mint": USDC_MINT, "amount": PAYMENT_AMOUNT, "recipient": PAYMENT_WALLET},
        ),
    ]
    assert sleep.delays == [3.0]


def test_deposit_failure_stops_before_withdrawal() -> None:
    factory = FakePoolClientFactory(fail_deposit=True)
    sleep = RecordingSleep()

    with pytest.raises(PrivacyPoolError):
        asyncio.run(
            _relay(factory, sleep).relay(BurnerCredential.generate(), PAYMENT_AMOUNT)
        )

    assert [name for name, _ in factory.calls] == ["deposit"]
    assert sleep.delays == []


def test_withdrawal_failure_reports_deposit_signature() -> None:
    factory = FakePoolClientFactory(fail_withdraw=True)
    burner = BurnerCredential.generate()

    with pytest.raises(WithdrawalFailedError) as excinfo:
        asyncio.run(_relay(factory, RecordingSleep()).relay(burner, PAYMENT_AMOUNT))

    assert excinfo.value.deposit_signature == "deposit-sig"
    assert excinfo.value.burner_address == burner.address


def test_relay_rejects_partial_amounts() -> None:
    factory = FakePoolClientFactory()

    with pytest.raises(ValueError):
        asyncio.run(
            _relay(factory, RecordingSleep()).relay(
                BurnerCredential.generate(), PAYMENT_AMOUNT // 2
            )
        )

    assert factory.calls == []


def test_wiped_burner_cannot_open_pool_client() -> None:
    burner = BurnerCredential.generate()
    burner.wipe()

    with pytest.raises(RuntimeError):
        _relay(FakePoolClientFactory(), RecordingSleep()).client_for(burner)


def test_withdraw_hook_fires_between_legs() -> None:
    factory = FakePoolClientFactory()
    seen: list[list[str]] = []

    asyncio.run(
        _relay(factory, RecordingSleep()).relay(
            BurnerCredential.generate(),
            PAYMENT_AMOUNT,
            on_withdraw=lambda: seen.append([name for name, _ in factory.calls]),
        )
    )

    assert seen == [["deposit"]]
