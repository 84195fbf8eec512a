"""Tests for signed transaction relaying."""

import asyncio
import base64

import pytest

from tests.conftest import FakeLedgerClient
from vpn_checkout.domain.errors import InvalidInputError
from vpn_checkout.services.transactions import (
    TransactionRelay,
    normalize_transaction_bytes,
)

RAW = bytes([1, 0, 255, 17, 42])


def test_all_encodings_normalize_to_same_bytes() -> None:
    encoded = base64.b64encode(RAW).decode()
    as_object = {str(index): value for index, value in enumerate(RAW)}

    assert normalize_transaction_bytes(list(RAW)) == RAW
    assert normalize_transaction_bytes(encoded) == RAW
    assert normalize_transaction_bytes(as_object) == RAW


def test_object_keys_are_ordered_numerically() -> None:
    values = {"10": 10, "2": 2, "0": 0, "1": 1}

    assert normalize_transaction_bytes(values) == bytes([0, 1, 2, 10])


@pytest.mark.parametrize(
    "value",
    ["not base64!!", [256], [-1], [1, "2"], [], 12, None],
)
def test_malformed_transactions_are_rejected(value: object) -> None:
    with pytest.raises(InvalidInputError):
        normalize_transaction_bytes(value)


def test_submit_uses_preflight_and_bounded_retries() -> None:
    ledger = FakeLedgerClient()
    relay = TransactionRelay(ledger=ledger)

    signature = asyncio.run(relay.submit(base64.b64encode(RAW).decode()))

    assert signature == "sig-1"
    assert ledger.sent == [(RAW, False, 3)]
