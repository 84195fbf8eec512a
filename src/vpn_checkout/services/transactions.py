"""Signed transaction relay."""

import base64
import binascii
import logging
from dataclasses import dataclass

from vpn_checkout.adapters.solana_rpc_client import LedgerClient
from vpn_checkout.domain.errors import InvalidInputError

_logger = logging.getLogger(__name__)


def normalize_transaction_bytes(value: object) -> bytes:
    """Normalize a signed transaction to raw bytes.

    Accepts a list of byte values, a base64 string, or a mapping whose values
    are byte values (the JSON form of a browser ``Uint8Array``).
    """
    if isinstance(value, (bytes, bytearray)):
        data = bytes(value)
    elif isinstance(value, str):
        try:
            data = base64.b64decode(value.strip(), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise InvalidInputError("signedTransaction is not valid base64") from exc
    elif isinstance(value, list):
        data = _bytes_from_values(value)
    elif isinstance(value, dict):
        data = _bytes_from_values([value[key] for key in _ordered_keys(value)])
    else:
        raise InvalidInputError("signedTransaction has an unsupported encoding")
    if not data:
        raise InvalidInputError("signedTransaction is empty")
    return data


def _ordered_keys(mapping: dict) -> list:
    keys = list(mapping)
    if all(isinstance(key, str) and key.isdigit() for key in keys):
        return sorted(keys, key=int)
    return keys


def _bytes_from_values(values: list[object]) -> bytes:
    if not all(type(item) is int and 0 <= item <= 255 for item in values):
        raise InvalidInputError("signedTransaction must contain byte values 0-255")
    return bytes(values)


@dataclass
class TransactionRelay:
    """Forwards client-signed transactions to the RPC endpoint."""

    ledger: LedgerClient
    max_retries: int = 3

    async def submit(self, signed_transaction: object) -> str:
        """Submit signed bytes with preflight enabled and return the signature."""
        payload = normalize_transaction_bytes(signed_transaction)
        _logger.info("Proxying transaction submission (%s bytes)", len(payload))
        signature = await self.ledger.send_raw_transaction(
            payload, skip_preflight=False, max_retries=self.max_retries
        )
        _logger.info("Transaction submitted: %s", signature)
        return signature
