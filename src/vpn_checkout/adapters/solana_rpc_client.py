"""Solana JSON-RPC client."""

import base64
import itertools
from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx

from vpn_checkout.domain.errors import LedgerRpcError
from vpn_checkout.domain.ledger import LatestBlockhash, SignatureStatus


class LedgerClient(Protocol):
    """Interface for the Solana RPC calls the checkout needs."""

    async def get_latest_blockhash(self) -> LatestBlockhash:
        """Return the latest finalized blockhash."""

    async def get_signature_status(self, signature: str) -> SignatureStatus | None:
        """Return the status of a signature, or None when not yet visible."""

    async def get_token_account_balance(self, address: str) -> int:
        """Return a token account balance in minor units."""

    async def send_raw_transaction(
        self, transaction: bytes, *, skip_preflight: bool = False, max_retries: int = 3
    ) -> str:
        """Submit signed transaction bytes and return the signature."""


@dataclass
class HttpxSolanaRpcClient(LedgerClient):
    """HTTPX-backed Solana JSON-RPC client.

    Every failure, including a reply whose shape does not match the method's
    documented result, surfaces as ``LedgerRpcError``.
    """

    rpc_url: str
    http_client: httpx.AsyncClient
    commitment: str = "confirmed"
    timeout: float = 15
    _request_ids: itertools.count = field(default_factory=lambda: itertools.count(1))

    @classmethod
    def create(cls, rpc_url: str) -> "HttpxSolanaRpcClient":
        """Create an RPC client with a managed httpx session."""
        return cls(rpc_url=rpc_url, http_client=httpx.AsyncClient())

    async def get_latest_blockhash(self) -> LatestBlockhash:
        """Fetch the latest blockhash at finalized commitment."""
        method = "getLatestBlockhash"
        result = await self._call(method, [{"commitment": "finalized"}])
        try:
            value = result["value"]
            return LatestBlockhash(
                blockhash=str(value["blockhash"]),
                last_valid_block_height=int(value["lastValidBlockHeight"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise _malformed(method, result) from exc

    async def get_signature_status(self, signature: str) -> SignatureStatus | None:
        """Fetch the status of a single signature."""
        method = "getSignatureStatuses"
        result = await self._call(
            method, [[signature], {"searchTransactionHistory": False}]
        )
        statuses = result.get("value") if isinstance(result, dict) else None
        if statuses is not None and not isinstance(statuses, list):
            raise _malformed(method, result)
        if not statuses or statuses[0] is None:
            return None
        status = statuses[0]
        if not isinstance(status, dict):
            raise _malformed(method, result)
        return SignatureStatus(
            confirmation_status=status.get("confirmationStatus"),
            err=status.get("err"),
        )

    async def get_token_account_balance(self, address: str) -> int:
        """Fetch a token account balance as an integer amount."""
        method = "getTokenAccountBalance"
        result = await self._call(method, [address, {"commitment": self.commitment}])
        try:
            return int(result["value"]["amount"])
        except (KeyError, TypeError, ValueError) as exc:
            raise _malformed(method, result) from exc

    async def send_raw_transaction(
        self, transaction: bytes, *, skip_preflight: bool = False, max_retries: int = 3
    ) -> str:
        """Submit a signed transaction encoded as base64."""
        method = "sendTransaction"
        encoded = base64.b64encode(transaction).decode("ascii")
        result = await self._call(
            method,
            [
                encoded,
                {
                    "encoding": "base64",
                    "skipPreflight": skip_preflight,
                    "preflightCommitment": self.commitment,
                    "maxRetries": max_retries,
                },
            ],
        )
        if not isinstance(result, str) or not result:
            raise _malformed(method, result)
        return result

    async def _call(self, method: str, params: list[object]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": method,
            "params": params,
        }
        try:
            response = await self.http_client.post(
                self.rpc_url, json=payload, timeout=self.timeout
            )
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise LedgerRpcError(f"{method} failed: {exc}") from exc
        if not isinstance(body, dict):
            raise LedgerRpcError(f"{method} returned a non-object response")
        error = body.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else error
            raise LedgerRpcError(f"{method} failed: {message}")
        if body.get("result") is None:
            raise LedgerRpcError(f"{method} returned no result")
        return body["result"]

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _malformed(method: str, result: object) -> LedgerRpcError:
    return LedgerRpcError(f"{method} returned an unexpected result: {result!r:.200}")
