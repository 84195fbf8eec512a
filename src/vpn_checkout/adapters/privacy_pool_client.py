"""Privacy pool relayer client.

The pool protocol itself lives in a relayer sidecar that wraps the pool SDK.
Each client is scoped to one owner key, mirroring how the SDK is constructed
per wallet.
"""

from dataclasses import dataclass
from typing import Protocol

import httpx

from vpn_checkout.domain.errors import PrivacyPoolError


class PrivacyPoolClient(Protocol):
    """Pool operations performed on behalf of a single owner."""

    async def deposit(self, *, mint: str, amount: int) -> str:
        """Deposit token minor units into the pool and return the signature."""

    async def withdraw(self, *, mint: str, amount: int, recipient: str) -> str:
        """Withdraw token minor units to a recipient and return the signature."""


class PrivacyPoolClientFactory(Protocol):
    """Builds pool clients scoped to an owner secret."""

    def for_owner(self, owner_secret: str) -> PrivacyPoolClient:
        """Return a client that signs pool operations with the given key."""


@dataclass
class HttpxPrivacyPoolClient(PrivacyPoolClient):
    """HTTPX-backed pool client bound to one owner key."""

    base_url: str
    rpc_url: str
    owner_secret: str
    http_client: httpx.AsyncClient
    timeout: float = 120

    def __repr__(self) -> str:
        return f"HttpxPrivacyPoolClient(base_url={self.base_url!r})"

    async def deposit(self, *, mint: str, amount: int) -> str:
        """Deposit into the pool via the relayer."""
        return await self._post(
            "deposit",
            {"mintAddress": mint, "amount": amount},
        )

    async def withdraw(self, *, mint: str, amount: int, recipient: str) -> str:
        """Withdraw from the pool via the relayer."""
        return await self._post(
            "withdraw",
            {"mintAddress": mint, "amount": amount, "recipientAddress": recipient},
        )

    async def _post(self, operation: str, payload: dict[str, object]) -> str:
        url = f"{self.base_url.rstrip('/')}/{operation}"
        body = {"rpcUrl": self.rpc_url, "owner": self.owner_secret, **payload}
        try:
            response = await self.http_client.post(url, json=body, timeout=self.timeout)
        except httpx.HTTPError as exc:
            raise PrivacyPoolError(f"Pool {operation} request failed: {exc}") from exc
        if response.is_error:
            raise PrivacyPoolError(
                f"Pool {operation} failed with status {response.status_code}"
            )
        try:
            reply = response.json()
        except ValueError as exc:
            raise PrivacyPoolError(f"Pool {operation} returned invalid JSON") from exc
        if not isinstance(reply, dict):
            raise PrivacyPoolError(f"Pool {operation} returned a non-object response")
        signature = reply.get("signature")
        if not isinstance(signature, str) or not signature:
            raise PrivacyPoolError(f"Pool {operation} returned no signature")
        return signature


@dataclass
class HttpxPrivacyPoolClientFactory(PrivacyPoolClientFactory):
    """Creates owner-scoped pool clients sharing one httpx session."""

    base_url: str
    rpc_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str, rpc_url: str) -> "HttpxPrivacyPoolClientFactory":
        """Create a factory with a managed httpx session."""
        return cls(base_url=base_url, rpc_url=rpc_url, http_client=httpx.AsyncClient())

    def for_owner(self, owner_secret: str) -> HttpxPrivacyPoolClient:
        """Return a client scoped to the given owner key."""
        return HttpxPrivacyPoolClient(
            base_url=self.base_url,
            rpc_url=self.rpc_url,
            owner_secret=owner_secret,
            http_client=self.http_client,
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
