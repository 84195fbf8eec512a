"""dVPN provisioning API client."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from vpn_checkout.domain.errors import ProvisioningError

_logger = logging.getLogger(__name__)


class ProvisioningClient(Protocol):
    """Interface for the VPN device provisioning API."""

    async def create_device(self, platform: str, app_token: str) -> dict[str, object]:
        """Create a device credential and return the raw API payload."""


@dataclass
class HttpxDvpnClient(ProvisioningClient):
    """HTTPX-backed provisioning client."""

    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str) -> "HttpxDvpnClient":
        """Create a provisioning client with a managed httpx session."""
        return cls(base_url=base_url, http_client=httpx.AsyncClient())

    async def create_device(self, platform: str, app_token: str) -> dict[str, object]:
        """Create a device via POST /device."""
        url = f"{self.base_url.rstrip('/')}/device"
        try:
            response = await self.http_client.post(
                url,
                json={"platform": platform, "app_token": app_token},
                timeout=15,
            )
        except httpx.HTTPError as exc:
            raise ProvisioningError(f"Device request failed: {exc}") from exc
        if response.is_error:
            _logger.error(
                "dVPN API error: status=%s body=%s",
                response.status_code,
                response.text[:500],
            )
            raise ProvisioningError()
        try:
            payload = response.json()
        except ValueError as exc:
            raise ProvisioningError("Device API returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise ProvisioningError("Device API returned a non-object response")
        return payload

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
