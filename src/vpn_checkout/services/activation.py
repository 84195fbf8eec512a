"""Device activation issuing."""

import logging
from dataclasses import dataclass

from vpn_checkout.adapters.dvpn_client import ProvisioningClient
from vpn_checkout.domain.errors import ProvisioningError
from vpn_checkout.domain.payments import DeviceActivation

_logger = logging.getLogger(__name__)


@dataclass
class ActivationIssuer:
    """Mints a device credential and the desktop deep link that redeems it."""

    client: ProvisioningClient
    app_token: str
    desktop_scheme: str
    platform: str = "WINDOWS"

    async def issue(self) -> DeviceActivation:
        """Create a device and return its activation reference."""
        payload = await self.client.create_device(self.platform, self.app_token)
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict) or not data.get("token"):
            raise ProvisioningError("No device token received")
        device_token = str(data["token"])
        device_id = data.get("id")
        _logger.info("Created device %s", device_id)
        return DeviceActivation(
            device_id=None if device_id is None else str(device_id),
            device_token=device_token,
            activation_uri=build_activation_uri(self.desktop_scheme, device_token),
        )


def build_activation_uri(scheme: str, device_token: str) -> str:
    """Embed a device token into the desktop activation URI.

    The token goes in unescaped; the desktop client reads the raw query string.
    """
    return f"{scheme}://activate?token={device_token}"
