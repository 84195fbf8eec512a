"""Models for privacy pool settlement and device activation."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PoolSettlement:
    """Signatures for the deposit and withdrawal legs of a pool transfer."""

    deposit_signature: str
    withdrawal_signature: str


@dataclass(frozen=True)
class DeviceActivation:
    """Device credential minted by the VPN provisioning API."""

    device_id: str | None
    device_token: str
    activation_uri: str


@dataclass(frozen=True)
class PrivacyTransactionResult:
    """Outcome of a completed checkout pipeline."""

    activation: DeviceActivation
    settlement: PoolSettlement

    @property
    def withdrawal_signature(self) -> str:
        return self.settlement.withdrawal_signature
