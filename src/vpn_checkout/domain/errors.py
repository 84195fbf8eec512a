"""Checkout failure taxonomy."""


class CheckoutError(Exception):
    """Base class for failures reported to API callers."""

    status_code = 500
    default_message = "Checkout failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.stage: str | None = None

    @property
    def message(self) -> str:
        return str(self)


class InvalidInputError(CheckoutError):
    """Raised when a request is missing fields or carries malformed data."""

    status_code = 400
    default_message = "Invalid input"


class SessionNotFoundError(CheckoutError):
    """Raised when a session id is unknown, evicted or expired."""

    status_code = 400
    default_message = "Invalid or expired session"


class SessionBusyError(CheckoutError):
    """Raised when a session already has a pipeline run in flight."""

    status_code = 409
    default_message = "Session is already being processed"


class LedgerRpcError(CheckoutError):
    """Raised when the Solana RPC endpoint cannot be reached or rejects a call."""

    default_message = "Solana RPC request failed"


class FundingTransactionFailedError(CheckoutError):
    """Raised when the funding transaction reports an on-chain error."""

    default_message = "Funding transaction failed on-chain"


class ConfirmationTimeoutError(CheckoutError):
    """Raised when the funding transaction never reaches confirmation."""

    default_message = "Funding transaction did not confirm in time"


class InsufficientFundsError(CheckoutError):
    """Raised when the burner balance stays below the required amount."""

    def __init__(self, observed: int, required: int) -> None:
        super().__init__(f"Insufficient USDC. Have: {observed}, Need: {required}")
        self.observed = observed
        self.required = required


class PrivacyPoolError(CheckoutError):
    """Raised when the privacy pool rejects a deposit or withdrawal."""

    default_message = "Privacy pool operation failed"


class WithdrawalFailedError(PrivacyPoolError):
    """Raised when a withdrawal fails after the deposit already settled."""

    def __init__(
        self, message: str, *, deposit_signature: str, burner_address: str
    ) -> None:
        super().__init__(message)
        self.deposit_signature = deposit_signature
        self.burner_address = burner_address


class ProvisioningError(CheckoutError):
    """Raised when the VPN provisioning API fails to create a device."""

    default_message = "Failed to create device"


__all__ = [
    "CheckoutError",
    "ConfirmationTimeoutError",
    "FundingTransactionFailedError",
    "InsufficientFundsError",
    "InvalidInputError",
    "LedgerRpcError",
    "PrivacyPoolError",
    "ProvisioningError",
    "SessionBusyError",
    "SessionNotFoundError",
    "WithdrawalFailedError",
]
