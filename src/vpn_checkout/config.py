"""Application configuration."""

import os
from dataclasses import dataclass

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from solders.pubkey import Pubkey

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
USDC_DECIMALS = 6
SOL_DECIMALS = 9


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    port: int = 8080
    solana_rpc_url: str = "https://api.mainnet-beta.solana.com"
    payment_wallet: str
    payment_amount: int = 1_000_000
    burner_sol_required: int = 3_000_000
    usdc_mint: str = USDC_MINT
    dvpn_api_url: str = "https://api.dvpnsdk.com"
    dvpn_app_token: str
    desktop_scheme: str = "exidvpn"
    device_platform: str = "WINDOWS"
    privacy_pool_url: str = "http://127.0.0.1:3001"
    session_ttl_seconds: int = 15 * 60
    confirmation_attempts: int = 30
    confirmation_delay_seconds: float = 1.0
    balance_attempts: int = 10
    balance_delay_seconds: float = 2.0
    pool_settle_delay_seconds: float = 3.0
    static_dir: str = "static"
    cors_allow_origins: str = "*"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @field_validator("payment_wallet", "usdc_mint")
    @classmethod
    def validate_pubkey(cls, value: str) -> str:
        try:
            Pubkey.from_string(value)
        except ValueError as exc:
            raise ValueError(f"invalid Solana address: {value}") from exc
        return value

    @field_validator(
        "payment_amount",
        "session_ttl_seconds",
        "confirmation_attempts",
        "balance_attempts",
    )
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @field_validator("burner_sol_required")
    @classmethod
    def validate_non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must not be negative")
        return value

    def payment_configuration(self) -> "PaymentConfiguration":
        """Freeze the payment-related settings for the checkout pipeline."""
        return PaymentConfiguration(
            destination_wallet=self.payment_wallet,
            payment_amount=self.payment_amount,
            burner_sol_required=self.burner_sol_required,
            mint=self.usdc_mint,
            rpc_url=self.solana_rpc_url,
            provisioning_url=self.dvpn_api_url,
            provisioning_app_token=self.dvpn_app_token,
            desktop_scheme=self.desktop_scheme,
            device_platform=self.device_platform,
        )


@dataclass(frozen=True)
class PaymentConfiguration:
    """Read-only payment parameters shared by every checkout."""

    destination_wallet: str
    payment_amount: int
    burner_sol_required: int
    mint: str
    rpc_url: str
    provisioning_url: str
    provisioning_app_token: str
    desktop_scheme: str
    device_platform: str = "WINDOWS"
    token_symbol: str = "USDC"

    @property
    def payment_amount_human(self) -> float:
        return self.payment_amount / 10**USDC_DECIMALS

    @property
    def burner_sol_human(self) -> float:
        return self.burner_sol_required / 10**SOL_DECIMALS


def parse_allowed_origins(raw: str | None) -> list[str]:
    """Parse comma-separated CORS origins from env."""
    if raw is None:
        return ["*"]
    cleaned = raw.strip()
    if cleaned in {"", "*"}:
        return ["*"]
    return [origin.strip() for origin in cleaned.split(",") if origin.strip()]
