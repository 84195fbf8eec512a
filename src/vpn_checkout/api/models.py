"""Request models for the checkout API."""

from pydantic import BaseModel, ConfigDict, Field


class ExecutePrivacyTransactionRequest(BaseModel):
    """Body of POST /api/execute-privacy-transaction."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str | None = Field(default=None, alias="sessionId")
    funding_tx_signature: str | None = Field(default=None, alias="fundingTxSignature")


class SendTransactionRequest(BaseModel):
    """Body of POST /api/send-transaction."""

    model_config = ConfigDict(populate_by_name=True)

    signed_transaction: list[int] | str | dict[str, int] | None = Field(
        default=None, alias="signedTransaction"
    )
