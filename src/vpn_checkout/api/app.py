"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, Response

from vpn_checkout.api.models import (
    ExecutePrivacyTransactionRequest,
    SendTransactionRequest,
)
from vpn_checkout.app_logging import configure_logging
from vpn_checkout.config import parse_allowed_origins
from vpn_checkout.containers import AppContainer
from vpn_checkout.domain.errors import CheckoutError, InvalidInputError
from vpn_checkout.domain.payments import PrivacyTransactionResult
from vpn_checkout.domain.sessions import PaymentSession

SERVICE_NAME = "vpn-checkout"


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)
    static_root = Path(container.settings.static_dir).resolve()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        payment = app.state.container.payment
        logger.info(
            "Payment wallet: %s, amount: %s (%s %s), burner SOL required: %s",
            payment.destination_wallet,
            payment.payment_amount,
            payment.payment_amount_human,
            payment.token_symbol,
            payment.burner_sol_required,
        )
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_allowed_origins(container.settings.cors_allow_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(CheckoutError)
    async def checkout_error_handler(
        request: Request, exc: CheckoutError
    ) -> JSONResponse:
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                "%s %s failed: %s",
                request.method,
                request.url.path,
                exc,
                extra={"stage": exc.stage},
            )
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error_response(status.HTTP_400_BAD_REQUEST, _validation_message(exc))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            "%s %s failed unexpectedly",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"
        )

    @app.get("/api/health")
    async def health() -> dict[str, object]:
        """Liveness check."""
        return {"success": True, "status": "healthy", "service": SERVICE_NAME}

    @app.get("/api/payment-info")
    async def payment_info(request: Request) -> dict[str, object]:
        """Describe what the client has to pay and where."""
        state_container: AppContainer = request.app.state.container
        payment = state_container.payment
        return {
            "success": True,
            "data": {
                "wallet": payment.destination_wallet,
                "amount": payment.payment_amount,
                "amount_human": payment.payment_amount_human,
                "token": payment.token_symbol,
                "mint": payment.mint,
                "network": "solana",
                "burnerSolRequired": payment.burner_sol_required,
                "burnerSolHuman": payment.burner_sol_human,
            },
        }

    @app.get("/api/blockhash")
    async def blockhash(request: Request) -> dict[str, object]:
        """Return the latest finalized blockhash for client-side signing."""
        state_container: AppContainer = request.app.state.container
        latest = await state_container.ledger_client.get_latest_blockhash()
        return {
            "success": True,
            "blockhash": latest.blockhash,
            "lastValidBlockHeight": latest.last_valid_block_height,
        }

    @app.post("/api/create-session")
    async def create_session(request: Request) -> dict[str, object]:
        """Allocate a burner wallet for a new payment."""
        state_container: AppContainer = request.app.state.container
        session = state_container.session_service.create_session()
        return _session_payload(session, state_container)

    @app.post("/api/execute-privacy-transaction")
    async def execute_privacy_transaction(
        body: ExecutePrivacyTransactionRequest, request: Request
    ) -> dict[str, object]:
        """Run the checkout pipeline for a funded session."""
        if not body.session_id:
            raise InvalidInputError("sessionId is required")
        state_container: AppContainer = request.app.state.container
        result = await state_container.orchestrator.execute(
            body.session_id, body.funding_tx_signature
        )
        return _result_payload(result)

    @app.post("/api/send-transaction")
    async def send_transaction(
        body: SendTransactionRequest, request: Request
    ) -> dict[str, object]:
        """Relay a client-signed transaction to the RPC endpoint."""
        if body.signed_transaction is None or body.signed_transaction == "":
            raise InvalidInputError("signedTransaction required")
        state_container: AppContainer = request.app.state.container
        signature = await state_container.transaction_relay.submit(
            body.signed_transaction
        )
        return {"success": True, "signature": signature}

    @app.get("/{full_path:path}", include_in_schema=False)
    async def spa_fallback(full_path: str) -> Response:
        """Serve static assets, falling back to the SPA index."""
        if full_path.startswith("api/"):
            return _error_response(status.HTTP_404_NOT_FOUND, "Not found")
        candidate = (static_root / full_path).resolve()
        if (
            full_path
            and candidate.is_relative_to(static_root)
            and candidate.is_file()
        ):
            return FileResponse(candidate)
        index = static_root / "index.html"
        if index.is_file():
            return FileResponse(index)
        return _error_response(status.HTTP_404_NOT_FOUND, "Not found")

    return app


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"success": False, "error": message}
    )


def _validation_message(exc: RequestValidationError) -> str:
    """Summarize the first validation error for API callers."""
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid value")
    return f"{location}: {message}" if location else message


def _session_payload(
    session: PaymentSession, state_container: AppContainer
) -> dict[str, object]:
    payment = state_container.payment
    return {
        "success": True,
        "sessionId": session.id,
        "burnerAddress": session.burner_address,
        "burnerATA": session.deposit_address,
        "usdcAmount": payment.payment_amount,
        "usdcAmountHuman": payment.payment_amount_human,
        "solRequired": payment.burner_sol_required,
        "solRequiredHuman": payment.burner_sol_human,
        "expiresAt": session.expires_at.isoformat(),
    }


def _result_payload(result: PrivacyTransactionResult) -> dict[str, object]:
    return {
        "success": True,
        "device_id": result.activation.device_id,
        "device_token": result.activation.device_token,
        "deep_link": result.activation.activation_uri,
        "withdrawal_tx": result.settlement.withdrawal_signature,
        "deposit_tx": result.settlement.deposit_signature,
    }
