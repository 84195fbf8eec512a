"""Checkout pipeline orchestration."""

import logging
from dataclasses import dataclass, field
from enum import StrEnum

from vpn_checkout.domain.errors import (
    CheckoutError,
    SessionBusyError,
    SessionNotFoundError,
)
from vpn_checkout.domain.payments import PrivacyTransactionResult
from vpn_checkout.domain.sessions import PaymentSession
from vpn_checkout.services.activation import ActivationIssuer
from vpn_checkout.services.balance import BalanceVerifier
from vpn_checkout.services.confirmation import ConfirmationWaiter
from vpn_checkout.services.privacy_relay import PrivacyRelay
from vpn_checkout.services.sessions import SessionService

_logger = logging.getLogger(__name__)


class PipelineStage(StrEnum):
    """Stages of a checkout run, in execution order."""

    START = "START"
    WAITING_FOR_FUNDING = "WAITING_FOR_FUNDING"
    VERIFYING_BALANCE = "VERIFYING_BALANCE"
    DEPOSITING_TO_POOL = "DEPOSITING_TO_POOL"
    WITHDRAWING_FROM_POOL = "WITHDRAWING_FROM_POOL"
    ISSUING_ACTIVATION = "ISSUING_ACTIVATION"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"


@dataclass
class _PipelineRun:
    session_id: str
    stage: PipelineStage = PipelineStage.START

    def advance(self, stage: PipelineStage) -> None:
        self.stage = stage
        _logger.info("Session %s -> %s", self.session_id, stage)


@dataclass
class PaymentOrchestrator:
    """Runs one session through funding, pool transfer and activation.

    Stages run strictly in order. The session is deleted only when every stage
    succeeds; any failure leaves it in place so the client can retry until the
    session expires. Only one run per session id may be in flight.
    """

    session_service: SessionService
    confirmation_waiter: ConfirmationWaiter
    balance_verifier: BalanceVerifier
    privacy_relay: PrivacyRelay
    activation_issuer: ActivationIssuer
    payment_amount: int
    _in_flight: set[str] = field(default_factory=set, repr=False)

    def is_running(self, session_id: str) -> bool:
        return session_id in self._in_flight

    async def execute(
        self, session_id: str, funding_signature: str | None = None
    ) -> PrivacyTransactionResult:
        """Run the checkout pipeline for a session."""
        if session_id in self._in_flight:
            raise SessionBusyError()
        self._in_flight.add(session_id)
        run = _PipelineRun(session_id=session_id)
        try:
            return await self._run(run, funding_signature)
        except CheckoutError as exc:
            exc.stage = str(run.stage)
            _logger.warning(
                "Checkout for session %s failed during %s: %s",
                session_id,
                run.stage,
                exc,
            )
            run.advance(PipelineStage.FAILED)
            raise
        except Exception:
            _logger.exception(
                "Checkout for session %s crashed during %s", session_id, run.stage
            )
            run.advance(PipelineStage.FAILED)
            raise
        finally:
            self._in_flight.discard(session_id)

    async def _run(
        self, run: _PipelineRun, funding_signature: str | None
    ) -> PrivacyTransactionResult:
        session = self._resolve(run.session_id)

        run.advance(PipelineStage.WAITING_FOR_FUNDING)
        if funding_signature:
            await self.confirmation_waiter.wait(funding_signature)

        run.advance(PipelineStage.VERIFYING_BALANCE)
        await self.balance_verifier.verify(
            session.deposit_address, self.payment_amount
        )

        run.advance(PipelineStage.DEPOSITING_TO_POOL)
        settlement = await self.privacy_relay.relay(
            session.burner,
            self.payment_amount,
            on_withdraw=lambda: run.advance(PipelineStage.WITHDRAWING_FROM_POOL),
        )

        run.advance(PipelineStage.ISSUING_ACTIVATION)
        activation = await self.activation_issuer.issue()

        run.advance(PipelineStage.COMPLETE)
        self.session_service.delete_session(session.id)
        session.burner.wipe()
        _logger.info(
            "Payment complete for session %s, device %s",
            session.id,
            activation.device_id,
        )
        return PrivacyTransactionResult(activation=activation, settlement=settlement)

    def _resolve(self, session_id: str) -> PaymentSession:
        session = self.session_service.get_session(session_id)
        if session is None:
            raise SessionNotFoundError()
        return session
