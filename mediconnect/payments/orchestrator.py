"""
Drives the payment gateway to a single terminal outcome.

Gateways report back through two callbacks. The orchestrator folds them
into one ``PaymentOutcome`` delivered exactly once per ``pay`` call; a
checkout that cannot even be loaded is reported the same way, flagged
``gateway_unavailable`` so the user can be told which of the two
happened.
"""

import logging
from typing import Callable

from mediconnect.config import settings
from mediconnect.errors import PaymentGatewayError
from mediconnect.payments.gateway import PaymentGateway
from mediconnect.prompts.prompt_templates import build_payment_description
from mediconnect.schemas.booking_schema import (
    BookingDetails,
    PaymentFailure,
    PaymentOutcome,
    PaymentRequest,
    PaymentSuccess,
)

logger = logging.getLogger(__name__)

OutcomeCallback = Callable[[PaymentOutcome], None]


class _OneShot:
    """Forwards the first outcome and drops the rest."""

    def __init__(self, on_outcome: OutcomeCallback) -> None:
        self._on_outcome = on_outcome
        self.fired = False

    def __call__(self, outcome: PaymentOutcome) -> None:
        if self.fired:
            logger.warning("Ignoring duplicate payment outcome: %s", outcome.kind)
            return
        self.fired = True
        self._on_outcome(outcome)


class PaymentOrchestrator:
    """Builds the payment request and reconciles the gateway callbacks."""

    def __init__(
        self,
        gateway: PaymentGateway,
        amount: int = settings.clinic.appointment_fee,
        currency: str = settings.clinic.currency,
    ) -> None:
        self._gateway = gateway
        self._amount = amount
        self._currency = currency

    def build_request(self, details: BookingDetails) -> PaymentRequest:
        return PaymentRequest(
            amount=self._amount,
            currency=self._currency,
            name=details.name,
            description=build_payment_description(details.symptom),
            email=details.email,
            contact=details.phone,
        )

    async def pay(self, details: BookingDetails, on_outcome: OutcomeCallback) -> None:
        """Run one payment attempt. ``on_outcome`` fires exactly once.

        Gateway errors never escape: a checkout that cannot be loaded is
        reported as unavailable, any other error as a failed payment.
        """
        deliver = _OneShot(on_outcome)

        try:
            loaded = await self._gateway.load()
        except PaymentGatewayError as e:
            logger.error("Payment gateway failed to load: %s", e)
            loaded = False
        except Exception:
            logger.exception("Unexpected error loading payment gateway")
            loaded = False
        if not loaded:
            deliver(PaymentFailure(reason="Payment gateway unavailable", gateway_unavailable=True))
            return

        try:
            request = self.build_request(details)
            logger.info("Opening checkout: %s (%d %s)", request.description, request.amount, request.currency)
            self._gateway.open_checkout(
                request,
                on_success=lambda payment_id: deliver(PaymentSuccess(payment_id=payment_id)),
                on_failure=lambda reason: deliver(PaymentFailure(reason=reason)),
            )
        except PaymentGatewayError as e:
            logger.error("Checkout could not be opened: %s", e)
            deliver(PaymentFailure(reason=str(e)))
        except Exception as e:
            logger.exception("Unexpected error opening checkout")
            deliver(PaymentFailure(reason=str(e)))
