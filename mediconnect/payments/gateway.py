"""
Payment gateway boundary and an offline mock.

In production, ``open_checkout`` would hand the request to a hosted
checkout (Razorpay, Stripe Checkout) and wire its completion and
dismissal events to the two callbacks.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from typing import Callable, Optional

from mediconnect.schemas.booking_schema import PaymentRequest

logger = logging.getLogger(__name__)

SuccessCallback = Callable[[str], None]
FailureCallback = Callable[[str], None]


class PaymentGateway(ABC):
    """One-shot checkout UI."""

    @abstractmethod
    async def load(self) -> bool:
        """Make the checkout available. Returns False if it cannot be loaded."""
        raise NotImplementedError

    @abstractmethod
    def open_checkout(
        self,
        request: PaymentRequest,
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> None:
        """Start a checkout. Exactly one of the callbacks is expected to fire."""
        raise NotImplementedError


class MockPaymentGateway(PaymentGateway):
    """Settles every checkout immediately.

    ``fail_with`` turns every checkout into a failure with that reason;
    ``available=False`` simulates the checkout script failing to load.
    """

    def __init__(
        self,
        available: bool = True,
        fail_with: Optional[str] = None,
    ) -> None:
        self.available = available
        self.fail_with = fail_with
        self.requests: list[PaymentRequest] = []

    async def load(self) -> bool:
        return self.available

    def open_checkout(
        self,
        request: PaymentRequest,
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> None:
        self.requests.append(request)
        if self.fail_with is not None:
            logger.info("Mock checkout failed: %s", self.fail_with)
            on_failure(self.fail_with)
            return
        payment_id = f"pay_{uuid.uuid4().hex[:14]}"
        logger.info("Mock checkout succeeded: %s (%d %s)", payment_id, request.amount, request.currency)
        on_success(payment_id)
