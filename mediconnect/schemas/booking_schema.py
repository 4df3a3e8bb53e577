"""Booking action, payment and appointment data models."""

from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

BOOK_APPOINTMENT_ACTION = "BOOK_APPOINTMENT"

REQUIRED_DETAIL_FIELDS: tuple[str, ...] = ("name", "email", "phone", "symptom")


class BookingDetails(BaseModel):
    """The four fields required before any payment attempt.

    Only emptiness is checked; email and phone syntax are accepted as given.
    """

    model_config = ConfigDict(extra="forbid", strict=True, str_strip_whitespace=True)

    name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    symptom: str = Field(min_length=1)


class PaymentStatus(str, Enum):
    COMPLETED = "completed"


class PaymentRequest(BaseModel):
    """Arguments handed to the payment gateway checkout."""

    amount: int = Field(gt=0, description="Minor currency units")
    currency: str
    name: str
    description: str
    email: str
    contact: str


class PaymentSuccess(BaseModel):
    kind: Literal["success"] = "success"
    payment_id: str


class PaymentFailure(BaseModel):
    kind: Literal["failure"] = "failure"
    reason: str
    gateway_unavailable: bool = False


PaymentOutcome = Union[PaymentSuccess, PaymentFailure]


class Appointment(BaseModel):
    """Appointment record assembled after a successful payment."""

    id: str
    name: str
    email: str
    phone: str
    symptom: str
    booking_date: str
    patient_id: str
    payment_status: PaymentStatus = PaymentStatus.COMPLETED


class IntakeDetails(BaseModel):
    """Partial details the host may already know when a session opens."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    symptom: Optional[str] = None

    def has_any(self) -> bool:
        return any(getattr(self, f) for f in REQUIRED_DETAIL_FIELDS)
