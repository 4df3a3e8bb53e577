"""User-facing message templates emitted by the controller."""

from typing import Optional

from mediconnect.config import settings
from mediconnect.schemas.booking_schema import IntakeDetails

INIT_FAILURE_MESSAGE = (
    "I'm sorry, I'm having trouble connecting to my AI brain. "
    "Please try again in a moment."
)

STREAM_FAILURE_MESSAGE = "I'm sorry, an error occurred. Please try again."

MISSING_DETAILS_MESSAGE = (
    "Something went wrong. It seems I'm missing some details for the booking. "
    "Could you please provide your name, email, phone, and symptom again?"
)

GATEWAY_LOADING_NOTICE = "Loading payment gateway..."

GATEWAY_LOAD_FAILED_NOTICE = "Failed to load payment gateway. Please try again."


def build_greeting(details: Optional[IntakeDetails] = None) -> str:
    """Opening message, personalized once the user's name is known."""
    if details is not None and details.name:
        return (
            f"Hello {details.name}! I'm your {settings.clinic.app_name} assistant. "
            f"I see you're interested in help regarding "
            f"\"{details.symptom or 'your health'}\". How can I assist you?"
        )
    return settings.clinic.greeting_message


def build_booking_confirmation(symptom: str) -> str:
    """Shown in place of the raw booking action."""
    return (
        f"Great! I have all your details. To confirm your appointment for \"{symptom}\", "
        f"we'll proceed with the nominal consultation fee."
    )


def build_payment_description(symptom: str) -> str:
    return f"Appointment for {symptom}"


def build_payment_success(name: str, patient_id: str) -> str:
    return (
        f"Thank you, {name}! Your payment was successful and your appointment is booked.\n"
        f"Your Patient ID is {patient_id}.\n\n"
        f"You can now close this chat or ask more questions."
    )


def build_payment_failure(reason: str) -> str:
    return (
        f"The payment failed or was cancelled. Reason: {reason}\n\n"
        f"Don't worry, your appointment is not booked yet. You can try the payment "
        f"again or ask me to change the details. What would you like to do?"
    )
