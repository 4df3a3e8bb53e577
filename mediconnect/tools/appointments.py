"""
In-memory appointment store and record assembly.

In production, this would write to the clinic's scheduling backend.
"""

import logging
from datetime import datetime
from typing import Optional

from mediconnect.schemas.booking_schema import Appointment, BookingDetails, PaymentStatus

logger = logging.getLogger(__name__)

_appointments: dict[str, Appointment] = {}


def derive_patient_id(at: datetime) -> str:
    """Patient IDs are the booking instant in epoch milliseconds."""
    return f"PID-{int(at.timestamp() * 1000)}"


def build_appointment(
    details: BookingDetails, payment_id: str, booked_at: datetime
) -> Appointment:
    """Assemble the appointment record for a completed payment."""
    return Appointment(
        id=payment_id,
        name=details.name,
        email=details.email,
        phone=details.phone,
        symptom=details.symptom,
        booking_date=booked_at.isoformat(),
        patient_id=derive_patient_id(booked_at),
        payment_status=PaymentStatus.COMPLETED,
    )


def save_appointment(appointment: Appointment) -> Appointment:
    _appointments[appointment.id] = appointment
    logger.info(
        "Appointment saved: %s for %s (%s)",
        appointment.id, appointment.name, appointment.patient_id,
    )
    return appointment


def get_appointment(appointment_id: str) -> Optional[Appointment]:
    """Retrieve an appointment by its payment reference."""
    return _appointments.get(appointment_id)


def list_appointments() -> list[Appointment]:
    return list(_appointments.values())


def reset() -> None:
    """Clear all appointments. Used by test fixtures for isolation."""
    _appointments.clear()
