"""Tests for appointment assembly and the in-memory store."""

from datetime import datetime, timezone

from mediconnect.schemas.booking_schema import BookingDetails, PaymentStatus
from mediconnect.tools.appointments import (
    build_appointment,
    derive_patient_id,
    get_appointment,
    list_appointments,
    reset,
    save_appointment,
)
from tests.conftest import FIXED_NOW

DETAILS = BookingDetails(name="Alex", email="a@x.com", phone="555", symptom="fever")


class TestPatientId:
    def test_epoch_milliseconds(self):
        at = datetime(2025, 1, 1, tzinfo=timezone.utc)
        assert derive_patient_id(at) == "PID-1735689600000"

    def test_prefix(self):
        assert derive_patient_id(FIXED_NOW).startswith("PID-")


class TestBuildAppointment:
    def test_fields_copied_from_details(self):
        appointment = build_appointment(DETAILS, "pay_123", FIXED_NOW)
        assert appointment.id == "pay_123"
        assert appointment.name == "Alex"
        assert appointment.email == "a@x.com"
        assert appointment.phone == "555"
        assert appointment.symptom == "fever"
        assert appointment.payment_status == PaymentStatus.COMPLETED

    def test_booking_date_and_patient_id_share_the_instant(self):
        appointment = build_appointment(DETAILS, "pay_123", FIXED_NOW)
        assert appointment.booking_date == FIXED_NOW.isoformat()
        assert appointment.patient_id == derive_patient_id(FIXED_NOW)


class TestStore:
    def test_save_and_retrieve(self):
        appointment = save_appointment(build_appointment(DETAILS, "pay_1", FIXED_NOW))
        assert get_appointment("pay_1") == appointment
        assert list_appointments() == [appointment]

    def test_missing_appointment(self):
        assert get_appointment("pay_unknown") is None

    def test_reset_clears_store(self):
        save_appointment(build_appointment(DETAILS, "pay_1", FIXED_NOW))
        reset()
        assert list_appointments() == []
