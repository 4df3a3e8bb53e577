"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""

import pytest


class TestSchemaImports:
    def test_import_conversation_schema(self):
        from mediconnect.schemas.conversation_schema import (
            BackendRole, ChatOption, Message, Sender,
        )
        assert Sender.SYSTEM == "system"
        assert BackendRole.USER == "user"
        message = Message(sender=Sender.ASSISTANT)
        assert message.id.startswith("MSG-")
        assert message.text == ""
        assert ChatOption(label="Yes", value="yes").value == "yes"

    def test_import_booking_schema(self):
        from mediconnect.schemas.booking_schema import (
            Appointment, BookingDetails, PaymentFailure, PaymentSuccess,
        )
        assert PaymentSuccess(payment_id="pay_1").kind == "success"
        assert PaymentFailure(reason="x").gateway_unavailable is False

    def test_import_session_schema(self):
        from mediconnect.schemas.session_schema import Session
        session = Session()
        assert session.session_id.startswith("SES-")
        assert session.state.value == "idle"
        assert not session.is_busy
        assert session.pending_booking_details is None


class TestConversationImports:
    def test_import_conversation_package(self):
        from mediconnect.conversation import (
            ActionKind, ConversationState, ConversationStateMachine, extract_action,
        )
        sm = ConversationStateMachine()
        assert sm.current_state == ConversationState.IDLE
        assert extract_action("hello").kind == ActionKind.NO_ACTION

    def test_import_controller(self):
        from mediconnect.conversation.controller import ConversationController
        assert ConversationController is not None


class TestBackendImports:
    def test_import_llm_package(self):
        from mediconnect.llm import (
            OpenAIResponseStreamer, ResponseStreamer, ScriptedResponseStreamer,
        )
        assert issubclass(ScriptedResponseStreamer, ResponseStreamer)
        assert issubclass(OpenAIResponseStreamer, ResponseStreamer)

    def test_import_payments_package(self):
        from mediconnect.payments import (
            MockPaymentGateway, PaymentGateway, PaymentOrchestrator,
        )
        assert issubclass(MockPaymentGateway, PaymentGateway)
        assert PaymentOrchestrator is not None

    def test_abstract_boundaries_cannot_be_instantiated(self):
        from mediconnect.llm import ResponseStreamer
        from mediconnect.payments import PaymentGateway
        with pytest.raises(TypeError):
            ResponseStreamer()
        with pytest.raises(TypeError):
            PaymentGateway()


class TestToolImports:
    def test_import_triage(self):
        from mediconnect.tools.triage import MAJOR_CONDITIONS, MINOR_CONDITIONS
        assert len(MAJOR_CONDITIONS) == 8
        assert len(MINOR_CONDITIONS) == 5

    def test_import_appointments(self):
        from mediconnect.tools.appointments import build_appointment, save_appointment
        assert callable(build_appointment)
        assert callable(save_appointment)


class TestPromptImports:
    def test_import_system_prompts(self):
        from mediconnect.prompts.system_prompts import build_system_instruction
        instruction = build_system_instruction()
        assert "BOOK_APPOINTMENT" in instruction

    def test_import_prompt_templates(self):
        from mediconnect.prompts.prompt_templates import (
            build_booking_confirmation, build_payment_failure, build_payment_success,
        )
        assert callable(build_booking_confirmation)


class TestConfigImport:
    def test_import_config(self):
        from mediconnect.config import settings
        assert settings.clinic.app_name is not None
        assert settings.model.llm_model is not None
        assert settings.conversation.max_input_length >= 1


class TestConsoleDemo:
    def test_console_session_imports(self):
        from console_demo import ConsoleSession
        session = ConsoleSession()
        assert session.controller.state.value == "idle"
        assert session.booked == []
