"""Tests for the offline console demo scenarios and logging context."""

import logging

import pytest

from console_demo import ConsoleSession
from mediconnect.conversation.state_machine import ConversationState
from mediconnect.logging_context import (
    SessionIdFilter,
    get_session_id,
    get_session_logger,
    set_session_id,
)


class TestScenarios:
    @pytest.mark.asyncio
    async def test_booking_scenario(self, capsys):
        session = ConsoleSession()
        await session.run_scenario("booking")
        assert len(session.booked) == 1
        assert session.booked[0].symptom == "high fever"
        out = capsys.readouterr().out
        assert "Triage Report" in out
        assert session.booked[0].patient_id in out

    @pytest.mark.asyncio
    async def test_minor_scenario_books_nothing(self):
        session = ConsoleSession()
        await session.run_scenario("minor")
        assert session.booked == []
        assert "awaiting_payment" not in session.controller.state_machine.get_state_trace()

    @pytest.mark.asyncio
    async def test_payment_failure_scenario(self, capsys):
        session = ConsoleSession(fail_payments=True)
        await session.run_scenario("payment_failure")
        assert session.booked == []
        trace = session.controller.state_machine.get_state_trace()
        assert trace.count("awaiting_payment") == 2
        assert "cancelled" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_unknown_scenario(self, capsys):
        session = ConsoleSession()
        await session.run_scenario("nope")
        assert "Unknown scenario" in capsys.readouterr().out
        assert session.controller.state == ConversationState.IDLE


class TestSessionLogging:
    def test_default_session_id(self):
        import contextvars

        ctx = contextvars.Context()
        assert ctx.run(get_session_id) == "NO_SESSION"

    def test_filter_stamps_records(self):
        set_session_id("SES-test1234")
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        assert SessionIdFilter().filter(record)
        assert record.session_id == "SES-test1234"

    def test_filter_attached_once(self):
        logger = get_session_logger("mediconnect.tests.session")
        get_session_logger("mediconnect.tests.session")
        assert sum(isinstance(f, SessionIdFilter) for f in logger.filters) == 1
