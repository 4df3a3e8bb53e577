"""Shared test fixtures and helpers."""

import asyncio
import json
from collections.abc import AsyncIterator, Sequence
from datetime import datetime, timezone
from typing import Callable, Optional, Union

import pytest

from mediconnect.conversation.controller import ConversationController
from mediconnect.conversation.state_machine import ConversationStateMachine
from mediconnect.errors import ResponseStreamError
from mediconnect.llm.streaming import ResponseStreamer, StreamChannel
from mediconnect.payments.gateway import PaymentGateway
from mediconnect.payments.orchestrator import PaymentOrchestrator
from mediconnect.schemas.booking_schema import Appointment, PaymentRequest
from mediconnect.schemas.conversation_schema import BackendTurn
from mediconnect.tools import appointments

FIXED_NOW = datetime(2025, 3, 15, 10, 0, tzinfo=timezone.utc)

ALEX_ACTION = (
    '{"action":"BOOK_APPOINTMENT","details":{"name":"Alex","email":"a@x.com",'
    '"phone":"555","symptom":"fever"}}'
)

# A scripted reply is either a list of fragments or an error raised after
# the listed fragments have been delivered.
Reply = Union[list[str], tuple[list[str], Exception]]


def booking_action(**overrides: object) -> str:
    details = {"name": "Alex", "email": "a@x.com", "phone": "555", "symptom": "fever"}
    details.update(overrides)
    return json.dumps({"action": "BOOK_APPOINTMENT", "details": details})


class FakeChannel(StreamChannel):
    """Replays queued replies, one per ``send``."""

    def __init__(self, replies: list[Reply]) -> None:
        self._replies = replies
        self.sent: list[str] = []
        self.closed = False
        self.gate: Optional[asyncio.Event] = None

    async def send(self, user_text: str) -> AsyncIterator[str]:
        self.sent.append(user_text)
        reply = self._replies.pop(0) if self._replies else ["ok"]
        error: Optional[Exception] = None
        if isinstance(reply, tuple):
            reply, error = reply
        for index, fragment in enumerate(reply):
            if self.gate is not None and index == 1:
                await self.gate.wait()
            yield fragment
        if error is not None:
            raise error

    async def close(self) -> None:
        self.closed = True


class FakeStreamer(ResponseStreamer):
    """Hands out FakeChannels sharing one reply queue."""

    def __init__(self, replies: Optional[list[Reply]] = None, unreachable: bool = False) -> None:
        self.replies: list[Reply] = list(replies or [])
        self.unreachable = unreachable
        self.channels: list[FakeChannel] = []
        self.opened_with: list[tuple[str, list[BackendTurn]]] = []

    async def open_stream(
        self, system_instruction: str, history: Sequence[BackendTurn]
    ) -> StreamChannel:
        if self.unreachable:
            raise ResponseStreamError("backend unreachable")
        self.opened_with.append((system_instruction, list(history)))
        channel = FakeChannel(self.replies)
        self.channels.append(channel)
        return channel

    @property
    def channel(self) -> FakeChannel:
        return self.channels[-1]


class ManualGateway(PaymentGateway):
    """Keeps the checkout callbacks so tests decide the outcome."""

    def __init__(self, available: bool = True) -> None:
        self.available = available
        self.requests: list[PaymentRequest] = []
        self.on_success: Optional[Callable[[str], None]] = None
        self.on_failure: Optional[Callable[[str], None]] = None

    async def load(self) -> bool:
        return self.available

    def open_checkout(self, request, on_success, on_failure) -> None:
        self.requests.append(request)
        self.on_success = on_success
        self.on_failure = on_failure

    def succeed(self, payment_id: str = "pay_123") -> None:
        assert self.on_success is not None
        self.on_success(payment_id)

    def fail(self, reason: str = "cancelled") -> None:
        assert self.on_failure is not None
        self.on_failure(reason)


class CrashingGateway(ManualGateway):
    """Raises a non-gateway error from ``load`` or ``open_checkout``."""

    def __init__(self, crash_on: str) -> None:
        super().__init__()
        self.crash_on = crash_on

    async def load(self) -> bool:
        if self.crash_on == "load":
            raise OSError("script host unreachable")
        return True

    def open_checkout(self, request, on_success, on_failure) -> None:
        if self.crash_on == "checkout":
            raise ValueError("checkout widget broke")
        super().open_checkout(request, on_success, on_failure)


class Harness:
    """A controller wired to fakes, recording everything it emits."""

    def __init__(self, streamer: FakeStreamer, gateway: ManualGateway) -> None:
        self.streamer = streamer
        self.gateway = gateway
        self.booked: list[Appointment] = []
        self.snapshots: list[list] = []
        self.controller = ConversationController(
            streamer,
            PaymentOrchestrator(gateway, amount=50000, currency="INR"),
            on_appointment_booked=self.booked.append,
            on_transcript_update=self.snapshots.append,
            clock=lambda: FIXED_NOW,
        )

    @property
    def session(self):
        return self.controller.session

    async def open(self) -> "Harness":
        await self.controller.initialize_session()
        return self

    async def book(self) -> None:
        """Drive the session into awaiting_payment with Alex's details."""
        self.streamer.replies.append([ALEX_ACTION])
        await self.controller.submit_user_turn("yes, book it")
        await self.controller.wait_for_payment()


@pytest.fixture(autouse=True)
def _reset_appointment_store():
    appointments.reset()
    yield
    appointments.reset()


@pytest.fixture
def state_machine():
    return ConversationStateMachine()


@pytest.fixture
def streamer():
    return FakeStreamer()


@pytest.fixture
def gateway():
    return ManualGateway()


@pytest.fixture
def harness(streamer, gateway):
    return Harness(streamer, gateway)
