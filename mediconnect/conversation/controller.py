"""
Conversation controller: the single writer of a session.

Sequences one conversation end to end. Each user turn is streamed from
the text backend into a placeholder assistant message; the finished
text is then either shown as-is or, when it is a booking action, turned
into a payment. The payment's single terminal outcome comes back
through a callback and closes the loop.

Only one thing can be in flight at a time. While a reply is streaming
(``is_bot_typing``) or a payment is undecided (``is_loading``) new
turns are rejected rather than queued.

Usage:
    controller = ConversationController(streamer, PaymentOrchestrator(gateway))
    await controller.initialize_session()
    await controller.submit_user_turn("I have a runny nose and sneezing")
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Callable, Optional

from mediconnect.config import settings
from mediconnect.conversation.action_extractor import ActionKind, extract_action
from mediconnect.conversation.state_machine import (
    ConversationState,
    ConversationStateMachine,
    TransitionTrigger,
)
from mediconnect.errors import ResponseStreamError
from mediconnect.llm.streaming import ResponseStreamer, StreamChannel
from mediconnect.logging_context import get_session_logger, set_session_id
from mediconnect.payments.orchestrator import PaymentOrchestrator
from mediconnect.prompts.prompt_templates import (
    GATEWAY_LOAD_FAILED_NOTICE,
    GATEWAY_LOADING_NOTICE,
    INIT_FAILURE_MESSAGE,
    MISSING_DETAILS_MESSAGE,
    STREAM_FAILURE_MESSAGE,
    build_booking_confirmation,
    build_greeting,
    build_payment_failure,
    build_payment_success,
)
from mediconnect.prompts.system_prompts import build_system_instruction
from mediconnect.schemas.booking_schema import (
    Appointment,
    BookingDetails,
    IntakeDetails,
    PaymentOutcome,
    PaymentSuccess,
)
from mediconnect.schemas.conversation_schema import (
    BackendRole,
    BackendTurn,
    ChatOption,
    Message,
    Sender,
)
from mediconnect.schemas.session_schema import Session
from mediconnect.tools.appointments import build_appointment, save_appointment

logger = get_session_logger(__name__)

RETRY_PAYMENT_VALUE = "__retry_payment__"

TranscriptObserver = Callable[[list[Message]], None]
BookingObserver = Callable[[Appointment], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConversationController:
    """Owns one Session from open to close."""

    def __init__(
        self,
        streamer: ResponseStreamer,
        payments: PaymentOrchestrator,
        on_appointment_booked: Optional[BookingObserver] = None,
        on_transcript_update: Optional[TranscriptObserver] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._streamer = streamer
        self._payments = payments
        self._on_appointment_booked = on_appointment_booked
        self._on_transcript_update = on_transcript_update
        self._clock = clock
        self._sm = ConversationStateMachine()
        self._channel: Optional[StreamChannel] = None
        self._system_instruction: Optional[str] = None
        self._payment_task: Optional[asyncio.Task] = None
        self.session = Session(opened_at=clock())

    # ------------------------------------------------------------------ #
    # Read-only views
    # ------------------------------------------------------------------ #

    @property
    def state(self) -> ConversationState:
        return self.session.state

    @property
    def transcript(self) -> list[Message]:
        return list(self.session.transcript)

    @property
    def state_machine(self) -> ConversationStateMachine:
        return self._sm

    @property
    def payment_task(self) -> Optional[asyncio.Task]:
        return self._payment_task

    async def wait_for_payment(self) -> None:
        """Wait until the current payment attempt has handed off to the gateway."""
        if self._payment_task is not None:
            await self._payment_task

    # ------------------------------------------------------------------ #
    # Session lifecycle
    # ------------------------------------------------------------------ #

    async def initialize_session(self, prior_details: Optional[IntakeDetails] = None) -> bool:
        """Open the backend channel and greet the user.

        Returns False when the backend could not be reached. The session
        then stays idle and the next turn retries the channel.
        """
        set_session_id(self.session.session_id)
        if self.session.closed or self._system_instruction is not None:
            logger.warning("Session already initialized or closed; ignoring")
            return False

        self._system_instruction = build_system_instruction(prior_details)
        try:
            self._channel = await self._streamer.open_stream(
                self._system_instruction, list(self.session.backend_history)
            )
        except ResponseStreamError as e:
            logger.error("Error initializing chat backend: %s", e)
            self._append(Message(sender=Sender.ASSISTANT, text=INIT_FAILURE_MESSAGE))
            return False

        self._append(Message(sender=Sender.ASSISTANT, text=build_greeting(prior_details)))
        self._fire(TransitionTrigger.SESSION_READY)
        logger.info("Session opened")
        return True

    async def close(self) -> None:
        """Tear the session down. Late fragments and callbacks are ignored."""
        set_session_id(self.session.session_id)
        if self.session.closed:
            return

        self.session.closed = True
        channel, self._channel = self._channel, None
        for message in self.session.streaming_messages():
            message.is_streaming = False
        self.session.is_bot_typing = False
        self.session.is_loading = False
        self._fire(TransitionTrigger.SESSION_CLOSED)

        if channel is not None:
            await channel.close()
        logger.info("Session closed")

    # ------------------------------------------------------------------ #
    # Turn taking
    # ------------------------------------------------------------------ #

    async def submit_user_turn(self, text: str) -> bool:
        """Run one user turn to completion.

        Returns False, leaving the transcript untouched, when the turn is
        rejected: empty text, an outstanding turn or payment, or a closed
        session.
        """
        set_session_id(self.session.session_id)
        if self.session.closed:
            logger.debug("Turn rejected: session closed")
            return False
        if not text.strip():
            return False
        if self.session.is_busy:
            logger.info("Turn rejected: assistant typing or payment pending")
            return False
        if len(text) > settings.conversation.max_input_length:
            logger.info("Turn rejected: %d characters exceeds limit", len(text))
            return False

        self.session.is_bot_typing = True
        self._append(Message(sender=Sender.USER, text=text))
        self.session.backend_history.append(BackendTurn(role=BackendRole.USER, text=text))
        placeholder = Message(sender=Sender.ASSISTANT, is_streaming=True)
        self._append(placeholder)

        try:
            full_text = await self._stream_reply(text, placeholder)
            # None means the session was closed while streaming.
            if full_text is not None:
                self.session.backend_history.append(
                    BackendTurn(role=BackendRole.ASSISTANT, text=full_text)
                )
                self._conclude_turn(placeholder, full_text)
        except ResponseStreamError as e:
            if not self.session.closed:
                logger.error("Error streaming reply: %s", e)
                self._finalize(placeholder, STREAM_FAILURE_MESSAGE)
        finally:
            self.session.is_bot_typing = False
            # No-op unless the turn ended on an unexpected error.
            self._finalize(placeholder, STREAM_FAILURE_MESSAGE)
        return True

    async def select_action(self, option: ChatOption) -> bool:
        """Trigger a follow-up attached to a finalized message."""
        if option.value == RETRY_PAYMENT_VALUE:
            return await self.retry_payment()
        return await self.submit_user_turn(option.value)

    async def retry_payment(self) -> bool:
        """Start another payment with the details kept from a failed attempt."""
        set_session_id(self.session.session_id)
        details = self.session.pending_booking_details
        if self.session.closed or self.session.is_busy or details is None:
            return False
        if not self._sm.can_transition(TransitionTrigger.BOOKING_ACTION_ACCEPTED):
            return False
        logger.info("Retrying payment")
        self._start_payment(details)
        return True

    async def _stream_reply(self, text: str, placeholder: Message) -> Optional[str]:
        """Accumulate fragments into ``placeholder``; None if closed meanwhile."""
        channel = await self._ensure_channel()
        parts: list[str] = []
        stream = channel.send(text)
        try:
            async for fragment in stream:
                if self.session.closed:
                    return None
                parts.append(fragment)
                placeholder.text += fragment
                self._publish()
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()
        if self.session.closed:
            return None
        return "".join(parts)

    async def _ensure_channel(self) -> StreamChannel:
        """Return the session channel, reopening it after a failed start."""
        if self._channel is not None:
            return self._channel

        if self._system_instruction is None:
            self._system_instruction = build_system_instruction(None)
        # The current user turn is sent separately, so leave it out of the seed.
        seed = list(self.session.backend_history[:-1])
        self._channel = await self._streamer.open_stream(self._system_instruction, seed)
        logger.info("Stream channel opened on retry")
        if self._sm.current_state == ConversationState.IDLE:
            self._fire(TransitionTrigger.SESSION_READY)
        return self._channel

    def _conclude_turn(self, placeholder: Message, full_text: str) -> None:
        result = extract_action(full_text)

        if result.kind == ActionKind.NO_ACTION:
            self._finalize(placeholder, full_text)
            self._fire(TransitionTrigger.RESPONSE_COMPLETED)
            return

        if result.kind == ActionKind.INVALID_BOOKING:
            logger.info("Booking action missing details: %s", ", ".join(result.missing_fields))
            self.session.pending_booking_details = None
            self._finalize(placeholder, MISSING_DETAILS_MESSAGE)
            return

        details = result.details
        self._finalize(placeholder, build_booking_confirmation(details.symptom))
        self.session.pending_booking_details = details
        self._start_payment(details)

    # ------------------------------------------------------------------ #
    # Payment sub-flow
    # ------------------------------------------------------------------ #

    def _start_payment(self, details: BookingDetails) -> None:
        self._fire(TransitionTrigger.BOOKING_ACTION_ACCEPTED)
        self.session.is_loading = True
        self._append(Message(sender=Sender.SYSTEM, text=GATEWAY_LOADING_NOTICE))
        self._payment_task = asyncio.create_task(
            self._payments.pay(details, self._on_payment_outcome)
        )
        self._payment_task.add_done_callback(self._on_payment_task_done)

    def _on_payment_task_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Payment task failed: %r", error)

    def _on_payment_outcome(self, outcome: PaymentOutcome) -> None:
        set_session_id(self.session.session_id)
        if self.session.closed:
            logger.info("Payment outcome after close ignored: %s", outcome.kind)
            return
        if self._sm.current_state != ConversationState.AWAITING_PAYMENT:
            logger.warning("Unexpected payment outcome in state %s", self._sm.current_state.value)
            return

        if isinstance(outcome, PaymentSuccess):
            self._complete_booking(outcome.payment_id)
            return

        logger.info("Payment failed: %s", outcome.reason)
        if outcome.gateway_unavailable:
            self._append(Message(sender=Sender.SYSTEM, text=GATEWAY_LOAD_FAILED_NOTICE))
        else:
            self._append(Message(
                sender=Sender.ASSISTANT,
                text=build_payment_failure(outcome.reason),
                actions=[ChatOption(label="Retry payment", value=RETRY_PAYMENT_VALUE)],
            ))
        self.session.is_loading = False
        self._fire(TransitionTrigger.PAYMENT_FAILED)

    def _complete_booking(self, payment_id: str) -> None:
        details = self.session.pending_booking_details
        appointment = build_appointment(details, payment_id, self._clock())
        save_appointment(appointment)
        if self._on_appointment_booked is not None:
            self._on_appointment_booked(appointment)

        self._append(Message(
            sender=Sender.ASSISTANT,
            text=build_payment_success(details.name, appointment.patient_id),
        ))
        self.session.pending_booking_details = None
        self.session.is_loading = False
        self._fire(TransitionTrigger.PAYMENT_SUCCEEDED)
        logger.info("Appointment booked: %s", appointment.patient_id)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _fire(self, trigger: TransitionTrigger) -> None:
        self.session.state = self._sm.transition(trigger)

    def _append(self, message: Message) -> None:
        self.session.transcript.append(message)
        self._publish()

    def _finalize(self, message: Message, text: str) -> None:
        """Set the final text and clear ``is_streaming``; later calls are no-ops."""
        if not message.is_streaming:
            return
        message.text = text
        message.is_streaming = False
        self._publish()

    def _publish(self) -> None:
        if self._on_transcript_update is not None:
            self._on_transcript_update([m.model_copy() for m in self.session.transcript])
