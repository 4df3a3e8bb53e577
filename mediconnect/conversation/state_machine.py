"""
Finite state machine sequencing triage, booking and payment.

Defines the four session states and the explicit transitions between
them. The controller fires triggers; anything not in the table is
rejected, so the booking sub-flow can never be entered or left by a
path that was not declared here.

Usage:
    sm = ConversationStateMachine()
    sm.transition(TransitionTrigger.SESSION_READY)
    assert sm.current_state == ConversationState.CHATTING
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class ConversationState(str, Enum):
    """All possible states in a session lifecycle."""
    IDLE = "idle"
    CHATTING = "chatting"
    AWAITING_PAYMENT = "awaiting_payment"
    BOOKING_CONFIRMED = "booking_confirmed"


class TransitionTrigger(str, Enum):
    """Events that cause state transitions."""
    SESSION_READY = "session_ready"
    RESPONSE_COMPLETED = "response_completed"
    BOOKING_ACTION_ACCEPTED = "booking_action_accepted"
    PAYMENT_SUCCEEDED = "payment_succeeded"
    PAYMENT_FAILED = "payment_failed"
    SESSION_CLOSED = "session_closed"


@dataclass
class Transition:
    """A single valid state transition."""
    from_state: ConversationState
    to_state: ConversationState
    trigger: TransitionTrigger


@dataclass
class StateEntry:
    """Recorded history entry for a state visit."""
    state: ConversationState
    entered_at: datetime
    trigger: Optional[TransitionTrigger] = None


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current state."""


class ConversationStateMachine:
    """
    Deterministic state machine controlling the booking sub-flow.

    ``booking_confirmed`` ends the booking sub-flow but not the session:
    the user keeps chatting there, and a fresh booking action may start
    another payment.
    """

    TRANSITIONS: list[Transition] = [
        # --- Session start ---
        Transition(ConversationState.IDLE, ConversationState.CHATTING,
                   TransitionTrigger.SESSION_READY),

        # --- Conversation ---
        Transition(ConversationState.CHATTING, ConversationState.CHATTING,
                   TransitionTrigger.RESPONSE_COMPLETED),
        Transition(ConversationState.CHATTING, ConversationState.AWAITING_PAYMENT,
                   TransitionTrigger.BOOKING_ACTION_ACCEPTED),

        # --- Payment result ---
        Transition(ConversationState.AWAITING_PAYMENT, ConversationState.BOOKING_CONFIRMED,
                   TransitionTrigger.PAYMENT_SUCCEEDED),
        Transition(ConversationState.AWAITING_PAYMENT, ConversationState.CHATTING,
                   TransitionTrigger.PAYMENT_FAILED),

        # --- Post-booking ---
        Transition(ConversationState.BOOKING_CONFIRMED, ConversationState.BOOKING_CONFIRMED,
                   TransitionTrigger.RESPONSE_COMPLETED),
        Transition(ConversationState.BOOKING_CONFIRMED, ConversationState.AWAITING_PAYMENT,
                   TransitionTrigger.BOOKING_ACTION_ACCEPTED),

        # --- Teardown ---
        Transition(ConversationState.IDLE, ConversationState.IDLE,
                   TransitionTrigger.SESSION_CLOSED),
        Transition(ConversationState.CHATTING, ConversationState.IDLE,
                   TransitionTrigger.SESSION_CLOSED),
        Transition(ConversationState.AWAITING_PAYMENT, ConversationState.IDLE,
                   TransitionTrigger.SESSION_CLOSED),
        Transition(ConversationState.BOOKING_CONFIRMED, ConversationState.IDLE,
                   TransitionTrigger.SESSION_CLOSED),
    ]

    def __init__(self) -> None:
        self._current_state = ConversationState.IDLE
        self._history: list[StateEntry] = [
            StateEntry(state=ConversationState.IDLE, entered_at=datetime.now(timezone.utc))
        ]

    @property
    def current_state(self) -> ConversationState:
        return self._current_state

    def transition(self, trigger: TransitionTrigger) -> ConversationState:
        """
        Execute a state transition.

        Args:
            trigger: The event triggering the transition.

        Returns:
            The new conversation state.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_state == self._current_state and t.trigger == trigger:
                old_state = self._current_state
                self._current_state = t.to_state

                self._history.append(StateEntry(
                    state=self._current_state,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger,
                ))

                logger.debug(
                    "State transition: %s -> %s (trigger: %s)",
                    old_state.value, self._current_state.value, trigger.value,
                )
                return self._current_state

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_state.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def can_transition(self, trigger: TransitionTrigger) -> bool:
        return trigger in self.get_valid_triggers()

    def get_valid_triggers(self) -> list[TransitionTrigger]:
        """Return all triggers valid from the current state."""
        return [t.trigger for t in self.TRANSITIONS if t.from_state == self._current_state]

    def get_history(self) -> list[StateEntry]:
        """Return the full state transition history."""
        return list(self._history)

    def get_state_trace(self) -> list[str]:
        """Return ordered list of state names visited."""
        return [entry.state.value for entry in self._history]

    def is_booking_in_progress(self) -> bool:
        return self._current_state == ConversationState.AWAITING_PAYMENT
