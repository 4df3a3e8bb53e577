"""Per-conversation session state."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from mediconnect.conversation.state_machine import ConversationState
from mediconnect.schemas.booking_schema import BookingDetails
from mediconnect.schemas.conversation_schema import BackendTurn, Message


def new_session_id() -> str:
    return f"SES-{uuid.uuid4().hex[:8]}"


@dataclass
class Session:
    """
    Everything one conversation owns, from open to close.

    Held by exactly one ConversationController, which is the only
    writer. ``backend_history`` never leaves the session: it mirrors the
    user and assistant turns of ``transcript`` without system notices.
    """
    session_id: str = field(default_factory=new_session_id)
    state: ConversationState = ConversationState.IDLE
    transcript: list[Message] = field(default_factory=list)
    backend_history: list[BackendTurn] = field(default_factory=list)
    pending_booking_details: Optional[BookingDetails] = None
    is_bot_typing: bool = False
    is_loading: bool = False
    opened_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    closed: bool = False

    @property
    def is_busy(self) -> bool:
        """True while a turn or a payment decision is outstanding."""
        return self.is_bot_typing or self.is_loading

    def streaming_messages(self) -> list[Message]:
        return [m for m in self.transcript if m.is_streaming]
