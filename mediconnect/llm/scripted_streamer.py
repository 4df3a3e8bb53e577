"""
Offline rule-based backend for demos and tests.

Mimics the hosted assistant without any API keys: triages symptoms from
the keyword reference tables, offers booking, collects the missing
details one at a time, reads them back and finally answers with the raw
booking action JSON. Replies are streamed word by word.
"""

import json
import logging
import re
from collections.abc import AsyncIterator, Sequence
from enum import Enum
from typing import Optional

from mediconnect.errors import ResponseStreamError
from mediconnect.llm.streaming import ResponseStreamer, StreamChannel
from mediconnect.schemas.booking_schema import BOOK_APPOINTMENT_ACTION, IntakeDetails
from mediconnect.schemas.conversation_schema import BackendTurn
from mediconnect.tools.triage import (
    Severity,
    TriageHint,
    is_emergency,
    match_triage_keyword,
)

logger = logging.getLogger(__name__)

YES_WORDS = ("yes", "yeah", "yep", "sure", "please", "ok", "okay", "correct", "book")
NO_WORDS = ("no", "nope", "not now", "wrong", "later")
RETRY_WORDS = ("retry", "try again", "again")

_FIELD_PROMPTS = {
    "name": "What's your full name?",
    "email": "Thanks. What email address should we use?",
    "phone": "And the best phone number to reach you?",
    "symptom": "What's the main symptom you'd like the doctor to look at?",
}


class _Phase(str, Enum):
    TRIAGE = "triage"
    OFFERED = "offered"
    COLLECTING = "collecting"
    CONFIRMING = "confirming"
    BOOKED = "booked"


def _has_word(text: str, words: tuple[str, ...]) -> bool:
    lower = text.lower()
    return any(re.search(rf"\b{re.escape(w)}\b", lower) for w in words)


EMERGENCY_RECOMMENDATION = (
    "Please call emergency services (like 911) or go to the nearest ER immediately."
)


def _urgency(hint: TriageHint, emergency: bool) -> str:
    if emergency:
        return "Emergency"
    return "High" if hint.severity == Severity.MAJOR else "Low"


def build_triage_report(hint: TriageHint, matched_keyword: str, emergency: bool = False) -> str:
    recommendation = hint.response
    if emergency and hint.offer_booking:
        # Emergencies never offer a booking.
        recommendation = EMERGENCY_RECOMMENDATION
    lines = [
        "🩺 **Triage Report**",
        f"- **Urgency:** {_urgency(hint, emergency)}",
        f"- **Probable Conditions:** Symptoms consistent with {matched_keyword}.",
        f"- **Recommendation:** {recommendation}",
    ]
    if hint.offer_booking and not emergency:
        lines.append("")
        lines.append("Would you like me to help you book an appointment?")
    return "\n".join(lines)


class ScriptedStreamChannel(StreamChannel):
    """Deterministic conversation driven by keyword rules."""

    def __init__(
        self,
        known: Optional[IntakeDetails] = None,
        fail_on: Optional[str] = None,
    ) -> None:
        seed = known or IntakeDetails()
        self._fields: dict[str, Optional[str]] = {
            "name": seed.name,
            "email": seed.email,
            "phone": seed.phone,
            "symptom": seed.symptom,
        }
        self._phase = _Phase.TRIAGE
        self._fail_on = fail_on
        self._closed = False

    @property
    def phase(self) -> str:
        return self._phase.value

    async def send(self, user_text: str) -> AsyncIterator[str]:
        if self._closed:
            raise ResponseStreamError("Stream channel is closed")

        reply = self._reply(user_text)
        for index, fragment in enumerate(re.findall(r"\S+\s*", reply)):
            if self._fail_on and self._fail_on in user_text and index == 1:
                raise ResponseStreamError("Simulated transport failure")
            yield fragment

    async def close(self) -> None:
        self._closed = True

    # ------------------------------------------------------------------ #
    # Conversation rules
    # ------------------------------------------------------------------ #

    def _reply(self, text: str) -> str:
        if self._phase == _Phase.OFFERED:
            return self._handle_offer(text)
        if self._phase == _Phase.COLLECTING:
            return self._handle_collecting(text)
        if self._phase == _Phase.CONFIRMING:
            return self._handle_confirming(text)
        if self._phase == _Phase.BOOKED and _has_word(text, RETRY_WORDS):
            return self._booking_action()
        return self._handle_triage(text)

    def _handle_triage(self, text: str) -> str:
        match = match_triage_keyword(text)
        if match is None:
            return (
                "I'm sorry you're not feeling well. Could you tell me more about your "
                "symptoms, such as what you're feeling and for how long?"
            )
        hint, keyword = match
        emergency = is_emergency(text)
        if not self._fields["symptom"]:
            self._fields["symptom"] = keyword
        if hint.offer_booking and not emergency:
            self._phase = _Phase.OFFERED
        return build_triage_report(hint, keyword, emergency)

    def _handle_offer(self, text: str) -> str:
        if _has_word(text, YES_WORDS):
            self._phase = _Phase.COLLECTING
            return "Happy to help with that. " + self._next_prompt()
        self._phase = _Phase.TRIAGE
        return "No problem. Is there anything else about your symptoms I can help with?"

    def _handle_collecting(self, text: str) -> str:
        field_name = self._next_missing()
        if field_name is not None:
            self._fields[field_name] = text.strip()
        if self._next_missing() is not None:
            return self._next_prompt()
        self._phase = _Phase.CONFIRMING
        return (
            "Just to confirm, I have: "
            f"Name: {self._fields['name']}, Email: {self._fields['email']}, "
            f"Phone: {self._fields['phone']}, Symptom: {self._fields['symptom']}. "
            "Is that all correct?"
        )

    def _handle_confirming(self, text: str) -> str:
        if _has_word(text, NO_WORDS):
            self._fields.update(name=None, email=None, phone=None)
            self._phase = _Phase.COLLECTING
            return "Let's go through it again. " + self._next_prompt()
        if _has_word(text, YES_WORDS):
            self._phase = _Phase.BOOKED
            return self._booking_action()
        return "Sorry, I just need a yes or no. Are those details correct?"

    def _booking_action(self) -> str:
        return json.dumps({"action": BOOK_APPOINTMENT_ACTION, "details": self._fields})

    def _next_missing(self) -> Optional[str]:
        for name in ("name", "email", "phone", "symptom"):
            if not self._fields[name]:
                return name
        return None

    def _next_prompt(self) -> str:
        field_name = self._next_missing()
        return _FIELD_PROMPTS[field_name] if field_name else ""


class ScriptedResponseStreamer(ResponseStreamer):
    """Opens scripted channels.

    ``unreachable`` makes every ``open_stream`` fail; ``fail_on`` breaks a
    turn mid-stream whenever the user text contains that marker.
    """

    def __init__(
        self,
        known: Optional[IntakeDetails] = None,
        unreachable: bool = False,
        fail_on: Optional[str] = None,
    ) -> None:
        self._known = known
        self.unreachable = unreachable
        self._fail_on = fail_on
        self.channels: list[ScriptedStreamChannel] = []

    async def open_stream(
        self, system_instruction: str, history: Sequence[BackendTurn]
    ) -> StreamChannel:
        if self.unreachable:
            raise ResponseStreamError("Scripted backend marked unreachable")
        channel = ScriptedStreamChannel(known=self._known, fail_on=self._fail_on)
        self.channels.append(channel)
        logger.debug("Opened scripted channel #%d", len(self.channels))
        return channel
