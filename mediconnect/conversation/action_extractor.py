"""
Recognizes structured actions embedded in a finalized assistant turn.

The assistant answers in prose almost every turn. When it has collected
everything needed for a booking, its whole reply is a single raw JSON
object instead:

    {"action": "BOOK_APPOINTMENT",
     "details": {"name": "...", "email": "...", "phone": "...", "symptom": "..."}}

Parsing is a fallible lookup, not an error path: anything that is not
that exact shape comes back as ``NO_ACTION`` and is shown verbatim.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import ValidationError

from mediconnect.schemas.booking_schema import (
    BOOK_APPOINTMENT_ACTION,
    REQUIRED_DETAIL_FIELDS,
    BookingDetails,
)

logger = logging.getLogger(__name__)


class ActionKind(str, Enum):
    NO_ACTION = "no_action"
    BOOK_APPOINTMENT = "book_appointment"
    INVALID_BOOKING = "invalid_booking"


@dataclass(frozen=True)
class ActionResult:
    """Tagged result of inspecting one assistant turn."""

    kind: ActionKind
    details: Optional[BookingDetails] = None
    missing_fields: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_action(self) -> bool:
        return self.kind != ActionKind.NO_ACTION


NO_ACTION = ActionResult(kind=ActionKind.NO_ACTION)


def validate_booking_details(
    raw: Any,
) -> tuple[Optional[BookingDetails], tuple[str, ...]]:
    """Check the four booking fields.

    Returns ``(details, ())`` when every field is a string that is
    non-empty after trimming, otherwise ``(None, offending_fields)``.
    Unknown keys are reported too.
    """
    if not isinstance(raw, dict):
        return None, REQUIRED_DETAIL_FIELDS
    try:
        return BookingDetails.model_validate(raw), ()
    except ValidationError as exc:
        offending: list[str] = []
        for error in exc.errors():
            loc = error.get("loc") or ("details",)
            name = str(loc[0])
            if name not in offending:
                offending.append(name)
        return None, tuple(offending)


def extract_action(text: str) -> ActionResult:
    """Inspect the complete text of one assistant turn.

    Surrounding prose or markdown fencing makes the text plain prose.
    """
    candidate = text.strip()
    if not candidate.startswith("{") or not candidate.endswith("}"):
        return NO_ACTION

    try:
        payload = json.loads(candidate)
    except (ValueError, RecursionError):
        # Malformed or too deeply nested.
        return NO_ACTION

    if not isinstance(payload, dict):
        return NO_ACTION
    if payload.get("action") != BOOK_APPOINTMENT_ACTION:
        return NO_ACTION

    raw_details = payload.get("details")
    if not isinstance(raw_details, dict):
        return NO_ACTION

    details, offending = validate_booking_details(raw_details)
    if details is None:
        logger.info("Booking action rejected, bad fields: %s", ", ".join(offending))
        return ActionResult(kind=ActionKind.INVALID_BOOKING, missing_fields=offending)

    logger.debug("Booking action recognized for symptom '%s'", details.symptom)
    return ActionResult(kind=ActionKind.BOOK_APPOINTMENT, details=details)
