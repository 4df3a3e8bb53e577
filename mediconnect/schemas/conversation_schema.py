"""Transcript and backend history schemas."""

import time
import uuid
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Sender(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class BackendRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


def new_message_id() -> str:
    return f"MSG-{uuid.uuid4().hex[:12]}"


class ChatOption(BaseModel):
    """A follow-up the user can trigger from a finalized message."""

    label: str
    value: str


class Message(BaseModel):
    """A single transcript entry.

    ``text`` of an assistant message only ever grows while
    ``is_streaming`` is set; the flag is cleared once, on finalization.
    """

    id: str = Field(default_factory=new_message_id)
    sender: Sender
    text: str = ""
    is_streaming: bool = False
    actions: Optional[list[ChatOption]] = None
    timestamp: float = Field(default_factory=time.time)


class BackendTurn(BaseModel):
    """One entry of the context sent to the text generation backend."""

    role: BackendRole
    text: str
