"""
Boundary to the text generation backend.

A ``ResponseStreamer`` opens one ``StreamChannel`` per session. The
channel keeps the conversational context, so every user turn in the
session goes through the same channel instead of re-seeding a fresh
one. ``send`` returns a lazy, finite async iterator of fragments for a
single assistant turn; it cannot be restarted.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Sequence

from mediconnect.schemas.conversation_schema import BackendTurn


class StreamChannel(ABC):
    """A live conversation with the backend."""

    @abstractmethod
    def send(self, user_text: str) -> AsyncIterator[str]:
        """Stream the assistant's reply to ``user_text``.

        Raises:
            ResponseStreamError: on transport failure, either when the
                iterator is created or while it is consumed.
        """
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        """Release the channel. Later ``send`` calls are invalid."""
        raise NotImplementedError


class ResponseStreamer(ABC):
    """Factory for stream channels."""

    @abstractmethod
    async def open_stream(
        self, system_instruction: str, history: Sequence[BackendTurn]
    ) -> StreamChannel:
        """Open a channel seeded with an instruction and prior turns.

        Raises:
            ResponseStreamError: if the backend is unreachable.
        """
        raise NotImplementedError
