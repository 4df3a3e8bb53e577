"""OpenAI chat completions backend with token streaming."""

import logging
from collections.abc import AsyncIterator, Sequence
from typing import Optional

import openai
from openai import AsyncOpenAI

from mediconnect.config import settings
from mediconnect.errors import ResponseStreamError
from mediconnect.llm.streaming import ResponseStreamer, StreamChannel
from mediconnect.schemas.conversation_schema import BackendRole, BackendTurn

logger = logging.getLogger(__name__)


class OpenAIStreamChannel(StreamChannel):
    """Keeps the chat history and streams one completion per turn.

    The assistant reply is only added to the history once its stream has
    finished, so a failed turn leaves the context as it was apart from the
    user's message.
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str,
        temperature: float,
        max_tokens: int,
        messages: list[dict[str, str]],
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._messages = messages
        self._closed = False

    @property
    def messages(self) -> list[dict[str, str]]:
        return list(self._messages)

    async def send(self, user_text: str) -> AsyncIterator[str]:
        if self._closed:
            raise ResponseStreamError("Stream channel is closed")

        self._messages.append({"role": "user", "content": user_text})
        try:
            stream = await self._client.chat.completions.create(
                model=self._model,
                messages=self._messages,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
                stream=True,
            )
            parts: list[str] = []
            async for chunk in stream:
                if not chunk.choices:
                    continue
                content = chunk.choices[0].delta.content
                if content:
                    parts.append(content)
                    yield content
        except openai.OpenAIError as e:
            logger.error("OpenAI streaming error: %s", e)
            raise ResponseStreamError(str(e)) from e

        self._messages.append({"role": "assistant", "content": "".join(parts)})

    async def close(self) -> None:
        if not self._closed:
            self._closed = True
            await self._client.close()


class OpenAIResponseStreamer(ResponseStreamer):
    """Opens OpenAI-backed channels. Reads ``OPENAI_API_KEY`` by default."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = settings.model.llm_model,
        temperature: float = settings.model.llm_temperature,
        max_tokens: int = settings.model.llm_max_tokens,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def open_stream(
        self, system_instruction: str, history: Sequence[BackendTurn]
    ) -> StreamChannel:
        try:
            client = AsyncOpenAI(api_key=self._api_key)
        except openai.OpenAIError as e:
            raise ResponseStreamError(f"Cannot create OpenAI client: {e}") from e

        messages = [{"role": "system", "content": system_instruction}]
        messages.extend(
            {
                "role": "user" if turn.role == BackendRole.USER else "assistant",
                "content": turn.text,
            }
            for turn in history
        )
        logger.debug("Opened OpenAI channel (%s) with %d prior turns", self._model, len(history))
        return OpenAIStreamChannel(
            client,
            model=self._model,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            messages=messages,
        )
