from mediconnect.llm.streaming import ResponseStreamer, StreamChannel
from mediconnect.llm.scripted_streamer import ScriptedResponseStreamer
from mediconnect.llm.openai_streamer import OpenAIResponseStreamer

__all__ = [
    "ResponseStreamer", "StreamChannel",
    "ScriptedResponseStreamer", "OpenAIResponseStreamer",
]
