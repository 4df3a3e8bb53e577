"""
Terminal chat entry point.

Talks to the hosted OpenAI backend (requires OPENAI_API_KEY) and takes
payments through the mock gateway. Console mode runs the fully offline
demo instead.

Usage:
    Live chat:    python main.py
    Console mode: python main.py console
"""

import asyncio
import logging
import sys

from mediconnect.config import settings

logger = logging.getLogger(__name__)


def _run_live_mode() -> None:
    """Chat against the hosted text backend (requires OPENAI_API_KEY)."""
    from console_demo import ConsoleSession
    from mediconnect.llm.openai_streamer import OpenAIResponseStreamer

    logger.info("Starting live chat with model %s", settings.model.llm_model)
    session = ConsoleSession(streamer=OpenAIResponseStreamer())
    asyncio.run(session.run())


def _run_console_mode() -> None:
    """Start the offline console demo (no API keys required)."""
    from console_demo import ConsoleSession

    session = ConsoleSession()
    asyncio.run(session.run())


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "console":
        _run_console_mode()
    else:
        _run_live_mode()
