"""
Offline console demo: a full triage and booking conversation without API keys.

Runs the real conversation controller, state machine, action extractor
and payment orchestrator against the scripted backend and the mock
payment gateway. Replies are printed as they stream.

Usage:
    python console_demo.py
    python console_demo.py --scenario booking
    python console_demo.py --scenario payment_failure
"""

import argparse
import asyncio
from typing import Optional

from mediconnect.config import settings
from mediconnect.conversation.controller import ConversationController
from mediconnect.llm.scripted_streamer import ScriptedResponseStreamer
from mediconnect.llm.streaming import ResponseStreamer
from mediconnect.payments.gateway import MockPaymentGateway
from mediconnect.payments.orchestrator import PaymentOrchestrator
from mediconnect.schemas.booking_schema import Appointment
from mediconnect.schemas.conversation_schema import Message, Sender

BLUE = "\033[94m"
GREEN = "\033[92m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"


class TranscriptPrinter:
    """Prints assistant and system messages, streaming text as it grows."""

    def __init__(self) -> None:
        self._printed: dict[str, str] = {}
        self._open_line: Optional[str] = None

    def __call__(self, transcript: list[Message]) -> None:
        for message in transcript:
            if message.sender == Sender.USER:
                self._printed.setdefault(message.id, message.text)
                continue
            self._render(message)

    def _render(self, message: Message) -> None:
        shown = self._printed.get(message.id)
        if shown is None:
            if message.sender == Sender.SYSTEM:
                print(f"{DIM}  >> {message.text}{RESET}")
            else:
                print(f"{GREEN}{BOLD}[Assistant]{RESET} {GREEN}{message.text}", end="", flush=True)
                self._open_line = message.id
                if not message.is_streaming:
                    self._close_line()
            self._printed[message.id] = message.text
            return

        if message.text != shown:
            if message.text.startswith(shown):
                print(message.text[len(shown):], end="", flush=True)
            else:
                self._close_line()
                print(f"{DIM}  >> Action recognized, message replaced{RESET}")
                print(f"{GREEN}{BOLD}[Assistant]{RESET} {GREEN}{message.text}", end="")
                self._open_line = message.id
            self._printed[message.id] = message.text

        if not message.is_streaming and self._open_line == message.id:
            self._close_line()

    def _close_line(self) -> None:
        if self._open_line is not None:
            print(RESET)
            self._open_line = None


class ConsoleSession:
    """Drives one controller from the terminal."""

    # Pre-scripted scenarios for --scenario flag
    SCENARIOS: dict[str, list[str]] = {
        "booking": [
            "I've had a high fever for two days",
            "yes please",
            "Alex Morgan",
            "alex@example.com",
            "555 0100",
            "yes",
        ],
        "minor": [
            "I have a runny nose and sneezing",
            "no thanks",
        ],
        "emergency": [
            "My dad has slurred speech and his face looks odd",
        ],
        "payment_failure": [
            "I have a sore throat",
            "yes",
            "Alex Morgan",
            "alex@example.com",
            "555 0100",
            "yes",
            "can we try again",
        ],
    }

    def __init__(
        self,
        streamer: Optional[ResponseStreamer] = None,
        fail_payments: bool = False,
    ) -> None:
        self.gateway = MockPaymentGateway(fail_with="cancelled" if fail_payments else None)
        self.streamer = streamer or ScriptedResponseStreamer()
        self.booked: list[Appointment] = []
        self.controller = ConversationController(
            self.streamer,
            PaymentOrchestrator(self.gateway),
            on_appointment_booked=self.booked.append,
            on_transcript_update=TranscriptPrinter(),
        )

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _banner(self, title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  {settings.clinic.app_name.upper()} - {title}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()

    def _summary(self, title: str) -> None:
        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  {title}{RESET}")
        print(f"{DIM}  State trace: {' -> '.join(self.controller.state_machine.get_state_trace())}{RESET}")
        for appointment in self.booked:
            print(f"{DIM}  Booked: {appointment.patient_id} ({appointment.symptom}){RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    async def _turn(self, text: str) -> None:
        accepted = await self.controller.submit_user_turn(text)
        if not accepted:
            self.system_log("Input ignored (empty, too long, or assistant busy)")
        await self.controller.wait_for_payment()
        self.system_log(f"State: {self.controller.state.value}")

    async def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        self._banner(f"Scenario: {scenario}")
        await self.controller.initialize_session()
        for step in steps:
            print(f"\n{BLUE}[You] {RESET}{step}")
            await self._turn(step)
        await self.controller.close()
        self._summary(f"Scenario '{scenario}' complete.")

    async def run(self) -> None:
        self._banner("Console Demo (type 'quit' to exit)")
        await self.controller.initialize_session()

        while True:
            user_input = (await asyncio.to_thread(input, f"\n{BLUE}[You] {RESET}")).strip()
            if not user_input:
                continue
            if user_input.lower() in ("quit", "exit", "q"):
                break
            await self._turn(user_input)

        await self.controller.close()
        self._summary("Conversation complete.")


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    args = parser.parse_args()

    session = ConsoleSession(fail_payments=args.scenario == "payment_failure")
    if args.scenario:
        asyncio.run(session.run_scenario(args.scenario))
    else:
        asyncio.run(session.run())


if __name__ == "__main__":
    main()
