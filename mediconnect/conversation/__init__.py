from mediconnect.conversation.state_machine import (
    ConversationState,
    ConversationStateMachine,
    InvalidTransitionError,
    TransitionTrigger,
)
from mediconnect.conversation.action_extractor import ActionKind, ActionResult, extract_action

__all__ = [
    "ConversationStateMachine",
    "ConversationState",
    "TransitionTrigger",
    "InvalidTransitionError",
    "ActionKind",
    "ActionResult",
    "extract_action",
]
