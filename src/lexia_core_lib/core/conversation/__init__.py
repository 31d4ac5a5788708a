"""Case conversations"""

from lexia_core_lib.core.conversation.prompt_composer import PromptComposer
from lexia_core_lib.core.conversation.store import ConversationStore, TurnResult

__all__ = [
    "PromptComposer",
    "ConversationStore",
    "TurnResult",
]
