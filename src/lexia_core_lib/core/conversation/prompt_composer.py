"""Prompt composition for case conversations.

Turns a case's message history plus new input into the ordered AIMessage list
the ProviderAdapter expects, and owns the only path by which a case's system
prompt changes.
"""

import logging
from typing import List, Sequence

from lexia_core_lib.infrastructure.llm.providers.base import AIMessage, AIRole
from lexia_core_lib.models.case import DEFAULT_SYSTEM_PROMPT, Case, Message, Sender

logger = logging.getLogger(__name__)


_SENDER_ROLES = {
    Sender.USER: AIRole.USER,
    Sender.ASSISTANT: AIRole.ASSISTANT,
}


class PromptComposer:
    """Builds provider-agnostic requests and saves case system prompts"""

    def __init__(self, default_system_prompt: str = DEFAULT_SYSTEM_PROMPT):
        self.default_system_prompt = default_system_prompt

    def compose(
        self,
        history: Sequence[Message],
        new_input: str,
        system_prompt: str,
    ) -> List[AIMessage]:
        """
        Map history to AI turns and append the new input as a user turn.

        The system prompt is validated here but not included in the list;
        the adapter places it first when it dispatches. History is never
        truncated.

        Args:
            history: Prior case messages, chronological
            new_input: Text of the new user turn
            system_prompt: Case system prompt (may be empty, not None)

        Returns:
            List of len(history) + 1 AIMessages ending with the new input
        """
        if not isinstance(system_prompt, str):
            raise TypeError("system_prompt must be a string")

        turns = [
            AIMessage(role=_SENDER_ROLES[Sender(m.sender)], content=m.content)
            for m in history
        ]
        turns.append(AIMessage(role=AIRole.USER, content=new_input))
        return turns

    def save_system_prompt(self, case: Case, value: str) -> str:
        """Explicit save action for a case system prompt"""
        if not isinstance(value, str):
            raise TypeError("system_prompt must be a string")
        if value == case.system_prompt:
            return case.system_prompt
        case.system_prompt = value
        logger.info(f"System prompt saved for case {case.case_id} ({len(value)} chars)")
        return case.system_prompt

    def reset_system_prompt(self, case: Case) -> str:
        """Restore the global default system prompt for a case"""
        return self.save_system_prompt(case, self.default_system_prompt)
