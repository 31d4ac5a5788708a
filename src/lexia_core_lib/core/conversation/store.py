"""Per-case conversation store.

The store is the single owner of one case's message log and the unit of
concurrency control. All mutations happen between awaits, so on an asyncio
loop they never interleave for the same case.

State machine:
  IDLE --send--> AWAITING_RESPONSE --reply or error--> IDLE
  IDLE --clear--> IDLE
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from lexia_core_lib.auth.session import SessionContext
from lexia_core_lib.core.conversation.prompt_composer import PromptComposer
from lexia_core_lib.exceptions import ConversationBusyError
from lexia_core_lib.infrastructure.llm.adapter import ProviderAdapter
from lexia_core_lib.infrastructure.llm.providers.base import (
    AIError,
    ProviderConfig,
    ProviderName,
    TaskKind,
)
from lexia_core_lib.models.case import Case, ConversationState, FileRef, Message, Sender

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TurnResult:
    """Outcome of one send: the echoed user message and the reply or error"""

    user_message: Message
    assistant_message: Optional[Message] = None
    error: Optional[AIError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ConversationStore:
    """Ordered, append-only message log for one case"""

    def __init__(
        self,
        case: Case,
        adapter: ProviderAdapter,
        session: SessionContext,
        composer: Optional[PromptComposer] = None,
        max_history_messages: Optional[int] = None,
    ):
        """
        Args:
            case: Case whose conversation this store owns
            adapter: Provider adapter used for every turn
            session: Caller-owned session (provider toggle and keys)
            composer: Prompt composer (default one if omitted)
            max_history_messages: Send at most this many prior messages;
                None sends the whole history
        """
        if max_history_messages is not None and max_history_messages < 0:
            raise ValueError("max_history_messages must be >= 0")
        self.case = case
        self.adapter = adapter
        self.session = session
        self.composer = composer or PromptComposer()
        self.max_history_messages = max_history_messages
        self._state = ConversationState.IDLE

    @property
    def case_id(self) -> str:
        return self.case.case_id

    @property
    def state(self) -> ConversationState:
        return self._state

    @property
    def messages(self) -> Tuple[Message, ...]:
        """Snapshot of the log in insertion order"""
        return tuple(self.case.messages)

    @property
    def system_prompt(self) -> str:
        return self.case.system_prompt

    async def send(
        self,
        text: str,
        attachments: Optional[Sequence[FileRef]] = None,
        correlation_id: Optional[str] = None,
    ) -> Optional[TurnResult]:
        """
        Append a user message, ask the selected provider, append the reply.

        Blank input is ignored and returns None. A provider error leaves the
        user message in place, appends nothing else, and is returned in the
        TurnResult.

        Raises:
            ConversationBusyError: A previous send is still awaiting its reply
        """
        if not text or not text.strip():
            return None
        self._ensure_idle("send")

        history = self._history_window()
        user_message = self._append(text, Sender.USER, attachments)
        self._state = ConversationState.AWAITING_RESPONSE
        config = self.session.provider_config()

        try:
            request = self.composer.compose(history, text, self.case.system_prompt)
            result = await self.adapter.send(
                request,
                self.case.system_prompt,
                config,
                task=TaskKind.CONVERSATION,
                correlation_id=correlation_id,
            )
        finally:
            self._state = ConversationState.IDLE

        if not result.ok:
            logger.warning(
                f"Case {self.case_id}: turn failed ({result.error.kind.value}); "
                f"user message {user_message.id} retained"
            )
            return TurnResult(user_message=user_message, error=result.error)

        assistant_message = self._append(result.text, Sender.ASSISTANT)
        return TurnResult(user_message=user_message, assistant_message=assistant_message)

    def clear(self) -> None:
        """Remove every message from the case"""
        self._ensure_idle("clear")
        removed = len(self.case.messages)
        self.case.messages = []
        logger.info(f"Case {self.case_id}: conversation cleared ({removed} messages)")

    def switch_provider(self, provider: Union[str, ProviderName, ProviderConfig]) -> None:
        """Select the provider for subsequent sends. Nothing is resent."""
        if isinstance(provider, ProviderConfig):
            if provider.api_key:
                self.session.set_api_key(provider.provider, provider.api_key)
            provider = provider.provider
        self.session.select_provider(provider)

    def save_system_prompt(self, value: str) -> str:
        return self.composer.save_system_prompt(self.case, value)

    def reset_system_prompt(self) -> str:
        return self.composer.reset_system_prompt(self.case)

    def _ensure_idle(self, operation: str) -> None:
        if self._state != ConversationState.IDLE:
            logger.warning(f"Case {self.case_id}: {operation} rejected while awaiting response")
            raise ConversationBusyError(
                f"Case {self.case_id} is awaiting a response",
                error_code="CONVERSATION_BUSY",
                context={"case_id": self.case_id, "operation": operation},
            )

    def _history_window(self) -> List[Message]:
        history = list(self.case.messages)
        if self.max_history_messages is None or len(history) <= self.max_history_messages:
            return history
        dropped = len(history) - self.max_history_messages
        logger.info(f"Case {self.case_id}: sending last {self.max_history_messages} messages ({dropped} omitted)")
        return history[dropped:]

    def _append(
        self,
        content: str,
        sender: Sender,
        attachments: Optional[Sequence[FileRef]] = None,
    ) -> Message:
        message = Message(
            content=content,
            sender=sender,
            case_id=self.case_id,
            attachments=tuple(attachments or ()),
        )
        self.case.messages.append(message)
        return message
