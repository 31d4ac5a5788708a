"""Case workspace: application-owned map of case id to ConversationStore.

One workspace per user session. Each case gets exactly one store, so there is
no shared mutable state between cases.
"""

import logging
from typing import Dict, List, Optional

from lexia_core_lib.auth.session import SessionContext
from lexia_core_lib.config.settings import Settings
from lexia_core_lib.core.conversation.prompt_composer import PromptComposer
from lexia_core_lib.core.conversation.store import ConversationStore
from lexia_core_lib.core.documents.analysis import DocumentAnalysisBridge
from lexia_core_lib.infrastructure.llm.adapter import ProviderAdapter
from lexia_core_lib.infrastructure.llm.providers.registry import ProviderRegistry
from lexia_core_lib.models.case import Case

logger = logging.getLogger(__name__)


class CaseWorkspace:
    """Holds the conversation stores of one session"""

    def __init__(
        self,
        session: SessionContext,
        registry: ProviderRegistry,
        settings: Optional[Settings] = None,
        max_history_messages: Optional[int] = None,
    ):
        self.settings = settings or Settings()
        self.session = session
        self.adapter = ProviderAdapter(registry, session=session)
        self.composer = PromptComposer(self.settings.default_system_prompt)
        self.documents = DocumentAnalysisBridge(self.adapter)
        self.max_history_messages = max_history_messages
        self._stores: Dict[str, ConversationStore] = {}

    def open_case(self, case_id: str, title: str = "") -> ConversationStore:
        """Return the store for a case, creating the case on first use"""
        store = self._stores.get(case_id)
        if store is None:
            case = Case(
                case_id=case_id,
                title=title,
                system_prompt=self.settings.default_system_prompt,
            )
            store = self.attach(case)
        return store

    def attach(self, case: Case) -> ConversationStore:
        """Register an existing case loaded by the caller"""
        if case.case_id in self._stores:
            raise ValueError(f"Case {case.case_id} already has a conversation store")
        store = ConversationStore(
            case,
            self.adapter,
            self.session,
            composer=self.composer,
            max_history_messages=self.max_history_messages,
        )
        self._stores[case.case_id] = store
        logger.info(f"[{self.session.user_id}] Opened case {case.case_id}")
        return store

    def get(self, case_id: str) -> Optional[ConversationStore]:
        return self._stores.get(case_id)

    def close_case(self, case_id: str) -> None:
        self._stores.pop(case_id, None)

    def case_ids(self) -> List[str]:
        return list(self._stores.keys())
