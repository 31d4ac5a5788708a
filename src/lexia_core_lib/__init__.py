"""LexiA Core Library

Conversational AI orchestration for the LexiA legal-case dashboard: per-case
message history, provider routing, system prompts and document analysis.
"""

__version__ = "0.1.0"

# Export shared models first (no dependencies)
from lexia_core_lib.models import (
    Case, ConversationState, FileRef, Message, Sender, DEFAULT_SYSTEM_PROMPT
)

from lexia_core_lib.exceptions import (
    LexiaError,
    ConversationBusyError,
    EmptyDocumentListError,
)
from lexia_core_lib.infrastructure.llm import ProviderAdapter, ProviderRegistry
from lexia_core_lib.infrastructure.llm.providers import (
    AIError, AIErrorKind, AIMessage, AIResult, AIRole, ProviderConfig, ProviderName, TaskKind
)
from lexia_core_lib.config import Settings
from lexia_core_lib.auth import SessionContext
from lexia_core_lib.core.conversation import ConversationStore, PromptComposer, TurnResult
from lexia_core_lib.core.documents import DocumentAnalysisBridge
from lexia_core_lib.core.workspace import CaseWorkspace


# Lazy import for the API so the core does not require FastAPI at import time
def __getattr__(name):
    """Lazy import for create_app."""
    if name == "create_app":
        from lexia_core_lib.api import create_app
        return create_app
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    # Models
    "Case", "ConversationState", "FileRef", "Message", "Sender", "DEFAULT_SYSTEM_PROMPT",
    # Errors
    "LexiaError", "ConversationBusyError", "EmptyDocumentListError",
    # Providers
    "ProviderAdapter", "ProviderRegistry", "ProviderConfig", "ProviderName",
    "AIError", "AIErrorKind", "AIMessage", "AIResult", "AIRole", "TaskKind",
    # Orchestration
    "Settings", "SessionContext", "ConversationStore", "PromptComposer", "TurnResult",
    "DocumentAnalysisBridge", "CaseWorkspace",
    # API (lazy loaded)
    "create_app",
]
