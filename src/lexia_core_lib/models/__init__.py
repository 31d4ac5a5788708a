"""
Shared data models for the LexiA orchestration layer.

Pydantic models for cases, messages and the HTTP API.
"""

from lexia_core_lib.models.case import (
    DEFAULT_SYSTEM_PROMPT,
    Case,
    ConversationState,
    FileRef,
    Message,
    Sender,
)

__all__ = [
    "DEFAULT_SYSTEM_PROMPT",
    "Case",
    "ConversationState",
    "FileRef",
    "Message",
    "Sender",
]
