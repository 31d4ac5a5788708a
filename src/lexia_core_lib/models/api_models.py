"""API Request/Response Models for case conversations.

These models keep the HTTP layer separate from the domain Case model.
User identity comes from gateway headers, never from request bodies.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from lexia_core_lib.models.case import FileRef, Message


# ============================================================
# Requests
# ============================================================

class SendMessageRequest(BaseModel):
    """New user turn for a case conversation."""

    content: str = Field(
        description="Message text",
        max_length=8000
    )

    attachments: List[FileRef] = Field(
        default_factory=list,
        description="Files attached to the message (name and size only)"
    )


class SystemPromptUpdateRequest(BaseModel):
    """Explicit save of a case system prompt."""

    system_prompt: str = Field(
        description="New system prompt (may be empty)"
    )


class ProviderSwitchRequest(BaseModel):
    """Select the provider for subsequent turns."""

    provider: str = Field(
        description="Provider identifier: openai | huggingface",
        min_length=1
    )


class DocumentAnalysisRequest(BaseModel):
    """Uploaded files to summarize."""

    files: List[FileRef] = Field(
        default_factory=list,
        description="Uploaded file handles"
    )


# ============================================================
# Responses
# ============================================================

class AIResponse(BaseModel):
    """Canonical provider result: generated text, or an error message."""

    message: str = ""
    error: Optional[str] = None
    error_kind: Optional[str] = None


class ConversationResponse(BaseModel):
    """Current state of a case conversation."""

    case_id: str
    provider: str
    system_prompt: str
    messages: List[Message]


class TurnResponse(BaseModel):
    """Outcome of one send. ``error`` is set when the provider failed."""

    case_id: str
    user_message: Optional[Message] = None
    assistant_message: Optional[Message] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None
    messages: List[Message] = Field(default_factory=list)


class SystemPromptResponse(BaseModel):
    case_id: str
    system_prompt: str


class ProviderStatusResponse(BaseModel):
    selected: str
    available: List[str]
