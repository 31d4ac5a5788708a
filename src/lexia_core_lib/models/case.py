"""Case conversation models.

Key Models:
- Case: Root case entity owning its system prompt and message log
- Message: One immutable conversation turn (user input or assistant reply)
- FileRef: Name and size of an uploaded file, the only file data the core uses
- ConversationState: Per-case send lifecycle (IDLE ↔ AWAITING_RESPONSE)

Messages are never edited. Corrections are modeled as new messages.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator


DEFAULT_SYSTEM_PROMPT = """You are a legal assistant AI, trained to help with legal matters. Your role is to:
1. Provide clear, accurate legal information
2. Help understand legal documents and terminology
3. Assist in case analysis and strategy
4. Maintain strict confidentiality
5. Always clarify that you provide information, not legal advice
6. Recommend consulting with a qualified lawyer for specific legal advice

Please analyze the provided information and respond accordingly.

Note: Focus on Belgian law and legal system when providing advice or information."""


class Sender(str, Enum):
    """Author of a message"""

    USER = "user"
    ASSISTANT = "assistant"


class ConversationState(str, Enum):
    """
    Send lifecycle of a case conversation.

    Flow:
      IDLE → AWAITING_RESPONSE → IDLE
      IDLE → IDLE (clear)
    """

    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"


class FileRef(BaseModel):
    """Reference to an uploaded file. Content extraction happens elsewhere."""

    name: str = Field(
        description="Original filename",
        min_length=1,
        max_length=255
    )

    size_bytes: int = Field(
        default=0,
        ge=0,
        description="File size in bytes"
    )

    class Config:
        frozen = True


class Message(BaseModel):
    """
    One conversation turn.
    Immutable once created; ordering is insertion order in the owning Case.
    """

    id: str = Field(
        default_factory=lambda: uuid4().hex,
        description="Unique message identifier"
    )

    content: str = Field(
        description="Message text"
    )

    sender: Sender = Field(
        description="user | assistant"
    )

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the message was created"
    )

    case_id: str = Field(
        description="Case this message belongs to",
        min_length=1
    )

    attachments: Tuple[FileRef, ...] = Field(
        default=(),
        description="Files attached to this message"
    )

    class Config:
        frozen = True  # Immutable once created


class Case(BaseModel):
    """
    Root case entity.
    Owns a system prompt and an ordered, append-only message log.
    """

    case_id: str = Field(
        default_factory=lambda: f"case_{uuid4().hex[:12]}",
        description="Unique case identifier",
        min_length=1,
        max_length=255
    )

    title: str = Field(
        default="",
        description="Short case title for list views",
        max_length=200
    )

    system_prompt: str = Field(
        default=DEFAULT_SYSTEM_PROMPT,
        description="Per-case override of the global default system prompt. Changed only by an explicit save."
    )

    messages: List[Message] = Field(
        default_factory=list,
        description="Conversation history in insertion order"
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Case creation timestamp"
    )

    @field_validator('messages')
    @classmethod
    def validate_unique_ids(cls, v: List[Message]) -> List[Message]:
        """Message ids must be unique within a case"""
        ids = [m.id for m in v]
        if len(ids) != len(set(ids)):
            raise ValueError("Duplicate message id in case history")
        return v

    @property
    def message_count(self) -> int:
        return len(self.messages)

    def last_message(self) -> Optional[Message]:
        """Most recent message, if any"""
        return self.messages[-1] if self.messages else None
