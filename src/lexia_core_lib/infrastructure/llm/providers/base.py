"""
Base provider interface for LLM providers.

This module defines the wire-neutral request/response types and the abstract
base class that every backend variant implements. A variant turns an ordered
list of AIMessage turns plus a system prompt into one HTTP call and returns
the generated text.
"""

import asyncio
import json
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import aiohttp

from lexia_core_lib.exceptions import MalformedResponseError, ProviderTransportError


class ProviderName(str, Enum):
    """Identifiers of the supported AI backends"""

    OPENAI = "openai"
    HUGGINGFACE = "huggingface"


class AIRole(str, Enum):
    """Role of one entry in an AI request"""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class TaskKind(str, Enum):
    """What a request is for; selects the sampling temperature"""

    CONVERSATION = "conversation"  # creative dialogue
    DOCUMENT_ANALYSIS = "document_analysis"  # extractive summarization


TASK_TEMPERATURES: Dict[TaskKind, float] = {
    TaskKind.CONVERSATION: 0.7,
    TaskKind.DOCUMENT_ANALYSIS: 0.3,
}


@dataclass(frozen=True)
class AIMessage:
    """One role-tagged turn of an AI request"""

    role: AIRole
    content: str

    def to_dict(self) -> Dict[str, str]:
        role = self.role.value if isinstance(self.role, AIRole) else str(self.role)
        return {"role": role, "content": self.content}


class AIErrorKind(str, Enum):
    """Tagged failure categories returned by the ProviderAdapter"""

    NOT_CONFIGURED = "not_configured"
    TRANSPORT_FAILURE = "transport_failure"
    MALFORMED_RESPONSE = "malformed_response"
    INVALID_REQUEST = "invalid_request"


@dataclass(frozen=True)
class AIError:
    """Failure value with a user-facing message. Never carries backend bodies."""

    kind: AIErrorKind
    message: str


@dataclass(frozen=True)
class AIResult:
    """Result of one provider call: generated text or a tagged error"""

    text: str = ""
    error: Optional[AIError] = None
    provider: Optional[str] = None
    model: Optional[str] = None
    response_time_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, response: "LLMResponse") -> "AIResult":
        return cls(
            text=response.content,
            provider=response.provider,
            model=response.model,
            response_time_ms=response.response_time_ms,
        )

    @classmethod
    def failure(cls, kind: AIErrorKind, message: str, provider: Optional[str] = None) -> "AIResult":
        return cls(error=AIError(kind=kind, message=message), provider=provider)

    def to_response(self) -> Dict[str, Any]:
        """Canonical AIResponse shape: {message, error?}"""
        data: Dict[str, Any] = {"message": self.text}
        if self.error is not None:
            data["error"] = self.error.message
        return data


@dataclass
class ProviderConfig:
    """Per-request provider selection. Not stored on messages or cases."""

    provider: str
    api_key: Optional[str] = None

    def __post_init__(self):
        # Registry keys are plain strings; unknown names are rejected at dispatch
        if isinstance(self.provider, ProviderName):
            self.provider = self.provider.value
        self.provider = str(self.provider).lower()

    def __repr__(self) -> str:
        key_state = "SET" if self.api_key else "NOT_SET"
        return f"ProviderConfig(provider={self.provider!r}, api_key={key_state})"


@dataclass
class ProviderSettings:
    """Static configuration for one backend (endpoint, model, limits)"""

    name: str
    base_url: str
    models: List[str] = field(default_factory=list)
    default_model: Optional[str] = None
    timeout: int = 30
    max_tokens: int = 2000

    def __post_init__(self):
        if self.default_model is None and self.models:
            self.default_model = self.models[0]


@dataclass
class LLMResponse:
    """Raw response from an LLM provider"""

    content: str
    provider: str
    model: str
    tokens_used: int
    response_time_ms: int


class BaseLLMProvider(ABC):
    """Abstract base class for all LLM providers"""

    def __init__(self, settings: ProviderSettings):
        self.settings = settings
        self.start_time = None
        self.logger = logging.getLogger(__name__)

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the unique name of this provider"""
        pass

    @abstractmethod
    async def generate(
        self,
        messages: List[AIMessage],
        system_prompt: str,
        api_key: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """
        Generate a reply to a conversation

        Args:
            messages: Prior turns plus the new user turn, chronological
            system_prompt: Instructions placed before every turn
            api_key: Bearer credential for the backend
            temperature: Sampling temperature
            max_tokens: Generation limit (defaults to settings.max_tokens)

        Returns:
            LLMResponse with generated content

        Raises:
            ProviderTransportError: Backend unreachable or non-2xx
            MalformedResponseError: Unexpected payload shape
        """
        pass

    def is_available(self) -> bool:
        """Check if the provider has an endpoint and a model"""
        return bool(self.settings.base_url and self.get_effective_model())

    def get_supported_models(self) -> List[str]:
        """Get list of models supported by this provider"""
        return list(self.settings.models)

    def get_effective_model(self, requested_model: Optional[str] = None) -> Optional[str]:
        """Get the model to use, with fallback logic"""
        if requested_model and requested_model in self.settings.models:
            return requested_model
        if self.settings.default_model:
            return self.settings.default_model
        if self.settings.models:
            return self.settings.models[0]
        return None

    def _start_timing(self):
        """Start timing for response measurement"""
        self.start_time = time.time()

    def _get_response_time_ms(self) -> int:
        """Get response time in milliseconds"""
        if self.start_time is None:
            return 0
        return int((time.time() - self.start_time) * 1000)

    def _validate_response_content(self, content: Any) -> str:
        """Validate and clean response content"""
        if not isinstance(content, str):
            raise MalformedResponseError(
                f"{self.provider_name} returned non-text content",
                context={"content_type": type(content).__name__},
            )
        return content.strip()

    @staticmethod
    def _auth_headers(api_key: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    async def _post_json(self, url: str, headers: Dict[str, str], payload: Dict[str, Any]) -> Any:
        """POST a JSON payload and return the decoded JSON body.

        Non-2xx bodies are logged here and never propagated upward.
        """
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    url,
                    headers=headers,
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=self.settings.timeout),
                ) as response:
                    if response.status < 200 or response.status >= 300:
                        error_text = await response.text(errors="replace")
                        self.logger.warning(
                            f"{self.provider_name} API error {response.status}: {error_text[:500]}"
                        )
                        raise ProviderTransportError(
                            f"{self.provider_name} API request failed with status {response.status}",
                            status=response.status,
                        )
                    try:
                        raw = await response.text()
                    except UnicodeDecodeError as e:
                        raise MalformedResponseError(
                            f"{self.provider_name} returned an undecodable body",
                            context={"status": response.status},
                        ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ProviderTransportError(
                f"{self.provider_name} API request failed: {type(e).__name__}",
                original_error=e,
            ) from e

        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedResponseError(
                f"{self.provider_name} returned a non-JSON body",
                context={"body_preview": raw[:200]},
            ) from e
