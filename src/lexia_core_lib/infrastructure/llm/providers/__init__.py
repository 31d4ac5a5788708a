"""
LLM Provider Package

This package contains the provider registry and the backend implementations
used by the LexiA orchestration layer.
"""

from .base import (
    TASK_TEMPERATURES,
    AIError,
    AIErrorKind,
    AIMessage,
    AIResult,
    AIRole,
    BaseLLMProvider,
    LLMResponse,
    ProviderConfig,
    ProviderName,
    ProviderSettings,
    TaskKind,
)
from .registry import PROVIDER_SCHEMA, ProviderRegistry, get_valid_provider_names
from .openai_provider import OpenAIProvider
from .huggingface import HuggingFaceProvider

__all__ = [
    "TASK_TEMPERATURES",
    "AIError",
    "AIErrorKind",
    "AIMessage",
    "AIResult",
    "AIRole",
    "BaseLLMProvider",
    "LLMResponse",
    "ProviderConfig",
    "ProviderName",
    "ProviderSettings",
    "TaskKind",
    "PROVIDER_SCHEMA",
    "ProviderRegistry",
    "get_valid_provider_names",
    "OpenAIProvider",
    "HuggingFaceProvider",
]
