"""Exception hierarchy for the LexiA core library.

Caller-contract violations (busy conversation, empty document list) are raised
to the caller. Provider failures are raised inside provider implementations
only; the ProviderAdapter converts them to tagged AIResult values.
"""

from typing import Any, Dict, Optional


class LexiaError(Exception):
    """Base exception for all LexiA core errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}


class ConversationBusyError(LexiaError):
    """Raised when a case conversation is already awaiting a response."""


class EmptyDocumentListError(LexiaError, ValueError):
    """Raised when document analysis is requested for zero documents."""


class LLMProviderError(LexiaError):
    """Base exception for errors raised inside an LLM provider."""


class ProviderNotConfiguredError(LLMProviderError):
    """Selected provider has no API key or is not registered."""


class ProviderTransportError(LLMProviderError):
    """Backend returned a non-success status or could not be reached."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        original_error: Optional[Exception] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.status = status
        self.original_error = original_error


class MalformedResponseError(LLMProviderError):
    """Backend answered with a payload of unexpected shape."""
