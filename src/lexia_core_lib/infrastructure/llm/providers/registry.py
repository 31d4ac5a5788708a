"""
Provider Registry for LLM backends.

Maps provider identifiers to provider variants. The schema below is the single
source of truth for which backends exist, which environment variables configure
them, and their defaults. Supporting another backend means adding a
BaseLLMProvider subclass and registering it; call sites stay unchanged.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .base import BaseLLMProvider, ProviderName, ProviderSettings
from .huggingface import HuggingFaceProvider
from .openai_provider import OpenAIProvider

if TYPE_CHECKING:
    from lexia_core_lib.config.settings import Settings


# Data-driven provider schema - single source of truth
PROVIDER_SCHEMA: Dict[str, Dict[str, Any]] = {
    "openai": {
        "api_key_var": "OPENAI_API_KEY",
        "model_var": "OPENAI_MODEL",
        "base_url_var": "OPENAI_API_BASE",
        "default_base_url": "https://api.openai.com/v1",
        "default_model": "gpt-4-turbo-preview",
        "provider_class": OpenAIProvider,
        "display_name": "OpenAI (Premium)",
    },
    "huggingface": {
        "api_key_var": "HUGGINGFACE_API_KEY",
        "model_var": "HUGGINGFACE_MODEL",
        "base_url_var": "HUGGINGFACE_API_URL",
        "default_base_url": "https://api-inference.huggingface.co/models",
        "default_model": "mistralai/Mistral-7B-Instruct-v0.1",
        "provider_class": HuggingFaceProvider,
        "display_name": "HuggingFace (Free)",
    },
}


class ProviderRegistry:
    """Registry of provider variants, keyed by provider name"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._providers: Dict[str, BaseLLMProvider] = {}

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ProviderRegistry":
        """Create every schema provider, applying settings overrides"""
        registry = cls()
        for name, schema in PROVIDER_SCHEMA.items():
            overrides = settings.provider(name)
            provider_settings = ProviderSettings(
                name=name,
                base_url=overrides.base_url or schema["default_base_url"],
                models=[overrides.model or schema["default_model"]],
                timeout=settings.request_timeout,
                max_tokens=settings.max_tokens,
            )
            registry.register(name, schema["provider_class"](provider_settings))
        return registry

    def register(self, name: str, provider: BaseLLMProvider) -> None:
        """Register (or replace) a provider variant"""
        if not provider.is_available():
            self.logger.warning(f"Provider '{name}' not available (missing endpoint or model)")
            return
        self._providers[name] = provider
        self.logger.info(
            f"Provider '{name}' registered: {provider.__class__.__name__} "
            f"({provider.get_effective_model()})"
        )

    def get_provider(self, name: str) -> Optional[BaseLLMProvider]:
        """Get a specific provider by name"""
        key = name.value if isinstance(name, ProviderName) else str(name)
        return self._providers.get(key)

    def get_available_providers(self) -> List[str]:
        """Get list of registered provider names"""
        return list(self._providers.keys())

    def get_provider_status(self) -> Dict[str, Dict[str, Any]]:
        """Get status information for all registered providers"""
        status = {}
        for name, provider in self._providers.items():
            status[name] = {
                "available": provider.is_available(),
                "models": provider.get_supported_models(),
                "display_name": PROVIDER_SCHEMA.get(name, {}).get("display_name", name),
            }
        return status


def get_valid_provider_names() -> List[str]:
    """Get list of valid provider names for AI_PROVIDER"""
    return list(PROVIDER_SCHEMA.keys())
