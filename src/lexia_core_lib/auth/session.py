"""Session context threaded into the orchestration layer.

A SessionContext is created by the composing application (one per user
session) and passed explicitly to the ConversationStore and ProviderAdapter
constructors. It carries the caller-owned provider toggle and the API keys;
nothing in the core keeps it in module-level state.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Optional

from pydantic import SecretStr

from lexia_core_lib.infrastructure.llm.providers.base import ProviderConfig, ProviderName

if TYPE_CHECKING:
    from lexia_core_lib.api.dependencies import RequestContext
    from lexia_core_lib.config.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class SessionContext:
    """Per-session identity, provider selection and credentials.

    Attributes:
        user_id: User owning the session
        provider: Currently selected provider name (mutable toggle)
        api_keys: Provider name to credential; never logged

    Request-scoped values such as the correlation id are passed per call,
    since one session serves concurrent requests.
    """

    user_id: str
    provider: str = ProviderName.OPENAI.value
    api_keys: Dict[str, SecretStr] = field(default_factory=dict)

    def __post_init__(self):
        self.provider = _normalize(self.provider)

    @classmethod
    def from_settings(
        cls,
        settings: "Settings",
        user_id: str,
    ) -> "SessionContext":
        """Seed a session with the configured default provider and keys"""
        api_keys = {
            name: env.api_key
            for name, env in settings.providers.items()
            if env.api_key is not None
        }
        return cls(
            user_id=user_id,
            provider=settings.default_provider.value,
            api_keys=api_keys,
        )

    @classmethod
    def from_request(cls, settings: "Settings", request_context: "RequestContext") -> "SessionContext":
        return cls.from_settings(settings, user_id=request_context.user_id)

    def select_provider(self, provider: str) -> None:
        """Flip the provider toggle. Affects only subsequent requests."""
        previous = self.provider
        self.provider = _normalize(provider)
        logger.info(f"[{self.user_id}] Provider switched: {previous} -> {self.provider}")

    def set_api_key(self, provider: str, api_key: Optional[str]) -> None:
        name = _normalize(provider)
        if api_key:
            self.api_keys[name] = SecretStr(api_key)
        else:
            self.api_keys.pop(name, None)

    def provider_config(self, provider: Optional[str] = None) -> ProviderConfig:
        """Build the per-request config for the selected (or given) provider"""
        name = _normalize(provider) if provider else self.provider
        secret = self.api_keys.get(name)
        return ProviderConfig(
            provider=name,
            api_key=secret.get_secret_value() if secret else None,
        )


def _normalize(provider) -> str:
    if isinstance(provider, ProviderName):
        return provider.value
    return str(provider).lower()
