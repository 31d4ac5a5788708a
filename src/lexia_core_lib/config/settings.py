"""Settings for the LexiA orchestration layer.

Values come from the process environment, optionally seeded from a ``.env``
file. API keys are held as ``SecretStr`` and are never logged.

Environment Variables:
    AI_PROVIDER: "openai" (default) or "huggingface"
    OPENAI_API_KEY / HUGGINGFACE_API_KEY: Backend credentials
    OPENAI_MODEL / HUGGINGFACE_MODEL: Model overrides
    OPENAI_API_BASE / HUGGINGFACE_API_URL: Endpoint overrides
    LLM_REQUEST_TIMEOUT: Per-request timeout in seconds (default: 30)
    LLM_MAX_TOKENS: Generation limit (default: 2000)
    LEXIA_DEFAULT_SYSTEM_PROMPT: Global default system prompt override
"""

import logging
import os
from typing import Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr

from lexia_core_lib.infrastructure.llm.providers.base import ProviderName
from lexia_core_lib.infrastructure.llm.providers.registry import PROVIDER_SCHEMA, get_valid_provider_names
from lexia_core_lib.models.case import DEFAULT_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class ProviderEnvSettings(BaseModel):
    """Environment-derived configuration for one backend"""

    api_key: Optional[SecretStr] = Field(None, description="Bearer credential")
    model: Optional[str] = Field(None, description="Model override")
    base_url: Optional[str] = Field(None, description="Endpoint override")


class Settings(BaseModel):
    """Top-level settings for the orchestration layer"""

    default_provider: ProviderName = Field(
        default=ProviderName.OPENAI,
        description="Provider selected for new sessions"
    )
    providers: Dict[str, ProviderEnvSettings] = Field(
        default_factory=dict,
        description="Per-provider credentials and overrides"
    )
    request_timeout: int = Field(
        default=30,
        gt=0,
        description="HTTP request timeout in seconds"
    )
    max_tokens: int = Field(
        default=2000,
        gt=0,
        description="Default generation limit"
    )
    default_system_prompt: str = Field(
        default=DEFAULT_SYSTEM_PROMPT,
        description="Global default system prompt for new cases"
    )

    def provider(self, name: str) -> ProviderEnvSettings:
        key = name.value if isinstance(name, ProviderName) else str(name).lower()
        return self.providers.get(key, ProviderEnvSettings())

    def api_key_for(self, name: str) -> Optional[str]:
        """Plain-text key for a provider, or None when unset"""
        secret = self.provider(name).api_key
        return secret.get_secret_value() if secret else None

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        """Build settings from the environment (and a .env file if present)"""
        env_file = env_file or os.path.join(os.getcwd(), ".env")
        if os.path.exists(env_file):
            logger.info(f"Loading .env file from: {env_file}")
            load_dotenv(env_file, override=True)

        providers: Dict[str, ProviderEnvSettings] = {}
        for name, schema in PROVIDER_SCHEMA.items():
            api_key = os.getenv(schema["api_key_var"]) or None
            providers[name] = ProviderEnvSettings(
                api_key=SecretStr(api_key) if api_key else None,
                model=os.getenv(schema["model_var"]) or None,
                base_url=os.getenv(schema["base_url_var"]) or None,
            )
            logger.info(f"Provider '{name}' API key: {'SET' if api_key else 'NOT_SET'}")

        provider_str = os.getenv("AI_PROVIDER", ProviderName.OPENAI.value).lower()
        try:
            default_provider = ProviderName(provider_str)
        except ValueError:
            logger.warning(
                f"Invalid AI_PROVIDER '{provider_str}'. "
                f"Valid options: {get_valid_provider_names()}. Defaulting to 'openai'"
            )
            default_provider = ProviderName.OPENAI

        return cls(
            default_provider=default_provider,
            providers=providers,
            request_timeout=int(os.getenv("LLM_REQUEST_TIMEOUT", "30")),
            max_tokens=int(os.getenv("LLM_MAX_TOKENS", "2000")),
            default_system_prompt=os.getenv("LEXIA_DEFAULT_SYSTEM_PROMPT") or DEFAULT_SYSTEM_PROMPT,
        )
