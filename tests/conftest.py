from typing import List, Optional

import aiohttp
import pytest
from pydantic import SecretStr

from lexia_core_lib.auth.session import SessionContext
from lexia_core_lib.config.settings import ProviderEnvSettings, Settings
from lexia_core_lib.infrastructure.llm.adapter import ProviderAdapter
from lexia_core_lib.infrastructure.llm.providers.base import (
    AIMessage,
    BaseLLMProvider,
    LLMResponse,
    ProviderSettings,
)
from lexia_core_lib.infrastructure.llm.providers.registry import ProviderRegistry


class RecordingProvider(BaseLLMProvider):
    """In-memory provider that records every call instead of hitting the network."""

    def __init__(self, name: str, reply: str = "ok", error: Optional[Exception] = None):
        super().__init__(
            ProviderSettings(name=name, base_url="http://backend.test", models=["test-model"])
        )
        self._name = name
        self.reply = reply
        self.error = error
        self.calls: List[dict] = []

    @property
    def provider_name(self) -> str:
        return self._name

    async def generate(
        self,
        messages: List[AIMessage],
        system_prompt: str,
        api_key: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        self.calls.append(
            {
                "messages": list(messages),
                "system_prompt": system_prompt,
                "api_key": api_key,
                "temperature": temperature,
            }
        )
        if self.error is not None:
            raise self.error
        return LLMResponse(
            content=self.reply,
            provider=self._name,
            model="test-model",
            tokens_used=1,
            response_time_ms=0,
        )


class FakeResponse:
    """Stand-in for an aiohttp response; bytes bodies are decoded as UTF-8 like ``text()``."""

    def __init__(self, status, body):
        self.status = status
        self._body = body

    async def text(self, errors="strict"):
        if isinstance(self._body, bytes):
            return self._body.decode("utf-8", errors)
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.posts = []

    def post(self, url, **kwargs):
        self.posts.append((url, kwargs))
        if self.error:
            raise self.error
        return self.response

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


@pytest.fixture
def fake_http(monkeypatch):
    """Replace aiohttp.ClientSession with a canned response or error."""

    def _install(status=200, body="{}", error=None):
        session = FakeSession(FakeResponse(status, body), error=error)
        monkeypatch.setattr(aiohttp, "ClientSession", lambda: session)
        return session

    return _install


@pytest.fixture
def settings():
    return Settings(
        providers={
            "openai": ProviderEnvSettings(api_key=SecretStr("sk-test")),
            "huggingface": ProviderEnvSettings(api_key=SecretStr("hf-test")),
        }
    )


@pytest.fixture
def openai_provider():
    return RecordingProvider("openai", reply="Art. 1382 establishes fault-based liability.")


@pytest.fixture
def huggingface_provider():
    return RecordingProvider("huggingface", reply="Summary from the free tier.")


@pytest.fixture
def registry(openai_provider, huggingface_provider):
    registry = ProviderRegistry()
    registry.register("openai", openai_provider)
    registry.register("huggingface", huggingface_provider)
    return registry


@pytest.fixture
def session(settings):
    return SessionContext.from_settings(settings, user_id="dev_user_123")


@pytest.fixture
def adapter(registry, session):
    return ProviderAdapter(registry, session=session)
