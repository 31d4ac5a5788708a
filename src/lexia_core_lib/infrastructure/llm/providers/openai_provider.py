"""
OpenAI provider implementation.

This module implements the OpenAI chat-completions provider. The system prompt
is sent as the first structured turn, followed by the conversation turns.
"""

from typing import List, Optional

from lexia_core_lib.exceptions import MalformedResponseError

from .base import AIMessage, AIRole, BaseLLMProvider, LLMResponse


class OpenAIProvider(BaseLLMProvider):
    """OpenAI LLM provider implementation"""

    @property
    def provider_name(self) -> str:
        return "openai"

    def build_payload(
        self,
        messages: List[AIMessage],
        system_prompt: str,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> dict:
        """Build the chat-completions request body"""
        turns = [AIMessage(role=AIRole.SYSTEM, content=system_prompt).to_dict()]
        turns.extend(m.to_dict() for m in messages)
        return {
            "model": model,
            "messages": turns,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

    async def generate(
        self,
        messages: List[AIMessage],
        system_prompt: str,
        api_key: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Generate response using OpenAI API"""

        self._start_timing()

        effective_model = self.get_effective_model()
        payload = self.build_payload(
            messages,
            system_prompt,
            model=effective_model,
            temperature=temperature,
            max_tokens=max_tokens or self.settings.max_tokens,
        )

        data = await self._post_json(
            f"{self.settings.base_url.rstrip('/')}/chat/completions",
            headers=self._auth_headers(api_key),
            payload=payload,
        )

        # Extract response content
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedResponseError(
                "OpenAI API returned no choices",
                context={"keys": sorted(data.keys()) if isinstance(data, dict) else None},
            ) from e

        content = self._validate_response_content(content)

        usage = data.get("usage") or {}
        tokens_used = usage.get("total_tokens", 0)

        return LLMResponse(
            content=content,
            provider=self.provider_name,
            model=effective_model,
            tokens_used=tokens_used,
            response_time_ms=self._get_response_time_ms(),
        )
