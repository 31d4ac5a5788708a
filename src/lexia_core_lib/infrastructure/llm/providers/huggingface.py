"""
Hugging Face provider implementation.

This module implements the Hugging Face Inference API provider. The backend
takes a single text input, so the system prompt and every turn are flattened
into one blob of role-tagged lines, preserving turn order.
"""

from typing import List, Optional

from lexia_core_lib.exceptions import MalformedResponseError

from .base import AIMessage, AIRole, BaseLLMProvider, LLMResponse


def flatten_conversation(messages: List[AIMessage], system_prompt: str) -> str:
    """
    Flatten a system prompt and turns into one role-tagged string

    Example:
        <system>You are a legal assistant.</system>
        <user>What does Art. 1382 cover?</user>
    """
    lines = [f"<{AIRole.SYSTEM.value}>{system_prompt}</{AIRole.SYSTEM.value}>"]
    for m in messages:
        role = m.role.value if isinstance(m.role, AIRole) else str(m.role)
        lines.append(f"<{role}>{m.content}</{role}>")
    return "\n".join(lines)


class HuggingFaceProvider(BaseLLMProvider):
    """Hugging Face Inference API provider implementation"""

    @property
    def provider_name(self) -> str:
        return "huggingface"

    def build_payload(
        self,
        messages: List[AIMessage],
        system_prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> dict:
        """Build the text-generation request body"""
        return {
            "inputs": flatten_conversation(messages, system_prompt),
            "parameters": {
                "max_new_tokens": max_tokens,
                "temperature": temperature,
                "return_full_text": False,
            },
            # Block on cold models instead of answering 503
            "options": {"wait_for_model": True},
        }

    async def generate(
        self,
        messages: List[AIMessage],
        system_prompt: str,
        api_key: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """
        Generate text using Hugging Face Inference API

        Args:
            messages: Chronological turns, flattened with role tags
            system_prompt: Prepended as a <system> block
            api_key: Hugging Face access token
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate (mapped to max_new_tokens)

        Returns:
            LLMResponse with generated text
        """
        self._start_timing()

        selected_model = self.get_effective_model()
        request_body = self.build_payload(
            messages,
            system_prompt,
            temperature=temperature,
            max_tokens=max_tokens or self.settings.max_tokens,
        )

        url = f"{self.settings.base_url.rstrip('/')}/{selected_model}"
        response_data = await self._post_json(
            url,
            headers=self._auth_headers(api_key),
            payload=request_body,
        )

        content = self._extract_generated_text(response_data)

        return LLMResponse(
            content=content,
            provider=self.provider_name,
            model=selected_model,
            tokens_used=self._estimate_tokens(content),
            response_time_ms=self._get_response_time_ms(),
        )

    def _extract_generated_text(self, response_data) -> str:
        """Pull generated_text out of a one-element list (or a bare object)"""
        first_result = response_data
        if isinstance(response_data, list):
            if not response_data:
                raise MalformedResponseError("Hugging Face API returned an empty list")
            first_result = response_data[0]

        if not isinstance(first_result, dict) or "generated_text" not in first_result:
            raise MalformedResponseError(
                "Hugging Face API response has no generated_text",
                context={"type": type(first_result).__name__},
            )

        return self._validate_response_content(first_result["generated_text"])

    def _estimate_tokens(self, content: str) -> int:
        """Rough approximation: ~4 characters per token for English text"""
        return max(1, len(content) // 4)
