"""
Provider Adapter: uniform request/response contract over the AI backends.

The adapter validates a request, looks up the provider variant named by the
per-request ProviderConfig, dispatches, and converts every failure into a
tagged AIResult. Nothing raised by a provider escapes ``send``.
"""

import logging
from typing import TYPE_CHECKING, List, Optional

from lexia_core_lib.exceptions import (
    LLMProviderError,
    MalformedResponseError,
    ProviderNotConfiguredError,
    ProviderTransportError,
)
from .providers import (
    TASK_TEMPERATURES,
    AIErrorKind,
    AIMessage,
    AIResult,
    ProviderConfig,
    ProviderRegistry,
    TaskKind,
)

if TYPE_CHECKING:
    from lexia_core_lib.auth.session import SessionContext


NOT_CONFIGURED_MESSAGE = "AI service not configured. Please provide an API key for {provider}."
REQUEST_FAILED_MESSAGE = "Failed to generate AI response. Please try again."
ANALYSIS_FAILED_MESSAGE = "Failed to analyze documents. Please try again."


class ProviderAdapter:
    """Stateless dispatcher from wire-neutral requests to provider variants"""

    def __init__(
        self,
        registry: ProviderRegistry,
        session: Optional["SessionContext"] = None,
    ):
        self.registry = registry
        self.session = session
        self.logger = logging.getLogger(__name__)

    async def send(
        self,
        messages: List[AIMessage],
        system_prompt: str,
        config: ProviderConfig,
        task: TaskKind = TaskKind.CONVERSATION,
        correlation_id: Optional[str] = None,
    ) -> AIResult:
        """
        Send one request to the provider named in ``config``

        Args:
            messages: Ordered user/assistant turns (no system entry)
            system_prompt: Case system prompt; may be empty but not None
            config: Provider selection and API key
            task: Conversation or document analysis (selects temperature)
            correlation_id: Request id for log lines

        Returns:
            AIResult with the generated text, or a tagged error
        """
        provider_name = config.provider
        tag = self._log_tag(correlation_id)

        if system_prompt is None:
            return AIResult.failure(
                AIErrorKind.INVALID_REQUEST, "A system prompt is required.", provider_name
            )
        for index, message in enumerate(messages):
            if not message.role:
                return AIResult.failure(
                    AIErrorKind.INVALID_REQUEST,
                    f"Message {index} has no role.",
                    provider_name,
                )

        try:
            provider = self._resolve(config)
            self.logger.info(
                f"{tag}Dispatching {task.value} request to {provider_name} "
                f"({len(messages)} turns)"
            )
            response = await provider.generate(
                messages=messages,
                system_prompt=system_prompt,
                api_key=config.api_key,
                temperature=TASK_TEMPERATURES[task],
            )
        except ProviderNotConfiguredError as e:
            self.logger.warning(f"{tag}{e.message}")
            return AIResult.failure(
                AIErrorKind.NOT_CONFIGURED,
                NOT_CONFIGURED_MESSAGE.format(provider=provider_name),
                provider_name,
            )
        except MalformedResponseError as e:
            self.logger.error(
                f"{tag}Malformed response from {provider_name}: {e.message} {e.context}"
            )
            return AIResult.failure(
                AIErrorKind.MALFORMED_RESPONSE, self._failure_message(task), provider_name
            )
        except ProviderTransportError as e:
            self.logger.warning(
                f"{tag}Request to {provider_name} failed: {e.message}"
            )
            return AIResult.failure(
                AIErrorKind.TRANSPORT_FAILURE, self._failure_message(task), provider_name
            )
        except LLMProviderError as e:
            self.logger.warning(f"{tag}Provider {provider_name} failed: {e.message}")
            return AIResult.failure(
                AIErrorKind.TRANSPORT_FAILURE, self._failure_message(task), provider_name
            )
        except Exception as e:
            self.logger.exception(
                f"{tag}Unexpected error from {provider_name}: {type(e).__name__}"
            )
            return AIResult.failure(
                AIErrorKind.TRANSPORT_FAILURE, self._failure_message(task), provider_name
            )

        self.logger.info(
            f"{tag}{provider_name} answered in {response.response_time_ms}ms "
            f"({response.tokens_used} tokens, model {response.model})"
        )
        return AIResult.success(response)

    def _resolve(self, config: ProviderConfig):
        """Find the provider variant; NotConfigured is decided before any network call"""
        if not config.api_key:
            raise ProviderNotConfiguredError(
                f"Provider '{config.provider}' has no API key",
                error_code="LLM_NOT_CONFIGURED",
            )
        provider = self.registry.get_provider(config.provider)
        if provider is None:
            raise ProviderNotConfiguredError(
                f"Provider '{config.provider}' is not registered. "
                f"Available: {self.registry.get_available_providers()}",
                error_code="LLM_UNKNOWN_PROVIDER",
            )
        return provider

    @staticmethod
    def _failure_message(task: TaskKind) -> str:
        if task == TaskKind.DOCUMENT_ANALYSIS:
            return ANALYSIS_FAILED_MESSAGE
        return REQUEST_FAILED_MESSAGE

    def _log_tag(self, correlation_id: Optional[str] = None) -> str:
        user_id = self.session.user_id if self.session is not None else None
        if user_id and correlation_id:
            return f"[{user_id}:{correlation_id}] "
        if user_id or correlation_id:
            return f"[{user_id or correlation_id}] "
        return ""
