"""Document analysis bridge.

Summarizes uploaded files with a one-shot request through the ProviderAdapter.
The request bypasses the ConversationStore, so the summary never lands in the
case transcript; callers decide whether to show it.
"""

import logging
from typing import Optional, Sequence, Union

from lexia_core_lib.exceptions import EmptyDocumentListError
from lexia_core_lib.infrastructure.llm.adapter import ProviderAdapter
from lexia_core_lib.infrastructure.llm.providers.base import (
    AIMessage,
    AIResult,
    AIRole,
    ProviderConfig,
    TaskKind,
)
from lexia_core_lib.models.case import FileRef

logger = logging.getLogger(__name__)

ANALYSIS_INSTRUCTION = "Please analyze the following documents and provide a summary:"


def build_analysis_request(file_names: Sequence[str]) -> AIMessage:
    """Single synthetic user turn listing every document"""
    listing = "\n\n".join(file_names)
    return AIMessage(role=AIRole.USER, content=f"{ANALYSIS_INSTRUCTION}\n\n{listing}")


class DocumentAnalysisBridge:
    """One-shot document summarization over the provider adapter"""

    def __init__(self, adapter: ProviderAdapter):
        self.adapter = adapter

    async def analyze(
        self,
        files: Sequence[Union[str, FileRef]],
        system_prompt: str,
        config: ProviderConfig,
        correlation_id: Optional[str] = None,
    ) -> AIResult:
        """
        Ask the provider for a summary of the given documents.

        Args:
            files: File names or FileRefs (only names are sent)
            system_prompt: Case system prompt
            config: Provider selection and API key
            correlation_id: Request id for log lines

        Returns:
            AIResult with the summary or a tagged error

        Raises:
            TypeError: A single name or FileRef was passed instead of a sequence
            EmptyDocumentListError: No documents were given
        """
        if isinstance(files, (str, FileRef)):
            raise TypeError(
                f"files must be a sequence of names or FileRefs, got {type(files).__name__}"
            )
        names = [f.name if isinstance(f, FileRef) else str(f) for f in files or []]
        if not names:
            raise EmptyDocumentListError(
                "At least one document is required for analysis",
                error_code="EMPTY_DOCUMENT_LIST",
            )

        logger.info(f"Analyzing {len(names)} document(s) with {config.provider}")
        result = await self.adapter.send(
            [build_analysis_request(names)],
            system_prompt,
            config,
            task=TaskKind.DOCUMENT_ANALYSIS,
            correlation_id=correlation_id,
        )
        if not result.ok:
            logger.warning(f"Document analysis failed: {result.error.kind.value}")
        return result
