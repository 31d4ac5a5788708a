"""Case conversation endpoints.

Provider failures are returned as values in the response body so the UI can
show them; only caller errors map to HTTP error statuses.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, status

from lexia_core_lib.api.dependencies import (
    RequestContext,
    WorkspaceManager,
    get_request_context,
    get_workspace,
)
from lexia_core_lib.config.settings import Settings
from lexia_core_lib.core.workspace import CaseWorkspace
from lexia_core_lib.exceptions import ConversationBusyError, EmptyDocumentListError
from lexia_core_lib.infrastructure.llm.providers.registry import ProviderRegistry
from lexia_core_lib.models.api_models import (
    AIResponse,
    ConversationResponse,
    DocumentAnalysisRequest,
    ProviderStatusResponse,
    ProviderSwitchRequest,
    SendMessageRequest,
    SystemPromptResponse,
    SystemPromptUpdateRequest,
    TurnResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/cases", tags=["cases"])


def _conversation(workspace: CaseWorkspace, case_id: str) -> ConversationResponse:
    store = workspace.open_case(case_id)
    return ConversationResponse(
        case_id=case_id,
        provider=workspace.session.provider,
        system_prompt=store.system_prompt,
        messages=list(store.messages),
    )


@router.get("/{case_id}/messages", response_model=ConversationResponse)
async def get_messages(case_id: str, workspace: CaseWorkspace = Depends(get_workspace)):
    return _conversation(workspace, case_id)


@router.post("/{case_id}/messages", response_model=TurnResponse)
async def send_message(
    case_id: str,
    body: SendMessageRequest,
    workspace: CaseWorkspace = Depends(get_workspace),
    ctx: RequestContext = Depends(get_request_context),
):
    store = workspace.open_case(case_id)
    try:
        turn = await store.send(
            body.content,
            attachments=body.attachments,
            correlation_id=ctx.correlation_id,
        )
    except ConversationBusyError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)

    if turn is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Message content is empty",
        )

    return TurnResponse(
        case_id=case_id,
        user_message=turn.user_message,
        assistant_message=turn.assistant_message,
        error=turn.error.message if turn.error else None,
        error_kind=turn.error.kind.value if turn.error else None,
        messages=list(store.messages),
    )


@router.delete("/{case_id}/messages", response_model=ConversationResponse)
async def clear_messages(case_id: str, workspace: CaseWorkspace = Depends(get_workspace)):
    store = workspace.open_case(case_id)
    try:
        store.clear()
    except ConversationBusyError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    return _conversation(workspace, case_id)


@router.put("/{case_id}/system-prompt", response_model=SystemPromptResponse)
async def save_system_prompt(
    case_id: str,
    body: SystemPromptUpdateRequest,
    workspace: CaseWorkspace = Depends(get_workspace),
):
    store = workspace.open_case(case_id)
    return SystemPromptResponse(case_id=case_id, system_prompt=store.save_system_prompt(body.system_prompt))


@router.delete("/{case_id}/system-prompt", response_model=SystemPromptResponse)
async def reset_system_prompt(case_id: str, workspace: CaseWorkspace = Depends(get_workspace)):
    store = workspace.open_case(case_id)
    return SystemPromptResponse(case_id=case_id, system_prompt=store.reset_system_prompt())


@router.put("/{case_id}/provider", response_model=ProviderStatusResponse)
async def switch_provider(
    case_id: str,
    body: ProviderSwitchRequest,
    workspace: CaseWorkspace = Depends(get_workspace),
):
    available = workspace.adapter.registry.get_available_providers()
    if body.provider.lower() not in available:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown provider '{body.provider}'. Valid options: {available}",
        )
    workspace.open_case(case_id).switch_provider(body.provider)
    return ProviderStatusResponse(selected=workspace.session.provider, available=available)


@router.post("/{case_id}/documents/analyze", response_model=AIResponse)
async def analyze_documents(
    case_id: str,
    body: DocumentAnalysisRequest,
    workspace: CaseWorkspace = Depends(get_workspace),
    ctx: RequestContext = Depends(get_request_context),
):
    store = workspace.open_case(case_id)
    try:
        result = await workspace.documents.analyze(
            body.files,
            store.system_prompt,
            workspace.session.provider_config(),
            correlation_id=ctx.correlation_id,
        )
    except EmptyDocumentListError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message)

    return AIResponse(
        **result.to_response(),
        error_kind=result.error.kind.value if result.error else None,
    )


def create_app(
    settings: Optional[Settings] = None,
    registry: Optional[ProviderRegistry] = None,
) -> FastAPI:
    """Build the API application with its workspace manager"""
    settings = settings or Settings.from_env()
    registry = registry or ProviderRegistry.from_settings(settings)

    app = FastAPI(title="LexiA Conversation API")
    app.state.workspaces = WorkspaceManager(settings, registry)
    app.include_router(router)
    logger.info(f"LexiA API created; providers: {registry.get_available_providers()}")
    return app
