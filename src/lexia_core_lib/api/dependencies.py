"""FastAPI dependencies for the case conversation API.

Identity arrives in X-User-* headers set by the gateway after it has
authenticated the caller. Each user gets one CaseWorkspace, owned by the
WorkspaceManager stored on ``app.state``.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from fastapi import Depends, HTTPException, Request, status

from lexia_core_lib.auth.session import SessionContext
from lexia_core_lib.config.settings import Settings
from lexia_core_lib.core.workspace import CaseWorkspace
from lexia_core_lib.infrastructure.llm.providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)


@dataclass
class RequestContext:
    """Caller identity taken from gateway headers"""

    user_id: str
    user_email: Optional[str] = None
    user_roles: List[str] = field(default_factory=list)
    correlation_id: Optional[str] = None


def _parse_roles(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    try:
        roles = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"Ignoring unparseable X-User-Roles header: {raw!r}")
        return []
    if not isinstance(roles, list):
        logger.warning(f"Ignoring non-list X-User-Roles header: {raw!r}")
        return []
    return [str(r) for r in roles]


def get_request_context(request: Request) -> RequestContext:
    """Build the RequestContext, rejecting requests without X-User-ID"""
    headers = request.headers
    user_id = headers.get("X-User-ID")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing user context",
        )
    return RequestContext(
        user_id=user_id,
        user_email=headers.get("X-User-Email"),
        user_roles=_parse_roles(headers.get("X-User-Roles")),
        correlation_id=headers.get("X-Correlation-ID"),
    )


class WorkspaceManager:
    """Application-owned registry of per-user workspaces"""

    def __init__(self, settings: Settings, registry: ProviderRegistry):
        self.settings = settings
        self.registry = registry
        self._workspaces: Dict[str, CaseWorkspace] = {}

    def for_context(self, ctx: RequestContext) -> CaseWorkspace:
        workspace = self._workspaces.get(ctx.user_id)
        if workspace is None:
            session = SessionContext.from_request(self.settings, ctx)
            workspace = CaseWorkspace(session, self.registry, settings=self.settings)
            self._workspaces[ctx.user_id] = workspace
            logger.info(f"Created workspace for user {ctx.user_id} (provider {session.provider})")
        return workspace


def get_workspace(
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
) -> CaseWorkspace:
    manager: WorkspaceManager = request.app.state.workspaces
    return manager.for_context(ctx)
