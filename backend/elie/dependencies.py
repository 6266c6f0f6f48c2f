"""
FastAPI dependencies wiring the services together, and the mapping of
domain errors to HTTP errors.
"""

from typing import Awaitable, Callable

from fastapi import Depends, HTTPException, Request, status

from .database import AsyncSessionLocal
from .errors import (
    ElieError,
    IngestionFailed,
    MissingAssistantBinding,
    MissingConfiguration,
    NotFound,
    Offline,
    RemoteOperationFailed,
    RunFailed,
    RunTimeout,
)
from .schemas.message import MessageResponse
from .services.assistant_client import AssistantClient
from .services.connectivity import is_network_available
from .services.conversation_service import ConversationService
from .services.ingestion import IngestionPipeline
from .services.remote_admin import RemoteAdminService
from .services.run_orchestrator import RunOrchestrator
from .services.startup import WelcomeState
from .services.store import ConversationStore


def get_store() -> ConversationStore:
    return ConversationStore(AsyncSessionLocal)


def get_assistant_client() -> AssistantClient:
    return AssistantClient()


def get_connectivity_check() -> Callable[[], Awaitable[bool]]:
    return is_network_available


def get_welcome_state(request: Request) -> WelcomeState:
    return request.app.state.welcome


def get_conversation_service(
    store: ConversationStore = Depends(get_store)
) -> ConversationService:
    return ConversationService(store)


def get_run_orchestrator(
    client: AssistantClient = Depends(get_assistant_client),
    store: ConversationStore = Depends(get_store),
    is_online: Callable[[], Awaitable[bool]] = Depends(get_connectivity_check)
) -> RunOrchestrator:
    return RunOrchestrator(client, store, is_online=is_online)


def get_ingestion_pipeline(
    client: AssistantClient = Depends(get_assistant_client),
    store: ConversationStore = Depends(get_store),
    is_online: Callable[[], Awaitable[bool]] = Depends(get_connectivity_check)
) -> IngestionPipeline:
    return IngestionPipeline(client, store, is_online=is_online)


def get_remote_admin(
    client: AssistantClient = Depends(get_assistant_client),
    store: ConversationStore = Depends(get_store),
    is_online: Callable[[], Awaitable[bool]] = Depends(get_connectivity_check)
) -> RemoteAdminService:
    return RemoteAdminService(client, store, is_online=is_online)


def http_error(error: ElieError) -> HTTPException:
    """Translate a domain error into the HTTP error shown to the user."""
    if isinstance(error, NotFound):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, Offline):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    elif isinstance(error, (MissingConfiguration, MissingAssistantBinding)):
        code = status.HTTP_409_CONFLICT
    elif isinstance(error, RunTimeout):
        code = status.HTTP_504_GATEWAY_TIMEOUT
    elif isinstance(error, (RunFailed, IngestionFailed, RemoteOperationFailed)):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR

    detail = {"message": error.user_message, "error": error.__class__.__name__}
    if isinstance(error, MissingAssistantBinding) and error.message is not None:
        detail["notice"] = MessageResponse.model_validate(error.message).model_dump()
    return HTTPException(status_code=code, detail=detail)
