"""
Services package.
"""

from .assistant_client import AssistantClient
from .store import ConversationStore, ApiConfigSnapshot
from .run_orchestrator import RunOrchestrator
from .ingestion import IngestionPipeline
from .conversation_service import ConversationService
from .remote_admin import RemoteAdminService

__all__ = [
    "AssistantClient",
    "ConversationStore",
    "ApiConfigSnapshot",
    "RunOrchestrator",
    "IngestionPipeline",
    "ConversationService",
    "RemoteAdminService",
]
