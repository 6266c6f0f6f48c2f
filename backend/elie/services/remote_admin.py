"""
Management of remote resources: assistants, vector stores and the
files registered in the configured vector store.
"""

import logging
from typing import Awaitable, Callable, List

from ..errors import (
    MissingAssistantBinding,
    MissingConfiguration,
    NotFound,
    Offline,
    RemoteOperationFailed,
)
from ..schemas.assistant import Assistant, AssistantCreate, VectorStore
from .assistant_client import AssistantApiError, AssistantClient
from .connectivity import is_network_available
from .store import ApiConfigSnapshot, ConversationStore


logger = logging.getLogger(__name__)


class RemoteAdminService:
    """Service for assistant, vector store and vector file administration."""

    def __init__(
        self,
        client: AssistantClient,
        store: ConversationStore,
        is_online: Callable[[], Awaitable[bool]] = is_network_available
    ):
        self.client = client
        self.store = store
        self.is_online = is_online

    async def _require_config(self) -> ApiConfigSnapshot:
        if not await self.is_online():
            raise Offline()
        config = await self.store.get_config()
        if config is None or not config.has_api_key:
            raise MissingConfiguration()
        return config

    # Assistants

    async def list_assistants(self) -> List[Assistant]:
        config = await self._require_config()
        try:
            return await self.client.list_assistants(config.api_key)
        except AssistantApiError as e:
            logger.error("Listing assistants failed: %s", e)
            raise RemoteOperationFailed("We couldn't load your assistants. Please try again later.") from e

    async def create_assistant(self, request: AssistantCreate) -> Assistant:
        config = await self._require_config()
        try:
            assistant = await self.client.create_assistant(config.api_key, request)
        except AssistantApiError as e:
            logger.error("Creating assistant %r failed: %s", request.name, e)
            raise RemoteOperationFailed("We couldn't create your assistant. Please try again later.") from e
        logger.info("Created assistant %s", assistant.id)
        return assistant

    async def delete_assistant(self, assistant_id: str) -> None:
        config = await self._require_config()
        try:
            await self.client.delete_assistant(config.api_key, assistant_id)
        except AssistantApiError as e:
            logger.error("Deleting assistant %s failed: %s", assistant_id, e)
            raise RemoteOperationFailed(
                "We couldn't delete your assistant right now. Please try again later."
            ) from e

    async def bind_vector_store(self) -> Assistant:
        """Attach the configured vector store to the configured assistant."""
        config = await self._require_config()
        if not config.has_assistant_binding:
            raise MissingAssistantBinding()
        try:
            assistant = await self.client.attach_vector_store(
                config.api_key, config.assistant_id, config.vector_store_id
            )
        except AssistantApiError as e:
            logger.error("Failed to update assistant %s: %s", config.assistant_id, e)
            raise RemoteOperationFailed(
                "We had trouble updating the assistant. Please check your connection or settings."
            ) from e
        logger.info("Assistant %s now searches vector store %s", assistant.id, config.vector_store_id)
        return assistant

    # Vector stores

    async def list_vector_stores(self) -> List[VectorStore]:
        config = await self._require_config()
        try:
            return await self.client.list_vector_stores(config.api_key)
        except AssistantApiError as e:
            logger.error("Listing vector stores failed: %s", e)
            raise RemoteOperationFailed("We couldn't load your vector stores. Please try again later.") from e

    async def create_vector_store(self, name: str) -> VectorStore:
        config = await self._require_config()
        try:
            vector_store = await self.client.create_vector_store(config.api_key, name)
        except AssistantApiError as e:
            logger.error("Creating vector store %r failed: %s", name, e)
            raise RemoteOperationFailed("We couldn't create your vector store. Please try again later.") from e
        logger.info("Created vector store %s", vector_store.id)
        return vector_store

    async def delete_vector_store(self, vector_store_id: str) -> None:
        config = await self._require_config()
        try:
            await self.client.delete_vector_store(config.api_key, vector_store_id)
        except AssistantApiError as e:
            logger.error("Deleting vector store %s failed: %s", vector_store_id, e)
            raise RemoteOperationFailed(
                "We couldn't delete your vector store. Please try again later."
            ) from e

    # Files registered in the configured vector store

    async def delete_vector_file(self, vector_file_id: int) -> None:
        """Remove a file from the vector store, then forget it locally."""
        vector_file = await self.store.get_vector_file(vector_file_id)
        if not vector_file:
            raise NotFound("File not found")

        config = await self._require_config()
        if not config.vector_store_id.strip():
            raise MissingAssistantBinding()

        try:
            await self.client.delete_vector_store_file(
                config.api_key, config.vector_store_id, vector_file.file_id
            )
        except AssistantApiError as e:
            logger.error("Error deleting file %s: %s", vector_file.file_id, e)
            raise RemoteOperationFailed(
                "We could not delete your file. Please try again later."
            ) from e

        await self.store.delete_vector_file(vector_file_id)
        logger.info("Deleted vector file %s (%s)", vector_file.file_name, vector_file.file_id)
