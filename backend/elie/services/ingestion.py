"""
Ingestion pipeline: attach a user file to the assistant's vector store.

    NOT_STARTED -> UPLOADING -> AWAITING_READINESS -> REGISTERING -> COMMITTED

Any failure moves to FAILED and raises. Nothing is written locally until
the upload and the registration have both succeeded, so a failed
ingestion never leaves a record behind. An uploaded file whose
registration failed stays on the remote side as an orphan.
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, Optional, Tuple, Union

import aiofiles

from ..config import settings
from ..errors import (
    MissingAssistantBinding,
    MissingConfiguration,
    Offline,
    RegistrationFailed,
    UploadFailed,
)
from ..models import Message, SENDER_BOT, VectorFile
from ..utils.clock import now_ms
from .assistant_client import ApiStatusError, AssistantApiError, AssistantClient
from .connectivity import is_network_available
from .progress import IngestionState, ProgressChannel, ProgressEvent, upload_percentage
from .store import ApiConfigSnapshot, ConversationStore


logger = logging.getLogger(__name__)

DEFAULT_FILE_NAME = "uploaded_file"
FILE_RECEIVED_TEXT = "I've received your file: {file_name}."

FileContent = Union[bytes, str, os.PathLike]


@dataclass
class IngestResult:
    """Records written by a committed ingestion."""
    vector_file: VectorFile
    message: Message


class IngestionPipeline:
    """Uploads, registers and records one file at a time per call."""

    def __init__(
        self,
        client: AssistantClient,
        store: ConversationStore,
        is_online: Callable[[], Awaitable[bool]] = is_network_available,
        ready_delay: Optional[float] = None,
        chunk_size: Optional[int] = None,
        clock: Callable[[], int] = now_ms,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.client = client
        self.store = store
        self.is_online = is_online
        self.ready_delay = ready_delay if ready_delay is not None else settings.FILE_READY_DELAY
        self.chunk_size = chunk_size or settings.UPLOAD_CHUNK_SIZE
        self.clock = clock
        self.sleep = sleep

    async def ingest_file(
        self,
        conversation_id: int,
        file_name: str,
        content: FileContent,
        progress: Optional[ProgressChannel] = None,
        content_type: str = "application/octet-stream"
    ) -> IngestResult:
        """Run the whole pipeline for one file and return what was committed."""
        file_name = (file_name or "").strip() or DEFAULT_FILE_NAME

        try:
            config = await self._check_preconditions()

            file_id = await self._upload(config, file_name, content, content_type, progress)

            self._publish(progress, IngestionState.AWAITING_READINESS, 100)
            # The API gives no readiness signal; wait a fixed time instead
            await self.sleep(self.ready_delay)
            logger.debug("File %s assumed ready after %ss", file_id, self.ready_delay)

            self._publish(progress, IngestionState.REGISTERING, 100)
            await self._register(config, file_id)

            vector_file = await self.store.insert_vector_file(file_name, file_id)
            notice = await self.store.insert_message(
                conversation_id,
                SENDER_BOT,
                FILE_RECEIVED_TEXT.format(file_name=file_name),
                timestamp=self.clock()
            )
            self._publish(progress, IngestionState.COMMITTED, 100)
            logger.info("Ingested %s as %s", file_name, file_id)

            return IngestResult(vector_file=vector_file, message=notice)

        except (Exception, asyncio.CancelledError) as e:
            self._publish(progress, IngestionState.FAILED, 0, getattr(e, "user_message", None))
            raise

    async def _check_preconditions(self) -> ApiConfigSnapshot:
        if not await self.is_online():
            raise Offline()

        config = await self.store.get_config()
        if config is None or not config.has_api_key:
            raise MissingConfiguration()
        if not config.vector_store_id.strip():
            raise MissingAssistantBinding()
        return config

    async def _upload(
        self,
        config: ApiConfigSnapshot,
        file_name: str,
        content: FileContent,
        content_type: str,
        progress: Optional[ProgressChannel]
    ) -> str:
        chunks, total = self._open_content(content)
        if total is not None and total > settings.MAX_UPLOAD_SIZE:
            raise UploadFailed(
                f"File too large. Maximum size: {settings.MAX_UPLOAD_SIZE / (1024*1024):.1f}MB"
            )

        self._publish(progress, IngestionState.UPLOADING, 0)
        try:
            uploaded = await self.client.upload_file(
                config.api_key,
                file_name,
                self._counted(chunks, total, progress),
                content_type=content_type
            )
        except ApiStatusError as e:
            logger.error("Error uploading %s: HTTP %s", file_name, e.status)
            raise UploadFailed() from e
        except (AssistantApiError, OSError) as e:
            logger.error("Exception uploading %s: %s", file_name, e)
            raise UploadFailed(
                "We couldn't upload your file. Please check your connection and try again."
            ) from e

        self._publish(progress, IngestionState.UPLOADING, 100)
        logger.info("Uploaded %s, received file id %s", file_name, uploaded.id)
        return uploaded.id

    async def _register(self, config: ApiConfigSnapshot, file_id: str) -> None:
        try:
            await self.client.create_vector_store_file(
                config.api_key, config.vector_store_id, file_id
            )
        except ApiStatusError as e:
            logger.error("Error registering file %s: HTTP %s", file_id, e.status)
            raise RegistrationFailed() from e
        except AssistantApiError as e:
            logger.error("Exception registering file %s: %s", file_id, e)
            raise RegistrationFailed(
                "We had trouble attaching the file. Please try again."
            ) from e

    def _open_content(self, content: FileContent) -> Tuple[AsyncIterator[bytes], Optional[int]]:
        """Chunk iterator over the content plus its size when known."""
        if isinstance(content, (bytes, bytearray, memoryview)):
            return self._iter_bytes(bytes(content)), len(content)

        try:
            total = os.path.getsize(content)
        except OSError:
            total = None
        return self._iter_path(content), total

    async def _iter_bytes(self, data: bytes) -> AsyncIterator[bytes]:
        for start in range(0, len(data), self.chunk_size):
            yield data[start:start + self.chunk_size]

    async def _iter_path(self, path) -> AsyncIterator[bytes]:
        async with aiofiles.open(path, "rb") as f:
            while True:
                chunk = await f.read(self.chunk_size)
                if not chunk:
                    break
                yield chunk

    @staticmethod
    async def _counted(
        chunks: AsyncIterator[bytes],
        total: Optional[int],
        progress: Optional[ProgressChannel]
    ) -> AsyncIterator[bytes]:
        sent = 0
        async for chunk in chunks:
            yield chunk
            sent += len(chunk)
            if progress is not None:
                progress.upload_progress(upload_percentage(sent, total))

    @staticmethod
    def _publish(
        progress: Optional[ProgressChannel],
        state: IngestionState,
        percent: int,
        detail: Optional[str] = None
    ) -> None:
        if progress is not None:
            progress.publish(ProgressEvent(state, percent, detail))
