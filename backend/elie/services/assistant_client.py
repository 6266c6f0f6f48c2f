"""
Client for the remote thread/run-based assistant API.

One coroutine per remote capability. Each call opens its own
``aiohttp.ClientSession``, sends the bearer credential, and returns a
typed payload or raises. There is no retry, caching or sequencing here;
the orchestration layer decides what a failure means.
"""

import asyncio
import json
import logging
from typing import Any, AsyncIterable, Dict, List, Optional, Type, TypeVar

import aiohttp
from pydantic import BaseModel, ValidationError

from ..config import settings
from ..schemas.assistant import (
    Assistant,
    AssistantCreate,
    AssistantList,
    AssistantUpdate,
    MessageCreate,
    Run,
    RunCreate,
    Thread,
    ThreadMessage,
    ThreadMessageList,
    UploadedFile,
    VectorStore,
    VectorStoreCreate,
    VectorStoreFile,
    VectorStoreFileCreate,
    VectorStoreList,
)


logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class AssistantApiError(Exception):
    """Base class for remote call failures."""


class TransportError(AssistantApiError):
    """The request never produced an HTTP response (connection, timeout)."""


class ApiStatusError(AssistantApiError):
    """The API answered with a non-2xx status."""

    def __init__(self, status: int, body: str = ""):
        self.status = status
        self.body = body
        super().__init__(f"HTTP {status}: {body[:200]}")


class ResponseFormatError(AssistantApiError):
    """A 2xx response whose body does not match the expected payload."""


class AssistantClient:
    """Typed operations against the remote assistant API."""

    def __init__(
        self,
        api_base: Optional[str] = None,
        beta_header: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        self.api_base = (api_base or settings.OPENAI_API_BASE).rstrip("/")
        self.beta_header = beta_header or settings.OPENAI_BETA_HEADER
        self.timeout = aiohttp.ClientTimeout(total=timeout or settings.REQUEST_TIMEOUT)

    def _url(self, path: str) -> str:
        return f"{self.api_base}/v1/{path}"

    def _headers(self, api_key: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {api_key}",
            "OpenAI-Beta": self.beta_header,
        }

    async def _request(
        self,
        method: str,
        path: str,
        api_key: str,
        *,
        json_body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        data: Any = None
    ) -> Any:
        """Send one request and return the decoded JSON body (None when empty)."""
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.request(
                    method,
                    self._url(path),
                    headers=self._headers(api_key),
                    json=json_body,
                    params=params,
                    data=data
                ) as response:
                    body = await response.read()

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("%s /v1/%s transport error: %r", method, path, e)
            raise TransportError(str(e) or e.__class__.__name__) from e

        if not 200 <= response.status < 300:
            logger.warning("%s /v1/%s failed with HTTP %s", method, path, response.status)
            raise ApiStatusError(response.status, body.decode("utf-8", "replace"))

        if not body:
            return None
        try:
            return json.loads(body)
        except ValueError as e:
            raise ResponseFormatError(f"Invalid JSON from /v1/{path}") from e

    @staticmethod
    def _parse(model: Type[ModelT], payload: Any) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise ResponseFormatError(f"Unexpected {model.__name__} payload") from e

    # Threads, messages and runs

    async def create_thread(self, api_key: str) -> Thread:
        payload = await self._request("POST", "threads", api_key, json_body={})
        return self._parse(Thread, payload)

    async def add_message(
        self, api_key: str, thread_id: str, content: str, role: str = "user"
    ) -> ThreadMessage:
        request = MessageCreate(role=role, content=content)
        payload = await self._request(
            "POST", f"threads/{thread_id}/messages", api_key, json_body=request.model_dump()
        )
        return self._parse(ThreadMessage, payload)

    async def create_run(self, api_key: str, thread_id: str, assistant_id: str) -> Run:
        request = RunCreate(assistant_id=assistant_id)
        payload = await self._request(
            "POST", f"threads/{thread_id}/runs", api_key, json_body=request.model_dump()
        )
        return self._parse(Run, payload)

    async def get_run(self, api_key: str, thread_id: str, run_id: str) -> Run:
        payload = await self._request("GET", f"threads/{thread_id}/runs/{run_id}", api_key)
        return self._parse(Run, payload)

    async def list_messages(self, api_key: str, thread_id: str) -> List[ThreadMessage]:
        payload = await self._request("GET", f"threads/{thread_id}/messages", api_key)
        return self._parse(ThreadMessageList, payload).data or []

    # Files and vector stores

    async def upload_file(
        self,
        api_key: str,
        file_name: str,
        chunks: AsyncIterable[bytes],
        content_type: str = "application/octet-stream",
        purpose: Optional[str] = None
    ) -> UploadedFile:
        """Stream a file as a multipart body (``file`` part plus ``purpose``)."""
        data = aiohttp.FormData()
        data.add_field("purpose", purpose or settings.UPLOAD_PURPOSE)
        data.add_field("file", chunks, filename=file_name, content_type=content_type)

        payload = await self._request("POST", "files", api_key, data=data)
        return self._parse(UploadedFile, payload)

    async def create_vector_store_file(
        self, api_key: str, vector_store_id: str, file_id: str
    ) -> VectorStoreFile:
        request = VectorStoreFileCreate(file_id=file_id)
        payload = await self._request(
            "POST", f"vector_stores/{vector_store_id}/files", api_key, json_body=request.model_dump()
        )
        return self._parse(VectorStoreFile, payload)

    async def delete_vector_store_file(
        self, api_key: str, vector_store_id: str, file_id: str
    ) -> None:
        await self._request("DELETE", f"vector_stores/{vector_store_id}/files/{file_id}", api_key)

    async def create_vector_store(self, api_key: str, name: str) -> VectorStore:
        request = VectorStoreCreate(name=name)
        payload = await self._request("POST", "vector_stores", api_key, json_body=request.model_dump())
        return self._parse(VectorStore, payload)

    async def list_vector_stores(self, api_key: str) -> List[VectorStore]:
        payload = await self._request("GET", "vector_stores", api_key)
        return self._parse(VectorStoreList, payload).data

    async def delete_vector_store(self, api_key: str, vector_store_id: str) -> None:
        await self._request("DELETE", f"vector_stores/{vector_store_id}", api_key)

    # Assistants

    async def create_assistant(self, api_key: str, request: AssistantCreate) -> Assistant:
        payload = await self._request("POST", "assistants", api_key, json_body=request.model_dump())
        return self._parse(Assistant, payload)

    async def list_assistants(
        self, api_key: str, order: str = "desc", limit: int = 20
    ) -> List[Assistant]:
        payload = await self._request(
            "GET", "assistants", api_key, params={"order": order, "limit": limit}
        )
        return self._parse(AssistantList, payload).data

    async def delete_assistant(self, api_key: str, assistant_id: str) -> None:
        await self._request("DELETE", f"assistants/{assistant_id}", api_key)

    async def attach_vector_store(
        self, api_key: str, assistant_id: str, vector_store_id: str
    ) -> Assistant:
        """Point the assistant's file_search tool at one vector store."""
        request = AssistantUpdate(
            tool_resources={"file_search": {"vector_store_ids": [vector_store_id]}}
        )
        payload = await self._request(
            "POST", f"assistants/{assistant_id}", api_key, json_body=request.model_dump()
        )
        return self._parse(Assistant, payload)
