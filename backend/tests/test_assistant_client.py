"""
Wire-level tests for AssistantClient against a local aiohttp server.
"""

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp import test_utils

from elie.schemas.assistant import AssistantCreate
from elie.services.assistant_client import (
    ApiStatusError,
    AssistantClient,
    ResponseFormatError,
    TransportError,
)
from elie.services.connectivity import is_network_available


UNREACHABLE = "http://127.0.0.1:1"


class RecordingApi:
    """Minimal provider double that remembers what it was sent."""

    def __init__(self):
        self.requests = []
        self.uploaded = {}

    async def _record(self, request):
        body = await request.json() if request.can_read_body else None
        self.requests.append({
            "method": request.method,
            "path": request.path,
            "query": dict(request.query),
            "headers": request.headers.copy(),
            "json": body,
        })

    async def create_thread(self, request):
        await self._record(request)
        return web.json_response({"id": "thread_9", "created_at": 1})

    async def add_message(self, request):
        await self._record(request)
        return web.json_response({"id": "msg_1", "role": "user", "created_at": 2, "content": []})

    async def get_run(self, request):
        await self._record(request)
        return web.json_response({"id": request.match_info["run_id"], "status": "in_progress"})

    async def list_messages(self, request):
        await self._record(request)
        return web.json_response({"data": [{
            "id": "msg_2",
            "role": "assistant",
            "created_at": 3,
            "content": [
                {"type": "text", "text": {"value": "Hello", "annotations": []}},
                {"type": "image_file", "image_file": {"file_id": "file_x"}},
                {"type": "text", "text": {"value": "world", "annotations": []}},
            ],
        }]})

    async def upload(self, request):
        self.requests.append({"method": request.method, "path": request.path, "headers": request.headers.copy()})
        reader = await request.multipart()
        async for part in reader:
            if part.filename:
                self.uploaded["filename"] = part.filename
                self.uploaded[part.name] = await part.read()
            else:
                self.uploaded[part.name] = await part.text()
        return web.json_response({"id": "file_7", "filename": self.uploaded.get("filename")})

    async def list_assistants(self, request):
        await self._record(request)
        return web.json_response({"data": [{"id": "asst_1", "name": "ELIE"}]})

    async def update_assistant(self, request):
        await self._record(request)
        return web.json_response({"id": request.match_info["assistant_id"]})

    async def create_assistant(self, request):
        await self._record(request)
        return web.json_response({"id": "asst_2", "name": "Helper"})

    async def delete_file(self, request):
        await self._record(request)
        return web.Response(status=200)

    async def rejected(self, request):
        await self._record(request)
        return web.json_response({"error": {"message": "Invalid vector store"}}, status=400)

    async def garbage(self, request):
        return web.Response(text="<html>proxy</html>", content_type="text/html")

    async def gateway_error(self, request):
        return web.Response(status=500, body=b"\xff\xfe gateway \x80", content_type="application/octet-stream")

    async def ping(self, request):
        return web.Response(status=204)


@pytest.fixture
def api():
    return RecordingApi()


@pytest_asyncio.fixture
async def server(api):
    app = web.Application()
    app.router.add_post("/v1/threads", api.create_thread)
    app.router.add_post("/v1/threads/{thread_id}/messages", api.add_message)
    app.router.add_get("/v1/threads/{thread_id}/messages", api.list_messages)
    app.router.add_post("/v1/threads/{thread_id}/runs", api.rejected)
    app.router.add_get("/v1/threads/{thread_id}/runs/{run_id}", api.get_run)
    app.router.add_post("/v1/files", api.upload)
    app.router.add_get("/v1/assistants", api.list_assistants)
    app.router.add_post("/v1/assistants", api.create_assistant)
    app.router.add_post("/v1/assistants/{assistant_id}", api.update_assistant)
    app.router.add_delete("/v1/vector_stores/{store_id}/files/{file_id}", api.delete_file)
    app.router.add_get("/v1/vector_stores", api.garbage)
    app.router.add_delete("/v1/vector_stores/{store_id}", api.gateway_error)
    app.router.add_route("HEAD", "/ping", api.ping)

    test_server = test_utils.TestServer(app)
    await test_server.start_server()
    yield test_server
    await test_server.close()


@pytest.fixture
def remote(server):
    return AssistantClient(api_base=str(server.make_url("/")), beta_header="assistants=v2", timeout=5)


async def test_requests_carry_credentials_and_beta_header(remote, api):
    thread = await remote.create_thread("sk-test")

    assert thread.id == "thread_9"
    headers = api.requests[0]["headers"]
    assert headers["Authorization"] == "Bearer sk-test"
    assert headers["OpenAI-Beta"] == "assistants=v2"


async def test_add_message_body(remote, api):
    await remote.add_message("sk-test", "thread_9", "Hello")

    assert api.requests[0]["path"] == "/v1/threads/thread_9/messages"
    assert api.requests[0]["json"] == {"role": "user", "content": "Hello"}


async def test_get_run_and_list_messages(remote):
    run = await remote.get_run("sk-test", "thread_9", "run_3")
    messages = await remote.list_messages("sk-test", "thread_9")

    assert run.status == "in_progress"
    assert not run.is_completed
    assert messages[0].text() == "Hello world"


async def test_non_2xx_raises_status_error(remote, api):
    with pytest.raises(ApiStatusError) as excinfo:
        await remote.create_run("sk-test", "thread_9", "asst_1")

    assert excinfo.value.status == 400
    assert "Invalid vector store" in excinfo.value.body
    assert api.requests[0]["json"] == {"assistant_id": "asst_1"}


async def test_unparseable_body_raises_format_error(remote):
    with pytest.raises(ResponseFormatError):
        await remote.list_vector_stores("sk-test")


async def test_undecodable_error_body_keeps_status(remote):
    with pytest.raises(ApiStatusError) as excinfo:
        await remote.delete_vector_store("sk-test", "vs_1")

    assert excinfo.value.status == 500
    assert "gateway" in excinfo.value.body


async def test_connection_failure_raises_transport_error():
    client = AssistantClient(api_base=UNREACHABLE, timeout=2)

    with pytest.raises(TransportError):
        await client.create_thread("sk-test")


async def test_upload_sends_multipart_file_and_purpose(remote, api):
    async def chunks():
        yield b"hello "
        yield b"world"

    uploaded = await remote.upload_file("sk-test", "notes.txt", chunks(), content_type="text/plain")

    assert uploaded.id == "file_7"
    assert api.uploaded == {"purpose": "assistants", "filename": "notes.txt", "file": b"hello world"}
    assert api.requests[0]["headers"]["Authorization"] == "Bearer sk-test"


async def test_list_assistants_query(remote, api):
    assistants = await remote.list_assistants("sk-test")

    assert [a.id for a in assistants] == ["asst_1"]
    assert api.requests[0]["query"] == {"order": "desc", "limit": "20"}


async def test_create_assistant_defaults_to_file_search(remote, api):
    await remote.create_assistant(
        "sk-test", AssistantCreate(name="Helper", instructions="Use the files.", model="gpt-4o")
    )

    assert api.requests[0]["json"]["tools"] == [{"type": "file_search"}]


async def test_attach_vector_store_body(remote, api):
    assistant = await remote.attach_vector_store("sk-test", "asst_1", "vs_1")

    assert assistant.id == "asst_1"
    assert api.requests[0]["method"] == "POST"
    assert api.requests[0]["json"] == {
        "tool_resources": {"file_search": {"vector_store_ids": ["vs_1"]}}
    }


async def test_empty_body_is_accepted(remote, api):
    assert await remote.delete_vector_store_file("sk-test", "vs_1", "file_a") is None
    assert api.requests[0]["method"] == "DELETE"


async def test_connectivity_check(server):
    assert await is_network_available(str(server.make_url("/ping")), timeout=2) is True
    assert await is_network_available(UNREACHABLE, timeout=2) is False
