"""
HTTP-level tests: routers wired to an in-memory store and a fake assistant API.
"""

import json

import httpx
import pytest
import pytest_asyncio

from elie.dependencies import (
    get_assistant_client,
    get_connectivity_check,
    get_ingestion_pipeline,
    get_run_orchestrator,
    get_store,
)
from elie.main import app
from elie.services.ingestion import IngestionPipeline
from elie.services.run_orchestrator import RunOrchestrator
from elie.services.startup import WELCOME_MESSAGES, WelcomeState

from tests.fakes import FakeAssistantClient, always_offline, always_online, status_error


@pytest_asyncio.fixture
async def wire(store, client):
    """Point the app at the test store and fake client; returns a setter for connectivity."""
    state = {"is_online": always_online}

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_assistant_client] = lambda: client
    app.dependency_overrides[get_connectivity_check] = lambda: state["is_online"]
    app.dependency_overrides[get_run_orchestrator] = lambda: RunOrchestrator(
        client, store, is_online=state["is_online"], poll_interval=0
    )
    app.dependency_overrides[get_ingestion_pipeline] = lambda: IngestionPipeline(
        client, store, is_online=state["is_online"], ready_delay=0
    )
    app.state.welcome = WelcomeState()

    yield state

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def http(wire):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


def sse_events(body: str):
    return [json.loads(line[len("data: "):]) for line in body.splitlines() if line.startswith("data: ")]


async def test_health(http):
    response = await http.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


# Conversations

async def test_conversation_lifecycle(http):
    created = await http.post("/api/conversations", json={"title": "Trip"})
    assert created.status_code == 201
    conversation_id = created.json()["id"]

    renamed = await http.put(f"/api/conversations/{conversation_id}", json={"title": "Holiday"})
    assert renamed.json()["title"] == "Holiday"

    listed = await http.get("/api/conversations")
    assert [c["title"] for c in listed.json()] == ["Holiday"]

    detail = await http.get(f"/api/conversations/{conversation_id}")
    assert detail.json()["messages"] == []

    deleted = await http.delete(f"/api/conversations/{conversation_id}")
    assert deleted.status_code == 200
    assert (await http.get(f"/api/conversations/{conversation_id}")).status_code == 404


async def test_blank_conversation_title_is_rejected(http):
    response = await http.post("/api/conversations", json={"title": "   "})

    assert response.status_code == 400


# Chat

async def test_send_message(http, configured_store, conversation):
    response = await http.post(f"/api/chat/{conversation.id}", json={"text": "Hello"})

    assert response.status_code == 200
    messages = response.json()["messages"]
    assert [(m["sender"], m["body"]) for m in messages] == [("user", "Hello"), ("bot", "Hi there")]


async def test_send_blank_message(http, configured_store, conversation):
    response = await http.post(f"/api/chat/{conversation.id}", json={"text": "  "})

    assert response.status_code == 400


async def test_send_to_unknown_conversation(http, configured_store):
    response = await http.post("/api/chat/999", json={"text": "Hello"})

    assert response.status_code == 404


async def test_send_while_offline(http, wire, configured_store, conversation):
    wire["is_online"] = always_offline

    response = await http.post(f"/api/chat/{conversation.id}", json={"text": "Hello"})

    assert response.status_code == 503
    assert response.json()["detail"]["error"] == "Offline"


async def test_send_without_binding_returns_notice(http, store, conversation):
    await store.save_config("sk-test")

    response = await http.post(f"/api/chat/{conversation.id}", json={"text": "Hello"})

    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["error"] == "MissingAssistantBinding"
    assert detail["notice"]["sender"] == "bot"
    assert detail["notice"]["body"].startswith("Configuration missing!")


async def test_send_failure_is_bad_gateway(http, client, configured_store, conversation):
    client.failures["create_run"] = status_error(500)

    response = await http.post(f"/api/chat/{conversation.id}", json={"text": "Hello"})

    assert response.status_code == 502
    assert response.json()["detail"]["error"] == "RunFailed"


async def test_reactions_and_history(http, configured_store, conversation):
    sent = await http.post(f"/api/chat/{conversation.id}", json={"text": "Hello"})
    bot_id = sent.json()["messages"][1]["id"]

    liked = await http.post(f"/api/chat/messages/{bot_id}/like")
    assert liked.json()["likes"] == 1
    await http.post(f"/api/chat/messages/{bot_id}/dislike")

    totals = await http.get("/api/chat/reactions")
    assert totals.json() == {"likes": 1, "dislikes": 1}

    cleared = await http.delete("/api/chat/history")
    assert cleared.json()["deleted"] == 2
    assert (await http.get("/api/chat/reactions")).json() == {"likes": 0, "dislikes": 0}


async def test_react_to_unknown_message(http):
    assert (await http.post("/api/chat/messages/404/like")).status_code == 404


# Files

async def test_upload_streams_progress(http, client, configured_store, conversation):
    response = await http.post(
        f"/api/files/upload/{conversation.id}",
        files={"file": ("notes.txt", b"some notes", "text/plain")}
    )

    assert response.status_code == 200
    events = sse_events(response.text)
    assert events[0] == {"type": "progress", "state": "uploading", "percent": 0, "detail": None}
    assert events[-2]["state"] == "committed"
    assert events[-1]["type"] == "done"
    assert events[-1]["file"]["file_name"] == "notes.txt"
    assert events[-1]["message"]["body"] == "I've received your file: notes.txt."
    assert client.uploaded["notes.txt"] == b"some notes"


async def test_upload_failure_ends_stream_with_error(http, client, configured_store, conversation):
    client.failures["upload_file"] = status_error(500)

    response = await http.post(
        f"/api/files/upload/{conversation.id}",
        files={"file": ("notes.txt", b"some notes", "text/plain")}
    )

    events = sse_events(response.text)
    assert events[-2]["state"] == "failed"
    assert events[-1]["type"] == "error"
    assert events[-1]["error"] == "UploadFailed"
    assert (await http.get("/api/files")).json() == []


async def test_unexpected_ingestion_error_still_ends_stream(http, client, configured_store, conversation):
    client.failures["create_vector_store_file"] = RuntimeError("database is locked")

    response = await http.post(
        f"/api/files/upload/{conversation.id}",
        files={"file": ("notes.txt", b"some notes", "text/plain")}
    )

    events = sse_events(response.text)
    assert events[-2]["state"] == "failed"
    assert events[-1] == {
        "type": "error",
        "error": "RuntimeError",
        "message": "Something went wrong. Please try again."
    }


async def test_oversize_upload_is_rejected_before_reading(http, client, configured_store, conversation, monkeypatch):
    from elie.config import settings
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 3)

    response = await http.post(
        f"/api/files/upload/{conversation.id}",
        files={"file": ("notes.txt", b"some notes", "text/plain")}
    )

    assert response.status_code == 413
    assert client.calls == []
    assert (await http.get("/api/files")).json() == []


async def test_upload_without_stream(http, configured_store, conversation):
    response = await http.post(
        f"/api/files/upload/{conversation.id}",
        params={"stream": "false"},
        files={"file": ("notes.txt", b"some notes", "text/plain")}
    )

    assert response.status_code == 200
    assert response.json()["file"]["file_id"] == "file_1"


async def test_upload_without_vector_store(http, store, conversation):
    await store.save_config("sk-test", assistant_id="asst_1")

    response = await http.post(
        f"/api/files/upload/{conversation.id}",
        params={"stream": "false"},
        files={"file": ("notes.txt", b"some notes", "text/plain")}
    )

    assert response.status_code == 409


async def test_list_and_delete_files(http, client, configured_store):
    vector_file = await configured_store.insert_vector_file("a.pdf", "file_a")

    listed = await http.get("/api/files")
    assert [f["file_id"] for f in listed.json()] == ["file_a"]

    deleted = await http.delete(f"/api/files/{vector_file.id}")
    assert deleted.status_code == 200
    assert client.call_names() == ["delete_vector_store_file"]
    assert (await http.get("/api/files")).json() == []


# Settings

async def test_settings_round_trip(http):
    empty = await http.get("/api/settings")
    assert empty.json()["api_key_set"] is False

    saved = await http.put("/api/settings", json={
        "api_key": "sk-secret-1234",
        "assistant_id": "asst_1",
        "vector_store_id": "vs_1"
    })
    body = saved.json()
    assert body["api_key_set"] is True
    assert body["api_key_hint"] == "...1234"
    assert "sk-secret-1234" not in saved.text

    prompt = await http.put("/api/settings/prompt", json={"custom_prompt": "Be brief."})
    assert prompt.json()["custom_prompt"] == "Be brief."

    await http.post("/api/settings/reset")
    assert (await http.get("/api/settings")).json()["api_key_set"] is False


async def test_settings_require_api_key(http):
    response = await http.put("/api/settings", json={"api_key": "   "})

    assert response.status_code == 400


async def test_bind_vector_store(http, client, configured_store):
    response = await http.post("/api/settings/bind")

    assert response.status_code == 200
    assert client.calls == [("attach_vector_store", "sk-test", "asst_1", "vs_1")]


# Remote administration

async def test_assistant_and_vector_store_admin(http, client, configured_store):
    assert [a["id"] for a in (await http.get("/api/assistants")).json()] == ["asst_1"]

    created = await http.post("/api/assistants", json={
        "name": "Helper",
        "instructions": "Answer from the files.",
        "model": "gpt-4o"
    })
    assert created.status_code == 201

    assert (await http.post("/api/vector-stores", json={"name": "docs"})).json()["id"] == "vs_new"
    assert (await http.delete("/api/vector-stores/vs_new")).status_code == 200
    assert (await http.delete("/api/assistants/asst_new")).status_code == 200


async def test_admin_without_configuration(http):
    response = await http.get("/api/vector-stores")

    assert response.status_code == 409


# Startup

async def test_startup_greets_once(http, configured_store):
    first = await http.get("/api/startup")
    second = await http.get("/api/startup")

    assert first.json()["greeting"] in WELCOME_MESSAGES
    assert first.json()["destination"] == "conversations"
    assert second.json()["greeting"] is None


async def test_startup_without_key_opens_settings(http):
    response = await http.get("/api/startup")

    assert response.json()["destination"] == "settings"
