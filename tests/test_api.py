"""Tests for the tool endpoints the host platform calls."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from conftest import FakeBackend, make_client
from veo_agent.api.tools import CLIENT_CLOSED_REQUEST, _cancel_on_disconnect
from veo_agent.errors import InvocationCancelledError
from veo_agent.main import create_app
from veo_agent.services.capabilities import create_video_agent
from veo_agent.services.video_pipeline import VideoPipeline

TASK_ACTION = {"type": "do-task", "task": {"id": 42}, "workspace": {"id": 7}}


@pytest.fixture
def make_api(settings):
    def _make(backend: FakeBackend) -> TestClient:
        agent = create_video_agent(VideoPipeline.from_settings(settings, make_client(backend)))
        return TestClient(create_app(settings, agent=agent))
    return _make


def test_health(make_api, backend) -> None:
    with make_api(backend) as client:
        resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json()["capabilities"] == ["generateVideo"]


def test_list_tools(make_api, backend) -> None:
    with make_api(backend) as client:
        tools = client.get("/tools").json()

    assert tools[0]["name"] == "generateVideo"
    assert "prompt" in tools[0]["schema"]["properties"]


def test_generate_video(make_api, backend) -> None:
    with make_api(backend) as client:
        resp = client.post("/tools/generateVideo", json={
            "args": {"prompt": "a cat surfing"},
            "action": TASK_ACTION,
        })

    assert resp.status_code == 200
    assert resp.json() == {"result": "Video generated and uploaded: https://storage/abc.mp4"}
    assert backend.calls == ["submit", "poll", "poll", "fetch", "upload", "usage"]


def test_unknown_tool(make_api, backend) -> None:
    with make_api(backend) as client:
        resp = client.post("/tools/generateImage", json={"args": {"prompt": "x"}})

    assert resp.status_code == 404
    assert backend.calls == []


def test_empty_prompt_is_rejected(make_api, backend) -> None:
    with make_api(backend) as client:
        resp = client.post("/tools/generateVideo", json={"args": {"prompt": ""}, "action": TASK_ACTION})

    assert resp.status_code == 422
    assert backend.calls == []


def test_missing_workspace(make_api, backend) -> None:
    with make_api(backend) as client:
        resp = client.post("/tools/generateVideo", json={
            "args": {"prompt": "a cat surfing"},
            "action": {"type": "respond-chat-message"},
        })

    assert resp.status_code == 400
    assert "workspace" in resp.json()["detail"]
    assert "fetch" not in backend.calls


@pytest.mark.parametrize("backend_kwargs, status", [
    ({"media_status": 403}, 502),
    ({"polls_until_done": 100}, 504),
    ({"submit_status": 401}, 502),
])
def test_pipeline_errors_map_to_status(make_api, backend_kwargs, status) -> None:
    backend = FakeBackend(**backend_kwargs)

    with make_api(backend) as client:
        resp = client.post("/tools/generateVideo", json={
            "args": {"prompt": "a cat surfing"},
            "action": TASK_ACTION,
        })

    assert resp.status_code == status
    assert "upload" not in backend.calls


def test_missing_secret(settings, make_api, backend) -> None:
    settings.OPENSERV_API_KEY = ""

    with make_api(backend) as client:
        resp = client.post("/tools/generateVideo", json={
            "args": {"prompt": "a cat surfing"},
            "action": TASK_ACTION,
        })

    assert resp.status_code == 500
    assert "OPENSERV_API_KEY" in resp.json()["detail"]
    assert backend.calls == []


def test_cancelled_invocation_maps_to_499(settings) -> None:
    agent = create_video_agent(AsyncMock())
    agent.get("generateVideo").run = AsyncMock(
        side_effect=InvocationCancelledError("Invocation cancelled before upload"),
    )

    with TestClient(create_app(settings, agent=agent)) as client:
        resp = client.post("/tools/generateVideo", json={
            "args": {"prompt": "a cat surfing"},
            "action": TASK_ACTION,
        })

    assert resp.status_code == CLIENT_CLOSED_REQUEST == 499
    assert "upload" in resp.json()["detail"]
    cancel_event = agent.get("generateVideo").run.await_args.args[2]
    assert isinstance(cancel_event, asyncio.Event)


@pytest.mark.asyncio
async def test_disconnect_sets_cancel_event() -> None:
    request = MagicMock()
    request.is_disconnected = AsyncMock(side_effect=[False, True])
    cancel_event = asyncio.Event()

    await _cancel_on_disconnect(request, cancel_event, interval=0)

    assert cancel_event.is_set()
    assert request.is_disconnected.await_count == 2


@pytest.mark.asyncio
async def test_connected_client_leaves_event_clear() -> None:
    request = MagicMock()
    request.is_disconnected = AsyncMock(return_value=False)
    cancel_event = asyncio.Event()

    watcher = asyncio.create_task(_cancel_on_disconnect(request, cancel_event, interval=0))
    await asyncio.sleep(0.01)
    watcher.cancel()

    assert not cancel_event.is_set()
    assert request.is_disconnected.await_count > 0
