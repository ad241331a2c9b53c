"""Pytest configuration helpers.

This conftest ensures ``backend/`` is on `sys.path` so tests can import
the `veo_agent` package without an editable install, and provides a fake
HTTP backend standing in for the Veo and OpenServ APIs.
"""
import json
import os
import sys

import httpx
import pytest


ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "backend"))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from veo_agent.config import Settings  # noqa: E402

GEMINI_BASE = "https://veo.test/v1beta"
OPENSERV_BASE = "https://openserv.test"
OPERATION = "models/veo-3.0-generate-preview/operations/op1"
MEDIA_URI = "https://host/media/abc"


class FakeBackend:
    """Routes Veo and OpenServ requests and records them in order."""

    def __init__(
        self,
        polls_until_done: int = 2,
        media_status: int = 200,
        media_bytes: bytes = b"\x00\x00\x00\x18ftypmp42",
        upload_url: str = "https://storage/abc.mp4",
        final_response: dict | None = None,
        submit_status: int = 200,
        poll_status: int = 200,
        upload_status: int = 200,
        usage_status: int = 200,
    ):
        self.polls_until_done = polls_until_done
        self.media_status = media_status
        self.media_bytes = media_bytes
        self.upload_url = upload_url
        self.final_response = final_response if final_response is not None else {
            "generateVideoResponse": {"generatedSamples": [{"video": {"uri": MEDIA_URI}}]}
        }
        self.submit_status = submit_status
        self.poll_status = poll_status
        self.upload_status = upload_status
        self.usage_status = usage_status
        self.requests: list[httpx.Request] = []
        self.polls = 0

    @property
    def calls(self) -> list[str]:
        return [_label(r) for r in self.requests]

    def _operation(self) -> dict:
        done = self.polls >= self.polls_until_done
        op = {"name": OPERATION, "done": done}
        if done:
            op["response"] = self.final_response
        return op

    async def handler(self, request: httpx.Request) -> httpx.Response:
        await request.aread()
        self.requests.append(request)
        label = _label(request)

        if label == "submit":
            if self.submit_status != 200:
                return httpx.Response(self.submit_status, json={"error": {"message": "denied"}})
            return httpx.Response(200, json=self._operation())
        if label == "poll":
            if self.poll_status != 200:
                return httpx.Response(self.poll_status, json={"error": {"message": "boom"}})
            self.polls += 1
            return httpx.Response(200, json=self._operation())
        if label == "fetch":
            return httpx.Response(self.media_status, content=self.media_bytes)
        if label == "upload":
            if self.upload_status != 200:
                return httpx.Response(self.upload_status, json={"error": "nope"})
            return httpx.Response(200, json={"url": self.upload_url})
        if label == "usage":
            if self.usage_status != 200:
                return httpx.Response(self.usage_status, json={"error": "ledger down"})
            return httpx.Response(200, json={"id": 1})
        return httpx.Response(404)

    def requests_for(self, label: str) -> list[httpx.Request]:
        return [r for r in self.requests if _label(r) == label]

    def json_body(self, label: str) -> dict:
        return json.loads(self.requests_for(label)[0].content)


def _label(request: httpx.Request) -> str:
    url = str(request.url)
    if url.endswith(":predictLongRunning"):
        return "submit"
    if "/operations/" in url:
        return "poll"
    if url.startswith(MEDIA_URI):
        return "fetch"
    if url.endswith("/file"):
        return "upload"
    if url.endswith("/usage-record"):
        return "usage"
    return url


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        GEMINI_API_KEY="gemini-test-key",
        GEMINI_API_BASE=GEMINI_BASE,
        OPENSERV_API_KEY="openserv-test-key",
        OPENSERV_API_URL=OPENSERV_BASE,
        POLL_INTERVAL=0,
        POLL_MAX_ATTEMPTS=5,
    )


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


def make_client(backend: FakeBackend) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(backend.handler))


@pytest.fixture
def http_client(backend: FakeBackend) -> httpx.AsyncClient:
    return make_client(backend)


@pytest.fixture
def task_action():
    from veo_agent.schemas.action import ActionContext

    return ActionContext(type="do-task", task={"id": 42}, workspace={"id": 7})
