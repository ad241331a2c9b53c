"""Gemini Veo video generation provider.

Long-running operation pattern over the Google AI REST API:
  POST models/{model}:predictLongRunning → poll operation → download media
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from veo_agent.errors import (
    DownloadError,
    InvocationCancelledError,
    PollError,
    PollTimeoutError,
    SubmissionError,
)
from veo_agent.schemas.video import GenerationRequest, JobHandle

logger = logging.getLogger(__name__)

_DEFAULT_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta"


class VeoClient:
    """Thin async client for Veo job submission, polling and media fetch."""

    def __init__(
        self,
        api_key: str,
        http_client: httpx.AsyncClient,
        base_url: str | None = None,
        download_timeout: float = 300.0,
    ):
        self.api_key = api_key
        self.http_client = http_client
        self.endpoint = (base_url or _DEFAULT_ENDPOINT).rstrip("/")
        self.download_timeout = download_timeout

    @property
    def _headers(self) -> dict[str, str]:
        return {"x-goog-api-key": self.api_key}

    async def submit(self, request: GenerationRequest) -> JobHandle:
        """Create the generation job and return its operation handle."""
        url = f"{self.endpoint}/models/{request.model}:predictLongRunning"
        try:
            resp = await self.http_client.post(url, json=request.to_payload(), headers=self._headers)
            resp.raise_for_status()
            operation = resp.json()
        except httpx.HTTPStatusError as exc:
            raise SubmissionError(
                f"Veo job creation failed: HTTP {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise SubmissionError(f"Veo job creation failed: {exc}") from exc

        if not isinstance(operation, dict) or not operation.get("name"):
            raise SubmissionError(f"Veo job creation returned no operation: {operation}")

        handle = JobHandle.from_operation(operation)
        logger.info("Veo operation created: %s (model=%s)", handle.name, request.model)
        return handle

    async def get_operation(self, handle: JobHandle) -> JobHandle:
        """Re-query an operation, returning a fresh handle."""
        url = f"{self.endpoint}/{handle.name}"
        try:
            resp = await self.http_client.get(url, headers=self._headers)
            resp.raise_for_status()
            operation = resp.json()
        except httpx.HTTPStatusError as exc:
            raise PollError(
                f"Veo status query failed for {handle.name}: HTTP {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise PollError(f"Veo status query failed for {handle.name}: {exc}") from exc

        if not isinstance(operation, dict):
            raise PollError(f"Veo status query for {handle.name} returned {operation!r}")
        operation.setdefault("name", handle.name)
        return JobHandle.from_operation(operation)

    async def wait_until_done(
        self,
        handle: JobHandle,
        *,
        poll_interval: float = 10.0,
        max_attempts: int = 60,
        cancel_event: asyncio.Event | None = None,
    ) -> JobHandle:
        """Poll at a fixed interval until the operation reports done.

        Raises PollTimeoutError after ``max_attempts`` status queries.
        """
        attempts = 0
        while not handle.done:
            if attempts >= max_attempts:
                raise PollTimeoutError(
                    f"Veo operation {handle.name} not done after {attempts} polls",
                    attempts=attempts,
                )
            check_cancelled(cancel_event, "poll")
            await asyncio.sleep(poll_interval)
            check_cancelled(cancel_event, "poll")

            handle = await self.get_operation(handle)
            attempts += 1
            logger.debug("Veo operation %s: poll %d done=%s", handle.name, attempts, handle.done)

        logger.info("Veo operation %s done after %d polls", handle.name, attempts)
        return handle

    async def download(self, uri: str) -> bytes:
        """Fetch the generated media fully into memory.

        The key is merged into the locator's own query (``alt=media``).
        """
        try:
            url = httpx.URL(uri).copy_merge_params({"key": self.api_key})
        except httpx.InvalidURL as exc:
            raise DownloadError(f"Invalid video URI from Google API: {exc}") from exc
        try:
            resp = await self.http_client.get(
                url,
                timeout=self.download_timeout,
                follow_redirects=True,
            )
        except httpx.HTTPError as exc:
            raise DownloadError(f"Failed to download video from Google API: {exc}") from exc

        if not resp.is_success:
            raise DownloadError(
                f"Failed to download video from Google API: HTTP {resp.status_code}",
                status_code=resp.status_code,
            )
        return resp.content


def extract_video_uri(operation: dict[str, Any]) -> str | None:
    """Return the first generated sample's media URI, or None.

    Handles the REST shape (``generateVideoResponse.generatedSamples``) and
    the SDK shape (``generatedVideos``).
    """
    response = operation.get("response")
    if not isinstance(response, dict):
        return None

    samples = None
    generate_response = response.get("generateVideoResponse")
    if isinstance(generate_response, dict):
        samples = generate_response.get("generatedSamples")
    if not samples:
        samples = response.get("generatedVideos")
    if not isinstance(samples, list) or not samples:
        return None

    first = samples[0]
    if not isinstance(first, dict):
        return None
    video = first.get("video")
    if not isinstance(video, dict):
        return None

    uri = video.get("uri")
    if isinstance(uri, str) and uri:
        return uri
    return None


def check_cancelled(cancel_event: asyncio.Event | None, stage: str) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise InvocationCancelledError(f"Invocation cancelled before {stage}")
