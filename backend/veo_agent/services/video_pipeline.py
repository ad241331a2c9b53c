from __future__ import annotations
"""Video generation pipeline: submit, poll, extract, transfer, bill.

Stages run strictly in order; any failure stops the run with no rollback of
side effects already performed (an uploaded but unbilled asset stays put).
"""

import asyncio
import logging
import time
from typing import Callable

import httpx

from veo_agent.config import Settings
from veo_agent.errors import (
    MissingContextError,
    NoResultError,
    UsageRecordError,
)
from veo_agent.schemas.action import ActionContext
from veo_agent.schemas.video import GenerationRequest, UploadedAsset, UsageEvent, VideoResult
from veo_agent.services.openserv_client import OpenServClient
from veo_agent.services.providers.gemini_video import VeoClient, check_cancelled, extract_video_uri

logger = logging.getLogger(__name__)


def build_video_path(prefix: str, now_ms: int) -> str:
    """Destination path, unique per millisecond."""
    return f"{prefix}-{now_ms}.mp4"


class VideoPipeline:
    """Drives one prompt through the Veo job and into workspace storage."""

    def __init__(
        self,
        settings: Settings,
        veo: VeoClient,
        openserv: OpenServClient,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings
        self.veo = veo
        self.openserv = openserv
        self.clock = clock

    @classmethod
    def from_settings(cls, settings: Settings, http_client: httpx.AsyncClient) -> "VideoPipeline":
        return cls(
            settings,
            VeoClient(
                settings.GEMINI_API_KEY,
                http_client,
                base_url=settings.GEMINI_API_BASE,
                download_timeout=settings.DOWNLOAD_TIMEOUT,
            ),
            OpenServClient(settings.OPENSERV_API_KEY, http_client, base_url=settings.OPENSERV_API_URL),
        )

    async def run(
        self,
        prompt: str,
        context: ActionContext | None,
        cancel_event: asyncio.Event | None = None,
    ) -> VideoResult:
        self.settings.require_secrets()

        request = GenerationRequest(
            prompt=prompt,
            model=self.settings.VEO_MODEL,
            aspect_ratio=self.settings.ASPECT_RATIO,
            person_generation=self.settings.PERSON_GENERATION,
        )

        # 1. Submit
        handle = await self.veo.submit(request)

        # 2. Poll for completion
        handle = await self.veo.wait_until_done(
            handle,
            poll_interval=self.settings.POLL_INTERVAL,
            max_attempts=self.settings.POLL_MAX_ATTEMPTS,
            cancel_event=cancel_event,
        )

        # 3. Extract media URI
        uri = extract_video_uri(handle.raw)
        if not uri:
            raise NoResultError(handle.raw)

        # 4. Fetch and upload
        asset = await self._transfer(uri, context, cancel_event)

        # 5. Report usage
        usage_recorded = await self._record_usage(context)

        return VideoResult(url=asset.url, path=asset.path, usage_recorded=usage_recorded)

    async def _transfer(
        self,
        uri: str,
        context: ActionContext | None,
        cancel_event: asyncio.Event | None,
    ) -> UploadedAsset:
        workspace_id = context.workspace_id if context else None
        if workspace_id is None:
            raise MissingContextError("Missing workspace context for file upload")

        check_cancelled(cancel_event, "fetch")
        data = await self.veo.download(uri)
        logger.info("Downloaded video (%d bytes)", len(data))

        check_cancelled(cancel_event, "upload")
        path = build_video_path(self.settings.VIDEO_PATH_PREFIX, int(self.clock() * 1000))
        try:
            return await self.openserv.upload_file(
                workspace_id=workspace_id,
                path=path,
                file=data,
            )
        finally:
            del data

    async def _record_usage(self, context: ActionContext | None) -> bool:
        if context is None or context.type != self.settings.BILLABLE_ACTION_TYPE:
            logger.debug("Skipping usage record for action type %s", context.type if context else None)
            return False
        if context.task_id is None or context.workspace_id is None:
            raise MissingContextError("Task context lacks task or workspace id for usage record")

        event = UsageEvent(
            task_id=context.task_id,
            workspace_id=context.workspace_id,
            service_cost=self.settings.SERVICE_COST,
        )
        try:
            response = await self.openserv.record_usage(event)
        except UsageRecordError:
            if self.settings.USAGE_FAILURE_FATAL:
                raise
            logger.exception("Usage record failed after delivery for task %s", event.task_id)
            return False
        logger.debug("Usage record response: %s", response)
        return True
