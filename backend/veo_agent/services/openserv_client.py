"""OpenServ platform client: workspace file upload and usage records.

Both calls authenticate with the agent's ``x-openserv-key`` header.
"""

from __future__ import annotations

import logging

import httpx

from veo_agent.errors import UploadError, UsageRecordError
from veo_agent.schemas.video import UploadedAsset, UsageEvent

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.openserv.ai"


def _mask_key(key: str) -> str:
    """Mask an API key for safe logging: show first 8 and last 4 chars."""
    if len(key) <= 16:
        return "***"
    return f"{key[:8]}...{key[-4:]}"


class OpenServClient:
    def __init__(
        self,
        api_key: str,
        http_client: httpx.AsyncClient,
        base_url: str | None = None,
    ):
        self.api_key = api_key
        self.http_client = http_client
        self.base_url = (base_url or DEFAULT_API_URL).rstrip("/")

    @property
    def _headers(self) -> dict[str, str]:
        return {"x-openserv-key": self.api_key}

    async def upload_file(
        self,
        *,
        workspace_id: int | str,
        path: str,
        file: bytes,
        content_type: str = "video/mp4",
    ) -> UploadedAsset:
        """Upload bytes to the workspace file store and return its URL."""
        url = f"{self.base_url}/workspaces/{workspace_id}/file"
        data = {"path": path}
        files = {"file": (path, file, content_type)}

        try:
            resp = await self.http_client.post(url, data=data, files=files, headers=self._headers)
            resp.raise_for_status()
            result = resp.json()
        except httpx.HTTPStatusError as exc:
            raise UploadError(
                f"Upload of {path} to workspace {workspace_id} failed: "
                f"HTTP {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise UploadError(f"Upload of {path} to workspace {workspace_id} failed: {exc}") from exc

        file_url = result.get("url") if isinstance(result, dict) else None
        if not file_url:
            raise UploadError(f"Upload of {path} returned no file URL: {result}")

        logger.info("Uploaded %s to workspace %s (%d bytes)", path, workspace_id, len(file))
        return UploadedAsset(path=path, url=file_url)

    async def record_usage(self, event: UsageEvent) -> dict:
        """Post a usage record for a billed task."""
        url = f"{self.base_url}/workspaces/{event.workspace_id}/usage-record"
        try:
            resp = await self.http_client.post(url, json=event.to_payload(), headers=self._headers)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UsageRecordError(
                f"Usage record for task {event.task_id} failed: HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise UsageRecordError(f"Usage record for task {event.task_id} failed: {exc}") from exc

        logger.info(
            "Usage recorded: workspace=%s task=%s cost=%d key=%s",
            event.workspace_id, event.task_id, event.service_cost, _mask_key(self.api_key),
        )
        try:
            return resp.json()
        except ValueError:
            return {}
