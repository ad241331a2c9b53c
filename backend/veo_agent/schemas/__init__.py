"""Pydantic v2 schemas package."""

from veo_agent.schemas.action import ActionContext, TaskRef, WorkspaceRef
from veo_agent.schemas.video import (
    GenerationRequest,
    JobHandle,
    UploadedAsset,
    UsageEvent,
    VideoResult,
)

__all__ = [
    "ActionContext",
    "TaskRef",
    "WorkspaceRef",
    "GenerationRequest",
    "JobHandle",
    "UploadedAsset",
    "UsageEvent",
    "VideoResult",
]
