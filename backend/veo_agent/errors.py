"""Error taxonomy for the video generation pipeline.

Every stage raises its own subclass of ``VideoAgentError`` so the host
surface can map failures without inspecting messages.
"""

from __future__ import annotations

import json
from typing import Any


class VideoAgentError(Exception):
    """Base error for a failed video generation invocation."""


class ConfigurationError(VideoAgentError):
    """A required secret or setting is missing."""


class SubmissionError(VideoAgentError):
    """Creating the generation job failed."""


class PollError(VideoAgentError):
    """A job status query failed."""


class PollTimeoutError(VideoAgentError):
    """The job did not report completion within the allowed attempts."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


class NoResultError(VideoAgentError):
    """The job finished without a retrievable media URI."""

    def __init__(self, payload: Any):
        super().__init__(f"No video generated: {json.dumps(payload, default=str)}")
        self.payload = payload


class DownloadError(VideoAgentError):
    """Fetching the generated media failed."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


class MissingContextError(VideoAgentError):
    """The invocation context lacks the workspace needed for upload."""


class UploadError(VideoAgentError):
    """Uploading the asset to workspace storage failed."""


class UsageRecordError(VideoAgentError):
    """Posting the usage record to the ledger failed."""


class InvocationCancelledError(VideoAgentError):
    """The host cancelled the invocation at a suspension point."""
