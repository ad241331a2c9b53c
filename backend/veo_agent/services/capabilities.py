"""Agent capabilities exposed to the host platform.

Usage:
    agent = create_video_agent(pipeline)
    message = await agent.call("generateVideo", {"prompt": "a cat surfing"}, action)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, Field

from veo_agent.schemas.action import ActionContext
from veo_agent.services.video_pipeline import VideoPipeline

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are an agent that generates videos using Google Gemini Veo 3."


# ---------------------------------------------------------------------------
# Capability definition
# ---------------------------------------------------------------------------

@dataclass
class Capability:
    """A named operation the host can invoke with validated arguments."""
    name: str
    description: str
    schema: type[BaseModel]
    run: Callable[[Any, ActionContext | None, asyncio.Event | None], Awaitable[str]]

    def to_schema(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "schema": self.schema.model_json_schema(),
        }


@dataclass
class Agent:
    system_prompt: str
    capabilities: dict[str, Capability] = field(default_factory=dict)

    def add_capability(self, capability: Capability) -> None:
        if capability.name in self.capabilities:
            raise ValueError(f"Capability {capability.name} already registered")
        self.capabilities[capability.name] = capability

    def get(self, name: str) -> Capability | None:
        return self.capabilities.get(name)

    async def call(
        self,
        name: str,
        args: dict[str, Any],
        action: ActionContext | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> str:
        """Validate ``args`` against the capability schema and run it.

        Raises KeyError for an unknown capability and pydantic's
        ValidationError for bad arguments. ``cancel_event`` is handed to
        the capability so the host can abort a long run.
        """
        capability = self.capabilities.get(name)
        if capability is None:
            raise KeyError(name)
        parsed = capability.schema.model_validate(args)
        logger.info("Running capability %s (action=%s)", name, action.type if action else None)
        return await capability.run(parsed, action, cancel_event)


# ---------------------------------------------------------------------------
# generateVideo
# ---------------------------------------------------------------------------

class GenerateVideoArgs(BaseModel):
    prompt: str = Field(..., min_length=1, description="Text prompt describing the video")


def create_video_agent(pipeline: VideoPipeline) -> Agent:
    """Build the agent with its single ``generateVideo`` capability."""

    async def generate_video(
        args: GenerateVideoArgs,
        action: ActionContext | None,
        cancel_event: asyncio.Event | None = None,
    ) -> str:
        result = await pipeline.run(args.prompt, action, cancel_event=cancel_event)
        # Only the workspace file link is returned, never the provider URI
        return f"Video generated and uploaded: {result.url}"

    agent = Agent(system_prompt=SYSTEM_PROMPT)
    agent.add_capability(Capability(
        name="generateVideo",
        description="Generates a video using Google Gemini Veo 3 from a text prompt",
        schema=GenerateVideoArgs,
        run=generate_video,
    ))
    return agent
