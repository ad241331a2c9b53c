"""Tool endpoints the host platform calls to invoke capabilities."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field, ValidationError

from veo_agent.errors import (
    ConfigurationError,
    InvocationCancelledError,
    MissingContextError,
    PollTimeoutError,
    VideoAgentError,
)
from veo_agent.schemas.action import ActionContext
from veo_agent.services.capabilities import Agent

logger = logging.getLogger(__name__)

router = APIRouter()

# Status nginx uses for a request the client abandoned
CLIENT_CLOSED_REQUEST = 499
DISCONNECT_CHECK_INTERVAL = 1.0


class ToolCallRequest(BaseModel):
    args: dict[str, Any] = Field(default_factory=dict)
    action: ActionContext | None = None


class ToolCallResponse(BaseModel):
    result: str


def _get_agent(request: Request) -> Agent:
    return request.app.state.agent


def _status_for(exc: VideoAgentError) -> int:
    if isinstance(exc, ConfigurationError):
        return 500
    if isinstance(exc, MissingContextError):
        return 400
    if isinstance(exc, PollTimeoutError):
        return 504
    if isinstance(exc, InvocationCancelledError):
        return CLIENT_CLOSED_REQUEST
    return 502


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    agent = _get_agent(request)
    return {
        "status": "ok",
        "name": request.app.title,
        "capabilities": list(agent.capabilities),
    }


@router.get("/tools")
async def list_tools(request: Request) -> list[dict[str, Any]]:
    """List capabilities with their argument schemas."""
    return [c.to_schema() for c in _get_agent(request).capabilities.values()]


@router.post("/tools/{tool_name}", response_model=ToolCallResponse)
async def call_tool(tool_name: str, req: ToolCallRequest, request: Request) -> ToolCallResponse:
    """Run a capability with the caller's arguments and action context."""
    agent = _get_agent(request)
    if agent.get(tool_name) is None:
        raise HTTPException(status_code=404, detail=f"Tool {tool_name} not found")

    cancel_event = asyncio.Event()
    watcher = asyncio.create_task(_cancel_on_disconnect(request, cancel_event))
    try:
        result = await agent.call(tool_name, req.args, req.action, cancel_event)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))
    except VideoAgentError as e:
        logger.error("Tool %s failed: %s", tool_name, e)
        raise HTTPException(status_code=_status_for(e), detail=str(e))
    finally:
        watcher.cancel()

    return ToolCallResponse(result=result)


async def _cancel_on_disconnect(
    request: Request,
    cancel_event: asyncio.Event,
    interval: float = DISCONNECT_CHECK_INTERVAL,
) -> None:
    """Set ``cancel_event`` once the caller drops the connection."""
    while not cancel_event.is_set():
        if await request.is_disconnected():
            logger.warning("Client disconnected, cancelling %s", request.url.path)
            cancel_event.set()
            return
        await asyncio.sleep(interval)
