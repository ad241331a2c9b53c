from __future__ import annotations
"""Veo video agent FastAPI application entry point.

Creates the shared HTTP client, wires the video pipeline into the agent's
capabilities and mounts the tool routes the host platform calls.
"""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from veo_agent import __version__
from veo_agent.api.router import api_router
from veo_agent.config import Settings, get_settings
from veo_agent.services.capabilities import Agent, create_video_agent
from veo_agent.services.video_pipeline import VideoPipeline

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def create_app(settings: Settings | None = None, agent: Agent | None = None) -> FastAPI:
    """Build the application.

    ``agent`` replaces the pipeline-backed agent, which keeps tests off
    the network.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Own the shared httpx client for the process lifetime."""
        logger.info("%s starting up...", settings.APP_NAME)
        if agent is not None:
            app.state.agent = agent
            yield
            return

        async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT) as client:
            pipeline = VideoPipeline.from_settings(settings, client)
            app.state.agent = create_video_agent(pipeline)
            logger.info("Model: %s, poll every %.0fs up to %d times",
                        settings.VEO_MODEL, settings.POLL_INTERVAL, settings.POLL_MAX_ATTEMPTS)
            yield
        logger.info("%s shut down", settings.APP_NAME)

    app = FastAPI(
        title=settings.APP_NAME,
        description="Generates videos with Google Gemini Veo and delivers them to OpenServ workspaces",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(api_router)
    return app
